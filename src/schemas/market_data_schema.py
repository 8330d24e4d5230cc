from marshmallow import Schema, fields, post_load

from models import DailyPriceBar


class DailyPriceBarSchema(Schema):
    """Schema for one daily price bar"""
    date = fields.Date(required=True)
    open = fields.Float(allow_none=True, load_default=None)
    high = fields.Float(allow_none=True, load_default=None)
    low = fields.Float(allow_none=True, load_default=None)
    close = fields.Float(required=True, allow_nan=True)
    volume = fields.Float(allow_none=True, load_default=None, allow_nan=True)

    @post_load
    def make_bar(self, data, **kwargs):
        return DailyPriceBar(**data)
