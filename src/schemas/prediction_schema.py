from marshmallow import Schema, fields, post_dump, post_load, pre_load

from models import ActiveFactor, DayError, FactorId, PredictionLevel, PredictionRecord
from utils.scale_utils import ScoreScale, to_percent, from_percent


SCALED_FIELDS = ("score", "confidence", "threshold")


class ActiveFactorSchema(Schema):
    factor = fields.Enum(FactorId, by_value=True, required=True)
    weight = fields.Float(required=True)
    name = fields.Str(load_default="")
    description = fields.Str(load_default="")

    @post_load
    def make_active_factor(self, data, **kwargs):
        return ActiveFactor(**data)


class PredictionRecordSchema(Schema):
    """
    Flat JSON form of a PredictionRecord.

    Scores are stored as fractions internally. With scale="percent" the
    score, confidence and threshold are written and read as 0-100.
    """
    date = fields.Date(required=True)
    symbol = fields.Str(required=True)
    score = fields.Float(required=True)
    confidence = fields.Float(required=True)
    prediction = fields.Enum(PredictionLevel, by_value=True, required=True)
    active_factors = fields.List(fields.Nested(ActiveFactorSchema), load_default=list)
    above_threshold = fields.Bool(required=True)
    threshold = fields.Float(required=True)
    is_future = fields.Bool(load_default=False)
    baseline_date = fields.Date(allow_none=True, load_default=None)
    interpretation = fields.Str(load_default="")
    recommendations = fields.List(fields.Str(), load_default=list)

    def __init__(self, *args, scale=ScoreScale.FRACTION, **kwargs):
        self.scale = ScoreScale(scale)
        super().__init__(*args, **kwargs)

    @post_dump
    def scale_out(self, data, **kwargs):
        if self.scale == ScoreScale.PERCENT:
            for name in SCALED_FIELDS:
                if name in data:
                    data[name] = to_percent(data[name])
        return data

    @pre_load
    def scale_in(self, data, **kwargs):
        if self.scale == ScoreScale.PERCENT:
            data = dict(data)
            for name in SCALED_FIELDS:
                if isinstance(data.get(name), (int, float)):
                    data[name] = from_percent(data[name])
        return data

    @post_load
    def make_record(self, data, **kwargs):
        return PredictionRecord(**data)


class DayErrorSchema(Schema):
    date = fields.Str()
    error = fields.Str()

    @post_load
    def make_error(self, data, **kwargs):
        return DayError(**data)


def dump_predictions(records, scale=ScoreScale.FRACTION):
    """PredictionRecords to a list of flat dicts"""
    return PredictionRecordSchema(scale=scale, many=True).dump(records)


def load_predictions(data, scale=ScoreScale.FRACTION):
    """Flat dicts back to PredictionRecords"""
    return PredictionRecordSchema(scale=scale, many=True).load(data)
