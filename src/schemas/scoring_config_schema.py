from marshmallow import Schema, fields, post_load, ValidationError

from config import ScoringConfig, DEFAULT_FACTOR_WEIGHTS
from exceptions import InvalidConfigurationError
from models import FactorId


class ScoringConfigSchema(Schema):
    """Schema for scoring weights and thresholds"""
    factor_weights = fields.Dict(
        keys=fields.Enum(FactorId, by_value=True),
        values=fields.Float(),
        load_default=lambda: dict(DEFAULT_FACTOR_WEIGHTS),
    )
    threshold = fields.Float(load_default=0.45)
    moderate_ratio = fields.Float(load_default=0.7)
    high_confidence_cap = fields.Float(load_default=0.95)
    moderate_confidence_factor = fields.Float(load_default=0.8)
    low_confidence_factor = fields.Float(load_default=0.6)

    @post_load
    def make_config(self, data, **kwargs):
        try:
            return ScoringConfig(**data)
        except InvalidConfigurationError as e:
            raise ValidationError(str(e))
