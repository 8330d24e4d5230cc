from marshmallow import Schema, fields

from utils.scale_utils import ScoreScale
from schemas.prediction_schema import PredictionRecordSchema, DayErrorSchema


class TrendSignalSchema(Schema):
    direction = fields.Str()
    strength = fields.Str()
    description = fields.Str()


class MomentumSignalSchema(Schema):
    rsi = fields.Float(allow_none=True)
    rsi_signal = fields.Str()
    description = fields.Str()


class MovingAverageSignalSchema(Schema):
    ma20 = fields.Float(allow_none=True)
    ma50 = fields.Float(allow_none=True)
    ma200 = fields.Float(allow_none=True)
    price_vs_ma20 = fields.Str()
    price_vs_ma50 = fields.Str()
    price_vs_ma200 = fields.Str()
    alignment = fields.Str()
    description = fields.Str()


class SupportResistanceSchema(Schema):
    support_level = fields.Float(allow_none=True)
    resistance_level = fields.Float(allow_none=True)
    distance_to_support = fields.Float(allow_none=True)
    distance_to_resistance = fields.Float(allow_none=True)
    description = fields.Str()


class VolumeSignalSchema(Schema):
    current_volume = fields.Float(allow_none=True)
    average_volume = fields.Float(allow_none=True)
    volume_ratio = fields.Float(allow_none=True)
    volume_signal = fields.Str()
    description = fields.Str()


class TechnicalSignalsSchema(Schema):
    trend = fields.Nested(TrendSignalSchema)
    momentum = fields.Nested(MomentumSignalSchema)
    moving_averages = fields.Nested(MovingAverageSignalSchema)
    support_resistance = fields.Nested(SupportResistanceSchema)
    volume = fields.Nested(VolumeSignalSchema)


class SimilarScenarioSchema(Schema):
    date = fields.Date()
    score = fields.Float()
    price_change = fields.Float()
    factors = fields.List(fields.Str())
    similarity = fields.Float()


class PatternRecognitionSchema(Schema):
    similar_scenarios = fields.List(fields.Nested(SimilarScenarioSchema))
    pattern_type = fields.Str()
    pattern_strength = fields.Str()
    pattern_description = fields.Str()
    historical_accuracy = fields.Float(allow_none=True)


class PriceEstimateSchema(Schema):
    reference_price = fields.Float()
    open = fields.Float()
    high = fields.Float()
    low = fields.Float()
    close = fields.Float()
    change = fields.Float()
    change_pct = fields.Float()


class PredictionInsightSchema(Schema):
    """Dump-only view of the insights attached to a prediction date"""
    date = fields.Date()
    is_future = fields.Bool()
    signals = fields.Nested(TechnicalSignalsSchema)
    patterns = fields.Nested(PatternRecognitionSchema, allow_none=True)
    price_estimate = fields.Nested(PriceEstimateSchema, allow_none=True)


class PredictionResultSchema(Schema):
    """Dump-only envelope returned to callers"""
    symbol = fields.Str()
    has_data = fields.Bool()
    message = fields.Str(allow_none=True)
    baseline_date = fields.Date(allow_none=True)
    baseline_strategy = fields.Str(allow_none=True)
    predictions = fields.Method("dump_predictions")
    errors = fields.List(fields.Nested(DayErrorSchema))
    insights = fields.Dict(keys=fields.Str(), values=fields.Nested(PredictionInsightSchema))

    def __init__(self, *args, scale=ScoreScale.FRACTION, **kwargs):
        self.scale = ScoreScale(scale)
        super().__init__(*args, **kwargs)

    def dump_predictions(self, obj):
        return PredictionRecordSchema(scale=self.scale, many=True).dump(obj.predictions)
