from .market_data_schema import DailyPriceBarSchema
from .scoring_config_schema import ScoringConfigSchema
from .prediction_schema import (
    ActiveFactorSchema, PredictionRecordSchema, DayErrorSchema,
    dump_predictions, load_predictions
)
from .insights_schema import PredictionInsightSchema, PredictionResultSchema

__all__ = [
    "DailyPriceBarSchema",
    "ScoringConfigSchema",
    "ActiveFactorSchema",
    "PredictionRecordSchema",
    "DayErrorSchema",
    "dump_predictions",
    "load_predictions",
    "PredictionInsightSchema",
    "PredictionResultSchema",
]
