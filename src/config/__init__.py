from .logger_config import setup_logger
from .indicators_config import IndicatorParameters, FactorThresholds, SignalThresholds
from .prediction_config import PredictionParameters, AnalysisParameters
from .scoring_config import ScoringConfig, DEFAULT_FACTOR_WEIGHTS, default_scoring_config


__all__ = [
    #Logger Config
    "setup_logger",

    #Indicators Config
    "IndicatorParameters",
    "FactorThresholds",
    "SignalThresholds",

    #Prediction Config
    "PredictionParameters",
    "AnalysisParameters",

    #Scoring Config
    "ScoringConfig",
    "DEFAULT_FACTOR_WEIGHTS",
    "default_scoring_config",
]
