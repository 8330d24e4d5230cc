from .factors import FactorId, FactorSet, ExogenousContext, FACTOR_DESCRIPTIONS
from .market_data import DailyPriceBar, DailyIndicatorRecord
from .prediction import (
    PredictionLevel, ActiveFactor, ScoreResult, PredictionRecord,
    PredictionFilters, DayError, PredictionResult, ScoreSummary,
    ScanHit, ScanResult
)
from .analysis import FactorSummary, FactorCorrelation, SignificantMove, FactorAnalysisReport
from .insights import (
    TrendSignal, MomentumSignal, MovingAverageSignal, SupportResistance,
    VolumeSignal, TechnicalSignals, SimilarScenario, PatternRecognition,
    PriceEstimate, PredictionInsight
)


__all__ = [
    # Factors
    "FactorId",
    "FactorSet",
    "ExogenousContext",
    "FACTOR_DESCRIPTIONS",

    # Market data
    "DailyPriceBar",
    "DailyIndicatorRecord",

    # Predictions
    "PredictionLevel",
    "ActiveFactor",
    "ScoreResult",
    "PredictionRecord",
    "PredictionFilters",
    "DayError",
    "PredictionResult",
    "ScoreSummary",
    "ScanHit",
    "ScanResult",

    # Analysis
    "FactorSummary",
    "FactorCorrelation",
    "SignificantMove",
    "FactorAnalysisReport",

    # Insights
    "TrendSignal",
    "MomentumSignal",
    "MovingAverageSignal",
    "SupportResistance",
    "VolumeSignal",
    "TechnicalSignals",
    "SimilarScenario",
    "PatternRecognition",
    "PriceEstimate",
    "PredictionInsight",
]
