from .indicators_service import IndicatorsService
from .factors_service import FactorsService
from .score_service import ScoreService
from .baseline_service import (
    Baseline, BaselineStrategy, MostRecentActiveBaseline, MostRecentAnyBaseline,
    NDayAverageBaseline, BASELINE_STRATEGIES, get_baseline_strategy, select_baseline
)
from .signals_service import SignalsService
from .price_estimate_service import PriceEstimateService
from .prediction_service import PredictionService
from .analysis_service import FactorAnalysisService
from .scan_service import ScanService


__all__ = [
    "IndicatorsService",
    "FactorsService",
    "ScoreService",
    "Baseline",
    "BaselineStrategy",
    "MostRecentActiveBaseline",
    "MostRecentAnyBaseline",
    "NDayAverageBaseline",
    "BASELINE_STRATEGIES",
    "get_baseline_strategy",
    "select_baseline",
    "SignalsService",
    "PriceEstimateService",
    "PredictionService",
    "FactorAnalysisService",
    "ScanService",
]
