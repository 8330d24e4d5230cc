class PredictionParameters:
    """Bounds and windows for prediction generation"""
    lookback_needed: int = 200  # bars required ahead of the first requested day for ma200
    min_days: int = 1
    max_days: int = 50
    default_days: int = 5
    min_future_days: int = 0
    max_future_days: int = 30
    baseline_window: int = 10  # most recent days searched for a baseline

    # Insight windows (trading days)
    signal_lookback: int = 20
    pattern_lookback: int = 756  # ~3 years
    price_estimate_lookback: int = 60

    # Price estimate defaults (fractions)
    default_return_per_score: float = 0.02
    default_volatility: float = 0.02
    max_daily_move: float = 0.10
    below_threshold_damping: float = 0.5
    gap_ratio: float = 0.1

    order_by_fields: tuple = ("date", "score", "confidence", "prediction")
    order_directions: tuple = ("asc", "desc")


class AnalysisParameters:
    """Defaults for factor analysis over a price history"""
    min_pct_change: float = 0.03  # fraction, a day counts as significant at or above it
