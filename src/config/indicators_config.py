class IndicatorParameters:
    """Lookback lengths for derived indicators"""
    ma_periods: tuple = (20, 50, 200)
    rsi_length: int = 14
    volume_ma_length: int = 20


class FactorThresholds:
    """Rule thresholds used to turn indicators and context into factors"""
    volume_spike_ratio: float = 1.5
    rsi_threshold: float = 60.0
    market_up_pct: float = 0.0  # fraction, strict greater-than
    sector_up_pct: float = 0.0
    earnings_window_days: int = 3  # calendar days either side
    short_interest_min: float = 0.15  # fraction of float
    positive_sentiment: str = "positive"


class SignalThresholds:
    """Bands used when describing technical signals and patterns"""
    rsi_overbought: float = 70.0
    rsi_oversold: float = 30.0
    rsi_strong: float = 60.0
    ma_band: float = 0.01  # +/- 1% counts as "at" the average
    high_volume_ratio: float = 1.5
    low_volume_ratio: float = 0.7
    reversal_drop: float = -0.02
    consolidation_range: float = 0.01
    min_similarity: float = 0.5
    max_similar_scenarios: int = 5
