from config import FactorThresholds, IndicatorParameters, PredictionParameters, SignalThresholds


def test_indicator_parameters():
    assert IndicatorParameters.ma_periods == (20, 50, 200)
    assert IndicatorParameters.rsi_length == 14
    assert IndicatorParameters.volume_ma_length == 20


def test_factor_thresholds():
    assert FactorThresholds.volume_spike_ratio == 1.5
    assert FactorThresholds.rsi_threshold == 60.0
    assert FactorThresholds.earnings_window_days == 3


def test_signal_bands_are_ordered():
    assert SignalThresholds.rsi_oversold < SignalThresholds.rsi_strong < SignalThresholds.rsi_overbought
    assert SignalThresholds.low_volume_ratio < 1.0 < SignalThresholds.high_volume_ratio
    assert SignalThresholds.reversal_drop < 0


def test_prediction_lookback_covers_longest_average():
    assert PredictionParameters.lookback_needed >= max(IndicatorParameters.ma_periods)
    assert PredictionParameters.min_days <= PredictionParameters.default_days <= PredictionParameters.max_days
