import pytest
from datetime import date, timedelta

from models import DailyIndicatorRecord, FactorSet, TechnicalSignals, TrendSignal, SupportResistance
from services.factors_service import FactorsService
from services.indicators_service import IndicatorsService
from services.price_estimate_service import PriceEstimateService
from services.signals_service import SignalsService


DAY = date(2024, 3, 15)


def test_trend_strong_bullish():
    trend = SignalsService.calculate_trend(close=120, ma20=115, ma50=110, ma200=100)
    assert (trend.direction, trend.strength) == ("bullish", "strong")


def test_trend_strong_bearish():
    trend = SignalsService.calculate_trend(close=80, ma20=85, ma50=90, ma200=100)
    assert (trend.direction, trend.strength) == ("bearish", "strong")


def test_trend_mixed_and_unavailable():
    assert SignalsService.calculate_trend(close=95, ma20=90, ma50=100, ma200=90).direction == "neutral"
    assert SignalsService.calculate_trend(close=95, ma20=None, ma50=100, ma200=90) == TrendSignal()


@pytest.mark.parametrize("rsi,expected", [
    (75.0, "overbought"),
    (25.0, "oversold"),
    (65.0, "overbought"),
    (50.0, "neutral"),
])
def test_momentum(rsi, expected):
    assert SignalsService().calculate_momentum(rsi).rsi_signal == expected


def test_momentum_unavailable():
    assert SignalsService().calculate_momentum(None).description == "Momentum analysis unavailable"


def test_price_vs_band():
    service = SignalsService()
    assert service.price_vs(102.0, 100.0) == "above"
    assert service.price_vs(98.0, 100.0) == "below"
    assert service.price_vs(100.5, 100.0) == "at"
    assert service.price_vs(100.5, None) == "at"


def test_extract_signals_on_rising_series(rising_bars):
    records = IndicatorsService().compute_indicators(rising_bars)
    signals = SignalsService().extract_signals(records, len(records) - 1)

    assert signals.trend.direction == "bullish"
    assert signals.moving_averages.alignment == "bullish"
    assert signals.moving_averages.price_vs_ma200 == "above"
    assert signals.momentum.rsi_signal == "overbought"
    assert signals.volume.volume_signal == "high"
    assert signals.volume.volume_ratio == pytest.approx(3.0)

    window = rising_bars[-21:]
    assert signals.support_resistance.support_level == pytest.approx(min(b.low for b in window))
    assert signals.support_resistance.resistance_level == pytest.approx(max(b.high for b in window))


def test_extract_signals_on_declining_series(declining_bars):
    records = IndicatorsService().compute_indicators(declining_bars)
    signals = SignalsService().extract_signals(records, len(records) - 1)
    assert signals.trend.direction == "bearish"
    assert signals.moving_averages.alignment == "bearish"
    assert signals.momentum.rsi_signal == "oversold"
    assert signals.volume.volume_signal == "normal"


def _pattern(pct_change, **flags):
    record = DailyIndicatorRecord(date=DAY, close=105.0, pct_change=pct_change, ma20=104.0, ma50=100.0)
    return SignalsService().detect_pattern(record, FactorSet(date=DAY, **flags))[0]


def test_detect_pattern():
    assert _pattern(0.03, break_ma50=True, volume_spike=True) == "breakout"
    assert _pattern(0.005, break_ma50=True) == "continuation"
    assert _pattern(-0.03, volume_spike=True) == "reversal"
    assert _pattern(-0.005) == "consolidation"
    assert _pattern(-0.015) == "unknown"


def test_detect_pattern_needs_moving_averages():
    record = DailyIndicatorRecord(date=DAY, close=105.0, pct_change=0.03)
    assert SignalsService().detect_pattern(record, FactorSet(date=DAY))[0] == "unknown"


def test_recognize_patterns_similar_scenarios():
    start = date(2024, 1, 1)
    records, factor_sets = [], []
    for i in range(8):
        day = start + timedelta(days=i)
        records.append(DailyIndicatorRecord(date=day, close=100.0, pct_change=0.01 if i % 2 else -0.01))
        factor_sets.append(FactorSet(date=day, volume_spike=True, break_ma50=(i % 2 == 0)))

    patterns = SignalsService().recognize_patterns(records, factor_sets, 7)
    # Day 7 has only volume_spike; odd days match fully, even days half
    assert len(patterns.similar_scenarios) == 5
    assert patterns.similar_scenarios[0].similarity == 1.0
    assert patterns.similar_scenarios[0].date == start + timedelta(days=1)
    assert patterns.historical_accuracy == pytest.approx(3 / 5)


def test_recognize_patterns_without_active_factors():
    records = [DailyIndicatorRecord(date=DAY, close=100.0, pct_change=0.0)]
    patterns = SignalsService().recognize_patterns(records, [FactorSet(date=DAY)], 0)
    assert patterns.similar_scenarios == []
    assert patterns.historical_accuracy is None


def _signals(direction, support=None, resistance=None):
    return TechnicalSignals(
        trend=TrendSignal(direction=direction),
        support_resistance=SupportResistance(support_level=support, resistance_level=resistance),
    )


def test_price_estimate_follows_trend():
    service = PriceEstimateService()
    up = service.estimate(100.0, 0.6, 0.45, _signals("bullish"))
    down = service.estimate(100.0, 0.6, 0.45, _signals("bearish"))
    assert up.change_pct > 0
    assert down.change_pct < 0
    assert up.low <= min(up.open, up.close) <= max(up.open, up.close) <= up.high


def test_price_estimate_default_profile():
    # 0.5 * 0.02 with no gap below threshold and damping 0.5
    estimate = PriceEstimateService().estimate(100.0, 0.4, 0.45, _signals("bullish"))
    assert estimate.open == 100.0
    assert estimate.change_pct == pytest.approx(0.4 * 0.02 * 0.5)


def test_price_estimate_is_bounded():
    history = [(0.1, 0.5)] * 10  # absurd returns per unit score
    estimate = PriceEstimateService().estimate(100.0, 1.0, 0.45, _signals("bullish"), history)
    assert estimate.change_pct <= 0.10 + 1e-12


def test_price_estimate_respects_support():
    estimate = PriceEstimateService().estimate(100.0, 0.9, 0.45, _signals("bearish", support=99.5))
    assert estimate.low == 99.5
    assert estimate.close >= estimate.low


@pytest.mark.parametrize("direction,level", [
    ("bullish", {"resistance": 100.1}),
    ("bearish", {"support": 99.9}),
])
def test_price_estimate_gap_through_level_keeps_bar_consistent(direction, level):
    estimate = PriceEstimateService().estimate(100.0, 0.9, 0.45, _signals(direction, **level))
    assert estimate.low <= min(estimate.open, estimate.close)
    assert max(estimate.open, estimate.close) <= estimate.high
