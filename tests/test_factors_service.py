import pytest
from datetime import date

from services.factors_service import FactorsService
from models import DailyIndicatorRecord, ExogenousContext, FactorId, FactorSet


DAY = date(2024, 3, 15)


def _record(**kwargs):
    base = dict(date=DAY, close=100.0, pct_change=0.01)
    base.update(kwargs)
    return DailyIndicatorRecord(**base)


def test_all_false_when_nothing_is_known():
    factors = FactorsService().evaluate_factors(DailyIndicatorRecord(date=DAY, close=100.0))
    assert factors.active_factors() == []
    assert factors.date == DAY


def test_volume_spike_is_strictly_greater():
    service = FactorsService()
    assert service.evaluate_factors(_record(volume_spike_ratio=1.51)).volume_spike
    assert not service.evaluate_factors(_record(volume_spike_ratio=1.5)).volume_spike
    assert not service.evaluate_factors(_record(volume_spike_ratio=None)).volume_spike


def test_moving_average_breaks():
    service = FactorsService()
    factors = service.evaluate_factors(_record(close=105.0, ma50=100.0, ma200=110.0))
    assert factors.break_ma50
    assert not factors.break_ma200

    # Undefined averages never break
    factors = service.evaluate_factors(_record(close=105.0))
    assert not factors.break_ma50 and not factors.break_ma200


def test_rsi_over_60():
    service = FactorsService()
    assert service.evaluate_factors(_record(rsi=60.1)).rsi_over_60
    assert not service.evaluate_factors(_record(rsi=60.0)).rsi_over_60
    assert not service.evaluate_factors(_record(rsi=None)).rsi_over_60


def test_nan_inputs_resolve_to_false():
    nan = float('nan')
    factors = FactorsService().evaluate_factors(
        _record(close=nan, ma50=nan, ma200=nan, rsi=nan, volume_spike_ratio=nan)
    )
    assert factors.active_factors() == []


def test_market_and_sector_moves():
    context = ExogenousContext(
        market_moves={DAY: 0.004},
        sector_moves={"2024-03-15": -0.01},
    )
    factors = FactorsService().evaluate_factors(_record(), context)
    assert factors.market_up
    assert not factors.sector_up


def test_earnings_window_within_three_days():
    service = FactorsService()
    assert service.evaluate_factors(_record(), ExogenousContext(earnings_dates=(date(2024, 3, 18),))).earnings_window
    assert service.evaluate_factors(_record(), ExogenousContext(earnings_dates=("2024-03-12",))).earnings_window
    assert not service.evaluate_factors(_record(), ExogenousContext(earnings_dates=(date(2024, 3, 20),))).earnings_window


def test_short_covering_needs_interest_and_up_day():
    service = FactorsService()
    high_interest = ExogenousContext(short_interest=0.2)
    assert service.evaluate_factors(_record(pct_change=0.02), high_interest).short_covering
    assert not service.evaluate_factors(_record(pct_change=-0.02), high_interest).short_covering
    assert not service.evaluate_factors(_record(pct_change=0.02), ExogenousContext(short_interest=0.05)).short_covering


def test_macro_and_news():
    context = ExogenousContext(
        macro_events={DAY: True},
        news_sentiment={DAY: "Positive"},
    )
    factors = FactorsService().evaluate_factors(_record(), context)
    assert factors.macro_tailwind
    assert factors.news_positive

    context = ExogenousContext(news_sentiment={DAY: "neutral"}, macro_events={DAY: False})
    factors = FactorsService().evaluate_factors(_record(), context)
    assert not factors.macro_tailwind
    assert not factors.news_positive


def test_overrides_win():
    context = ExogenousContext(
        market_moves={DAY: 0.02},
        overrides={DAY: {FactorId.MARKET_UP: False, "news_positive": True, "bogus": True}},
    )
    factors = FactorsService().evaluate_factors(_record(), context)
    assert not factors.market_up
    assert factors.news_positive


def test_evaluate_all_preserves_order():
    records = [_record(date=date(2024, 3, d)) for d in (11, 12, 13)]
    factor_sets = FactorsService().evaluate_all(records)
    assert [f.date for f in factor_sets] == [r.date for r in records]


def test_factor_set_rejects_non_bool():
    with pytest.raises(TypeError):
        FactorSet(date=DAY, volume_spike=1)
    with pytest.raises(TypeError):
        FactorSet(date=DAY, news_positive=None)


def test_factor_set_from_mapping():
    factors = FactorSet.from_mapping(DAY, {"volume_spike": True, FactorId.BREAK_MA50: None})
    assert factors.active_factors() == [FactorId.VOLUME_SPIKE]
    with pytest.raises(ValueError):
        FactorSet.from_mapping(DAY, {"not_a_factor": True})


def test_factor_set_with_date_is_a_copy():
    factors = FactorSet(date=DAY, volume_spike=True)
    moved = factors.with_date(date(2024, 3, 18))
    assert moved.date == date(2024, 3, 18)
    assert moved.volume_spike
    assert factors.date == DAY


def test_factor_set_is_active_accepts_id_or_name():
    factors = FactorSet(date=date(2024, 3, 1), market_up=True)
    assert factors.is_active(FactorId.MARKET_UP)
    assert factors.is_active("market_up")
    assert not factors.is_active(FactorId.VOLUME_SPIKE)
    with pytest.raises(ValueError):
        factors.is_active("not_a_factor")
