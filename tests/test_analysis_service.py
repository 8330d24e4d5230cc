import pytest
from datetime import date, timedelta

from exceptions import InvalidParameterError
from models import DailyIndicatorRecord, DailyPriceBar, FactorSet
from services.analysis_service import FactorAnalysisService
from services.factors_service import FactorsService
from services.indicators_service import IndicatorsService


def _period(days):
    """days: list of (pct_change, factor kwargs)"""
    start = date(2024, 1, 1)
    factor_sets, records = [], []
    for i, (pct, flags) in enumerate(days):
        day = start + timedelta(days=i)
        factor_sets.append(FactorSet(date=day, **flags))
        records.append(DailyIndicatorRecord(date=day, close=100.0, pct_change=pct))
    return factor_sets, records


def test_summarize_factors():
    factor_sets, _ = _period([
        (0.0, {"volume_spike": True, "break_ma50": True}),
        (0.0, {"volume_spike": True}),
        (0.0, {}),
        (0.0, {}),
    ])
    summary = FactorAnalysisService().summarize_factors(factor_sets)
    assert summary.total_days == 4
    assert summary.factor_counts == {"volume_spike": 2, "break_ma50": 1}
    assert summary.factor_frequency["volume_spike"] == 0.5
    assert summary.average_factors_per_day == pytest.approx(0.75)


def test_summarize_empty():
    summary = FactorAnalysisService().summarize_factors([])
    assert summary.total_days == 0
    assert summary.factor_counts == {}


def test_correlation_positive_for_up_day_factor():
    factor_sets, records = _period([
        (0.03, {"volume_spike": True}),
        (-0.01, {}),
        (0.02, {"volume_spike": True}),
        (-0.02, {"market_up": True}),
        (0.01, {"volume_spike": True, "market_up": True}),
        (-0.015, {}),
    ])
    correlation = FactorAnalysisService().correlate_with_price_movement(factor_sets, records)

    spike = correlation["volume_spike"]
    assert spike.occurrences == 3
    assert spike.avg_return == pytest.approx(0.02)
    assert spike.correlation > 0.8
    assert "break_ma50" not in correlation


def test_correlation_without_variance_is_zero():
    factor_sets, records = _period([
        (0.01, {"volume_spike": True}),
        (0.02, {"volume_spike": True}),
    ])
    correlation = FactorAnalysisService().correlate_with_price_movement(factor_sets, records)
    assert correlation["volume_spike"].correlation == 0.0


def test_top_factors_ranked():
    factor_sets, records = _period([
        (0.03, {"volume_spike": True}),
        (-0.01, {"market_up": True}),
        (0.02, {"volume_spike": True}),
        (-0.02, {"market_up": True}),
    ])
    service = FactorAnalysisService()
    top = service.top_factors(service.correlate_with_price_movement(factor_sets, records), limit=1)
    assert [c.factor for c in top] == ["volume_spike"]


def test_analysis_on_generated_series(sample_bars):
    records = IndicatorsService().compute_indicators(sample_bars)
    factor_sets = FactorsService().evaluate_all(records)
    service = FactorAnalysisService()
    correlation = service.correlate_with_price_movement(factor_sets, records)
    for stats in correlation.values():
        assert -1.0 <= stats.correlation <= 1.0
        assert stats.occurrences > 0


def test_significant_moves_enriched():
    factor_sets, records = _period([
        (0.05, {"volume_spike": True, "break_ma50": True}),
        (0.01, {"volume_spike": True}),
        (0.03, {}),
        (-0.06, {"market_up": True}),
    ])
    service = FactorAnalysisService()
    scores = service.score_service.score_all(factor_sets)
    moves = service.find_significant_moves(records, factor_sets, scores, min_pct_change=0.03)

    assert [m.date for m in moves] == [date(2024, 1, 1), date(2024, 1, 3)]
    first, second = moves
    assert first.factors == ["volume_spike", "break_ma50"]
    assert first.factor_count == 2
    assert first.score == pytest.approx(0.40)
    assert first.above_threshold is False
    assert second.factors == []
    assert second.score == 0.0


def test_significant_moves_without_scores():
    factor_sets, records = _period([(0.04, {"volume_spike": True})])
    moves = FactorAnalysisService().find_significant_moves(records, factor_sets)
    assert moves[0].score is None
    assert moves[0].above_threshold is None
    assert moves[0].factor_count == 1


@pytest.mark.parametrize("min_pct_change", [0, -0.01, float("nan"), "3"])
def test_significant_moves_reject_bad_minimum(min_pct_change):
    factor_sets, records = _period([(0.04, {})])
    with pytest.raises(InvalidParameterError):
        FactorAnalysisService().find_significant_moves(records, factor_sets, min_pct_change=min_pct_change)


def test_analyze_bundles_everything(rising_bars):
    report = FactorAnalysisService().analyze("ACME", rising_bars, min_pct_change=0.001)

    assert report.symbol == "ACME"
    assert report.total_days == len(rising_bars)
    assert report.summary.total_days == len(rising_bars)
    assert report.score_summary.total_days == len(rising_bars)
    # every day after the first gains more than 0.2%
    assert report.moves_found == len(rising_bars) - 1
    assert report.significant_moves[-1].date == rising_bars[-1].date
    assert report.significant_moves[-1].score == pytest.approx(0.65)
    assert "volume_spike" in report.correlation
    assert report.errors == []


def test_analyze_drops_malformed_bars(make_bars):
    bars = make_bars([100.0 + i for i in range(30)])
    bars[10] = DailyPriceBar(date=None, close=110.0)
    report = FactorAnalysisService().analyze("ACME", bars)
    assert report.total_days == 29
    assert len(report.errors) == 1


def test_analyze_empty_history():
    report = FactorAnalysisService().analyze("ACME", [])
    assert report.total_days == 0
    assert report.significant_moves == []
    assert report.score_summary.total_days == 0
