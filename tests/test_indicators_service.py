import math
import pytest
import pandas as pd
import numpy as np
from services.indicators_service import IndicatorsService
from models import DailyPriceBar


def test_calculate_pct_change():
    close = pd.Series([100.0, 101.0, 99.0, 105.0, 110.0])
    pct = IndicatorsService.calculate_pct_change(close)
    expected = [0.0, 0.01, -0.0198, 0.0606, 0.0476]
    assert pct.tolist() == pytest.approx(expected, abs=1e-4)


def test_pct_change_from_bars(make_bars):
    records = IndicatorsService().compute_indicators(make_bars([100, 101, 99, 105, 110]))
    pct = [r.pct_change for r in records]
    assert pct == pytest.approx([0.0, 0.01, -0.0198, 0.0606, 0.0476], abs=1e-4)


def test_first_pct_change_is_zero(sample_bars):
    records = IndicatorsService().compute_indicators(sample_bars)
    assert records[0].pct_change == 0.0
    assert len(records) == len(sample_bars)


def test_empty_bars_returns_empty():
    assert IndicatorsService().compute_indicators([]) == []


def test_ma200_equals_trailing_mean(sample_bars):
    records = IndicatorsService().compute_indicators(sample_bars)
    closes = [b.close for b in sample_bars]

    # 200 bars including the current one are needed
    assert records[198].ma200 is None
    assert records[199].ma200 == pytest.approx(np.mean(closes[:200]), rel=1e-9)
    assert records[-1].ma200 == pytest.approx(np.mean(closes[-200:]), rel=1e-9)
    assert records[-1].ma50 == pytest.approx(np.mean(closes[-50:]), rel=1e-9)
    assert records[-1].ma20 == pytest.approx(np.mean(closes[-20:]), rel=1e-9)


def test_moving_averages_undefined_on_short_history(make_bars):
    records = IndicatorsService().compute_indicators(make_bars([100.0 + i for i in range(30)]))
    assert all(r.ma50 is None and r.ma200 is None for r in records)
    assert records[18].ma20 is None
    assert records[19].ma20 == pytest.approx(np.mean([100.0 + i for i in range(20)]))


def test_rsi_within_bounds(sample_bars):
    records = IndicatorsService().compute_indicators(sample_bars)
    assert all(r.rsi is None for r in records[:14])
    values = [r.rsi for r in records[14:]]
    assert all(v is not None and 0.0 <= v <= 100.0 for v in values)


def test_rsi_is_100_without_losses(make_bars):
    records = IndicatorsService().compute_indicators(make_bars([100.0 + i for i in range(40)]))
    assert records[13].rsi is None
    assert all(r.rsi == 100.0 for r in records[14:])


def test_rsi_flat_prices_reads_100(make_bars):
    records = IndicatorsService().compute_indicators(make_bars([50.0] * 20))
    # No losses in the window
    assert records[-1].rsi == 100.0


def test_rsi_is_0_without_gains(make_bars):
    records = IndicatorsService().compute_indicators(make_bars([200.0 - i for i in range(40)]))
    assert records[-1].rsi == pytest.approx(0.0, abs=1e-9)


def test_calculate_rsi_short_series():
    rsi = IndicatorsService.calculate_rsi(pd.Series([1.0, 2.0, 3.0]), length=14)
    assert rsi.isna().all()
    assert len(rsi) == 3


def test_volume_spike_ratio(make_bars):
    volumes = [1000.0] * 24 + [5000.0]
    records = IndicatorsService().compute_indicators(make_bars([100.0] * 25, volumes))

    assert records[18].volume_spike_ratio is None
    assert records[19].volume_spike_ratio == pytest.approx(1.0)
    # (19 * 1000 + 5000) / 20 = 1200
    assert records[-1].volume_ma20 == pytest.approx(1200.0)
    assert records[-1].volume_spike_ratio == pytest.approx(5000.0 / 1200.0)


def test_volume_spike_ratio_zero_average(make_bars):
    records = IndicatorsService().compute_indicators(make_bars([100.0] * 25, [0.0] * 25))
    assert records[-1].volume_spike_ratio is None


def test_missing_volume_is_excluded(make_bars):
    volumes = [1000.0] * 10 + [None] + [1000.0] * 20
    records = IndicatorsService().compute_indicators(make_bars([100.0] * 31, volumes))
    assert records[10].volume_spike_ratio is None
    assert records[-1].volume_spike_ratio == pytest.approx(1.0)


def test_invalid_bar_does_not_corrupt_later_bars(make_bars):
    closes = [100.0 + i for i in range(25)]
    closes[3] = -5.0
    records = IndicatorsService().compute_indicators(make_bars(closes))

    bad = records[3]
    assert bad.pct_change is None and bad.rsi is None and bad.ma20 is None
    assert bad.volume_spike_ratio is None

    # Measured against the previous valid close
    assert records[4].pct_change == pytest.approx((104.0 - 102.0) / 102.0)

    valid = [c for i, c in enumerate(closes) if i != 3]
    assert records[-1].ma20 == pytest.approx(np.mean(valid[-20:]))


@pytest.mark.parametrize("close", [0.0, float('nan'), float('inf'), None])
def test_non_positive_or_non_finite_close_is_invalid(close):
    bar = DailyPriceBar(date=pd.Timestamp('2024-01-01').date(), close=close)
    assert not bar.is_valid


def test_all_invalid_bars(make_bars):
    records = IndicatorsService().compute_indicators(make_bars([0.0, -1.0, float('nan')]))
    assert len(records) == 3
    assert all(r.pct_change is None for r in records)


def test_calculate_sma_partial_window():
    sma = IndicatorsService.calculate_sma(pd.Series([1.0, 2.0, 3.0]), 5)
    assert sma.isna().all()


def test_indicator_values_are_finite_or_none(sample_bars):
    records = IndicatorsService().compute_indicators(sample_bars)
    for r in records:
        for value in (r.pct_change, r.ma20, r.ma50, r.ma200, r.rsi, r.volume_spike_ratio):
            assert value is None or math.isfinite(value)
