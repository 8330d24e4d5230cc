import os
import tempfile

os.environ.setdefault(
    "STOCK_PREDICTOR_LOG_DIR",
    os.path.join(tempfile.gettempdir(), "stock_predictor_test_logs")
)

import pytest
import pandas as pd
import numpy as np

from models import DailyPriceBar


def _bars_from_frame(df):
    return [
        DailyPriceBar(
            date=idx.date(),
            open=row['open'],
            high=row['high'],
            low=row['low'],
            close=row['close'],
            volume=row['volume'],
        )
        for idx, row in df.iterrows()
    ]


@pytest.fixture
def sample_ohlcv_data():
    """Create a sample OHLCV DataFrame for testing"""
    rng = np.random.default_rng(42)
    dates = pd.date_range(start='2024-01-01', periods=300, freq='B')
    df = pd.DataFrame({
        'open': rng.uniform(100, 200, 300),
        'high': rng.uniform(100, 200, 300),
        'low': rng.uniform(100, 200, 300),
        'close': rng.uniform(100, 200, 300),
        'volume': rng.integers(1000, 100000, 300).astype(float)
    }, index=dates)

    # Ensure high is highest, low is lowest
    df['high'] = df[['open', 'close', 'high']].max(axis=1)
    df['low'] = df[['open', 'close', 'low']].min(axis=1)

    return df


@pytest.fixture
def sample_bars(sample_ohlcv_data):
    return _bars_from_frame(sample_ohlcv_data)


@pytest.fixture
def make_bars():
    """Factory: business-day bars from a list of closes (2024-01-01 is a Monday)"""
    def _make(closes, volumes=None, start='2024-01-01'):
        volumes = volumes if volumes is not None else [10000.0] * len(closes)
        dates = pd.bdate_range(start=start, periods=len(closes))
        return [
            DailyPriceBar(
                date=d.date(),
                open=c,
                high=c * 1.01 if c and c > 0 else c,
                low=c * 0.99 if c and c > 0 else c,
                close=c,
                volume=v,
            )
            for d, c, v in zip(dates, closes, volumes)
        ]
    return _make


@pytest.fixture
def rising_bars(make_bars):
    """260 steadily rising closes with a volume spike on the last day"""
    closes = [100.0 + i * 0.5 for i in range(260)]
    volumes = [10000.0] * 259 + [30000.0]
    return make_bars(closes, volumes)


@pytest.fixture
def declining_bars(make_bars):
    """250 steadily falling closes on flat volume: no factor fires"""
    closes = [300.0 - i * 0.5 for i in range(250)]
    return make_bars(closes)
