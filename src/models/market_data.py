"""
Market Data Models

Input price bars and the derived per-day indicator record.
"""
import math
from datetime import date
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class DailyPriceBar:
    """One trading day of price/volume data for a single instrument."""
    date: date
    close: float
    open: Optional[float] = None
    high: Optional[float] = None
    low: Optional[float] = None
    volume: Optional[float] = None

    @property
    def is_valid(self) -> bool:
        """Bar can contribute to indicator windows"""
        try:
            close = float(self.close)
        except (TypeError, ValueError):
            return False
        return math.isfinite(close) and close > 0


@dataclass(frozen=True)
class DailyIndicatorRecord:
    """
    Indicators derived for one bar.

    Attributes:
        date: Trading date
        close: Close of the bar (as supplied)
        pct_change: Fractional change vs previous valid close
        ma20, ma50, ma200: Simple moving averages of close
        rsi: 14-period Wilder RSI
        volume_spike_ratio: volume / 20-day average volume
        volume, volume_ma20: Raw volume and its 20-day average
        open, high, low: Pass-through OHLC used by signal extraction

    Fields that cannot be computed are None.
    """
    date: date
    close: Optional[float]
    pct_change: Optional[float] = None
    ma20: Optional[float] = None
    ma50: Optional[float] = None
    ma200: Optional[float] = None
    rsi: Optional[float] = None
    volume_spike_ratio: Optional[float] = None
    volume: Optional[float] = None
    volume_ma20: Optional[float] = None
    open: Optional[float] = None
    high: Optional[float] = None
    low: Optional[float] = None
