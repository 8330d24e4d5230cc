"""
Factor Models

Closed set of factor identifiers, the fixed-shape per-day FactorSet and
the optional exogenous context used to resolve non-price factors.
"""
from __future__ import annotations

from datetime import date
from enum import Enum
from dataclasses import dataclass, field, fields, replace
from typing import Dict, List, Mapping, Optional


class FactorId(str, Enum):
    """Market factor identifiers, in canonical scoring order."""

    VOLUME_SPIKE = "volume_spike"
    BREAK_MA50 = "break_ma50"
    BREAK_MA200 = "break_ma200"
    RSI_OVER_60 = "rsi_over_60"
    MARKET_UP = "market_up"
    SECTOR_UP = "sector_up"
    EARNINGS_WINDOW = "earnings_window"
    SHORT_COVERING = "short_covering"
    MACRO_TAILWIND = "macro_tailwind"
    NEWS_POSITIVE = "news_positive"


FACTOR_DESCRIPTIONS: Dict[FactorId, Dict[str, str]] = {
    FactorId.VOLUME_SPIKE: {
        "name": "Volume Spike",
        "category": "technical",
        "description": "Trading volume above 1.5x its 20-day average",
    },
    FactorId.BREAK_MA50: {
        "name": "Break MA50",
        "category": "technical",
        "description": "Close above the 50-day moving average",
    },
    FactorId.BREAK_MA200: {
        "name": "Break MA200",
        "category": "technical",
        "description": "Close above the 200-day moving average",
    },
    FactorId.RSI_OVER_60: {
        "name": "RSI > 60",
        "category": "technical",
        "description": "14-day RSI above 60, momentum building",
    },
    FactorId.MARKET_UP: {
        "name": "Market Up",
        "category": "market",
        "description": "Broad market index closed higher",
    },
    FactorId.SECTOR_UP: {
        "name": "Sector Up",
        "category": "market",
        "description": "Sector index closed higher",
    },
    FactorId.EARNINGS_WINDOW: {
        "name": "Earnings Window",
        "category": "fundamental",
        "description": "Within a few days of an earnings release",
    },
    FactorId.SHORT_COVERING: {
        "name": "Short Covering",
        "category": "technical",
        "description": "High short interest combined with a rising close",
    },
    FactorId.MACRO_TAILWIND: {
        "name": "Macro Tailwind",
        "category": "market",
        "description": "Favourable macroeconomic event on the day",
    },
    FactorId.NEWS_POSITIVE: {
        "name": "Positive News",
        "category": "sentiment",
        "description": "Positive news sentiment on the day",
    },
}


@dataclass(frozen=True)
class FactorSet:
    """
    Boolean factor state for a single day.

    Attributes are named after FactorId values. Every flag must be a real
    bool; anything else is rejected at construction.
    """
    date: date
    volume_spike: bool = False
    break_ma50: bool = False
    break_ma200: bool = False
    rsi_over_60: bool = False
    market_up: bool = False
    sector_up: bool = False
    earnings_window: bool = False
    short_covering: bool = False
    macro_tailwind: bool = False
    news_positive: bool = False

    def __post_init__(self):
        for f in fields(self):
            if f.name == "date":
                continue
            value = getattr(self, f.name)
            if not isinstance(value, bool):
                raise TypeError(
                    f"Factor '{f.name}' must be bool, got {type(value).__name__}"
                )

    def is_active(self, factor: FactorId) -> bool:
        return getattr(self, FactorId(factor).value)

    def active_factors(self) -> List[FactorId]:
        """Active factors in canonical order"""
        return [factor for factor in FactorId if getattr(self, factor.value)]

    @property
    def active_count(self) -> int:
        return len(self.active_factors())

    def with_date(self, new_date: date) -> FactorSet:
        return replace(self, date=new_date)

    def as_dict(self) -> Dict[str, bool]:
        return {factor.value: getattr(self, factor.value) for factor in FactorId}

    @classmethod
    def from_mapping(cls, day: date, flags: Mapping) -> FactorSet:
        """
        Build a FactorSet from a loosely-typed mapping.

        Keys may be FactorId members or their string values. Missing or
        None values resolve to False; unknown keys raise ValueError.
        """
        values = {}
        for key, value in flags.items():
            factor = FactorId(key)
            values[factor.value] = bool(value) if value is not None else False
        return cls(date=day, **values)


@dataclass(frozen=True)
class ExogenousContext:
    """
    Externally observed signals keyed by date.

    Attributes:
        market_moves: Market index daily change (fraction) per date
        sector_moves: Sector index daily change (fraction) per date
        earnings_dates: Known earnings release dates
        news_sentiment: 'positive' | 'negative' | 'neutral' per date
        short_interest: Short interest as a fraction of float
        macro_events: Whether the macro event on a date was favourable
        overrides: Explicit factor values per date, applied last
    """
    market_moves: Mapping[date, float] = field(default_factory=dict)
    sector_moves: Mapping[date, float] = field(default_factory=dict)
    earnings_dates: tuple = ()
    news_sentiment: Mapping[date, str] = field(default_factory=dict)
    short_interest: Optional[float] = None
    macro_events: Mapping[date, bool] = field(default_factory=dict)
    overrides: Mapping[date, Mapping[FactorId, bool]] = field(default_factory=dict)
