import math
from datetime import date
from typing import Iterable, List, Mapping, Optional

from config import setup_logger, FactorThresholds
from models import DailyIndicatorRecord, ExogenousContext, FactorId, FactorSet
from utils.date_utils import to_date, to_iso_date

logger = setup_logger(name="FactorsService")


def _finite(value) -> bool:
    if value is None or isinstance(value, bool):
        return False
    try:
        return math.isfinite(float(value))
    except (TypeError, ValueError):
        return False


def _lookup(mapping: Optional[Mapping], day: date):
    """Value for day from a mapping keyed by date or YYYY-MM-DD string"""
    if not mapping:
        return None
    if day in mapping:
        return mapping[day]
    return mapping.get(to_iso_date(day))


class FactorsService:
    """Rule-based factor evaluation over indicator records and exogenous context"""

    def __init__(self):
        self.thresholds = FactorThresholds()

    def volume_spike(self, indicator: DailyIndicatorRecord) -> bool:
        ratio = indicator.volume_spike_ratio
        return _finite(ratio) and ratio > self.thresholds.volume_spike_ratio

    @staticmethod
    def close_above(indicator: DailyIndicatorRecord, average: Optional[float]) -> bool:
        if not _finite(indicator.close) or not _finite(average):
            return False
        return indicator.close > average

    def rsi_over(self, indicator: DailyIndicatorRecord) -> bool:
        rsi = indicator.rsi
        return _finite(rsi) and rsi > self.thresholds.rsi_threshold

    def market_up(self, day: date, context: ExogenousContext) -> bool:
        move = _lookup(context.market_moves, day)
        return _finite(move) and move > self.thresholds.market_up_pct

    def sector_up(self, day: date, context: ExogenousContext) -> bool:
        move = _lookup(context.sector_moves, day)
        return _finite(move) and move > self.thresholds.sector_up_pct

    def earnings_window(self, day: date, context: ExogenousContext) -> bool:
        window = self.thresholds.earnings_window_days
        for earnings in context.earnings_dates or ():
            try:
                earnings_date = to_date(earnings)
            except (TypeError, ValueError):
                logger.warning(f"Ignoring unparseable earnings date: {earnings!r}")
                continue
            if abs((earnings_date - day).days) <= window:
                return True
        return False

    def short_covering(self, indicator: DailyIndicatorRecord, context: ExogenousContext) -> bool:
        short_interest = context.short_interest
        if not _finite(short_interest) or short_interest < self.thresholds.short_interest_min:
            return False
        return _finite(indicator.pct_change) and indicator.pct_change > 0

    @staticmethod
    def macro_tailwind(day: date, context: ExogenousContext) -> bool:
        return _lookup(context.macro_events, day) is True

    def news_positive(self, day: date, context: ExogenousContext) -> bool:
        sentiment = _lookup(context.news_sentiment, day)
        if not isinstance(sentiment, str):
            return False
        return sentiment.strip().lower() == self.thresholds.positive_sentiment

    @staticmethod
    def apply_overrides(flags: dict, day: date, context: ExogenousContext) -> dict:
        overrides = _lookup(context.overrides, day)
        if not overrides:
            return flags
        for key, value in overrides.items():
            try:
                factor = FactorId(key)
            except ValueError:
                logger.warning(f"Ignoring override for unknown factor '{key}' on {day}")
                continue
            flags[factor.value] = value is True
        return flags

    def evaluate_factors(
        self, indicator: DailyIndicatorRecord,
        context: Optional[ExogenousContext] = None
    ) -> FactorSet:
        """
        Map one indicator record plus optional context to a FactorSet.

        Missing or undefined inputs resolve to False.

        Parameters:
            indicator: Indicators for the day
            context: Exogenous signals; None means no external data

        Returns:
            FactorSet stamped with the indicator's date
        """
        context = context or ExogenousContext()
        day = indicator.date
        flags = {
            FactorId.VOLUME_SPIKE.value: self.volume_spike(indicator),
            FactorId.BREAK_MA50.value: self.close_above(indicator, indicator.ma50),
            FactorId.BREAK_MA200.value: self.close_above(indicator, indicator.ma200),
            FactorId.RSI_OVER_60.value: self.rsi_over(indicator),
            FactorId.MARKET_UP.value: self.market_up(day, context),
            FactorId.SECTOR_UP.value: self.sector_up(day, context),
            FactorId.EARNINGS_WINDOW.value: self.earnings_window(day, context),
            FactorId.SHORT_COVERING.value: self.short_covering(indicator, context),
            FactorId.MACRO_TAILWIND.value: self.macro_tailwind(day, context),
            FactorId.NEWS_POSITIVE.value: self.news_positive(day, context),
        }
        flags = self.apply_overrides(flags, day, context)
        return FactorSet(date=day, **{k: bool(v) for k, v in flags.items()})

    def evaluate_all(
        self, indicators: Iterable[DailyIndicatorRecord],
        context: Optional[ExogenousContext] = None
    ) -> List[FactorSet]:
        return [self.evaluate_factors(indicator, context) for indicator in indicators]
