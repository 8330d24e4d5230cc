"""
Baseline selection for future-day extrapolation.

A baseline strategy picks the FactorSet that is held constant while
walking forward. Strategies receive the recent window most recent first.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date
from typing import Dict, List, Sequence

from config import setup_logger, PredictionParameters
from exceptions import InsufficientDataError, InvalidParameterError
from models import FactorId, FactorSet

logger = setup_logger(name="BaselineService")


@dataclass(frozen=True)
class Baseline:
    """
    Attributes:
        factors: FactorSet to clone for each future day
        source_date: Date the baseline was taken from
        strategy: Name of the strategy that produced it
        fallback_used: True when no day in the window qualified
    """
    factors: FactorSet
    source_date: date
    strategy: str
    fallback_used: bool = False

    @property
    def active_count(self) -> int:
        return self.factors.active_count


class BaselineStrategy(ABC):
    """Picks the baseline FactorSet from a recent window."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Registry name of the strategy."""

    @abstractmethod
    def _select(self, recent: Sequence[FactorSet]) -> Baseline:
        """Selection over a non-empty window, most recent first."""

    def select(self, recent: Sequence[FactorSet]) -> Baseline:
        if not recent:
            raise InsufficientDataError("No factor data available to build a baseline")
        return self._select(recent)


class MostRecentActiveBaseline(BaselineStrategy):
    """
    Most recent day with at least one active factor; falls back to the
    most recent day as-is when none qualifies.
    """
    name = "most-recent-active"

    def _select(self, recent: Sequence[FactorSet]) -> Baseline:
        for factors in recent:
            if factors.active_count > 0:
                logger.info(
                    f"Baseline {factors.date} with {factors.active_count} active factor(s)"
                )
                return Baseline(factors=factors, source_date=factors.date, strategy=self.name)

        latest = recent[0]
        logger.warning(
            f"No day with active factors in last {len(recent)} day(s), using "
            f"{latest.date} as-is. Future predictions will have score 0"
        )
        return Baseline(
            factors=latest, source_date=latest.date,
            strategy=self.name, fallback_used=True
        )


class MostRecentAnyBaseline(BaselineStrategy):
    """Most recent day regardless of its factors."""
    name = "most-recent-any"

    def _select(self, recent: Sequence[FactorSet]) -> Baseline:
        latest = recent[0]
        return Baseline(factors=latest, source_date=latest.date, strategy=self.name)


class NDayAverageBaseline(BaselineStrategy):
    """
    A factor is active in the baseline when it was active on at least
    `min_frequency` of the window's days.
    """
    name = "n-day-average"

    def __init__(self, min_frequency: float = 0.5):
        if not 0.0 < min_frequency <= 1.0:
            raise InvalidParameterError(f"min_frequency must be within (0, 1], got {min_frequency}")
        self.min_frequency = min_frequency

    def _select(self, recent: Sequence[FactorSet]) -> Baseline:
        days = len(recent)
        flags = {}
        for factor in FactorId:
            active_days = sum(1 for factors in recent if getattr(factors, factor.value))
            flags[factor.value] = active_days / days >= self.min_frequency
        latest = recent[0]
        averaged = FactorSet(date=latest.date, **flags)
        return Baseline(factors=averaged, source_date=latest.date, strategy=self.name)


BASELINE_STRATEGIES: Dict[str, type] = {
    MostRecentActiveBaseline.name: MostRecentActiveBaseline,
    MostRecentAnyBaseline.name: MostRecentAnyBaseline,
    NDayAverageBaseline.name: NDayAverageBaseline,
}

DEFAULT_BASELINE_STRATEGY = MostRecentActiveBaseline.name


def get_baseline_strategy(strategy) -> BaselineStrategy:
    """Resolve a strategy name or instance to a BaselineStrategy"""
    if isinstance(strategy, BaselineStrategy):
        return strategy
    try:
        return BASELINE_STRATEGIES[strategy]()
    except (KeyError, TypeError):
        raise InvalidParameterError(
            f"Unknown baseline strategy '{strategy}', expected one of {sorted(BASELINE_STRATEGIES)}"
        )


def select_baseline(
    factor_sets: Sequence[FactorSet], strategy=DEFAULT_BASELINE_STRATEGY,
    window: int = PredictionParameters.baseline_window
) -> Baseline:
    """
    Pick a baseline from the last `window` days of a chronological series.

    Parameters:
        factor_sets: FactorSets in ascending date order
        strategy: Strategy name or instance
        window: Number of most recent days considered

    Returns:
        Baseline
    """
    recent: List[FactorSet] = list(reversed(factor_sets[-window:])) if window > 0 else []
    return get_baseline_strategy(strategy).select(recent)
