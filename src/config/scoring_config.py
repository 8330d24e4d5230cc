"""
Scoring configuration value object.

ScoringConfig is immutable: overrides produce a new instance and the
default is built fresh by default_scoring_config().
"""
from __future__ import annotations

import math
from types import MappingProxyType
from dataclasses import dataclass, field, replace
from typing import Mapping

from exceptions import InvalidConfigurationError
from models.factors import FactorId


DEFAULT_FACTOR_WEIGHTS = MappingProxyType({
    FactorId.VOLUME_SPIKE: 0.25,
    FactorId.BREAK_MA50: 0.15,
    FactorId.BREAK_MA200: 0.15,
    FactorId.RSI_OVER_60: 0.10,
    FactorId.MARKET_UP: 0.10,
    FactorId.SECTOR_UP: 0.10,
    FactorId.EARNINGS_WINDOW: 0.05,
    FactorId.SHORT_COVERING: 0.04,
    FactorId.MACRO_TAILWIND: 0.03,
    FactorId.NEWS_POSITIVE: 0.03,
})


@dataclass(frozen=True)
class ScoringConfig:
    """
    Weights and cutoffs for the composite score.

    Attributes:
        factor_weights: Non-negative weight per factor; unlisted factors weigh 0
        threshold: Score at or above which a day is HIGH_PROBABILITY
        moderate_ratio: Fraction of threshold where MODERATE begins
        high_confidence_cap: Confidence ceiling for HIGH_PROBABILITY
        moderate_confidence_factor: Confidence multiplier for MODERATE
        low_confidence_factor: Confidence multiplier for LOW_PROBABILITY
    """
    factor_weights: Mapping[FactorId, float] = field(default_factory=lambda: DEFAULT_FACTOR_WEIGHTS)
    threshold: float = 0.45
    moderate_ratio: float = 0.7
    high_confidence_cap: float = 0.95
    moderate_confidence_factor: float = 0.8
    low_confidence_factor: float = 0.6

    def __post_init__(self):
        weights = {}
        for key, weight in dict(self.factor_weights).items():
            try:
                factor = FactorId(key)
            except ValueError:
                raise InvalidConfigurationError(f"Unknown factor '{key}' in factor_weights")
            if isinstance(weight, bool) or not isinstance(weight, (int, float)):
                raise InvalidConfigurationError(f"Weight for '{factor.value}' must be a number")
            if not math.isfinite(weight) or weight < 0:
                raise InvalidConfigurationError(
                    f"Weight for '{factor.value}' must be finite and non-negative, got {weight}"
                )
            weights[factor] = float(weight)

        if sum(weights.values()) <= 0:
            raise InvalidConfigurationError("Total factor weight must be greater than zero")
        if not 0.0 <= self.threshold <= 1.0:
            raise InvalidConfigurationError(f"threshold must be within [0, 1], got {self.threshold}")
        if not 0.0 < self.moderate_ratio < 1.0:
            raise InvalidConfigurationError(
                f"moderate_ratio must be within (0, 1), got {self.moderate_ratio}"
            )
        for name in ("high_confidence_cap", "moderate_confidence_factor", "low_confidence_factor"):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise InvalidConfigurationError(f"{name} must be within [0, 1], got {value}")

        # Canonical order keeps weight summation deterministic
        ordered = {factor: weights.get(factor, 0.0) for factor in FactorId}
        object.__setattr__(self, "factor_weights", MappingProxyType(ordered))

    def __hash__(self):
        return hash((
            tuple(self.factor_weights.items()),
            self.threshold,
            self.moderate_ratio,
            self.high_confidence_cap,
            self.moderate_confidence_factor,
            self.low_confidence_factor,
        ))

    @property
    def total_weight(self) -> float:
        return sum(self.factor_weights[factor] for factor in FactorId)

    @property
    def moderate_floor(self) -> float:
        return self.threshold * self.moderate_ratio

    def weight_of(self, factor: FactorId) -> float:
        return self.factor_weights[FactorId(factor)]

    def with_overrides(self, factor_weights=None, **changes) -> ScoringConfig:
        """
        Return a new config with the given changes applied.

        factor_weights entries are merged over the current weights.
        """
        if factor_weights is not None:
            merged = dict(self.factor_weights)
            for key, weight in factor_weights.items():
                try:
                    merged[FactorId(key)] = weight
                except ValueError:
                    raise InvalidConfigurationError(f"Unknown factor '{key}' in factor_weights")
            changes["factor_weights"] = merged
        return replace(self, **changes)


def default_scoring_config() -> ScoringConfig:
    """Fresh default configuration"""
    return ScoringConfig()
