"""
Prediction Models

Score, prediction and result containers produced by the scoring and
prediction services. Scores and confidences are fractions in [0, 1].
"""
from __future__ import annotations

from datetime import date
from enum import Enum
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from exceptions import InvalidParameterError
from models.factors import FactorId


class PredictionLevel(str, Enum):
    HIGH_PROBABILITY = "HIGH_PROBABILITY"
    MODERATE = "MODERATE"
    LOW_PROBABILITY = "LOW_PROBABILITY"

    @property
    def rank(self) -> int:
        """Ordering used when sorting by prediction (higher is stronger)"""
        return _LEVEL_RANK[self]


_LEVEL_RANK = {
    PredictionLevel.HIGH_PROBABILITY: 3,
    PredictionLevel.MODERATE: 2,
    PredictionLevel.LOW_PROBABILITY: 1,
}


@dataclass(frozen=True)
class ActiveFactor:
    factor: FactorId
    weight: float
    name: str = ""
    description: str = ""


@dataclass(frozen=True)
class ScoreResult:
    """Outcome of scoring one FactorSet against a ScoringConfig."""
    date: date
    score: float
    confidence: float
    prediction: PredictionLevel
    active_factors: List[ActiveFactor]
    above_threshold: bool
    threshold: float


@dataclass(frozen=True)
class PredictionRecord:
    """
    A scored day for one symbol, historical or extrapolated.

    Attributes:
        is_future: True for forward-walk days
        baseline_date: Date of the FactorSet a future day was cloned from
        interpretation: One-line human readable reading of the prediction
        recommendations: Suggested follow-ups for the level and factors
    """
    date: date
    symbol: str
    score: float
    confidence: float
    prediction: PredictionLevel
    active_factors: List[ActiveFactor]
    above_threshold: bool
    threshold: float
    is_future: bool = False
    baseline_date: Optional[date] = None
    interpretation: str = ""
    recommendations: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class PredictionFilters:
    """Optional AND-combined predicates applied before sorting."""
    date_from: Optional[date] = None
    date_to: Optional[date] = None
    min_score: Optional[float] = None
    max_score: Optional[float] = None
    prediction: Optional[PredictionLevel] = None
    min_confidence: Optional[float] = None
    max_confidence: Optional[float] = None

    def __post_init__(self):
        for name in ("min_score", "max_score", "min_confidence", "max_confidence"):
            value = getattr(self, name)
            if value is not None and not 0.0 <= value <= 1.0:
                raise InvalidParameterError(f"{name} must be within [0, 1], got {value}")
        pairs = (
            ("date_from", "date_to"),
            ("min_score", "max_score"),
            ("min_confidence", "max_confidence"),
        )
        for low_name, high_name in pairs:
            low, high = getattr(self, low_name), getattr(self, high_name)
            if low is not None and high is not None and low > high:
                raise InvalidParameterError(f"{low_name} ({low}) is after {high_name} ({high})")
        if self.prediction is not None:
            object.__setattr__(self, "prediction", PredictionLevel(self.prediction))

    def matches(self, record: PredictionRecord) -> bool:
        if self.date_from is not None and record.date < self.date_from:
            return False
        if self.date_to is not None and record.date > self.date_to:
            return False
        if self.min_score is not None and record.score < self.min_score:
            return False
        if self.max_score is not None and record.score > self.max_score:
            return False
        if self.prediction is not None and record.prediction != self.prediction:
            return False
        if self.min_confidence is not None and record.confidence < self.min_confidence:
            return False
        if self.max_confidence is not None and record.confidence > self.max_confidence:
            return False
        return True


@dataclass(frozen=True)
class DayError:
    """Soft per-day failure reported next to the result set."""
    date: str
    error: str


@dataclass
class PredictionResult:
    """
    Output of PredictionService.generate_predictions.

    has_data is False only when no price bars were supplied; an empty
    predictions list with has_data True means everything was filtered out.
    """
    symbol: str
    predictions: List[PredictionRecord] = field(default_factory=list)
    has_data: bool = True
    message: Optional[str] = None
    errors: List[DayError] = field(default_factory=list)
    baseline_date: Optional[date] = None
    baseline_strategy: Optional[str] = None
    insights: Dict[str, object] = field(default_factory=dict)

    @property
    def historical(self) -> List[PredictionRecord]:
        return [p for p in self.predictions if not p.is_future]

    @property
    def future(self) -> List[PredictionRecord]:
        return [p for p in self.predictions if p.is_future]


@dataclass(frozen=True)
class ScoreSummary:
    total_days: int
    high_score_days: int
    high_score_pct: float
    average_score: float
    max_score: float
    min_score: float
    factor_frequency: Dict[str, float] = field(default_factory=dict)


@dataclass(frozen=True)
class ScanHit:
    symbol: str
    date: date
    score: float
    confidence: float
    prediction: PredictionLevel
    active_factors: List[ActiveFactor]
    is_future: bool = False


@dataclass
class ScanResult:
    """Per-symbol results of a scan plus the symbols that failed."""
    results: Dict[str, PredictionResult] = field(default_factory=dict)
    failures: Dict[str, str] = field(default_factory=dict)

    @property
    def processed(self) -> int:
        return len(self.results)
