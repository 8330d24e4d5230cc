from datetime import date
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from models.prediction import DayError, ScoreSummary


@dataclass(frozen=True)
class FactorSummary:
    """Factor counts over a period; frequency is a fraction of total_days."""
    total_days: int
    factor_counts: Dict[str, int] = field(default_factory=dict)
    factor_frequency: Dict[str, float] = field(default_factory=dict)
    average_factors_per_day: float = 0.0


@dataclass(frozen=True)
class FactorCorrelation:
    """
    Attributes:
        occurrences: Days the factor was active
        avg_return: Mean pct_change on those days (fraction)
        correlation: Point-biserial correlation of the flag with pct_change
    """
    factor: str
    occurrences: int
    avg_return: float
    correlation: float


@dataclass(frozen=True)
class SignificantMove:
    """
    A day whose gain reached the analysis minimum, with the factors,
    score and indicator readings of that day.
    """
    date: date
    close: float
    pct_change: float
    factors: List[str] = field(default_factory=list)
    factor_count: int = 0
    score: Optional[float] = None
    above_threshold: Optional[bool] = None
    ma20: Optional[float] = None
    ma50: Optional[float] = None
    ma200: Optional[float] = None
    rsi: Optional[float] = None
    volume: Optional[float] = None


@dataclass(frozen=True)
class FactorAnalysisReport:
    symbol: str
    total_days: int
    min_pct_change: float
    summary: FactorSummary
    score_summary: ScoreSummary
    correlation: Dict[str, FactorCorrelation] = field(default_factory=dict)
    significant_moves: List[SignificantMove] = field(default_factory=list)
    errors: List[DayError] = field(default_factory=list)

    @property
    def moves_found(self) -> int:
        return len(self.significant_moves)
