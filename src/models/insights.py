"""
Insight Models

Technical signal, pattern and price-estimate records attached to
predictions when insights are requested.
"""
from datetime import date
from dataclasses import dataclass, field
from typing import List, Optional


@dataclass(frozen=True)
class TrendSignal:
    direction: str = "neutral"  # bullish | bearish | neutral
    strength: str = "weak"  # strong | moderate | weak
    description: str = "Trend analysis unavailable"


@dataclass(frozen=True)
class MomentumSignal:
    rsi: Optional[float] = None
    rsi_signal: str = "neutral"  # overbought | oversold | neutral
    description: str = "Momentum analysis unavailable"


@dataclass(frozen=True)
class MovingAverageSignal:
    ma20: Optional[float] = None
    ma50: Optional[float] = None
    ma200: Optional[float] = None
    price_vs_ma20: str = "at"
    price_vs_ma50: str = "at"
    price_vs_ma200: str = "at"
    alignment: str = "mixed"  # bullish | bearish | mixed
    description: str = "Moving average analysis unavailable"


@dataclass(frozen=True)
class SupportResistance:
    support_level: Optional[float] = None
    resistance_level: Optional[float] = None
    distance_to_support: Optional[float] = None
    distance_to_resistance: Optional[float] = None
    description: str = "Support/resistance analysis unavailable"


@dataclass(frozen=True)
class VolumeSignal:
    current_volume: Optional[float] = None
    average_volume: Optional[float] = None
    volume_ratio: Optional[float] = None
    volume_signal: str = "normal"  # high | normal | low
    description: str = "Volume analysis unavailable"


@dataclass(frozen=True)
class TechnicalSignals:
    """Snapshot of trend, momentum, MA, support/resistance and volume state."""
    trend: TrendSignal = field(default_factory=TrendSignal)
    momentum: MomentumSignal = field(default_factory=MomentumSignal)
    moving_averages: MovingAverageSignal = field(default_factory=MovingAverageSignal)
    support_resistance: SupportResistance = field(default_factory=SupportResistance)
    volume: VolumeSignal = field(default_factory=VolumeSignal)


@dataclass(frozen=True)
class SimilarScenario:
    date: date
    score: float
    price_change: float
    factors: List[str]
    similarity: float


@dataclass(frozen=True)
class PatternRecognition:
    """
    Attributes:
        similar_scenarios: Up to five past days with overlapping factors
        pattern_type: breakout | continuation | reversal | consolidation | unknown
        historical_accuracy: Share of similar scenarios that closed higher
    """
    similar_scenarios: List[SimilarScenario] = field(default_factory=list)
    pattern_type: str = "unknown"
    pattern_strength: str = "weak"
    pattern_description: str = "Pattern recognition unavailable"
    historical_accuracy: Optional[float] = None


@dataclass(frozen=True)
class PriceEstimate:
    """Estimated OHLC for a future day; change_pct is a fraction."""
    reference_price: float
    open: float
    high: float
    low: float
    close: float
    change: float
    change_pct: float


@dataclass(frozen=True)
class PredictionInsight:
    date: date
    is_future: bool
    signals: TechnicalSignals
    patterns: Optional[PatternRecognition] = None
    price_estimate: Optional[PriceEstimate] = None
