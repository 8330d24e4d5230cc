"""
Score scale conversion.

Scores and confidences are fractions in [0, 1] everywhere inside the
engine. Percent values (0-100) exist only at the serialization boundary
and go through these helpers.

Conversion shifts the decimal point of the shortest repr of the value
instead of multiplying by 100, so a fraction written as percent reads
back as the same float.
"""
from decimal import Decimal
from enum import Enum
from typing import Optional


class ScoreScale(str, Enum):
    FRACTION = "fraction"
    PERCENT = "percent"


def _shift(value: float, places: int) -> float:
    return float(Decimal(repr(float(value))).scaleb(places))


def to_percent(value: Optional[float]) -> Optional[float]:
    if value is None:
        return None
    return _shift(value, 2)


def from_percent(value: Optional[float]) -> Optional[float]:
    if value is None:
        return None
    return _shift(value, -2)


def convert_scale(value: Optional[float], source, target) -> Optional[float]:
    """
    Convert a score between scales.

    Parameters:
        value: Score on the source scale (None passes through)
        source: ScoreScale (or its string value) of the input
        target: ScoreScale (or its string value) wanted

    Returns:
        The score on the target scale
    """
    source, target = ScoreScale(source), ScoreScale(target)
    if source == target:
        return value
    if target == ScoreScale.PERCENT:
        return to_percent(value)
    return from_percent(value)
