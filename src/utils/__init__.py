from .date_utils import get_next_business_day, get_future_business_days, to_date, to_iso_date
from .scale_utils import ScoreScale, to_percent, from_percent, convert_scale


__all__ = [
    "get_next_business_day",
    "get_future_business_days",
    "to_date",
    "to_iso_date",
    "ScoreScale",
    "to_percent",
    "from_percent",
    "convert_scale",
]
