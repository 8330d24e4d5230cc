"""
Price Estimate Service - Rough OHLC projection for future prediction days

The expected move scales the prediction score by the recent average
absolute return per unit of score, is signed by the trend direction and
bounded by max_daily_move. All changes are fractions.
"""
import math
import numpy as np

from typing import Optional, Sequence, Tuple

from config import setup_logger, PredictionParameters
from models import PriceEstimate, TechnicalSignals

logger = setup_logger(name="PriceEstimateService")


class PriceEstimateService:

    def __init__(self):
        self.params = PredictionParameters()

    def calculate_return_profile(
        self, history: Sequence[Tuple[float, Optional[float]]]
    ) -> Tuple[float, float]:
        """
        Average absolute return per unit of score and return volatility.

        Parameters:
            history: (score, pct_change) pairs, most recent last

        Returns:
            Tuple of (return_per_score, volatility), defaults when no
            usable pairs exist
        """
        lookback = history[-self.params.price_estimate_lookback:]
        pairs = [
            (score, abs(pct)) for score, pct in lookback
            if score is not None and pct is not None
            and math.isfinite(score) and math.isfinite(pct)
        ]
        if not pairs:
            return self.params.default_return_per_score, self.params.default_volatility

        scores = np.array([p[0] for p in pairs], dtype=float)
        returns = np.array([p[1] for p in pairs], dtype=float)
        avg_score = scores.mean()
        per_score = returns.mean() / avg_score if avg_score > 0 else self.params.default_return_per_score
        volatility = float(returns.std())
        return float(per_score), volatility

    def estimate(
        self, reference_price: float, score: float, threshold: float,
        signals: TechnicalSignals,
        history: Sequence[Tuple[float, Optional[float]]] = ()
    ) -> PriceEstimate:
        """
        Estimate open/high/low/close for one future day.

        Parameters:
            reference_price: Last known close
            score: Prediction score for the day (0-1)
            threshold: HIGH_PROBABILITY threshold of the scoring config
            signals: Technical signals of the baseline day
            history: (score, pct_change) pairs for recent historical days

        Returns:
            PriceEstimate
        """
        p = self.params
        per_score, volatility = self.calculate_return_profile(history)

        expected = score * per_score
        if score < threshold:
            expected *= p.below_threshold_damping

        direction = signals.trend.direction
        if direction == "bearish":
            expected = -abs(expected)
        elif direction == "bullish":
            expected = abs(expected)
        expected = max(-p.max_daily_move, min(p.max_daily_move, expected))

        gap = expected * p.gap_ratio if score >= threshold else 0.0
        open_ = reference_price * (1 + gap)
        close = open_ * (1 + expected)

        intraday_range = abs(expected) * (1.5 + volatility * 50)
        high = max(open_, close) * (1 + intraday_range / 2)
        low = min(open_, close) * (1 - intraday_range / 2)

        support = signals.support_resistance.support_level
        resistance = signals.support_resistance.resistance_level
        if support and low < support:
            adjusted_close = max(close, support + (close - low))
            high = max(high, adjusted_close)
            low = min(support, open_, adjusted_close)
            close = adjusted_close
        elif resistance and high > resistance:
            adjusted_close = min(close, resistance - (high - close))
            low = min(low, adjusted_close)
            high = max(resistance, open_, adjusted_close)
            close = adjusted_close

        return PriceEstimate(
            reference_price=reference_price,
            open=open_,
            high=high,
            low=low,
            close=close,
            change=close - open_,
            change_pct=(close - open_) / open_ if open_ else 0.0,
        )
