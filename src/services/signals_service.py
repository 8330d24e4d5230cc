from typing import List, Optional, Sequence

from config import setup_logger, PredictionParameters, SignalThresholds
from models import (
    DailyIndicatorRecord, FactorSet, FactorId, ScoreResult,
    TrendSignal, MomentumSignal, MovingAverageSignal, SupportResistance,
    VolumeSignal, TechnicalSignals, SimilarScenario, PatternRecognition
)

logger = setup_logger(name="SignalsService")


class SignalsService:
    """Describes the technical picture of a day and matches it against history"""

    def __init__(self):
        self.thresholds = SignalThresholds()
        self.params = PredictionParameters()

    @staticmethod
    def calculate_trend(close, ma20, ma50, ma200) -> TrendSignal:
        """
        Trend from price position vs MA20/50/200 and MA ordering
        """
        if not all(v is not None for v in (close, ma20, ma50, ma200)):
            return TrendSignal()

        above_20, above_50, above_200 = close > ma20, close > ma50, close > ma200
        ma20_over_50, ma50_over_200 = ma20 > ma50, ma50 > ma200

        if above_200 and above_50 and above_20 and ma20_over_50 and ma50_over_200:
            return TrendSignal("bullish", "strong", "Strong bullish trend: Price above all MAs with proper alignment")
        if above_200 and above_50 and above_20:
            return TrendSignal("bullish", "moderate", "Moderate bullish trend: Price above all MAs")
        if above_50 and above_20:
            return TrendSignal("bullish", "weak", "Weak bullish trend: Price above MA50 and MA20")
        if not (above_200 or above_50 or above_20 or ma20_over_50 or ma50_over_200):
            return TrendSignal("bearish", "strong", "Strong bearish trend: Price below all MAs with proper alignment")
        if not (above_200 or above_50 or above_20):
            return TrendSignal("bearish", "moderate", "Moderate bearish trend: Price below all MAs")
        return TrendSignal("neutral", "moderate", "Mixed signals: Price position relative to MAs is inconsistent")

    def calculate_momentum(self, rsi: Optional[float]) -> MomentumSignal:
        if rsi is None:
            return MomentumSignal()
        t = self.thresholds
        if rsi > t.rsi_overbought:
            return MomentumSignal(rsi, "overbought", f"RSI {rsi:.1f} indicates overbought conditions - potential pullback risk")
        if rsi < t.rsi_oversold:
            return MomentumSignal(rsi, "oversold", f"RSI {rsi:.1f} indicates oversold conditions - potential bounce opportunity")
        if rsi > t.rsi_strong:
            return MomentumSignal(rsi, "overbought", f"RSI {rsi:.1f} shows strong momentum but approaching overbought")
        return MomentumSignal(rsi, "neutral", f"RSI {rsi:.1f} indicates neutral momentum")

    def price_vs(self, close: Optional[float], average: Optional[float]) -> str:
        """'above' / 'below' outside a +/- band around the average, else 'at'"""
        if close is None or average is None:
            return "at"
        band = self.thresholds.ma_band
        if close > average * (1 + band):
            return "above"
        if close < average * (1 - band):
            return "below"
        return "at"

    def calculate_moving_averages(self, record: DailyIndicatorRecord) -> MovingAverageSignal:
        close, ma20, ma50, ma200 = record.close, record.ma20, record.ma50, record.ma200
        alignment, description = "mixed", "Moving average analysis unavailable"
        if all(v is not None for v in (close, ma20, ma50, ma200)):
            levels = f"Price {close:.2f}, MA20 {ma20:.2f}, MA50 {ma50:.2f}, MA200 {ma200:.2f}"
            if ma20 > ma50 > ma200 and close > ma20:
                alignment, description = "bullish", f"Bullish MA alignment: {levels}"
            elif ma20 < ma50 < ma200 and close < ma20:
                alignment, description = "bearish", f"Bearish MA alignment: {levels}"
            else:
                description = f"Mixed MA signals: {levels}"
        return MovingAverageSignal(
            ma20=ma20, ma50=ma50, ma200=ma200,
            price_vs_ma20=self.price_vs(close, ma20),
            price_vs_ma50=self.price_vs(close, ma50),
            price_vs_ma200=self.price_vs(close, ma200),
            alignment=alignment,
            description=description,
        )

    def calculate_support_resistance(
        self, records: Sequence[DailyIndicatorRecord], index: int
    ) -> SupportResistance:
        """Lowest low / highest high over the signal lookback, current day included"""
        close = records[index].close
        window = records[max(0, index - self.params.signal_lookback): index + 1]
        lows = [r.low for r in window if r.low is not None]
        highs = [r.high for r in window if r.high is not None]
        support = min(lows) if lows else None
        resistance = max(highs) if highs else None
        if close is None or close <= 0:
            return SupportResistance(support_level=support, resistance_level=resistance)

        to_support = (close - support) / support if support else None
        to_resistance = (resistance - close) / close if resistance else None
        description = "Support/resistance analysis unavailable"
        if to_support is not None and to_resistance is not None:
            description = (
                f"Support: {support:.2f} ({to_support:+.1%}), "
                f"Resistance: {resistance:.2f} ({to_resistance:+.1%})"
            )
        return SupportResistance(
            support_level=support,
            resistance_level=resistance,
            distance_to_support=to_support,
            distance_to_resistance=to_resistance,
            description=description,
        )

    def calculate_volume(
        self, records: Sequence[DailyIndicatorRecord], index: int
    ) -> VolumeSignal:
        """Current volume vs the average of the prior lookback days"""
        volume = records[index].volume
        prior = records[max(0, index - self.params.signal_lookback): index]
        volumes = [r.volume for r in prior if r.volume is not None and r.volume > 0]
        average = sum(volumes) / len(volumes) if volumes else None
        if not volume or not average:
            return VolumeSignal(current_volume=volume, average_volume=average)

        ratio = volume / average
        t = self.thresholds
        if ratio > t.high_volume_ratio:
            signal, description = "high", f"High volume: {ratio:.2f}x average - indicates strong interest"
        elif ratio < t.low_volume_ratio:
            signal, description = "low", f"Low volume: {ratio:.2f}x average - weak participation"
        else:
            signal, description = "normal", f"Normal volume: {ratio:.2f}x average"
        return VolumeSignal(volume, average, ratio, signal, description)

    def extract_signals(
        self, records: Sequence[DailyIndicatorRecord], index: int
    ) -> TechnicalSignals:
        """
        Technical signals for records[index].

        Parameters:
            records: Indicator records in ascending date order
            index: Position of the day to describe

        Returns:
            TechnicalSignals
        """
        record = records[index]
        return TechnicalSignals(
            trend=self.calculate_trend(record.close, record.ma20, record.ma50, record.ma200),
            momentum=self.calculate_momentum(record.rsi),
            moving_averages=self.calculate_moving_averages(record),
            support_resistance=self.calculate_support_resistance(records, index),
            volume=self.calculate_volume(records, index),
        )

    def find_similar_scenarios(
        self, factor_sets: Sequence[FactorSet], records: Sequence[DailyIndicatorRecord],
        scores: Optional[Sequence[ScoreResult]], index: int
    ) -> List[SimilarScenario]:
        """Past days whose active factors overlap today's by at least min_similarity"""
        active = set(factor_sets[index].active_factors())
        if not active:
            return []

        start = max(0, index - self.params.pattern_lookback)
        scenarios = []
        for j in range(start, index):
            past = set(factor_sets[j].active_factors())
            similarity = len(active & past) / max(len(active), len(past), 1)
            if similarity < self.thresholds.min_similarity:
                continue
            scenarios.append(SimilarScenario(
                date=factor_sets[j].date,
                score=scores[j].score if scores is not None else 0.0,
                price_change=records[j].pct_change or 0.0,
                factors=[f.value for f in FactorId if f in past],
                similarity=similarity,
            ))
        # Stable: ties keep chronological order
        scenarios.sort(key=lambda s: s.similarity, reverse=True)
        return scenarios[:self.thresholds.max_similar_scenarios]

    def detect_pattern(self, record: DailyIndicatorRecord, factors: FactorSet):
        """
        Returns:
            Tuple of (pattern_type, pattern_strength, description)
        """
        close, pct, ma20, ma50 = record.close, record.pct_change, record.ma20, record.ma50
        if close is None or ma20 is None or ma50 is None or pct is None:
            return "unknown", "weak", "Pattern recognition unavailable"

        break_ma50, break_ma200 = factors.break_ma50, factors.break_ma200
        volume_spike = factors.volume_spike
        t = self.thresholds

        if (break_ma50 or break_ma200) and volume_spike and pct > 0:
            level = "MA200" if break_ma200 else "MA50"
            return "breakout", "strong", f"Breakout pattern detected: {level} break with high volume"
        if close > ma20 and pct > 0:
            return (
                "continuation", "moderate" if volume_spike else "weak",
                "Continuation pattern: Price maintaining upward momentum"
            )
        if pct < t.reversal_drop and volume_spike:
            return "reversal", "moderate", "Potential reversal pattern: Significant decline with high volume"
        if abs(pct) < t.consolidation_range and not volume_spike:
            return "consolidation", "weak", "Consolidation pattern: Sideways movement with low volatility"
        return "unknown", "weak", "No recognizable pattern"

    def recognize_patterns(
        self, records: Sequence[DailyIndicatorRecord], factor_sets: Sequence[FactorSet],
        index: int, scores: Optional[Sequence[ScoreResult]] = None
    ) -> PatternRecognition:
        """
        Pattern type for records[index] plus similar historical scenarios.

        historical_accuracy is the share of similar scenarios that closed
        higher, None when there are none.
        """
        scenarios = self.find_similar_scenarios(factor_sets, records, scores, index)
        pattern_type, strength, description = self.detect_pattern(records[index], factor_sets[index])

        accuracy = None
        if scenarios:
            accuracy = sum(1 for s in scenarios if s.price_change > 0) / len(scenarios)

        return PatternRecognition(
            similar_scenarios=scenarios,
            pattern_type=pattern_type,
            pattern_strength=strength,
            pattern_description=description,
            historical_accuracy=accuracy,
        )
