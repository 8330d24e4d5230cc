"""
Score Service - Weighted composite score and prediction bucket per day

score() is a pure function of (FactorSet, ScoringConfig): the raw score
is the share of configured weight carried by active factors, summed in
canonical FactorId order so identical inputs give bit-identical output.
"""

from typing import Iterable, List, Optional, Sequence

import pandas as pd

from config import setup_logger, ScoringConfig, default_scoring_config
from models import (
    FACTOR_DESCRIPTIONS, ActiveFactor, FactorId, FactorSet,
    PredictionLevel, ScoreResult, ScoreSummary
)


logger = setup_logger(name="ScoreService")

# Scores and confidences carry at most this many decimals
SCORE_DECIMALS = 10


class ScoreService:
    """Service for scoring factor sets into probability buckets"""

    @staticmethod
    def calculate_raw_score(factors: FactorSet, config: ScoringConfig) -> float:
        """Sum of active weights over total weight, clamped to [0, 1]"""
        total = config.total_weight
        active = 0.0
        for factor in FactorId:
            if factors.is_active(factor):
                active += config.factor_weights[factor]
        raw = active / total
        return round(min(max(raw, 0.0), 1.0), SCORE_DECIMALS)

    @staticmethod
    def classify(raw_score: float, config: ScoringConfig):
        """
        Bucket a raw score and derive its confidence.

        Buckets:
            raw >= threshold                       -> HIGH_PROBABILITY, min(raw, cap)
            threshold * moderate_ratio <= raw      -> MODERATE, raw * 0.8
            otherwise                              -> LOW_PROBABILITY, raw * 0.6

        Returns:
            Tuple of (PredictionLevel, confidence)
        """
        if raw_score >= config.threshold:
            level, confidence = PredictionLevel.HIGH_PROBABILITY, min(raw_score, config.high_confidence_cap)
        elif raw_score >= config.moderate_floor:
            level, confidence = PredictionLevel.MODERATE, raw_score * config.moderate_confidence_factor
        else:
            level, confidence = PredictionLevel.LOW_PROBABILITY, raw_score * config.low_confidence_factor
        return level, round(confidence, SCORE_DECIMALS)

    @staticmethod
    def describe_active(factors: FactorSet, config: ScoringConfig) -> List[ActiveFactor]:
        return [
            ActiveFactor(
                factor=factor,
                weight=config.factor_weights[factor],
                name=FACTOR_DESCRIPTIONS[factor]["name"],
                description=FACTOR_DESCRIPTIONS[factor]["description"],
            )
            for factor in factors.active_factors()
        ]

    def score(self, factors: FactorSet, config: Optional[ScoringConfig] = None) -> ScoreResult:
        """
        Score one FactorSet.

        Parameters:
            factors: Factor state for the day
            config: Scoring configuration, defaults to default_scoring_config()

        Returns:
            ScoreResult on the 0-1 scale
        """
        config = config or default_scoring_config()
        raw = self.calculate_raw_score(factors, config)
        level, confidence = self.classify(raw, config)
        return ScoreResult(
            date=factors.date,
            score=raw,
            confidence=confidence,
            prediction=level,
            active_factors=self.describe_active(factors, config),
            above_threshold=raw >= config.threshold,
            threshold=config.threshold,
        )

    def score_all(
        self, factor_sets: Iterable[FactorSet],
        config: Optional[ScoringConfig] = None
    ) -> List[ScoreResult]:
        config = config or default_scoring_config()
        return [self.score(factors, config) for factors in factor_sets]

    @staticmethod
    def summarize(results: Sequence[ScoreResult]) -> ScoreSummary:
        """Aggregate statistics over a series of scored days.

        Parameters:
            results: Scored days, any order.

        Returns:
            ScoreSummary; all zeros when results is empty.
        """
        if not results:
            return ScoreSummary(
                total_days=0, high_score_days=0, high_score_pct=0.0,
                average_score=0.0, max_score=0.0, min_score=0.0,
            )

        df = pd.DataFrame([
            {
                'score': r.score,
                'above_threshold': r.above_threshold,
                **{f.value: False for f in FactorId},
                **{a.factor.value: True for a in r.active_factors},
            }
            for r in results
        ])
        total = len(df)
        high = int(df['above_threshold'].sum())
        frequency = {f.value: float(df[f.value].astype(bool).mean()) for f in FactorId}

        logger.info(f"Summarized {total} scored days, {high} above threshold")
        return ScoreSummary(
            total_days=total,
            high_score_days=high,
            high_score_pct=high / total,
            average_score=float(df['score'].mean()),
            max_score=float(df['score'].max()),
            min_score=float(df['score'].min()),
            factor_frequency=frequency,
        )
