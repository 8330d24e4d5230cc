import math
import numpy as np
import pandas as pd

from scipy import stats
from typing import Dict, List, Optional, Sequence

from config import setup_logger, AnalysisParameters, ScoringConfig, default_scoring_config
from exceptions import InvalidConfigurationError, InvalidParameterError
from models import (
    DailyIndicatorRecord, DailyPriceBar, ExogenousContext, FactorAnalysisReport,
    FactorCorrelation, FactorId, FactorSet, FactorSummary, ScoreResult, SignificantMove
)
from services.factors_service import FactorsService
from services.indicators_service import IndicatorsService
from services.prediction_service import PredictionService
from services.score_service import ScoreService

logger = setup_logger(name="FactorAnalysisService")


class FactorAnalysisService:
    """Factor frequency and factor-to-return statistics over a period"""

    def __init__(self):
        self.params = AnalysisParameters()
        self.indicators_service = IndicatorsService()
        self.factors_service = FactorsService()
        self.score_service = ScoreService()

    @staticmethod
    def build_factor_frame(factor_sets: Sequence[FactorSet]) -> pd.DataFrame:
        """One row per day, one boolean column per factor"""
        df = pd.DataFrame(
            [fs.as_dict() for fs in factor_sets],
            columns=[f.value for f in FactorId],
        )
        df.index = [fs.date for fs in factor_sets]
        return df.astype(bool)

    def summarize_factors(self, factor_sets: Sequence[FactorSet]) -> FactorSummary:
        """
        Count how often each factor fired.

        Parameters:
            factor_sets: FactorSets for the period

        Returns:
            FactorSummary; only factors that fired at least once are counted
        """
        total = len(factor_sets)
        if total == 0:
            return FactorSummary(total_days=0)

        df = self.build_factor_frame(factor_sets)
        counts = df.sum()
        counts = counts[counts > 0]
        return FactorSummary(
            total_days=total,
            factor_counts={k: int(v) for k, v in counts.items()},
            factor_frequency={k: float(v) / total for k, v in counts.items()},
            average_factors_per_day=float(df.sum(axis=1).mean()),
        )

    @staticmethod
    def calculate_correlation(flags: pd.Series, returns: pd.Series) -> float:
        """
        Point-biserial correlation between a factor flag and returns
        0.0 when either side has no variance
        """
        if flags.nunique() < 2 or returns.nunique() < 2:
            return 0.0
        result = stats.pointbiserialr(flags.astype(int), returns)
        value = float(result[0])
        return value if np.isfinite(value) else 0.0

    def correlate_with_price_movement(
        self, factor_sets: Sequence[FactorSet],
        indicators: Sequence[DailyIndicatorRecord]
    ) -> Dict[str, FactorCorrelation]:
        """
        Per-factor occurrences, average return and correlation with pct_change.

        Days are joined on date; days without a pct_change are dropped.

        Returns:
            Dict keyed by factor id, for factors that occurred at least once
        """
        if not factor_sets or not indicators:
            return {}

        df = self.build_factor_frame(factor_sets)
        returns = pd.Series(
            {r.date: r.pct_change for r in indicators if r.pct_change is not None},
            dtype=float,
        )
        df = df.join(returns.rename('pct_change'), how='inner')
        if df.empty:
            logger.warning("No overlapping days between factors and returns")
            return {}

        correlation = {}
        for factor in FactorId:
            flags = df[factor.value]
            occurrences = int(flags.sum())
            if occurrences == 0:
                continue
            correlation[factor.value] = FactorCorrelation(
                factor=factor.value,
                occurrences=occurrences,
                avg_return=float(df.loc[flags, 'pct_change'].mean()),
                correlation=self.calculate_correlation(flags, df['pct_change']),
            )
        return correlation

    @staticmethod
    def top_factors(
        correlation: Dict[str, FactorCorrelation], limit: int = 5
    ) -> List[FactorCorrelation]:
        """Factors ranked by correlation, then average return"""
        ranked = sorted(
            correlation.values(),
            key=lambda c: (c.correlation, c.avg_return),
            reverse=True,
        )
        return ranked[:limit]

    def find_significant_moves(
        self,
        indicators: Sequence[DailyIndicatorRecord],
        factor_sets: Sequence[FactorSet],
        scores: Optional[Sequence[ScoreResult]] = None,
        min_pct_change: Optional[float] = None,
    ) -> List[SignificantMove]:
        """
        Days whose pct_change reached min_pct_change, enriched with that
        day's factors, score and indicator readings.

        Parameters:
            indicators: Indicator records for the period
            factor_sets: FactorSets for the same days, joined on date
            scores: Optional ScoreResults, joined on date
            min_pct_change: Minimum gain as a fraction, defaults to 0.03

        Returns:
            List[SignificantMove] in indicator order
        """
        if min_pct_change is None:
            min_pct_change = self.params.min_pct_change
        if isinstance(min_pct_change, bool) or not isinstance(min_pct_change, (int, float)) \
                or not math.isfinite(min_pct_change) or min_pct_change <= 0:
            raise InvalidParameterError(f"min_pct_change must be a positive fraction, got {min_pct_change!r}")

        factors_by_date = {fs.date: fs for fs in factor_sets}
        scores_by_date = {s.date: s for s in scores or ()}

        moves = []
        for record in indicators:
            if record.pct_change is None or record.pct_change < min_pct_change:
                continue
            factors = factors_by_date.get(record.date)
            active = [f.value for f in factors.active_factors()] if factors else []
            score = scores_by_date.get(record.date)
            moves.append(SignificantMove(
                date=record.date,
                close=record.close,
                pct_change=record.pct_change,
                factors=active,
                factor_count=len(active),
                score=score.score if score else None,
                above_threshold=score.above_threshold if score else None,
                ma20=record.ma20,
                ma50=record.ma50,
                ma200=record.ma200,
                rsi=record.rsi,
                volume=record.volume,
            ))

        logger.info(f"Found {len(moves)} day(s) with pct_change >= {min_pct_change:.2%}")
        return moves

    def analyze(
        self,
        symbol: str,
        price_bars: Sequence[DailyPriceBar],
        context: Optional[ExogenousContext] = None,
        config: Optional[ScoringConfig] = None,
        min_pct_change: Optional[float] = None,
    ) -> FactorAnalysisReport:
        """
        Full factor analysis of a price history in one call.

        Parameters:
            symbol: Instrument symbol
            price_bars: Daily bars, any order
            context: Exogenous signals for the non-price factors
            config: Scoring configuration, default when None
            min_pct_change: Minimum gain for a significant move (fraction)

        Returns:
            FactorAnalysisReport with summary, correlation, score summary
            and significant moves; malformed bars are reported in errors
        """
        if config is not None and not isinstance(config, ScoringConfig):
            raise InvalidConfigurationError(f"config must be a ScoringConfig, got {type(config).__name__}")
        config = config or default_scoring_config()
        min_pct_change = self.params.min_pct_change if min_pct_change is None else min_pct_change

        bars, errors = PredictionService.split_malformed_bars(price_bars or [])
        if errors:
            logger.warning(f"{symbol}: dropped {len(errors)} malformed bar(s)")
        bars.sort(key=lambda b: b.date)

        records = self.indicators_service.compute_indicators(bars)
        factor_sets = self.factors_service.evaluate_all(records, context)
        scores = self.score_service.score_all(factor_sets, config)
        moves = self.find_significant_moves(records, factor_sets, scores, min_pct_change)

        logger.info(f"{symbol}: analyzed {len(records)} days, {len(moves)} significant move(s)")
        return FactorAnalysisReport(
            symbol=symbol,
            total_days=len(records),
            min_pct_change=min_pct_change,
            summary=self.summarize_factors(factor_sets),
            score_summary=self.score_service.summarize(scores),
            correlation=self.correlate_with_price_movement(factor_sets, records),
            significant_moves=moves,
            errors=errors,
        )
