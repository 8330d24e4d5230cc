"""
Prediction Service - Historical and future-day predictions for one symbol

Runs bars through indicators, factors and scoring for the most recent
requested days, then walks forward business days from a baseline factor
state. Results are filtered and stably sorted before being returned.
"""

import time
from datetime import date, datetime
from typing import Dict, List, Optional, Sequence

from config import (
    setup_logger, PredictionParameters, ScoringConfig, default_scoring_config
)
from exceptions import InvalidConfigurationError, InvalidParameterError, InsufficientDataError
from models import (
    DailyPriceBar, DayError, ExogenousContext, FactorId, FactorSet,
    PredictionFilters, PredictionInsight, PredictionLevel,
    PredictionRecord, PredictionResult, ScoreResult
)
from services.baseline_service import (
    Baseline, DEFAULT_BASELINE_STRATEGY, get_baseline_strategy, select_baseline
)
from services.factors_service import FactorsService
from services.indicators_service import IndicatorsService
from services.price_estimate_service import PriceEstimateService
from services.score_service import ScoreService
from services.signals_service import SignalsService
from utils.date_utils import get_future_business_days, to_date, to_iso_date


logger = setup_logger(name="PredictionService")


INTERPRETATIONS = {
    PredictionLevel.HIGH_PROBABILITY: "{symbol} shows high probability of strong upward movement based on current factors",
    PredictionLevel.MODERATE: "{symbol} shows moderate potential for price movement",
    PredictionLevel.LOW_PROBABILITY: "{symbol} shows low probability of significant movement today",
}

LEVEL_RECOMMENDATIONS = {
    PredictionLevel.HIGH_PROBABILITY: [
        "Consider a position on confirmation of strength at the open",
        "Place a stop-loss below the nearest support level",
    ],
    PredictionLevel.MODERATE: [
        "Keep on the watchlist and wait for additional confirming factors",
    ],
    PredictionLevel.LOW_PROBABILITY: [
        "No action suggested, monitor for new factor activity",
    ],
}

FACTOR_RECOMMENDATIONS = {
    FactorId.VOLUME_SPIKE: "Check that volume stays above its 20-day average next session",
    FactorId.BREAK_MA50: "A close back below MA50 would invalidate the breakout",
    FactorId.BREAK_MA200: "Holding above MA200 confirms the long-term uptrend",
    FactorId.RSI_OVER_60: "Watch RSI for overbought readings above 70",
    FactorId.MARKET_UP: "Track the market index, strength depends on broad support",
    FactorId.SECTOR_UP: "Compare with sector peers to confirm relative strength",
    FactorId.EARNINGS_WINDOW: "Earnings release nearby, expect elevated volatility",
    FactorId.SHORT_COVERING: "High short interest can amplify upward moves",
    FactorId.MACRO_TAILWIND: "Follow up on the macro event for continued support",
    FactorId.NEWS_POSITIVE: "Verify the news catalyst before acting",
}


class PredictionService:
    """Orchestrates indicator, factor and score services into predictions"""

    def __init__(self):
        self.params = PredictionParameters()
        self.indicators_service = IndicatorsService()
        self.factors_service = FactorsService()
        self.score_service = ScoreService()
        self.signals_service = SignalsService()
        self.price_estimate_service = PriceEstimateService()

    @staticmethod
    def required_bars(requested_days: int) -> int:
        """Bars needed so every requested day has full indicator lookback"""
        return PredictionParameters.lookback_needed + requested_days

    def validate_parameters(
        self, requested_days, future_days, order_by, order, config, filters
    ) -> None:
        """Raise before any computation when call parameters are out of range"""
        p = self.params
        for name, value, low, high in (
            ("requested_days", requested_days, p.min_days, p.max_days),
            ("future_days", future_days, p.min_future_days, p.max_future_days),
        ):
            if isinstance(value, bool) or not isinstance(value, int):
                raise InvalidParameterError(f"{name} must be an integer, got {value!r}")
            if not low <= value <= high:
                raise InvalidParameterError(f"{name} must be within [{low}, {high}], got {value}")
        if order_by not in p.order_by_fields:
            raise InvalidParameterError(f"order_by must be one of {p.order_by_fields}, got {order_by!r}")
        if order not in p.order_directions:
            raise InvalidParameterError(f"order must be one of {p.order_directions}, got {order!r}")
        if config is not None and not isinstance(config, ScoringConfig):
            raise InvalidConfigurationError(f"config must be a ScoringConfig, got {type(config).__name__}")
        if filters is not None and not isinstance(filters, PredictionFilters):
            raise InvalidParameterError(f"filters must be PredictionFilters, got {type(filters).__name__}")

    @staticmethod
    def interpret(symbol: str, level: PredictionLevel) -> str:
        return INTERPRETATIONS[level].format(symbol=symbol)

    @staticmethod
    def build_recommendations(
        result: ScoreResult, is_future: bool = False,
        baseline_date: Optional[date] = None
    ) -> List[str]:
        recommendations = list(LEVEL_RECOMMENDATIONS[result.prediction])
        recommendations.extend(FACTOR_RECOMMENDATIONS[a.factor] for a in result.active_factors)
        if is_future and baseline_date is not None:
            recommendations.append(
                f"Extrapolated from factors observed on {to_iso_date(baseline_date)}, "
                f"re-run once new data is available"
            )
        return recommendations

    def build_record(
        self, symbol: str, result: ScoreResult, is_future: bool = False,
        baseline_date: Optional[date] = None
    ) -> PredictionRecord:
        return PredictionRecord(
            date=result.date,
            symbol=symbol,
            score=result.score,
            confidence=result.confidence,
            prediction=result.prediction,
            active_factors=result.active_factors,
            above_threshold=result.above_threshold,
            threshold=result.threshold,
            is_future=is_future,
            baseline_date=baseline_date,
            interpretation=self.interpret(symbol, result.prediction),
            recommendations=self.build_recommendations(result, is_future, baseline_date),
        )

    def predict_from_factors(
        self, symbol: str, factors: FactorSet,
        config: Optional[ScoringConfig] = None
    ) -> PredictionRecord:
        """Prediction for a single, already evaluated factor state"""
        result = self.score_service.score(factors, config or default_scoring_config())
        return self.build_record(symbol, result)

    @staticmethod
    def apply_filters(
        predictions: Sequence[PredictionRecord],
        filters: Optional[PredictionFilters]
    ) -> List[PredictionRecord]:
        if filters is None:
            return list(predictions)
        return [p for p in predictions if filters.matches(p)]

    @staticmethod
    def sort_predictions(
        predictions: Sequence[PredictionRecord],
        order_by: str = "date", order: str = "desc"
    ) -> List[PredictionRecord]:
        """
        Stable sort by date | score | confidence | prediction.

        prediction sorts by level rank:
        HIGH_PROBABILITY > MODERATE > LOW_PROBABILITY.
        """
        keys = {
            "date": lambda p: p.date,
            "score": lambda p: p.score,
            "confidence": lambda p: p.confidence,
            "prediction": lambda p: p.prediction.rank,
        }
        if order_by not in keys:
            raise InvalidParameterError(f"Unknown order_by '{order_by}'")
        return sorted(predictions, key=keys[order_by], reverse=(order == "desc"))

    @staticmethod
    def split_malformed_bars(price_bars):
        """
        Separate bars that cannot be placed on the timeline.

        A bar is malformed when it is not a DailyPriceBar or its date is
        not a plain date.

        Returns:
            Tuple of (well-formed bars, DayErrors for the malformed ones)
        """
        bars: List[DailyPriceBar] = []
        errors: List[DayError] = []
        for position, bar in enumerate(price_bars):
            bar_date = getattr(bar, "date", None)
            if not isinstance(bar, DailyPriceBar):
                reason = f"Expected DailyPriceBar, got {type(bar).__name__}"
            elif not isinstance(bar_date, date) or isinstance(bar_date, datetime):
                reason = f"Bar at position {position} has invalid date {bar_date!r}"
            else:
                bars.append(bar)
                continue
            label = to_iso_date(bar_date) if isinstance(bar_date, date) else "N/A"
            errors.append(DayError(date=label, error=reason))
        return bars, errors

    def _score_series(self, records, context, config):
        """
        Factors and scores for every record.

        Failed days get a neutral FactorSet so later windows stay aligned;
        their indices are returned separately.
        """
        factor_sets: List[FactorSet] = []
        scores: List[ScoreResult] = []
        failed: Dict[int, str] = {}
        for i, record in enumerate(records):
            try:
                factors = self.factors_service.evaluate_factors(record, context)
                scores.append(self.score_service.score(factors, config))
                factor_sets.append(factors)
            except Exception as e:
                logger.error(f"Error scoring {record.date}: {str(e)}")
                failed[i] = str(e)
                neutral = FactorSet(date=record.date)
                factor_sets.append(neutral)
                scores.append(self.score_service.score(neutral, config))
        return factor_sets, scores, failed

    def _future_records(
        self, symbol: str, baseline: Baseline, anchor: date,
        future_days: int, config: ScoringConfig, errors: List[DayError]
    ) -> List[PredictionRecord]:
        records = []
        for day in get_future_business_days(anchor, future_days):
            try:
                result = self.score_service.score(baseline.factors.with_date(day), config)
                records.append(self.build_record(
                    symbol, result, is_future=True, baseline_date=baseline.source_date
                ))
            except Exception as e:
                logger.error(f"Error predicting future day {day} for {symbol}: {str(e)}")
                errors.append(DayError(date=to_iso_date(day), error=str(e)))
        return records

    def _build_insights(
        self, predictions, records, factor_sets, scores, baseline, config
    ) -> Dict[str, PredictionInsight]:
        index_by_date = {r.date: i for i, r in enumerate(records)}
        history = [(s.score, r.pct_change) for s, r in zip(scores, records)]
        valid_closes = [r.close for r in records if r.pct_change is not None]
        reference_price = valid_closes[-1] if valid_closes else None

        insights = {}
        for p in predictions:
            if not p.is_future:
                i = index_by_date[p.date]
                insights[to_iso_date(p.date)] = PredictionInsight(
                    date=p.date,
                    is_future=False,
                    signals=self.signals_service.extract_signals(records, i),
                    patterns=self.signals_service.recognize_patterns(records, factor_sets, i, scores),
                )
                continue

            base_index = index_by_date[baseline.source_date]
            signals = self.signals_service.extract_signals(records, base_index)
            estimate = None
            if reference_price is not None:
                estimate = self.price_estimate_service.estimate(
                    reference_price, p.score, config.threshold, signals, history
                )
            insights[to_iso_date(p.date)] = PredictionInsight(
                date=p.date, is_future=True, signals=signals, price_estimate=estimate
            )
        return insights

    def generate_predictions(
        self,
        symbol: str,
        price_bars: Sequence[DailyPriceBar],
        requested_days: int = PredictionParameters.default_days,
        future_days: int = 0,
        config: Optional[ScoringConfig] = None,
        filters: Optional[PredictionFilters] = None,
        context: Optional[ExogenousContext] = None,
        order_by: str = "date",
        order: str = "desc",
        baseline_strategy=DEFAULT_BASELINE_STRATEGY,
        include_insights: bool = False,
        as_of: Optional[date] = None,
    ) -> PredictionResult:
        """Generate historical and future predictions for one symbol.

        Parameters:
            symbol: Instrument symbol, used in interpretations.
            price_bars: Daily bars; sorted by date before use.
            requested_days: Most recent days to predict (1-50).
            future_days: Business days to extrapolate (0-30).
            config: Scoring configuration, default when None.
            filters: Optional predicates applied before sorting.
            context: Exogenous signals for market/sector/calendar/sentiment factors.
            order_by: date | score | confidence | prediction.
            order: asc | desc.
            baseline_strategy: Name or BaselineStrategy instance.
            include_insights: Attach signals, patterns and price estimates.
            as_of: Anchor for the forward walk, never earlier than the last bar date.

        Returns:
            PredictionResult; has_data is False when no well-formed bars were supplied.
            Malformed bars are dropped and reported in errors.

        Raises:
            InvalidParameterError: Parameters outside their accepted range.
            InvalidConfigurationError: config is not a ScoringConfig.
        """
        self.validate_parameters(requested_days, future_days, order_by, order, config, filters)
        strategy = get_baseline_strategy(baseline_strategy)
        config = config or default_scoring_config()

        if not price_bars:
            logger.warning(f"No price data supplied for {symbol}")
            return PredictionResult(
                symbol=symbol,
                has_data=False,
                message=f"No price data available for {symbol}. Import price history before generating predictions.",
            )

        t_start = time.time()
        bars, errors = self.split_malformed_bars(price_bars)
        if errors:
            logger.warning(f"{symbol}: dropped {len(errors)} malformed bar(s)")
        if not bars:
            return PredictionResult(
                symbol=symbol,
                has_data=False,
                message=f"No well-formed price bars for {symbol}.",
                errors=errors,
            )

        bars.sort(key=lambda b: b.date)
        message = None
        needed = self.required_bars(requested_days)
        if len(bars) < needed:
            message = (
                f"Only {len(bars)} bars supplied, {needed} needed for full indicator lookback; "
                f"long-window indicators are undefined on early days"
            )
            logger.warning(f"{symbol}: {message}")

        # Step 1: Indicators, factors and scores over the full window
        records = self.indicators_service.compute_indicators(bars)
        factor_sets, scores, failed = self._score_series(records, context, config)

        # Step 2: Historical pass, most recent first
        start = max(0, len(records) - requested_days)
        historical = []
        for i in range(len(records) - 1, start - 1, -1):
            if i in failed:
                errors.append(DayError(date=to_iso_date(records[i].date), error=failed[i]))
                continue
            historical.append(self.build_record(symbol, scores[i]))

        # Step 3: Baseline and forward walk
        future = []
        baseline = None
        if future_days > 0:
            usable = [fs for i, fs in enumerate(factor_sets) if i not in failed]
            try:
                baseline = select_baseline(usable, strategy, self.params.baseline_window)
            except InsufficientDataError as e:
                logger.warning(f"{symbol}: {str(e)}")
                errors.append(DayError(date="N/A", error=str(e)))
            else:
                anchor = bars[-1].date
                if as_of is not None:
                    as_of = to_date(as_of)
                    if as_of < anchor:
                        logger.warning(
                            f"{symbol}: as_of {as_of} precedes last bar {anchor}, walking from the last bar"
                        )
                    anchor = max(as_of, anchor)
                future = self._future_records(symbol, baseline, anchor, future_days, config, errors)

        # Step 4: Filter, then stable sort
        predictions = self.apply_filters(historical + future, filters)
        predictions = self.sort_predictions(predictions, order_by, order)

        insights = {}
        if include_insights and predictions:
            insights = self._build_insights(predictions, records, factor_sets, scores, baseline, config)

        logger.info(
            f"{symbol}: {len(historical)} historical and {len(future)} future predictions, "
            f"{len(predictions)} after filters in {time.time() - t_start:.2f}s"
        )
        return PredictionResult(
            symbol=symbol,
            predictions=predictions,
            has_data=True,
            message=message,
            errors=errors,
            baseline_date=baseline.source_date if baseline else None,
            baseline_strategy=baseline.strategy if baseline else None,
            insights=insights,
        )
