"""
Scan Service - Runs predictions across a universe of symbols

Each symbol is computed independently; a failure is logged and
collected without aborting the remaining symbols. Parameter errors are
raised once, before any symbol is processed.
"""

from typing import List, Mapping, Optional, Sequence

from config import setup_logger, ScoringConfig
from models import (
    DailyPriceBar, ExogenousContext, PredictionLevel, ScanHit, ScanResult
)
from services.baseline_service import DEFAULT_BASELINE_STRATEGY, get_baseline_strategy
from services.prediction_service import PredictionService

logger = setup_logger(name="ScanService")


class ScanService:

    def __init__(self, prediction_service: Optional[PredictionService] = None):
        self.prediction_service = prediction_service or PredictionService()

    def scan(
        self,
        universe: Mapping[str, Sequence[DailyPriceBar]],
        requested_days: int = 1,
        future_days: int = 0,
        config: Optional[ScoringConfig] = None,
        contexts: Optional[Mapping[str, ExogenousContext]] = None,
        baseline_strategy=DEFAULT_BASELINE_STRATEGY,
    ) -> ScanResult:
        """
        Generate predictions for every symbol in the universe.

        Parameters:
            universe: Price bars keyed by symbol
            requested_days: Historical days per symbol (1-50)
            future_days: Future business days per symbol (0-30)
            config: Shared scoring configuration
            contexts: Optional exogenous context per symbol
            baseline_strategy: Baseline strategy name or instance

        Returns:
            ScanResult with per-symbol results and failures
        """
        service = self.prediction_service
        service.validate_parameters(requested_days, future_days, "date", "desc", config, None)
        get_baseline_strategy(baseline_strategy)

        contexts = contexts or {}
        scan = ScanResult()
        symbols = list(universe)
        logger.info(f"Scanning {len(symbols)} symbols...")

        for i, symbol in enumerate(symbols):
            logger.info(f"Processing {i+1}/{len(symbols)} {symbol}...")
            try:
                scan.results[symbol] = service.generate_predictions(
                    symbol,
                    universe[symbol],
                    requested_days=requested_days,
                    future_days=future_days,
                    config=config,
                    context=contexts.get(symbol),
                    baseline_strategy=baseline_strategy,
                )
            except Exception as e:
                logger.error(f"Error scanning {symbol}: {str(e)}")
                scan.failures[symbol] = str(e)
                continue

        logger.info(
            f"Scan complete: {scan.processed} processed, {len(scan.failures)} failed"
        )
        return scan

    def scan_high_probability(
        self,
        universe: Mapping[str, Sequence[DailyPriceBar]],
        min_level: PredictionLevel = PredictionLevel.HIGH_PROBABILITY,
        include_future: bool = False,
        future_days: int = 1,
        config: Optional[ScoringConfig] = None,
        contexts: Optional[Mapping[str, ExogenousContext]] = None,
        baseline_strategy=DEFAULT_BASELINE_STRATEGY,
    ) -> List[ScanHit]:
        """
        Symbols whose latest prediction is at or above min_level.

        The latest historical day is used, or the first future day when
        include_future is set. Hits are sorted by score, highest first.
        """
        min_level = PredictionLevel(min_level)
        scan = self.scan(
            universe,
            requested_days=1,
            future_days=future_days if include_future else 0,
            config=config,
            contexts=contexts,
            baseline_strategy=baseline_strategy,
        )

        hits: List[ScanHit] = []
        for symbol, result in scan.results.items():
            candidates = result.future if include_future else result.historical
            if not candidates:
                continue
            latest = min(candidates, key=lambda p: p.date) if include_future \
                else max(candidates, key=lambda p: p.date)
            if latest.prediction.rank < min_level.rank:
                continue
            hits.append(ScanHit(
                symbol=symbol,
                date=latest.date,
                score=latest.score,
                confidence=latest.confidence,
                prediction=latest.prediction,
                active_factors=latest.active_factors,
                is_future=latest.is_future,
            ))

        hits.sort(key=lambda h: h.score, reverse=True)
        logger.info(f"{len(hits)} symbol(s) at or above {min_level.value}")
        return hits
