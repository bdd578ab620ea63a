"""
ARA Detector – multi-signal engine.
Fetches the market-data sources of an emiten in parallel, normalizes them into a snapshot,
evaluates the 8 weighted signals and classifies the composite score into an alert level.
Deterministic for a given snapshot; no storage, no caching, no retries (those belong to the client).
"""
from concurrent.futures import ThreadPoolExecutor, as_completed
from datetime import date
from typing import Dict, Iterable, List, Optional, Union

from ara_errors import ARADetectorError, EvaluationError, SourceUnavailable
from ara_models import BatchItemFailure, BatchResult, InstrumentSnapshot, ScoreResult
from ara_normalizer import build_snapshot
from ara_scoring import build_score_result
from fetch_utils import ORDERBOOK, MARKET_DETECTOR, HISTORICAL, PROFILE, SourceFetch, fetch_sources, to_date_str
from logger_config import get_logger
from ticker_utils import clean_ticker, is_valid_ticker
from config import BATCH_SCAN_WORKERS

logger = get_logger(__name__)

DateLike = Union[str, date, None]


class ARADetector:
    """
    Scores emiten for ARA potential.
    provider: object with get_orderbook, get_market_detector, get_historical_summary,
    get_emiten_info (e.g. StockbitClient).
    """

    def __init__(self, provider, batch_workers: int = BATCH_SCAN_WORKERS):
        self.provider = provider
        self.batch_workers = max(1, int(batch_workers))

    def _snapshot_from_sources(self, code: str, fetched: Dict[str, SourceFetch]) -> InstrumentSnapshot:
        """
        Orderbook is mandatory (price and bid/offer depend on it); the other sources
        fall back to empty defaults when their read failed.
        """
        orderbook = fetched[ORDERBOOK]
        if not orderbook.ok:
            raise SourceUnavailable(ORDERBOOK, code, orderbook.error)
        for name in (MARKET_DETECTOR, HISTORICAL, PROFILE):
            if not fetched[name].ok:
                logger.info("%s: %s unavailable, using empty default (%s)", code, name, fetched[name].error)
        return build_snapshot(
            orderbook.data_or_default(),
            fetched[MARKET_DETECTOR].data_or_default(),
            fetched[HISTORICAL].data_or_default(),
            fetched[PROFILE].data_or_default(),
        )

    def evaluate(self, instrument: str, scan_date: DateLike = None) -> ScoreResult:
        """
        Analyze one emiten for a date (default today).
        Raises EvaluationError (tagged with the emiten code) on fetch or parse failure.
        """
        code = clean_ticker(instrument)
        if not is_valid_ticker(code):
            raise EvaluationError(str(instrument), "invalid emiten code")
        try:
            day = to_date_str(scan_date)
            fetched = fetch_sources(self.provider, code, day)
            snapshot = self._snapshot_from_sources(code, fetched)
        except SourceUnavailable as e:
            raise EvaluationError(code, f"{e.source} unavailable ({e.reason})") from e
        except ARADetectorError:
            raise
        except Exception as e:
            raise EvaluationError(code, str(e) or type(e).__name__) from e

        result = build_score_result(code, snapshot)
        logger.debug("%s scored %d (%s)", code, result.composite_score, result.alert_level.value)
        return result

    def evaluate_snapshot(self, instrument: str, snapshot: InstrumentSnapshot) -> ScoreResult:
        """Score an already-normalized snapshot (no fetch)."""
        return build_score_result(clean_ticker(instrument), snapshot)

    def evaluate_batch(self, instruments: Iterable[str], scan_date: DateLike = None) -> BatchResult:
        """
        Evaluate many emiten concurrently. Never raises for a single emiten: each failure is
        collected as BatchItemFailure(instrument, reason). Result order is not guaranteed.
        """
        codes: List[str] = []
        seen = set()
        for raw in instruments:
            code = clean_ticker(raw) or str(raw)
            if code not in seen:
                seen.add(code)
                codes.append(code)
        if not codes:
            return BatchResult()

        day = to_date_str(scan_date)
        results: List[ScoreResult] = []
        failures: List[BatchItemFailure] = []
        logger.info("Scanning %d emiten for %s (%d workers)...", len(codes), day, self.batch_workers)

        with ThreadPoolExecutor(max_workers=min(self.batch_workers, len(codes))) as ex:
            futures = {ex.submit(self.evaluate, code, day): code for code in codes}
            for future in as_completed(futures):
                code = futures[future]
                try:
                    results.append(future.result())
                except EvaluationError as e:
                    logger.warning("Scan failed for %s: %s", code, e.reason)
                    failures.append(BatchItemFailure(code, e.reason))
                except Exception as e:
                    logger.error("Unexpected error scanning %s: %s", code, e, exc_info=True)
                    failures.append(BatchItemFailure(code, str(e) or type(e).__name__))

        logger.info("Scan done: %d OK, %d errors", len(results), len(failures))
        return BatchResult(results=tuple(results), failures=tuple(failures))


def evaluate(provider, instrument: str, scan_date: DateLike = None) -> ScoreResult:
    """Convenience wrapper: ARADetector(provider).evaluate(...)."""
    return ARADetector(provider).evaluate(instrument, scan_date)


def evaluate_batch(
    provider,
    instruments: Iterable[str],
    scan_date: DateLike = None,
    workers: Optional[int] = None,
) -> BatchResult:
    """Convenience wrapper: ARADetector(provider).evaluate_batch(...)."""
    detector = ARADetector(provider, batch_workers=workers or BATCH_SCAN_WORKERS)
    return detector.evaluate_batch(instruments, scan_date)
