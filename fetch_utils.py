"""
Shared fetch logic for the per-emiten market-data sources.
The reads are independent, so they are issued in parallel; each one settles on its own
(data or error) and a failure never cancels the others.
"""
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Any, Callable, Dict, Optional, Union

from logger_config import get_logger
from config import HISTORICAL_LOOKBACK_CALENDAR_DAYS, HISTORICAL_SESSION_LIMIT, SOURCE_FETCH_WORKERS

logger = get_logger(__name__)

ORDERBOOK = "orderbook"
MARKET_DETECTOR = "market_detector"
HISTORICAL = "historical"
PROFILE = "profile"

# Empty value substituted for a failed source
SOURCE_DEFAULTS = {
    ORDERBOOK: {},
    MARKET_DETECTOR: {},
    HISTORICAL: [],
    PROFILE: {},
}


@dataclass(frozen=True)
class SourceFetch:
    """Settled read of one source: data on success, error message on failure."""
    name: str
    data: Any = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def data_or_default(self) -> Any:
        if self.ok and self.data is not None:
            return self.data
        return SOURCE_DEFAULTS[self.name]


def to_date_str(value: Union[str, date, datetime, None]) -> str:
    """YYYY-MM-DD from a date/datetime/ISO string; None means today."""
    if value is None:
        return date.today().isoformat()
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    return datetime.strptime(str(value)[:10], "%Y-%m-%d").date().isoformat()


def historical_window(scan_date: str) -> Dict[str, Any]:
    """Start/end/limit for the historical summary read of a scan date."""
    end = datetime.strptime(scan_date, "%Y-%m-%d").date()
    start = end - timedelta(days=HISTORICAL_LOOKBACK_CALENDAR_DAYS)
    return {"start_date": start.isoformat(), "end_date": end.isoformat(), "limit": HISTORICAL_SESSION_LIMIT}


def _source_calls(provider, emiten: str, scan_date: str) -> Dict[str, Callable[[], Any]]:
    window = historical_window(scan_date)
    return {
        ORDERBOOK: lambda: provider.get_orderbook(emiten),
        MARKET_DETECTOR: lambda: provider.get_market_detector(emiten, scan_date, scan_date),
        HISTORICAL: lambda: provider.get_historical_summary(
            emiten, window["start_date"], window["end_date"], window["limit"]
        ),
        PROFILE: lambda: provider.get_emiten_info(emiten),
    }


def fetch_sources(provider, emiten: str, scan_date: str, workers: int = SOURCE_FETCH_WORKERS) -> Dict[str, SourceFetch]:
    """
    Fetch orderbook, market detector, historical summary and profile for one emiten in parallel.
    Returns dict source name -> SourceFetch; every source is present whether it succeeded or not.
    """
    calls = _source_calls(provider, emiten, scan_date)
    results: Dict[str, SourceFetch] = {}
    with ThreadPoolExecutor(max_workers=min(workers, len(calls))) as ex:
        futures = {ex.submit(fn): name for name, fn in calls.items()}
        for future in as_completed(futures):
            name = futures[future]
            try:
                results[name] = SourceFetch(name, data=future.result())
            except Exception as e:
                logger.warning("%s fetch failed for %s: %s", name, emiten, e)
                results[name] = SourceFetch(name, error=str(e) or type(e).__name__)
    return results
