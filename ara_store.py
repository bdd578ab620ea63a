"""
Persistence for ARA scan results and per-emiten scan failures.
JSON file at ARA_RESULTS_FILE: {"results": {scan_date: {emiten: record}}, "failures": {scan_date: [...]}, "metadata": {...}}.
One record per (scan_date, emiten); saving again for the same pair replaces it.
Used by 01_scan_watchlist.py, 02_analyze_emiten.py, 03_show_results.py, list_failed_scans.py.
"""
import json
import threading
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Union

from ara_models import AlertLevel, BatchItemFailure, ScoreResult
from logger_config import get_logger
from config import ARA_RESULTS_FILE

logger = get_logger(__name__)

_store_lock = threading.Lock()


def _empty_store() -> Dict[str, Any]:
    return {"results": {}, "failures": {}, "metadata": {}}


def load_store() -> Dict[str, Any]:
    """
    Load the results store. Returns an empty store if the file is missing or invalid.
    """
    if not ARA_RESULTS_FILE.exists():
        return _empty_store()
    try:
        with open(ARA_RESULTS_FILE, "r", encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            logger.debug("Results file content is not a dict")
            return _empty_store()
    except Exception as e:
        logger.debug("Failed to load results from %s: %s", ARA_RESULTS_FILE, e, exc_info=True)
        return _empty_store()
    store = _empty_store()
    for key in store:
        if isinstance(data.get(key), dict):
            store[key] = data[key]
    return store


def save_store(data: Dict[str, Any]) -> None:
    """Save the store to ARA_RESULTS_FILE. Raises on write error."""
    ARA_RESULTS_FILE.parent.mkdir(parents=True, exist_ok=True)
    with open(ARA_RESULTS_FILE, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2, default=str)


def save_ara_result(result: ScoreResult, scan_date: str) -> Dict[str, Any]:
    """Upsert one result under (scan_date, emiten). Returns the stored record."""
    return save_ara_results([result], scan_date)[0]


def save_ara_results(results: Iterable[ScoreResult], scan_date: str) -> List[Dict[str, Any]]:
    """Upsert many results for one scan date in a single write."""
    now = datetime.now(timezone.utc).isoformat()
    records = []
    with _store_lock:
        store = load_store()
        day = store["results"].setdefault(scan_date, {})
        for result in results:
            record = result.to_dict()
            record["scan_date"] = scan_date
            record["scanned_at"] = now
            day[result.instrument] = record
            records.append(record)
        store["metadata"]["last_updated"] = now
        save_store(store)
    logger.debug("Saved %d ARA result(s) for %s", len(records), scan_date)
    return records


def save_batch_failures(failures: Iterable[BatchItemFailure], scan_date: str) -> None:
    """Replace the failure list of a scan date."""
    with _store_lock:
        store = load_store()
        store["failures"][scan_date] = [f.to_dict() for f in failures]
        store["metadata"]["last_updated"] = datetime.now(timezone.utc).isoformat()
        save_store(store)


def _latest_date(section: Dict[str, Any]) -> Optional[str]:
    return max(section) if section else None


def get_ara_results(
    scan_date: Optional[str] = None,
    min_score: Optional[int] = None,
    alert_level: Union[AlertLevel, str, None] = None,
    limit: Optional[int] = None,
) -> List[Dict[str, Any]]:
    """
    Stored records ordered by composite score (highest first).
    scan_date: restrict to one date (default: every date). min_score / alert_level filter;
    limit caps the number of records (None = no cap).
    """
    results = load_store()["results"]
    if scan_date:
        days = [results.get(scan_date, {})]
    else:
        days = list(results.values())

    level = AlertLevel(str(getattr(alert_level, "value", alert_level)).upper()) if alert_level else None
    records = []
    for day in days:
        for record in day.values():
            if min_score is not None and record.get("composite_score", 0) < min_score:
                continue
            if level is not None and record.get("alert_level") != level.value:
                continue
            records.append(record)

    records.sort(key=lambda r: (-r.get("composite_score", 0), r.get("instrument", "")))
    if limit is not None:
        records = records[:limit]
    return records


def get_batch_failures(scan_date: Optional[str] = None) -> List[BatchItemFailure]:
    """Failures of a scan date (default: the most recent date with failures recorded)."""
    failures = load_store()["failures"]
    day = scan_date or _latest_date(failures)
    if not day:
        return []
    return [BatchItemFailure(f.get("instrument", ""), f.get("reason", "")) for f in failures.get(day, [])]
