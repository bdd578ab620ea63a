"""
Watchlist loader: CSV (emiten or symbol column) or legacy one-code-per-line file,
plus extraction of codes from the Stockbit watchlist API response.
Used by 01_scan_watchlist.py.
"""
import csv
from pathlib import Path
from typing import Any, Dict, List

from logger_config import get_logger
from ticker_utils import unique_tickers

logger = get_logger(__name__)

# Accepted code columns in CSV, first match wins
CODE_COLUMNS = ("emiten", "symbol", "company_code", "ticker", "code")


def load_watchlist_csv(path: str) -> List[str]:
    """Load emiten codes from a CSV with one of the CODE_COLUMNS headers."""
    p = Path(path)
    if not p.exists():
        logger.error("Watchlist CSV not found: %s", path)
        return []
    codes: List[str] = []
    with open(p, "r", encoding="utf-8", newline="") as f:
        reader = csv.DictReader(f)
        if not reader.fieldnames:
            return []
        # Normalize field names (strip, lowercase)
        fieldmap = {fn.strip().lower().replace(" ", "_"): fn for fn in reader.fieldnames}
        column = next((fieldmap[c] for c in CODE_COLUMNS if c in fieldmap), None)
        if column is None:
            logger.error("Watchlist CSV %s has no code column (expected one of %s)", path, ", ".join(CODE_COLUMNS))
            return []
        for row in reader:
            codes.append((row.get(column) or "").strip())
    out = unique_tickers(codes)
    logger.info("Loaded %d emiten from watchlist CSV %s", len(out), path)
    return out


def load_watchlist_legacy(path: str) -> List[str]:
    """Load legacy watchlist (one code per line, # comments)."""
    p = Path(path)
    if not p.exists():
        logger.error("Watchlist file not found: %s", path)
        return []
    codes: List[str] = []
    with open(p, "r", encoding="utf-8") as f:
        for line in f:
            code = line.split("#", 1)[0].strip()
            if code:
                codes.append(code)
    out = unique_tickers(codes)
    logger.info("Loaded %d emiten from legacy watchlist %s", len(out), path)
    return out


def load_watchlist(path: str) -> List[str]:
    """
    Load watchlist: .csv files (or files whose first line looks like a CSV header) use the CSV
    format; anything else is one code per line. Returns cleaned, de-duplicated codes.
    """
    p = Path(path)
    if p.suffix.lower() == ".csv":
        return load_watchlist_csv(path)
    if p.exists():
        with open(p, "r", encoding="utf-8") as f:
            first = f.readline().strip().lower()
        if "," in first or first in CODE_COLUMNS:
            return load_watchlist_csv(path)
    return load_watchlist_legacy(path)


def symbols_from_api_watchlist(response: Any) -> List[str]:
    """
    Emiten codes from a watchlist API response (items under data.result, each with
    symbol or company_code). Items without a code are skipped.
    """
    data = response.get("data") if isinstance(response, dict) else None
    items: Any = data.get("result") if isinstance(data, dict) else data
    if not isinstance(items, list):
        logger.warning("Watchlist response has no item list")
        return []
    codes = [watchlist_item_code(item) for item in items if isinstance(item, dict)]
    return unique_tickers(c for c in codes if c)


def watchlist_item_code(item: Dict[str, Any]) -> str:
    """Code of one watchlist item (symbol, else company_code), '' when absent."""
    return str(item.get("symbol") or item.get("company_code") or "")
