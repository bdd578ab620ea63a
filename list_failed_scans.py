"""
List all emiten that failed in the latest scan (from the results store).
Writes data/failed_scan.txt and prints the list.
Run after 01_scan_watchlist.py; the file can be fed back with --watchlist data/failed_scan.txt.
"""
import sys
from pathlib import Path

# Add project root for imports
sys.path.insert(0, str(Path(__file__).resolve().parent))

from ara_store import get_batch_failures
from config import FAILED_SCAN_LIST


def main(scan_date=None):
    failures = sorted(get_batch_failures(scan_date), key=lambda f: f.instrument)

    FAILED_SCAN_LIST.parent.mkdir(parents=True, exist_ok=True)
    if not failures:
        FAILED_SCAN_LIST.write_text("", encoding="utf-8")
        print("No failed emiten in store.")
        print(f"Cleared {FAILED_SCAN_LIST}")
        return 0

    FAILED_SCAN_LIST.write_text("\n".join(f.instrument for f in failures) + "\n", encoding="utf-8")
    print(f"Failed emiten: {len(failures)}")
    print(f"Written to: {FAILED_SCAN_LIST}")
    print()
    for f in failures:
        snippet = (f.reason[:70] + "...") if len(f.reason) > 70 else f.reason
        print(f"  {f.instrument}: {snippet}", flush=True)
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv[1] if len(sys.argv) > 1 else None))
