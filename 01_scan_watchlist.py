"""
ARA scan 1/3: Evaluate every emiten of the watchlist for ARA potential.
Watchlist comes from the Stockbit account (default) or a local file (--watchlist).
Saves results + failures to the results store and writes a text report (optionally CSV).
"""
import sys
import io
import argparse
from pathlib import Path
from dotenv import load_dotenv
from config import DEFAULT_ENV_PATH, DEFAULT_WATCHLIST_FILE, BATCH_SCAN_WORKERS
from logger_config import setup_logging, get_logger

if Path(DEFAULT_ENV_PATH).exists():
    load_dotenv(Path(DEFAULT_ENV_PATH))

from ara_detector import ARADetector
from ara_errors import StockbitAuthError
from ara_report import count_by_alert_level, export_ara_results_to_csv, generate_ara_report, save_ara_report
from ara_store import save_ara_results, save_batch_failures
from fetch_utils import to_date_str
from stockbit_client import StockbitClient
from watchlist_loader import load_watchlist, symbols_from_api_watchlist

if sys.platform == "win32" and "pytest" not in sys.modules:
    sys.stdout = io.TextIOWrapper(sys.stdout.buffer, encoding="utf-8", errors="replace")
    sys.stderr = io.TextIOWrapper(sys.stderr.buffer, encoding="utf-8", errors="replace")

setup_logging(log_level="INFO", log_to_file=True)
logger = get_logger(__name__)


def main():
    parser = argparse.ArgumentParser(description="01: Scan watchlist for ARA candidates")
    parser.add_argument("--watchlist", nargs="?", const=DEFAULT_WATCHLIST_FILE, default=None,
                        help=f"Local watchlist CSV or .txt instead of the Stockbit watchlist (default file: {DEFAULT_WATCHLIST_FILE})")
    parser.add_argument("--date", default=None, help="Scan date YYYY-MM-DD (default: today)")
    parser.add_argument("--workers", type=int, default=BATCH_SCAN_WORKERS, help=f"Emiten scanned in parallel (default: {BATCH_SCAN_WORKERS})")
    parser.add_argument("--csv", action="store_true", help="Also export a CSV summary")
    parser.add_argument("--token", default=None, help="Stockbit token (default: STOCKBIT_TOKEN from .env)")
    args = parser.parse_args()

    try:
        client = StockbitClient(token=args.token)
    except StockbitAuthError as e:
        print(f"Error: {e}")
        return 1

    scan_date = to_date_str(args.date)
    if args.watchlist:
        emiten = load_watchlist(args.watchlist)
        source = args.watchlist
    else:
        try:
            emiten = symbols_from_api_watchlist(client.get_watchlist())
        except Exception as e:
            logger.exception("Failed to fetch watchlist")
            print(f"Error: could not fetch watchlist ({e})")
            return 1
        source = "Stockbit watchlist"
    if not emiten:
        print(f"No emiten in {source}")
        return 1

    print(f"\n{'='*80}")
    print("01: ARA WATCHLIST SCAN")
    print(f"{'='*80}")
    print(f"Watchlist: {source}")
    print(f"Emiten: {len(emiten)}  Date: {scan_date}  Workers: {args.workers}")
    print(f"{'='*80}\n")

    detector = ARADetector(client, batch_workers=args.workers)
    batch = detector.evaluate_batch(emiten, scan_date)
    ranked = batch.ranked()

    if ranked:
        save_ara_results(ranked, scan_date)
    save_batch_failures(batch.failures, scan_date)

    report = generate_ara_report(ranked, batch.failures, scan_date)
    report_path = save_ara_report(report)
    print(f"Report: {report_path}")
    if args.csv:
        print(f"CSV: {export_ara_results_to_csv(ranked)}")

    counts = count_by_alert_level(ranked)
    print(f"\n{'='*80}")
    print("01 COMPLETE")
    print(f"Total: {batch.total}  Scored: {len(ranked)}  Errors: {len(batch.failures)}")
    print("  ".join(f"{level}: {n}" for level, n in counts.items()))
    for r in ranked[:10]:
        print(f"  {r.instrument:8s} {r.composite_score:3d}  {r.alert_level.value}")
    print(f"{'='*80}\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
