"""
ARA scan 2/3: Analyze a single emiten and print the signal breakdown.
Optionally saves the result to the results store (--save).
"""
import sys
import argparse
from pathlib import Path
from dotenv import load_dotenv
from config import DEFAULT_ENV_PATH
from logger_config import setup_logging, get_logger

if Path(DEFAULT_ENV_PATH).exists():
    load_dotenv(Path(DEFAULT_ENV_PATH))

from ara_detector import ARADetector
from ara_errors import EvaluationError, StockbitAuthError
from ara_report import generate_ara_report
from ara_store import save_ara_result
from fetch_utils import to_date_str
from stockbit_client import StockbitClient

setup_logging(log_level="INFO", log_to_file=True)
logger = get_logger(__name__)


def main():
    parser = argparse.ArgumentParser(description="02: Analyze one emiten for ARA potential")
    parser.add_argument("emiten", help="Emiten code, e.g. BBRI")
    parser.add_argument("--date", default=None, help="Scan date YYYY-MM-DD (default: today)")
    parser.add_argument("--save", action="store_true", help="Save the result to the results store")
    parser.add_argument("--token", default=None, help="Stockbit token (default: STOCKBIT_TOKEN from .env)")
    args = parser.parse_args()

    emiten = args.emiten.strip().upper()
    scan_date = to_date_str(args.date)
    try:
        detector = ARADetector(StockbitClient(token=args.token))
        result = detector.evaluate(emiten, scan_date)
    except (EvaluationError, StockbitAuthError) as e:
        print(f"Error: {e}")
        return 1

    print(generate_ara_report([result], scan_date=scan_date))
    if args.save:
        save_ara_result(result, scan_date)
        print(f"Saved {result.instrument} ({scan_date})")
    return 0


if __name__ == "__main__":
    sys.exit(main())
