"""
ARA scan 3/3: Show stored scan results, highest score first.
Filters: --date, --min-score, --alert-level, --limit.
"""
import sys
import argparse

from ara_models import AlertLevel
from ara_store import get_ara_results
from config import DEFAULT_RESULTS_LIMIT


def format_result_line(rank: int, r: dict) -> str:
    active = [s.get("code", "") for s in r.get("signals") or [] if s.get("active")]
    return (
        f"{rank:>3}. {r.get('scan_date', ''):10s} {r.get('instrument', '?'):8s} "
        f"{r.get('composite_score', 0):>3}  {r.get('alert_level', '?'):8s} {', '.join(active) or '-'}"
    )


def main(argv=None):
    parser = argparse.ArgumentParser(description="03: Show stored ARA results")
    parser.add_argument("--date", default=None, help="Scan date YYYY-MM-DD (default: all dates)")
    parser.add_argument("--min-score", type=int, default=None, help="Minimum composite score")
    parser.add_argument("--alert-level", choices=[a.value for a in AlertLevel], type=str.upper, default=None,
                        help="Only this alert level")
    parser.add_argument("--limit", type=int, default=DEFAULT_RESULTS_LIMIT, help=f"Max rows (default: {DEFAULT_RESULTS_LIMIT})")
    args = parser.parse_args(argv)

    records = get_ara_results(
        scan_date=args.date,
        min_score=args.min_score,
        alert_level=args.alert_level,
        limit=args.limit,
    )
    if not records:
        print("No stored results match. Run 01_scan_watchlist.py first.")
        return 0

    print(f"Results: {len(records)}")
    for i, r in enumerate(records, 1):
        print(format_result_line(i, r))
    return 0


if __name__ == "__main__":
    sys.exit(main())
