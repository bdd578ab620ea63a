"""
ARA Detector – text report and CSV export.
Consumes stored/serialized result records (ScoreResult.to_dict()) only; no scoring here.
"""
import csv
from collections import Counter
from datetime import datetime
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Union

from ara_config import (
    ALERT_CRITICAL_MIN_SCORE,
    ALERT_HIGH_MIN_SCORE,
    ALERT_MEDIUM_MIN_SCORE,
    SIGNAL_ORDER,
    SIGNAL_WEIGHTS,
    SIGNAL_LABELS,
)
from ara_models import AlertLevel, BatchItemFailure, ScoreResult
from config import REPORTS_DIR, ARA_REPORT_PREFIX, ARA_CSV_PREFIX

CSV_COLUMNS = [
    "emiten", "sector", "composite_score", "alert_level", "price", "price_limit_value",
    "distance_to_limit_pct", "bid_offer_ratio", "volume_spike_multiplier",
    "consecutive_up_days", "net_foreign_flow", "dominant_accumulator", "active_signals",
]

ALERT_ORDER = (AlertLevel.CRITICAL, AlertLevel.HIGH, AlertLevel.MEDIUM, AlertLevel.LOW)

RecordLike = Union[ScoreResult, Dict]


def _as_record(r: RecordLike) -> Dict:
    return r.to_dict() if isinstance(r, ScoreResult) else r


def _safe_float(x, default: float = 0.0, round_to: Optional[int] = None) -> float:
    try:
        v = float(x)
    except (TypeError, ValueError):
        return default
    return round(v, round_to) if round_to is not None else v


def count_by_alert_level(records: Iterable[RecordLike]) -> Dict[str, int]:
    """Number of results per alert level (every level present, 0 when none)."""
    counts = Counter(_as_record(r).get("alert_level", AlertLevel.LOW.value) for r in records)
    return {level.value: counts.get(level.value, 0) for level in ALERT_ORDER}


def _active_codes(r: Dict) -> List[str]:
    return [s.get("code", "") for s in r.get("signals") or [] if s.get("active")]


def _signal_block(r: Dict) -> List[str]:
    lines = [
        f"--- {r.get('instrument', '?')} | score {r.get('composite_score', 0)} | {r.get('alert_level', '?')} ---",
        f"  Price: {_safe_float(r.get('price')):,.0f} | ARA: {r.get('price_limit_value', 0):,} "
        f"(+{r.get('price_limit_pct', 0)}%) | Distance: {_safe_float(r.get('distance_to_limit_pct'), round_to=2)}%",
    ]
    if r.get("sector"):
        lines.append(f"  Sector: {r['sector']}")
    for s in r.get("signals") or []:
        mark = "[x]" if s.get("active") else "[ ]"
        lines.append(f"  {mark} {s.get('label', s.get('code'))} (+{s.get('weight', 0)}): {s.get('evidence', '')}")
    return lines


def generate_ara_report(
    results: Iterable[RecordLike],
    failures: Iterable[BatchItemFailure] = (),
    scan_date: Optional[str] = None,
    report_run_timestamp: Optional[str] = None,
) -> str:
    """
    Scan report: summary (total, errors, count per alert level), ranked table,
    per-emiten signal breakdown, failed emiten and the weight table used.
    """
    if report_run_timestamp is None:
        report_run_timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
    records = sorted(
        (_as_record(r) for r in results),
        key=lambda x: (-int(x.get("composite_score", 0)), x.get("instrument", "")),
    )
    failures = list(failures)
    counts = count_by_alert_level(records)

    lines = [f"Report run: {report_run_timestamp}"]
    if scan_date:
        lines.append(f"Scan date: {scan_date}")
    lines.append("")
    lines.append("=" * 60)
    lines.append("ARA DETECTOR SCAN")
    lines.append("=" * 60)
    lines.append("")
    lines.append("----- Summary -----")
    lines.append(f"Scanned: {len(records) + len(failures)}")
    lines.append(f"Scored: {len(records)}")
    lines.append(f"Errors: {len(failures)}")
    for level in ALERT_ORDER:
        lines.append(f"{level.value}: {counts[level.value]}")
    lines.append("")

    lines.append("----- Ranked Table -----")
    lines.append("| Rank | Emiten | Score | Alert | Price | ARA | Dist % | B/O | Vol x | Signals |")
    lines.append("|" + "---|" * 10)
    for i, r in enumerate(records, 1):
        lines.append(
            f"| {i} | {r.get('instrument', '?')} | {r.get('composite_score', 0)} | {r.get('alert_level', '?')} "
            f"| {_safe_float(r.get('price')):,.0f} | {r.get('price_limit_value', 0):,} "
            f"| {_safe_float(r.get('distance_to_limit_pct'), round_to=2)} "
            f"| {_safe_float(r.get('bid_offer_ratio'), round_to=2)} "
            f"| {_safe_float(r.get('volume_spike_multiplier'), round_to=2)} "
            f"| {', '.join(_active_codes(r)) or '-'} |"
        )
    if not records:
        lines.append("  (no results)")
    lines.append("")

    lines.append("----- Signal breakdown (per emiten) -----")
    for r in records:
        lines.extend(_signal_block(r))
        lines.append("")

    lines.append("----- Errors -----")
    for f in failures:
        lines.append(f"  {f.instrument}: {f.reason}")
    if not failures:
        lines.append("  None")
    lines.append("")

    lines.append("----- Weights & alert bands (ara_config) -----")
    for code in SIGNAL_ORDER:
        lines.append(f"  {code:<20} {SIGNAL_WEIGHTS[code]:>3}  {SIGNAL_LABELS[code]}")
    lines.append(
        f"  CRITICAL ≥ {ALERT_CRITICAL_MIN_SCORE} | HIGH ≥ {ALERT_HIGH_MIN_SCORE} "
        f"| MEDIUM ≥ {ALERT_MEDIUM_MIN_SCORE} | LOW below"
    )
    lines.append("===== END ARA SCAN =====")
    return "\n".join(lines)


def default_report_path(prefix: str, suffix: str) -> Path:
    return REPORTS_DIR / f"{prefix}{datetime.now().strftime('%Y%m%d_%H%M%S')}{suffix}"


def save_ara_report(report: str, filepath: Optional[Path] = None) -> str:
    """Write a report to REPORTS_DIR (timestamped name by default)."""
    filepath = Path(filepath) if filepath else default_report_path(ARA_REPORT_PREFIX, ".txt")
    filepath.parent.mkdir(parents=True, exist_ok=True)
    filepath.write_text(report, encoding="utf-8")
    return str(filepath)


def export_ara_results_to_csv(results: Iterable[RecordLike], filepath: Optional[Path] = None) -> str:
    """
    CSV export, one row per emiten, ranked by score.
    Columns: CSV_COLUMNS (active_signals is a ';'-joined list of signal codes).
    """
    filepath = Path(filepath) if filepath else default_report_path(ARA_CSV_PREFIX, ".csv")
    filepath.parent.mkdir(parents=True, exist_ok=True)

    records = sorted(
        (_as_record(r) for r in results),
        key=lambda x: (-int(x.get("composite_score", 0)), x.get("instrument", "")),
    )
    rows = []
    for r in records:
        rows.append({
            "emiten": r.get("instrument", ""),
            "sector": r.get("sector", ""),
            "composite_score": r.get("composite_score", 0),
            "alert_level": r.get("alert_level", ""),
            "price": _safe_float(r.get("price"), round_to=2),
            "price_limit_value": r.get("price_limit_value", 0),
            "distance_to_limit_pct": _safe_float(r.get("distance_to_limit_pct"), round_to=2),
            "bid_offer_ratio": _safe_float(r.get("bid_offer_ratio"), round_to=2),
            "volume_spike_multiplier": _safe_float(r.get("volume_spike_multiplier"), round_to=2),
            "consecutive_up_days": r.get("consecutive_up_days", 0),
            "net_foreign_flow": _safe_float(r.get("net_foreign_flow"), round_to=0),
            "dominant_accumulator": r.get("dominant_accumulator", ""),
            "active_signals": ";".join(_active_codes(r)),
        })

    with open(filepath, "w", newline="", encoding="utf-8") as f:
        w = csv.DictWriter(f, fieldnames=CSV_COLUMNS)
        w.writeheader()
        w.writerows(rows)
    return str(filepath)
