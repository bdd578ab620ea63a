"""Tests for ara_report (text report and CSV export)."""
import csv
from dataclasses import replace

from ara_models import AlertLevel, BatchItemFailure, InstrumentSnapshot
from ara_report import count_by_alert_level, export_ara_results_to_csv, generate_ara_report, save_ara_report
from ara_scoring import build_score_result


def _results(hot_snapshot):
    hot = build_score_result("BBRI", hot_snapshot(), evaluated_at="2025-01-16T10:00:00")
    cold = build_score_result("TLKM", InstrumentSnapshot(price=100, previous_close=100), evaluated_at="2025-01-16T10:00:00")
    return [cold, hot]


def test_count_by_alert_level(hot_snapshot):
    counts = count_by_alert_level(_results(hot_snapshot))
    assert counts == {"CRITICAL": 1, "HIGH": 0, "MEDIUM": 0, "LOW": 1}


def test_report_summary_and_ranking(hot_snapshot):
    failures = [BatchItemFailure("GOTO", "orderbook unavailable (timeout)")]
    text = generate_ara_report(_results(hot_snapshot), failures, scan_date="2025-01-16")
    assert "ARA DETECTOR SCAN" in text
    assert "Scan date: 2025-01-16" in text
    assert "Scanned: 3" in text
    assert "Errors: 1" in text
    assert "CRITICAL: 1" in text
    assert "GOTO: orderbook unavailable (timeout)" in text
    assert text.index("| 1 | BBRI |") < text.index("| 2 | TLKM |")
    assert "[x] Volume spike" in text


def test_report_accepts_stored_records(hot_snapshot):
    records = [r.to_dict() for r in _results(hot_snapshot)]
    text = generate_ara_report(records)
    assert "Scored: 2" in text
    assert "Errors: 0" in text


def test_report_empty():
    text = generate_ara_report([])
    assert "(no results)" in text
    assert "===== END ARA SCAN =====" in text


def test_save_report(tmp_path):
    path = save_ara_report("hello", tmp_path / "r" / "report.txt")
    assert (tmp_path / "r" / "report.txt").read_text(encoding="utf-8") == "hello"
    assert path.endswith("report.txt")


def test_export_csv(tmp_path, hot_snapshot):
    results = _results(hot_snapshot)
    results.append(replace(results[0], instrument="ASII", composite_score=40, alert_level=AlertLevel.MEDIUM))
    out = export_ara_results_to_csv(results, tmp_path / "summary.csv")
    with open(out, newline="", encoding="utf-8") as f:
        rows = list(csv.DictReader(f))
    assert [r["emiten"] for r in rows] == ["BBRI", "ASII", "TLKM"]
    assert rows[0]["alert_level"] == "CRITICAL"
    assert rows[0]["active_signals"].split(";")[0] == "BANDAR_AKUMULASI"


def test_export_csv_empty_writes_header(tmp_path):
    out = export_ara_results_to_csv([], tmp_path / "empty.csv")
    with open(out, encoding="utf-8") as f:
        assert f.readline().startswith("emiten,sector,composite_score")
