"""Tests for ARADetector (single evaluation, batch scan, failure isolation)."""
import pytest
from unittest.mock import MagicMock

from ara_detector import ARADetector, evaluate_batch
from ara_errors import EvaluationError
from ara_models import AlertLevel, BatchResult


def test_evaluate_scores_hot_emiten(provider):
    detector = ARADetector(provider)
    result = detector.evaluate("bbri.jk", "2025-01-16")
    assert result.instrument == "BBRI"
    assert result.composite_score == 100
    assert result.alert_level == AlertLevel.CRITICAL
    assert result.sector == "Finance"
    assert result.dominant_accumulator == "YP"
    provider.get_orderbook.assert_called_once_with("BBRI")


def test_evaluate_orderbook_failure_raises_tagged_error(provider):
    provider.get_orderbook.side_effect = RuntimeError("timeout")
    with pytest.raises(EvaluationError) as exc:
        ARADetector(provider).evaluate("GOTO", "2025-01-16")
    assert exc.value.instrument == "GOTO"
    assert "orderbook" in exc.value.reason
    assert "timeout" in str(exc.value)


def test_evaluate_optional_source_failure_still_scores(provider):
    """Market detector down: accumulation signals inactive, the rest still scored."""
    provider.get_market_detector.side_effect = RuntimeError("detector down")
    result = ARADetector(provider).evaluate("BBRI", "2025-01-16")
    assert result.accumulation_status == "-"
    assert result.dominant_accumulator == "-"
    assert result.composite_score == 100 - 20 - 10
    assert result.alert_level == AlertLevel.HIGH


def test_evaluate_profile_failure_gives_empty_sector(provider):
    provider.get_emiten_info.side_effect = RuntimeError("404")
    result = ARADetector(provider).evaluate("BBRI", "2025-01-16")
    assert result.sector == ""
    assert result.composite_score == 100


def test_evaluate_invalid_code():
    provider = MagicMock()
    with pytest.raises(EvaluationError):
        ARADetector(provider).evaluate("  ", "2025-01-16")
    provider.get_orderbook.assert_not_called()


def test_evaluate_snapshot_no_fetch(hot_snapshot):
    provider = MagicMock()
    result = ARADetector(provider).evaluate_snapshot("tlkm", hot_snapshot())
    assert result.instrument == "TLKM"
    assert result.composite_score == 100
    provider.get_orderbook.assert_not_called()


def test_evaluate_batch_isolates_failures(provider):
    """3 emiten, orderbook fails for one: 2 results + 1 failure, no exception."""
    hot = provider.get_orderbook.return_value

    def orderbook(code):
        if code == "BAD":
            raise RuntimeError("boom")
        return hot

    provider.get_orderbook.side_effect = orderbook
    batch = ARADetector(provider, batch_workers=3).evaluate_batch(["AAA", "BAD", "CCC"], "2025-01-16")
    assert isinstance(batch, BatchResult)
    assert sorted(r.instrument for r in batch.results) == ["AAA", "CCC"]
    assert len(batch.failures) == 1
    assert batch.failures[0].instrument == "BAD"
    assert "boom" in batch.failures[0].reason
    assert batch.total == 3


def test_evaluate_batch_dedupes_and_ranks(provider):
    batch = evaluate_batch(provider, ["bbri", "BBRI", "BBRI.JK", "TLKM"], "2025-01-16", workers=2)
    assert len(batch.results) == 2
    assert [r.instrument for r in batch.ranked()] == ["BBRI", "TLKM"]


def test_evaluate_batch_empty():
    batch = ARADetector(MagicMock()).evaluate_batch([], "2025-01-16")
    assert batch.results == () and batch.failures == ()
    assert batch.total == 0
