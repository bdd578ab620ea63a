"""Tests for fetch_utils (parallel per-emiten source reads)."""
import threading
from datetime import date, datetime

import pytest

from fetch_utils import (
    HISTORICAL,
    MARKET_DETECTOR,
    ORDERBOOK,
    PROFILE,
    SourceFetch,
    fetch_sources,
    historical_window,
    to_date_str,
)


def test_to_date_str_variants():
    assert to_date_str("2025-01-16") == "2025-01-16"
    assert to_date_str("2025-01-16T09:30:00") == "2025-01-16"
    assert to_date_str(date(2025, 1, 16)) == "2025-01-16"
    assert to_date_str(datetime(2025, 1, 16, 9, 30)) == "2025-01-16"
    assert to_date_str(None) == date.today().isoformat()


def test_to_date_str_rejects_garbage():
    with pytest.raises(ValueError):
        to_date_str("yesterday")


def test_historical_window():
    assert historical_window("2025-01-16") == {"start_date": "2025-01-01", "end_date": "2025-01-16", "limit": 10}


def test_fetch_sources_calls_every_source(provider):
    fetched = fetch_sources(provider, "BBRI", "2025-01-16")
    assert set(fetched) == {ORDERBOOK, MARKET_DETECTOR, HISTORICAL, PROFILE}
    assert all(f.ok for f in fetched.values())
    provider.get_orderbook.assert_called_once_with("BBRI")
    provider.get_market_detector.assert_called_once_with("BBRI", "2025-01-16", "2025-01-16")
    provider.get_historical_summary.assert_called_once_with("BBRI", "2025-01-01", "2025-01-16", 10)
    provider.get_emiten_info.assert_called_once_with("BBRI")


def test_fetch_sources_failure_does_not_cancel_others(provider, caplog):
    provider.get_market_detector.side_effect = RuntimeError("detector down")
    fetched = fetch_sources(provider, "BBRI", "2025-01-16")
    assert fetched[MARKET_DETECTOR].ok is False
    assert fetched[MARKET_DETECTOR].error == "detector down"
    assert fetched[MARKET_DETECTOR].data_or_default() == {}
    assert fetched[ORDERBOOK].ok and fetched[HISTORICAL].ok and fetched[PROFILE].ok
    assert "detector down" in caplog.text


def test_source_fetch_defaults():
    assert SourceFetch(HISTORICAL, error="x").data_or_default() == []
    assert SourceFetch(PROFILE, data=None).data_or_default() == {}
    assert SourceFetch(ORDERBOOK, data={"close": 1}).data_or_default() == {"close": 1}


def test_fetch_sources_reads_run_concurrently(provider):
    """Every read blocks until all four are in flight; a sequential fetch would break the barrier."""
    barrier = threading.Barrier(4, timeout=2)

    def waiting(payload):
        def read(*args):
            barrier.wait()
            return payload
        return read

    provider.get_orderbook.side_effect = waiting(provider.get_orderbook.return_value)
    provider.get_market_detector.side_effect = waiting(provider.get_market_detector.return_value)
    provider.get_historical_summary.side_effect = waiting(provider.get_historical_summary.return_value)
    provider.get_emiten_info.side_effect = waiting(provider.get_emiten_info.return_value)

    fetched = fetch_sources(provider, "BBRI", "2025-01-16", workers=4)
    assert all(f.ok for f in fetched.values()), {n: f.error for n, f in fetched.items() if not f.ok}
    assert fetched[ORDERBOOK].data["data"]["close"] == 1100
    assert not barrier.broken
