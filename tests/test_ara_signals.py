"""Tests for ara_signals (price limit tiers, derived metrics, signal predicates)."""
import pytest

from ara_config import SIGNAL_ORDER, SIGNAL_WEIGHTS
from ara_models import InstrumentSnapshot
from ara_signals import (
    calculate_price_limit,
    compute_derived_metrics,
    count_consecutive_up,
    evaluate_signals,
    get_price_limit_pct,
    is_accumulation_status,
    round_half_up,
)


@pytest.mark.parametrize("previous_close,pct", [(50, 35), (199, 35), (200, 25), (4999, 25), (5000, 20), (25000, 20)])
def test_price_limit_pct_tiers(previous_close, pct):
    assert get_price_limit_pct(previous_close) == pct


def test_calculate_price_limit():
    assert calculate_price_limit(1000) == 1250
    assert calculate_price_limit(5000) == 6000
    assert calculate_price_limit(0) == 0


def test_round_half_up():
    assert round_half_up(2.5) == 3
    assert round_half_up(3.5) == 4
    assert round_half_up(2.4) == 2


def test_distance_to_limit_example():
    """previous close 1000, price 1100 -> limit 1250, distance 13.64%, JARAK_ARA_DEKAT active."""
    snap = InstrumentSnapshot(price=1100, previous_close=1000)
    d = compute_derived_metrics(snap)
    assert d.price_limit_pct == 25
    assert d.price_limit_value == 1250
    assert d.distance_to_limit_pct == 13.64
    signals = {s.code: s for s in evaluate_signals(snap, d)}
    assert signals["JARAK_ARA_DEKAT"].active is True


def test_distance_far_from_limit_inactive():
    snap = InstrumentSnapshot(price=800, previous_close=1000)
    signals = {s.code: s for s in evaluate_signals(snap)}
    assert compute_derived_metrics(snap).distance_to_limit_pct == 56.25
    assert signals["JARAK_ARA_DEKAT"].active is False


def test_price_above_limit_inactive():
    """Negative distance (price above computed limit) is not 'near'."""
    snap = InstrumentSnapshot(price=1300, previous_close=1000)
    signals = {s.code: s for s in evaluate_signals(snap)}
    assert signals["JARAK_ARA_DEKAT"].active is False


def test_zero_offer_gives_zero_ratio():
    d = compute_derived_metrics(InstrumentSnapshot(price=100, bid_lots=5000, offer_lots=0))
    assert d.bid_offer_ratio == 0.0
    assert d.offer_thin is False


def test_offer_drain_threshold():
    assert compute_derived_metrics(InstrumentSnapshot(bid_lots=1000, offer_lots=399)).offer_thin is True
    assert compute_derived_metrics(InstrumentSnapshot(bid_lots=1000, offer_lots=400)).offer_thin is False


def test_volume_average_ignores_zero_sessions():
    snap = InstrumentSnapshot(volume_today=600, recent_volumes=(100, 0, 200, 300, 0))
    d = compute_derived_metrics(snap)
    assert d.volume_avg5 == 200
    assert d.volume_spike_multiplier == 3.0


def test_no_volume_history_gives_zero_multiplier():
    d = compute_derived_metrics(InstrumentSnapshot(volume_today=1000))
    assert d.volume_avg5 == 0
    assert d.volume_spike_multiplier == 0.0


def test_zero_accumulation_price_not_below():
    d = compute_derived_metrics(InstrumentSnapshot(price=1000, avg_accumulation_price=0))
    assert d.accumulation_below_price is False


@pytest.mark.parametrize("closes,expected", [
    ([110, 105, 100, 98], 3),
    ([110, 105, 106], 1),
    ([100, 100, 90], 0),
    ([90, 100], 0),
    ([110, 0, 100], 0),
    ([110], 0),
    ([], 0),
])
def test_count_consecutive_up(closes, expected):
    assert count_consecutive_up(closes) == expected


@pytest.mark.parametrize("status,expected", [
    ("Strong Accumulation", True),
    ("big ACCUM", True),
    ("Distribution", False),
    ("-", False),
    (None, False),
])
def test_is_accumulation_status(status, expected):
    assert is_accumulation_status(status) is expected


def test_bandar_accumulation_example():
    snap = InstrumentSnapshot(accumulation_status="Strong Accumulation", top3_concentration_pct=25)
    sig = {s.code: s for s in evaluate_signals(snap)}["BANDAR_AKUMULASI"]
    assert sig.active is True
    assert sig.weight == 20
    assert "25.0%" in sig.evidence


def test_bandar_accumulation_needs_concentration():
    snap = InstrumentSnapshot(accumulation_status="Strong Accumulation", top3_concentration_pct=19.9)
    assert {s.code: s for s in evaluate_signals(snap)}["BANDAR_AKUMULASI"].active is False


def test_all_signals_listed_in_order():
    signals = evaluate_signals(InstrumentSnapshot())
    assert tuple(s.code for s in signals) == SIGNAL_ORDER
    assert all(s.weight == SIGNAL_WEIGHTS[s.code] for s in signals)
    assert all(s.label for s in signals)


def test_hot_snapshot_activates_every_signal(hot_snapshot):
    signals = evaluate_signals(hot_snapshot())
    assert all(s.active for s in signals), [s.code for s in signals if not s.active]
