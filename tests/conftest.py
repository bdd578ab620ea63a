"""Shared payloads: one emiten where every ARA signal fires."""
import pytest
from unittest.mock import MagicMock

from ara_models import InstrumentSnapshot

ORDERBOOK_PAYLOAD = {
    "data": {
        "close": 1100,
        "total_bid_offer": {"bid": {"lot": "1,000"}, "offer": {"lot": "300"}},
    }
}

MARKET_DETECTOR_PAYLOAD = {
    "data": {
        "broker_summary": {
            "brokers_buy": [
                {"netbs_broker_code": "CC", "bval": "100", "netbs_buy_avg_price": "1200"},
                {"netbs_broker_code": "YP", "bval": "5,000,000", "netbs_buy_avg_price": "1000"},
            ]
        },
        "bandar_detector": {"broker_accdist": "Big Accumulation", "top3": {"percent": 25}},
    }
}

HISTORICAL_PAYLOAD = [
    {"volume": 1000, "close": 1100, "net_foreign": 5e9},
    {"volume": 100, "close": 1000},
    {"volume": 100, "close": 950},
    {"volume": 100, "close": 960},
    {"volume": 100, "close": 970},
    {"volume": 100, "close": 980},
]

PROFILE_PAYLOAD = {"data": {"sector": "Finance"}}


def make_hot_snapshot(**overrides) -> InstrumentSnapshot:
    """Snapshot with all 8 signals active (score 100)."""
    values = dict(
        price=1100.0,
        previous_close=1000.0,
        bid_lots=1000.0,
        offer_lots=300.0,
        avg_accumulation_price=1000.0,
        dominant_accumulator="YP",
        accumulation_status="Big Accumulation",
        top3_concentration_pct=25.0,
        volume_today=1000.0,
        recent_volumes=(100.0,) * 5,
        recent_closes=(1100.0, 1000.0, 950.0, 960.0),
        net_foreign_flow=5e9,
        sector="Finance",
    )
    values.update(overrides)
    return InstrumentSnapshot(**values)


@pytest.fixture
def provider():
    """MagicMock market-data provider returning the hot payloads."""
    p = MagicMock()
    p.get_orderbook.return_value = ORDERBOOK_PAYLOAD
    p.get_market_detector.return_value = MARKET_DETECTOR_PAYLOAD
    p.get_historical_summary.return_value = HISTORICAL_PAYLOAD
    p.get_emiten_info.return_value = PROFILE_PAYLOAD
    return p


@pytest.fixture
def hot_snapshot():
    """Factory: hot_snapshot(**overrides) -> InstrumentSnapshot."""
    return make_hot_snapshot
