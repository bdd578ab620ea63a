"""
Data normalizer: raw orderbook, market-detector and historical-summary payloads
-> InstrumentSnapshot.
Pure functions; no network or storage. Malformed numeric fields become 0 (logged at debug),
missing sources are passed in as empty dicts/lists by the caller.
"""
import math
import re
from typing import Any, Dict, List, Optional, Tuple

import pandas as pd

from ara_config import VOLUME_AVG_SESSIONS
from ara_models import InstrumentSnapshot
from logger_config import get_logger

logger = get_logger(__name__)

# Thousands separators, inner spaces and a percent sign; anything else makes the field malformed
_SEPARATORS = re.compile(r"[,\s%]")
_EMPTY_MARKERS = ("", "-", "nan", "none", "null", "n/a")

# Historical column name variants -> canonical name
HISTORICAL_COLUMNS = {
    "volume": ["volume", "vol", "Volume", "VOLUME"],
    "close": ["close", "last", "Close", "CLOSE"],
    "net_foreign": ["net_foreign", "foreign_net", "netforeign", "NetForeign"],
}


def parse_number(value: Any) -> float:
    """
    Parse a numeric field defensively.
    Numbers pass through. Strings are parsed as-is first ("1.5e9"), then without thousands
    separators or a percent sign ("1,234" -> 1234, "25.5%" -> 25.5). Absent/unparseable/non-finite -> 0.0.
    """
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        text = str(value).strip()
        if text.lower() in _EMPTY_MARKERS:
            return 0.0
        try:
            number = float(text)
        except ValueError:
            try:
                number = float(_SEPARATORS.sub("", text))
            except ValueError:
                logger.debug("Malformed numeric field %r treated as 0", value)
                return 0.0
    if not math.isfinite(number):
        return 0.0
    return number


def _unwrap(payload: Any) -> Dict:
    """Return the inner object of an API envelope ({"data": {...}}) or the payload itself."""
    if not isinstance(payload, dict):
        return {}
    inner = payload.get("data")
    if isinstance(inner, dict):
        return inner
    return payload


def _section(obj: Dict, key: str) -> Dict:
    """Nested object under key, or {} when absent or not an object."""
    value = obj.get(key)
    return value if isinstance(value, dict) else {}


def _text(value: Any, default: str) -> str:
    text = str(value).strip() if value is not None else ""
    return text or default


# ----------------------------------------------------------------------------
# Orderbook
# ----------------------------------------------------------------------------

def parse_orderbook(raw: Any) -> Dict[str, float]:
    """Last price and aggregate bid/offer lots from an orderbook payload."""
    ob = _unwrap(raw)
    totals = _section(ob, "total_bid_offer")
    bid = _section(totals, "bid")
    offer = _section(totals, "offer")
    price = parse_number(ob.get("close")) or parse_number(ob.get("lastprice"))
    return {
        "price": price,
        "bid_lots": parse_number(bid.get("lot")),
        "offer_lots": parse_number(offer.get("lot")),
    }


# ----------------------------------------------------------------------------
# Broker accumulation (market detector)
# ----------------------------------------------------------------------------

def get_top_broker(detector: Dict) -> Optional[Tuple[str, float]]:
    """
    Dominant accumulator: the net-buy broker with the largest buy value.
    Returns (broker_code, avg_buy_price) or None when the summary has no buyers.
    """
    summary = _section(detector, "broker_summary")
    buyers = [b for b in (summary.get("brokers_buy") or []) if isinstance(b, dict)]
    if not buyers:
        return None
    top = max(buyers, key=lambda b: parse_number(b.get("bval")))
    code = _text(top.get("netbs_broker_code") or top.get("broker_code") or top.get("code"), "-")
    avg_price = parse_number(top.get("netbs_buy_avg_price") or top.get("avg_price"))
    return code, avg_price


def parse_accumulation(raw: Any) -> Dict[str, Any]:
    """Average accumulation price, dominant broker, accdist status and top-3 share."""
    detector = _unwrap(raw)
    bandar = _section(detector, "bandar_detector")
    top3 = _section(bandar, "top3")

    top_broker = get_top_broker(detector)
    if top_broker is not None:
        broker, avg_price = top_broker
    else:
        broker = "-"
        average = bandar.get("average", bandar.get("avg"))
        if isinstance(average, dict):
            average = average.get("price")
        avg_price = parse_number(average)

    return {
        "avg_price": avg_price,
        "broker": broker,
        "status": _text(bandar.get("broker_accdist"), "-"),
        "top3_pct": parse_number(top3.get("percent")),
    }


# ----------------------------------------------------------------------------
# Historical summary
# ----------------------------------------------------------------------------

def _historical_rows(raw: Any) -> List[Dict]:
    if isinstance(raw, dict):
        inner = raw.get("data", raw)
        if isinstance(inner, dict):
            inner = inner.get("result", [])
        raw = inner
    if not isinstance(raw, list):
        return []
    return [row for row in raw if isinstance(row, dict)]


def historical_to_frame(raw: Any) -> pd.DataFrame:
    """
    Historical sessions (most recent first) as a DataFrame with numeric columns
    volume, close, net_foreign. Missing columns are filled with 0.
    """
    rows = _historical_rows(raw)
    df = pd.DataFrame(rows)
    out = pd.DataFrame(index=range(len(df)))
    for target, variations in HISTORICAL_COLUMNS.items():
        source = next((v for v in variations if v in df.columns), None)
        if source is None:
            out[target] = 0.0
        else:
            out[target] = df[source].map(parse_number).astype(float).values
    return out


def parse_historical(raw: Any) -> Dict[str, Any]:
    """Today's volume, previous sessions' volumes, closes and today's net foreign flow."""
    hist = historical_to_frame(raw)
    if hist.empty:
        return {"volume_today": 0.0, "recent_volumes": (), "recent_closes": (), "net_foreign_flow": 0.0}

    previous = hist["volume"].iloc[1:1 + VOLUME_AVG_SESSIONS]
    return {
        "volume_today": float(hist["volume"].iloc[0]),
        "recent_volumes": tuple(float(v) for v in previous if v > 0),
        "recent_closes": tuple(float(c) for c in hist["close"]),
        "net_foreign_flow": float(hist["net_foreign"].iloc[0]),
    }


# ----------------------------------------------------------------------------
# Snapshot
# ----------------------------------------------------------------------------

def build_snapshot(
    orderbook: Any,
    market_detector: Any = None,
    historical: Any = None,
    profile: Any = None,
) -> InstrumentSnapshot:
    """
    Assemble the canonical snapshot from the raw sources.
    previous_close is the close of session index 1 (index 0 is today); when it is
    missing the current price is used.
    """
    ob = parse_orderbook(orderbook)
    acc = parse_accumulation(market_detector)
    hist = parse_historical(historical)

    closes = hist["recent_closes"]
    previous_close = closes[1] if len(closes) > 1 and closes[1] > 0 else ob["price"]

    return InstrumentSnapshot(
        price=ob["price"],
        previous_close=previous_close,
        bid_lots=ob["bid_lots"],
        offer_lots=ob["offer_lots"],
        avg_accumulation_price=acc["avg_price"],
        dominant_accumulator=acc["broker"],
        accumulation_status=acc["status"],
        top3_concentration_pct=acc["top3_pct"],
        volume_today=hist["volume_today"],
        recent_volumes=hist["recent_volumes"],
        recent_closes=closes,
        net_foreign_flow=hist["net_foreign_flow"],
        sector=_text(_unwrap(profile).get("sector"), ""),
    )
