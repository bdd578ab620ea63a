"""
Signal evaluator: snapshot -> derived metrics -> the 8 weighted ARA signals.
Every signal reads snapshot/derived fields only, never another signal's result.
Weights, labels and thresholds come from ara_config (immutable).
"""
import math
from typing import Optional, Sequence, Tuple

from ara_config import (
    SIGNAL_WEIGHTS,
    SIGNAL_LABELS,
    SIGNAL_ORDER,
    PRICE_LIMIT_TIERS,
    PRICE_LIMIT_TOP_PCT,
    ACCUMULATION_KEYWORD,
    TOP3_CONCENTRATION_MIN_PCT,
    BID_OFFER_RATIO_MIN,
    OFFER_DRAIN_MAX_BID_FRACTION,
    VOLUME_SPIKE_MIN_MULTIPLIER,
    CONSECUTIVE_UP_MIN_DAYS,
    DISTANCE_TO_LIMIT_MAX_PCT,
)
from ara_models import DerivedMetrics, InstrumentSnapshot, SignalEvaluation


def round_half_up(value: float) -> int:
    """Round to the nearest integer, .5 going up (not banker's rounding)."""
    return int(math.floor(value + 0.5))


def is_accumulation_status(status: Optional[str]) -> bool:
    """Broker accdist text classifier: case-insensitive substring match on ACCUMULATION_KEYWORD."""
    return ACCUMULATION_KEYWORD in (status or "").lower()


def get_price_limit_pct(previous_close: float) -> int:
    """ARA percentage for a previous close: <200 → 35, <5000 → 25, otherwise 20."""
    for upper_bound, pct in PRICE_LIMIT_TIERS:
        if previous_close < upper_bound:
            return pct
    return PRICE_LIMIT_TOP_PCT


def calculate_price_limit(previous_close: float) -> int:
    """Today's ARA ceiling from yesterday's close (not snapped to tick size)."""
    pct = get_price_limit_pct(previous_close)
    return round_half_up(previous_close * (1 + pct / 100))


def count_consecutive_up(closes: Sequence[float]) -> int:
    """
    Sessions in a row closing higher, scanning most-recent-first: count while
    close[i] > close[i+1], stop at the first pair that is not higher.
    A non-positive close is treated as missing and also stops the scan.
    """
    count = 0
    for current, previous in zip(closes, closes[1:]):
        if current <= 0 or previous <= 0 or current <= previous:
            break
        count += 1
    return count


def compute_derived_metrics(snapshot: InstrumentSnapshot) -> DerivedMetrics:
    """Ratios and counts used by the predicates. Every division is guarded (0 when denominator is 0)."""
    bid = snapshot.bid_lots
    offer = snapshot.offer_lots
    bid_offer_ratio = bid / offer if offer > 0 else 0.0
    offer_thin = offer > 0 and offer < bid * OFFER_DRAIN_MAX_BID_FRACTION

    volumes = [v for v in snapshot.recent_volumes if v > 0]
    volume_avg5 = round_half_up(sum(volumes) / len(volumes)) if volumes else 0
    volume_spike = round(snapshot.volume_today / volume_avg5, 2) if volume_avg5 > 0 else 0.0

    price = snapshot.price
    limit_pct = get_price_limit_pct(snapshot.previous_close)
    limit_value = calculate_price_limit(snapshot.previous_close)
    if price > 0 and limit_value > 0:
        distance = round((limit_value - price) / price * 100, 2)
    else:
        distance = 0.0

    avg_acc = snapshot.avg_accumulation_price
    return DerivedMetrics(
        bid_offer_ratio=bid_offer_ratio,
        offer_thin=offer_thin,
        volume_avg5=volume_avg5,
        volume_spike_multiplier=volume_spike,
        consecutive_up_days=count_consecutive_up(snapshot.recent_closes),
        price_limit_pct=limit_pct,
        price_limit_value=limit_value,
        distance_to_limit_pct=distance,
        accumulation_below_price=avg_acc > 0 and price > 0 and avg_acc < price,
        net_foreign_positive=snapshot.net_foreign_flow > 0,
    )


def _signal(code: str, active: bool, evidence: str) -> SignalEvaluation:
    return SignalEvaluation(
        code=code,
        label=SIGNAL_LABELS[code],
        weight=SIGNAL_WEIGHTS[code],
        active=bool(active),
        evidence=evidence,
    )


def evaluate_signals(
    snapshot: InstrumentSnapshot,
    derived: Optional[DerivedMetrics] = None,
) -> Tuple[SignalEvaluation, ...]:
    """All 8 signals, in SIGNAL_ORDER, whether active or not."""
    d = derived or compute_derived_metrics(snapshot)
    s = snapshot

    signals = {
        "BANDAR_AKUMULASI": _signal(
            "BANDAR_AKUMULASI",
            is_accumulation_status(s.accumulation_status)
            and s.top3_concentration_pct >= TOP3_CONCENTRATION_MIN_PCT,
            f"{s.top3_concentration_pct:.1f}% | {s.accumulation_status}",
        ),
        "BANDAR_BELOW_HARGA": _signal(
            "BANDAR_BELOW_HARGA",
            d.accumulation_below_price,
            f"Broker avg: {s.avg_accumulation_price:,.0f} ({s.dominant_accumulator}) | Price: {s.price:,.0f}",
        ),
        "BID_OFFER_DOMINAN": _signal(
            "BID_OFFER_DOMINAN",
            d.bid_offer_ratio >= BID_OFFER_RATIO_MIN,
            f"Ratio: {d.bid_offer_ratio:.2f}x",
        ),
        "OFFER_DRAIN": _signal(
            "OFFER_DRAIN",
            d.offer_thin,
            f"Bid: {s.bid_lots:,.0f} | Offer: {s.offer_lots:,.0f} lot",
        ),
        "VOLUME_SPIKE": _signal(
            "VOLUME_SPIKE",
            d.volume_spike_multiplier >= VOLUME_SPIKE_MIN_MULTIPLIER,
            f"{d.volume_spike_multiplier:.2f}x avg ({d.volume_avg5 / 1000:,.0f}K lot avg)",
        ),
        "CONSECUTIVE_UP": _signal(
            "CONSECUTIVE_UP",
            d.consecutive_up_days >= CONSECUTIVE_UP_MIN_DAYS,
            f"{d.consecutive_up_days} sessions up in a row",
        ),
        "FOREIGN_NET_POSITIF": _signal(
            "FOREIGN_NET_POSITIF",
            d.net_foreign_positive,
            f"Net foreign: {s.net_foreign_flow / 1e9:+.2f}B",
        ),
        "JARAK_ARA_DEKAT": _signal(
            "JARAK_ARA_DEKAT",
            0 <= d.distance_to_limit_pct <= DISTANCE_TO_LIMIT_MAX_PCT,
            f"{d.distance_to_limit_pct:.2f}% left to ARA ({d.price_limit_value:,})",
        ),
    }
    return tuple(signals[code] for code in SIGNAL_ORDER)
