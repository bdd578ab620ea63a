"""
ARA Detector – Configuration
Used by ara_signals, ara_scoring and ara_report.
Signal thresholds, the fixed weight table and alert bands. The weights are a manual
heuristic (not calibrated) and must always sum to 100.
"""
from types import MappingProxyType

# ----------------------------------------------------------------------------
# PRICE LIMIT (ARA) TIERS – fixed exchange rule, based on previous close
# ----------------------------------------------------------------------------
# previous_close < 200      → 35%
# 200 ≤ previous_close < 5000 → 25%
# previous_close ≥ 5000     → 20%
PRICE_LIMIT_TIERS = (
    (200, 35),
    (5000, 25),
)
PRICE_LIMIT_TOP_PCT = 20

# ----------------------------------------------------------------------------
# SIGNAL WEIGHTS – contribution of each active signal to the composite (total 100)
# ----------------------------------------------------------------------------
SIGNAL_WEIGHTS = MappingProxyType({
    "BANDAR_AKUMULASI": 20,      # top3 brokers ≥ 20% and status says accumulation
    "BANDAR_BELOW_HARGA": 10,    # dominant broker's average still below market
    "BID_OFFER_DOMINAN": 20,     # bid/offer ratio ≥ 2.0
    "OFFER_DRAIN": 15,           # offer < 0.4x bid (supply absorbed)
    "VOLUME_SPIKE": 15,          # volume ≥ 2x avg of previous 5 sessions
    "CONSECUTIVE_UP": 10,        # closed higher ≥ 2 sessions in a row
    "FOREIGN_NET_POSITIF": 5,    # net foreign buy
    "JARAK_ARA_DEKAT": 5,        # within 15% of the price limit
})

# Evaluation order of the signals (results always list all of them in this order)
SIGNAL_ORDER = tuple(SIGNAL_WEIGHTS.keys())

SIGNAL_LABELS = MappingProxyType({
    "BANDAR_AKUMULASI": "Broker accumulation (top3 ≥ 20%)",
    "BANDAR_BELOW_HARGA": "Broker avg price below market",
    "BID_OFFER_DOMINAN": "Bid/Offer ratio ≥ 2.0x",
    "OFFER_DRAIN": "Thin offer (supply absorbed)",
    "VOLUME_SPIKE": "Volume spike ≥ 2x avg-5",
    "CONSECUTIVE_UP": "Up ≥ 2 sessions in a row",
    "FOREIGN_NET_POSITIF": "Net foreign positive",
    "JARAK_ARA_DEKAT": "Distance to ARA ≤ 15%",
})


def validate_signal_table(weights, labels) -> None:
    """Raise ValueError unless the weights sum to 100 and every weighted signal has a label."""
    total = sum(weights.values())
    if total != 100:
        raise ValueError(f"signal weights must sum to 100, got {total}")
    if set(labels) != set(weights):
        raise ValueError(f"signal labels do not match weights: {sorted(set(labels) ^ set(weights))}")


validate_signal_table(SIGNAL_WEIGHTS, SIGNAL_LABELS)

# ----------------------------------------------------------------------------
# SIGNAL THRESHOLDS
# ----------------------------------------------------------------------------
ACCUMULATION_KEYWORD = "accum"        # case-insensitive substring of broker_accdist
TOP3_CONCENTRATION_MIN_PCT = 20.0     # BANDAR_AKUMULASI
BID_OFFER_RATIO_MIN = 2.0             # BID_OFFER_DOMINAN
OFFER_DRAIN_MAX_BID_FRACTION = 0.4    # OFFER_DRAIN: offer < bid * this
VOLUME_SPIKE_MIN_MULTIPLIER = 2.0     # VOLUME_SPIKE
VOLUME_AVG_SESSIONS = 5               # sessions 1..5 (today excluded)
CONSECUTIVE_UP_MIN_DAYS = 2           # CONSECUTIVE_UP
DISTANCE_TO_LIMIT_MAX_PCT = 15.0      # JARAK_ARA_DEKAT: 0 ≤ distance ≤ this

# ----------------------------------------------------------------------------
# ALERT BANDS – inclusive lower bounds, checked high to low
# ----------------------------------------------------------------------------
ALERT_CRITICAL_MIN_SCORE = 75   # ≥75 → CRITICAL
ALERT_HIGH_MIN_SCORE = 55       # 55–74 → HIGH
ALERT_MEDIUM_MIN_SCORE = 35     # 35–54 → MEDIUM
# <35 → LOW
