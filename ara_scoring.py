"""
Aggregator / classifier: active signal weights -> composite score -> alert level,
and assembly of the immutable ScoreResult.
"""
from datetime import datetime, timezone
from typing import Iterable, Optional

from ara_config import ALERT_CRITICAL_MIN_SCORE, ALERT_HIGH_MIN_SCORE, ALERT_MEDIUM_MIN_SCORE
from ara_models import AlertLevel, InstrumentSnapshot, ScoreResult, SignalEvaluation
from ara_signals import compute_derived_metrics, evaluate_signals


def composite_score(signals: Iterable[SignalEvaluation]) -> int:
    """Sum of weights of the active signals (0–100 with the fixed weight table)."""
    return sum(s.weight for s in signals if s.active)


def alert_level_for_score(score: int) -> AlertLevel:
    """≥75 CRITICAL, 55-74 HIGH, 35-54 MEDIUM, <35 LOW."""
    if score >= ALERT_CRITICAL_MIN_SCORE:
        return AlertLevel.CRITICAL
    if score >= ALERT_HIGH_MIN_SCORE:
        return AlertLevel.HIGH
    if score >= ALERT_MEDIUM_MIN_SCORE:
        return AlertLevel.MEDIUM
    return AlertLevel.LOW


def build_score_result(
    instrument: str,
    snapshot: InstrumentSnapshot,
    evaluated_at: Optional[str] = None,
) -> ScoreResult:
    """Run evaluation + aggregation on a snapshot. evaluated_at defaults to now (UTC, ISO)."""
    derived = compute_derived_metrics(snapshot)
    signals = evaluate_signals(snapshot, derived)
    score = composite_score(signals)

    return ScoreResult(
        instrument=instrument,
        sector=snapshot.sector,
        price=snapshot.price,
        price_limit_value=derived.price_limit_value,
        price_limit_pct=derived.price_limit_pct,
        distance_to_limit_pct=derived.distance_to_limit_pct,
        avg_accumulation_price=snapshot.avg_accumulation_price,
        dominant_accumulator=snapshot.dominant_accumulator,
        accumulation_below_price=derived.accumulation_below_price,
        accumulation_status=snapshot.accumulation_status,
        top3_concentration_pct=snapshot.top3_concentration_pct,
        total_bid=snapshot.bid_lots,
        total_offer=snapshot.offer_lots,
        bid_offer_ratio=derived.bid_offer_ratio,
        offer_thin=derived.offer_thin,
        volume_today=snapshot.volume_today,
        volume_avg5=derived.volume_avg5,
        volume_spike_multiplier=derived.volume_spike_multiplier,
        consecutive_up_days=derived.consecutive_up_days,
        net_foreign_flow=snapshot.net_foreign_flow,
        net_foreign_positive=derived.net_foreign_positive,
        composite_score=score,
        signals=signals,
        alert_level=alert_level_for_score(score),
        evaluated_at=evaluated_at or datetime.now(timezone.utc).isoformat(),
    )
