"""
Value objects for the ARA detector.
All records are frozen; a ScoreResult is built once per evaluation and never mutated.
"""
from dataclasses import dataclass, asdict
from enum import Enum
from typing import Any, Dict, List, Tuple


class AlertLevel(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


@dataclass(frozen=True)
class InstrumentSnapshot:
    """Canonical numeric features of one emiten for one evaluation date."""
    price: float = 0.0
    previous_close: float = 0.0
    bid_lots: float = 0.0
    offer_lots: float = 0.0
    avg_accumulation_price: float = 0.0
    dominant_accumulator: str = "-"
    accumulation_status: str = "-"
    top3_concentration_pct: float = 0.0
    volume_today: float = 0.0
    recent_volumes: Tuple[float, ...] = ()
    recent_closes: Tuple[float, ...] = ()
    net_foreign_flow: float = 0.0
    sector: str = ""


@dataclass(frozen=True)
class DerivedMetrics:
    """Zero-guarded quantities computed from a snapshot (input to the signal predicates)."""
    bid_offer_ratio: float
    offer_thin: bool
    volume_avg5: int
    volume_spike_multiplier: float
    consecutive_up_days: int
    price_limit_pct: int
    price_limit_value: int
    distance_to_limit_pct: float
    accumulation_below_price: bool
    net_foreign_positive: bool


@dataclass(frozen=True)
class SignalEvaluation:
    code: str
    label: str
    weight: int
    active: bool
    evidence: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class ScoreResult:
    instrument: str
    sector: str
    price: float
    price_limit_value: int
    price_limit_pct: int
    distance_to_limit_pct: float

    avg_accumulation_price: float
    dominant_accumulator: str
    accumulation_below_price: bool
    accumulation_status: str
    top3_concentration_pct: float

    total_bid: float
    total_offer: float
    bid_offer_ratio: float
    offer_thin: bool

    volume_today: float
    volume_avg5: int
    volume_spike_multiplier: float

    consecutive_up_days: int
    net_foreign_flow: float
    net_foreign_positive: bool

    composite_score: int
    signals: Tuple[SignalEvaluation, ...]
    alert_level: AlertLevel
    evaluated_at: str

    @property
    def active_signals(self) -> List[SignalEvaluation]:
        return [s for s in self.signals if s.active]

    def to_dict(self) -> Dict[str, Any]:
        """JSON-ready dict (alert_level as plain string, signals as list of dicts)."""
        out = asdict(self)
        out["signals"] = [s.to_dict() for s in self.signals]
        out["alert_level"] = self.alert_level.value
        return out

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ScoreResult":
        """Rebuild a result from to_dict() output (e.g. a stored record). Unknown keys are ignored."""
        names = set(cls.__dataclass_fields__)
        kwargs = {k: v for k, v in data.items() if k in names}
        kwargs["signals"] = tuple(SignalEvaluation(**s) for s in data.get("signals") or [])
        kwargs["alert_level"] = AlertLevel(data.get("alert_level", AlertLevel.LOW.value))
        return cls(**kwargs)


@dataclass(frozen=True)
class BatchItemFailure:
    instrument: str
    reason: str

    def to_dict(self) -> Dict[str, str]:
        return asdict(self)


@dataclass(frozen=True)
class BatchResult:
    """Outcome of a watchlist scan: successes plus per-emiten failures (order not guaranteed)."""
    results: Tuple[ScoreResult, ...] = ()
    failures: Tuple[BatchItemFailure, ...] = ()

    def ranked(self) -> List[ScoreResult]:
        """Results sorted by composite score, highest first (ties by emiten code)."""
        return sorted(self.results, key=lambda r: (-r.composite_score, r.instrument))

    @property
    def total(self) -> int:
        return len(self.results) + len(self.failures)
