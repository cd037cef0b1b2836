"""SignalBundle — the typed output of one scoring pass."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class Verdict(str, Enum):
    BUY = "BUY"
    SELL = "SELL"
    HOLD = "HOLD"


# Indicator fields exported under ``signals`` in the latest snapshot, in order.
SIGNAL_FIELDS: tuple[str, ...] = (
    "ret_1d",
    "ret_5d",
    "ema20",
    "ema50",
    "ema_spread",
    "atr14",
    "atr_pct",
    "vol_z60",
    "oi_z60",
    "trend",
    "momentum",
    "participation",
    "risk_penalty",
    "agreement",
)


class SignalBundle(BaseModel):
    """Immutable result of the scoring engine.

    Every intermediate indicator is retained for debugging.  When the
    history is too short the indicator fields stay ``None`` and
    ``reason`` explains why.
    """

    model_config = ConfigDict(frozen=True)

    ret_1d: float | None = None
    ret_5d: float | None = None
    ema20: float | None = None
    ema50: float | None = None
    ema_spread: float | None = None
    atr14: float | None = None
    atr_pct: float | None = None
    vol_z60: float | None = None
    oi_z60: float | None = None
    trend: float | None = None
    momentum: float | None = None
    participation: float | None = None
    risk_penalty: float | None = None
    agreement: float | None = None

    score: float = Field(default=0.0, ge=-1.0, le=1.0)
    verdict: Verdict = Verdict.HOLD
    confidence: int = Field(default=0, ge=0, le=100)
    reason: str | None = None

    @classmethod
    def insufficient(cls, reason: str) -> SignalBundle:
        return cls(score=0.0, verdict=Verdict.HOLD, confidence=0, reason=reason)

    @property
    def is_degenerate(self) -> bool:
        return self.reason is not None

    def signals(self) -> dict[str, Any]:
        """The ``signals`` object of the latest snapshot."""
        if self.reason is not None:
            return {"reason": self.reason}
        return {name: getattr(self, name) for name in SIGNAL_FIELDS}
