"""Bar — one trading day's settlement for a single instrument."""

from __future__ import annotations

import dataclasses
import math
from datetime import date
from typing import Any

from bullion.core.errors import BarValidationError

_OHLC_FIELDS = ("open", "high", "low", "close")
_OPTIONAL_NUMERIC = ("prev_close", "volume", "value", "open_interest")


def is_finite_number(v: Any) -> bool:
    return (
        isinstance(v, (int, float))
        and not isinstance(v, bool)
        and math.isfinite(v)
    )


@dataclasses.dataclass(frozen=True, slots=True)
class Bar:
    """Immutable daily OHLC bar with optional volume / open-interest.

    ``prev_close`` is carried from the source file for audit only; true
    range always uses the previous *stored* bar's close.
    """

    date: date
    open: float
    high: float
    low: float
    close: float
    prev_close: float | None = None
    volume: float | None = None
    value: float | None = None
    open_interest: float | None = None
    expiry: str | None = None
    exchange: str = "MCX"
    instrument: str = "GOLD"
    updated: str | None = None
    source: str | None = None

    def __post_init__(self) -> None:
        ohlc = {f: getattr(self, f) for f in _OHLC_FIELDS}
        where = f"{self.instrument} {self.date}"

        bad = [f for f, v in ohlc.items() if not is_finite_number(v)]
        if bad:
            raise BarValidationError(
                f"OHLC not numeric for {where}: {', '.join(bad)}", parsed=ohlc
            )
        non_positive = [f for f, v in ohlc.items() if v <= 0]
        if non_positive:
            raise BarValidationError(
                f"OHLC not positive for {where}: {', '.join(non_positive)}", parsed=ohlc
            )
        if self.high < self.low:
            raise BarValidationError(
                f"High below low for {where}: {self.high} < {self.low}", parsed=ohlc
            )

        # None means "not reported"; anything else must be a real number
        odd = {
            f: getattr(self, f)
            for f in _OPTIONAL_NUMERIC
            if getattr(self, f) is not None and not is_finite_number(getattr(self, f))
        }
        if odd:
            raise BarValidationError(
                f"Non-numeric {', '.join(odd)} for {where}", parsed={**ohlc, **odd}
            )

    # ── Persistence ──────────────────────────────────────────────────

    def to_record(self) -> dict[str, Any]:
        """History-log representation (one JSON object per line)."""
        return {
            "date": self.date.isoformat(),
            "exchange": self.exchange,
            "instrument": self.instrument,
            "expiry": self.expiry,
            "o": self.open,
            "h": self.high,
            "l": self.low,
            "c": self.close,
            "prev_close": self.prev_close,
            "volume": self.volume,
            "value": self.value,
            "open_interest": self.open_interest,
            "updated": self.updated,
            "source": self.source,
        }

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> Bar:
        raw_date = record.get("date")
        try:
            day = date.fromisoformat(str(raw_date))
        except ValueError as exc:
            raise BarValidationError(f"Bad bar date: {raw_date!r}", parsed=record) from exc
        return cls(
            date=day,
            open=record.get("o"),
            high=record.get("h"),
            low=record.get("l"),
            close=record.get("c"),
            prev_close=record.get("prev_close"),
            volume=record.get("volume"),
            value=record.get("value"),
            open_interest=record.get("open_interest"),
            expiry=record.get("expiry"),
            exchange=record.get("exchange") or "MCX",
            instrument=record.get("instrument") or "GOLD",
            updated=record.get("updated"),
            source=record.get("source"),
        )
