"""Bhavcopy parsing — loose CSV rows resolved into a canonical bar.

MCX bhavcopy headers vary between file vintages.  Each canonical field
has a prioritized alias list; the first alias present in the header wins.
Parsing stays tolerant, but a bar is only built when open/high/low/close
all resolve to numbers.
"""

from __future__ import annotations

import dataclasses
import math
from datetime import date

import structlog

from bullion.core.errors import BarValidationError
from bullion.history.bar import Bar

logger = structlog.get_logger(__name__)

# ── Column aliases ────────────────────────────────────────────────────

ALIASES: dict[str, tuple[str, ...]] = {
    "open": ("OPEN", "OPEN_PRICE", "OPENPR"),
    "high": ("HIGH", "HIGH_PRICE", "HIGHPR"),
    "low": ("LOW", "LOW_PRICE", "LOWPR"),
    "close": ("CLOSE", "CLOSE_PRICE", "CLOSEPR", "SETTLE", "SETTLEMENT_PRICE"),
    "prev_close": ("PREVCLOSE", "PREV_CLOSE", "PREV CLOSE", "PREVIOUS_CLOSE", "PREVCLOSE_PRICE"),
    "volume": ("VOLUME", "VOLUME_TRD", "TRD_QTY"),
    "value": ("VALUE", "TRD_VAL", "TURNOVER"),
    "open_interest": ("OI", "OPEN INTEREST", "OPEN_INTEREST", "OPENINT"),
    "expiry": ("EXPIRY", "EXPIRY_DATE", "EXPIRY DATE"),
    "symbol": ("SYMBOL", "INSTRUMENT", "COMMODITY", "COMMODITY_NAME"),
}

REQUIRED: tuple[str, ...] = ("open", "high", "low", "close")

_NUMERIC = ("open", "high", "low", "close", "prev_close", "volume", "value", "open_interest")

_FAR_EXPIRY = "9999-12-31"


def _norm(name: str) -> str:
    return " ".join(name.strip().upper().split())


@dataclasses.dataclass(frozen=True)
class BhavcopySchema:
    """Canonical field → actual header column, resolved once per file."""

    columns: dict[str, str]

    @classmethod
    def resolve(cls, header: list[str]) -> BhavcopySchema:
        by_norm = {_norm(h): h for h in header}
        columns: dict[str, str] = {}
        for field, aliases in ALIASES.items():
            for alias in aliases:
                if alias in by_norm:
                    columns[field] = by_norm[alias]
                    break
        return cls(columns=columns)

    def missing_required(self) -> list[str]:
        return [f for f in REQUIRED if f not in self.columns]

    def get(self, row: dict[str, str], field: str) -> str | None:
        col = self.columns.get(field)
        if col is None:
            return None
        v = row.get(col)
        if v is None or v.strip() == "":
            return None
        return v


# ── Parsing ───────────────────────────────────────────────────────────


def to_number(x: object) -> float | None:
    """Parse ``"1,23,456.50"``-style numbers; anything non-finite is None."""
    if x is None:
        return None
    s = str(x).strip().replace(",", "")
    if not s:
        return None
    try:
        n = float(s)
    except ValueError:
        return None
    return n if math.isfinite(n) else None


def parse_csv_loose(text: str) -> list[dict[str, str]]:
    """Split a header + rows CSV into dicts.

    No quoted-comma support.  Blank lines are dropped, and so are rows
    with fewer than ``min(5, len(header))`` columns.
    """
    lines = [ln for ln in text.splitlines() if ln]
    if not lines:
        return []

    header = [h.strip() for h in lines[0].split(",")]
    min_cols = min(5, len(header))

    rows: list[dict[str, str]] = []
    skipped = 0
    for line in lines[1:]:
        cols = [c.strip() for c in line.split(",")]
        if len(cols) < min_cols:
            skipped += 1
            continue
        rows.append({h: (cols[j] if j < len(cols) else "") for j, h in enumerate(header)})

    logger.debug("csv_parsed", columns=len(header), rows=len(rows), skipped=skipped)
    return rows


def extract_row(
    rows: list[dict[str, str]],
    instrument: str = "GOLD",
) -> dict[str, str] | None:
    """Pick the *instrument* row with the nearest expiry.

    The symbol match is a case-insensitive substring test.  Expiries are
    compared lexically (correct for ISO dates); rows without an expiry
    sort last.
    """
    if not rows:
        return None
    schema = BhavcopySchema.resolve(list(rows[0]))
    needle = instrument.lower()

    candidates = [
        r for r in rows if needle in (schema.get(r, "symbol") or "").lower()
    ]
    if not candidates:
        return None

    candidates.sort(key=lambda r: schema.get(r, "expiry") or _FAR_EXPIRY)
    return candidates[0]


def extract_gold_row(rows: list[dict[str, str]]) -> dict[str, str] | None:
    return extract_row(rows, "GOLD")


def map_row_to_bar(
    row: dict[str, str],
    day: date,
    *,
    instrument: str = "GOLD",
    exchange: str = "MCX",
) -> Bar:
    """Resolve a raw bhavcopy row into a Bar.

    Raises ``BarValidationError`` when an OHLC column is absent from the
    header, its value is not numeric, or the prices are not a valid bar
    (non-positive, high below low).
    """
    schema = BhavcopySchema.resolve(list(row))
    missing = schema.missing_required()
    if missing:
        raise BarValidationError(
            f"No column matches required field(s): {', '.join(missing)}",
            parsed=dict(row),
        )

    nums = {f: to_number(schema.get(row, f)) for f in _NUMERIC}
    bad = [f for f in REQUIRED if nums[f] is None]
    if bad:
        raise BarValidationError(
            f"Parsed {instrument} row but OHLC not numeric: {', '.join(bad)}",
            parsed=nums,
        )

    return Bar(
        date=day,
        open=nums["open"],
        high=nums["high"],
        low=nums["low"],
        close=nums["close"],
        prev_close=nums["prev_close"],
        volume=nums["volume"],
        value=nums["value"],
        open_interest=nums["open_interest"],
        expiry=schema.get(row, "expiry"),
        exchange=exchange,
        instrument=instrument,
    )
