"""PriceBoard — the timestamped price snapshot served to the dashboard.

A board is an immutable value.  Each refresh builds a new board from the
previous one; the owner swaps the reference, so readers never see a
half-updated board.
"""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Protocol

import structlog
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from bullion.core.errors import BullionError, SnapshotError
from bullion.ingest.snapshot import load_latest
from bullion.providers.eia import CrudeQuote

logger = structlog.get_logger(__name__)

# Board key → Metals-API symbol.
METAL_KEYS: dict[str, str] = {
    "gold": "XAU",
    "silver": "XAG",
    "copper": "XCU",
    "zinc": "XZN",
}

MCX_GOLD_UNIT = "INR/10g"


class MetalsSource(Protocol):
    def latest(self) -> dict[str, float | None]: ...


class CrudeSource(Protocol):
    def latest_crude(self) -> CrudeQuote: ...


# ── Models ─────────────────────────────────────────────────────────────


class Instrument(BaseModel):
    model_config = ConfigDict(frozen=True)

    price: float | None = None
    unit: str
    source: str
    updated: str | None = None
    score: float | None = None
    verdict: str | None = None
    confidence: int | None = None
    error: str | None = None


class BoardData(BaseModel):
    model_config = ConfigDict(frozen=True)

    instruments: dict[str, Instrument] = Field(default_factory=dict)


class PriceBoard(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    ok: bool = False
    err: str | None = None
    provider_refresh_ms: int = Field(serialization_alias="providerRefreshMs")
    updated: str | None = None
    data: BoardData = Field(default_factory=BoardData)

    @classmethod
    def warming_up(cls, refresh_ms: int) -> PriceBoard:
        instruments = {
            key: Instrument(unit=f"USD/{sym}", source="Metals-API")
            for key, sym in METAL_KEYS.items()
        }
        instruments["crude"] = Instrument(unit="USD/bbl", source="EIA")
        instruments["mcx_gold"] = Instrument(unit=MCX_GOLD_UNIT, source="MCX")
        return cls(
            ok=False,
            err="warming up",
            provider_refresh_ms=refresh_ms,
            data=BoardData(instruments=instruments),
        )

    def to_payload(self) -> dict:
        return self.model_dump(by_alias=True)


# ── Building ───────────────────────────────────────────────────────────


def _utcnow_iso() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%fZ")


def mcx_gold_entry(latest_path: Path) -> Instrument:
    """Republish the scored MCX gold snapshot; never raises."""
    try:
        snap = load_latest(latest_path)
        return Instrument(
            price=snap["ohlc"]["c"],
            unit=MCX_GOLD_UNIT,
            source="MCX",
            updated=snap.get("updated"),
            score=snap.get("score"),
            verdict=snap.get("verdict"),
            confidence=snap.get("confidence"),
        )
    except (SnapshotError, ValidationError) as exc:
        logger.warning("mcx_snapshot_unavailable", path=str(latest_path), error=str(exc))
        return Instrument(unit=MCX_GOLD_UNIT, source="MCX", error=str(exc))


def _keep_previous(prev: PriceBoard, mcx: Instrument, err: str) -> PriceBoard:
    instruments = dict(prev.data.instruments)
    instruments["mcx_gold"] = mcx
    return prev.model_copy(
        update={"ok": False, "err": err, "data": BoardData(instruments=instruments)}
    )


def refresh_board(
    prev: PriceBoard,
    metals: MetalsSource,
    crude: CrudeSource,
    latest_path: Path,
    *,
    now: str | None = None,
) -> PriceBoard:
    """Build the next board.

    On any provider failure the previous prices are kept and the board
    is flagged ``ok=False`` with the error message.  The MCX gold entry is
    re-read from disk either way.
    """
    stamp = now or _utcnow_iso()
    mcx = mcx_gold_entry(latest_path)

    try:
        rates = metals.latest()
        quote = crude.latest_crude()
    except BullionError as exc:
        logger.warning("provider_refresh_failed", error=str(exc))
        return _keep_previous(prev, mcx, str(exc))
    except Exception as exc:
        logger.exception("provider_refresh_crashed")
        return _keep_previous(prev, mcx, f"{type(exc).__name__}: {exc}")

    instruments = {
        key: Instrument(
            price=rates.get(sym),
            unit=f"USD/{sym}",
            source="Metals-API",
            updated=stamp,
        )
        for key, sym in METAL_KEYS.items()
    }
    instruments["crude"] = Instrument(
        price=quote.price, unit=quote.unit, source="EIA", updated=stamp
    )
    instruments["mcx_gold"] = mcx

    logger.info(
        "providers_refreshed",
        priced=sum(1 for i in instruments.values() if i.price is not None),
        total=len(instruments),
    )
    return PriceBoard(
        ok=True,
        err=None,
        provider_refresh_ms=prev.provider_refresh_ms,
        updated=stamp,
        data=BoardData(instruments=instruments),
    )
