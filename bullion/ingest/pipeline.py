"""Ingestion pipeline — one settlement day in, history + latest snapshot out."""

from __future__ import annotations

import dataclasses
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any

import structlog

from bullion.core.config import ScoringConfig
from bullion.core.errors import SettlementRowNotFound
from bullion.history.bar import Bar
from bullion.history.store import BarStore
from bullion.ingest.bhavcopy import extract_row, map_row_to_bar, parse_csv_loose
from bullion.ingest.snapshot import build_snapshot, save_latest
from bullion.signals.scoring import compute_score

logger = structlog.get_logger(__name__)

SOURCE_FILE = "MCX_BHAVCOPY_FILE"
SOURCE_URL = "MCX_BHAVCOPY_URL"


def _utcnow_iso() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%fZ")


def ingest_settlement(
    bar: Bar,
    store: BarStore,
    latest_path: Path,
    *,
    source: str = SOURCE_FILE,
    config: ScoringConfig | None = None,
    now: str | None = None,
) -> dict[str, Any]:
    """Append *bar* (if its date is new), rescore, and rewrite the snapshot.

    A duplicate date leaves the history untouched; the snapshot is still
    rebuilt from the stored bars, so replaying a day is idempotent.

    Returns the snapshot dict that was written.
    """
    stamp = now or _utcnow_iso()
    log = logger.bind(date=bar.date.isoformat(), instrument=bar.instrument)

    appended = store.append(dataclasses.replace(bar, updated=stamp, source=source))

    history = store.bars()
    bundle = compute_score(history, config)
    latest = history[-1]

    snapshot = build_snapshot(latest, bundle, updated=stamp)
    save_latest(latest_path, snapshot)

    log.info(
        "settlement_ingested",
        appended=appended,
        history=len(history),
        history_path=str(store.path),
        latest_date=latest.date.isoformat(),
        verdict=snapshot["verdict"],
        confidence=snapshot["confidence"],
    )
    return snapshot


def ingest_bhavcopy_file(
    path: Path,
    day: date,
    store: BarStore,
    latest_path: Path,
    *,
    instrument: str = "GOLD",
    source: str = SOURCE_FILE,
    config: ScoringConfig | None = None,
) -> dict[str, Any]:
    """Parse a bhavcopy CSV, pick the *instrument* row and ingest it.

    Raises ``SettlementRowNotFound`` or ``BarValidationError`` before
    anything is written.
    """
    text = Path(path).read_text(encoding="utf-8", errors="replace")
    rows = parse_csv_loose(text)
    row = extract_row(rows, instrument)
    if row is None:
        raise SettlementRowNotFound(
            f"No {instrument} row in {path} ({len(rows)} rows parsed)"
        )

    bar = map_row_to_bar(row, day, instrument=instrument)
    return ingest_settlement(bar, store, latest_path, source=source, config=config)
