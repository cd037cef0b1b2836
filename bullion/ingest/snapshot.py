"""Latest snapshot — the whole-file JSON the price board reads."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any

import structlog

from bullion.core.errors import SnapshotError
from bullion.history.bar import Bar, is_finite_number
from bullion.signals.models import SignalBundle, Verdict

logger = structlog.get_logger(__name__)

SNAPSHOT_SOURCE = "MCX_BHAVCOPY"

_VERDICTS = frozenset(v.value for v in Verdict)


def build_snapshot(bar: Bar, bundle: SignalBundle, *, updated: str) -> dict[str, Any]:
    """Merge the newest stored bar with its signal bundle."""
    return {
        "date": bar.date.isoformat(),
        "exchange": bar.exchange,
        "instrument": bar.instrument,
        "expiry": bar.expiry,
        "ohlc": {"o": bar.open, "h": bar.high, "l": bar.low, "c": bar.close},
        "prev_close": bar.prev_close,
        "volume": bar.volume,
        "value": bar.value,
        "open_interest": bar.open_interest,
        "signals": bundle.signals(),
        "score": bundle.score,
        "verdict": bundle.verdict.value,
        "confidence": bundle.confidence,
        "updated": updated,
        "source": SNAPSHOT_SOURCE,
    }


def save_latest(path: Path, snapshot: dict[str, Any]) -> None:
    """Overwrite the snapshot file (via a temp file, so readers never see a partial write)."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_name(path.name + ".tmp")
    tmp.write_text(json.dumps(snapshot, indent=2), encoding="utf-8")
    os.replace(tmp, path)
    logger.info("snapshot_written", path=str(path), date=snapshot.get("date"))


def load_latest(path: Path) -> dict[str, Any]:
    """Read the snapshot file.

    Raises ``SnapshotError`` if it is missing, not JSON, has no usable
    close price, or carries a mistyped score, verdict or confidence.
    """
    path = Path(path)
    try:
        raw = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise SnapshotError(f"snapshot not found: {path}") from None
    except (OSError, UnicodeDecodeError) as exc:
        raise SnapshotError(f"snapshot unreadable: {exc}") from exc

    try:
        snapshot = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise SnapshotError(f"snapshot is not valid JSON: {exc}") from exc

    if not isinstance(snapshot, dict):
        raise SnapshotError("snapshot is not a JSON object")
    _check_fields(snapshot)
    return snapshot


def _check_fields(snapshot: dict[str, Any]) -> None:
    """Reject snapshots whose published fields have the wrong shape."""
    ohlc = snapshot.get("ohlc")
    close = ohlc.get("c") if isinstance(ohlc, dict) else None
    if not is_finite_number(close):
        raise SnapshotError("snapshot has no numeric ohlc.c")

    score = snapshot.get("score")
    if score is not None and not is_finite_number(score):
        raise SnapshotError(f"snapshot score is not numeric: {score!r}")

    verdict = snapshot.get("verdict")
    if verdict is not None and (not isinstance(verdict, str) or verdict not in _VERDICTS):
        raise SnapshotError(f"snapshot verdict is not one of {sorted(_VERDICTS)}: {verdict!r}")

    confidence = snapshot.get("confidence")
    if confidence is not None and not (
        isinstance(confidence, int)
        and not isinstance(confidence, bool)
        and 0 <= confidence <= 100
    ):
        raise SnapshotError(f"snapshot confidence is not an integer in [0, 100]: {confidence!r}")

    updated = snapshot.get("updated")
    if updated is not None and not isinstance(updated, str):
        raise SnapshotError(f"snapshot updated is not a timestamp string: {updated!r}")
