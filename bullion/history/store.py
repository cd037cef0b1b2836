"""BarStore — append-only, date-keyed daily bar history backed by a JSONL log."""

from __future__ import annotations

import json
from datetime import date
from pathlib import Path

import structlog

from bullion.core.errors import BarValidationError, IngestError
from bullion.history.bar import Bar

logger = structlog.get_logger(__name__)


class BarStore:
    """Ascending, duplicate-free sequence of bars for one instrument.

    The JSONL log is the durable copy.  A bar is written to the log only
    when its date is absent, so replaying the same settlement day is a
    no-op.  Concurrent writers on the same log are not supported; callers
    run one ingestion at a time.
    """

    def __init__(self, path: Path, bars: list[Bar] | None = None) -> None:
        self._path = Path(path)
        self._bars: list[Bar] = []
        self._dates: set[date] = set()
        for bar in bars or []:
            if bar.date in self._dates:
                continue
            self._bars.append(bar)
            self._dates.add(bar.date)

    @property
    def path(self) -> Path:
        return self._path

    # ── Loading ──────────────────────────────────────────────────────

    @classmethod
    def load(cls, path: Path) -> BarStore:
        """Read the history log; a missing file is an empty store."""
        path = Path(path)
        if not path.exists():
            logger.info("history_missing", path=str(path))
            return cls(path)

        bars: list[Bar] = []
        with path.open("r", encoding="utf-8") as fh:
            for lineno, line in enumerate(fh, start=1):
                line = line.strip()
                if not line:
                    continue
                try:
                    bars.append(Bar.from_record(json.loads(line)))
                except (json.JSONDecodeError, BarValidationError) as exc:
                    raise IngestError(f"{path}:{lineno}: unreadable history record: {exc}") from exc

        store = cls(path, bars)
        if len(store) != len(bars):
            logger.warning(
                "history_duplicate_dates",
                path=str(path),
                records=len(bars),
                kept=len(store),
            )
        logger.info("history_loaded", path=str(path), bars=len(store))
        return store

    # ── Mutation ─────────────────────────────────────────────────────

    def append(self, bar: Bar) -> bool:
        """Append *bar* unless its date is already stored.

        Returns True when the bar was written, False for a duplicate date.
        Existing days are never overwritten.
        """
        if bar.date in self:
            logger.warning(
                "bar_duplicate_skipped",
                date=bar.date.isoformat(),
                instrument=bar.instrument,
                close=bar.close,
            )
            return False

        self._path.parent.mkdir(parents=True, exist_ok=True)
        with self._path.open("a", encoding="utf-8") as fh:
            fh.write(json.dumps(bar.to_record()) + "\n")

        self._bars.append(bar)
        self._dates.add(bar.date)
        logger.info(
            "bar_appended",
            date=bar.date.isoformat(),
            instrument=bar.instrument,
            close=bar.close,
            total=len(self._bars),
        )
        return True

    # ── Access ───────────────────────────────────────────────────────

    def bars(self) -> list[Bar]:
        """All bars, sorted ascending by date (tolerates out-of-order appends)."""
        return sorted(self._bars, key=lambda b: b.date)

    def latest(self) -> Bar | None:
        if not self._bars:
            return None
        return max(self._bars, key=lambda b: b.date)

    def __len__(self) -> int:
        return len(self._bars)

    def __contains__(self, day: object) -> bool:
        return day in self._dates
