"""Shared test fixtures."""

from __future__ import annotations

from datetime import date, timedelta
from pathlib import Path

import pytest

from bullion.history.bar import Bar

START = date(2024, 1, 1)


@pytest.fixture
def history_path(tmp_path: Path) -> Path:
    return tmp_path / "data" / "mcx_gold_history.jsonl"


@pytest.fixture
def latest_path(tmp_path: Path) -> Path:
    return tmp_path / "data" / "mcx_gold_latest.json"


def linear(start: float, end: float, n: int) -> list[float]:
    """*n* evenly spaced closes from *start* to *end* inclusive."""
    step = (end - start) / (n - 1)
    return [start + step * i for i in range(n - 1)] + [end]


def make_bars(
    closes: list[float],
    *,
    start: date = START,
    spread: float = 0.005,
    volume: float | None = 1000.0,
    open_interest: float | None = 5000.0,
) -> list[Bar]:
    """Synthetic consecutive daily bars with the given closes.

    Open/high/low are derived from close: high/low sit ``spread`` above
    and below it.
    """
    bars: list[Bar] = []
    for i, close in enumerate(closes):
        bars.append(
            Bar(
                date=start + timedelta(days=i),
                open=close * (1 - spread / 5),
                high=close * (1 + spread),
                low=close * (1 - spread),
                close=close,
                prev_close=closes[i - 1] if i else None,
                volume=volume,
                open_interest=open_interest,
            )
        )
    return bars
