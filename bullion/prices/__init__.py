"""Prices — the dashboard price board and its HTTP app."""

from bullion.prices.app import create_app
from bullion.prices.board import (
    BoardData,
    Instrument,
    PriceBoard,
    mcx_gold_entry,
    refresh_board,
)

__all__ = [
    "BoardData",
    "Instrument",
    "PriceBoard",
    "create_app",
    "mcx_gold_entry",
    "refresh_board",
]
