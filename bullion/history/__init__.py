"""History — daily bar record and the append-only bar store."""

from bullion.history.bar import Bar
from bullion.history.store import BarStore

__all__ = ["Bar", "BarStore"]
