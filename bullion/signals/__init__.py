"""Signals — indicator library and the composite scoring engine."""

from bullion.signals.indicators import atr, ema, sma, true_range, zscore
from bullion.signals.models import SIGNAL_FIELDS, SignalBundle, Verdict
from bullion.signals.scoring import clamp, classify, compute_score

__all__ = [
    "SIGNAL_FIELDS",
    "SignalBundle",
    "Verdict",
    "atr",
    "clamp",
    "classify",
    "compute_score",
    "ema",
    "sma",
    "true_range",
    "zscore",
]
