"""Scoring engine — trend / momentum / participation composite over daily bars.

Score and confidence are decoupled: the ATR risk penalty only shrinks
confidence, never the directional score.
"""

from __future__ import annotations

import math
from collections.abc import Sequence

import structlog

from bullion.core.config import ScoringConfig
from bullion.history.bar import Bar, is_finite_number
from bullion.signals.indicators import atr, ema, zscore
from bullion.signals.models import SignalBundle, Verdict

logger = structlog.get_logger(__name__)

_DEFAULT_CONFIG = ScoringConfig()

# Placeholder until data-completeness checks exist.
_DATA_QUALITY = 1.0


# ── Helpers ──────────────────────────────────────────────────────────


def clamp(x: float, lo: float = -1.0, hi: float = 1.0) -> float:
    return max(lo, min(hi, x))


def _sign(x: float) -> int:
    if x > 0:
        return 1
    if x < 0:
        return -1
    return 0


def _round_half_up(x: float) -> int:
    return int(math.floor(x + 0.5))


def classify(score: float, threshold: float = 0.25) -> Verdict:
    """BUY/SELL only strictly beyond the threshold; the boundary is HOLD."""
    if score > threshold:
        return Verdict.BUY
    if score < -threshold:
        return Verdict.SELL
    return Verdict.HOLD


def _ratio_minus_one(num: float | None, den: float | None) -> float:
    if not num or not den:
        return 0.0
    return num / den - 1


# ── Engine ───────────────────────────────────────────────────────────


def compute_score(
    bars: Sequence[Bar],
    config: ScoringConfig | None = None,
) -> SignalBundle:
    """Score an ascending bar history.

    Args:
        bars:   Full history for one instrument, oldest first.
        config: Weights and windows; defaults reproduce the reference output.

    Returns:
        A SignalBundle.  With fewer than ``config.min_history`` bars the
        bundle is neutral (score 0, HOLD, confidence 0) with a ``reason``.
    """
    cfg = config or _DEFAULT_CONFIG

    if len(bars) < cfg.min_history:
        logger.info("score_insufficient_history", bars=len(bars), required=cfg.min_history)
        return SignalBundle.insufficient(f"need >= {cfg.min_history} days history")

    closes = [b.close for b in bars if is_finite_number(b.close)]
    vols = [b.volume for b in bars if is_finite_number(b.volume)]
    ois = [b.open_interest for b in bars if is_finite_number(b.open_interest)]

    last = bars[-1]
    prev = bars[-2]

    ret_1d = _ratio_minus_one(last.close, prev.close)
    # Five sessions back is six elements from the end
    ret_5d = _ratio_minus_one(last.close, bars[-6].close)

    ema_fast = ema(closes, cfg.ema_fast)
    ema_slow = ema(closes, cfg.ema_slow)
    ema_spread = (
        ema_fast / ema_slow - 1
        if ema_fast is not None and ema_slow is not None and ema_slow != 0
        else 0.0
    )

    atr_value = atr(
        [b.high for b in bars],
        [b.low for b in bars],
        [b.close for b in bars],
        cfg.atr_period,
    )
    atr_pct = atr_value / last.close if atr_value is not None and last.close else 0.0

    vol_z = zscore(vols, cfg.z_lookback)
    oi_z = zscore(ois, cfg.z_lookback)
    vol_z = 0.0 if vol_z is None else vol_z
    oi_z = 0.0 if oi_z is None else oi_z

    # Normalise to [-1, +1]
    trend = clamp(ema_spread * cfg.trend_scale)
    momentum = clamp(ret_5d * cfg.momentum_ret5d_scale + ret_1d * cfg.momentum_ret1d_scale)
    participation = clamp(
        oi_z / cfg.participation_divisor + vol_z / cfg.participation_divisor
    )

    risk_penalty = clamp((atr_pct - cfg.risk_atr_floor) * cfg.risk_scale, 0.0, cfg.risk_cap)

    score = clamp(
        cfg.trend_weight * trend
        + cfg.momentum_weight * momentum
        + cfg.participation_weight * participation
    )
    verdict = classify(score, cfg.verdict_threshold)

    score_sign = _sign(score)
    components = (trend, momentum, participation)
    agreement = sum(1 for c in components if _sign(c) == score_sign) / len(components)

    raw_confidence = (
        cfg.confidence_score_weight * abs(score)
        + cfg.confidence_agreement_weight * agreement
        + cfg.confidence_quality_weight * _DATA_QUALITY
    )
    confidence = _round_half_up(100 * clamp(raw_confidence * (1 - risk_penalty), 0.0, 1.0))

    bundle = SignalBundle(
        ret_1d=ret_1d,
        ret_5d=ret_5d,
        ema20=ema_fast,
        ema50=ema_slow,
        ema_spread=ema_spread,
        atr14=atr_value,
        atr_pct=atr_pct,
        vol_z60=vol_z,
        oi_z60=oi_z,
        trend=trend,
        momentum=momentum,
        participation=participation,
        risk_penalty=risk_penalty,
        agreement=agreement,
        score=score,
        verdict=verdict,
        confidence=confidence,
    )

    logger.info(
        "score_computed",
        date=last.date.isoformat(),
        bars=len(bars),
        score=round(score, 4),
        verdict=verdict.value,
        confidence=confidence,
        risk_penalty=round(risk_penalty, 4),
    )
    return bundle
