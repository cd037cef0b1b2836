"""Tests for the composite scoring engine."""

from __future__ import annotations

import dataclasses
import math
import random

import pytest
from pydantic import ValidationError

from bullion.core.config import ScoringConfig
from bullion.signals.indicators import atr, ema
from bullion.signals.models import SIGNAL_FIELDS, Verdict
from bullion.signals.scoring import clamp, classify, compute_score
from tests.conftest import linear, make_bars


# ── Guard clause ─────────────────────────────────────────────────────


class TestInsufficientHistory:
    def test_59_bars_is_neutral(self):
        bundle = compute_score(make_bars(linear(1000.0, 3000.0, 59)))

        assert bundle.score == 0
        assert bundle.verdict is Verdict.HOLD
        assert bundle.confidence == 0
        assert bundle.reason == "need >= 60 days history"
        assert bundle.signals() == {"reason": "need >= 60 days history"}

    def test_guard_ignores_bar_contents(self):
        wild = [100.0 * (1 + (i % 7)) for i in range(59)]
        bundle = compute_score(make_bars(wild, spread=0.2))
        assert (bundle.score, bundle.verdict, bundle.confidence) == (0.0, Verdict.HOLD, 0)
        assert bundle.trend is None

    def test_empty_history(self):
        assert compute_score([]).is_degenerate

    def test_60_bars_is_scored(self):
        bundle = compute_score(make_bars(linear(2000.0, 2100.0, 60)))
        assert not bundle.is_degenerate
        assert set(bundle.signals()) == set(SIGNAL_FIELDS)


# ── End-to-end scenarios ─────────────────────────────────────────────


class TestRisingMarket:
    def test_gentle_linear_rise(self):
        """2000 → 2100 over 60 bars: positive trend and momentum.

        The EMA spread is only ~1.2%, so the composite stays under the
        BUY threshold.
        """
        bars = make_bars(linear(2000.0, 2100.0, 60))
        bundle = compute_score(bars)

        assert bundle.trend > 0
        assert bundle.momentum > 0
        assert bundle.participation == 0
        assert bundle.confidence > 0
        assert 0 < bundle.score < 0.25
        assert bundle.verdict is Verdict.HOLD
        assert bundle.score == pytest.approx(0.0722, abs=5e-4)

    def test_steep_linear_rise_is_buy(self):
        bars = make_bars(linear(2000.0, 2600.0, 60))
        bundle = compute_score(bars)

        assert bundle.trend > 0
        assert bundle.momentum > 0
        assert bundle.verdict is Verdict.BUY
        assert bundle.confidence > 0
        # trend and momentum agree with the score, participation is flat
        assert bundle.agreement == pytest.approx(2 / 3)
        assert bundle.risk_penalty == 0

    def test_steep_fall_is_sell(self):
        bars = make_bars(linear(2600.0, 2000.0, 60))
        bundle = compute_score(bars)

        assert bundle.trend < 0
        assert bundle.momentum < 0
        assert bundle.score < -0.25
        assert bundle.verdict is Verdict.SELL

    def test_flat_market(self):
        """Zero-range flat bars: no range, no risk penalty, neutral score."""
        bars = make_bars([100.0] * 60, spread=0.0)
        bundle = compute_score(bars)

        assert bundle.atr14 == 0
        assert bundle.atr_pct == 0
        assert bundle.risk_penalty == 0
        assert bundle.ret_1d == 0
        assert bundle.ret_5d == 0
        assert abs(bundle.score) < 1e-9
        assert bundle.verdict is Verdict.HOLD
        assert 0 < bundle.confidence <= 45


# ── Intermediate values ──────────────────────────────────────────────


class TestIntermediates:
    def test_returns_use_fixed_offsets(self):
        closes = linear(1000.0, 1590.0, 60)
        bundle = compute_score(make_bars(closes))

        assert bundle.ret_1d == pytest.approx(closes[-1] / closes[-2] - 1)
        assert bundle.ret_5d == pytest.approx(closes[-1] / closes[-6] - 1)

    def test_emas_match_indicator_library(self):
        closes = [2000.0 + 15 * math.sin(i / 4) for i in range(90)]
        bars = make_bars(closes)
        bundle = compute_score(bars)

        assert bundle.ema20 == ema(closes, 20)
        assert bundle.ema50 == ema(closes, 50)
        assert bundle.ema_spread == pytest.approx(bundle.ema20 / bundle.ema50 - 1)
        expected_atr = atr(
            [b.high for b in bars], [b.low for b in bars], [b.close for b in bars]
        )
        assert bundle.atr14 == expected_atr
        assert bundle.atr_pct == pytest.approx(expected_atr / closes[-1])

    def test_participation_from_volume_and_open_interest(self):
        bars = make_bars([2000.0] * 60)
        spike = dataclasses.replace(bars[-1], volume=5000.0, open_interest=9000.0)
        bundle = compute_score(bars[:-1] + [spike])

        assert bundle.vol_z60 > 0
        assert bundle.oi_z60 > 0
        assert bundle.participation == 1.0  # clamped

    def test_missing_volume_degrades_to_zero(self):
        bars = make_bars(linear(2000.0, 2100.0, 60), volume=None, open_interest=None)
        bundle = compute_score(bars)

        assert bundle.vol_z60 == 0
        assert bundle.oi_z60 == 0
        assert bundle.participation == 0

    def test_non_numeric_volume_entries_are_dropped(self):
        bars = make_bars([2000.0] * 61)
        bars[-1] = dataclasses.replace(bars[-1], volume=5000.0)
        # Bar rejects this on construction; force it to exercise the series filter
        object.__setattr__(bars[5], "volume", "n/a")

        bundle = compute_score(bars)

        assert bundle.vol_z60 > 0
        assert math.isfinite(bundle.score)

    def test_high_volatility_penalises_confidence_not_score(self):
        closes = linear(2000.0, 2600.0, 60)
        calm = compute_score(make_bars(closes, spread=0.002))
        wild = compute_score(make_bars(closes, spread=0.03))

        assert wild.score == calm.score
        assert wild.risk_penalty > 0
        assert wild.risk_penalty <= 0.6
        assert wild.confidence < calm.confidence


# ── Verdict and bounds ───────────────────────────────────────────────


class TestVerdict:
    @pytest.mark.parametrize(
        ("score", "verdict"),
        [
            (0.25, Verdict.HOLD),
            (-0.25, Verdict.HOLD),
            (0.2500001, Verdict.BUY),
            (-0.2500001, Verdict.SELL),
            (0.0, Verdict.HOLD),
            (1.0, Verdict.BUY),
            (-1.0, Verdict.SELL),
        ],
    )
    def test_strict_thresholds(self, score, verdict):
        assert classify(score) is verdict

    def test_clamp(self):
        assert clamp(3.0) == 1.0
        assert clamp(-3.0) == -1.0
        assert clamp(0.4, 0.0, 0.6) == 0.4
        assert clamp(-0.1, 0.0, 0.6) == 0.0


def _random_walk(seed: int, n: int) -> list[float]:
    rng = random.Random(seed)
    price = 2000.0
    out = []
    for _ in range(n):
        price *= 1 + rng.gauss(0, 0.03)
        out.append(max(price, 1.0))
    return out


class TestBundleProperties:
    @pytest.mark.parametrize("seed", range(25))
    def test_confidence_is_bounded_integer(self, seed):
        rng = random.Random(seed)
        closes = _random_walk(seed, rng.randint(60, 140))
        bars = [
            dataclasses.replace(
                b, volume=rng.uniform(0, 1e5), open_interest=rng.uniform(0, 1e5)
            )
            for b in make_bars(closes, spread=rng.uniform(0, 0.05))
        ]
        bundle = compute_score(bars)

        assert isinstance(bundle.confidence, int)
        assert 0 <= bundle.confidence <= 100
        assert -1 <= bundle.score <= 1
        for name in ("trend", "momentum", "participation"):
            assert -1 <= getattr(bundle, name) <= 1
        assert 0 <= bundle.risk_penalty <= 0.6
        assert bundle.agreement in (0, 1 / 3, 2 / 3, 1)
        assert all(
            v is None or math.isfinite(v) for v in bundle.signals().values()
        )

    def test_bundle_is_immutable(self):
        bundle = compute_score(make_bars(linear(2000.0, 2100.0, 60)))
        with pytest.raises(ValidationError):
            bundle.score = 0.9

    def test_custom_config_min_history(self):
        cfg = ScoringConfig(min_history=80)
        bundle = compute_score(make_bars(linear(2000.0, 2600.0, 70)), cfg)
        assert bundle.reason == "need >= 80 days history"
