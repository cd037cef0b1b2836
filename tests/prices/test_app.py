"""Tests for the /prices HTTP app."""

from __future__ import annotations

import json

from fastapi.testclient import TestClient

from bullion.core.config import PathsConfig, ServerConfig, Settings
from bullion.prices.app import create_app
from tests.prices.fakes import FakeCrude, FakeMetals, write_snapshot


def _settings(tmp_path) -> Settings:
    return Settings(
        paths=PathsConfig(data_dir=tmp_path / "data"),
        server=ServerConfig(refresh_ms=60_000),
    )


def test_warming_up_without_refresh(tmp_path):
    app = create_app(_settings(tmp_path), metals=FakeMetals(), crude=FakeCrude(), refresh=False)
    with TestClient(app) as client:
        resp = client.get("/prices")

    assert resp.status_code == 200
    body = resp.json()
    assert body["ok"] is False
    assert body["err"] == "warming up"
    assert body["providerRefreshMs"] == 60_000


def test_initial_refresh_serves_prices(tmp_path):
    settings = _settings(tmp_path)
    write_snapshot(settings.paths.latest_path)
    app = create_app(settings, metals=FakeMetals(), crude=FakeCrude())

    with TestClient(app) as client:
        body = client.get("/prices").json()

    assert body["ok"] is True
    instruments = body["data"]["instruments"]
    assert instruments["crude"]["price"] == 71.25
    assert instruments["mcx_gold"]["price"] == 2600.0
    assert instruments["mcx_gold"]["verdict"] == "BUY"


def test_missing_snapshot_is_not_a_crash(tmp_path):
    app = create_app(_settings(tmp_path), metals=FakeMetals(), crude=FakeCrude())

    with TestClient(app) as client:
        resp = client.get("/prices")

    assert resp.status_code == 200
    mcx = resp.json()["data"]["instruments"]["mcx_gold"]
    assert mcx["price"] is None
    assert mcx["error"]


def test_cors_headers(tmp_path):
    app = create_app(_settings(tmp_path), metals=FakeMetals(), crude=FakeCrude(), refresh=False)
    with TestClient(app) as client:
        resp = client.get("/prices", headers={"Origin": "http://dashboard.test"})
    assert resp.headers["access-control-allow-origin"] == "*"


def test_malformed_snapshot_at_startup(tmp_path):
    settings = _settings(tmp_path)
    latest = settings.paths.latest_path
    latest.parent.mkdir(parents=True)
    latest.write_text(json.dumps({"ohlc": {"c": 2600}, "verdict": 5}))
    app = create_app(settings, metals=FakeMetals(), crude=FakeCrude())

    with TestClient(app) as client:
        resp = client.get("/prices")

    assert resp.status_code == 200
    body = resp.json()
    assert body["ok"] is True
    mcx = body["data"]["instruments"]["mcx_gold"]
    assert mcx["price"] is None
    assert "verdict" in mcx["error"]


def test_failed_initial_refresh_still_serves(tmp_path):
    # rates of the wrong shape blow up while the board is being built
    app = create_app(_settings(tmp_path), metals=FakeMetals(rates=["XAU"]), crude=FakeCrude())

    with TestClient(app) as client:
        resp = client.get("/prices")

    assert resp.status_code == 200
    assert resp.json()["err"] == "warming up"
