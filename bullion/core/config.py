"""Config loading — env vars for secrets, config.toml for everything else."""

from __future__ import annotations

import logging
import os
import tomllib
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from bullion.core.errors import ConfigError

_PROJECT_ROOT = Path(__file__).resolve().parents[2]
_DEFAULT_CONFIG_PATH = _PROJECT_ROOT / "config.toml"


# ── Models ─────────────────────────────────────────────────────────────


class PathsConfig(BaseModel):
    """Where the ingestion tool keeps its durable artifacts."""

    data_dir: Path = Field(default=_PROJECT_ROOT / "data")
    history_file: str = "mcx_gold_history.jsonl"
    latest_file: str = "mcx_gold_latest.json"

    @property
    def history_path(self) -> Path:
        return self.data_dir / self.history_file

    @property
    def latest_path(self) -> Path:
        return self.data_dir / self.latest_file

    @property
    def raw_dir(self) -> Path:
        return self.data_dir / "raw"


class ProviderConfig(BaseModel):
    metals_api_key: str = ""
    metals_base_url: str = "https://metals-api.com/api"
    metals_base: str = "USD"
    metals_symbols: list[str] = Field(
        default_factory=lambda: ["XAU", "XAG", "XCU", "XZN"],
        description="Symbol codes may vary by Metals-API plan",
    )
    eia_api_key: str = ""
    eia_base_url: str = "https://api.eia.gov"
    eia_series_id: str = "PET.RWTC.D"
    timeout_s: float = Field(default=15.0, gt=0)
    download_timeout_s: float = Field(default=20.0, gt=0)


class ServerConfig(BaseModel):
    host: str = "127.0.0.1"
    port: int = Field(default=3000, gt=0, lt=65536)
    refresh_ms: int = Field(
        default=5000, gt=0, description="Provider refresh cadence for the price board"
    )
    allowed_origins: list[str] = Field(default_factory=lambda: ["*"])


class ScoringConfig(BaseModel):
    """Weights and thresholds of the composite score.

    Defaults reproduce the reference output; tune only with a regression
    review of the scored history.
    """

    min_history: int = Field(default=60, gt=1)
    ema_fast: int = Field(default=20, gt=0)
    ema_slow: int = Field(default=50, gt=0)
    atr_period: int = Field(default=14, gt=0)
    z_lookback: int = Field(default=60, gt=1)

    trend_scale: float = 10.0
    momentum_ret5d_scale: float = 8.0
    momentum_ret1d_scale: float = 3.0
    participation_divisor: float = Field(default=3.0, gt=0)

    trend_weight: float = 0.5
    momentum_weight: float = 0.3
    participation_weight: float = 0.2

    verdict_threshold: float = Field(default=0.25, ge=0)

    risk_atr_floor: float = 0.01
    risk_scale: float = 20.0
    risk_cap: float = Field(default=0.6, ge=0, le=1)

    confidence_score_weight: float = 0.55
    confidence_agreement_weight: float = 0.25
    confidence_quality_weight: float = 0.20

    @model_validator(mode="after")
    def _check_ema_order(self) -> "ScoringConfig":
        if self.ema_fast >= self.ema_slow:
            raise ValueError("ema_fast must be shorter than ema_slow")
        return self


class LoggingConfig(BaseModel):
    level: str = "INFO"
    format: Literal["auto", "json", "console"] = Field(
        default="auto", description="auto: console on a TTY, JSON otherwise"
    )
    access_log: bool = Field(
        default=False, description="Log every GET /prices served by uvicorn"
    )

    @field_validator("level")
    @classmethod
    def _known_level(cls, v: str) -> str:
        v = v.strip().upper()
        if not isinstance(logging.getLevelName(v), int):
            raise ValueError(f"unknown log level {v!r}")
        return v


class Settings(BaseModel):
    paths: PathsConfig = Field(default_factory=PathsConfig)
    providers: ProviderConfig = Field(default_factory=ProviderConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    scoring: ScoringConfig = Field(default_factory=ScoringConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


# ── Loading ────────────────────────────────────────────────────────────


def _load_dotenv(dotenv_path: Path) -> None:
    """Minimal .env loader — no extra dependencies."""
    if not dotenv_path.exists():
        return
    for line in dotenv_path.read_text().splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        key, _, value = line.partition("=")
        key, value = key.strip(), value.strip()
        if not key:
            continue
        os.environ.setdefault(key, value)


def load_settings(config_path: Path | None = None) -> Settings:
    """Build Settings from .env (secrets) + env vars + config.toml (tuning)."""
    _load_dotenv(_PROJECT_ROOT / ".env")

    path = config_path or _DEFAULT_CONFIG_PATH
    file_cfg: dict = {}
    if path.exists():
        try:
            file_cfg = tomllib.loads(path.read_text())
        except tomllib.TOMLDecodeError as exc:
            raise ConfigError(f"Invalid TOML in {path}: {exc}") from exc

    providers = dict(file_cfg.get("providers", {}))
    providers["metals_api_key"] = os.environ.get(
        "METALS_API_KEY", providers.get("metals_api_key", "")
    )
    providers["eia_api_key"] = os.environ.get(
        "EIA_API_KEY", providers.get("eia_api_key", "")
    )
    if "EIA_SERIES_ID" in os.environ:
        providers["eia_series_id"] = os.environ["EIA_SERIES_ID"]

    server = dict(file_cfg.get("server", {}))
    if "PORT" in os.environ:
        server["port"] = os.environ["PORT"]
    if "PROVIDER_REFRESH_MS" in os.environ:
        server["refresh_ms"] = os.environ["PROVIDER_REFRESH_MS"]

    paths = dict(file_cfg.get("paths", {}))
    if "BULLION_DATA_DIR" in os.environ:
        paths["data_dir"] = os.environ["BULLION_DATA_DIR"]

    log_cfg = dict(file_cfg.get("logging", {}))
    if "BULLION_LOG_LEVEL" in os.environ:
        log_cfg["level"] = os.environ["BULLION_LOG_LEVEL"]
    if "BULLION_LOG_FORMAT" in os.environ:
        log_cfg["format"] = os.environ["BULLION_LOG_FORMAT"]

    try:
        return Settings(
            paths=PathsConfig(**paths),
            providers=ProviderConfig(**providers),
            server=ServerConfig(**server),
            scoring=ScoringConfig(**file_cfg.get("scoring", {})),
            logging=LoggingConfig(**log_cfg),
        )
    except ValidationError as exc:
        raise ConfigError(str(exc)) from exc
