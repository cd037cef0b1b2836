"""Core — shared errors, config loading, and logging."""

from bullion.core.config import (
    LoggingConfig,
    PathsConfig,
    ProviderConfig,
    ScoringConfig,
    ServerConfig,
    Settings,
    load_settings,
)
from bullion.core.errors import (
    BarValidationError,
    BullionError,
    ConfigError,
    IngestError,
    ProviderAPIError,
    ProviderAuthError,
    ProviderError,
    ProviderNetworkError,
    ProviderRateLimitError,
    SettlementRowNotFound,
    SnapshotError,
)
from bullion.core.logging import setup_logging

__all__ = [
    "BarValidationError",
    "BullionError",
    "ConfigError",
    "IngestError",
    "LoggingConfig",
    "PathsConfig",
    "ProviderAPIError",
    "ProviderAuthError",
    "ProviderConfig",
    "ProviderError",
    "ProviderNetworkError",
    "ProviderRateLimitError",
    "ScoringConfig",
    "ServerConfig",
    "Settings",
    "SettlementRowNotFound",
    "SnapshotError",
    "load_settings",
    "setup_logging",
]
