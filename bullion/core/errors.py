"""Exception hierarchy — every error in the system has a typed home."""

from __future__ import annotations


class BullionError(Exception):
    """Base for all application errors."""


class ConfigError(BullionError):
    """Bad config, missing keys, invalid values."""


# ── Provider (HTTP) errors ─────────────────────────────────────────────


class ProviderError(BullionError):
    """Base for all upstream data provider issues."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ProviderAuthError(ProviderError):
    """401/403 — bad key or plan. Never retry."""


class ProviderRateLimitError(ProviderError):
    """429 — rate limited. Retryable after backoff."""

    def __init__(
        self, message: str, *, status_code: int | None = 429, retry_after: float | None = None
    ) -> None:
        super().__init__(message, status_code=status_code)
        self.retry_after = retry_after


class ProviderNetworkError(ProviderError):
    """Connection/timeout errors. Retryable."""


class ProviderAPIError(ProviderError):
    """Other 4xx/5xx or an error payload. Not retried."""


# ── Ingestion errors ───────────────────────────────────────────────────


class IngestError(BullionError):
    """Base for settlement-file ingestion failures."""


class SettlementRowNotFound(IngestError):
    """The bhavcopy has no row for the requested instrument."""


class BarValidationError(IngestError):
    """A mapped bar is missing numeric OHLC. Nothing is persisted."""

    def __init__(self, message: str, *, parsed: dict | None = None) -> None:
        super().__init__(message)
        self.parsed = parsed or {}


class SnapshotError(BullionError):
    """The latest snapshot file is missing or malformed."""
