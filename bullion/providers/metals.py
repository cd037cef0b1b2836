"""Metals-API client — spot rates for precious and base metals."""

from __future__ import annotations

from typing import Any

import structlog

from bullion.core.config import ProviderConfig
from bullion.core.errors import ConfigError, ProviderAPIError
from bullion.providers.client import HttpClient

logger = structlog.get_logger(__name__)


class MetalsClient:
    """Fetch ``/latest`` rates for the configured symbols.

    Rates are returned exactly as the provider quotes them; the unit
    convention depends on the Metals-API plan.
    """

    def __init__(self, cfg: ProviderConfig, http: HttpClient | None = None) -> None:
        self._cfg = cfg
        self._http = http or HttpClient("metals-api", timeout=cfg.timeout_s)

    def latest(self) -> dict[str, float | None]:
        """Return ``{symbol: rate}``; symbols the provider omits map to None."""
        if not self._cfg.metals_api_key:
            raise ConfigError("Missing METALS_API_KEY")

        payload = self._http.get_json(
            f"{self._cfg.metals_base_url.rstrip('/')}/latest",
            params={
                "access_key": self._cfg.metals_api_key,
                "base": self._cfg.metals_base,
                "symbols": ",".join(self._cfg.metals_symbols),
            },
        )
        if not isinstance(payload, dict):
            raise ProviderAPIError(f"Metals API: unexpected payload {type(payload).__name__}")
        if payload.get("success") is False:
            error = payload.get("error")
            info = error.get("info") if isinstance(error, dict) else error
            raise ProviderAPIError(str(info or "Metals API error"))

        rates = payload.get("rates")
        if not isinstance(rates, dict):
            rates = {}
        result = {
            sym: _as_rate(rates.get(sym)) for sym in self._cfg.metals_symbols
        }
        logger.info(
            "metals_fetched",
            symbols=len(result),
            missing=[s for s, v in result.items() if v is None],
        )
        return result


def _as_rate(v: Any) -> float | None:
    if isinstance(v, (int, float)) and not isinstance(v, bool):
        return float(v)
    return None
