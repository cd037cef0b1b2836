"""EIA client — latest WTI crude spot price (daily, not intraday)."""

from __future__ import annotations

import math

import structlog
from pydantic import BaseModel, ConfigDict

from bullion.core.config import ProviderConfig
from bullion.core.errors import ConfigError, ProviderAPIError
from bullion.providers.client import HttpClient

logger = structlog.get_logger(__name__)


class CrudeQuote(BaseModel):
    model_config = ConfigDict(frozen=True)

    price: float
    unit: str = "USD/bbl"
    period: str | None = None


class EIAClient:
    def __init__(self, cfg: ProviderConfig, http: HttpClient | None = None) -> None:
        self._cfg = cfg
        self._http = http or HttpClient("eia", timeout=cfg.timeout_s)

    def latest_crude(self) -> CrudeQuote:
        """First data point of the configured series (EIA lists newest first)."""
        if not self._cfg.eia_api_key:
            raise ConfigError("Missing EIA_API_KEY")

        payload = self._http.get_json(
            f"{self._cfg.eia_base_url.rstrip('/')}/series/",
            params={
                "api_key": self._cfg.eia_api_key,
                "series_id": self._cfg.eia_series_id,
            },
        )
        if not isinstance(payload, dict):
            raise ProviderAPIError(f"EIA: unexpected payload {type(payload).__name__}")

        series_list = payload.get("series")
        series = series_list[0] if isinstance(series_list, list) and series_list else None
        data = series.get("data") if isinstance(series, dict) else None
        point = data[0] if isinstance(data, list) and data else None
        if not isinstance(point, list) or len(point) < 2:
            raise ProviderAPIError("EIA: no latest datapoint")

        period, raw = point[0], point[1]
        try:
            price = float(raw)
        except (TypeError, ValueError):
            raise ProviderAPIError("EIA: crude not numeric") from None
        if not math.isfinite(price):
            raise ProviderAPIError("EIA: crude not numeric")

        units = series.get("units")
        quote = CrudeQuote(
            price=price,
            unit=units if isinstance(units, str) and units else "USD/bbl",
            period=str(period),
        )
        logger.info("crude_fetched", price=quote.price, period=quote.period)
        return quote
