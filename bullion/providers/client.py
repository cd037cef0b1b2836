"""Wrapped HTTP client — retries, error classification, structured logging."""

from __future__ import annotations

from typing import Any

import requests
import structlog
from requests.exceptions import ConnectionError, ReadTimeout, Timeout
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from bullion.core.errors import (
    ProviderAPIError,
    ProviderAuthError,
    ProviderNetworkError,
    ProviderRateLimitError,
)

log = structlog.get_logger()

# ── Error classification ───────────────────────────────────────────────


def _classify_response(
    resp: requests.Response, name: str
) -> ProviderAuthError | ProviderRateLimitError | ProviderAPIError:
    """Turn a non-2xx response into our typed hierarchy."""
    status = resp.status_code
    msg = f"{name} HTTP {status}"

    if status in (401, 403):
        return ProviderAuthError(msg, status_code=status)
    if status == 429:
        retry_after = None
        retry_after_hdr = resp.headers.get("Retry-After")
        if retry_after_hdr is not None:
            try:
                retry_after = float(retry_after_hdr)
            except ValueError:
                pass
        return ProviderRateLimitError(msg, status_code=status, retry_after=retry_after)
    return ProviderAPIError(msg, status_code=status)


# ── Retry decorator for read operations ────────────────────────────────

_RETRYABLE = (ProviderNetworkError, ProviderRateLimitError)

_read_retry = retry(
    retry=retry_if_exception_type(_RETRYABLE),
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=1, max=10),
    reraise=True,
)


# ── Client ─────────────────────────────────────────────────────────────


class HttpClient:
    """GET-only requests wrapper shared by every upstream provider."""

    def __init__(
        self,
        name: str,
        *,
        timeout: float = 15.0,
        session: requests.Session | None = None,
    ) -> None:
        self._name = name
        self._timeout = timeout
        self._session = session or requests.Session()
        self._log = log.bind(client=name)

    @property
    def name(self) -> str:
        return self._name

    def _get(self, url: str, params: dict[str, Any] | None) -> requests.Response:
        try:
            resp = self._session.get(url, params=params, timeout=self._timeout)
        except (ConnectionError, Timeout, ReadTimeout) as exc:
            self._log.error("request_failed", error=str(exc))
            raise ProviderNetworkError(f"{self._name}: {exc}") from exc
        except requests.RequestException as exc:
            self._log.error("request_invalid", error=str(exc), kind=type(exc).__name__)
            raise ProviderAPIError(f"{self._name}: {exc}") from exc

        if not resp.ok:
            err = _classify_response(resp, self._name)
            self._log.error("request_rejected", status_code=resp.status_code)
            raise err
        return resp

    @_read_retry
    def get_json(self, url: str, params: dict[str, Any] | None = None) -> Any:
        self._log.debug("fetching_json", url=url)
        resp = self._get(url, params)
        try:
            return resp.json()
        except ValueError as exc:
            raise ProviderAPIError(f"{self._name}: response is not JSON") from exc

    @_read_retry
    def get_bytes(self, url: str, params: dict[str, Any] | None = None) -> bytes:
        self._log.info("fetching_file", url=url)
        resp = self._get(url, params)
        self._log.info("file_fetched", size=len(resp.content))
        return resp.content

    def close(self) -> None:
        self._session.close()
