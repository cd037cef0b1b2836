"""Fetch a remote bhavcopy file to local disk."""

from __future__ import annotations

from pathlib import Path

import structlog

from bullion.providers.client import HttpClient

logger = structlog.get_logger(__name__)


def download_bhavcopy(url: str, out_path: Path, *, http: HttpClient | None = None) -> Path:
    """Download *url* to *out_path*, creating parent directories."""
    client = http or HttpClient("mcx-bhavcopy", timeout=20.0)
    content = client.get_bytes(url)

    out_path = Path(out_path)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_bytes(content)
    logger.info("bhavcopy_downloaded", path=str(out_path), size=len(content))
    return out_path
