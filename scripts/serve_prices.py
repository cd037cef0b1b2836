"""Serve the price board at GET /prices.

Usage:
    python -m scripts.serve_prices
"""

import sys

import structlog
import uvicorn

from bullion.core import load_settings, setup_logging
from bullion.prices import create_app


def main() -> int:
    cfg = load_settings()
    setup_logging(cfg.logging, process="serve_prices")
    log = structlog.get_logger()

    app = create_app(cfg)

    log.info(
        "server_starting",
        url=f"http://{cfg.server.host}:{cfg.server.port}",
        endpoint="/prices",
    )
    uvicorn.run(app, host=cfg.server.host, port=cfg.server.port, log_config=None)
    return 0


if __name__ == "__main__":
    sys.exit(main())
