"""Process logging — structlog events and stdlib records on one stderr stream.

Both entry points call :func:`setup_logging` once: the ingestion CLI
(short-lived, usually under cron) and the price server (long-running,
under uvicorn).  Every event carries ``process`` so the two can share a
log sink.
"""

from __future__ import annotations

import logging
import sys

import structlog

from bullion.core.config import LoggingConfig

# Loggers owned by the ASGI server; they install their own handlers.
_SERVER_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access")

# Library loggers that are noisy below WARNING.
_QUIET_LIBRARIES = ("urllib3", "asyncio")


def _wants_json(fmt: str) -> bool:
    if fmt == "auto":
        return not sys.stderr.isatty()
    return fmt == "json"


def _render_chain(fmt: str) -> list[structlog.types.Processor]:
    if _wants_json(fmt):
        return [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    # ConsoleRenderer formats tracebacks itself
    return [structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())]


def setup_logging(cfg: LoggingConfig | None = None, *, process: str | None = None) -> None:
    """Route structlog and stdlib logging through one formatter on stderr.

    Args:
        cfg:     Level, renderer and access-log switch; defaults when None.
        process: Bound into every event (``"update_mcx"``, ``"serve_prices"``).
    """
    cfg = cfg or LoggingConfig()
    level = logging.getLevelName(cfg.level)

    pre_chain: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            *pre_chain,
            structlog.processors.StackInfoRenderer(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=pre_chain,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                *_render_chain(cfg.format),
            ],
        )
    )

    root = logging.getLogger()
    for old in list(root.handlers):
        root.removeHandler(old)
    root.addHandler(handler)
    root.setLevel(level)

    for name in _SERVER_LOGGERS:
        server_logger = logging.getLogger(name)
        server_logger.handlers.clear()
        server_logger.propagate = True
    logging.getLogger("uvicorn.access").setLevel(
        logging.INFO if cfg.access_log else logging.WARNING
    )
    for name in _QUIET_LIBRARIES:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

    structlog.contextvars.clear_contextvars()
    if process:
        structlog.contextvars.bind_contextvars(process=process)
