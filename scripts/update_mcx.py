"""Ingest one MCX bhavcopy day: append to history, rescore, rewrite the latest snapshot.

Usage:
    python -m scripts.update_mcx --file ./bhavcopy.csv --date 2026-02-18
    python -m scripts.update_mcx --url https://.../bhavcopy.csv --date 2026-02-18

Exit codes: 0 ok, 1 missing input, 2 instrument row not found,
3 OHLC missing or invalid, 4 download failed.
"""

import argparse
import json
import sys
from datetime import date, datetime, timezone
from pathlib import Path

import structlog

from bullion.core import (
    BarValidationError,
    ProviderError,
    SettlementRowNotFound,
    load_settings,
    setup_logging,
)
from bullion.history import BarStore
from bullion.ingest import SOURCE_FILE, SOURCE_URL, download_bhavcopy, ingest_bhavcopy_file
from bullion.providers import HttpClient


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    src = parser.add_mutually_exclusive_group()
    src.add_argument("--file", type=Path, help="Local bhavcopy CSV")
    src.add_argument("--url", help="Bhavcopy CSV download URL")
    parser.add_argument(
        "--date",
        type=date.fromisoformat,
        default=None,
        help="Settlement date YYYY-MM-DD (default: today, UTC)",
    )
    parser.add_argument("--instrument", default="GOLD")
    parser.add_argument("--config", type=Path, default=None, help="Path to config.toml")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    cfg = load_settings(args.config)
    setup_logging(cfg.logging, process="update_mcx")
    log = structlog.get_logger()

    if args.file is None and args.url is None:
        log.error("missing_input", hint="Provide --file <path> OR --url <download-url>")
        return 1

    day = args.date or datetime.now(timezone.utc).date()

    input_path = args.file
    source = SOURCE_FILE
    if args.url:
        source = SOURCE_URL
        input_path = cfg.paths.raw_dir / f"mcx_bhavcopy_{day.isoformat()}.csv"
        try:
            download_bhavcopy(
                args.url,
                input_path,
                http=HttpClient("mcx-bhavcopy", timeout=cfg.providers.download_timeout_s),
            )
        except ProviderError as exc:
            log.error("download_failed", url=args.url, error=str(exc))
            return 4

    store = BarStore.load(cfg.paths.history_path)
    try:
        snapshot = ingest_bhavcopy_file(
            input_path,
            day,
            store,
            cfg.paths.latest_path,
            instrument=args.instrument.upper(),
            source=source,
            config=cfg.scoring,
        )
    except SettlementRowNotFound as exc:
        log.error(
            "instrument_row_not_found",
            error=str(exc),
            hint="Check the CSV header and one instrument row against the column aliases",
        )
        return 2
    except BarValidationError as exc:
        log.error(
            "bar_rejected",
            error=str(exc),
            parsed=exc.parsed,
            hint="Likely header mapping mismatch",
        )
        return 3

    log.info("update_mcx_done", latest_path=str(cfg.paths.latest_path))
    print(json.dumps(snapshot, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
