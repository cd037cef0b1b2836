"""Ingest — bhavcopy parsing, download, scoring run and latest snapshot."""

from bullion.ingest.bhavcopy import (
    BhavcopySchema,
    extract_gold_row,
    extract_row,
    map_row_to_bar,
    parse_csv_loose,
    to_number,
)
from bullion.ingest.download import download_bhavcopy
from bullion.ingest.pipeline import (
    SOURCE_FILE,
    SOURCE_URL,
    ingest_bhavcopy_file,
    ingest_settlement,
)
from bullion.ingest.snapshot import build_snapshot, load_latest, save_latest

__all__ = [
    "BhavcopySchema",
    "SOURCE_FILE",
    "SOURCE_URL",
    "build_snapshot",
    "download_bhavcopy",
    "extract_gold_row",
    "extract_row",
    "ingest_bhavcopy_file",
    "ingest_settlement",
    "load_latest",
    "map_row_to_bar",
    "parse_csv_loose",
    "save_latest",
    "to_number",
]
