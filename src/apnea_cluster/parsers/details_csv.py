"""
Reader for OSCAR "details" CSV exports.

The export has one row per event or channel sample:

    DateTime,Type,Event,Data/Duration
    2025-06-15T01:02:03,0,Obstructive,12
    2025-06-15T01:02:05,0,FLG,0.31

Rows are returned as plain dictionaries; typing happens in
apnea_cluster.analysis.normalization.
"""

import csv
import logging

from pathlib import Path

from apnea_cluster.constants import (
    COLUMN_DATETIME,
    COLUMN_EVENT,
    COLUMN_VALUE,
    DETAILS_COLUMNS,
)
from apnea_cluster.utils.validation import validate_date_format

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = (COLUMN_DATETIME, COLUMN_EVENT, COLUMN_VALUE)


def read_details_csv(path: Path | str, date: str | None = None) -> list[dict[str, str]]:
    """
    Read a details export, optionally keeping a single day.

    Args:
        path: Path to the CSV file
        date: Optional YYYY-MM-DD prefix matched against DateTime

    Returns:
        Rows as dictionaries keyed by column name

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the date is malformed or required columns are missing
    """
    path = Path(path)
    if date is not None:
        date = validate_date_format(date)
    rows: list[dict[str, str]] = []
    skipped = 0

    with open(path, newline="", encoding="utf-8-sig") as f:
        reader = csv.DictReader(f)
        header = reader.fieldnames or []
        missing = [column for column in REQUIRED_COLUMNS if column not in header]
        if missing:
            raise ValueError(
                f"{path.name} is not a details export: missing columns {missing} "
                f"(expected {', '.join(DETAILS_COLUMNS)})"
            )

        for row in reader:
            if any(row.get(column) is None for column in REQUIRED_COLUMNS):
                skipped += 1
                continue
            if date and not row[COLUMN_DATETIME].startswith(date):
                continue
            rows.append(row)

    if skipped:
        logger.debug(f"Skipped {skipped} short rows in {path.name}")
    logger.info(f"Read {len(rows)} rows from {path}")

    return rows
