"""
Synthetic test data generators for annotation events and FLG readings.

All timestamps are offsets in seconds from BASE_TIME so tests can state
scenarios in plain seconds.
"""

import csv

from collections.abc import Iterable, Sequence
from datetime import datetime, timedelta, timezone
from pathlib import Path

import numpy as np

from apnea_cluster.analysis.types import AnnotationEvent, FlowLimitationReading
from apnea_cluster.constants import DETAILS_COLUMNS, EventKind

BASE_TIME = datetime(2025, 6, 15, 1, 0, 0, tzinfo=timezone.utc)


def at(offset_sec: float) -> datetime:
    """Timestamp offset_sec seconds after BASE_TIME."""
    return BASE_TIME + timedelta(seconds=offset_sec)


def make_event(
    offset_sec: float,
    duration_sec: float = 10.0,
    kind: EventKind = EventKind.OBSTRUCTIVE,
) -> AnnotationEvent:
    """Create an annotation event at an offset from BASE_TIME."""
    return AnnotationEvent(
        timestamp=at(offset_sec), kind=kind, duration_sec=duration_sec
    )


def make_reading(offset_sec: float, level: float) -> FlowLimitationReading:
    """Create an FLG reading at an offset from BASE_TIME."""
    return FlowLimitationReading(timestamp=at(offset_sec), level=level)


def flg_series(
    start_sec: float, end_sec: float, level: float, step_sec: float = 5.0
) -> list[FlowLimitationReading]:
    """
    Generate evenly spaced FLG readings at a constant level.

    Args:
        start_sec: First reading offset
        end_sec: Last reading offset (inclusive)
        level: FLG level of every reading
        step_sec: Spacing between readings

    Returns:
        Readings in ascending time order
    """
    count = int(round((end_sec - start_sec) / step_sec)) + 1
    offsets = np.linspace(start_sec, end_sec, count)
    return [make_reading(float(offset), level) for offset in offsets]


def generate_night(
    seed: int = 7,
) -> tuple[list[AnnotationEvent], list[FlowLimitationReading]]:
    """
    Generate a reproducible night of mixed events and FLG readings.

    Contains apnea runs, isolated events, FLG plateaus near runs, and
    FLG-only plateaus away from any event.

    Returns:
        Tuple of (annotation_events, flg_readings), both sorted
    """
    rng = np.random.default_rng(seed)
    kinds = [EventKind.OBSTRUCTIVE, EventKind.CENTRAL, EventKind.MIXED]

    events: list[AnnotationEvent] = []
    readings: list[FlowLimitationReading] = []

    offset = 0.0
    for _ in range(12):
        run_length = int(rng.integers(1, 6))
        for _ in range(run_length):
            kind = kinds[int(rng.integers(0, len(kinds)))]
            duration = float(rng.integers(10, 40))
            events.append(make_event(offset, duration, kind))
            offset += duration + float(rng.integers(20, 90))
        plateau_level = float(rng.choice([0.2, 0.6, 0.97, 0.99]))
        # Multiples of the 5s step keep reading times on whole seconds
        plateau_length = 5.0 * float(rng.integers(4, 80))
        readings.extend(flg_series(offset, offset + plateau_length, plateau_level))
        offset += plateau_length + float(rng.integers(150, 600))

    return events, readings


def to_details_rows(
    events: Iterable[AnnotationEvent],
    readings: Iterable[FlowLimitationReading],
    extra_rows: Sequence[dict[str, str]] = (),
) -> list[dict[str, str]]:
    """Render typed events back into details CSV rows."""
    labels = {
        EventKind.OBSTRUCTIVE: "Obstructive",
        EventKind.CENTRAL: "ClearAirway",
        EventKind.MIXED: "Mixed",
    }
    rows = [
        {
            "DateTime": event.timestamp.strftime("%Y-%m-%dT%H:%M:%S"),
            "Type": "0",
            "Event": labels[event.kind],
            "Data/Duration": f"{event.duration_sec:g}",
        }
        for event in events
    ]
    rows.extend(
        {
            "DateTime": reading.timestamp.strftime("%Y-%m-%dT%H:%M:%S"),
            "Type": "0",
            "Event": "FLG",
            "Data/Duration": f"{reading.level:g}",
        }
        for reading in readings
    )
    rows.extend(extra_rows)
    return rows


def write_details_csv(path: Path, rows: Iterable[dict[str, str]]) -> Path:
    """Write rows as a details export with the standard header."""
    with open(path, "w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=list(DETAILS_COLUMNS))
        writer.writeheader()
        writer.writerows(rows)
    return path
