"""
Normalization of OSCAR details rows into typed event streams.

This is the only place untyped rows enter the engine. Rows that cannot be
turned into a complete record are dropped, never raised.
"""

import logging
import math

from collections.abc import Iterable, Mapping, Sequence
from datetime import datetime, timezone
from typing import Any

from pydantic import ValidationError

from apnea_cluster.analysis.types import (
    AnnotationEvent,
    ChannelSample,
    FlowLimitationReading,
    NormalizedEvents,
)
from apnea_cluster.constants import (
    CHANNEL_ALIASES,
    COLUMN_DATETIME,
    COLUMN_EVENT,
    COLUMN_VALUE,
    EVENT_LABELS,
    EventKind,
)

logger = logging.getLogger(__name__)

__all__ = [
    "collect_channel_samples",
    "normalize_rows",
    "parse_number",
    "parse_timestamp",
]


def parse_timestamp(value: Any) -> datetime | None:
    """
    Parse a row timestamp.

    Accepts datetime objects and ISO-8601 strings. Naive values are taken
    as UTC, matching how OSCAR exports are read.

    Returns:
        Timezone-aware datetime, or None if the value is unparsable
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value.strip())
        except ValueError:
            return None
    else:
        return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def parse_number(value: Any) -> float | None:
    """Parse a finite float from a number or numeric string, else None."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int | float):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None

    if not math.isfinite(number):
        return None
    return number


def normalize_rows(rows: Iterable[Mapping[str, Any]]) -> NormalizedEvents:
    """
    Map details rows into sorted annotation events and FLG readings.

    Rows whose Event label is not an apnea or FLG label are skipped. Rows
    with an unparsable timestamp, a non-numeric or non-finite value, or a
    duration that is negative or pushes the event end out of range are
    dropped.

    Args:
        rows: Mappings with DateTime, Event and Data/Duration keys

    Returns:
        NormalizedEvents with both sequences stable-sorted by timestamp
    """
    annotations: list[AnnotationEvent] = []
    flg_readings: list[FlowLimitationReading] = []
    dropped = 0

    for row in rows:
        kind = EVENT_LABELS.get(str(row.get(COLUMN_EVENT, "")).strip())
        if kind is None:
            continue

        timestamp = parse_timestamp(row.get(COLUMN_DATETIME))
        value = parse_number(row.get(COLUMN_VALUE))
        if timestamp is None or value is None:
            dropped += 1
            continue

        if kind is EventKind.FLOW_LIMITATION:
            flg_readings.append(FlowLimitationReading(timestamp=timestamp, level=value))
        elif value < 0:
            dropped += 1
        else:
            try:
                event = AnnotationEvent(
                    timestamp=timestamp, kind=kind, duration_sec=value
                )
            except ValidationError:
                # End time not representable
                dropped += 1
                continue
            annotations.append(event)

    if dropped:
        logger.debug(f"Dropped {dropped} malformed event rows during normalization")

    logger.debug(
        f"Normalized {len(annotations)} annotation events, "
        f"{len(flg_readings)} FLG readings"
    )

    return NormalizedEvents(
        annotations=sorted(annotations, key=lambda event: event.timestamp),
        flg_readings=sorted(flg_readings, key=lambda reading: reading.timestamp),
    )


def collect_channel_samples(
    rows: Iterable[Mapping[str, Any]], channels: Sequence[str]
) -> dict[str, list[ChannelSample]]:
    """
    Collect numeric samples for auxiliary channels such as Pressure and EPAP.

    Args:
        rows: Details rows
        channels: Channel names to collect; alternate labels such as
            "FlowLimitation" are folded into their channel ("FLG")

    Returns:
        Mapping of channel label to time-sorted samples (empty lists included)
    """
    samples: dict[str, list[ChannelSample]] = {channel: [] for channel in channels}

    for row in rows:
        label = str(row.get(COLUMN_EVENT, "")).strip()
        channel = CHANNEL_ALIASES.get(label, label)
        if channel not in samples:
            continue
        timestamp = parse_timestamp(row.get(COLUMN_DATETIME))
        value = parse_number(row.get(COLUMN_VALUE))
        if timestamp is None or value is None:
            continue
        samples[channel].append(ChannelSample(timestamp=timestamp, value=value))

    return {
        channel: sorted(values, key=lambda sample: sample.timestamp)
        for channel, values in samples.items()
    }
