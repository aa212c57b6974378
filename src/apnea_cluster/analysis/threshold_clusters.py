"""Gap-based grouping of FLG readings above a level threshold."""

from collections.abc import Iterable

from apnea_cluster.analysis.types import FlowLimitationReading, ThresholdCluster

__all__ = ["build_clusters"]


def _close(run: list[FlowLimitationReading]) -> ThresholdCluster:
    return ThresholdCluster(readings=run, start=run[0].timestamp, end=run[-1].timestamp)


def build_clusters(
    readings: Iterable[FlowLimitationReading],
    level_threshold: float,
    max_gap_sec: float,
) -> list[ThresholdCluster]:
    """
    Group readings at or above a level threshold into contiguous runs.

    Readings are filtered, stable-sorted by timestamp, then folded left to
    right: a reading joins the open run when it is at most max_gap_sec after
    the previous accepted reading, otherwise the open run is closed.

    Args:
        readings: FLG readings in any order
        level_threshold: Minimum level (inclusive) for a reading to count
        max_gap_sec: Maximum gap (inclusive) between consecutive readings

    Returns:
        Clusters in chronological order; empty when nothing passes the threshold
    """
    accepted = sorted(
        (reading for reading in readings if reading.level >= level_threshold),
        key=lambda reading: reading.timestamp,
    )

    closed: list[ThresholdCluster] = []
    run: list[FlowLimitationReading] = []

    for reading in accepted:
        if run and (reading.timestamp - run[-1].timestamp).total_seconds() > max_gap_sec:
            closed.append(_close(run))
            run = []
        run.append(reading)

    # Flush the open run
    if run:
        closed.append(_close(run))

    return closed
