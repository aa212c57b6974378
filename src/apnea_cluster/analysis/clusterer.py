"""
Apnea event clustering with FLG bridging and edge extension.

Annotated apnea events are grouped when they are close in time, or when the
gap between them is short and covered by flow limitation (bridging). Each
group's boundaries are then widened to sustained high-level flow limitation
immediately before or after it (edge extension), since device annotations
tend to under-report the true onset and offset of a disturbance.
"""

import logging

from bisect import bisect_left
from collections.abc import Sequence
from datetime import datetime

from apnea_cluster.analysis.config import ClusteringConfig
from apnea_cluster.analysis.threshold_clusters import build_clusters
from apnea_cluster.analysis.types import (
    AnnotationEvent,
    ApneaCluster,
    FlowLimitationReading,
    ThresholdCluster,
)
from apnea_cluster.analysis.utils import has_timestamp_between, seconds_between

logger = logging.getLogger(__name__)

__all__ = ["cluster_apnea_events"]


def cluster_apnea_events(
    annotations: Sequence[AnnotationEvent],
    flg_readings: Sequence[FlowLimitationReading],
    config: ClusteringConfig,
) -> list[ApneaCluster]:
    """
    Group annotation events into raw (unvalidated) apnea clusters.

    Args:
        annotations: Apnea annotation events
        flg_readings: Flow limitation readings
        config: Clustering thresholds

    Returns:
        One ApneaCluster per group, in chronological order of the groups
    """
    if not annotations:
        return []

    bridge_clusters = build_clusters(
        flg_readings, config.bridge_threshold, config.bridge_gap_sec
    )
    bridge_times = [
        reading.timestamp for cluster in bridge_clusters for reading in cluster.readings
    ]

    valid_edges = [
        cluster
        for cluster in build_clusters(
            flg_readings, config.edge_threshold, config.bridge_gap_sec
        )
        if cluster.duration_sec >= config.edge_min_duration_sec
    ]

    events = sorted(annotations, key=lambda event: event.timestamp)
    groups = _group_events(events, bridge_times, config)

    logger.debug(
        f"Grouped {len(events)} events into {len(groups)} groups "
        f"({len(bridge_clusters)} bridge clusters, {len(valid_edges)} edge clusters)"
    )

    clusters = []
    for group in groups:
        start, end = _extend_boundaries(
            group[0].timestamp,
            group[-1].end,
            valid_edges,
            config.gap_sec,
        )
        clusters.append(
            ApneaCluster(
                start=start,
                end=end,
                duration_sec=seconds_between(start, end),
                count=len(group),
                events=group,
            )
        )
    return clusters


def _group_events(
    events: list[AnnotationEvent],
    bridge_times: list[datetime],
    config: ClusteringConfig,
) -> list[list[AnnotationEvent]]:
    groups: list[list[AnnotationEvent]] = []
    current: list[AnnotationEvent] = []

    for event in events:
        if current:
            prev_end = current[-1].end
            gap = seconds_between(prev_end, event.timestamp)
            bridged = gap <= config.bridge_gap_sec and has_timestamp_between(
                bridge_times, prev_end, event.timestamp
            )
            if not (gap <= config.gap_sec or bridged):
                groups.append(current)
                current = []
        current.append(event)

    # Flush the open group
    if current:
        groups.append(current)

    return groups


def _extend_boundaries(
    start: datetime,
    end: datetime,
    edges: list[ThresholdCluster],
    gap_sec: float,
) -> tuple[datetime, datetime]:
    """
    Widen a group's boundaries to adjacent edge clusters.

    The first edge cluster in chronological order that ends within gap_sec
    before start moves start to its beginning; the first one that begins
    within gap_sec after end moves end to its finish.
    """
    new_start, new_end = start, end

    # Edges are disjoint and chronological, so both keys below are ascending.
    # Distances are compared in float seconds; gap_sec may be infinite
    before = bisect_left(
        edges, -gap_sec, key=lambda edge: seconds_between(start, edge.end)
    )
    if before < len(edges) and edges[before].end <= start:
        new_start = edges[before].start

    after = bisect_left(edges, 0.0, key=lambda edge: seconds_between(end, edge.start))
    if after < len(edges) and seconds_between(end, edges[after].start) <= gap_sec:
        new_end = edges[after].end

    return new_start, new_end
