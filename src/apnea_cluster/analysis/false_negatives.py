"""
False-negative detection from FLG-only clusters.

A false-negative candidate is a run of sustained flow limitation that the
device never annotated as an apnea: long enough to matter, short enough to
be a single disturbance, clear of annotations, and with a near-certain peak.
"""

import logging

from collections.abc import Sequence

from apnea_cluster.analysis.config import ClusteringConfig
from apnea_cluster.analysis.threshold_clusters import build_clusters
from apnea_cluster.analysis.types import (
    AnnotationEvent,
    FalseNegativeCandidate,
    FlowLimitationReading,
)
from apnea_cluster.analysis.utils import has_timestamp_between
from apnea_cluster.constants import APNEA_KINDS

logger = logging.getLogger(__name__)

__all__ = ["detect_false_negatives"]


def detect_false_negatives(
    flg_readings: Sequence[FlowLimitationReading],
    annotations: Sequence[AnnotationEvent],
    config: ClusteringConfig,
) -> list[FalseNegativeCandidate]:
    """
    Find sustained flow limitation with no annotated apnea nearby.

    Filters are applied as duration window, then annotation overlap, then
    confidence floor. All three must hold.

    Args:
        flg_readings: Flow limitation readings
        annotations: Annotated apnea events
        config: Detection thresholds

    Returns:
        Candidates ordered by start
    """
    clusters = build_clusters(
        flg_readings, config.bridge_threshold, config.bridge_gap_sec
    )

    candidates = [
        FalseNegativeCandidate(
            start=cluster.start,
            end=cluster.end,
            duration_sec=cluster.duration_sec,
            confidence=cluster.peak_level,
        )
        for cluster in clusters
    ]

    in_window = [
        candidate
        for candidate in candidates
        if config.false_neg_duration_min_sec
        <= candidate.duration_sec
        <= config.false_neg_duration_max_sec
    ]

    annotation_times = sorted(
        event.timestamp for event in annotations if event.kind in APNEA_KINDS
    )
    unannotated = [
        candidate
        for candidate in in_window
        if not has_timestamp_between(
            annotation_times,
            candidate.start,
            candidate.end,
            padding_sec=config.overlap_window_sec,
        )
    ]

    confident = [
        candidate
        for candidate in unannotated
        if candidate.confidence >= config.false_neg_confidence_min
    ]

    logger.debug(
        f"False negatives: {len(clusters)} FLG clusters, {len(in_window)} in "
        f"duration window, {len(unannotated)} unannotated, {len(confident)} confident"
    )

    return sorted(confident, key=lambda candidate: candidate.start)
