"""Acceptance rules for raw apnea clusters."""

import logging

from collections.abc import Iterable

from apnea_cluster.analysis.config import ClusteringConfig
from apnea_cluster.analysis.types import ApneaCluster

logger = logging.getLogger(__name__)


def is_valid_cluster(cluster: ApneaCluster, config: ClusteringConfig) -> bool:
    """
    Check a cluster against the event count, total duration and span rules.

    The span cap guards against runaway edge extension.
    """
    return (
        cluster.count >= config.min_cluster_events
        and cluster.total_event_duration_sec >= config.min_cluster_total_duration_sec
        and cluster.duration_sec <= config.max_cluster_span_sec
    )


def validate_clusters(
    clusters: Iterable[ApneaCluster], config: ClusteringConfig
) -> list[ApneaCluster]:
    """Keep the clusters that pass is_valid_cluster, preserving order."""
    clusters = list(clusters)
    valid = [cluster for cluster in clusters if is_valid_cluster(cluster, config)]
    logger.debug(f"{len(valid)} of {len(clusters)} clusters passed validation")
    return valid
