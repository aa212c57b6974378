"""
Analysis service for apnea clustering and false-negative detection.

This module provides the main interface for running the clustering engine on
normalized event streams or raw details rows. The service is stateless apart
from its configuration, so a host may call it from any thread and re-invoke
it freely on changing inputs.
"""

import logging
import time

from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from apnea_cluster.analysis.clusterer import cluster_apnea_events
from apnea_cluster.analysis.config import BALANCED_CONFIG, ClusteringConfig
from apnea_cluster.analysis.false_negatives import detect_false_negatives
from apnea_cluster.analysis.normalization import normalize_rows
from apnea_cluster.analysis.types import (
    AnnotationEvent,
    ClusterAnalysisResult,
    FlowLimitationReading,
)
from apnea_cluster.analysis.validator import validate_clusters

logger = logging.getLogger(__name__)

__all__ = ["ClusterAnalysisService", "ClusterAnalysisResult", "analyze_events"]


class ClusterAnalysisService:
    """
    Service for running apnea clustering and false-negative detection.

    This service handles:
    - Grouping annotated apnea events into clusters
    - Validating clusters against count, duration and span rules
    - Detecting FLG-only false-negative candidates

    Example:
        >>> service = ClusterAnalysisService(get_preset("strict"))
        >>> result = service.analyze_rows(rows)
        >>> print(f"{len(result.clusters)} clusters")
    """

    def __init__(self, config: ClusteringConfig | None = None):
        """
        Initialize analysis service.

        Args:
            config: Clustering configuration (None = balanced defaults)
        """
        self.config = config or BALANCED_CONFIG

    def analyze(
        self,
        annotations: Sequence[AnnotationEvent],
        flg_readings: Sequence[FlowLimitationReading],
    ) -> ClusterAnalysisResult:
        """
        Run clustering, validation and false-negative detection.

        Args:
            annotations: Apnea annotation events
            flg_readings: Flow limitation readings

        Returns:
            ClusterAnalysisResult with both outputs ordered by start
        """
        start_time = time.perf_counter()

        raw_clusters = cluster_apnea_events(annotations, flg_readings, self.config)
        clusters = sorted(
            validate_clusters(raw_clusters, self.config),
            key=lambda cluster: cluster.start,
        )
        false_negatives = detect_false_negatives(
            flg_readings, annotations, self.config
        )

        elapsed = time.perf_counter() - start_time
        logger.info(
            f"Found {len(clusters)} apnea clusters ({len(raw_clusters)} raw) and "
            f"{len(false_negatives)} false-negative candidates in {elapsed:.3f}s"
        )

        return ClusterAnalysisResult(clusters=clusters, false_negatives=false_negatives)

    def analyze_rows(self, rows: Iterable[Mapping[str, Any]]) -> ClusterAnalysisResult:
        """
        Normalize details rows and analyze them.

        Args:
            rows: Mappings with DateTime, Event and Data/Duration keys

        Returns:
            ClusterAnalysisResult
        """
        normalized = normalize_rows(rows)
        return self.analyze(normalized.annotations, normalized.flg_readings)


def analyze_events(
    annotations: Sequence[AnnotationEvent],
    flg_readings: Sequence[FlowLimitationReading],
    config: ClusteringConfig | None = None,
) -> ClusterAnalysisResult:
    """Analyze typed event streams with a one-off service."""
    return ClusterAnalysisService(config).analyze(annotations, flg_readings)
