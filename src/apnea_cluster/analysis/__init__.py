"""
Apnea clustering and false-negative detection engine.

Provides the typed event model, the normalization adapter, and the analysis
service that combines clustering, validation and false-negative detection.
"""

from .config import (
    AVAILABLE_PRESETS,
    DEFAULT_PRESET,
    ClusteringConfig,
    get_preset,
)
from .normalization import normalize_rows
from .service import ClusterAnalysisService, analyze_events
from .types import (
    AnnotationEvent,
    ApneaCluster,
    ClusterAnalysisResult,
    FalseNegativeCandidate,
    FlowLimitationReading,
)

__all__ = [
    "AVAILABLE_PRESETS",
    "DEFAULT_PRESET",
    "AnnotationEvent",
    "ApneaCluster",
    "ClusterAnalysisResult",
    "ClusterAnalysisService",
    "ClusteringConfig",
    "FalseNegativeCandidate",
    "FlowLimitationReading",
    "analyze_events",
    "get_preset",
    "normalize_rows",
]
