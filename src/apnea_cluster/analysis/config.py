"""Clustering configuration and predefined presets."""

import math

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from apnea_cluster.constants import ClusteringConstants as CC
from apnea_cluster.constants import FalseNegativePresetConstants as FNP

__all__ = [
    "ClusteringConfig",
    "STRICT_CONFIG",
    "BALANCED_CONFIG",
    "LENIENT_CONFIG",
    "AVAILABLE_PRESETS",
    "DEFAULT_PRESET",
    "get_preset",
]


class ClusteringConfig(BaseModel):
    """
    Configuration for apnea clustering and false-negative detection.

    Gaps, windows and durations are in seconds. FLG thresholds use the raw
    FlowLim index. Uses constants from ClusteringConstants as defaults.
    Infinity is accepted wherever a bound may be left open; NaN is not.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    # Annotation grouping
    gap_sec: float = Field(
        default=CC.GAP_SECONDS,
        ge=0,
        description="Max gap between annotation events to merge them",
    )

    # FLG bridging
    bridge_threshold: float = Field(
        default=CC.FLG_BRIDGE_THRESHOLD,
        ge=0,
        description="Min FLG level counted toward bridging",
    )
    bridge_gap_sec: float = Field(
        default=CC.FLG_CLUSTER_GAP_SECONDS,
        ge=0,
        description="Max gap within an FLG sub-cluster",
    )

    # FLG edge extension
    edge_threshold: float = Field(
        default=CC.EDGE_THRESHOLD,
        ge=0,
        description="Min FLG level for boundary-extension clusters",
    )
    edge_min_duration_sec: float = Field(
        default=CC.EDGE_MIN_DURATION_SECONDS,
        ge=0,
        description="Min span of an edge cluster",
    )

    # Cluster validation
    min_cluster_events: int = Field(
        default=CC.MIN_CLUSTER_EVENTS,
        ge=1,
        description="Min number of events in a valid cluster",
    )
    min_cluster_total_duration_sec: float = Field(
        default=CC.MIN_CLUSTER_TOTAL_DURATION_SECONDS,
        ge=0,
        description="Min summed event duration in a valid cluster",
    )
    max_cluster_span_sec: float = Field(
        default=CC.MAX_CLUSTER_SPAN_SECONDS,
        ge=0,
        description="Max start-to-end span of a valid cluster",
    )

    # False-negative detection
    false_neg_duration_min_sec: float = Field(
        default=CC.FALSE_NEG_DURATION_MIN_SECONDS,
        ge=0,
        description="Min FLG-only cluster duration",
    )
    false_neg_duration_max_sec: float = Field(
        default=CC.FALSE_NEG_DURATION_MAX_SECONDS,
        ge=0,
        description="Max FLG-only cluster duration",
    )
    false_neg_confidence_min: float = Field(
        default=CC.FALSE_NEG_CONFIDENCE_MIN,
        ge=0,
        description="Min peak FLG level of a false negative",
    )
    overlap_window_sec: float = Field(
        default=CC.OVERLAP_WINDOW_SECONDS,
        ge=0,
        description="Padding around a candidate searched for annotations",
    )

    @field_validator("*")
    @classmethod
    def _reject_nan(cls, value: Any) -> Any:
        if isinstance(value, float) and math.isnan(value):
            raise ValueError("must be a number, not NaN")
        return value

    @model_validator(mode="after")
    def _check_threshold_order(self) -> "ClusteringConfig":
        if self.edge_threshold < self.bridge_threshold:
            raise ValueError(
                f"edge_threshold ({self.edge_threshold}) must be greater than or "
                f"equal to bridge_threshold ({self.bridge_threshold})"
            )
        if self.false_neg_duration_min_sec > self.false_neg_duration_max_sec:
            raise ValueError(
                f"false_neg_duration_min_sec ({self.false_neg_duration_min_sec}) "
                f"must not exceed false_neg_duration_max_sec "
                f"({self.false_neg_duration_max_sec})"
            )
        return self


# ============================================================================
# Presets
# ============================================================================

STRICT_CONFIG = ClusteringConfig(
    false_neg_confidence_min=FNP.STRICT_CONFIDENCE_MIN,  # 0.98
    false_neg_duration_min_sec=FNP.STRICT_DURATION_MIN_SECONDS,  # 120 seconds
)

BALANCED_CONFIG = ClusteringConfig()

LENIENT_CONFIG = ClusteringConfig(
    false_neg_confidence_min=FNP.LENIENT_CONFIDENCE_MIN,  # 0.85
    false_neg_duration_min_sec=FNP.LENIENT_DURATION_MIN_SECONDS,  # 45 seconds
)

AVAILABLE_PRESETS: dict[str, ClusteringConfig] = {
    "strict": STRICT_CONFIG,
    "balanced": BALANCED_CONFIG,
    "lenient": LENIENT_CONFIG,
}

DEFAULT_PRESET = "balanced"


def get_preset(name: str) -> ClusteringConfig:
    """
    Get a predefined configuration by name.

    Args:
        name: Preset name (e.g., "strict", "balanced", "lenient")

    Returns:
        ClusteringConfig for the preset

    Raises:
        ValueError: If preset name is not recognized
    """
    if name not in AVAILABLE_PRESETS:
        raise ValueError(
            f"Unknown preset: {name}. Available: {list(AVAILABLE_PRESETS.keys())}"
        )
    return AVAILABLE_PRESETS[name]
