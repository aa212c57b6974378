"""
apnea-cluster: Apnea event clustering and false-negative detection

Groups annotated CPAP apnea events into clusters using flow limitation (FLG)
bridging and edge extension, and flags sustained flow limitation the device
never annotated.
"""

from typing import Any

__all__ = ["ClusterAnalysisService", "ClusteringConfig"]


def __getattr__(name: str) -> Any:
    """Lazy load the analysis entry points to keep CLI startup light."""
    if name == "ClusterAnalysisService":
        from apnea_cluster.analysis.service import ClusterAnalysisService

        return ClusterAnalysisService
    if name == "ClusteringConfig":
        from apnea_cluster.analysis.config import ClusteringConfig

        return ClusteringConfig
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
