"""Per-cluster channel statistics and text reports."""

from collections.abc import Mapping, Sequence

import numpy as np

from apnea_cluster.analysis.types import (
    ApneaCluster,
    ChannelSample,
    ChannelStats,
    ClusterSummary,
    FalseNegativeCandidate,
)


def channel_stats(
    samples: Sequence[ChannelSample], cluster: ApneaCluster
) -> ChannelStats | None:
    """
    Calculate statistics for samples inside [cluster.start, cluster.end].

    Args:
        samples: Channel samples
        cluster: Cluster whose window is used

    Returns:
        ChannelStats, or None if no sample falls inside the window
    """
    values = np.array(
        [s.value for s in samples if cluster.start <= s.timestamp <= cluster.end],
        dtype=float,
    )
    if values.size == 0:
        return None

    return ChannelStats(
        samples=int(values.size),
        min=float(np.min(values)),
        max=float(np.max(values)),
        mean=float(np.mean(values)),
    )


def summarize_cluster(
    cluster: ApneaCluster, channels: Mapping[str, Sequence[ChannelSample]]
) -> ClusterSummary:
    """
    Summarize auxiliary channels (FLG, Pressure, EPAP) within a cluster.

    Channels with no samples inside the cluster window are omitted.
    """
    stats = {}
    for name, samples in channels.items():
        result = channel_stats(samples, cluster)
        if result is not None:
            stats[name] = result
    return ClusterSummary(cluster=cluster, channels=stats)


def format_cluster_report(summaries: Sequence[ClusterSummary]) -> str:
    """
    Generate the human-readable cluster listing.

    Args:
        summaries: Summaries of validated clusters

    Returns:
        Multi-line report text
    """
    lines: list[str] = []
    for i, summary in enumerate(summaries, start=1):
        cluster = summary.cluster
        lines.append(f"Cluster {i}:")
        lines.append(f"  Start:    {cluster.start.isoformat()}")
        lines.append(f"  End:      {cluster.end.isoformat()}")
        lines.append(f"  Duration: {cluster.duration_sec:.1f} sec")
        lines.append("  Events:")
        for event in cluster.events:
            lines.append(
                f"    {event.kind.value} @ {event.timestamp.isoformat()} "
                f"dur={event.duration_sec:g}s"
            )
        for name, stats in summary.channels.items():
            label = f"{name}:"
            lines.append(
                f"  {label:<11} min={stats.min:g}, max={stats.max:g} "
                f"({stats.samples} samples)"
            )
    return "\n".join(lines)


def format_false_negative_report(candidates: Sequence[FalseNegativeCandidate]) -> str:
    """Generate the human-readable false-negative listing."""
    lines = []
    for i, candidate in enumerate(candidates, start=1):
        lines.append(
            f"Candidate {i}: {candidate.start.isoformat()} -> "
            f"{candidate.end.isoformat()} ({candidate.duration_sec:.1f} sec, "
            f"peak FLG {candidate.confidence:.2f})"
        )
    return "\n".join(lines)
