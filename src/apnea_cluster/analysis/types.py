"""Analysis type definitions for apnea clustering."""

import math

from datetime import datetime, timedelta

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    computed_field,
    field_validator,
    model_validator,
)

from apnea_cluster.constants import APNEA_KINDS, EventKind

# ============================================================================
# Event Types
# ============================================================================


class AnnotationEvent(BaseModel):
    """
    Device-flagged apnea occurrence.

    Attributes:
        timestamp: Event onset
        kind: Obstructive, Central or Mixed
        duration_sec: Event duration reported by the device (seconds)
    """

    model_config = ConfigDict(frozen=True)

    timestamp: datetime = Field(description="Event onset")
    kind: EventKind = Field(description="Apnea kind")
    duration_sec: float = Field(ge=0, description="Event duration (seconds)")

    @field_validator("kind")
    @classmethod
    def _check_apnea_kind(cls, kind: EventKind) -> EventKind:
        if kind not in APNEA_KINDS:
            raise ValueError(
                f"Annotation events must be an apnea kind, got {kind.value}"
            )
        return kind

    @model_validator(mode="after")
    def _check_end_in_range(self) -> "AnnotationEvent":
        try:
            self.end
        except (OverflowError, ValueError):
            raise ValueError(
                f"duration_sec {self.duration_sec} puts the event end out of range"
            ) from None
        return self

    @property
    def end(self) -> datetime:
        """Onset plus duration."""
        return self.timestamp + timedelta(seconds=self.duration_sec)


class FlowLimitationReading(BaseModel):
    """
    Single sample of the flow limitation (FLG) channel.

    Attributes:
        timestamp: Sample time
        kind: Always FlowLimitation
        level: Flow limitation grade, typically 0-1 but not clamped
    """

    model_config = ConfigDict(frozen=True)

    timestamp: datetime = Field(description="Sample time")
    kind: EventKind = Field(default=EventKind.FLOW_LIMITATION, description="Event kind")
    level: float = Field(description="Flow limitation grade")

    @field_validator("kind")
    @classmethod
    def _check_flow_limitation_kind(cls, kind: EventKind) -> EventKind:
        if kind is not EventKind.FLOW_LIMITATION:
            raise ValueError(f"FLG readings must be FlowLimitation, got {kind.value}")
        return kind


class ChannelSample(BaseModel):
    """Numeric sample of an auxiliary channel (Pressure, EPAP, FLG)."""

    model_config = ConfigDict(frozen=True)

    timestamp: datetime
    value: float


class NormalizedEvents(BaseModel):
    """
    Typed event streams produced by the normalization adapter.

    Both sequences are sorted ascending by timestamp.
    """

    model_config = ConfigDict(frozen=True)

    annotations: list[AnnotationEvent] = Field(default_factory=list)
    flg_readings: list[FlowLimitationReading] = Field(default_factory=list)


# ============================================================================
# Cluster Types
# ============================================================================


class ThresholdCluster(BaseModel):
    """
    Run of FLG readings at or above a level threshold.

    Consecutive readings are no further apart than the builder's max gap.

    Attributes:
        readings: Readings in ascending time order (at least one)
        start: First reading timestamp
        end: Last reading timestamp
    """

    model_config = ConfigDict(frozen=True)

    readings: list[FlowLimitationReading] = Field(min_length=1)
    start: datetime
    end: datetime

    @property
    def duration_sec(self) -> float:
        return (self.end - self.start).total_seconds()

    @property
    def peak_level(self) -> float:
        return max(reading.level for reading in self.readings)


class ApneaCluster(BaseModel):
    """
    Group of annotated apnea events, possibly FLG-bridged and edge-extended.

    Attributes:
        start: Cluster start (may precede the first event after edge extension)
        end: Cluster end (may follow the last event after edge extension)
        duration_sec: end - start (seconds)
        count: Number of events
        events: Events in ascending time order
    """

    model_config = ConfigDict(frozen=True)

    start: datetime = Field(description="Cluster start")
    end: datetime = Field(description="Cluster end")
    duration_sec: float = Field(ge=0, description="Cluster span (seconds)")
    count: int = Field(ge=1, description="Number of events")
    events: list[AnnotationEvent] = Field(min_length=1, description="Grouped events")

    @model_validator(mode="after")
    def _check_consistency(self) -> "ApneaCluster":
        if self.count != len(self.events):
            raise ValueError(
                f"count ({self.count}) must equal the number of events "
                f"({len(self.events)})"
            )
        if self.start > self.end:
            raise ValueError(f"start ({self.start}) must not be after end ({self.end})")
        span = (self.end - self.start).total_seconds()
        if not math.isclose(self.duration_sec, span, abs_tol=1e-6):
            raise ValueError(
                f"duration_sec ({self.duration_sec}) must equal end - start ({span})"
            )
        return self

    @computed_field  # type: ignore[prop-decorator]
    @property
    def total_event_duration_sec(self) -> float:
        """Sum of the grouped events' own durations."""
        return sum(event.duration_sec for event in self.events)


class FalseNegativeCandidate(BaseModel):
    """
    Sustained flow limitation with no annotated apnea nearby.

    Attributes:
        start: First contributing FLG reading
        end: Last contributing FLG reading
        duration_sec: end - start (seconds)
        confidence: Peak FLG level among the contributing readings
    """

    model_config = ConfigDict(frozen=True)

    start: datetime = Field(description="Candidate start")
    end: datetime = Field(description="Candidate end")
    duration_sec: float = Field(ge=0, description="Candidate span (seconds)")
    confidence: float = Field(description="Peak FLG level")


class ClusterAnalysisResult(BaseModel):
    """Validated apnea clusters and false-negative candidates, both ordered by start."""

    model_config = ConfigDict(frozen=True)

    clusters: list[ApneaCluster] = Field(default_factory=list)
    false_negatives: list[FalseNegativeCandidate] = Field(default_factory=list)


# ============================================================================
# Summary Types
# ============================================================================


class ChannelStats(BaseModel):
    """Basic statistics for one channel inside a cluster window."""

    model_config = ConfigDict(frozen=True)

    samples: int = Field(ge=1, description="Number of samples in window")
    min: float = Field(description="Minimum value")
    max: float = Field(description="Maximum value")
    mean: float = Field(description="Mean value")


class ClusterSummary(BaseModel):
    """Apnea cluster together with auxiliary channel statistics."""

    model_config = ConfigDict(frozen=True)

    cluster: ApneaCluster
    channels: dict[str, ChannelStats] = Field(default_factory=dict)
