"""
Constants and mappings for apnea cluster analysis.

Event labels follow the OSCAR "details" CSV export (DateTime, Type, Event,
Data/Duration).
"""

from enum import Enum
from pathlib import Path

# ============================================================================
# Event Kinds
# ============================================================================


class EventKind(str, Enum):
    """Kinds of events consumed by the clustering engine."""

    OBSTRUCTIVE = "Obstructive"
    CENTRAL = "Central"  # Exported by OSCAR as "ClearAirway"
    MIXED = "Mixed"
    FLOW_LIMITATION = "FlowLimitation"


# Apnea kinds that can be annotated by the device
APNEA_KINDS = frozenset({EventKind.OBSTRUCTIVE, EventKind.CENTRAL, EventKind.MIXED})

# Details CSV "Event" labels -> EventKind
EVENT_LABELS: dict[str, EventKind] = {
    "Obstructive": EventKind.OBSTRUCTIVE,
    "ClearAirway": EventKind.CENTRAL,
    "Central": EventKind.CENTRAL,
    "Mixed": EventKind.MIXED,
    "FLG": EventKind.FLOW_LIMITATION,
    "FlowLimitation": EventKind.FLOW_LIMITATION,
}

# ============================================================================
# Details CSV Columns
# ============================================================================

COLUMN_DATETIME = "DateTime"
COLUMN_TYPE = "Type"
COLUMN_EVENT = "Event"
COLUMN_VALUE = "Data/Duration"

DETAILS_COLUMNS = (COLUMN_DATETIME, COLUMN_TYPE, COLUMN_EVENT, COLUMN_VALUE)

# Auxiliary channels summarized per cluster
CHANNEL_FLG = "FLG"
CHANNEL_PRESSURE = "Pressure"
CHANNEL_EPAP = "EPAP"

SUMMARY_CHANNELS = (CHANNEL_FLG, CHANNEL_PRESSURE, CHANNEL_EPAP)

# Alternate Event labels -> channel name
CHANNEL_ALIASES: dict[str, str] = {"FlowLimitation": CHANNEL_FLG}

# ============================================================================
# Analysis Algorithm Constants
# ============================================================================


class ClusteringConstants:
    """
    Default thresholds for apnea clustering and false-negative detection.

    All durations and gaps are in seconds. FLG levels are the dimensionless
    ResMed FlowLim index (0.0 = round waveform, 1.0 = fully flattened).
    """

    GAP_SECONDS = 120.0
    FLG_BRIDGE_THRESHOLD = 0.1
    FLG_CLUSTER_GAP_SECONDS = 60.0

    EDGE_THRESHOLD = 0.5
    EDGE_MIN_DURATION_SECONDS = 10.0

    MIN_CLUSTER_EVENTS = 3
    MIN_CLUSTER_TOTAL_DURATION_SECONDS = 60.0
    MAX_CLUSTER_SPAN_SECONDS = 230.0

    FALSE_NEG_DURATION_MIN_SECONDS = 60.0
    FALSE_NEG_DURATION_MAX_SECONDS = 600.0
    FALSE_NEG_CONFIDENCE_MIN = 0.95
    OVERLAP_WINDOW_SECONDS = 5.0


class FalseNegativePresetConstants:
    """Acceptance thresholds for the strict and lenient false-negative presets."""

    STRICT_CONFIDENCE_MIN = 0.98
    STRICT_DURATION_MIN_SECONDS = 120.0

    LENIENT_CONFIDENCE_MIN = 0.85
    LENIENT_DURATION_MIN_SECONDS = 45.0


# ============================================================================
# Default Settings
# ============================================================================

APP_HOME = Path.home() / ".apnea_cluster"
DEFAULT_CONFIG_FILE = "config.toml"

# Logging configuration
DEFAULT_LOG_DIR = APP_HOME / "logs"
DEFAULT_LOG_FILE = "apnea_cluster.log"
DEFAULT_LOG_MAX_BYTES = 10 * 1024 * 1024  # 10 MB
DEFAULT_LOG_BACKUP_COUNT = 5
