"""
Constants and enumerations for cardiac conduction analysis.

Thresholds are grouped per algorithm module, mirroring how each detector
consumes them. All timing values are in milliseconds, amplitudes in millivolts.
"""

from enum import Enum
from pathlib import Path

# ============================================================================
# Wave and Classification Types
# ============================================================================


class WaveKind(str, Enum):
    """Deflection types reported by the upstream extractor."""

    P = "P"
    QRS = "QRS"
    T = "T"


class Regularity(str, Enum):
    """Rhythm regularity of a component series."""

    REGULAR = "REGULAR"
    IRREGULAR = "IRREGULAR"


class ConductionClass(str, Enum):
    """AV conduction classification taxonomy."""

    NORMAL = "NORMAL"
    FIRST_DEGREE = "FIRST_DEGREE"
    SECOND_DEGREE = "SECOND_DEGREE"
    COMPLETE_HEART_BLOCK = "COMPLETE_HEART_BLOCK"


class Urgency(str, Enum):
    """Clinical urgency attached to a classification."""

    ROUTINE = "ROUTINE"
    URGENT = "URGENT"
    EMERGENT = "EMERGENT"


RECOMMENDED_ACTIONS = {
    Urgency.EMERGENT: "IMMEDIATE CARDIOLOGY CONSULTATION",
    Urgency.URGENT: "CARDIOLOGY EVALUATION RECOMMENDED",
    Urgency.ROUTINE: "ROUTINE FOLLOW-UP",
}

# ============================================================================
# Algorithm Constants
# ============================================================================


class ComponentTrackingConstants:
    """Constants for rate and regularity tracking (component_tracker.py)."""

    MS_PER_MINUTE = 60000.0
    MIN_EVENTS_FOR_RATE = 2

    # Variance (ms^2) must stay below mean interval (ms) times this ratio.
    # The two ratios serve different callers and are tuned independently.
    P_REGULARITY_VARIANCE_RATIO = 0.10
    INDEPENDENT_RHYTHM_VARIANCE_RATIO = 0.15

    DEFAULT_QRS_DURATION_MS = 80.0
    WIDE_QRS_THRESHOLD_MS = 120.0


class MorphologyConstants:
    """Constants for QRS vs T wave discrimination (morphology.py)."""

    # Sharp onset check
    DEFAULT_ONSET_SLOPE = 0.6
    MIN_QRS_ONSET_SLOPE = 0.5
    SHARP_ONSET_DEFAULT_DURATION_MS = 90.0
    MAX_QRS_DURATION_MS = 120.0

    # Rounded morphology check
    DEFAULT_PEAK_SHARPNESS = 0.4
    MAX_ROUNDED_PEAK_SHARPNESS = 0.3
    ROUNDED_DEFAULT_DURATION_MS = 160.0
    MIN_ROUNDED_DURATION_MS = 150.0

    CONSISTENT_SCORE = 0.9
    INCONSISTENT_SCORE = 0.6
    EMPTY_CONFIDENCE = 0.5


class HeartBlockConstants:
    """Constants for AV conduction classification (heart_block.py)."""

    MIN_PR_INTERVAL_MS = 120.0
    MAX_PR_INTERVAL_MS = 300.0
    DISSOCIATION_CONSISTENCY_RATIO = 0.70

    COMPLETE_BLOCK_RATE_DIFF_BPM = 20
    PARTIAL_BLOCK_RATE_DIFF_BPM = 10

    COMPLETE_BLOCK_CONFIDENCE = 0.95
    PARTIAL_BLOCK_CONFIDENCE = 0.80
    NORMAL_CONFIDENCE = 0.90
    INSUFFICIENT_DATA_CONFIDENCE = 0.5


class ComponentQualityConstants:
    """Constants for component plausibility checks (quality.py)."""

    MAX_P_DURATION_MS = 120.0
    MAX_P_AMPLITUDE_MV = 0.25
    MAX_QRS_DURATION_MS = 120.0
    MAX_T_AMPLITUDE_MV = 1.0

    DURATION_PENALTY = 0.9
    MORPHOLOGY_PENALTY = 0.9
    MISSING_DESCRIPTOR_PENALTY = 0.95

    EXCELLENT_THRESHOLD = 0.9
    GOOD_THRESHOLD = 0.8


# ============================================================================
# Application Paths
# ============================================================================

DEFAULT_HOME_DIR = Path.home() / ".avtrack"
DEFAULT_CONFIG_FILE = "config.toml"
CONFIG_PATH_ENV_VAR = "AVTRACK_CONFIG"

DEFAULT_LOG_DIR = DEFAULT_HOME_DIR / "logs"
DEFAULT_LOG_FILE = "avtrack.log"
DEFAULT_LOG_MAX_BYTES = 10 * 1024 * 1024  # 10 MB
DEFAULT_LOG_BACKUP_COUNT = 5
