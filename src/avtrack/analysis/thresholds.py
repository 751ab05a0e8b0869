"""Detector threshold configuration."""

from pydantic import BaseModel, ConfigDict, Field, model_validator

from avtrack.constants import ComponentTrackingConstants as CTC
from avtrack.constants import HeartBlockConstants as HBC

__all__ = ["DetectorThresholds", "DEFAULT_THRESHOLDS", "THRESHOLD_NAMES"]


class DetectorThresholds(BaseModel):
    """
    Tunable thresholds for rate tracking and conduction classification.

    Ratios use decimal format (0.7 = 70%). Defaults come from the constants
    classes; user overrides are loaded from the ``[thresholds]`` config table.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    # Regularity
    p_regularity_variance_ratio: float = Field(
        default=CTC.P_REGULARITY_VARIANCE_RATIO,
        gt=0,
        description="Intra-series regularity variance ratio",
    )
    independent_rhythm_variance_ratio: float = Field(
        default=CTC.INDEPENDENT_RHYTHM_VARIANCE_RATIO,
        gt=0,
        description="Independent-rhythm regularity variance ratio",
    )

    # AV relationship
    dissociation_consistency_ratio: float = Field(
        default=HBC.DISSOCIATION_CONSISTENCY_RATIO,
        ge=0,
        le=1,
        description="Consistent PR fraction below which AV dissociation is declared",
    )
    min_pr_interval_ms: float = Field(
        default=HBC.MIN_PR_INTERVAL_MS, ge=0, description="Lower PR bound (exclusive)"
    )
    max_pr_interval_ms: float = Field(
        default=HBC.MAX_PR_INTERVAL_MS, gt=0, description="Upper PR bound (exclusive)"
    )

    # Rate mismatch
    complete_block_rate_diff_bpm: int = Field(
        default=HBC.COMPLETE_BLOCK_RATE_DIFF_BPM,
        ge=0,
        description="Rate difference required for complete heart block",
    )
    partial_block_rate_diff_bpm: int = Field(
        default=HBC.PARTIAL_BLOCK_RATE_DIFF_BPM,
        ge=0,
        description="Rate difference indicating partial block",
    )

    @model_validator(mode="after")
    def check_ordering(self) -> "DetectorThresholds":
        if self.min_pr_interval_ms >= self.max_pr_interval_ms:
            raise ValueError(
                f"min_pr_interval_ms ({self.min_pr_interval_ms}) must be below "
                f"max_pr_interval_ms ({self.max_pr_interval_ms})"
            )
        if self.partial_block_rate_diff_bpm > self.complete_block_rate_diff_bpm:
            raise ValueError(
                "partial_block_rate_diff_bpm must not exceed "
                "complete_block_rate_diff_bpm"
            )
        return self


DEFAULT_THRESHOLDS = DetectorThresholds()

THRESHOLD_NAMES: tuple[str, ...] = tuple(DetectorThresholds.model_fields)
