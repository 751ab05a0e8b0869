"""Conduction analysis type definitions."""

from typing import Any, Literal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from avtrack.constants import ConductionClass, Regularity, Urgency, WaveKind

_CAMEL_CONFIG = ConfigDict(
    frozen=True,
    alias_generator=to_camel,
    populate_by_name=True,
)

QualityScore = Literal["excellent", "good", "needs_improvement"]

# ============================================================================
# Input Types
# ============================================================================


class WaveEvent(BaseModel):
    """
    A single detected deflection (P wave, QRS complex or T wave).

    Optional morphology descriptors are left as None when the extractor did
    not report them; each consumer applies its own documented default.

    Attributes:
        time_ms: Event time (milliseconds from strip start)
        amplitude_mv: Peak amplitude (mV)
        duration_ms: Deflection duration (milliseconds)
        onset_slope: Normalized steepness of the initial deflection (0-1)
        peak_sharpness: Normalized peak sharpness (0-1)
        kind: Wave type label assigned upstream
    """

    model_config = _CAMEL_CONFIG

    time_ms: float = Field(
        strict=True, allow_inf_nan=False, description="Event time (ms)"
    )
    amplitude_mv: float | None = Field(
        default=None,
        strict=True,
        allow_inf_nan=False,
        description="Peak amplitude (mV)",
    )
    duration_ms: float | None = Field(
        default=None,
        strict=True,
        allow_inf_nan=False,
        description="Deflection duration (ms)",
    )
    onset_slope: float | None = Field(
        default=None,
        strict=True,
        allow_inf_nan=False,
        description="Onset slope (0-1)",
    )
    peak_sharpness: float | None = Field(
        default=None,
        strict=True,
        allow_inf_nan=False,
        description="Peak sharpness (0-1)",
    )
    kind: WaveKind = Field(
        validation_alias=AliasChoices("kind", "type"),
        description="Wave type label",
    )


# ============================================================================
# Component Tracking Types
# ============================================================================


class RateProfile(BaseModel):
    """
    Rate and regularity of one component series.

    Attributes:
        count: Number of events in the series
        rate_bpm: Mean rate derived from inter-event intervals (0 if < 2 events)
        regularity: REGULAR when interval variance is within tolerance
        intervals_ms: Consecutive inter-event intervals after sorting
    """

    model_config = _CAMEL_CONFIG

    count: int = Field(ge=0, description="Number of events")
    rate_bpm: int = Field(ge=0, description="Rate (beats/min)")
    regularity: Regularity = Field(description="Rhythm regularity")
    intervals_ms: list[float] = Field(
        default_factory=list, description="Inter-event intervals (ms)"
    )


# ============================================================================
# Morphology Types
# ============================================================================


class MorphologyFinding(BaseModel):
    """A QRS-labelled event whose shape suggests another wave type."""

    model_config = _CAMEL_CONFIG

    event: WaveEvent = Field(description="Suspicious event")
    reclassify_as: WaveKind | None = Field(
        default=None, description="Suggested wave type, if reclassification advised"
    )
    reason: str = Field(description="Human-readable explanation")


class MorphologyReport(BaseModel):
    """Outcome of QRS vs T wave morphology validation."""

    model_config = _CAMEL_CONFIG

    findings: list[MorphologyFinding] = Field(default_factory=list)
    confidence: float = Field(ge=0, le=1, description="Morphology confidence (0-1)")

    @property
    def is_valid(self) -> bool:
        return not self.findings

    @property
    def reclassifications(self) -> list[MorphologyFinding]:
        return [f for f in self.findings if f.reclassify_as is not None]


# ============================================================================
# Conduction Types
# ============================================================================


class ConductionAssessment(BaseModel):
    """
    Terminal AV conduction classification.

    Attributes:
        classification: Conduction state
        urgency: Clinical urgency of the classification
        confidence: Classification confidence (0-1)
        evidence: Human-readable supporting findings (never empty)
        av_dissociation: AV dissociation confirmed (complete heart block only)
        rate_difference_bpm: Absolute atrial vs ventricular rate difference
        recommended_action: Follow-up action for the urgency level
    """

    model_config = _CAMEL_CONFIG

    classification: ConductionClass = Field(description="Conduction class")
    urgency: Urgency = Field(description="Clinical urgency")
    confidence: float = Field(ge=0, le=1, description="Confidence (0-1)")
    evidence: list[str] = Field(min_length=1, description="Supporting evidence")
    av_dissociation: bool = Field(description="AV dissociation detected")
    rate_difference_bpm: int = Field(ge=0, description="Rate difference (bpm)")
    recommended_action: str = Field(description="Recommended follow-up")

    @model_validator(mode="after")
    def check_complete_block_urgency(self) -> "ConductionAssessment":
        if (
            self.classification == ConductionClass.COMPLETE_HEART_BLOCK
            and self.urgency != Urgency.EMERGENT
        ):
            raise ValueError("COMPLETE_HEART_BLOCK must carry EMERGENT urgency")
        return self


# ============================================================================
# Component Quality Types
# ============================================================================


class QualityCheck(BaseModel):
    """Plausibility check result for one wave type."""

    model_config = _CAMEL_CONFIG

    kind: WaveKind = Field(description="Wave type checked")
    accuracy: float = Field(ge=0, le=1, description="Identification accuracy (0-1)")
    issues: list[str] = Field(default_factory=list)
    component_count: int = Field(ge=0, description="Components checked")
    quality_score: QualityScore = Field(description="Quality grade")


class ComponentQualityReport(BaseModel):
    """Combined plausibility report across P, QRS and T components."""

    model_config = _CAMEL_CONFIG

    overall_accuracy: float = Field(ge=0, le=1)
    overall_quality: QualityScore
    p_waves: QualityCheck
    qrs_complexes: QualityCheck
    t_waves: QualityCheck

    @property
    def all_issues(self) -> list[str]:
        return [*self.p_waves.issues, *self.qrs_complexes.issues, *self.t_waves.issues]


# ============================================================================
# Pipeline Result
# ============================================================================


class AnalysisResult(BaseModel):
    """Complete result of one conduction analysis call."""

    model_config = _CAMEL_CONFIG

    assessment: ConductionAssessment
    morphology: MorphologyReport
    atrial: RateProfile
    ventricular: RateProfile
    qrs_width_ms: float = Field(description="Mean QRS width (ms)")
    qrs_morphology: str = Field(description="QRS width descriptor")
    component_quality: ComponentQualityReport
    processing_time_ms: float = Field(ge=0, description="Processing time (ms)")

    def to_dict(self, include_timing: bool = True) -> dict[str, Any]:
        """
        Serialize to the camelCase output contract.

        Assessment fields are flattened to the top level; morphology and
        quality sections carry their derived validity flags.

        Args:
            include_timing: Include processingTimeMs (omit for reproducible output)

        Returns:
            JSON-compatible dictionary
        """
        data: dict[str, Any] = self.assessment.model_dump(by_alias=True, mode="json")

        morphology = self.morphology.model_dump(by_alias=True, mode="json")
        morphology["isValid"] = self.morphology.is_valid
        data["morphology"] = morphology

        data["atrial"] = self.atrial.model_dump(by_alias=True, mode="json")
        data["ventricular"] = self.ventricular.model_dump(by_alias=True, mode="json")
        data["qrsWidthMs"] = self.qrs_width_ms
        data["qrsMorphology"] = self.qrs_morphology

        quality = self.component_quality.model_dump(by_alias=True, mode="json")
        quality["allIssues"] = self.component_quality.all_issues
        data["componentQuality"] = quality

        if include_timing:
            data["processingTimeMs"] = self.processing_time_ms
        return data
