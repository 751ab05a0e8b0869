"""Text summary generation for conduction analysis results."""

from avtrack.analysis.types import AnalysisResult, RateProfile
from avtrack.constants import ConductionClass, Regularity

CLASSIFICATION_LABELS = {
    ConductionClass.NORMAL: "normal AV conduction",
    ConductionClass.FIRST_DEGREE: "first degree AV block",
    ConductionClass.SECOND_DEGREE: "possible second degree (partial) AV block",
    ConductionClass.COMPLETE_HEART_BLOCK: "complete heart block",
}


def _describe_rhythm(label: str, profile: RateProfile) -> str:
    if profile.count < 2:
        return (
            f"{label} rate could not be measured "
            f"({profile.count} event{'s' if profile.count != 1 else ''})"
        )
    regularity = "regular" if profile.regularity == Regularity.REGULAR else "irregular"
    return f"{label} rate {profile.rate_bpm} bpm ({regularity}, {profile.count} events)"


def generate_conduction_summary(result: AnalysisResult) -> str:
    """
    Generate a human-readable summary of a conduction analysis.

    Args:
        result: Analysis result

    Returns:
        Summary text
    """
    assessment = result.assessment
    label = CLASSIFICATION_LABELS[assessment.classification]

    parts = [
        f"Classification: {label} "
        f"({assessment.urgency.value}, confidence {assessment.confidence:.0%})."
    ]
    parts.append(
        f" {_describe_rhythm('Atrial', result.atrial)}; "
        f"{_describe_rhythm('ventricular', result.ventricular)}."
    )

    if assessment.av_dissociation:
        parts.append(" P waves and QRS complexes show AV dissociation.")

    if result.ventricular.count > 0:
        parts.append(
            f" {result.qrs_morphology} (mean width {result.qrs_width_ms:.0f} ms)."
        )

    reclassified = len(result.morphology.reclassifications)
    if reclassified:
        parts.append(
            f" {reclassified} QRS-labelled component"
            f"{'s' if reclassified != 1 else ''} may be T "
            f"wave{'s' if reclassified != 1 else ''}; verify before acting on rates."
        )

    parts.append(f" Recommended action: {assessment.recommended_action}.")
    return "".join(parts)


def format_report(result: AnalysisResult) -> str:
    """
    Format a multi-line report for terminal display.

    Args:
        result: Analysis result

    Returns:
        Report text with summary, evidence, morphology and quality sections
    """
    assessment = result.assessment
    lines = [
        "=" * 60,
        "CONDUCTION ANALYSIS",
        "=" * 60,
        "",
        f"Classification: {assessment.classification.value}",
        f"Urgency:        {assessment.urgency.value}",
        f"Confidence:     {assessment.confidence:.2f}",
        f"Rate difference: {assessment.rate_difference_bpm} bpm",
        "",
        "EVIDENCE",
    ]
    lines.extend(f"  - {item}" for item in assessment.evidence)

    lines.append("")
    lines.append(f"MORPHOLOGY (confidence {result.morphology.confidence:.2f})")
    if result.morphology.findings:
        lines.extend(f"  - {f.reason}" for f in result.morphology.findings)
    else:
        lines.append("  - No QRS/T wave confusion detected")

    quality = result.component_quality
    lines.append("")
    lines.append(
        f"COMPONENT QUALITY: {quality.overall_quality} "
        f"({quality.overall_accuracy:.2f})"
    )
    lines.extend(f"  - {issue}" for issue in quality.all_issues)

    lines.append("")
    lines.append(generate_conduction_summary(result))
    return "\n".join(lines)
