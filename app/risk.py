"""Risk scoring logic: weighted deficit score, level buckets and factor rules."""

from typing import Dict, List, Optional, Tuple

from app.config import get_settings
from app.models import RiskAssessment, RiskFactors, RiskLevel

# Share of each factor's shortfall (100 - value) in the blended deficit
FACTOR_WEIGHTS: Dict[str, float] = {
    'attendance': 0.30,
    'academic_performance': 0.25,
    'fee_payment': 0.25,
    'engagement': 0.20,
}

# Deficit of 50 points across the board saturates the score
SCORE_GAIN = 2.0

NORMAL_RANGE_REASON = "All performance indicators within normal range"
NORMAL_RANGE_SUGGESTION = "Continue current academic approach"


def _factor_rules(thresholds: Dict[str, float]) -> List[Tuple[str, float, str, str]]:
    """(field, threshold, reason, suggestion) in reporting order."""
    attendance = thresholds.get('attendance', 70)
    academic = thresholds.get('academic_performance', 70)
    fee = thresholds.get('fee_payment', 75)
    engagement = thresholds.get('engagement', 60)
    return [
        ('attendance', attendance,
         f"Attendance below {attendance:g}% threshold",
         "Immediate counseling session required"),
        ('academic_performance', academic,
         f"Academic performance below {academic:g}%",
         "Academic support program enrollment"),
        ('fee_payment', fee,
         f"Outstanding fee payment (less than {fee:g}% of dues settled)",
         "Contact parents regarding fee payment"),
        ('engagement', engagement,
         "Low participation in extracurricular activities",
         "Mentor assignment for regular check-ins"),
    ]


def compute_score(factors: RiskFactors) -> float:
    """
    Blend the four factors into a 0-100 risk score.

    score = min(100, 2 * sum(weight * (100 - factor)))

    Lowering any factor can only raise (or keep) the score.

    Args:
        factors: Validated risk factors

    Returns:
        Risk score rounded to one decimal
    """
    deficit = sum(
        weight * (100.0 - getattr(factors, name))
        for name, weight in FACTOR_WEIGHTS.items()
    )
    return round(min(100.0, max(0.0, SCORE_GAIN * deficit)), 1)


def get_risk_category(risk_score: float, thresholds: Optional[Dict[str, float]] = None) -> RiskLevel:
    """
    Categorize risk score into Low/Medium/High.

    Boundaries are inclusive on the low end: a score equal to the
    'high' threshold is High, equal to 'medium' is Medium.

    Args:
        risk_score: Risk score (0-100)
        thresholds: Dict with 'medium' and 'high' threshold values

    Returns:
        Risk level
    """
    if thresholds is None:
        thresholds = get_settings().risk_thresholds
    if risk_score >= thresholds.get('high', 70):
        return RiskLevel.HIGH
    elif risk_score >= thresholds.get('medium', 40):
        return RiskLevel.MEDIUM
    else:
        return RiskLevel.LOW


def explain_factors(
    factors: RiskFactors,
    thresholds: Optional[Dict[str, float]] = None
) -> Tuple[List[str], List[str]]:
    """
    Build the ordered reasons and matching suggestions for a student.

    Each factor contributes at most one pair, in the order attendance,
    academic performance, fee payment, engagement.
    """
    if thresholds is None:
        thresholds = get_settings().factor_thresholds

    reasons = []
    suggestions = []
    for name, threshold, reason, suggestion in _factor_rules(thresholds):
        if getattr(factors, name) < threshold:
            reasons.append(reason)
            suggestions.append(suggestion)

    if not reasons:
        return [NORMAL_RANGE_REASON], [NORMAL_RANGE_SUGGESTION]
    return reasons, suggestions


def classify(factors: RiskFactors) -> RiskAssessment:
    """Derive the complete risk assessment for one set of factors."""
    settings = get_settings()
    score = compute_score(factors)
    reasons, suggestions = explain_factors(factors, settings.factor_thresholds)
    return RiskAssessment(
        score=score,
        level=get_risk_category(score, settings.risk_thresholds),
        reasons=reasons,
        suggestions=suggestions,
    )


def is_at_risk(assessment: RiskAssessment) -> bool:
    """At-risk means anything above Low."""
    return assessment.level != RiskLevel.LOW
