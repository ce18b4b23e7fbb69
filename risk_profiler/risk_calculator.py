"""Rule-based health risk scoring over survey answers."""

import logging
from dataclasses import dataclass, field

from risk_profiler.constants import (
    AGE_FACTOR_THRESHOLD,
    AGE_POINTS_PER_YEAR,
    ALCOHOL_CONSUMPTION,
    CUSTOM_HEALTHY_DIET_POINTS,
    DIET_QUALITY,
    EXCESSIVE_SLEEP_POINTS,
    EXERCISE_LEVELS,
    FAMILY_HISTORY_POINTS,
    INSUFFICIENT_SLEEP_POINTS,
    INTERACTION_MULTIPLIER,
    LOW_RISK_MAX,
    MAX_SCORE,
    MEDICAL_HISTORY_POINTS,
    MODERATE_RISK_MAX,
    POOR_DIET_POINTS,
    POOR_SLEEP_POINTS,
    SMOKING_POINTS,
    STRESS_LEVELS,
)
from risk_profiler.models import (
    DetailedRiskAssessment,
    FactorInteractions,
    HealthFactor,
    RiskAssessment,
    RiskBreakdown,
    RiskLevelInfo,
    SurveyResponse,
)
from risk_profiler.validation import calculate_confidence_score

logger = logging.getLogger(__name__)

RISK_LEVEL_INFO = {
    "low": RiskLevelInfo(
        description="Your current lifestyle choices support good health outcomes",
        urgency="Maintain current healthy habits with minor optimizations",
    ),
    "moderate": RiskLevelInfo(
        description="Some lifestyle factors may increase your health risks over time",
        urgency="Consider making gradual improvements to reduce risk factors",
    ),
    "high": RiskLevelInfo(
        description="Multiple factors significantly increase your risk of health complications",
        urgency="Prioritize immediate lifestyle changes and consult healthcare professionals",
    ),
}


@dataclass
class ExtractedFactors:
    """Risk factors found in a survey, in the order they were checked.

    ``tags`` are the short factor-type labels used for the rationale, e.g.
    "smoking" or "low exercise"; ``factors`` carries the scored detail.
    """

    tags: list[str] = field(default_factory=list)
    factors: list[HealthFactor] = field(default_factory=list)
    confidence: float = 0.0

    def add(self, tag: str, factor: HealthFactor) -> None:
        self.tags.append(tag)
        self.factors.append(factor)


def _severity(points: int, high: int, moderate: int) -> str:
    if points >= high:
        return "high"
    if points >= moderate:
        return "moderate"
    return "low"


def _age_factor(age: int) -> HealthFactor:
    points = (age - AGE_FACTOR_THRESHOLD) * AGE_POINTS_PER_YEAR
    # Strictly greater-than thresholds, unlike the other factors.
    severity = "high" if points > 20 else "moderate" if points > 10 else "low"
    return HealthFactor(
        name="Age",
        category="demographic",
        severity=severity,
        points=points,
        description=f"Age {age} increases cardiovascular and metabolic risk",
    )


def _diet_points(diet: str) -> tuple[int, str]:
    if diet in DIET_QUALITY:
        return DIET_QUALITY[diet]["points"], DIET_QUALITY[diet]["description"]

    lowered = diet.lower()
    if any(term in lowered for term in ("high sugar", "processed", "fast food")):
        return POOR_DIET_POINTS, "High sugar and processed food consumption"
    if any(term in lowered for term in ("vegetables", "healthy", "balanced")):
        return CUSTOM_HEALTHY_DIET_POINTS, "Generally healthy but could be optimized"
    return 0, ""


def _sleep_points(hours: int) -> tuple[int, str]:
    if hours < 6:
        return POOR_SLEEP_POINTS, "Severely inadequate sleep (less than 6 hours)"
    if hours < 7:
        return INSUFFICIENT_SLEEP_POINTS, "Insufficient sleep (6-7 hours)"
    if hours > 9:
        return EXCESSIVE_SLEEP_POINTS, "Excessive sleep (more than 9 hours)"
    return 0, ""


def _bmi_factor(weight: float, height: float) -> HealthFactor | None:
    height_m = height / 100
    bmi = weight / (height_m * height_m)
    if bmi >= 30:
        points, label, severity = 15, "Obesity", "high"
    elif bmi >= 25:
        points, label, severity = 8, "Overweight", "moderate"
    elif bmi < 18.5:
        points, label, severity = 5, "Underweight", "moderate"
    else:
        return None
    return HealthFactor(
        name="Weight Risk Factor",
        category="medical",
        severity=severity,
        points=points,
        description=(
            f"{label} (BMI: {bmi:.1f}) - increases risk of diabetes, "
            "cardiovascular disease, and other health issues"
        ),
    )


def extract_health_factors(answers: SurveyResponse) -> ExtractedFactors:
    """Score every recognised factor present in ``answers``.

    Factors are checked in a fixed order (age, smoking, exercise, diet,
    alcohol, stress, sleep, BMI, medical history, family history). Absent or
    zero-point answers produce no factor.
    """
    found = ExtractedFactors()

    if answers.age and answers.age > AGE_FACTOR_THRESHOLD:
        found.add("advanced age", _age_factor(answers.age))

    if answers.smoker is True:
        found.add("smoking", HealthFactor(
            name="Smoking",
            category="lifestyle",
            severity="high",
            points=SMOKING_POINTS,
            description="Smoking significantly increases risk of cardiovascular disease, cancer, and respiratory issues",
        ))

    if answers.exercise in EXERCISE_LEVELS:
        level = EXERCISE_LEVELS[answers.exercise]
        if level["points"] > 0:
            found.add("low exercise", HealthFactor(
                name="Sedentary Lifestyle",
                category="lifestyle",
                severity=_severity(level["points"], high=12, moderate=8),
                points=level["points"],
                description=f"{level['description']} - increases risk of obesity, diabetes, and heart disease",
            ))

    if answers.diet:
        points, description = _diet_points(answers.diet)
        if points > 0:
            found.add("poor diet", HealthFactor(
                name="Poor Diet Quality",
                category="lifestyle",
                severity=_severity(points, high=15, moderate=8),
                points=points,
                description=f"{description} - increases risk of obesity, diabetes, and cardiovascular disease",
            ))

    if answers.alcohol in ALCOHOL_CONSUMPTION:
        level = ALCOHOL_CONSUMPTION[answers.alcohol]
        if level["points"] > 0:
            found.add("excessive alcohol", HealthFactor(
                name="Alcohol Consumption",
                category="lifestyle",
                severity=_severity(level["points"], high=10, moderate=5),
                points=level["points"],
                description=(
                    f"{level['description']} - increases risk of liver disease, "
                    "cancer, and cardiovascular issues"
                ),
            ))

    if answers.stress in STRESS_LEVELS:
        level = STRESS_LEVELS[answers.stress]
        if level["points"] > 0:
            found.add("high stress", HealthFactor(
                name="Chronic Stress",
                category="lifestyle",
                severity=_severity(level["points"], high=12, moderate=8),
                points=level["points"],
                description=(
                    f"{level['description']} - increases risk of cardiovascular "
                    "disease and mental health issues"
                ),
            ))

    if answers.sleep:
        points, description = _sleep_points(answers.sleep)
        if points > 0:
            found.add("poor sleep", HealthFactor(
                name="Sleep Disruption",
                category="lifestyle",
                severity=_severity(points, high=8, moderate=5),
                points=points,
                description=f"{description} - affects immune function, metabolism, and cardiovascular health",
            ))

    if answers.weight and answers.height:
        bmi_factor = _bmi_factor(answers.weight, answers.height)
        if bmi_factor:
            found.add("abnormal weight", bmi_factor)

    if answers.medical_history:
        points = len(answers.medical_history) * MEDICAL_HISTORY_POINTS
        found.add("medical history", HealthFactor(
            name="Pre-existing Conditions",
            category="medical",
            severity=_severity(points, high=15, moderate=10),
            points=points,
            description=(
                f"{', '.join(answers.medical_history)} - existing health "
                "conditions increase overall risk profile"
            ),
        ))

    if answers.family_history:
        points = len(answers.family_history) * FAMILY_HISTORY_POINTS
        found.add("family history", HealthFactor(
            name="Genetic Risk Factors",
            category="medical",
            severity=_severity(points, high=9, moderate=6),
            points=points,
            description=(
                f"Family history of {', '.join(answers.family_history)} - "
                "genetic predisposition increases risk"
            ),
        ))

    found.confidence = calculate_confidence_score(answers, 1.0)
    return found


def score_to_risk_level(score: int) -> str:
    if score <= LOW_RISK_MAX:
        return "low"
    if score <= MODERATE_RISK_MAX:
        return "moderate"
    return "high"


def calculate_risk_score(answers: SurveyResponse) -> RiskAssessment:
    """Weighted risk score in [0, 100] with its level and contributing factors.

    When two or more factors are individually high severity the summed
    points are raised by INTERACTION_MULTIPLIER before rounding and clamping.
    """
    extracted = extract_health_factors(answers)
    base_score = float(sum(f.points for f in extracted.factors))

    high_factors = [f for f in extracted.factors if f.severity == "high"]
    if len(high_factors) >= 2:
        base_score += base_score * INTERACTION_MULTIPLIER

    score = max(0, min(int(base_score + 0.5), MAX_SCORE))

    return RiskAssessment(
        risk_level=score_to_risk_level(score),
        score=score,
        rationale=extracted.tags[:3],
        confidence=extracted.confidence,
        contributing_factors=extracted.factors,
    )


def get_risk_level_info(risk_level: str) -> RiskLevelInfo:
    return RISK_LEVEL_INFO[risk_level]


def _has_factor(factors: list[HealthFactor], term: str) -> bool:
    return any(term in f.name.lower() for f in factors)


def analyze_factor_interactions(factors: list[HealthFactor]) -> FactorInteractions:
    """Find combinations of factors that compound each other."""
    interactions = []
    recommendations = []
    compound_risk = 0

    if _has_factor(factors, "smoking") and _has_factor(factors, "diet"):
        interactions.append("Smoking combined with poor diet significantly increases cardiovascular risk")
        recommendations.append("Priority: Address both smoking cessation and dietary improvements simultaneously")
        compound_risk += 10

    if _has_factor(factors, "sedentary") and _has_factor(factors, "weight"):
        interactions.append("Physical inactivity and weight issues create a cycle that increases metabolic risk")
        recommendations.append("Start with low-impact exercise to break the inactivity-weight cycle")
        compound_risk += 8

    if _has_factor(factors, "stress") and _has_factor(factors, "sleep"):
        interactions.append("Chronic stress and poor sleep quality compound each other, affecting overall health")
        recommendations.append("Focus on stress management techniques that improve sleep quality")
        compound_risk += 6

    lifestyle = [f for f in factors if f.category == "lifestyle"]
    if len(lifestyle) >= 3:
        interactions.append("Multiple lifestyle risk factors compound to significantly increase overall health risk")
        recommendations.append("Consider a comprehensive lifestyle modification approach rather than isolated changes")
        compound_risk += len(lifestyle) * 2

    return FactorInteractions(
        interactions=interactions,
        compound_risk=compound_risk,
        recommendations=recommendations,
    )


def generate_detailed_risk_assessment(answers: SurveyResponse) -> DetailedRiskAssessment:
    base = calculate_risk_score(answers)
    interactions = analyze_factor_interactions(base.contributing_factors)

    breakdown = RiskBreakdown(
        lifestyle_score=sum(f.points for f in base.contributing_factors if f.category == "lifestyle"),
        medical_score=sum(f.points for f in base.contributing_factors if f.category == "medical"),
        demographic_score=sum(f.points for f in base.contributing_factors if f.category == "demographic"),
    )

    # Share of the base score that lifestyle changes could remove.
    improvement_potential = 0
    if base.score > 0:
        improvement_potential = int(breakdown.lifestyle_score / base.score * 100 + 0.5)

    score = min(base.score + interactions.compound_risk, MAX_SCORE)
    risk_level = score_to_risk_level(score)
    logger.debug("Detailed assessment: base=%d compound=%d final=%d", base.score, interactions.compound_risk, score)

    return DetailedRiskAssessment(
        **base.model_dump(exclude={"score", "risk_level"}),
        score=score,
        risk_level=risk_level,
        risk_breakdown=breakdown,
        factor_interactions=interactions,
        improvement_potential=improvement_potential,
        risk_level_info=get_risk_level_info(risk_level),
    )
