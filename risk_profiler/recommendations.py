"""Select and personalise recommendations for a risk assessment."""

import re

from risk_profiler.catalog import FactorType, get_templates
from risk_profiler.constants import (
    CATEGORY_ORDER,
    MAX_RECOMMENDATIONS,
    MEDICAL_DISCLAIMER,
    PRIORITY_ORDER,
)
from risk_profiler.models import (
    FinalRecommendations,
    HealthFactor,
    Recommendation,
    RecommendationSummary,
    RiskAssessment,
    UserPreferences,
)

# Checked in order; the first keyword found in the factor name decides the type.
FACTOR_TYPE_KEYWORDS = [
    (FactorType.SMOKING, ("smoking",)),
    (FactorType.POOR_DIET, ("diet", "nutrition")),
    (FactorType.LOW_EXERCISE, ("exercise", "physical", "inactivity", "sedentary")),
    (FactorType.HIGH_STRESS, ("stress", "anxiety")),
    (FactorType.POOR_SLEEP, ("sleep",)),
    (FactorType.EXCESSIVE_ALCOHOL, ("alcohol",)),
    (FactorType.ABNORMAL_WEIGHT, ("weight", "bmi", "obesity")),
    (FactorType.ADVANCED_AGE, ("age",)),
    (FactorType.MEDICAL_HISTORY, ("medical", "condition")),
]

ADVANCED_ACTION_ITEMS = [
    "Track detailed metrics and progress indicators",
    "Research latest evidence and best practices",
    "Consider advanced techniques or interventions",
]

LOW_COMMITMENT_MAX_ACTIONS = 3

ESTIMATED_TIMELINE = "2-12 weeks for initial changes, 3-6 months for sustained improvement"

HIGH_RISK_RECOMMENDATION = Recommendation(
    id="general-high-risk",
    category="medical",
    priority="high",
    title="Comprehensive Health Assessment",
    description="Schedule a comprehensive health evaluation to address multiple risk factors",
    action_items=[
        "Schedule appointment with primary care physician within 2 weeks",
        "Prepare list of all current medications and supplements",
        "Bring complete family health history",
        "Discuss creating a personalized risk reduction plan",
        "Consider referral to specialists if needed",
    ],
    timeline="Within 2-4 weeks",
    evidence_level="Clinical practice guidelines for high-risk patients",
)

_RANGE_DURATION = re.compile(r"(\d+-\d+)\s*(minutes|hours)")
_GRADUALLY = re.compile(r"gradually", re.I)
_RANGE_TIMELINE = re.compile(r"(\d+)-(\d+)\s*(weeks?|months?)")


def identify_factor_type(factor: HealthFactor) -> FactorType:
    name = factor.name.lower()
    for factor_type, keywords in FACTOR_TYPE_KEYWORDS:
        if any(keyword in name for keyword in keywords):
            return factor_type
    return FactorType.GENERAL


def group_factors_by_type(factors: list[HealthFactor]) -> dict[FactorType, list[HealthFactor]]:
    groups: dict[FactorType, list[HealthFactor]] = {}
    for factor in factors:
        groups.setdefault(identify_factor_type(factor), []).append(factor)
    return groups


def simplify_action_items(action_items: list[str]) -> list[str]:
    """Turn ranges like "10-20 minutes" into their lower bound and soften wording."""

    def lower_bound(match: re.Match) -> str:
        return f"{match.group(1).split('-')[0]} {match.group(2)}"

    return [_GRADUALLY.sub("slowly over several weeks", _RANGE_DURATION.sub(lower_bound, item)) for item in action_items]


def extend_timeline(timeline: str) -> str:
    def widen(match: re.Match) -> str:
        start, end, unit = int(match.group(1)), int(match.group(2)), match.group(3)
        return f"{start + 1}-{end + 2} {unit}"

    return _RANGE_TIMELINE.sub(widen, timeline)


def customize_recommendation(
    recommendation: Recommendation,
    factors: list[HealthFactor],
    preferences: UserPreferences | None = None,
) -> Recommendation:
    """Return a personalised copy of a catalog recommendation."""
    priority = recommendation.priority
    if any(f.severity == "high" for f in factors):
        priority = "high"

    action_items = list(recommendation.action_items)
    timeline = recommendation.timeline

    if preferences is not None:
        if preferences.difficulty_level == "beginner":
            action_items = simplify_action_items(action_items)
            timeline = extend_timeline(timeline)
        elif preferences.difficulty_level == "advanced":
            action_items = action_items + ADVANCED_ACTION_ITEMS

        if preferences.time_commitment == "low":
            action_items = action_items[:LOW_COMMITMENT_MAX_ACTIONS]

    return recommendation.model_copy(
        update={"priority": priority, "action_items": action_items, "timeline": timeline}
    )


def generate_generic_recommendation(factor_type: FactorType, factor: HealthFactor) -> Recommendation:
    return Recommendation(
        id=f"generic-{factor_type.value.replace(' ', '-')}",
        category="lifestyle",
        priority="high" if factor.severity == "high" else "medium",
        title=f"Address {factor.name}",
        description=f"Take steps to improve {factor.name.lower()} to reduce health risk",
        action_items=[
            "Consult with healthcare provider about this risk factor",
            "Research evidence-based approaches for improvement",
            "Set specific, measurable goals for improvement",
            "Track progress regularly",
        ],
        timeline="2-4 weeks to develop action plan",
        evidence_level="General health promotion guidelines",
    )


def recommendations_for_factor(
    factor_type: FactorType,
    factors: list[HealthFactor],
    preferences: UserPreferences | None = None,
) -> list[Recommendation]:
    templates = get_templates(factor_type)
    if not templates:
        return [generate_generic_recommendation(factor_type, factors[0])]
    return [customize_recommendation(rec, factors, preferences) for rec in templates]


def prioritize_recommendations(recommendations: list[Recommendation]) -> list[Recommendation]:
    return sorted(
        recommendations,
        key=lambda r: (-PRIORITY_ORDER[r.priority], -CATEGORY_ORDER.get(r.category, 0)),
    )


def generate_recommendations(
    risk_assessment: RiskAssessment,
    user_preferences: UserPreferences | None = None,
) -> FinalRecommendations:
    """Pick, personalise, rank and truncate recommendations for an assessment."""
    recommendations = []
    for factor_type, factors in group_factors_by_type(risk_assessment.contributing_factors).items():
        recommendations.extend(recommendations_for_factor(factor_type, factors, user_preferences))

    if risk_assessment.risk_level == "high":
        recommendations.append(HIGH_RISK_RECOMMENDATION)

    ranked = prioritize_recommendations(recommendations)[:MAX_RECOMMENDATIONS]

    return FinalRecommendations(
        risk_level=risk_assessment.risk_level,
        factors=risk_assessment.rationale,
        recommendations=ranked,
        status="ok",
        disclaimer=MEDICAL_DISCLAIMER,
    )


def generate_recommendation_summary(recommendations: list[Recommendation]) -> RecommendationSummary:
    high_priority = [r for r in recommendations if r.priority == "high"]
    focus_areas = list(dict.fromkeys(r.category for r in recommendations))
    return RecommendationSummary(
        high_priority_count=len(high_priority),
        primary_focus_areas=focus_areas,
        estimated_timeline=ESTIMATED_TIMELINE,
        key_actions=[r.action_items[0] for r in high_priority[:3] if r.action_items],
    )
