"""Tests for risk scoring and factor analysis."""

import pytest

from risk_profiler.models import HealthFactor, SurveyResponse
from risk_profiler.risk_calculator import (
    analyze_factor_interactions,
    calculate_risk_score,
    extract_health_factors,
    generate_detailed_risk_assessment,
    get_risk_level_info,
    score_to_risk_level,
)


def _factor(name, category="lifestyle", severity="moderate", points=5):
    return HealthFactor(name=name, category=category, severity=severity, points=points, description=name)


class TestExtractHealthFactors:
    def test_no_factors_for_empty_survey(self):
        found = extract_health_factors(SurveyResponse())
        assert found.factors == []
        assert found.tags == []

    def test_factor_order_and_tags(self):
        answers = SurveyResponse(
            family_history=["stroke"],
            sleep=5,
            smoker=True,
            age=55,
            exercise="rarely",
        )
        found = extract_health_factors(answers)
        assert found.tags == ["advanced age", "smoking", "low exercise", "poor sleep", "family history"]

    def test_age_severity(self):
        assert extract_health_factors(SurveyResponse(age=50)).factors[0].severity == "low"
        assert extract_health_factors(SurveyResponse(age=51)).factors[0].severity == "moderate"
        assert extract_health_factors(SurveyResponse(age=61)).factors[0].severity == "high"

    def test_age_forty_is_not_a_factor(self):
        assert extract_health_factors(SurveyResponse(age=40)).factors == []

    def test_zero_point_answers_are_not_factors(self):
        answers = SurveyResponse(exercise="daily", diet="excellent", alcohol="never", stress="low", sleep=8)
        assert extract_health_factors(answers).factors == []

    def test_free_text_diet(self):
        found = extract_health_factors(SurveyResponse(diet="Lots of fast food"))
        assert found.factors[0].points == 20
        assert found.factors[0].severity == "high"

        found = extract_health_factors(SurveyResponse(diet="mostly vegetables"))
        assert found.factors[0].points == 5
        assert found.factors[0].severity == "low"

    def test_bmi_factor(self):
        found = extract_health_factors(SurveyResponse(weight=100, height=170))
        factor = found.factors[0]
        assert factor.name == "Weight Risk Factor"
        assert factor.category == "medical"
        assert factor.points == 15
        assert "BMI: 34.6" in factor.description

    def test_healthy_bmi_is_not_a_factor(self):
        assert extract_health_factors(SurveyResponse(weight=70, height=175)).factors == []

    def test_medical_history_points(self):
        found = extract_health_factors(SurveyResponse(medical_history=["asthma", "diabetes"]))
        assert found.factors[0].points == 10
        assert found.factors[0].severity == "moderate"


class TestCalculateRiskScore:
    def test_no_factors_scores_zero(self):
        assessment = calculate_risk_score(SurveyResponse())
        assert assessment.score == 0
        assert assessment.risk_level == "low"
        assert assessment.rationale == []

    def test_smoking_alone(self):
        assessment = calculate_risk_score(SurveyResponse(smoker=True))
        assert assessment.score == 25
        assert assessment.risk_level == "low"
        assert assessment.rationale == ["smoking"]

    def test_two_high_factors_add_bonus(self):
        assessment = calculate_risk_score(SurveyResponse(smoker=True, exercise="never"))
        assert assessment.score == 44

    def test_one_high_factor_has_no_bonus(self):
        assessment = calculate_risk_score(SurveyResponse(smoker=True, exercise="sometimes"))
        assert assessment.score == 33
        assert assessment.risk_level == "moderate"

    def test_bonus_rounds_half_up(self):
        # (25 + 20) * 1.1 = 49.5
        assessment = calculate_risk_score(SurveyResponse(smoker=True, diet="poor"))
        assert assessment.score == 50

    def test_high_risk_profile(self):
        answers = SurveyResponse(age=70, smoker=True, exercise="never", diet="poor")
        assessment = calculate_risk_score(answers)
        assert assessment.risk_level == "high"
        assert assessment.score <= 100
        names = [f.name for f in assessment.contributing_factors]
        for expected in ("Age", "Smoking", "Sedentary Lifestyle", "Poor Diet Quality"):
            assert expected in names
        assert assessment.rationale == ["advanced age", "smoking", "low exercise"]

    def test_extreme_input_is_clamped(self):
        answers = SurveyResponse(
            age=120,
            smoker=True,
            exercise="never",
            diet="poor",
            alcohol="daily",
            sleep=3,
            stress="very_high",
            weight=200,
            height=150,
            medical_history=["diabetes", "hypertension", "asthma", "depression"],
            family_history=["heart disease", "cancer", "stroke"],
        )
        assessment = calculate_risk_score(answers)
        assert assessment.score == 100
        assert assessment.risk_level == "high"

    def test_confidence_reflects_completeness(self):
        answers = SurveyResponse(age=30, smoker=False, exercise="daily", diet="good")
        assert calculate_risk_score(answers).confidence == pytest.approx(4 / 14 + 0.1)

    @pytest.mark.parametrize(
        "score, level",
        [(0, "low"), (30, "low"), (31, "moderate"), (60, "moderate"), (61, "high"), (100, "high")],
    )
    def test_score_to_risk_level(self, score, level):
        assert score_to_risk_level(score) == level


class TestFactorInteractions:
    def test_smoking_and_diet(self):
        result = analyze_factor_interactions([
            _factor("Smoking", severity="high", points=25),
            _factor("Poor Diet Quality", severity="high", points=20),
        ])
        assert result.compound_risk == 10
        assert len(result.interactions) == 1

    def test_inactivity_and_weight(self):
        result = analyze_factor_interactions([
            _factor("Sedentary Lifestyle"),
            _factor("Weight Risk Factor", category="medical"),
        ])
        assert result.compound_risk == 8

    def test_stress_and_sleep(self):
        result = analyze_factor_interactions([_factor("Chronic Stress"), _factor("Sleep Disruption")])
        assert result.compound_risk == 6

    def test_many_lifestyle_factors(self):
        result = analyze_factor_interactions([
            _factor("Sedentary Lifestyle"),
            _factor("Alcohol Consumption"),
            _factor("Chronic Stress"),
        ])
        assert result.compound_risk == 6
        assert len(result.recommendations) == 1

    def test_no_interactions(self):
        result = analyze_factor_interactions([_factor("Age", category="demographic")])
        assert result.compound_risk == 0
        assert result.interactions == []


class TestDetailedRiskAssessment:
    def test_compound_risk_added_and_level_recomputed(self):
        answers = SurveyResponse(smoker=True, diet="poor")
        detailed = generate_detailed_risk_assessment(answers)
        # 50 base, +10 for smoking with poor diet
        assert detailed.score == 60
        assert detailed.risk_level == "moderate"
        assert detailed.risk_breakdown.lifestyle_score == 45
        assert detailed.improvement_potential == 90
        assert detailed.risk_level_info == get_risk_level_info("moderate")

    def test_level_crosses_threshold(self):
        answers = SurveyResponse(smoker=True, diet="poor", exercise="never")
        detailed = generate_detailed_risk_assessment(answers)
        # 66 base, +10 smoking/diet, +6 for three lifestyle factors
        assert detailed.score == 82
        assert detailed.risk_level == "high"

    def test_score_capped(self):
        answers = SurveyResponse(
            age=90,
            smoker=True,
            exercise="never",
            diet="poor",
            stress="very_high",
            sleep=4,
        )
        detailed = generate_detailed_risk_assessment(answers)
        assert detailed.score == 100

    def test_empty_survey(self):
        detailed = generate_detailed_risk_assessment(SurveyResponse())
        assert detailed.score == 0
        assert detailed.improvement_potential == 0
        assert detailed.risk_level == "low"

    def test_breakdown_by_category(self):
        answers = SurveyResponse(age=55, smoker=True, medical_history=["asthma"])
        detailed = generate_detailed_risk_assessment(answers)
        assert detailed.risk_breakdown.demographic_score == 15
        assert detailed.risk_breakdown.lifestyle_score == 25
        assert detailed.risk_breakdown.medical_score == 5
