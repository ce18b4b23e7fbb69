"""Tests for JSON and free-text survey parsing."""

import json

import pytest

from risk_profiler.errors import ParsingError, ValidationError
from risk_profiler.models import OCRResult, SurveyResponse
from risk_profiler.text_parser import (
    extract_answers,
    parse_json_input,
    parse_text_input,
    parse_textual_input,
    process_ocr_result,
)

COMPLETE_SURVEY = {
    "age": 45,
    "smoker": False,
    "exercise": "regularly",
    "diet": "good",
    "alcohol": "socially",
    "sleep": 7,
    "stress": "moderate",
    "medicalHistory": ["asthma"],
}


class TestExtractAnswers:
    def test_core_fields_from_sentence(self):
        answers = extract_answers("Age: 35, Non-smoker, exercise regularly, diet is excellent")
        assert answers.age == 35
        assert answers.smoker is False
        assert answers.exercise == "regularly"
        assert answers.diet == "excellent"

    def test_smoker_detected(self):
        assert extract_answers("I am 50 and I smoke every day").smoker is True

    def test_positive_smoker_patterns_win(self):
        # "smoker: yes" is checked before the negative "no ... smok" pattern
        assert extract_answers("no drinking problems, smoker: yes").smoker is True

    def test_age_out_of_range_ignored(self):
        assert extract_answers("age: 150").age is None

    def test_first_exercise_pattern_wins(self):
        answers = extract_answers("exercise: never, though workout daily is the goal")
        assert answers.exercise == "never"

    def test_diet_fallback_vocabulary(self):
        assert extract_answers("I eat lots of candy and soda").diet == "poor"
        assert extract_answers("mostly vegetables and lean protein").diet == "good"

    def test_sleep_and_stress(self):
        answers = extract_answers("I get 6 hours of sleep, stress: high")
        assert answers.sleep == 6
        assert answers.stress == "high"

    def test_weight_in_pounds_converted(self):
        assert extract_answers("weight: 200 lbs").weight == 91

    def test_height_in_feet_converted(self):
        assert extract_answers("height: 6 ft").height == 183

    def test_metric_units_kept(self):
        answers = extract_answers("weight: 75kg height: 175cm")
        assert answers.weight == 75
        assert answers.height == 175

    def test_medical_conditions_in_keyword_order(self):
        answers = extract_answers("history of asthma and diabetes")
        assert answers.medical_history == ["diabetes", "asthma"]

    def test_unmatched_fields_absent(self):
        answers = extract_answers("nothing useful here")
        assert answers.model_dump(exclude_none=True) == {}


class TestParseJsonInput:
    def test_complete_survey(self):
        parsed = parse_json_input(json.dumps(COMPLETE_SURVEY))
        assert parsed.answers.age == 45
        assert parsed.answers.medical_history == ["asthma"]
        assert parsed.missing_fields == []
        assert parsed.confidence == pytest.approx(8 / 14 + 0.1)

    def test_round_trip(self):
        answers = SurveyResponse.model_validate(COMPLETE_SURVEY)
        payload = json.dumps(answers.model_dump(by_alias=True, exclude_none=True))
        assert parse_json_input(payload).answers == answers

    def test_incomplete_survey_has_zero_confidence(self):
        parsed = parse_json_input(json.dumps({"age": 30, "smoker": True}))
        assert parsed.answers.age == 30
        assert parsed.confidence == 0.0
        assert parsed.missing_fields == ["exercise", "diet"]

    def test_malformed_json_raises(self):
        with pytest.raises(ParsingError, match="JSON parsing failed"):
            parse_json_input("{not json")

    def test_schema_violation_raises(self):
        with pytest.raises(ParsingError) as exc_info:
            parse_json_input(json.dumps({"age": 500}))
        assert exc_info.value.details

    def test_unknown_keys_dropped(self):
        parsed = parse_json_input(json.dumps({**COMPLETE_SURVEY, "name": "Sam"}))
        assert parsed.answers == SurveyResponse.model_validate(COMPLETE_SURVEY)
        dumped = parsed.answers.model_dump(by_alias=True, exclude_none=True)
        assert "name" not in dumped
        assert dumped["medicalHistory"] == ["asthma"]

    def test_non_object_rejected(self):
        with pytest.raises(ParsingError):
            parse_json_input("[1, 2, 3]")

    def test_parsing_error_is_validation_error(self):
        with pytest.raises(ValidationError):
            parse_json_input("")


class TestParseTextInput:
    def test_text_confidence_uses_extraction_quality(self):
        parsed = parse_text_input("Age: 35, Non-smoker, exercise regularly, diet is excellent")
        # 4 of 14 fields at 0.8 quality, plus the core-field bonus
        assert parsed.confidence == pytest.approx(4 / 14 * 0.8 + 0.1)
        assert parsed.missing_fields == []

    def test_dispatch_by_format(self):
        assert parse_textual_input('{"age": 30}', format="json").answers.age == 30
        assert parse_textual_input("age: 30").answers.age == 30


class TestProcessOcrResult:
    def test_failed_ocr_yields_empty_answers(self):
        result = OCRResult(extracted_text="", confidence=0.2, processing_time=10, success=False)
        parsed = process_ocr_result(result)
        assert parsed.confidence == 0.0
        assert parsed.missing_fields == ["age", "smoker", "exercise", "diet"]
        assert parsed.answers.model_dump(exclude_none=True) == {}

    def test_confidence_scaled_by_ocr_confidence(self):
        text = "Age: 35, Non-smoker, exercise regularly, diet is excellent"
        result = OCRResult(extracted_text=text, confidence=0.9, processing_time=10, success=True)
        parsed = process_ocr_result(result)
        expected = parse_text_input(text).confidence * 0.9 * 0.8
        assert parsed.confidence == pytest.approx(expected)
        assert parsed.answers.age == 35
