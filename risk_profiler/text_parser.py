"""Turn JSON, free text or OCR output into a partial set of survey answers.

Text extraction is keyword/regex based. For every field the patterns are
tried in the order they are declared and the first match wins, so the order
of the tables below is part of the behaviour.
"""

import json
import logging
import re

from pydantic import ValidationError as SchemaError

from risk_profiler.constants import (
    CORE_SURVEY_FIELDS,
    OCR_EXTRACTION_PENALTY,
    TEXT_EXTRACTION_QUALITY,
)
from risk_profiler.errors import ParsingError
from risk_profiler.models import OCRResult, ParsedAnswers, SurveyResponse
from risk_profiler.validation import calculate_confidence_score, validate_survey_completeness

logger = logging.getLogger(__name__)

POUNDS_TO_KG = 0.453592
FEET_TO_CM = 30.48

# Optional linking verb, e.g. "diet is excellent".
_LINK = r"(?:(?:is|are|was)\s+)?"

AGE_PATTERN = re.compile(r"(?:age[:\s]*|i am |aged? )\s*(\d{1,3})", re.I)

SMOKER_PATTERNS = [
    re.compile(r"(?:smok|cigarette|tobacco)[a-z]*[:\s]*(?:yes|true|smoke|smoker)", re.I),
    re.compile(r"(?:i|do)\s+(?:am\s+a\s+)?smok", re.I),
    re.compile(r"(?:yes|true).*smok", re.I),
]

NON_SMOKER_PATTERNS = [
    re.compile(r"(?:smok|cigarette|tobacco)[a-z]*[:\s]*(?:no|false|never|non)", re.I),
    re.compile(r"(?:don't|do not|never)\s+smok", re.I),
    re.compile(r"(?:no|false|never).*smok", re.I),
    re.compile(r"non[\s-]?smok", re.I),
]

_EXERCISE = r"(?:exercise|physical activity|workout)[:\s]*" + _LINK
EXERCISE_PATTERNS = [
    ("never", re.compile(_EXERCISE + r"(?:never|no|none)", re.I)),
    ("rarely", re.compile(_EXERCISE + r"(?:rarely|seldom|hardly)", re.I)),
    ("sometimes", re.compile(_EXERCISE + r"(?:sometimes|occasionally|2-3|two|three)", re.I)),
    ("regularly", re.compile(_EXERCISE + r"(?:regularly|often|frequent|3-4|four|five)", re.I)),
    ("daily", re.compile(_EXERCISE + r"(?:daily|every day|everyday|7)", re.I)),
]

_DIET = r"(?:diet|eating|food)[:\s]*" + _LINK
DIET_PATTERNS = [
    ("poor", re.compile(_DIET + r"(?:poor|bad|unhealthy|junk|fast food|processed)", re.I)),
    ("fair", re.compile(_DIET + r"(?:fair|okay|average|moderate)", re.I)),
    ("good", re.compile(_DIET + r"(?:good|healthy|balanced|nutritious)", re.I)),
    ("excellent", re.compile(_DIET + r"(?:excellent|great|very good|optimal|perfect)", re.I)),
]

DIET_FALLBACK_PATTERNS = [
    ("poor", re.compile(r"high sugar|sweet|candy|soda|processed food", re.I)),
    ("good", re.compile(r"vegetables|fruits|whole grain|lean protein", re.I)),
]

ALCOHOL_PATTERNS = [
    ("never", re.compile(r"(?:alcohol|drink|beer|wine)[:\s]*(?:never|no|none|don't)", re.I)),
    ("rarely", re.compile(r"(?:alcohol|drink)[:\s]*(?:rarely|seldom|occasionally)", re.I)),
    ("socially", re.compile(r"(?:alcohol|drink)[:\s]*(?:socially|social|parties|weekends)", re.I)),
    ("regularly", re.compile(r"(?:alcohol|drink)[:\s]*(?:regularly|weekly|often)", re.I)),
    ("daily", re.compile(r"(?:alcohol|drink)[:\s]*(?:daily|every day|everyday)", re.I)),
]

SLEEP_PATTERN = re.compile(r"(?:sleep[:\s]*|get\s+)\s*(\d{1,2})\s*(?:hours?|hrs?)", re.I)

STRESS_PATTERNS = [
    ("low", re.compile(r"stress[:\s]*(?:low|minimal|little|no)", re.I)),
    ("moderate", re.compile(r"stress[:\s]*(?:moderate|medium|some|manageable)", re.I)),
    ("high", re.compile(r"stress[:\s]*(?:high|significant|a lot)", re.I)),
    ("very_high", re.compile(r"stress[:\s]*(?:very high|extreme|overwhelming|chronic)", re.I)),
]

WEIGHT_PATTERN = re.compile(
    r"(?:weight[:\s]*|weigh\s+)\s*(\d{1,3})\s*(kg|kilograms?|lbs?|pounds?)?", re.I
)
HEIGHT_PATTERN = re.compile(
    r"(?:height[:\s]*|tall\s+)\s*(\d{1,3})\s*(cm|centimeters?|ft|feet|inches?|in)?", re.I
)

MEDICAL_KEYWORDS = [
    "diabetes",
    "hypertension",
    "heart disease",
    "high blood pressure",
    "high cholesterol",
    "obesity",
    "asthma",
    "depression",
    "anxiety",
]


def _first_match(patterns, text: str) -> str | None:
    for value, pattern in patterns:
        if pattern.search(text):
            return value
    return None


def _round_half_up(value: float) -> int:
    return int(value + 0.5)


def _extract_smoker(text: str) -> bool | None:
    if any(p.search(text) for p in SMOKER_PATTERNS):
        return True
    if any(p.search(text) for p in NON_SMOKER_PATTERNS):
        return False
    return None


def _extract_weight(text: str) -> int | None:
    match = WEIGHT_PATTERN.search(text)
    if not match:
        return None
    weight = int(match.group(1))
    unit = (match.group(2) or "").lower()
    if "lb" in unit or "pound" in unit:
        weight = _round_half_up(weight * POUNDS_TO_KG)
    return weight if 20 <= weight <= 500 else None


def _extract_height(text: str) -> int | None:
    match = HEIGHT_PATTERN.search(text)
    if not match:
        return None
    height = int(match.group(1))
    unit = (match.group(2) or "").lower()
    if unit in ("ft", "feet") and height <= 8:
        height = _round_half_up(height * FEET_TO_CM)
    return height if 50 <= height <= 300 else None


def extract_answers(text: str) -> SurveyResponse:
    """Run every field matcher over ``text``; unmatched fields stay unset."""
    normalized = text.lower().strip()
    answers = {}

    age_match = AGE_PATTERN.search(normalized)
    if age_match and 1 <= int(age_match.group(1)) <= 120:
        answers["age"] = int(age_match.group(1))

    smoker = _extract_smoker(normalized)
    if smoker is not None:
        answers["smoker"] = smoker

    exercise = _first_match(EXERCISE_PATTERNS, normalized)
    if exercise:
        answers["exercise"] = exercise

    diet = _first_match(DIET_PATTERNS, normalized) or _first_match(DIET_FALLBACK_PATTERNS, normalized)
    if diet:
        answers["diet"] = diet

    alcohol = _first_match(ALCOHOL_PATTERNS, normalized)
    if alcohol:
        answers["alcohol"] = alcohol

    sleep_match = SLEEP_PATTERN.search(normalized)
    if sleep_match and 1 <= int(sleep_match.group(1)) <= 24:
        answers["sleep"] = int(sleep_match.group(1))

    stress = _first_match(STRESS_PATTERNS, normalized)
    if stress:
        answers["stress"] = stress

    weight = _extract_weight(normalized)
    if weight is not None:
        answers["weight"] = weight

    height = _extract_height(normalized)
    if height is not None:
        answers["height"] = height

    conditions = [c for c in MEDICAL_KEYWORDS if re.search(re.escape(c), normalized)]
    if conditions:
        answers["medical_history"] = conditions

    return SurveyResponse(**answers)


def parse_json_input(json_string: str) -> ParsedAnswers:
    """Parse a JSON survey payload.

    Raises ParsingError if the payload is not JSON or does not match the
    survey schema. Incomplete answer sets are returned with zero confidence.
    """
    try:
        data = json.loads(json_string)
    except json.JSONDecodeError as e:
        raise ParsingError(f"JSON parsing failed: {e.msg}") from e

    if not isinstance(data, dict):
        raise ParsingError("JSON parsing failed: expected an object of survey answers")

    try:
        answers = SurveyResponse.model_validate(data)
    except SchemaError as e:
        raise ParsingError(
            "JSON parsing failed: invalid survey structure",
            details=e.errors(include_url=False, include_context=False),
        ) from e

    report = validate_survey_completeness(answers)
    confidence = calculate_confidence_score(answers, 1.0) if report.is_valid else 0.0
    return ParsedAnswers(answers=answers, missing_fields=report.missing_fields, confidence=confidence)


def parse_text_input(text: str) -> ParsedAnswers:
    answers = extract_answers(text)
    report = validate_survey_completeness(answers)
    return ParsedAnswers(
        answers=answers,
        missing_fields=report.missing_fields,
        confidence=calculate_confidence_score(answers, TEXT_EXTRACTION_QUALITY),
    )


def parse_textual_input(text: str, format: str = "text") -> ParsedAnswers:
    if format == "json":
        return parse_json_input(text)
    return parse_text_input(text)


def process_ocr_result(ocr_result: OCRResult) -> ParsedAnswers:
    """Parse OCR output, discounting confidence by the OCR engine's own confidence."""
    if not ocr_result.success or not ocr_result.extracted_text:
        return ParsedAnswers(missing_fields=list(CORE_SURVEY_FIELDS), confidence=0.0)

    parsed = parse_text_input(ocr_result.extracted_text)
    extraction_quality = ocr_result.confidence * OCR_EXTRACTION_PENALTY
    logger.debug("OCR text parsed with extraction quality %.2f", extraction_quality)
    return parsed.model_copy(update={"confidence": parsed.confidence * extraction_quality})
