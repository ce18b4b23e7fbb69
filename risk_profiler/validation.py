"""Completeness and confidence checks over parsed survey answers."""

import re
from dataclasses import dataclass, field

from risk_profiler.constants import (
    CORE_FIELDS_BONUS,
    CORE_SURVEY_FIELDS,
    HEALTH_KEYWORDS,
    INSUFFICIENT_DATA,
    LOW_DATA_QUALITY,
    MAX_MISSING_CORE_FIELDS,
    MINIMUM_DATA_COMPLETENESS,
    MINIMUM_PARSE_CONFIDENCE,
)
from risk_profiler.models import ParsedAnswers, SurveyResponse

SURVEY_FIELDS = tuple(SurveyResponse.model_fields)

OCR_ARTIFACTS = [
    re.compile(r"\|{2,}"),
    re.compile(r"_{3,}"),
    re.compile(r"\s{3,}"),
    re.compile(r"[^\w\s:.,;!?()\[\]{}\-+=/]"),
]

OCR_CHARACTER_FIXES = [
    (re.compile(r"\|(?=\s|$)"), "I"),
    (re.compile(r"(?:(?<=\s)|^)[0O](?=\s|$)"), "O"),
    (re.compile(r"(?:(?<=\s)|^)[1l](?=\s|$)"), "I"),
    (re.compile(r"rn"), "m"),
    (re.compile(r"vv"), "w"),
    (re.compile(r"\n\s*\n"), "\n"),
    (re.compile(r"[ \t]+"), " "),
]


@dataclass
class CompletenessReport:
    is_valid: bool
    completeness: float
    missing_fields: list[str] = field(default_factory=list)


@dataclass
class ParsedDataCheck:
    is_valid: bool
    reason: str | None = None
    suggestions: list[str] = field(default_factory=list)


@dataclass
class TextQualityReport:
    is_valid: bool
    confidence: float
    suggestions: list[str]
    cleaned_text: str


def _is_populated(value) -> bool:
    return value is not None and value != "" and value != []


def validate_survey_completeness(answers: SurveyResponse) -> CompletenessReport:
    """Share of schema fields populated, and which core fields are missing.

    A survey is valid only when at least half of all fields are present and
    every core field (age, smoker, exercise, diet) is answered.
    """
    present = 0
    missing_core = []
    for name in SURVEY_FIELDS:
        if _is_populated(getattr(answers, name)):
            present += 1
        elif name in CORE_SURVEY_FIELDS:
            missing_core.append(name)

    completeness = present / len(SURVEY_FIELDS)
    return CompletenessReport(
        is_valid=completeness >= MINIMUM_DATA_COMPLETENESS and not missing_core,
        completeness=completeness,
        missing_fields=missing_core,
    )


def calculate_confidence_score(answers: SurveyResponse, extraction_quality: float = 1.0) -> float:
    confidence = validate_survey_completeness(answers).completeness * extraction_quality
    if all(getattr(answers, name) is not None for name in CORE_SURVEY_FIELDS):
        confidence += CORE_FIELDS_BONUS
    return min(confidence, 1.0)


def validate_parsed_data(parsed: ParsedAnswers) -> ParsedDataCheck:
    """Decide whether parsed answers are good enough for an assessment."""
    if parsed.confidence < MINIMUM_PARSE_CONFIDENCE:
        return ParsedDataCheck(
            is_valid=False,
            reason=LOW_DATA_QUALITY,
            suggestions=[
                "Provide clearer information",
                "Use structured format (JSON)",
                "Upload a higher quality image if using OCR",
            ],
        )

    critical_missing = [f for f in parsed.missing_fields if f in CORE_SURVEY_FIELDS]
    if len(critical_missing) > MAX_MISSING_CORE_FIELDS:
        return ParsedDataCheck(
            is_valid=False,
            reason=INSUFFICIENT_DATA,
            suggestions=[
                f"Please provide information for: {', '.join(critical_missing)}",
                "At least 3 of the 4 core fields (age, smoking, exercise, diet) are required",
            ],
        )

    return ParsedDataCheck(is_valid=True)


def clean_ocr_text(text: str) -> str:
    cleaned = text
    for pattern, replacement in OCR_CHARACTER_FIXES:
        cleaned = pattern.sub(replacement, cleaned)
    return cleaned.strip()


def assess_text_quality(text: str) -> TextQualityReport:
    """Heuristic quality score for free text before it is parsed."""
    suggestions = []
    confidence = 1.0
    cleaned = text.strip()

    if len(cleaned) < 10:
        suggestions.append("Text seems too short for meaningful analysis")
        confidence -= 0.3
    if len(cleaned) > 5000:
        suggestions.append("Text is very long and may affect processing speed")
        confidence -= 0.1

    lowered = cleaned.lower()
    found = sum(1 for keyword in HEALTH_KEYWORDS + ["family history"] if keyword in lowered)
    if found < 3:
        suggestions.append("Text doesn't contain many health-related terms")
        confidence -= 0.2

    artifacts = sum(1 for pattern in OCR_ARTIFACTS if pattern.search(cleaned))
    if artifacts:
        suggestions.append("Text may contain OCR artifacts")
        confidence -= 0.1 * artifacts

    cleaned = clean_ocr_text(cleaned)
    return TextQualityReport(
        is_valid=confidence > 0.3 and len(cleaned) >= 5,
        confidence=max(0.0, min(1.0, confidence)),
        suggestions=suggestions,
        cleaned_text=cleaned,
    )
