"""Simulated OCR for uploaded health forms.

No real recognition happens here: ``MockOCREngine`` waits for a while and
returns one of a few typical health-form transcripts. Anything implementing
``OCREngine`` can be passed in instead.
"""

import base64
import binascii
import logging
import random
import re
import time
from dataclasses import dataclass, field
from typing import Protocol

from risk_profiler.constants import HEALTH_KEYWORDS, INVALID_IMAGE_DATA
from risk_profiler.errors import FileUploadError
from risk_profiler.models import EnhancedOCRResult, OCRResult

logger = logging.getLogger(__name__)

SAMPLE_FORMS = [
    """Age: 35
Smoker: No
Exercise: 3 times per week
Diet: Balanced, mostly home-cooked meals
Weight: 75kg
Height: 175cm
Alcohol: Social drinking, 2-3 drinks per week
Sleep: 7-8 hours per night
Stress Level: Moderate work stress
Medical History: None significant
Family History: Father - heart disease at 65
Blood Pressure: 120/80 (normal)
Cholesterol: 210 mg/dL (slightly elevated)""",
    """Age: 42
Smoker: Former smoker (quit 2 years ago)
Exercise: Running 4x per week, gym 2x per week
Diet: Mediterranean diet with occasional treats
Weight: 68kg
Height: 165cm
Alcohol: Wine with dinner, 4-5 glasses per week
Sleep: 6-7 hours per night
Stress Level: Low to moderate
Medical History: Hypertension diagnosed last year
Family History: Mother - diabetes, Father - stroke
Blood Pressure: 135/85 (controlled with medication)
Cholesterol: 190 mg/dL (normal)""",
    """Age: 28
Smoker: Never
Exercise: Yoga 3x per week, walking daily
Diet: Vegetarian, high fiber
Weight: 60kg
Height: 160cm
Alcohol: Rarely, special occasions only
Sleep: 8-9 hours per night
Stress Level: Low
Medical History: None
Family History: Grandmother - breast cancer
Blood Pressure: 110/70 (normal)
Cholesterol: 170 mg/dL (optimal)""",
]

TEXT_CORRECTIONS = [
    (re.compile(r"\|(?=\s|$)"), "I"),
    (re.compile(r"(?:(?<=\s)|^)[0O](?=\s|$)"), "O"),
    (re.compile(r"(?:(?<=\s)|^)[1l](?=\s|$)"), "I"),
    (re.compile(r"(?:(?<=\s)|^)rn(?=\s|$)"), "m"),
    (re.compile(r"(?:(?<=\s)|^)vv(?=\s|$)"), "w"),
    # Field labels
    (re.compile(r"\b[Aa]ge[:\s]*(\d+)"), r"Age: \1"),
    (re.compile(r"\b[Ss]mok(?:er?|ing)[:\s]*"), "Smoker: "),
    (re.compile(r"\b[Ee]xercise[:\s]*"), "Exercise: "),
    (re.compile(r"\b[Dd]iet[:\s]*"), "Diet: "),
    (re.compile(r"\b[Aa]lcohol[:\s]*"), "Alcohol: "),
    (re.compile(r"\b[Ss]leep[:\s]*"), "Sleep: "),
    (re.compile(r"\b[Ss]tress[:\s]*"), "Stress: "),
    (re.compile(r"\b[Ww]eight[:\s]*"), "Weight: "),
    (re.compile(r"\b[Hh]eight[:\s]*"), "Height: "),
    (re.compile(r"(\w)\s*:\s*"), r"\1: "),
]

FAILED_OCR_SUGGESTIONS = [
    "Try uploading a clearer image",
    "Ensure the document is well-lit",
    "Make sure text is not rotated or skewed",
    "Consider manual entry instead",
]

_PREVIEW_PATTERNS = {
    "age": re.compile(r"age[:\s]*(\d+)", re.I),
    "smoker": re.compile(r"smok(?:er?|ing)[:\s]*(\w+)", re.I),
    "exercise": re.compile(r"exercise[:\s]*([^\n,;.]+)", re.I),
    "diet": re.compile(r"diet[:\s]*([^\n,;.]+)", re.I),
}

_DATA_URL_PREFIX = re.compile(r"^data:[^;,]*;base64,", re.I)


class OCREngine(Protocol):
    def recognize(self, image: bytes) -> tuple[str, float]:
        """Return the recognised text and a confidence in [0, 1]."""
        ...


class MockOCREngine:
    """Stand-in engine returning canned health-form text after a random delay."""

    def __init__(self, min_latency: float = 1.5, max_latency: float = 3.5, rng: random.Random | None = None):
        self.min_latency = min_latency
        self.max_latency = max(min_latency, max_latency)
        self.rng = rng or random.Random()

    def recognize(self, image: bytes) -> tuple[str, float]:
        delay = self.rng.uniform(self.min_latency, self.max_latency)
        if delay > 0:
            time.sleep(delay)
        text = self.rng.choice(SAMPLE_FORMS)
        confidence = 0.75 + self.rng.random() * 0.2
        return text, confidence


@dataclass
class OCRValidation:
    is_valid: bool
    confidence: float
    suggestions: list[str] = field(default_factory=list)
    extracted_fields: dict = field(default_factory=dict)


def post_process_ocr_text(text: str) -> str:
    processed = re.sub(r"\s+", " ", text)
    for pattern, replacement in TEXT_CORRECTIONS:
        processed = pattern.sub(replacement, processed)
    return processed.strip()


def perform_ocr(
    image: bytes,
    engine: OCREngine,
    confidence_threshold: int = 60,
    preprocessing: bool = True,
) -> OCRResult:
    """Run one OCR pass. ``confidence_threshold`` is a percentage."""
    started = time.perf_counter()
    text, confidence = engine.recognize(image)
    if preprocessing:
        text = post_process_ocr_text(text)

    success = confidence >= confidence_threshold / 100 and bool(text.strip())
    error = None
    if not success:
        error = f"OCR confidence ({round(confidence * 100)}%) below threshold ({confidence_threshold}%)"

    return OCRResult(
        extracted_text=text,
        confidence=confidence,
        processing_time=int((time.perf_counter() - started) * 1000),
        success=success,
        error=error,
    )


def validate_ocr_results(ocr_result: OCRResult) -> OCRValidation:
    """Re-score an OCR result by how much it looks like a health survey."""
    if not ocr_result.success:
        return OCRValidation(is_valid=False, confidence=0.0, suggestions=list(FAILED_OCR_SUGGESTIONS))

    text = ocr_result.extracted_text.lower()
    found = sum(1 for keyword in HEALTH_KEYWORDS if keyword in text)
    confidence = (ocr_result.confidence + found / len(HEALTH_KEYWORDS)) / 2

    extracted_fields = {}
    for name, pattern in _PREVIEW_PATTERNS.items():
        match = pattern.search(text)
        if match:
            value = match.group(1).strip()
            extracted_fields[name] = int(value) if name == "age" else value

    suggestions = []
    if confidence < 0.7:
        suggestions.append("OCR confidence is low - consider manual entry")
    if found < 3:
        suggestions.append("Few health-related terms detected - ensure this is a health survey form")
    if len(extracted_fields) < 2:
        suggestions.append("Limited data extracted - try a higher quality image")

    return OCRValidation(
        is_valid=confidence >= 0.5 and found >= 2,
        confidence=confidence,
        suggestions=suggestions,
        extracted_fields=extracted_fields,
    )


def decode_image_data(image_data: str) -> bytes:
    """Decode base64 image data, with or without a ``data:`` URL prefix."""
    payload = _DATA_URL_PREFIX.sub("", image_data.strip())
    try:
        image = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as e:
        raise FileUploadError(INVALID_IMAGE_DATA) from e
    if not image:
        raise FileUploadError(INVALID_IMAGE_DATA)
    return image


def perform_enhanced_ocr(
    image_data: str,
    filename: str,
    engine: OCREngine,
    max_attempts: int = 1,
    confidence_threshold: int = 60,
) -> EnhancedOCRResult:
    """Run OCR until a result validates, keeping the most confident attempt.

    The returned ``confidence`` and ``success`` are the validated ones; the
    raw engine result of the best attempt is kept as ``best_result``.
    """
    if max_attempts < 1:
        raise ValueError(f"max_attempts must be at least 1, got {max_attempts}")

    image = decode_image_data(image_data)

    best = None
    best_validation = None
    attempts = 0
    try:
        for _ in range(max_attempts):
            attempts += 1
            result = perform_ocr(image, engine, confidence_threshold=confidence_threshold)
            validation = validate_ocr_results(result)
            logger.debug(
                "OCR attempt %d for %s: confidence %.2f, valid %s",
                attempts,
                filename,
                validation.confidence,
                validation.is_valid,
            )
            if best_validation is None or validation.confidence > best_validation.confidence:
                best, best_validation = result, validation
            if validation.is_valid:
                break
    except Exception as e:
        logger.warning("OCR engine failed for %s: %s", filename, e)
        return EnhancedOCRResult(
            extracted_text="",
            confidence=0.0,
            processing_time=0,
            success=False,
            error=f"Enhanced OCR failed: {e}",
            attempts=0,
        )

    error = best.error
    if not best_validation.is_valid and error is None:
        error = "; ".join(best_validation.suggestions) or "OCR result failed validation"

    return EnhancedOCRResult(
        extracted_text=best.extracted_text,
        confidence=best_validation.confidence,
        processing_time=best.processing_time,
        success=best_validation.is_valid,
        error=None if best_validation.is_valid else error,
        attempts=attempts,
        best_result=best,
    )
