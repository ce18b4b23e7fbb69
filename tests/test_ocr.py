"""Tests for the simulated OCR pipeline."""

import base64
import random

import pytest

from risk_profiler.errors import FileUploadError
from risk_profiler.models import OCRResult
from risk_profiler.ocr import (
    SAMPLE_FORMS,
    MockOCREngine,
    decode_image_data,
    perform_enhanced_ocr,
    perform_ocr,
    post_process_ocr_text,
    validate_ocr_results,
)

IMAGE_BYTES = b"\x89PNG\r\n\x1a\nfake image"
IMAGE_B64 = base64.b64encode(IMAGE_BYTES).decode()


class FixedEngine:
    def __init__(self, text, confidence):
        self.text = text
        self.confidence = confidence
        self.calls = 0

    def recognize(self, image):
        self.calls += 1
        return self.text, self.confidence


class SequenceEngine:
    def __init__(self, results):
        self.results = list(results)
        self.calls = 0

    def recognize(self, image):
        result = self.results[self.calls]
        self.calls += 1
        return result


class BrokenEngine:
    def recognize(self, image):
        raise RuntimeError("engine offline")


class TestMockOCREngine:
    def test_returns_sample_form(self):
        engine = MockOCREngine(0, 0, rng=random.Random(7))
        for _ in range(10):
            text, confidence = engine.recognize(IMAGE_BYTES)
            assert text in SAMPLE_FORMS
            assert 0.75 <= confidence < 0.95

    def test_ignores_image_content(self):
        first = MockOCREngine(0, 0, rng=random.Random(3)).recognize(b"a")
        second = MockOCREngine(0, 0, rng=random.Random(3)).recognize(b"completely different")
        assert first == second


class TestPerformOcr:
    def test_low_confidence_fails(self):
        result = perform_ocr(IMAGE_BYTES, FixedEngine("Age: 40", 0.5), confidence_threshold=60)
        assert result.success is False
        assert result.error == "OCR confidence (50%) below threshold (60%)"

    def test_confident_result_succeeds(self):
        result = perform_ocr(IMAGE_BYTES, FixedEngine("Age: 40", 0.9))
        assert result.success is True
        assert result.error is None
        assert result.processing_time >= 0

    def test_empty_text_fails(self):
        result = perform_ocr(IMAGE_BYTES, FixedEngine("   ", 0.9))
        assert result.success is False

    def test_preprocessing_can_be_disabled(self):
        result = perform_ocr(IMAGE_BYTES, FixedEngine("age   40", 0.9), preprocessing=False)
        assert result.extracted_text == "age   40"


class TestPostProcessing:
    def test_collapses_whitespace_and_normalizes_labels(self):
        text = "age 35\nsmoker no\n\nexercise   daily"
        assert post_process_ocr_text(text) == "Age: 35 Smoker: no Exercise: daily"

    def test_colon_spacing(self):
        assert post_process_ocr_text("Cholesterol :170") == "Cholesterol: 170"


class TestValidateOcrResults:
    def test_failed_result(self):
        result = OCRResult(extracted_text="", confidence=0.3, processing_time=5, success=False)
        validation = validate_ocr_results(result)
        assert validation.is_valid is False
        assert validation.confidence == 0
        assert "Consider manual entry instead" in validation.suggestions

    def test_health_form(self):
        result = OCRResult(
            extracted_text=post_process_ocr_text(SAMPLE_FORMS[0]),
            confidence=0.9,
            processing_time=5,
            success=True,
        )
        validation = validate_ocr_results(result)
        assert validation.is_valid is True
        assert validation.extracted_fields["age"] == 35
        assert validation.extracted_fields["smoker"] == "no"

    def test_unrelated_text(self):
        result = OCRResult(extracted_text="Shopping list: milk", confidence=0.9, processing_time=5, success=True)
        validation = validate_ocr_results(result)
        assert validation.is_valid is False
        assert validation.confidence == pytest.approx(0.45)


class TestDecodeImageData:
    def test_plain_base64(self):
        assert decode_image_data(IMAGE_B64) == IMAGE_BYTES

    def test_data_url(self):
        assert decode_image_data(f"data:image/png;base64,{IMAGE_B64}") == IMAGE_BYTES

    def test_invalid_base64(self):
        with pytest.raises(FileUploadError):
            decode_image_data("not base64!!")


class TestEnhancedOcr:
    def test_first_valid_attempt_stops(self):
        engine = FixedEngine(SAMPLE_FORMS[1], 0.9)
        result = perform_enhanced_ocr(IMAGE_B64, "form.png", engine, max_attempts=3)
        assert result.success is True
        assert result.attempts == 1
        assert engine.calls == 1
        assert result.best_result is not None
        assert result.best_result.confidence == 0.9

    def test_retries_until_valid(self):
        engine = SequenceEngine([(SAMPLE_FORMS[0], 0.4), (SAMPLE_FORMS[2], 0.85)])
        result = perform_enhanced_ocr(IMAGE_B64, "form.png", engine, max_attempts=2)
        assert result.success is True
        assert result.attempts == 2

    def test_all_attempts_fail(self):
        engine = FixedEngine("blurry", 0.5)
        result = perform_enhanced_ocr(IMAGE_B64, "form.png", engine, max_attempts=2)
        assert result.success is False
        assert result.attempts == 2
        assert "below threshold" in result.error

    def test_engine_failure(self):
        result = perform_enhanced_ocr(IMAGE_B64, "form.png", BrokenEngine(), max_attempts=2)
        assert result.success is False
        assert result.attempts == 0
        assert "engine offline" in result.error

    def test_undecodable_image_raises(self):
        with pytest.raises(FileUploadError):
            perform_enhanced_ocr("%%%", "form.png", FixedEngine("x", 0.9))

    def test_zero_attempts_rejected(self):
        with pytest.raises(ValueError, match="max_attempts"):
            perform_enhanced_ocr(IMAGE_B64, "form.png", FixedEngine("Age: 40", 0.9), max_attempts=0)
