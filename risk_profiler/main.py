"""FastAPI service for the Health Risk Profiler."""

from dotenv import load_dotenv

load_dotenv()

import logging
import time
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from risk_profiler.config import Settings, get_settings
from risk_profiler.constants import (
    ACCEPTED_UPLOAD_TYPES,
    API_ENDPOINTS,
    FILE_TOO_LARGE,
    INVALID_FILE_TYPE,
    INVALID_INPUT,
    INVALID_REQUEST,
    OCR_FAILED,
    PROCESSING_ERROR,
)
from risk_profiler.errors import (
    FileUploadError,
    HealthProfilerError,
    OCRError,
    ParsingError,
    ProcessingError,
    ValidationError,
)
from risk_profiler.models import (
    AnalyzeImageRequest,
    AnalyzeTextRequest,
    MetricRequest,
    RecommendationsRequest,
    RiskAssessmentRequest,
)
from risk_profiler.monitoring import (
    InMemoryMetrics,
    MetricsSink,
    TTLCache,
    build_health_status,
    build_metrics_report,
)
from risk_profiler.ocr import MockOCREngine, OCREngine, perform_enhanced_ocr
from risk_profiler.recommendations import generate_recommendation_summary, generate_recommendations
from risk_profiler.risk_calculator import calculate_risk_score, generate_detailed_risk_assessment
from risk_profiler.text_parser import parse_textual_input, process_ocr_result
from risk_profiler.validation import assess_text_quality, validate_parsed_data

logging.basicConfig(
    level=get_settings().log_level.upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

ENDPOINT_METHODS = {
    "analyze-text": "POST, OPTIONS",
    "analyze-image": "POST, OPTIONS",
    "risk-assessment": "POST, OPTIONS",
    "recommendations": "POST, OPTIONS",
    "health-check": "GET, OPTIONS",
    "metrics": "GET, POST, OPTIONS",
}

HEALTH_CACHE_KEY = "health-check"


def _dump(model) -> dict:
    return model.model_dump(by_alias=True, exclude_none=True)


def _processing_failure(request: Request, action: str, exc: Exception) -> ProcessingError:
    logger.exception("%s failed", action)
    request.app.state.metrics.record("error", 1, {"message": str(exc)})
    return ProcessingError(PROCESSING_ERROR, details=str(exc))


def create_app(
    settings: Settings | None = None,
    metrics: MetricsSink | None = None,
    cache: TTLCache | None = None,
    ocr_engine: OCREngine | None = None,
) -> FastAPI:
    settings = settings or get_settings()

    app = FastAPI(
        title=settings.app_name,
        description="Health risk profiling from survey answers, free text and scanned forms",
        version=settings.app_version,
    )
    app.state.settings = settings
    app.state.metrics = metrics or InMemoryMetrics()
    app.state.health_cache = cache or TTLCache(settings.health_cache_ttl)
    app.state.ocr_engine = ocr_engine or MockOCREngine(settings.ocr_min_latency, settings.ocr_max_latency)
    app.state.started_at = time.monotonic()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def track_api_calls(request: Request, call_next):
        path = request.url.path
        tracked = path.startswith("/api/") and path != "/api/metrics" and request.method != "OPTIONS"
        started = time.perf_counter()
        response = await call_next(request)
        if tracked:
            request.app.state.metrics.record("api_call", 1)
            request.app.state.metrics.record("response_time", (time.perf_counter() - started) * 1000)
        return response

    @app.exception_handler(HealthProfilerError)
    async def handle_profiler_error(request: Request, exc: HealthProfilerError):
        return JSONResponse(status_code=exc.status_code, content=jsonable_encoder(exc.to_dict()))

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=400,
            content={"status": "error", "error": INVALID_REQUEST, "details": jsonable_encoder(exc.errors())},
        )

    @app.get("/")
    def root():
        return {
            "service": settings.app_name,
            "version": settings.app_version,
            "endpoints": API_ENDPOINTS,
        }

    @app.post("/api/analyze-text")
    def analyze_text(body: AnalyzeTextRequest, request: Request):
        try:
            parsed = parse_textual_input(body.text, body.format)
        except ParsingError as e:
            raise ValidationError(INVALID_INPUT, details=e.details or e.message) from e
        except Exception as e:
            raise _processing_failure(request, "Text analysis", e) from e

        check = validate_parsed_data(parsed)
        if not check.is_valid:
            logger.info("Incomplete profile from %s input: %s", body.format, check.reason)
            return {
                "status": "incomplete_profile",
                "reason": check.reason,
                "suggestions": check.suggestions,
                "data": _dump(parsed),
            }

        logger.info("Parsed %s input with confidence %.2f", body.format, parsed.confidence)
        response = {"status": "success", "data": _dump(parsed)}
        # Quality heuristics only make sense for free text
        if body.format == "text":
            quality = assess_text_quality(body.text)
            response["input_quality"] = {
                "confidence": quality.confidence,
                "suggestions": quality.suggestions,
            }
        return response

    @app.post("/api/analyze-image")
    def analyze_image(body: AnalyzeImageRequest, request: Request):
        if body.mime_type not in ACCEPTED_UPLOAD_TYPES:
            raise FileUploadError(INVALID_FILE_TYPE)

        estimated_size = len(body.image_data) * 3 / 4
        if estimated_size > settings.max_upload_bytes:
            raise FileUploadError(FILE_TOO_LARGE)

        try:
            ocr_result = perform_enhanced_ocr(
                body.image_data,
                body.filename,
                request.app.state.ocr_engine,
                max_attempts=settings.ocr_max_attempts,
                confidence_threshold=settings.ocr_confidence_threshold,
            )
        except HealthProfilerError:
            raise
        except Exception as e:
            raise _processing_failure(request, "Image analysis", e) from e

        request.app.state.metrics.record("ocr_processing", 1)

        if not ocr_result.success:
            logger.info("OCR failed for %s after %d attempts", body.filename, ocr_result.attempts)
            raise OCRError(
                OCR_FAILED,
                data={
                    "ocr_result": _dump(ocr_result),
                    "attempts": ocr_result.attempts,
                    "confidence": ocr_result.confidence,
                },
            )

        parsed = process_ocr_result(ocr_result)
        logger.info("Extracted survey data from %s with confidence %.2f", body.filename, parsed.confidence)
        return {
            "status": "success",
            "data": {
                "ocr_result": _dump(ocr_result),
                "parsed_data": _dump(parsed),
            },
        }

    @app.post("/api/risk-assessment")
    def risk_assessment(body: RiskAssessmentRequest, request: Request):
        try:
            if body.include_factors:
                assessment = generate_detailed_risk_assessment(body.answers)
            else:
                assessment = calculate_risk_score(body.answers)
        except Exception as e:
            raise _processing_failure(request, "Risk assessment", e) from e

        logger.info("Risk assessed: %s (%d)", assessment.risk_level, assessment.score)
        return {"status": "success", "data": _dump(assessment)}

    @app.post("/api/recommendations")
    def recommendations(body: RecommendationsRequest, request: Request):
        try:
            result = generate_recommendations(body.risk_assessment, body.user_preferences)
            summary = generate_recommendation_summary(result.recommendations)
        except Exception as e:
            raise _processing_failure(request, "Recommendations generation", e) from e

        logger.info("Generated %d recommendations", len(result.recommendations))
        return {"status": "success", "data": {**_dump(result), "summary": _dump(summary)}}

    @app.get("/api/health-check")
    def health_check(request: Request):
        state = request.app.state
        cached = state.health_cache.get(HEALTH_CACHE_KEY)
        if cached is None:
            cached = build_health_status(
                settings,
                state.started_at,
                ocr_available=state.ocr_engine is not None,
            )
            state.health_cache.set(HEALTH_CACHE_KEY, cached)
        report, status_code = cached
        return JSONResponse(status_code=status_code, content=report)

    @app.get("/api/metrics")
    def get_metrics(request: Request):
        return build_metrics_report(request.app.state.metrics, settings, request.app.state.started_at)

    @app.post("/api/metrics")
    def record_metric(body: MetricRequest, request: Request):
        request.app.state.metrics.record(body.metric, body.value, body.tags)
        return {
            "success": True,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "metric": body.metric,
            "value": body.value,
        }

    @app.options("/api/{path:path}")
    def preflight(path: str):
        return Response(
            status_code=200,
            headers={
                "Access-Control-Allow-Origin": "*",
                "Access-Control-Allow-Methods": ENDPOINT_METHODS.get(path.strip("/"), "GET, POST, OPTIONS"),
                "Access-Control-Allow-Headers": "Content-Type, Authorization",
            },
        )

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("risk_profiler.main:app", host="0.0.0.0", port=8000)
