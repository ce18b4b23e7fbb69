"""In-process metrics, a small TTL cache and the health-check report."""

import logging
import platform
import resource
import sys
import threading
import time
from datetime import datetime, timezone
from typing import Callable, Protocol

from risk_profiler.config import Settings
from risk_profiler.constants import API_ENDPOINTS

logger = logging.getLogger(__name__)

RESPONSE_TIME_SAMPLES = 100
SLOW_HEALTH_CHECK_MS = 2000
MEMORY_USAGE_WARNING_PERCENT = 80


class MetricsSink(Protocol):
    def record(self, metric: str, value: float, tags: dict[str, str] | None = None) -> None: ...

    def snapshot(self) -> dict: ...


class InMemoryMetrics:
    """Counters kept for the lifetime of one application instance."""

    def __init__(self):
        self._lock = threading.Lock()
        self.api_calls = 0
        self.ocr_processing = 0
        self.errors = 0
        self.response_times: list[float] = []
        self.last_error: str | None = None

    def record(self, metric: str, value: float, tags: dict[str, str] | None = None) -> None:
        with self._lock:
            if metric == "api_call":
                self.api_calls += int(value)
            elif metric == "ocr_processing":
                self.ocr_processing += int(value)
            elif metric == "error":
                self.errors += int(value)
                if tags and tags.get("message"):
                    self.last_error = tags["message"]
            elif metric == "response_time":
                self.response_times.append(value)
                self.response_times = self.response_times[-RESPONSE_TIME_SAMPLES:]
            else:
                logger.debug("Ignoring unknown metric %s", metric)
                return
        logger.debug("Metric recorded: %s = %s", metric, value)

    def snapshot(self) -> dict:
        with self._lock:
            samples = len(self.response_times)
            avg = round(sum(self.response_times) / samples) if samples else 0
            return {
                "api_calls_total": self.api_calls,
                "ocr_processing_total": self.ocr_processing,
                "errors_total": self.errors,
                "response_times": {"avg_ms": avg, "samples": samples},
                "last_error": self.last_error,
            }


class TTLCache:
    """Keyed cache whose entries expire ``ttl`` seconds after being set."""

    def __init__(self, ttl: float, clock: Callable[[], float] = time.monotonic):
        self.ttl = ttl
        self._clock = clock
        self._lock = threading.Lock()
        self._entries: dict[str, tuple[float, object]] = {}

    def get(self, key: str):
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            stored_at, value = entry
            if self._clock() - stored_at >= self.ttl:
                del self._entries[key]
                return None
            return value

    def set(self, key: str, value) -> None:
        with self._lock:
            self._entries[key] = (self._clock(), value)


def memory_usage_mb() -> int:
    # ru_maxrss is kilobytes on Linux, bytes on macOS
    rss = resource.getrusage(resource.RUSAGE_SELF).ru_maxrss
    if sys.platform == "darwin":
        rss //= 1024
    return round(rss / 1024)


def memory_status(used_mb: int, settings: Settings) -> str:
    if used_mb > settings.memory_critical_mb:
        return "critical"
    if used_mb > settings.memory_warning_mb:
        return "warning"
    return "healthy"


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def build_health_status(settings: Settings, started_at: float, ocr_available: bool = True) -> tuple[dict, int]:
    """Return the health report and the HTTP status it should be served with."""
    check_started = time.perf_counter()

    used_mb = memory_usage_mb()
    memory = memory_status(used_mb, settings)
    ocr = "healthy" if ocr_available else "unhealthy"
    response_time = int((time.perf_counter() - check_started) * 1000)

    if ocr == "unhealthy" or memory == "critical":
        overall = "unhealthy"
    elif memory == "warning" or response_time > SLOW_HEALTH_CHECK_MS:
        overall = "degraded"
    else:
        overall = "healthy"

    report = {
        "status": overall,
        "timestamp": _now_iso(),
        "service": settings.app_name,
        "version": settings.app_version,
        "uptime": round(time.monotonic() - started_at, 3),
        "services": {
            "api": "healthy",
            "ocr": ocr,
            "memory": memory,
            "response_time": response_time,
        },
        "environment": settings.environment,
        "system": {
            "memory_mb": used_mb,
            "python_version": platform.python_version(),
            "platform": sys.platform,
        },
        "endpoints": dict(API_ENDPOINTS),
    }
    return report, 503 if overall == "unhealthy" else 200


def build_metrics_report(metrics: MetricsSink, settings: Settings, started_at: float) -> dict:
    snapshot = metrics.snapshot()
    used_mb = memory_usage_mb()
    limit_mb = settings.memory_critical_mb
    usage_percentage = round(used_mb / limit_mb * 100) if limit_mb else 0

    health = {"status": "warning" if usage_percentage > MEMORY_USAGE_WARNING_PERCENT else "healthy"}
    if snapshot.get("last_error"):
        health["last_error"] = snapshot["last_error"]

    return {
        "timestamp": _now_iso(),
        "memory": {
            "used_mb": used_mb,
            "limit_mb": limit_mb,
            "usage_percentage": usage_percentage,
        },
        "performance": {
            "uptime_seconds": round(time.monotonic() - started_at),
            "response_times": snapshot["response_times"],
        },
        "usage": {
            "api_calls_total": snapshot["api_calls_total"],
            "ocr_processing_total": snapshot["ocr_processing_total"],
            "errors_total": snapshot["errors_total"],
        },
        "health": health,
    }
