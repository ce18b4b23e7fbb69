import pytest
from fastapi.testclient import TestClient

from risk_profiler.config import Settings
from risk_profiler.main import create_app


@pytest.fixture
def settings():
    return Settings(
        ocr_min_latency=0,
        ocr_max_latency=0,
        memory_warning_mb=100_000,
        memory_critical_mb=200_000,
    )


@pytest.fixture
def client(settings):
    return TestClient(create_app(settings))
