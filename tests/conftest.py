"""
Test configuration and fixtures for the WebTools relay tests.

The backend is never contacted: every outbound call goes through an
``httpx.MockTransport`` driven by ``BackendStub``.
"""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from webtools.config import Settings
from webtools.main import create_app
from webtools.services.backend import BackendClient

from tests._helpers import BackendStub

BACKEND_URL = "http://backend.test"
RELAY_URL = "http://relay.test"


@pytest.fixture
def test_settings():
    """Settings isolated from the environment's backend."""
    return Settings(
        BACKEND_URL=BACKEND_URL,
        BACKEND_API_PREFIX="/api/v1",
        RELAY_URL=RELAY_URL,
        REQUEST_TIMEOUT=5.0,
        CATALOG_REFRESH_INTERVAL=0,
        CATALOG_MODE="merge",
    )


@pytest.fixture
def backend_stub():
    return BackendStub()


@pytest.fixture
def backend(test_settings, backend_stub):
    return BackendClient.from_settings(test_settings, transport=backend_stub.transport)


@pytest.fixture
def sample_agent_list():
    return {
        "agents": ["story-generator", "ai-content-improver"],
        "tools": ["domain-checker", "hex-to-rgb"],
        "all": ["story-generator", "ai-content-improver", "domain-checker", "hex-to-rgb"],
    }


@pytest.fixture
def app(test_settings, backend):
    """Create FastAPI app instance wired to the stubbed backend."""
    return create_app(test_settings, backend=backend)


@pytest.fixture
def client(app):
    """Create test client for HTTP requests (runs the lifespan)."""
    with TestClient(app) as test_client:
        yield test_client


def pytest_configure(config):
    """Configure custom test markers."""
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests"
    )
    config.addinivalue_line(
        "markers", "integration: marks tests that exercise the HTTP routes"
    )
