import os
import time

import pytest
from fastapi.testclient import TestClient

# Set test environment variables before the app reads its settings
os.environ.update(
    {
        "STRIPE_WEBHOOK_SECRET": "whsec_test",
        "WEBHOOK_TOLERANCE_SECONDS": "300",
        "ALLOWED_ORIGINS": "http://localhost:5173",
        "MAX_BODY_BYTES": "1048576",
    }
)

from quote_api.core.config import Settings, get_settings  # noqa: E402
from quote_api.services.stripe_verify import generate_header  # noqa: E402


@pytest.fixture
def settings() -> Settings:
    return get_settings()


@pytest.fixture
def app():
    from quote_api.main import app

    yield app
    app.dependency_overrides.clear()


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def sign():
    """Return a helper that signs a body the way Stripe does."""

    def _sign(body: bytes, secret: str = "whsec_test", timestamp: int | None = None):
        if timestamp is None:
            timestamp = int(time.time())
        return generate_header(body, secret, timestamp=timestamp)

    return _sign
