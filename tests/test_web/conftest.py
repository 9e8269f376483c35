from __future__ import annotations

import pytest

from flowbridge.config import ConverterConfig
from flowbridge.web.app import create_app


@pytest.fixture
def app():
    """Create a Flask app for testing."""
    application = create_app()
    application.config["TESTING"] = True
    return application


@pytest.fixture
def client(app):
    """Create a Flask test client."""
    return app.test_client()


@pytest.fixture
def strict_client():
    """Client whose embed limits are small enough to block any embed."""
    application = create_app(config=ConverterConfig(embed_warn_bytes=8, embed_error_bytes=16))
    application.config["TESTING"] = True
    with application.test_client() as c:
        yield c
