"""
Pytest configuration and fixtures for liveauth tests.
"""

import pytest
from django.test import RequestFactory

from liveauth.config import config
from liveauth.submission import Failure
from liveauth.testing import RecordingHandler


@pytest.fixture
def request_factory():
    """Provide Django RequestFactory for creating test requests."""
    return RequestFactory()


@pytest.fixture(autouse=True)
def reset_liveauth_config():
    """Restore configuration changed by a test."""
    config.reset()
    yield
    config.reset()


@pytest.fixture
def recording_handler():
    return RecordingHandler()


@pytest.fixture
def failing_handler():
    return RecordingHandler(Failure("Invalid credentials"))


@pytest.fixture
def valid_sign_in():
    return {"email": "ada@example.com", "password": "correct horse"}


@pytest.fixture
def valid_sign_up():
    return {
        "firstName": "Ada",
        "lastName": "Lovelace",
        "email": "ada@example.com",
        "password": "abcdefgh",
        "confirmPassword": "abcdefgh",
        "terms": True,
    }
