"""
Tests for safe error messages and log masking.
"""

import logging

from liveauth.config import config
from liveauth.security import (
    GENERIC_ERROR_MESSAGES,
    create_safe_error_response,
    log_exception_safely,
    mask_sensitive,
    safe_error_message,
)


class TestSafeErrorMessage:
    def test_generic_in_production(self):
        e = ValueError("connection to 10.0.0.3 refused")
        assert safe_error_message(e, debug_mode=False) == GENERIC_ERROR_MESSAGES["default"]

    def test_detailed_in_debug(self):
        e = ValueError("connection refused")
        assert safe_error_message(e, debug_mode=True) == "ValueError: connection refused"

    def test_debug_errors_config(self):
        config.set("debug_errors", True)
        assert safe_error_message(KeyError("x")).startswith("KeyError")

    def test_submission_uses_configured_message(self):
        config.set("failure_message", "Service unavailable, try later.")
        assert safe_error_message(RuntimeError(), "submission") == "Service unavailable, try later."


class TestCreateSafeErrorResponse:
    def test_explicit_message(self):
        assert create_safe_error_response(message="Invalid JSON") == {"type": "error", "error": "Invalid JSON"}

    def test_exception_hidden(self):
        response = create_safe_error_response(exception=RuntimeError("secret"), debug_mode=False)
        assert "secret" not in response["error"]

    def test_error_type_only(self):
        assert create_safe_error_response(error_type="not_found")["error"] == GENERIC_ERROR_MESSAGES["not_found"]


class TestMaskSensitive:
    def test_masks_password_fields(self):
        masked = mask_sensitive({"email": "a@b.co", "password": "abcdefgh", "confirmPassword": "abcdefgh"})
        assert masked == {"email": "a@b.co", "password": "********", "confirmPassword": "********"}

    def test_empty(self):
        assert mask_sensitive(None) == {}
        assert mask_sensitive({}) == {}

    def test_configured_markers(self):
        config.set("sensitive_fields", ["email"])
        assert mask_sensitive({"email": "a@b.co", "password": "x"}) == {"email": "********", "password": "x"}

    def test_original_untouched(self):
        values = {"password": "abcdefgh"}
        mask_sensitive(values)
        assert values == {"password": "abcdefgh"}


class TestLogExceptionSafely:
    def test_logs_masked_values_with_traceback(self, caplog):
        logger = logging.getLogger("liveauth.tests")
        try:
            raise RuntimeError("boom")
        except RuntimeError as e:
            with caplog.at_level(logging.ERROR, logger="liveauth.tests"):
                log_exception_safely(logger, e, "Submission failed", "signin", {"password": "hunter22"})

        record = caplog.records[-1]
        assert "Submission failed (form=signin): RuntimeError" in record.getMessage()
        assert "hunter22" not in caplog.text
        assert record.exc_info is not None
