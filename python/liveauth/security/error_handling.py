"""
Error Handling - Safe error messages and log hygiene

Submission handlers talk to an external identity service, and whatever they
raise must not reach the user verbatim: exception text can carry internal
hostnames, SQL, or the submitted credentials themselves.

Security Considerations:
    - Never expose exception details unless ``debug_errors`` is enabled
    - Never include submitted values in error responses
    - Never log password-like values in clear text

Usage:
    from liveauth.security import safe_error_message, mask_sensitive

    try:
        outcome = await handler.submit(values)
    except Exception as e:
        logger.exception("Submission failed for %s", mask_sensitive(values))
        message = safe_error_message(e, error_type="submission")
"""

import logging
from typing import Any, Dict, Mapping, Optional

from ..config import config

MASK = "********"

# Generic error messages for production (no information leakage)
GENERIC_ERROR_MESSAGES = {
    "default": "An error occurred. Please try again.",
    "submission": "Something went wrong. Please try again.",
    "event": "An error occurred processing your request.",
    "validation": "Invalid input. Please check your data.",
    "not_found": "The requested form was not found.",
}


def _debug_enabled(debug_mode: Optional[bool]) -> bool:
    if debug_mode is not None:
        return debug_mode
    return bool(config.get("debug_errors", False))


def safe_error_message(
    exception: Exception,
    error_type: str = "default",
    debug_mode: Optional[bool] = None,
) -> str:
    """
    Generate a safe error message for an unexpected exception.

    With debug errors enabled, includes the exception type and message.
    Otherwise returns a generic message. For submissions the generic message
    is the configured ``failure_message``.

    Examples:
        >>> class TestError(Exception): pass
        >>> e = TestError("sensitive details")
        >>> safe_error_message(e, debug_mode=True)
        'TestError: sensitive details'
        >>> safe_error_message(e, debug_mode=False)
        'An error occurred. Please try again.'
    """
    if _debug_enabled(debug_mode):
        return f"{type(exception).__name__}: {str(exception)}"

    if error_type == "submission":
        configured = config.get("failure_message")
        if configured:
            return configured

    return GENERIC_ERROR_MESSAGES.get(error_type, GENERIC_ERROR_MESSAGES["default"])


def create_safe_error_response(
    message: Optional[str] = None,
    exception: Optional[Exception] = None,
    error_type: str = "default",
    debug_mode: Optional[bool] = None,
) -> Dict[str, Any]:
    """
    Build an ``{"type": "error", "error": ...}`` payload for WebSocket/HTTP responses.

    Pass ``message`` for errors the client caused and may see (bad JSON,
    unknown field). Pass ``exception`` for anything unexpected; its details
    only appear when debug errors are enabled.
    """
    if message is None:
        if exception is not None:
            message = safe_error_message(exception, error_type, debug_mode)
        else:
            message = GENERIC_ERROR_MESSAGES.get(error_type, GENERIC_ERROR_MESSAGES["default"])
    return {"type": "error", "error": message}


def _is_sensitive(key: Any) -> bool:
    if not isinstance(key, str):
        return False
    lowered = key.lower()
    return any(marker in lowered for marker in config.get("sensitive_fields", []))


def mask_sensitive(values: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    """
    Copy of ``values`` safe for logging.

    Keys containing any configured ``sensitive_fields`` marker (``password``
    by default, which also covers ``confirmPassword``) have their value
    replaced by a fixed mask.

    Examples:
        >>> mask_sensitive({"email": "a@b.co", "password": "hunter22"})
        {'email': 'a@b.co', 'password': '********'}
    """
    if not values:
        return {}
    return {key: (MASK if _is_sensitive(key) else value) for key, value in values.items()}


def log_exception_safely(
    logger: logging.Logger,
    exception: Exception,
    message: str,
    form_name: Optional[str] = None,
    values: Optional[Mapping[str, Any]] = None,
) -> None:
    """
    Log an exception with traceback and masked form values.

    Examples:
        >>> logger = logging.getLogger(__name__)
        >>> log_exception_safely(logger, ValueError("boom"), "Submission failed", "signin")
    """
    context = f" (form={form_name})" if form_name else ""
    if values:
        logger.error(
            "%s%s: %s; values=%s",
            message,
            context,
            type(exception).__name__,
            mask_sensitive(values),
            exc_info=exception,
        )
    else:
        logger.error("%s%s: %s", message, context, type(exception).__name__, exc_info=exception)
