"""
Security helpers for liveauth.

Keeps credentials out of logs and internal details out of error responses.
"""

from .error_handling import (
    GENERIC_ERROR_MESSAGES,
    create_safe_error_response,
    log_exception_safely,
    mask_sensitive,
    safe_error_message,
)

__all__ = [
    "GENERIC_ERROR_MESSAGES",
    "create_safe_error_response",
    "log_exception_safely",
    "mask_sensitive",
    "safe_error_message",
]
