"""
Custom exceptions for liveauth.

Validation problems are never raised: they travel as ``Invalid`` results so
the presentation layer can render them next to each field. The exceptions
below cover definition-time mistakes, lookups against names that do not
exist, and failures reported by the identity collaborator.
"""

from typing import Optional


class LiveAuthError(Exception):
    """Base exception for liveauth errors."""

    def __init__(self, message: str, hint: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.hint = hint

    def __str__(self) -> str:
        if self.hint:
            return f"{self.message}\n{self.hint}"
        return self.message


class SchemaError(LiveAuthError):
    """Raised when a FormSchema is defined with inconsistent fields or rules."""

    def __init__(self, schema_name: str, issue: str):
        message = f"Invalid form schema '{schema_name}': {issue}"
        hint = (
            "    Field names must be unique, and every cross-field rule may only\n"
            "    reference fields declared in the same schema."
        )
        super().__init__(message, hint)
        self.schema_name = schema_name


class UnknownFieldError(LiveAuthError, KeyError):
    """Raised when a field name is not declared by the form's schema."""

    def __init__(self, field_name: str, schema_name: str, known_fields=()):
        message = f"Form '{schema_name}' has no field '{field_name}'."
        hint = None
        if known_fields:
            hint = f"    Known fields: {', '.join(known_fields)}"
        super().__init__(message, hint)
        self.field_name = field_name
        self.schema_name = schema_name

    # KeyError.__str__ would repr() the message
    __str__ = LiveAuthError.__str__


class UnknownFormError(LiveAuthError, LookupError):
    """Raised when no form definition is registered under a name."""

    def __init__(self, form_name: str, known_forms=()):
        message = f"No form named '{form_name}'."
        hint = None
        if known_forms:
            hint = f"    Available forms: {', '.join(sorted(known_forms))}"
        super().__init__(message, hint)
        self.form_name = form_name


class SubmissionFailure(LiveAuthError):
    """
    Raised by a submission handler to report a failure the user can act on.

    The reason is shown verbatim to the user. When the failure can be
    attributed to a single input (e.g. "Email already registered."), pass
    ``field`` so the message is shown next to that input as well.
    """

    def __init__(self, reason: str, field: Optional[str] = None):
        super().__init__(reason)
        self.reason = reason
        self.field = field
