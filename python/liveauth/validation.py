"""
Schema validation for liveauth forms.

``validate(schema, raw_input)`` is a pure function: it reads the schema and
the candidate input, and returns either ``Valid`` with normalized values or
``Invalid`` with one message per failing field. It keeps no state between
calls, so validating the same input twice always gives the same result.

Usage::

    result = validate(sign_in_schema, {"email": "a@b.co", "password": "hunter22"})
    if result.is_valid:
        await handler.submit(result.values)
    else:
        show(result.errors)   # {"password": "Password must be at least 8 characters"}
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Tuple, Union

from django.core.exceptions import ValidationError
from django.core.validators import validate_email

from .schema import FieldKind, FieldSpec, FormSchema

_TRUE_STRINGS = frozenset({"true", "on", "1", "yes"})
_FALSE_STRINGS = frozenset({"false", "off", "0", "no"})

_MISSING = object()


@dataclass(frozen=True)
class Valid:
    """Every field and rule passed; ``values`` holds the normalized input."""

    values: Mapping[str, Any]

    def __post_init__(self):
        object.__setattr__(self, "values", MappingProxyType(dict(self.values)))

    is_valid = True

    @property
    def errors(self) -> Mapping[str, str]:
        return MappingProxyType({})


@dataclass(frozen=True)
class Invalid:
    """At least one check failed; ``errors`` maps field name to message."""

    errors: Mapping[str, str]

    def __post_init__(self):
        object.__setattr__(self, "errors", MappingProxyType(dict(self.errors)))

    is_valid = False

    @property
    def values(self) -> Mapping[str, Any]:
        return MappingProxyType({})


ValidationResult = Union[Valid, Invalid]


def _is_empty(value: Any) -> bool:
    return value is _MISSING or value is None or value == ""


def _coerce(spec: FieldSpec, value: Any) -> Tuple[Any, Optional[str]]:
    """Convert a raw value to the field's declared kind."""
    if spec.kind is FieldKind.BOOLEAN:
        if value is _MISSING or value is None:
            return False, None
        if isinstance(value, bool):
            return value, None
        if isinstance(value, str):
            lowered = value.lower()
            if lowered in _TRUE_STRINGS:
                return True, None
            if lowered in _FALSE_STRINGS or lowered == "":
                return False, None
        return None, f"{spec.label} must be a boolean"

    if value is _MISSING or value is None:
        return "", None
    if not isinstance(value, str):
        return None, f"{spec.label} must be a string"
    # No trimming: values pass through exactly as entered
    return value, None


# Built-in checks, run in order after the value has been coerced.
# Each returns an error message or None.
def _check_email(spec: FieldSpec, value: Any) -> Optional[str]:
    if spec.kind is not FieldKind.EMAIL or value == "":
        return None
    try:
        validate_email(value)
    except ValidationError:
        return "Invalid email address"
    return None


def _check_min_length(spec: FieldSpec, value: Any) -> Optional[str]:
    if spec.min_length is not None and isinstance(value, str) and len(value) < spec.min_length:
        return f"{spec.label} must be at least {spec.min_length} characters"
    return None


def _check_accepted(spec: FieldSpec, value: Any) -> Optional[str]:
    if spec.kind is FieldKind.BOOLEAN and spec.required and value is not True:
        return "You must accept the terms"
    return None


def _check_format(spec: FieldSpec, value: Any) -> Optional[str]:
    if spec.format is None or value == "":
        return None
    if not spec.matches_format(value):
        return f"Invalid {spec.label.lower()}"
    return None


_BUILTIN_CHECKS = (
    _check_email,
    _check_min_length,
    _check_accepted,
    _check_format,
)


def validate_field(spec: FieldSpec, raw_value: Any = _MISSING) -> Tuple[Any, Optional[str]]:
    """
    Validate a single field in isolation.

    Returns:
        (normalized_value, error). ``error`` is None when the field passed.
    """
    if spec.required and _is_empty(raw_value):
        return None, f"{spec.label} is required"

    value, error = _coerce(spec, raw_value)
    if error:
        return None, error

    for check in _BUILTIN_CHECKS:
        error = check(spec, value)
        if error:
            return None, error

    return value, None


def validate(schema: FormSchema, raw_input: Optional[Mapping[str, Any]]) -> ValidationResult:
    """
    Validate raw input against a schema.

    Fields are checked in schema order and each field reports its first
    failing check. Cross-field rules then run over fields that passed their
    own checks; a rule's message lands on its error target unless that field
    already has one. Input keys the schema does not declare are ignored.
    """
    raw_input = raw_input or {}
    values: Dict[str, Any] = {}
    errors: Dict[str, str] = {}

    for spec in schema.fields:
        value, error = validate_field(spec, raw_input.get(spec.name, _MISSING))
        if error:
            errors[spec.name] = error
        else:
            values[spec.name] = value

    for rule in schema.rules:
        if any(name in errors for name in rule.dependents):
            continue
        if not rule.holds(values):
            errors.setdefault(rule.error_target, rule.message)

    if errors:
        return Invalid(errors)
    return Valid(values)
