"""
Declarative form schemas.

A schema lists the fields of one form in display order together with the
cross-field rules that tie them together. Schemas are plain immutable data:
they are checked once when defined and never change afterwards.

    schema = FormSchema(
        name="signup",
        fields=(
            FieldSpec("password", FieldKind.PASSWORD, min_length=8),
            FieldSpec("confirmPassword", FieldKind.PASSWORD),
        ),
        rules=(
            CrossFieldRule(
                dependents=("password", "confirmPassword"),
                predicate=lambda v: v["password"] == v["confirmPassword"],
                message="Passwords do not match",
                error_target="confirmPassword",
            ),
        ),
    )
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, Mapping, Optional, Tuple, Union

from .exceptions import SchemaError, UnknownFieldError

FormatSpec = Union[str, re.Pattern, Callable[[Any], bool]]


class FieldKind(str, Enum):
    TEXT = "text"
    EMAIL = "email"
    PASSWORD = "password"
    BOOLEAN = "boolean"

    @property
    def is_textual(self) -> bool:
        return self is not FieldKind.BOOLEAN


def _humanize(name: str) -> str:
    """firstName / first_name -> 'First name'"""
    words = re.sub(r"(?<=[a-z0-9])(?=[A-Z])", " ", name).replace("_", " ").split()
    text = " ".join(words).lower()
    return text[:1].upper() + text[1:]


@dataclass(frozen=True)
class FieldSpec:
    """One input of a form and its atomic constraints."""

    name: str
    kind: FieldKind = FieldKind.TEXT
    required: bool = False
    min_length: Optional[int] = None
    format: Optional[FormatSpec] = None
    label: Optional[str] = None

    def __post_init__(self):
        # Accept plain strings ("email") for the kind
        object.__setattr__(self, "kind", FieldKind(self.kind))
        if self.label is None:
            object.__setattr__(self, "label", _humanize(self.name))
        if isinstance(self.format, str):
            object.__setattr__(self, "format", re.compile(self.format))

    def matches_format(self, value: Any) -> bool:
        if self.format is None:
            return True
        if isinstance(self.format, re.Pattern):
            return isinstance(value, str) and self.format.fullmatch(value) is not None
        return bool(self.format(value))


@dataclass(frozen=True)
class CrossFieldRule:
    """A constraint over several fields whose error is shown on one of them."""

    dependents: Tuple[str, ...]
    predicate: Callable[[Mapping[str, Any]], bool]
    message: str
    error_target: str

    def __post_init__(self):
        object.__setattr__(self, "dependents", tuple(self.dependents))

    def holds(self, values: Mapping[str, Any]) -> bool:
        return bool(self.predicate({name: values.get(name) for name in self.dependents}))


@dataclass(frozen=True)
class FormSchema:
    """
    Ordered fields plus cross-field rules for a single form.

    Construction fails with SchemaError when the definition is inconsistent,
    so a schema that exists can be used without further lookups failing.
    """

    name: str
    fields: Tuple[FieldSpec, ...]
    rules: Tuple[CrossFieldRule, ...] = ()
    _index: Dict[str, FieldSpec] = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        object.__setattr__(self, "fields", tuple(self.fields))
        object.__setattr__(self, "rules", tuple(self.rules))

        if not self.fields:
            raise SchemaError(self.name, "at least one field is required")

        index: Dict[str, FieldSpec] = {}
        for spec in self.fields:
            if spec.name in index:
                raise SchemaError(self.name, f"duplicate field '{spec.name}'")
            if spec.min_length is not None and spec.min_length < 0:
                raise SchemaError(self.name, f"field '{spec.name}' has a negative min_length")
            index[spec.name] = spec

        for rule in self.rules:
            for name in rule.dependents + (rule.error_target,):
                if name not in index:
                    raise SchemaError(self.name, f"rule '{rule.message}' references unknown field '{name}'")

        object.__setattr__(self, "_index", index)

    @property
    def field_names(self) -> Tuple[str, ...]:
        return tuple(spec.name for spec in self.fields)

    def has_field(self, name: str) -> bool:
        return name in self._index

    def get_field(self, name: str) -> FieldSpec:
        try:
            return self._index[name]
        except KeyError:
            raise UnknownFieldError(name, self.name, self.field_names) from None

    def empty_values(self) -> Dict[str, Any]:
        """Blank value for every field, as a freshly rendered form shows it."""
        return {spec.name: (False if spec.kind is FieldKind.BOOLEAN else "") for spec in self.fields}

    def describe(self) -> list:
        """Field metadata for rendering."""
        return [
            {
                "name": spec.name,
                "kind": spec.kind.value,
                "label": spec.label,
                "required": spec.required,
                "min_length": spec.min_length,
            }
            for spec in self.fields
        ]
