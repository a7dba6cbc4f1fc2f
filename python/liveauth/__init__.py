"""
liveauth - server-validated sign-in and sign-up forms for Django.

Declarative schemas, a pure validator, and a per-form controller that runs
the asynchronous submission lifecycle (idle -> submitting -> succeeded/failed).
"""

from .controller import FormController, SubmissionPhase, SubmissionState
from .exceptions import (
    LiveAuthError,
    SchemaError,
    SubmissionFailure,
    UnknownFieldError,
    UnknownFormError,
)
from .forms import (
    FormDefinition,
    create_controller,
    get_form_definition,
    sign_in_schema,
    sign_up_schema,
)
from .schema import CrossFieldRule, FieldKind, FieldSpec, FormSchema
from .submission import (
    Failure,
    SimulatedSubmissionHandler,
    SubmissionHandler,
    Success,
    call_handler,
)
from .validation import Invalid, Valid, validate

__version__ = "0.3.0"

__all__ = [
    "CrossFieldRule",
    "Failure",
    "FieldKind",
    "FieldSpec",
    "FormController",
    "FormDefinition",
    "FormSchema",
    "Invalid",
    "LiveAuthError",
    "SchemaError",
    "SimulatedSubmissionHandler",
    "SubmissionFailure",
    "SubmissionHandler",
    "SubmissionPhase",
    "SubmissionState",
    "Success",
    "UnknownFieldError",
    "UnknownFormError",
    "Valid",
    "call_handler",
    "create_controller",
    "get_form_definition",
    "sign_in_schema",
    "sign_up_schema",
    "validate",
]
