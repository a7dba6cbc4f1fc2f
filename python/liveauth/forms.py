"""
The sign-in and sign-up forms.

Each form is a separate FormSchema instance. They share field names (email,
password) but nothing else: no base schema, no inheritance, so changing one
form's rules can never change the other's.

``create_controller(name)`` builds a fresh FormController for one rendered
form, wired to the configured submission handler and reset policy:

    controller = create_controller("signin")
    controller.set_field("email", "ada@example.com")
"""

import logging
from dataclasses import dataclass
from typing import Dict, Optional

from django.utils.module_loading import import_string

from .config import config
from .controller import FormController
from .exceptions import UnknownFormError
from .schema import CrossFieldRule, FieldKind, FieldSpec, FormSchema
from .submission import SimulatedSubmissionHandler

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 8


sign_in_schema = FormSchema(
    name="signin",
    fields=(
        FieldSpec("email", FieldKind.EMAIL, required=True),
        FieldSpec("password", FieldKind.PASSWORD, min_length=MIN_PASSWORD_LENGTH),
    ),
)


sign_up_schema = FormSchema(
    name="signup",
    fields=(
        FieldSpec("firstName", FieldKind.TEXT, required=True, label="First name"),
        FieldSpec("lastName", FieldKind.TEXT, required=True, label="Last name"),
        FieldSpec("email", FieldKind.EMAIL, required=True),
        FieldSpec("password", FieldKind.PASSWORD, min_length=MIN_PASSWORD_LENGTH),
        FieldSpec("confirmPassword", FieldKind.PASSWORD, label="Confirm password"),
        FieldSpec("terms", FieldKind.BOOLEAN, required=True),
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


@dataclass(frozen=True)
class FormDefinition:
    """A schema plus the presentation text that goes with it."""

    schema: FormSchema
    title: str
    submit_label: str
    submitting_label: str

    @property
    def name(self) -> str:
        return self.schema.name


_DEFINITIONS: Dict[str, FormDefinition] = {
    "signin": FormDefinition(
        schema=sign_in_schema,
        title="Sign in",
        submit_label="Sign in",
        submitting_label="Signing in…",
    ),
    "signup": FormDefinition(
        schema=sign_up_schema,
        title="Sign up",
        submit_label="Sign up",
        submitting_label="Signing up…",
    ),
}


def form_names():
    return tuple(_DEFINITIONS)


def get_form_definition(name: str) -> FormDefinition:
    try:
        return _DEFINITIONS[name]
    except KeyError:
        raise UnknownFormError(name, _DEFINITIONS) from None


def get_submission_handler(name: str):
    """
    Instantiate the submission handler configured for a form.

    Reads ``LIVEAUTH_CONFIG["handlers"][name]`` (a dotted path to a class or
    factory); falls back to the simulated handler.
    """
    path = config.get(f"handlers.{name}")
    if not path:
        return SimulatedSubmissionHandler(form_name=name)
    factory = import_string(path)
    logger.debug("Using submission handler %s for %s", path, name)
    return factory()


def create_controller(name: str, handler=None, reset_on_success: Optional[bool] = None) -> FormController:
    """
    Build a new controller for one rendered instance of the named form.

    Args:
        name: "signin" or "signup".
        handler: Override the configured submission handler.
        reset_on_success: Override the configured reset policy.
    """
    definition = get_form_definition(name)
    if handler is None:
        handler = get_submission_handler(name)
    if reset_on_success is None:
        reset_on_success = config.reset_on_success(name)
    return FormController(definition.schema, handler, reset_on_success=reset_on_success)
