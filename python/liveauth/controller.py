"""
FormController - per-form state and submission lifecycle.

One controller exists per rendered form. It holds the current values, the
error messages to display, and the submission status:

    idle --submit(valid)--> submitting --Success--> succeeded
      ^   \\                            \\--Failure--> failed
      |    \\--submit(invalid): errors stored, stays idle
      \\------------- submit() again from idle/succeeded/failed

While a submission is in flight the form is locked: field changes and
further submits are dropped, so at most one submission runs per controller.
The presentation layer reads ``values``, ``errors`` and ``status`` (or the
``as_dict()`` snapshot) and never validates on its own.

    controller = FormController(sign_in_schema, SimulatedSubmissionHandler(),
                                reset_on_success=True)
    controller.set_field("email", "ada@example.com")
    controller.set_field("password", "correct horse")
    state = await controller.submit()   # SubmissionState(phase=SUCCEEDED)
"""

import logging
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional

from .config import config
from .exceptions import SubmissionFailure
from .schema import FormSchema
from .security import GENERIC_ERROR_MESSAGES, log_exception_safely, safe_error_message
from .submission import Failure, SubmissionOutcome, call_handler
from .validation import ValidationResult, validate

logger = logging.getLogger(__name__)


class SubmissionPhase(str, Enum):
    IDLE = "idle"
    SUBMITTING = "submitting"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass(frozen=True)
class SubmissionState:
    """Submission status of a form; ``reason`` is only set when failed."""

    phase: SubmissionPhase = SubmissionPhase.IDLE
    reason: Optional[str] = None

    @classmethod
    def idle(cls) -> "SubmissionState":
        return cls(SubmissionPhase.IDLE)

    @classmethod
    def submitting(cls) -> "SubmissionState":
        return cls(SubmissionPhase.SUBMITTING)

    @classmethod
    def succeeded(cls) -> "SubmissionState":
        return cls(SubmissionPhase.SUCCEEDED)

    @classmethod
    def failed(cls, reason: str) -> "SubmissionState":
        return cls(SubmissionPhase.FAILED, reason)

    @property
    def is_submitting(self) -> bool:
        return self.phase is SubmissionPhase.SUBMITTING

    def __str__(self) -> str:
        if self.reason:
            return f"{self.phase.value}: {self.reason}"
        return self.phase.value


class FormController:
    """
    Holds one form's values, errors and submission status.

    Args:
        schema: The form's schema.
        handler: Submission handler (object with ``submit(values)`` or a callable).
        reset_on_success: Clear all values after a successful submission.
        failure_message: Text shown when the handler fails unexpectedly.
            Defaults to the configured ``failure_message``.
    """

    def __init__(
        self,
        schema: FormSchema,
        handler,
        *,
        reset_on_success: bool = False,
        failure_message: Optional[str] = None,
        initial: Optional[Mapping[str, Any]] = None,
    ):
        self.schema = schema
        self.handler = handler
        self.reset_on_success = reset_on_success
        self.failure_message = failure_message

        self._values: Dict[str, Any] = schema.empty_values()
        self._errors: Dict[str, str] = {}
        self._status = SubmissionState.idle()

        if initial:
            for name, value in initial.items():
                self.schema.get_field(name)
                self._values[name] = value

    # ------------------------------------------------------------------
    # Read-only view for the presentation layer
    # ------------------------------------------------------------------

    @property
    def values(self) -> Mapping[str, Any]:
        return MappingProxyType(dict(self._values))

    @property
    def errors(self) -> Mapping[str, str]:
        return MappingProxyType(dict(self._errors))

    @property
    def status(self) -> SubmissionState:
        return self._status

    @property
    def is_submitting(self) -> bool:
        return self._status.is_submitting

    @property
    def can_submit(self) -> bool:
        """False while a submission is in flight (the submit button is disabled)."""
        return not self.is_submitting

    def as_dict(self) -> Dict[str, Any]:
        """JSON-serializable snapshot for rendering."""
        return {
            "form": self.schema.name,
            "values": dict(self._values),
            "errors": dict(self._errors),
            "status": self._status.phase.value,
            "reason": self._status.reason,
            "can_submit": self.can_submit,
        }

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def set_field(self, name: str, value: Any) -> bool:
        """
        Store a new value for a field. Does not validate.

        Returns:
            False if the change was dropped because a submission is in flight.

        Raises:
            UnknownFieldError: if the schema has no such field.
        """
        self.schema.get_field(name)
        if self.is_submitting:
            logger.debug("Dropped change to '%s' on %s: submission in flight", name, self.schema.name)
            return False
        self._values[name] = value
        return True

    def set_fields(self, values: Mapping[str, Any]) -> bool:
        """Bulk variant of set_field; either every value is stored or none is."""
        for name in values:
            self.schema.get_field(name)
        if self.is_submitting:
            logger.debug("Dropped %d field changes on %s: submission in flight", len(values), self.schema.name)
            return False
        self._values.update(values)
        return True

    def reset(self) -> bool:
        """Clear values, errors and status. Refused while submitting."""
        if self.is_submitting:
            return False
        self._values = self.schema.empty_values()
        self._errors = {}
        self._status = SubmissionState.idle()
        return True

    def validate(self) -> Optional[ValidationResult]:
        """
        Validate the current values and store any errors, without submitting.

        Returns None while a submission is in flight.
        """
        if self.is_submitting:
            return None
        result = validate(self.schema, self._values)
        self._errors = dict(result.errors)
        return result

    # ------------------------------------------------------------------
    # Submission
    # ------------------------------------------------------------------

    async def submit(self) -> SubmissionState:
        """
        Validate and, when valid, hand the values to the submission handler.

        A call made while another submission is in flight returns the current
        state without starting a second submission. Handler errors never
        propagate: they end in ``failed`` with a generic message.
        """
        if self.is_submitting:
            logger.warning("Ignored submit on %s: submission already in flight", self.schema.name)
            return self._status

        result = validate(self.schema, self._values)
        if not result.is_valid:
            self._errors = dict(result.errors)
            self._status = SubmissionState.idle()
            logger.debug("Submission of %s blocked by %d field error(s)", self.schema.name, len(self._errors))
            return self._status

        # Enter submitting before the first await so a concurrent submit() sees it
        self._errors = {}
        self._status = SubmissionState.submitting()
        logger.debug("Submitting %s", self.schema.name)

        values = dict(result.values)
        try:
            outcome = await self._run_handler(values)
        except BaseException:
            # Cancelled or interrupted: never leave the form locked
            self._status = SubmissionState.failed(self._generic_failure_message())
            raise

        self._apply_outcome(outcome)
        return self._status

    async def _run_handler(self, values: Dict[str, Any]) -> SubmissionOutcome:
        try:
            return await call_handler(self.handler, values)
        except SubmissionFailure as e:
            return Failure(e.reason, e.field)
        except Exception as e:
            log_exception_safely(logger, e, "Unexpected submission error", self.schema.name, values)
            if self.failure_message:
                return Failure(self.failure_message)
            return Failure(safe_error_message(e, error_type="submission"))

    def _apply_outcome(self, outcome: SubmissionOutcome) -> None:
        if outcome.is_success:
            self._status = SubmissionState.succeeded()
            if self.reset_on_success:
                self._values = self.schema.empty_values()
            logger.info("Submission of %s succeeded", self.schema.name)
            return

        reason = outcome.reason or self._generic_failure_message()
        if outcome.field and self.schema.has_field(outcome.field):
            self._errors[outcome.field] = reason
        self._status = SubmissionState.failed(reason)
        logger.info("Submission of %s failed: %s", self.schema.name, reason)

    def _generic_failure_message(self) -> str:
        return (
            self.failure_message
            or config.get("failure_message")
            or GENERIC_ERROR_MESSAGES["submission"]
        )

    def __repr__(self) -> str:
        return f"<FormController form={self.schema.name} status={self._status} errors={self._errors}>"
