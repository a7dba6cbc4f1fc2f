"""
Submission handlers - the contract between a form and the identity service.

A handler receives the normalized values of a valid form and reports back
``Success()`` or ``Failure(reason)``. The form controller only depends on
that contract, so the placeholder handler shipped here can be replaced by a
real authentication or registration client without touching schemas,
validation or the controller.

    class RegistrationClient:
        async def submit(self, values):
            response = await api.post("/register", json=values)
            if response.status == 409:
                return Failure("Email already registered.", field="email")
            return Success()

Handlers may also be plain callables, and may be synchronous: sync handlers
are run in a worker thread via ``sync_to_async``.
"""

import asyncio
import inspect
import logging
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Protocol, Union, runtime_checkable

from asgiref.sync import sync_to_async

from .config import config
from .security import mask_sensitive

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Success:
    """The identity service accepted the submission."""

    is_success = True


@dataclass(frozen=True)
class Failure:
    """
    The identity service rejected the submission.

    ``reason`` is shown to the user as-is. ``field`` optionally names the
    input the failure is attributable to.
    """

    reason: str
    field: Optional[str] = None

    is_success = False


SubmissionOutcome = Union[Success, Failure]


@runtime_checkable
class SubmissionHandler(Protocol):
    """Anything with a ``submit(values)`` method returning an outcome."""

    def submit(self, values: Mapping[str, Any]) -> Any:
        ...


class SimulatedSubmissionHandler:
    """
    Stand-in for the external identity service.

    Waits a fixed delay and always succeeds. The submitted values are logged
    with password fields masked.
    """

    def __init__(self, delay: Optional[float] = None, form_name: str = ""):
        self.delay = delay
        self.form_name = form_name

    async def submit(self, values: Mapping[str, Any]) -> Success:
        delay = self.delay if self.delay is not None else config.get("submit_delay", 1.0)
        await asyncio.sleep(delay)
        logger.info(
            "Simulated %s submission accepted: %s",
            self.form_name or "form",
            mask_sensitive(values),
        )
        return Success()

    def __repr__(self) -> str:
        return f"<SimulatedSubmissionHandler delay={self.delay!r}>"


def _resolve_callable(handler):
    if isinstance(handler, SubmissionHandler):
        return handler.submit
    if callable(handler):
        return handler
    raise TypeError(
        f"Submission handler must define submit(values) or be callable, got {type(handler).__name__}"
    )


def _normalize_outcome(result: Any) -> SubmissionOutcome:
    """
    Map a handler's return value onto Success/Failure.

    None and True mean success, a string is a failure reason, False is a
    failure without a reason (the generic message is used).
    """
    if isinstance(result, (Success, Failure)):
        return result
    if result is None or result is True:
        return Success()
    if result is False:
        return Failure(config.get("failure_message"))
    if isinstance(result, str):
        return Failure(result)
    raise TypeError(f"Submission handler returned unsupported value of type {type(result).__name__}")


async def call_handler(handler, values: Mapping[str, Any]) -> SubmissionOutcome:
    """
    Invoke a submission handler and normalize its outcome.

    Works with both sync and async handlers. Exceptions raised by the handler
    propagate to the caller; the form controller decides how to surface them.
    """
    func = _resolve_callable(handler)

    # Instances with an async __call__ are not coroutine functions themselves
    if inspect.iscoroutinefunction(func) or inspect.iscoroutinefunction(getattr(func, "__call__", None)):
        result = await func(values)
    else:
        result = await sync_to_async(func)(values)
        # Callables returning an awaitable (e.g. functools.partial of a coroutine function)
        if inspect.isawaitable(result):
            result = await result

    return _normalize_outcome(result)
