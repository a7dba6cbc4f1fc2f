"""
Testing utilities for liveauth forms.

Provides tools for testing forms without a browser or WebSocket:
- FormTestClient: Fill in fields, submit, and assert state synchronously
- RecordingHandler: Submission handler that records calls and returns a fixed outcome
- GatedHandler: Submission handler that blocks until released, to observe in-flight state

Example usage:
    from liveauth.testing import FormTestClient, RecordingHandler

    def test_sign_in():
        handler = RecordingHandler()
        client = FormTestClient("signin", handler=handler)
        client.fill(email="ada@example.com", password="correct horse")
        client.submit()

        client.assert_status("succeeded")
        client.assert_values(email="", password="")
        assert handler.calls == [{"email": "ada@example.com", "password": "correct horse"}]
"""

import asyncio
from typing import Any, Dict, List, Optional

from asgiref.sync import async_to_sync

from .controller import FormController, SubmissionState
from .forms import create_controller
from .submission import Success


class RecordingHandler:
    """Submission handler that records every call and returns ``outcome``."""

    def __init__(self, outcome: Any = None):
        self.outcome = outcome if outcome is not None else Success()
        self.calls: List[Dict[str, Any]] = []

    async def submit(self, values):
        self.calls.append(dict(values))
        if isinstance(self.outcome, BaseException):
            raise self.outcome
        return self.outcome


class GatedHandler(RecordingHandler):
    """
    Submission handler that waits for ``release`` before answering.

    Create it inside the running event loop.
    """

    def __init__(self, outcome: Any = None):
        super().__init__(outcome)
        self.started = asyncio.Event()
        self.release = asyncio.Event()

    async def submit(self, values):
        self.calls.append(dict(values))
        self.started.set()
        await self.release.wait()
        if isinstance(self.outcome, BaseException):
            raise self.outcome
        return self.outcome


class FormTestClient:
    """
    Drive a form controller from synchronous test code.

    Args:
        form_name: "signin" or "signup".
        handler: Submission handler; defaults to a RecordingHandler.
        reset_on_success: Override the configured reset policy.
    """

    def __init__(self, form_name: str, handler: Any = None, reset_on_success: Optional[bool] = None):
        self.handler = handler if handler is not None else RecordingHandler()
        self.controller: FormController = create_controller(
            form_name, handler=self.handler, reset_on_success=reset_on_success
        )
        self.history: List[SubmissionState] = []

    def fill(self, **values: Any) -> "FormTestClient":
        for name, value in values.items():
            self.controller.set_field(name, value)
        return self

    def submit(self) -> SubmissionState:
        state = async_to_sync(self.controller.submit)()
        self.history.append(state)
        return state

    def get_state(self) -> Dict[str, Any]:
        return self.controller.as_dict()

    def assert_status(self, expected: str) -> None:
        actual = self.controller.status.phase.value
        assert actual == expected, f"Expected status {expected!r}, got {actual!r} ({self.controller.status})"

    def assert_errors(self, **expected: str) -> None:
        """Assert the exact error mapping (no keyword arguments: no errors)."""
        actual = dict(self.controller.errors)
        assert actual == expected, f"Expected errors {expected!r}, got {actual!r}"

    def assert_values(self, **expected: Any) -> None:
        """Assert the given fields have the given values; other fields are not checked."""
        values = self.controller.values
        for name, value in expected.items():
            assert values[name] == value, f"Expected {name}={value!r}, got {values[name]!r}"
