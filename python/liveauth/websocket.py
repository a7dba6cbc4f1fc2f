"""
WebSocket consumer for live auth forms.

Each connection renders one form and owns one FormController for as long as
the socket is open. The client sends input events and receives a state
snapshot after every change:

    -> {"type": "set_field", "name": "email", "value": "ada@example.com"}
    <- {"type": "state", "form": "signin", "values": {...}, "errors": {},
        "status": "idle", "reason": null, "can_submit": true}
    -> {"type": "submit"}
    <- {"type": "state", ..., "status": "submitting", "can_submit": false}
    <- {"type": "state", ..., "status": "succeeded", "redirect_to": "/home/"}

The submission runs as a background task so the receive loop keeps going:
input that arrives while it is in flight is dropped by the controller
instead of being queued behind it.
"""

import asyncio
import json
import logging
from typing import Any, Dict, Optional

from channels.generic.websocket import AsyncWebsocketConsumer
from django.core.serializers.json import DjangoJSONEncoder

from .config import config
from .controller import FormController, SubmissionPhase
from .exceptions import UnknownFieldError, UnknownFormError
from .forms import create_controller
from .security import create_safe_error_response, log_exception_safely

logger = logging.getLogger(__name__)

# Close code sent when the URL names a form that does not exist
CLOSE_UNKNOWN_FORM = 4004


class AuthFormConsumer(AsyncWebsocketConsumer):
    """
    WebSocket consumer for handling one sign-in or sign-up form.

    Route it with a ``form`` URL kwarg (see ``liveauth.routing``).
    """

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.controller: Optional[FormController] = None
        self.form_name: Optional[str] = None
        self._submit_task: Optional[asyncio.Task] = None
        self._closed = False

    def create_controller(self, form_name: str) -> FormController:
        """Hook for subclasses that wire a different handler."""
        return create_controller(form_name)

    async def connect(self):
        """Handle WebSocket connection"""
        await self.accept()

        self.form_name = self.scope.get("url_route", {}).get("kwargs", {}).get("form")
        try:
            self.controller = self.create_controller(self.form_name)
        except UnknownFormError as e:
            logger.warning("Connection rejected: %s", e.message)
            await self.send_json(create_safe_error_response(error_type="not_found"))
            await self.close(code=CLOSE_UNKNOWN_FORM)
            return

        await self.send_state()

    async def disconnect(self, close_code):
        """Handle WebSocket disconnection"""
        self._closed = True

        # Submissions are never cancelled; let an in-flight one finish
        if self._submit_task and not self._submit_task.done():
            # Errors are logged by _submission_done
            await asyncio.wait({self._submit_task})
        self._submit_task = None

        self.controller = None

    async def receive(self, text_data=None, bytes_data=None):
        """Handle incoming WebSocket messages"""
        if self.controller is None:
            return

        if bytes_data is not None:
            await self.send_error("Binary frames are not supported")
            return

        max_msg_size = config.get("max_message_size", 65536)
        if max_msg_size and text_data and len(text_data.encode("utf-8")) > max_msg_size:
            await self.send_error("Message too large")
            return

        try:
            data = json.loads(text_data or "")
        except json.JSONDecodeError:
            await self.send_error("Invalid JSON")
            return

        if not isinstance(data, dict):
            await self.send_error("Invalid message")
            return

        msg_type = data.get("type")
        if msg_type == "set_field":
            await self.handle_set_field(data)
        elif msg_type == "submit":
            await self.handle_submit(data)
        elif msg_type == "reset":
            await self.handle_reset(data)
        else:
            await self.send_error(f"Unknown message type: {msg_type}")

    async def handle_set_field(self, data: Dict[str, Any]):
        name = data.get("name")
        if not isinstance(name, str):
            await self.send_error("Field name is required")
            return
        try:
            self.controller.set_field(name, data.get("value"))
        except UnknownFieldError as e:
            await self.send_error(e.message)
            return
        await self.send_state()

    async def handle_submit(self, data: Dict[str, Any]):
        if self._submit_task and not self._submit_task.done():
            # Submit button is disabled on the client; a second submit is dropped
            await self.send_state()
            return

        # An invalid form never reaches the handler: submit() returns without
        # suspending, with the errors stored and the status back at idle
        result = self.controller.validate()
        if result is not None and not result.is_valid:
            await self.controller.submit()
            await self.send_state()
            return

        self._submit_task = asyncio.ensure_future(self._run_submission())
        self._submit_task.add_done_callback(self._submission_done)
        # Let the task enter submitting before reporting it
        await asyncio.sleep(0)
        await self.send_state()

    async def _run_submission(self):
        await self.controller.submit()
        if not self._closed:
            await self.send_state()

    def _submission_done(self, task: asyncio.Task) -> None:
        """Retrieve the background submission's exception so it is logged, not lost."""
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            log_exception_safely(logger, exc, "Submission task failed", self.form_name)

    async def handle_reset(self, data: Dict[str, Any]):
        if not self.controller.reset():
            logger.debug("Ignored reset on %s: submission in flight", self.form_name)
        await self.send_state()

    async def send_state(self):
        payload: Dict[str, Any] = {"type": "state"}
        payload.update(self.controller.as_dict())
        if self.controller.status.phase is SubmissionPhase.SUCCEEDED:
            redirect_to = config.success_url(self.form_name)
            if redirect_to:
                payload["redirect_to"] = redirect_to
        await self.send_json(payload)

    async def send_error(self, error: str) -> None:
        await self.send_json(create_safe_error_response(message=error))

    async def send_json(self, data: Dict[str, Any]):
        """Send JSON message to client with Django type support"""
        await self.send(text_data=json.dumps(data, cls=DjangoJSONEncoder))
