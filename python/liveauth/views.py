"""
HTTP fallback for clients without WebSocket support.

Every request renders a fresh form: the posted values are loaded into a new
FormController, submitted, and the resulting snapshot is returned as JSON.

    POST /auth/signin/  {"values": {"email": "ada@example.com", "password": "..."}}
    -> 200 {"form": "signin", "status": "succeeded", "errors": {}, ...}
    -> 422 {"form": "signin", "status": "idle", "errors": {"email": "Invalid email address"}, ...}
"""

import json
import logging
from typing import Any, Dict

from django.http import HttpRequest, JsonResponse
from django.views import View

from .config import config
from .controller import FormController, SubmissionPhase
from .exceptions import UnknownFieldError, UnknownFormError
from .forms import create_controller, get_form_definition
from .schema import FieldKind
from .security import create_safe_error_response

logger = logging.getLogger(__name__)

_STATUS_CODES = {
    SubmissionPhase.SUCCEEDED: 200,
    SubmissionPhase.FAILED: 502,
    SubmissionPhase.IDLE: 422,
}


class AuthFormView(View):
    """
    JSON endpoint for the sign-in and sign-up forms.

    GET returns the empty form (field metadata included), POST submits it.
    The form is selected by the ``form`` URL kwarg or the ``form_name``
    class attribute.
    """

    form_name: str = ""
    http_method_names = ["get", "post"]

    def create_controller(self, form_name: str) -> FormController:
        """Hook for subclasses that wire a different handler."""
        return create_controller(form_name)

    def _form_name(self, kwargs: Dict[str, Any]) -> str:
        return kwargs.get("form") or self.form_name

    def _snapshot(self, controller: FormController, form_name: str) -> Dict[str, Any]:
        payload = controller.as_dict()
        if controller.status.phase is SubmissionPhase.SUCCEEDED:
            redirect_to = config.success_url(form_name)
            if redirect_to:
                payload["redirect_to"] = redirect_to
        return payload

    async def get(self, request: HttpRequest, *args, **kwargs) -> JsonResponse:
        form_name = self._form_name(kwargs)
        try:
            definition = get_form_definition(form_name)
        except UnknownFormError:
            return JsonResponse(create_safe_error_response(error_type="not_found"), status=404)

        controller = self.create_controller(form_name)
        payload = self._snapshot(controller, form_name)
        payload.update(
            {
                "title": definition.title,
                "submit_label": definition.submit_label,
                "submitting_label": definition.submitting_label,
                "fields": definition.schema.describe(),
            }
        )
        return JsonResponse(payload)

    async def post(self, request: HttpRequest, *args, **kwargs) -> JsonResponse:
        form_name = self._form_name(kwargs)
        try:
            definition = get_form_definition(form_name)
        except UnknownFormError:
            return JsonResponse(create_safe_error_response(error_type="not_found"), status=404)

        max_msg_size = config.get("max_message_size", 65536)
        if max_msg_size and len(request.body) > max_msg_size:
            return JsonResponse(create_safe_error_response(message="Request too large"), status=413)

        try:
            values = self._parse_values(request, definition.schema)
        except ValueError as e:
            return JsonResponse(create_safe_error_response(message=str(e)), status=400)

        controller = self.create_controller(form_name)
        try:
            controller.set_fields(values)
        except UnknownFieldError as e:
            return JsonResponse(create_safe_error_response(message=e.message), status=400)

        state = await controller.submit()
        logger.debug("HTTP submission of %s finished: %s", form_name, state)
        return JsonResponse(self._snapshot(controller, form_name), status=_STATUS_CODES.get(state.phase, 200))

    def _parse_values(self, request: HttpRequest, schema) -> Dict[str, Any]:
        """Read field values from a JSON body or a form-encoded post."""
        if request.content_type == "application/json":
            try:
                body = json.loads(request.body or b"{}")
            except (json.JSONDecodeError, UnicodeDecodeError):
                raise ValueError("Invalid JSON") from None
            values = body.get("values") if isinstance(body, dict) else None
            if not isinstance(values, dict):
                raise ValueError("Expected a JSON object with a 'values' object")
            return values

        values = {key: request.POST.get(key) for key in request.POST if key != "csrfmiddlewaretoken"}
        # An unchecked checkbox is simply missing from a form-encoded post
        for spec in schema.fields:
            if spec.kind is FieldKind.BOOLEAN and spec.name not in values:
                values[spec.name] = False
        return values
