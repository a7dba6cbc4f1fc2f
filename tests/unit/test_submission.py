"""
Tests for submission handlers and outcome normalization.
"""

import functools
import logging
import time

import pytest

from liveauth.config import config
from liveauth.controller import FormController
from liveauth.exceptions import SubmissionFailure
from liveauth.forms import sign_in_schema
from liveauth.submission import (
    Failure,
    SimulatedSubmissionHandler,
    SubmissionHandler,
    Success,
    call_handler,
)


class TestOutcomes:
    def test_success_flag(self):
        assert Success().is_success is True
        assert Failure("nope").is_success is False

    def test_failure_field_defaults_to_none(self):
        assert Failure("nope").field is None


class TestCallHandler:
    @pytest.mark.asyncio
    async def test_async_object_handler(self):
        class Handler:
            async def submit(self, values):
                return Failure(f"taken: {values['email']}", field="email")

        outcome = await call_handler(Handler(), {"email": "ada@example.com"})
        assert outcome == Failure("taken: ada@example.com", field="email")

    @pytest.mark.asyncio
    async def test_async_function_handler(self):
        async def handler(values):
            return Success()

        assert await call_handler(handler, {}) == Success()

    @pytest.mark.asyncio
    async def test_sync_object_handler(self):
        class Handler:
            def submit(self, values):
                return True

        assert await call_handler(Handler(), {}) == Success()

    @pytest.mark.asyncio
    async def test_async_callable_object_handler(self):
        class Handler:
            async def __call__(self, values):
                return Failure("taken", field="email")

        outcome = await call_handler(Handler(), {"email": "ada@example.com"})
        assert outcome == Failure("taken", field="email")

    @pytest.mark.asyncio
    async def test_async_callable_object_through_controller(self, valid_sign_in):
        class Handler:
            async def __call__(self, values):
                return Failure("taken", field="email")

        controller = FormController(sign_in_schema, Handler())
        controller.set_fields(valid_sign_in)
        state = await controller.submit()

        assert str(state) == "failed: taken"
        assert controller.errors == {"email": "taken"}

    @pytest.mark.asyncio
    async def test_partial_of_coroutine_function(self):
        async def handler(values, suffix):
            return f"failed{suffix}"

        outcome = await call_handler(functools.partial(handler, suffix="!"), {})
        assert outcome == Failure("failed!")

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "returned, expected",
        [
            (None, Success()),
            (True, Success()),
            ("Invalid credentials", Failure("Invalid credentials")),
            (Failure("x", "email"), Failure("x", "email")),
        ],
    )
    async def test_return_values_normalized(self, returned, expected):
        async def handler(values):
            return returned

        assert await call_handler(handler, {}) == expected

    @pytest.mark.asyncio
    async def test_false_uses_generic_message(self):
        config.set("failure_message", "Nope.")

        async def handler(values):
            return False

        assert await call_handler(handler, {}) == Failure("Nope.")

    @pytest.mark.asyncio
    async def test_unsupported_return_value(self):
        async def handler(values):
            return 42

        with pytest.raises(TypeError, match="unsupported value"):
            await call_handler(handler, {})

    @pytest.mark.asyncio
    async def test_exceptions_propagate(self):
        async def handler(values):
            raise SubmissionFailure("Account locked", field="email")

        with pytest.raises(SubmissionFailure) as exc_info:
            await call_handler(handler, {})
        assert exc_info.value.field == "email"

    @pytest.mark.asyncio
    async def test_non_callable_handler(self):
        with pytest.raises(TypeError, match="must define submit"):
            await call_handler(object(), {})


class TestSimulatedSubmissionHandler:
    def test_satisfies_protocol(self):
        assert isinstance(SimulatedSubmissionHandler(), SubmissionHandler)

    @pytest.mark.asyncio
    async def test_always_succeeds(self):
        handler = SimulatedSubmissionHandler(delay=0)
        assert await handler.submit({"email": "a@b.co"}) == Success()

    @pytest.mark.asyncio
    async def test_uses_configured_delay(self):
        config.set("submit_delay", 0.05)
        handler = SimulatedSubmissionHandler()

        started = time.monotonic()
        await handler.submit({})

        assert time.monotonic() - started >= 0.04

    @pytest.mark.asyncio
    async def test_logs_masked_values(self, caplog):
        handler = SimulatedSubmissionHandler(delay=0, form_name="signup")

        with caplog.at_level(logging.INFO, logger="liveauth.submission"):
            await handler.submit({"email": "a@b.co", "password": "abcdefgh", "confirmPassword": "abcdefgh"})

        assert "Simulated signup submission accepted" in caplog.text
        assert "a@b.co" in caplog.text
        assert "abcdefgh" not in caplog.text
