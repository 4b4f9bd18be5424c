"""Tests for response decoding and the inference client's failure handling."""
from __future__ import annotations

from typing import Any

import pytest

from supportchat.engine.client import (
    FAILURE_TEXT,
    MALFORMED_TEXT,
    NO_CONTENT_TEXT,
    EmptyReply,
    InferenceClient,
    InferenceFailure,
    MalformedReply,
    RawText,
    StructuredReply,
    decode_response,
)
from supportchat.engine.errors import (
    InitializationError,
    InputError,
    InvocationError,
    ModuleNotInitializedError,
)
from supportchat.engine.inference import DemoModule, InferenceModule


class _ScriptedModule(InferenceModule):
    """Module returning a fixed result (or raising a fixed error)."""

    def __init__(
        self,
        result: Any = None,
        error: BaseException | None = None,
        ready: bool = True,
        init_error: BaseException | None = None,
    ) -> None:
        self.result = result
        self.error = error
        self._ready = ready
        self.init_error = init_error
        self.init_calls = 0
        self.calls: list[tuple[str, str]] = []

    @property
    def name(self) -> str:
        return "scripted"

    @property
    def ready(self) -> bool:
        return self._ready

    async def initialize(self) -> None:
        self.init_calls += 1
        if self.init_error is not None:
            raise self.init_error
        self._ready = True

    async def invoke(self, user_text: str, credential: str) -> Any:
        self.calls.append((user_text, credential))
        if self.error is not None:
            raise self.error
        return self.result


# ── decode_response ──


class TestDecodeResponse:
    def test_structured_reply_uses_first_choice(self):
        value = {
            "choices": [
                {"message": {"content": "Hi there"}},
                {"message": {"content": "ignored"}},
            ]
        }
        outcome = decode_response(value)
        assert outcome == StructuredReply("Hi there")
        assert outcome.text == "Hi there"
        assert outcome.is_error is False

    @pytest.mark.parametrize(
        "value",
        [
            {},
            {"choices": []},
            {"choices": None},
            {"error": {"message": "invalid api key"}},
            [],
            [1, 2],
        ],
    )
    def test_objects_without_choices_fall_back(self, value):
        outcome = decode_response(value)
        assert isinstance(outcome, EmptyReply)
        assert outcome.text == NO_CONTENT_TEXT
        assert outcome.is_error is False

    @pytest.mark.parametrize(
        "value",
        [
            {"choices": [{}]},
            {"choices": ["text"]},
            {"choices": [{"message": {}}]},
            {"choices": [{"message": {"content": None}}]},
            None,
        ],
    )
    def test_null_or_malformed_first_choice(self, value):
        outcome = decode_response(value)
        assert isinstance(outcome, MalformedReply)
        assert outcome.text == MALFORMED_TEXT
        assert outcome.is_error is False

    @pytest.mark.parametrize(
        "value, expected",
        [("ok", "ok"), (42, "42"), (True, "True"), (b"raw", "raw")],
    )
    def test_non_objects_use_string_form(self, value, expected):
        outcome = decode_response(value)
        assert outcome == RawText(expected)
        assert outcome.text == expected


# ── InferenceClient ──


@pytest.mark.asyncio
async def test_submit_passes_text_and_constructor_credential():
    module = _ScriptedModule(result={"choices": [{"message": {"content": "Hi"}}]})
    client = InferenceClient(module, credential="sk-test")
    outcome = await client.submit("Hello")
    assert module.calls == [("Hello", "sk-test")]
    assert outcome == StructuredReply("Hi")


@pytest.mark.asyncio
async def test_submit_credential_override_and_empty_credential():
    module = _ScriptedModule(result="ok")
    client = InferenceClient(module)
    await client.submit("one")
    await client.submit("two", credential="other")
    assert module.calls == [("one", ""), ("two", "other")]


@pytest.mark.asyncio
async def test_submit_rejects_blank_text_without_calling_module():
    module = _ScriptedModule(result="ok")
    client = InferenceClient(module)
    with pytest.raises(InputError):
        await client.submit("   ")
    assert module.calls == []


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "error",
    [
        RuntimeError("boom"),
        InvocationError("scripted", "connection reset"),
        ValueError("bad json"),
    ],
)
async def test_module_errors_become_failure_outcome(error, caplog):
    module = _ScriptedModule(error=error)
    client = InferenceClient(module)
    with caplog.at_level("ERROR"):
        outcome = await client.submit("Hello")
    assert isinstance(outcome, InferenceFailure)
    assert outcome.error is error
    assert outcome.text == FAILURE_TEXT
    assert outcome.is_error is True
    assert "Inference call via scripted failed" in caplog.text


@pytest.mark.asyncio
async def test_uninitialized_module_fails_cleanly():
    module = _ScriptedModule(result="ok", ready=False)
    client = InferenceClient(module)
    outcome = await client.submit("Hello")
    assert isinstance(outcome, InferenceFailure)
    assert isinstance(outcome.error, ModuleNotInitializedError)
    assert module.calls == []


@pytest.mark.asyncio
async def test_initialize_runs_once():
    module = _ScriptedModule(ready=False)
    client = InferenceClient(module)
    assert await client.initialize() is True
    assert await client.initialize() is True
    assert module.init_calls == 1
    assert client.initialized is True


@pytest.mark.asyncio
async def test_initialization_failure_is_logged_and_later_calls_fail(caplog):
    module = _ScriptedModule(
        result="ok", ready=False, init_error=OSError("module file missing"),
    )
    client = InferenceClient(module)
    with caplog.at_level("ERROR"):
        assert await client.initialize() is False
    assert "Failed to initialize inference module scripted" in caplog.text
    assert client.initialized is False

    outcome = await client.submit("Hello")
    assert isinstance(outcome, InferenceFailure)


@pytest.mark.asyncio
async def test_initialization_error_passes_through_unwrapped(caplog):
    error = InitializationError("scripted", "bad build")
    client = InferenceClient(_ScriptedModule(ready=False, init_error=error))
    with caplog.at_level("ERROR"):
        assert await client.initialize() is False
    assert "bad build" in caplog.text


@pytest.mark.asyncio
async def test_demo_module_produces_structured_reply():
    client = InferenceClient(DemoModule(delay=0))
    assert await client.initialize() is True
    outcome = await client.submit("  Where are my rules?  ")
    assert isinstance(outcome, StructuredReply)
    assert "Where are my rules?" in outcome.text
