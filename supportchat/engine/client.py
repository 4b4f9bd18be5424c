"""Inference client — one call per user turn, decoded into a tagged union.

The client never raises for module failures. Every call ends in one of
the outcome variants below, and the display text for each is fixed here:

    StructuredReply   first choice's message content
    EmptyReply        "No response content received"
    MalformedReply    "Error processing response"
    RawText           str(value) for non-mapping results
    InferenceFailure  "Sorry, there was an error processing your request."

Only InferenceFailure is an error reply.
"""
from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Union

from .errors import InitializationError, InputError, ModuleNotInitializedError
from .inference import InferenceModule

logger = logging.getLogger(__name__)

NO_CONTENT_TEXT = "No response content received"
MALFORMED_TEXT = "Error processing response"
FAILURE_TEXT = "Sorry, there was an error processing your request."


@dataclass(frozen=True)
class StructuredReply:
    content: str
    is_error = False

    @property
    def text(self) -> str:
        return self.content


@dataclass(frozen=True)
class EmptyReply:
    is_error = False

    @property
    def text(self) -> str:
        return NO_CONTENT_TEXT


@dataclass(frozen=True)
class MalformedReply:
    reason: str
    is_error = False

    @property
    def text(self) -> str:
        return MALFORMED_TEXT


@dataclass(frozen=True)
class RawText:
    value: str
    is_error = False

    @property
    def text(self) -> str:
        return self.value


@dataclass(frozen=True)
class InferenceFailure:
    error: BaseException
    is_error = True

    @property
    def text(self) -> str:
        return FAILURE_TEXT


InferenceOutcome = Union[StructuredReply, EmptyReply, MalformedReply, RawText, InferenceFailure]


def decode_response(value: Any) -> InferenceOutcome:
    """Decode a successful module result.

    Mappings are parsed as chat completions and sequences count as
    objects without choices. ``None`` has no fields to read, so it is
    malformed. Everything else is shown as its string form.
    """
    if value is None:
        return MalformedReply("result is null")
    if isinstance(value, Sequence) and not isinstance(value, (str, bytes)):
        return EmptyReply()
    if not isinstance(value, Mapping):
        if isinstance(value, bytes):
            return RawText(value.decode("utf-8", errors="replace"))
        return RawText(str(value))

    choices = value.get("choices")
    if not isinstance(choices, Sequence) or isinstance(choices, (str, bytes)) or not choices:
        return EmptyReply()

    first = choices[0]
    message = first.get("message") if isinstance(first, Mapping) else None
    content = message.get("content") if isinstance(message, Mapping) else None
    if not isinstance(content, str):
        return MalformedReply(f"choices[0].message.content is {type(content).__name__}")
    return StructuredReply(content)


class InferenceClient:
    """Async request/response wrapper around an InferenceModule."""

    def __init__(self, module: InferenceModule, credential: str = "") -> None:
        self.module = module
        self._credential = credential
        self._initialized: bool | None = None

    @property
    def initialized(self) -> bool:
        return bool(self._initialized)

    async def initialize(self) -> bool:
        """Initialize the module once. Returns False (and logs) on failure."""
        if self._initialized is not None:
            return self._initialized
        try:
            await self.module.initialize()
        except Exception as exc:
            error = exc if isinstance(exc, InitializationError) else InitializationError(
                self.module.name, f"{type(exc).__name__}: {exc}"
            )
            logger.error("%s", error, exc_info=exc)
            self._initialized = False
            return False
        self._initialized = True
        logger.info("Inference module %s initialized", self.module.name)
        return True

    async def submit(self, user_text: str, credential: str | None = None) -> InferenceOutcome:
        """Run one inference call and decode its result. Never raises for module errors."""
        if not user_text.strip():
            raise InputError()
        if credential is None:
            credential = self._credential
        try:
            if not self.module.ready:
                raise ModuleNotInitializedError(self.module.name)
            value = await self.module.invoke(user_text, credential)
        except Exception as exc:
            logger.error(
                "Inference call via %s failed: %s", self.module.name, exc, exc_info=exc,
            )
            return InferenceFailure(exc)

        outcome = decode_response(value)
        if isinstance(outcome, (EmptyReply, MalformedReply)):
            logger.warning(
                "Inference result from %s had no usable content (%s)",
                self.module.name, type(outcome).__name__,
            )
        return outcome

    async def close(self) -> None:
        await self.module.close()
