"""Inference module boundary.

The chat core talks to the inference service through two async entry
points: ``initialize()`` (once, no arguments, success or failure) and
``invoke(user_text, credential)`` (once per user turn). Implementations:

- OpenAIChatModule: chat-completions over HTTP with aiohttp
- DemoModule: offline replies for trying the widget without a credential
"""
from __future__ import annotations

import abc
import asyncio
import logging
from typing import Any

import aiohttp

from .config import DEFAULT_SYSTEM_PROMPT
from .errors import InitializationError, InvocationError, ModuleNotInitializedError

logger = logging.getLogger(__name__)


class InferenceModule(abc.ABC):
    """Abstract inference module interface."""

    @property
    @abc.abstractmethod
    def name(self) -> str:
        """Short module name for logs (e.g. 'openai', 'demo')."""

    @property
    @abc.abstractmethod
    def ready(self) -> bool:
        """True once initialize() has completed successfully."""

    @abc.abstractmethod
    async def initialize(self) -> None:
        """Load the module. Raises InitializationError on failure."""

    @abc.abstractmethod
    async def invoke(self, user_text: str, credential: str) -> Any:
        """Run one inference call.

        Returns either a mapping shaped like
        ``{"choices": [{"message": {"content": str}}, ...]}`` or any other
        value. Raises on failure.
        """

    async def close(self) -> None:
        """Release module resources. Default: nothing to release."""


class OpenAIChatModule(InferenceModule):
    """Chat-completions client for OpenAI-compatible endpoints."""

    def __init__(
        self,
        *,
        model: str = "gpt-4o-mini",
        endpoint: str = "https://api.openai.com/v1/chat/completions",
        system_prompt: str = DEFAULT_SYSTEM_PROMPT,
        temperature: float = 0.7,
        session: aiohttp.ClientSession | None = None,
    ) -> None:
        self.model = model
        self.endpoint = endpoint
        self.system_prompt = system_prompt
        self.temperature = temperature
        self._session = session
        self._owns_session = session is None

    @property
    def name(self) -> str:
        return "openai"

    @property
    def ready(self) -> bool:
        return self._session is not None and not self._session.closed

    async def initialize(self) -> None:
        if self.ready:
            return
        try:
            self._session = aiohttp.ClientSession(timeout=aiohttp.ClientTimeout(total=None))
            self._owns_session = True
        except Exception as exc:
            raise InitializationError(self.name, str(exc)) from exc
        logger.info("OpenAIChatModule ready: model=%s endpoint=%s", self.model, self.endpoint)

    def build_payload(self, user_text: str) -> dict[str, Any]:
        """Request body for one turn. The system prompt is also prefixed to the user turn."""
        prompt = f"{self.system_prompt} \n\nUser: {user_text}"
        return {
            "model": self.model,
            "messages": [
                {"role": "system", "content": self.system_prompt},
                {"role": "user", "content": prompt},
            ],
            "temperature": self.temperature,
        }

    async def invoke(self, user_text: str, credential: str) -> Any:
        if not self.ready:
            raise ModuleNotInitializedError(self.name)
        session = self._session
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {credential}",
        }
        try:
            async with session.post(
                self.endpoint,
                json=self.build_payload(user_text),
                headers=headers,
            ) as resp:
                # Error bodies are returned as-is; they carry no choices.
                if resp.status >= 400:
                    logger.warning(
                        "Inference endpoint returned HTTP %d for model %s",
                        resp.status, self.model,
                    )
                return await resp.json(content_type=None)
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as exc:
            raise InvocationError(self.name, f"{type(exc).__name__}: {exc}") from exc

    async def close(self) -> None:
        if self._session is not None and self._owns_session and not self._session.closed:
            await self._session.close()
        self._session = None


class DemoModule(InferenceModule):
    """Offline module that answers with a canned, structured reply."""

    def __init__(self, delay: float = 0.6) -> None:
        self.delay = delay
        self._ready = False

    @property
    def name(self) -> str:
        return "demo"

    @property
    def ready(self) -> bool:
        return self._ready

    async def initialize(self) -> None:
        self._ready = True

    async def invoke(self, user_text: str, credential: str) -> Any:
        if not self._ready:
            raise ModuleNotInitializedError(self.name)
        await asyncio.sleep(self.delay)
        content = (
            f"(demo) You said: \"{user_text.strip()}\". "
            "Set OPENAI_API_KEY and restart without --demo for live answers."
        )
        return {"choices": [{"message": {"role": "assistant", "content": content}}]}
