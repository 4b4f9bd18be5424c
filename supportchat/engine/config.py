"""Configuration loaded from environment variables.

All settings have sensible defaults. Override via SUPPORTCHAT_* env vars.
The credential falls back to OPENAI_API_KEY when SUPPORTCHAT_API_KEY is
unset; an empty credential is allowed and left for the inference service
to reject.
"""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)

DEFAULT_SYSTEM_PROMPT = "You are a helpful assistant. Answer concisely."
DEFAULT_GREETING = "Hello! How can I help you today?"

# Env vars whose values must never reach the log.
_SECRET_VARS = {"SUPPORTCHAT_API_KEY", "OPENAI_API_KEY"}


def _env_flag(name: str) -> bool:
    return os.getenv(name, "").strip().lower() in {"1", "true", "yes"}


@dataclass
class ChatConfig:
    """Support chat configuration."""

    # Credential handed to the inference module on every call.
    api_key: str = field(default="", repr=False)

    # Inference service
    model: str = "gpt-4o-mini"
    endpoint: str = "https://api.openai.com/v1/chat/completions"
    system_prompt: str = DEFAULT_SYSTEM_PROMPT
    temperature: float = 0.7

    # Widget
    title: str = "Support Chat"
    greeting: str = DEFAULT_GREETING
    placeholder_text: str = "..."

    # Use the offline demo module instead of the HTTP one.
    demo: bool = False

    # Logging
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> ChatConfig:
        """Load configuration from SUPPORTCHAT_* environment variables."""
        overrides = sorted(
            k for k in os.environ if k.startswith("SUPPORTCHAT_")
        )
        if overrides:
            logger.info(
                "ChatConfig.from_env: SUPPORTCHAT_* env overrides: %s",
                ", ".join(
                    k if k in _SECRET_VARS else f"{k}={os.environ[k]}"
                    for k in overrides
                ),
            )
        else:
            logger.debug("ChatConfig.from_env: no SUPPORTCHAT_* env vars set, using defaults")

        config = cls(
            api_key=(
                os.getenv("SUPPORTCHAT_API_KEY")
                or os.getenv("OPENAI_API_KEY")
                or ""
            ).strip(),
            model=os.getenv("SUPPORTCHAT_MODEL", cls.model),
            endpoint=os.getenv("SUPPORTCHAT_ENDPOINT", cls.endpoint),
            system_prompt=os.getenv(
                "SUPPORTCHAT_SYSTEM_PROMPT", cls.system_prompt
            ),
            temperature=float(os.getenv(
                "SUPPORTCHAT_TEMPERATURE", str(cls.temperature)
            )),
            title=os.getenv("SUPPORTCHAT_TITLE", cls.title),
            greeting=os.getenv("SUPPORTCHAT_GREETING", cls.greeting),
            demo=_env_flag("SUPPORTCHAT_DEMO"),
            log_level=os.getenv("SUPPORTCHAT_LOG_LEVEL", cls.log_level),
        )
        logger.info(
            "ChatConfig.from_env: model=%s endpoint=%s credential=%s demo=%s",
            config.model,
            config.endpoint,
            "set" if config.api_key else "empty",
            config.demo,
        )
        return config
