"""YAML configuration loader.

Loads a single YAML file layered over the environment defaults from
``ChatConfig.from_env()``. Values present in the file win.

Example YAML:
    chat:
      title: Support Chat
      greeting: "Hello! How can I help you today?"
      placeholder_text: "..."
      log_level: DEBUG

    inference:
      model: gpt-4o-mini
      endpoint: https://api.openai.com/v1/chat/completions
      temperature: 0.7
      system_prompt: You are a helpful assistant. Answer concisely.
      api_key_env: OPENAI_API_KEY   # or api_key: sk-...
      demo: false
"""
from __future__ import annotations

import logging
import os
from pathlib import Path

import yaml

from .config import ChatConfig
from .errors import ConfigError

logger = logging.getLogger(__name__)

_CHAT_KEYS = {"title", "greeting", "placeholder_text", "log_level"}
_INFERENCE_KEYS = {
    "model", "endpoint", "temperature", "system_prompt",
    "api_key", "api_key_env", "demo",
}


def _section(raw: dict, name: str, allowed: set[str], path: Path) -> dict:
    section = raw.get(name) or {}
    if not isinstance(section, dict):
        raise ConfigError(str(path), f"section '{name}' must be a mapping")
    unknown = sorted(set(section) - allowed)
    if unknown:
        logger.warning(
            "load_yaml_config: ignoring unknown keys in %s.%s: %s",
            path.name, name, ", ".join(unknown),
        )
    return {k: v for k, v in section.items() if k in allowed}


def load_yaml_config(path: str | Path, base: ChatConfig | None = None) -> ChatConfig:
    """Load a YAML config file over *base* (env defaults when omitted)."""
    path = Path(path)
    logger.info(
        "load_yaml_config: attempting to load config from %s (exists=%s)",
        path, path.exists(),
    )
    try:
        with open(path, encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}
    except FileNotFoundError:
        logger.error("load_yaml_config: config file not found at %s", path.absolute())
        raise ConfigError(str(path), "file not found")
    except yaml.YAMLError as exc:
        logger.error("load_yaml_config: YAML parse error in %s: %s", path, exc)
        raise ConfigError(str(path), f"YAML parse error: {exc}") from exc

    if not isinstance(raw, dict):
        raise ConfigError(str(path), "top level must be a mapping")

    config = base or ChatConfig.from_env()
    chat = _section(raw, "chat", _CHAT_KEYS, path)
    inference = _section(raw, "inference", _INFERENCE_KEYS, path)

    for key, value in chat.items():
        # A key written without a value means "empty", not the text "None".
        setattr(config, key, "" if value is None else str(value))

    for key in ("model", "endpoint", "system_prompt"):
        if key in inference:
            setattr(config, key, str(inference[key]))
    if "temperature" in inference:
        try:
            config.temperature = float(inference["temperature"])
        except (TypeError, ValueError) as exc:
            raise ConfigError(
                str(path), f"inference.temperature is not a number: {inference['temperature']!r}"
            ) from exc
    if "demo" in inference:
        if not isinstance(inference["demo"], bool):
            raise ConfigError(
                str(path), f"inference.demo must be true or false: {inference['demo']!r}"
            )
        config.demo = inference["demo"]

    # An explicit key beats an env var name; both beat the environment default.
    if inference.get("api_key"):
        config.api_key = str(inference["api_key"]).strip()
    elif inference.get("api_key_env"):
        env_name = str(inference["api_key_env"])
        config.api_key = os.getenv(env_name, "").strip()
        if not config.api_key:
            logger.warning(
                "load_yaml_config: %s is not set; using an empty credential",
                env_name,
            )

    logger.info(
        "Parsed YAML config %s — sections: %s",
        path.name, ", ".join(sorted(raw.keys())) or "(empty)",
    )
    return config
