"""Exception hierarchy for the chat engine.

Specific exceptions for each failure mode. The inference client turns
module failures into error replies; these types exist so the failure is
logged with a precise cause.
"""
from __future__ import annotations


class ChatError(Exception):
    """Base exception for all chat errors."""


class InputError(ChatError, ValueError):
    """A submission was empty or whitespace-only."""
    def __init__(self, reason: str = "message text is empty"):
        self.reason = reason
        super().__init__(f"Invalid input: {reason}")


class InitializationError(ChatError):
    """The inference module failed to initialize."""
    def __init__(self, module: str, reason: str):
        self.module = module
        self.reason = reason
        super().__init__(f"Failed to initialize inference module {module}: {reason}")


class ModuleNotInitializedError(ChatError):
    """The inference module was invoked before a successful initialize()."""
    def __init__(self, module: str):
        self.module = module
        super().__init__(f"Inference module {module} is not initialized")


class InvocationError(ChatError):
    """A call into the inference module failed."""
    def __init__(self, module: str, reason: str):
        self.module = module
        self.reason = reason
        super().__init__(f"Inference call to {module} failed: {reason}")


class ConfigError(ChatError):
    """Configuration file could not be read or has invalid values."""
    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Invalid config {path}: {reason}")
