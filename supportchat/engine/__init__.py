"""Chat engine — configuration, inference module boundary and client."""
from .config import ChatConfig
from .client import (
    EmptyReply,
    InferenceClient,
    InferenceFailure,
    InferenceOutcome,
    MalformedReply,
    RawText,
    StructuredReply,
    decode_response,
)
from .errors import (
    ChatError,
    ConfigError,
    InitializationError,
    InputError,
    InvocationError,
    ModuleNotInitializedError,
)
from .inference import DemoModule, InferenceModule, OpenAIChatModule

__all__ = [
    "ChatConfig",
    "ChatError",
    "ConfigError",
    "DemoModule",
    "EmptyReply",
    "InferenceClient",
    "InferenceFailure",
    "InferenceModule",
    "InferenceOutcome",
    "InitializationError",
    "InputError",
    "InvocationError",
    "MalformedReply",
    "ModuleNotInitializedError",
    "OpenAIChatModule",
    "RawText",
    "StructuredReply",
    "decode_response",
]
