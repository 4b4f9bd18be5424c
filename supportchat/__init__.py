"""supportchat — terminal support-chat widget backed by an async inference module."""

__version__ = "0.1.0"
