"""Adapters package - Bridge between the chat engine and UI frontends."""
from __future__ import annotations

__all__ = [
    "ChatWidgetOrchestrator",
    "PendingTurn",
]

from supportchat.adapters.orchestrator import ChatWidgetOrchestrator, PendingTurn
