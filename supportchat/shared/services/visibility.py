"""Visibility state machine for the chat window and the unread-reply signal."""
from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from enum import Enum

logger = logging.getLogger(__name__)


class VisibilityState(Enum):
    CLOSED = "closed"
    OPEN = "open"
    OPEN_MINIMIZED = "open_minimized"


# Signature: def listener(state: VisibilityState) -> None
VisibilityListener = Callable[[VisibilityState], None]


class NotificationSignal:
    """Flag for agent replies the user has not seen yet.

    Only two things write it: a reply resolving while the chat body is not
    on screen sets it, and entering the OPEN state clears it.
    """

    def __init__(self) -> None:
        self._active = False

    @property
    def active(self) -> bool:
        return self._active

    def mark_reply_resolved(self, state: VisibilityState) -> bool:
        """Record that a reply landed while the window was in *state*."""
        if state is not VisibilityState.OPEN:
            self._active = True
        return self._active

    def clear(self) -> None:
        self._active = False


class VisibilityController:
    """CLOSED -> OPEN <-> OPEN_MINIMIZED, with CLOSED reachable from both."""

    def __init__(self, notification: NotificationSignal | None = None) -> None:
        self._lock = threading.RLock()
        self._state = VisibilityState.CLOSED
        self.notification = notification or NotificationSignal()
        self._listeners: list[VisibilityListener] = []

    @property
    def state(self) -> VisibilityState:
        return self._state

    @property
    def is_open(self) -> bool:
        return self._state is not VisibilityState.CLOSED

    @property
    def is_minimized(self) -> bool:
        return self._state is VisibilityState.OPEN_MINIMIZED

    def toggle_open(self) -> VisibilityState:
        """Open a closed window (never minimized) or close an open one."""
        with self._lock:
            if self._state is VisibilityState.CLOSED:
                new_state = VisibilityState.OPEN
            else:
                new_state = VisibilityState.CLOSED
            self._transition(new_state)
            return new_state

    def toggle_minimize(self) -> VisibilityState:
        """Collapse or expand an open window. Does nothing while closed."""
        with self._lock:
            if self._state is VisibilityState.OPEN:
                new_state = VisibilityState.OPEN_MINIMIZED
            elif self._state is VisibilityState.OPEN_MINIMIZED:
                new_state = VisibilityState.OPEN
            else:
                return self._state
            self._transition(new_state)
            return new_state

    def subscribe(self, listener: VisibilityListener) -> None:
        with self._lock:
            if listener not in self._listeners:
                self._listeners.append(listener)

    def _transition(self, new_state: VisibilityState) -> None:
        old_state = self._state
        self._state = new_state
        if new_state is VisibilityState.OPEN:
            self.notification.clear()
        logger.debug("Chat visibility %s -> %s", old_state.value, new_state.value)
        for listener in list(self._listeners):
            try:
                listener(new_state)
            except Exception:
                logger.exception("Visibility listener %r failed", listener)
