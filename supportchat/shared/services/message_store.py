"""Message store — ordered chat log with a single in-place placeholder slot.

The store is append-only: messages are never removed or reordered. The only
mutable entry is the agent placeholder shown while an inference call is
outstanding; it is resolved in place to the final reply, keeping its id and
position. At most one placeholder exists at any time.

Every change to the sequence notifies subscribed listeners with a snapshot
of the log. The TUI uses this to re-render and scroll to the latest message.
"""
from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterator
from dataclasses import replace

from supportchat.shared.models.message import Message, _utcnow

logger = logging.getLogger(__name__)

# Signature: def listener(messages: tuple[Message, ...]) -> None
StoreListener = Callable[[tuple[Message, ...]], None]


class MessageStore:
    """Append-only message log for one chat session."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._messages: list[Message] = []
        self._next_id = 1
        self._listeners: list[StoreListener] = []

    # ── Queries ──

    @property
    def messages(self) -> tuple[Message, ...]:
        with self._lock:
            return tuple(self._messages)

    @property
    def placeholder(self) -> Message | None:
        with self._lock:
            return self._find_placeholder()

    def get(self, message_id: int) -> Message | None:
        with self._lock:
            for msg in self._messages:
                if msg.id == message_id:
                    return msg
        return None

    def __len__(self) -> int:
        with self._lock:
            return len(self._messages)

    def __iter__(self) -> Iterator[Message]:
        return iter(self.messages)

    # ── Mutations ──

    def append(self, msg: Message) -> int:
        """Assign the next id to *msg*, insert it at the tail and return the id.

        Placeholders must go through ``upsert_placeholder`` so the
        single-placeholder invariant holds.
        """
        if msg.is_placeholder:
            raise ValueError("placeholders must be inserted with upsert_placeholder()")
        with self._lock:
            msg_id = self._insert(msg)
            snapshot = tuple(self._messages)
        self._notify(snapshot)
        return msg_id

    def upsert_placeholder(self, msg: Message) -> Message:
        """Insert *msg* as the placeholder unless one already exists.

        Returns the placeholder that is in the log afterwards, which is the
        existing one when the insert was skipped.
        """
        with self._lock:
            existing = self._find_placeholder()
            if existing is not None:
                logger.debug(
                    "Placeholder #%d already present; not inserting another",
                    existing.id,
                )
                return existing
            msg.is_placeholder = True
            self._insert(msg)
            snapshot = tuple(self._messages)
        self._notify(snapshot)
        return msg

    def resolve_placeholder(self, text: str, is_error: bool = False) -> Message | None:
        """Turn the placeholder into its final form in place.

        Keeps id, sender and position; replaces text, error flag and
        timestamp and clears ``is_placeholder``. Returns the resolved message,
        or None (with no change and no notification) if there is no
        placeholder.
        """
        with self._lock:
            current = self._find_placeholder()
            if current is None:
                return None
            index = self._messages.index(current)
            resolved = replace(
                current,
                text=text,
                is_error=is_error,
                is_placeholder=False,
                timestamp=_utcnow(),
            )
            self._messages[index] = resolved
            snapshot = tuple(self._messages)
        self._notify(snapshot)
        return resolved

    # ── Listeners ──

    def subscribe(self, listener: StoreListener) -> None:
        with self._lock:
            if listener not in self._listeners:
                self._listeners.append(listener)

    def unsubscribe(self, listener: StoreListener) -> None:
        with self._lock:
            if listener in self._listeners:
                self._listeners.remove(listener)

    # ── Internals ──

    def _find_placeholder(self) -> Message | None:
        for msg in self._messages:
            if msg.is_placeholder:
                return msg
        return None

    def _insert(self, msg: Message) -> int:
        msg.id = self._next_id
        self._next_id += 1
        self._messages.append(msg)
        return msg.id

    def _notify(self, snapshot: tuple[Message, ...]) -> None:
        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(snapshot)
            except Exception:
                logger.exception("MessageStore listener %r failed", listener)
