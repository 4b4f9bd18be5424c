"""Session state — one chat widget mount: message log, visibility, unread flag."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
import uuid

from supportchat.shared.models.message import Message, Sender
from supportchat.shared.services.message_store import MessageStore
from supportchat.shared.services.visibility import (
    NotificationSignal,
    VisibilityController,
    VisibilityState,
)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class ChatSession:
    """Holds all conversation state for a widget mount. Never persisted."""

    session_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    created_at: datetime = field(default_factory=_utcnow)
    store: MessageStore = field(default_factory=MessageStore)
    visibility: VisibilityController = field(default_factory=VisibilityController)

    @classmethod
    def start(cls, greeting: str | None = None) -> ChatSession:
        """Create a session, seeding it with an agent greeting when given."""
        session = cls()
        if greeting:
            session.store.append(Message(text=greeting, sender=Sender.AGENT))
        return session

    @property
    def notification(self) -> NotificationSignal:
        return self.visibility.notification

    @property
    def has_unread(self) -> bool:
        return self.visibility.notification.active

    @property
    def visibility_state(self) -> VisibilityState:
        return self.visibility.state

    @property
    def messages(self) -> tuple[Message, ...]:
        return self.store.messages
