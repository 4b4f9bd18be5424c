"""Chat message model."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Sender(Enum):
    USER = "user"
    AGENT = "agent"


@dataclass
class Message:
    text: str
    sender: Sender
    # Assigned by MessageStore on insertion; 0 means "not stored yet".
    id: int = 0
    timestamp: datetime = field(default_factory=_utcnow)
    is_placeholder: bool = False
    is_error: bool = False

    @property
    def from_user(self) -> bool:
        return self.sender is Sender.USER
