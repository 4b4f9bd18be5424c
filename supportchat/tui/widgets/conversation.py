"""Conversation view — scrollable message area kept in sync with the message store."""

from __future__ import annotations

from collections.abc import Sequence

from rich.text import Text
from textual.containers import VerticalScroll
from textual.widgets import Static

from supportchat.shared.models.message import Message


def _format_time(msg: Message) -> str:
    return msg.timestamp.astimezone().strftime("%H:%M")


class MessageBubble(Static):
    """A single rendered message with sender label and timestamp.

    Placeholder and error replies get their own classes so the stylesheet
    can dim or colour them.
    """

    DEFAULT_CSS = """
    MessageBubble {
        height: auto;
        margin: 0 0 1 0;
        padding: 0 1;
    }
    MessageBubble.bubble-user {
        background: $primary 30%;
        margin: 0 0 1 6;
    }
    MessageBubble.bubble-agent {
        background: $panel;
        margin: 0 6 1 0;
    }
    MessageBubble.bubble-placeholder {
        text-style: italic;
    }
    MessageBubble.bubble-error {
        border-left: thick $error;
    }
    """

    def __init__(self, message: Message, **kwargs) -> None:
        self.message = message
        classes = ["bubble-user" if message.from_user else "bubble-agent"]
        if message.is_placeholder:
            classes.append("bubble-placeholder")
        if message.is_error:
            classes.append("bubble-error")
        super().__init__(self._format_message(message), classes=" ".join(classes), **kwargs)

    @staticmethod
    def _format_message(msg: Message) -> Text:
        label = "You" if msg.from_user else "Support"
        label_style = "bold" if msg.from_user else "bold cyan"
        text = Text()
        text.append(label, style=label_style)
        text.append(f" {_format_time(msg)}\n", style="dim")
        body_style = "red" if msg.is_error else ("dim" if msg.is_placeholder else "")
        text.append(msg.text, style=body_style)
        return text

    def _apply_state_classes(self) -> None:
        self.set_class(self.message.is_placeholder, "bubble-placeholder")
        self.set_class(self.message.is_error, "bubble-error")

    def update_message(self, message: Message) -> None:
        self.message = message
        self._apply_state_classes()
        self.update(self._format_message(message))


class ConversationView(VerticalScroll):
    """Renders the message log, adding or updating bubbles by message id."""

    DEFAULT_CSS = """
    ConversationView {
        height: 1fr;
        padding: 1 1 0 1;
    }
    """

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._bubbles: dict[int, MessageBubble] = {}

    @property
    def bubbles(self) -> dict[int, MessageBubble]:
        return dict(self._bubbles)

    def sync_messages(self, messages: Sequence[Message]) -> None:
        """Bring the view in line with *messages* and scroll to the latest one."""
        for msg in messages:
            bubble = self._bubbles.get(msg.id)
            if bubble is None:
                bubble = MessageBubble(msg, id=f"msg-{msg.id}")
                self._bubbles[msg.id] = bubble
                self.mount(bubble)
            elif bubble.message != msg:
                bubble.update_message(msg)
        self.call_after_refresh(self.scroll_end, animate=False)
