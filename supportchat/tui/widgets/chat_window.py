"""Chat window and launcher button."""

from __future__ import annotations

from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.widget import Widget
from textual.widgets import Button, Input, Static

from supportchat.tui.widgets.conversation import ConversationView

UNREAD_DOT = "●"


class ChatLauncher(Button):
    """Floating button that opens the chat; shows a dot for unread replies."""

    DEFAULT_CSS = """
    ChatLauncher {
        width: 16;
        margin: 0 2;
    }
    ChatLauncher.unread {
        text-style: bold;
    }
    """

    def __init__(self, **kwargs) -> None:
        super().__init__("\U0001f4ac Chat", variant="primary", **kwargs)
        self._unread = False

    @property
    def unread(self) -> bool:
        return self._unread

    def set_unread(self, unread: bool) -> None:
        self._unread = unread
        self.label = f"\U0001f4ac Chat {UNREAD_DOT}" if unread else "\U0001f4ac Chat"
        self.set_class(unread, "unread")


class ChatWindow(Widget):
    """Header with minimize/close, message list and input row.

    The body (messages + input) is hidden while minimized; the header
    stays so the window can be expanded or closed.
    """

    DEFAULT_CSS = """
    ChatWindow {
        dock: right;
        width: 50;
        height: 100%;
        border: round $primary;
        background: $surface;
    }
    ChatWindow.minimized {
        height: 5;
    }
    ChatWindow #chat-header {
        height: 3;
        background: $primary;
        padding: 0 1;
    }
    ChatWindow #chat-title {
        width: 1fr;
        content-align: left middle;
        height: 3;
        text-style: bold;
    }
    ChatWindow #chat-header Button {
        min-width: 5;
        width: 5;
    }
    ChatWindow #chat-body {
        height: 1fr;
    }
    ChatWindow #chat-input-row {
        height: auto;
        padding: 0 1;
    }
    ChatWindow #chat-input {
        width: 1fr;
    }
    ChatWindow #btn-chat-send {
        min-width: 8;
    }
    """

    def __init__(self, title: str = "Support Chat", **kwargs) -> None:
        super().__init__(**kwargs)
        self.chat_title = title
        self._minimized = False
        self._unread = False

    def compose(self) -> ComposeResult:
        with Horizontal(id="chat-header"):
            yield Static(self._title_text(), id="chat-title")
            yield Button("_", id="btn-chat-minimize")
            yield Button("✕", id="btn-chat-close")
        with Vertical(id="chat-body"):
            yield ConversationView(id="conversation")
            with Horizontal(id="chat-input-row"):
                yield Input(placeholder="Type your message...", id="chat-input")
                yield Button("Send", id="btn-chat-send", variant="primary", disabled=True)

    def _title_text(self) -> str:
        suffix = f" {UNREAD_DOT}" if self._unread and self._minimized else ""
        return f"\U0001f4ac {self.chat_title}{suffix}"

    @property
    def minimized(self) -> bool:
        return self._minimized

    def set_state(self, minimized: bool, unread: bool) -> None:
        self._minimized = minimized
        self._unread = unread
        self.set_class(minimized, "minimized")
        self.query_one("#chat-body").display = not minimized
        self.query_one("#chat-title", Static).update(self._title_text())

    def set_send_enabled(self, enabled: bool) -> None:
        self.query_one("#btn-chat-send", Button).disabled = not enabled

    def focus_input(self) -> None:
        self.query_one("#chat-input", Input).focus()
