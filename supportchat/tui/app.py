"""Support chat TUI — Textual application hosting the chat widget."""

from __future__ import annotations

import logging

from textual import on, work
from textual.app import App, ComposeResult
from textual.message import Message as TextualMessage
from textual.widgets import Button, Footer, Header, Input, Static

from supportchat.adapters.orchestrator import ChatWidgetOrchestrator, PendingTurn
from supportchat.engine.client import InferenceClient
from supportchat.engine.config import ChatConfig
from supportchat.engine.inference import DemoModule, InferenceModule, OpenAIChatModule
from supportchat.shared.models.message import Message
from supportchat.shared.models.session import ChatSession
from supportchat.shared.services.visibility import VisibilityState
from supportchat.tui.widgets.chat_window import ChatLauncher, ChatWindow
from supportchat.tui.widgets.conversation import ConversationView

logger = logging.getLogger(__name__)

PAGE_TEXT = (
    "[b]Policy Console[/b]\n\n"
    "Policies and rules are managed on their own screens.\n"
    "Press [b]ctrl+o[/b] or the chat button to talk to support."
)


class MessagesChanged(TextualMessage):
    """Posted whenever the message store's sequence changes."""

    def __init__(self, messages: tuple[Message, ...]) -> None:
        self.messages = messages
        super().__init__()


def build_module(config: ChatConfig) -> InferenceModule:
    if config.demo:
        return DemoModule()
    return OpenAIChatModule(
        model=config.model,
        endpoint=config.endpoint,
        system_prompt=config.system_prompt,
        temperature=config.temperature,
    )


def build_orchestrator(
    config: ChatConfig,
    module: InferenceModule | None = None,
) -> ChatWidgetOrchestrator:
    """Wire session, client and orchestrator from *config*."""
    client = InferenceClient(module or build_module(config), credential=config.api_key)
    return ChatWidgetOrchestrator(
        client,
        session=ChatSession.start(greeting=config.greeting),
        placeholder_text=config.placeholder_text,
    )


class SupportChatApp(App):
    """Host page with a floating support chat."""

    TITLE = "Policy Console"
    SUB_TITLE = "Support"

    BINDINGS = [
        ("ctrl+q", "quit", "Quit"),
        ("ctrl+o", "toggle_chat", "Chat"),
        ("ctrl+n", "toggle_minimize", "Minimize"),
    ]

    CSS = """
    #page-body {
        height: 1fr;
        padding: 1 2;
    }
    """

    def __init__(
        self,
        config: ChatConfig | None = None,
        orchestrator: ChatWidgetOrchestrator | None = None,
        **kwargs,
    ) -> None:
        super().__init__(**kwargs)
        self.config = config or ChatConfig()
        self.orchestrator = orchestrator or build_orchestrator(self.config)

    def compose(self) -> ComposeResult:
        yield Header()
        yield Static(PAGE_TEXT, id="page-body", markup=True)
        yield ChatLauncher(id="chat-launcher")
        yield ChatWindow(title=self.config.title, id="chat-window")
        yield Footer()

    def on_mount(self) -> None:
        session = self.orchestrator.session
        session.store.subscribe(self._on_store_changed)
        session.visibility.subscribe(self._on_visibility_changed)
        self.query_one(ConversationView).sync_messages(session.messages)
        self._sync_visibility()
        self._initialize_inference()

    async def on_unmount(self) -> None:
        self.orchestrator.session.store.unsubscribe(self._on_store_changed)
        await self.orchestrator.client.close()

    # ── Inference lifecycle ──

    @work(name="init-inference")
    async def _initialize_inference(self) -> None:
        ok = await self.orchestrator.client.initialize()
        if not ok:
            self.notify(
                "Support chat is unavailable right now; messages will fail.",
                severity="warning",
            )

    @work(group="inference", name="inference-turn")
    async def _complete_turn(self, turn: PendingTurn) -> None:
        await self.orchestrator.complete_turn(turn)

    # ── Store / visibility listeners ──

    def _on_store_changed(self, messages: tuple[Message, ...]) -> None:
        self.post_message(MessagesChanged(messages))

    def _on_visibility_changed(self, _state: VisibilityState) -> None:
        self._sync_visibility()

    @on(MessagesChanged)
    def _render_messages(self, event: MessagesChanged) -> None:
        self.query_one(ConversationView).sync_messages(event.messages)
        self._sync_visibility()

    def _sync_visibility(self) -> None:
        state = self.orchestrator.visibility_state
        unread = self.orchestrator.has_unread
        window = self.query_one(ChatWindow)
        launcher = self.query_one(ChatLauncher)
        window.display = state is not VisibilityState.CLOSED
        window.set_state(
            minimized=state is VisibilityState.OPEN_MINIMIZED,
            unread=unread,
        )
        window.set_send_enabled(self.orchestrator.can_send)
        launcher.display = state is VisibilityState.CLOSED
        launcher.set_unread(unread)

    # ── Actions ──

    def action_toggle_chat(self) -> None:
        if self.orchestrator.toggle_open() is VisibilityState.OPEN:
            self.query_one(ChatWindow).focus_input()

    def action_toggle_minimize(self) -> None:
        if self.orchestrator.toggle_minimize() is VisibilityState.OPEN:
            self.query_one(ChatWindow).focus_input()

    def send_message(self) -> PendingTurn | None:
        """Start a turn from the input buffer and run it in a worker."""
        turn = self.orchestrator.begin_turn()
        if turn is None:
            if self.orchestrator.busy and self.orchestrator.input_text.strip():
                self.notify("Please wait for the current reply.")
            return None
        self.query_one("#chat-input", Input).value = ""
        self._sync_visibility()
        self._complete_turn(turn)
        return turn

    # ── Widget events ──

    def on_input_changed(self, event: Input.Changed) -> None:
        if event.input.id != "chat-input":
            return
        self.orchestrator.set_input(event.value)
        self.query_one(ChatWindow).set_send_enabled(self.orchestrator.can_send)

    def on_input_submitted(self, event: Input.Submitted) -> None:
        if event.input.id == "chat-input":
            self.send_message()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        button_id = event.button.id
        if button_id in ("chat-launcher", "btn-chat-close"):
            self.action_toggle_chat()
        elif button_id == "btn-chat-minimize":
            self.action_toggle_minimize()
        elif button_id == "btn-chat-send":
            self.send_message()
