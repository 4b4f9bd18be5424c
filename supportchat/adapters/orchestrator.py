"""Widget orchestrator — user input -> message log -> inference -> message log.

A turn has a synchronous half and an asynchronous half so the placeholder
is always in the log before the inference call starts:

    begin_turn()     append user message, clear input, insert placeholder
    complete_turn()  await the client, resolve placeholder, update unread flag

Only one turn may be in flight per session. A submit that arrives while a
reply is pending is rejected and leaves the input buffer untouched.
"""
from __future__ import annotations

import asyncio
import logging
import threading
from dataclasses import dataclass

from supportchat.engine.client import FAILURE_TEXT, InferenceClient, InferenceOutcome
from supportchat.shared.models.message import Message, Sender
from supportchat.shared.models.session import ChatSession
from supportchat.shared.services.visibility import VisibilityState

logger = logging.getLogger(__name__)

THINKING_TEXT = "..."


@dataclass
class PendingTurn:
    """A started turn waiting for its inference result."""
    user_text: str
    user_message_id: int
    placeholder_id: int


class ChatWidgetOrchestrator:
    """Drives one chat session's message lifecycle."""

    def __init__(
        self,
        client: InferenceClient,
        session: ChatSession | None = None,
        placeholder_text: str = THINKING_TEXT,
    ) -> None:
        self.client = client
        self.session = session or ChatSession()
        self.placeholder_text = placeholder_text
        self._input_text = ""
        self._turn_lock = threading.Lock()
        self._pending: PendingTurn | None = None

    # ── Input buffer ──

    @property
    def input_text(self) -> str:
        return self._input_text

    def set_input(self, text: str) -> None:
        self._input_text = text

    @property
    def can_send(self) -> bool:
        return bool(self._input_text.strip()) and not self.busy

    # ── State ──

    @property
    def busy(self) -> bool:
        return self._pending is not None

    @property
    def has_unread(self) -> bool:
        return self.session.has_unread

    @property
    def visibility_state(self) -> VisibilityState:
        return self.session.visibility.state

    def toggle_open(self) -> VisibilityState:
        return self.session.visibility.toggle_open()

    def toggle_minimize(self) -> VisibilityState:
        return self.session.visibility.toggle_minimize()

    # ── Turns ──

    def begin_turn(self, text: str | None = None) -> PendingTurn | None:
        """Start a turn from *text* (defaults to the input buffer).

        Returns None without touching any state when the text is blank or
        another turn is still waiting for its reply.
        """
        user_text = self._input_text if text is None else text
        if not user_text.strip():
            return None

        with self._turn_lock:
            if self._pending is not None:
                logger.info(
                    "Rejecting submit while reply to message #%d is pending",
                    self._pending.user_message_id,
                )
                return None

            store = self.session.store
            user_id = store.append(Message(text=user_text, sender=Sender.USER))
            self._input_text = ""
            placeholder = store.upsert_placeholder(Message(
                text=self.placeholder_text,
                sender=Sender.AGENT,
                is_placeholder=True,
            ))
            self._pending = PendingTurn(
                user_text=user_text,
                user_message_id=user_id,
                placeholder_id=placeholder.id,
            )
            logger.debug(
                "Turn started: user #%d, placeholder #%d", user_id, placeholder.id,
            )
            return self._pending

    async def complete_turn(self, turn: PendingTurn) -> Message | None:
        """Await the inference result for *turn* and resolve its placeholder."""
        try:
            outcome: InferenceOutcome = await self.client.submit(turn.user_text)
            resolved = self.session.store.resolve_placeholder(
                outcome.text, is_error=outcome.is_error,
            )
            unread = self.session.notification.mark_reply_resolved(
                self.session.visibility.state
            )
            logger.debug(
                "Turn finished: placeholder #%d -> %s (unread=%s)",
                turn.placeholder_id, type(outcome).__name__, unread,
            )
            return resolved
        except asyncio.CancelledError:
            # Leave no orphaned placeholder behind for the next turn.
            self.session.store.resolve_placeholder(FAILURE_TEXT, is_error=True)
            raise
        finally:
            with self._turn_lock:
                if self._pending is turn:
                    self._pending = None

    async def submit(self, text: str | None = None) -> Message | None:
        """Run a full turn. Returns the resolved agent message, or None if ignored."""
        turn = self.begin_turn(text)
        if turn is None:
            return None
        return await self.complete_turn(turn)
