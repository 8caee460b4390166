"""
Purpose: the single orchestration point for message exchanges. Owns one
message buffer and one exchange state per session and keeps both in step
with the remote store while a submission is in flight.

One exchange (``submit``):
  IDLE -> SENDING_USER      persist the USER turn, show it once stored
       -> AWAITING_REPLY    ask the response provider for a reply
       -> PERSISTING_REPLY  persist the ASSISTANT turn, show it
       -> IDLE
Any failure moves to FAILED, records the error, then resets to IDLE so the
next submission can run. Messages that were already persisted stay in the
buffer; nothing is rolled back.

Sessions never share state: each has its own ``_Conversation`` record, so
exchanges on different sessions may interleave freely while one session
runs at most one exchange at a time.
"""

from __future__ import annotations

import bisect
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Sequence

from ragchat.errors import (
    ChatCoreError,
    FetchError,
    PersistError,
    ProviderError,
    RemoteStoreError,
    ValidationError,
)
from ragchat.models import ContextSnippet, Message, MessagePage, PageRequest, Sender
from ragchat.providers.base import ResponseProvider
from ragchat.store.base import RemoteStore

logger = logging.getLogger(__name__)


class ExchangeState(str, Enum):
    IDLE = "idle"
    SENDING_USER = "sending_user"
    AWAITING_REPLY = "awaiting_reply"
    PERSISTING_REPLY = "persisting_reply"
    FAILED = "failed"


@dataclass
class _Conversation:
    messages: list[Message] = field(default_factory=list)
    state: ExchangeState = ExchangeState.IDLE
    last_error: Optional[ChatCoreError] = None
    page_info: Optional[MessagePage] = None
    # Set by ``forget`` while an exchange is in flight; the record is
    # dropped once that exchange ends.
    forgotten: bool = False

    def replace(self, messages: Sequence[Message]) -> None:
        self.forgotten = False
        ordered: list[Message] = []
        seen: set[str] = set()
        for message in sorted(messages, key=lambda m: m.sort_key):
            if message.id not in seen:
                seen.add(message.id)
                ordered.append(message)
        self.messages = ordered

    def insert(self, message: Message) -> None:
        if self.forgotten or any(m.id == message.id for m in self.messages):
            return
        keys = [m.sort_key for m in self.messages]
        index = bisect.bisect_right(keys, message.sort_key)
        self.messages = [*self.messages[:index], message, *self.messages[index:]]


class ConversationController:
    """Runs message exchanges for any number of sessions."""

    def __init__(
        self,
        store: RemoteStore,
        provider: ResponseProvider,
        *,
        pagination: PageRequest | None = None,
        include_context: bool = True,
    ) -> None:
        self._store = store
        self._provider = provider
        self._pagination = pagination or PageRequest()
        self._include_context = include_context
        self._conversations: dict[str, _Conversation] = {}

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    def messages(self, session_id: str) -> list[Message]:
        """Buffered messages in (created_at, id) order."""
        conversation = self._conversations.get(session_id)
        return list(conversation.messages) if conversation else []

    def state(self, session_id: str) -> ExchangeState:
        """Current exchange state of a session.

        Args:
            session_id: Session to inspect.

        Returns:
            The session's state, ``IDLE`` for sessions never touched.
        """
        conversation = self._conversations.get(session_id)
        return conversation.state if conversation else ExchangeState.IDLE

    def is_busy(self, session_id: str) -> bool:
        """Whether an exchange is in flight, i.e. ``submit`` would be a no-op."""
        return self.state(session_id) != ExchangeState.IDLE

    def last_error(self, session_id: str) -> Optional[ChatCoreError]:
        conversation = self._conversations.get(session_id)
        return conversation.last_error if conversation else None

    def page_info(self, session_id: str) -> Optional[MessagePage]:
        """Metadata of the last loaded history page (without its content)."""
        conversation = self._conversations.get(session_id)
        return conversation.page_info if conversation else None

    def forget(self, session_id: str) -> None:
        """Drop everything held for a session, e.g. after it was deleted.

        An in-flight exchange keeps its record, so the session stays busy
        until that exchange ends; its remaining messages are not buffered.
        """
        conversation = self._conversations.get(session_id)
        if conversation is None:
            return
        if conversation.state == ExchangeState.IDLE:
            del self._conversations[session_id]
        else:
            conversation.messages = []
            conversation.page_info = None
            conversation.forgotten = True
        logger.debug("Dropped conversation buffer for session %s", session_id)

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    async def load_history(
        self, session_id: str, page: PageRequest | None = None
    ) -> list[Message]:
        """Fetch one page of history and replace the session's buffer."""
        request = page or self._pagination
        try:
            result = await self._store.list_messages(
                session_id, request.page, request.size
            )
        except RemoteStoreError as exc:
            logger.warning(
                "Failed to load messages for session %s: %s", session_id, exc
            )
            raise FetchError(
                f"Failed to load messages: {exc.message}",
                details={"session_id": session_id, "status_code": exc.status_code},
            ) from exc

        conversation = self._conversation(session_id)
        conversation.replace(result.content)
        conversation.page_info = result.model_copy(update={"content": []})
        logger.debug(
            "Loaded %d messages for session %s (page=%d, size=%d)",
            len(result.content),
            session_id,
            request.page,
            request.size,
        )
        return list(conversation.messages)

    async def submit(self, session_id: str, user_id: str, text: str) -> None:
        """Run one exchange: persist the user turn, generate, persist the reply."""
        content = (text or "").strip()
        if not content:
            raise ValidationError("Message must not be empty")

        conversation = self._conversation(session_id)
        if conversation.state != ExchangeState.IDLE:
            logger.debug(
                "Ignoring submit for session %s: exchange in flight (%s)",
                session_id,
                conversation.state.value,
            )
            return

        # No await between the guard above and this transition.
        conversation.state = ExchangeState.SENDING_USER
        conversation.last_error = None
        try:
            await self._run_exchange(conversation, session_id, user_id, content)
        except ChatCoreError as exc:
            conversation.state = ExchangeState.FAILED
            conversation.last_error = exc
            logger.warning(
                "Exchange failed for session %s (%s): %s",
                session_id,
                exc.error_code,
                exc.message,
            )
            raise
        finally:
            conversation.state = ExchangeState.IDLE
            if (
                conversation.forgotten
                and self._conversations.get(session_id) is conversation
            ):
                del self._conversations[session_id]

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _conversation(self, session_id: str) -> _Conversation:
        conversation = self._conversations.get(session_id)
        if conversation is None:
            conversation = self._conversations[session_id] = _Conversation()
        return conversation

    async def _run_exchange(
        self,
        conversation: _Conversation,
        session_id: str,
        user_id: str,
        content: str,
    ) -> None:
        user_message = await self._persist(
            session_id, Sender.USER, content, user_id, stage="user"
        )
        conversation.insert(user_message)

        conversation.state = ExchangeState.AWAITING_REPLY
        history = [m for m in conversation.messages if m.sender != Sender.SYSTEM]
        reply = await self._generate(session_id, history)

        conversation.state = ExchangeState.PERSISTING_REPLY
        assistant_message = await self._persist(
            session_id,
            Sender.ASSISTANT,
            reply.content,
            user_id,
            context=reply.context,
            stage="reply",
        )
        conversation.insert(assistant_message)
        logger.debug(
            "Exchange complete for session %s (user=%s, assistant=%s)",
            session_id,
            user_message.id,
            assistant_message.id,
        )

    async def _persist(
        self,
        session_id: str,
        sender: Sender,
        content: str,
        user_id: str,
        *,
        stage: str,
        context: Optional[Sequence[ContextSnippet]] = None,
    ) -> Message:
        try:
            return await self._store.append_message(
                session_id, sender, content, user_id, context
            )
        except RemoteStoreError as exc:
            raise PersistError(
                f"Failed to save {sender.value.lower()} message: {exc.message}",
                details={
                    "session_id": session_id,
                    "stage": stage,
                    "status_code": exc.status_code,
                },
            ) from exc

    async def _generate(self, session_id: str, history: list[Message]):
        try:
            reply = await self._provider.generate(history, self._include_context)
        except ProviderError:
            raise
        except Exception as exc:
            raise ProviderError(
                f"Failed to generate AI response: {exc}",
                details={"session_id": session_id},
            ) from exc

        if reply is None or not reply.content or not reply.content.strip():
            raise ProviderError(
                "Response provider returned an empty reply",
                details={"session_id": session_id},
            )
        return reply
