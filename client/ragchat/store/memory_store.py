"""In-memory remote store, one record per session with embedded messages.

Record shape::

    {
        "session": Session(...),
        "messages": [Message(...), ...]   # kept in (created_at, id) order
    }

Mirrors the storage service's observable behaviour closely enough to run
the client offline and to drive the core in tests: sessions list most
recently updated first, every session mutation advances ``updated_at``,
USER messages must come from the session owner and deleting a session
deletes its messages.
"""

from __future__ import annotations

import asyncio
import logging
import math
from datetime import datetime, timezone
from typing import Any, Callable, Optional, Sequence
from uuid import uuid4

from ragchat.errors import RemoteStoreError
from ragchat.models import ContextSnippet, Message, MessagePage, Sender, Session

logger = logging.getLogger(__name__)

MAX_PAGE_SIZE = 100


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class InMemoryRemoteStore:
    """Dict-backed store honouring the remote store contract."""

    def __init__(self, clock: Callable[[], datetime] = _utcnow) -> None:
        self._clock = clock
        self._records: dict[str, dict[str, Any]] = {}
        self._lock = asyncio.Lock()

    async def close(self) -> None:
        self._records.clear()

    # ------------------------------------------------------------------
    # Sessions
    # ------------------------------------------------------------------

    async def list_sessions(
        self, user_id: str, favorite: Optional[bool] = None
    ) -> list[Session]:
        sessions = [
            rec["session"]
            for rec in self._records.values()
            if rec["session"].user_id == user_id
            and (favorite is None or rec["session"].favorite == favorite)
        ]
        sessions.sort(key=lambda s: s.updated_at, reverse=True)
        return sessions

    async def create_session(self, user_id: str, title: str) -> Session:
        if not user_id or not user_id.strip():
            raise RemoteStoreError("userId: must not be blank", status_code=400)
        async with self._lock:
            now = self._clock()
            session = Session(
                id=str(uuid4()),
                user_id=user_id,
                title=title,
                favorite=False,
                created_at=now,
                updated_at=now,
            )
            self._records[session.id] = {"session": session, "messages": []}
        logger.debug("Created session %s for user %s", session.id, user_id)
        return session

    async def rename_session(self, session_id: str, title: str) -> Session:
        return await self._update_session(session_id, title=title)

    async def set_favorite(self, session_id: str, favorite: bool) -> Session:
        return await self._update_session(session_id, favorite=favorite)

    async def delete_session(self, session_id: str) -> None:
        async with self._lock:
            self._get_record(session_id)
            del self._records[session_id]
        logger.debug("Deleted session %s and its messages", session_id)

    # ------------------------------------------------------------------
    # Messages
    # ------------------------------------------------------------------

    async def list_messages(
        self, session_id: str, page: int, size: int
    ) -> MessagePage:
        if page < 0 or size < 1:
            raise RemoteStoreError("Invalid page request", status_code=400)
        size = min(size, MAX_PAGE_SIZE)
        messages = self._get_record(session_id)["messages"]
        start = page * size
        content = messages[start : start + size]
        total_pages = math.ceil(len(messages) / size)
        return MessagePage(
            content=content,
            page=page,
            size=size,
            total_elements=len(messages),
            total_pages=total_pages,
            last=page >= total_pages - 1,
        )

    async def append_message(
        self,
        session_id: str,
        sender: Sender,
        content: str,
        user_id: str,
        context: Optional[Sequence[ContextSnippet]] = None,
    ) -> Message:
        if not content or not content.strip():
            raise RemoteStoreError("content: must not be blank", status_code=400)
        async with self._lock:
            record = self._get_record(session_id)
            if sender == Sender.USER and record["session"].user_id != user_id:
                raise RemoteStoreError(
                    "User ID does not match session owner", status_code=404
                )
            message = Message(
                id=str(uuid4()),
                session_id=session_id,
                sender=sender,
                content=content,
                user_id=user_id if sender == Sender.USER else None,
                context=list(context) if context is not None else None,
                created_at=self._clock(),
            )
            record["messages"].append(message)
            record["messages"].sort(key=lambda m: m.sort_key)
        return message

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _get_record(self, session_id: str) -> dict[str, Any]:
        record = self._records.get(session_id)
        if record is None:
            raise RemoteStoreError(
                f"Session not found: {session_id}", status_code=404
            )
        return record

    async def _update_session(self, session_id: str, **changes: Any) -> Session:
        async with self._lock:
            record = self._get_record(session_id)
            current: Session = record["session"]
            # updated_at never moves backwards, even with a skewed clock
            updated_at = max(self._clock(), current.updated_at)
            updated = current.model_copy(
                update={**changes, "updated_at": updated_at}
            )
            record["session"] = updated
        return updated
