"""
Remote store capability. The core depends on this protocol, never on a
concrete transport, so the HTTP client, the in-memory store and test fakes
are interchangeable.

Implementations raise ``RemoteStoreError`` for every failure they can
attribute to the store (unreachable, error status, unreadable payload).
"""

from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ragchat.models import ContextSnippet, Message, MessagePage, Sender, Session


class RemoteStore(Protocol):
    async def list_sessions(
        self, user_id: str, favorite: Optional[bool] = None
    ) -> list[Session]: ...

    async def create_session(self, user_id: str, title: str) -> Session: ...

    async def rename_session(self, session_id: str, title: str) -> Session: ...

    async def set_favorite(self, session_id: str, favorite: bool) -> Session: ...

    async def delete_session(self, session_id: str) -> None: ...

    async def list_messages(
        self, session_id: str, page: int, size: int
    ) -> MessagePage: ...

    async def append_message(
        self,
        session_id: str,
        sender: Sender,
        content: str,
        user_id: str,
        context: Optional[Sequence[ContextSnippet]] = None,
    ) -> Message: ...

    async def close(self) -> None: ...
