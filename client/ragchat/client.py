"""Chat client entry point with lifecycle management.

Usage::

    async with ChatClient.from_settings(settings) as client:
        await client.sessions.list("alice")
        session = await client.sessions.create("alice", "Trip")
        await client.conversations.submit(session.id, "alice", "hello")
        client.conversations.messages(session.id)
"""

from __future__ import annotations

import logging
from types import TracebackType
from typing import Optional

from ragchat.config import Settings, configure_logging, get_settings
from ragchat.core.conversation import ConversationController
from ragchat.core.registry import SessionRegistry
from ragchat.dependencies import build_remote_store, build_response_provider
from ragchat.models import PageRequest
from ragchat.providers.base import ResponseProvider
from ragchat.store.base import RemoteStore

logger = logging.getLogger(__name__)


class ChatClient:
    """Wires one session registry and one conversation controller to a store."""

    def __init__(
        self,
        store: RemoteStore,
        provider: ResponseProvider,
        *,
        pagination: PageRequest | None = None,
        include_context: bool = True,
    ) -> None:
        self.store = store
        self.provider = provider
        self.sessions = SessionRegistry(store)
        self.conversations = ConversationController(
            store,
            provider,
            pagination=pagination,
            include_context=include_context,
        )
        self.sessions.on_deleted(self.conversations.forget)

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "ChatClient":
        """Configure logging and build every dependency from settings."""
        settings = settings or get_settings()
        configure_logging(settings)
        client = cls(
            build_remote_store(settings),
            build_response_provider(settings),
            pagination=PageRequest(
                page=settings.history_page, size=settings.history_page_size
            ),
            include_context=settings.include_context,
        )
        logger.info(
            "%s client ready (store=%s, provider=%s)",
            settings.app_name,
            settings.remote_store,
            settings.response_provider,
        )
        return client

    async def close(self) -> None:
        """Release the store's connections."""
        await self.store.close()
        logger.info("Chat client shut down cleanly")

    async def __aenter__(self) -> "ChatClient":
        return self

    async def __aexit__(
        self,
        exc_type: Optional[type[BaseException]],
        exc: Optional[BaseException],
        tb: Optional[TracebackType],
    ) -> None:
        await self.close()
