"""In-memory mirror of a user's sessions, reconciled with the remote store.

The mirror only ever changes in two ways: replaced wholesale by ``list``,
or one entry inserted / replaced / removed by id with the object the store
returned. A failed store call leaves it exactly as it was.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

from ragchat.errors import FetchError, PersistError, RemoteStoreError, ValidationError
from ragchat.models import Session
from ragchat.store.base import RemoteStore

logger = logging.getLogger(__name__)

DEFAULT_TITLE = "New Chat"

DeletionListener = Callable[[str], None]


class SessionRegistry:
    """Ordered, most-recent-first mirror of the remote session list."""

    def __init__(self, store: RemoteStore) -> None:
        self._store = store
        self._mirror: list[Session] = []
        self._deletion_listeners: list[DeletionListener] = []

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    @property
    def sessions(self) -> list[Session]:
        """Snapshot of the mirror."""
        return list(self._mirror)

    def get(self, session_id: str) -> Optional[Session]:
        """Mirrored session with the given id, or None."""
        return next((s for s in self._mirror if s.id == session_id), None)

    def on_deleted(self, listener: DeletionListener) -> None:
        """Register a callback invoked with the id of each deleted session."""
        self._deletion_listeners.append(listener)

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    async def list(
        self, user_id: str, favorite: Optional[bool] = None
    ) -> list[Session]:
        """Fetch the user's sessions and replace the mirror with them."""
        try:
            sessions = await self._store.list_sessions(user_id, favorite)
        except RemoteStoreError as exc:
            logger.warning("Failed to load sessions for user %s: %s", user_id, exc)
            raise FetchError(
                f"Failed to load sessions: {exc.message}",
                details={"user_id": user_id, "status_code": exc.status_code},
            ) from exc

        self._mirror = list(sessions)
        logger.debug(
            "Loaded %d sessions for user %s (favorite=%s)",
            len(sessions),
            user_id,
            favorite,
        )
        return self.sessions

    async def create(self, user_id: str, title: str = DEFAULT_TITLE) -> Session:
        """Create a session remotely and put it at the head of the mirror."""
        try:
            session = await self._store.create_session(user_id, title)
        except RemoteStoreError as exc:
            raise self._persist_error("create session", exc) from exc

        self._mirror = [session, *self._mirror]
        logger.info("Created session %s for user %s", session.id, user_id)
        return session

    async def rename(self, session_id: str, new_title: str) -> Session:
        """Rename a session and apply the stored result to the mirror.

        Args:
            session_id: Session to rename.
            new_title: New title; surrounding whitespace is stripped.

        Returns:
            The session as stored remotely.

        Raises:
            ValidationError: If the title is blank. No store call is made.
            PersistError: If the store rejects the rename.
        """
        if not new_title or not new_title.strip():
            raise ValidationError("Session title must not be blank")
        try:
            session = await self._store.rename_session(session_id, new_title.strip())
        except RemoteStoreError as exc:
            raise self._persist_error("rename session", exc, session_id) from exc

        self._replace(session)
        return session

    async def set_favorite(self, session_id: str, favorite: bool) -> Session:
        """Flag or unflag a session as favorite.

        Args:
            session_id: Session to update.
            favorite: New favorite flag.

        Returns:
            The session as stored remotely.
        """
        try:
            session = await self._store.set_favorite(session_id, favorite)
        except RemoteStoreError as exc:
            raise self._persist_error("update favorite", exc, session_id) from exc

        self._replace(session)
        return session

    async def delete(self, session_id: str) -> None:
        """Delete remotely, drop from the mirror and notify listeners.

        A listener that raises is logged and skipped; the delete still counts
        as done and the remaining listeners run.
        """
        try:
            await self._store.delete_session(session_id)
        except RemoteStoreError as exc:
            raise self._persist_error("delete session", exc, session_id) from exc

        self._mirror = [s for s in self._mirror if s.id != session_id]
        logger.info("Deleted session %s", session_id)
        for listener in list(self._deletion_listeners):
            try:
                listener(session_id)
            except Exception:
                # The delete has already committed remotely.
                logger.exception(
                    "Deletion listener %r failed for session %s", listener, session_id
                )

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _replace(self, session: Session) -> None:
        if self.get(session.id) is None:
            logger.debug("Session %s not in mirror; ignoring update", session.id)
            return
        self._mirror = [session if s.id == session.id else s for s in self._mirror]

    @staticmethod
    def _persist_error(
        action: str, exc: RemoteStoreError, session_id: str | None = None
    ) -> PersistError:
        logger.warning("Failed to %s %s: %s", action, session_id or "", exc)
        return PersistError(
            f"Failed to {action}: {exc.message}",
            details={"session_id": session_id, "status_code": exc.status_code},
        )
