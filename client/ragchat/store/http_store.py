"""HTTP client for the chat storage service.

Talks to the ``/api/v1/sessions`` REST API with API-key authentication.
Every transport failure or non-2xx response is raised as a
``RemoteStoreError`` carrying the status code and the service's error
message, so callers never see raw ``httpx`` exceptions.
"""

from __future__ import annotations

import logging
from typing import Any, Optional, Sequence

import httpx
from pydantic import ValidationError as PydanticValidationError

from ragchat.errors import RemoteStoreError
from ragchat.models import ContextSnippet, Message, MessagePage, Sender, Session

logger = logging.getLogger(__name__)

SESSIONS_PATH = "/api/v1/sessions"
API_KEY_HEADER = "X-API-KEY"


class HttpRemoteStore:
    """Remote store backed by the storage service REST API."""

    def __init__(
        self,
        base_url: str,
        api_key: str,
        *,
        timeout: float = 30.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        # An injected client belongs to the caller and must carry its own base_url.
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout,
        )
        self._headers = {
            "Content-Type": "application/json",
            API_KEY_HEADER: api_key,
        }
        logger.info(
            "HttpRemoteStore initialized (base_url=%s)", self._client.base_url
        )

    async def close(self) -> None:
        """Close the HTTP client if this store created it."""
        if self._owns_client:
            await self._client.aclose()
        logger.info("HttpRemoteStore closed")

    # ------------------------------------------------------------------
    # Sessions
    # ------------------------------------------------------------------

    async def list_sessions(
        self, user_id: str, favorite: Optional[bool] = None
    ) -> list[Session]:
        params: dict[str, Any] = {"userId": user_id}
        if favorite is not None:
            params["favorite"] = "true" if favorite else "false"
        data = await self._request("GET", SESSIONS_PATH, params=params)
        return self._parse_list(Session, data)

    async def create_session(self, user_id: str, title: str) -> Session:
        data = await self._request(
            "POST", SESSIONS_PATH, json={"userId": user_id, "title": title}
        )
        return self._parse(Session, data)

    async def rename_session(self, session_id: str, title: str) -> Session:
        data = await self._request(
            "PATCH", f"{SESSIONS_PATH}/{session_id}/rename", json={"title": title}
        )
        return self._parse(Session, data)

    async def set_favorite(self, session_id: str, favorite: bool) -> Session:
        data = await self._request(
            "PATCH",
            f"{SESSIONS_PATH}/{session_id}/favorite",
            json={"favorite": favorite},
        )
        return self._parse(Session, data)

    async def delete_session(self, session_id: str) -> None:
        await self._request("DELETE", f"{SESSIONS_PATH}/{session_id}")

    # ------------------------------------------------------------------
    # Messages
    # ------------------------------------------------------------------

    async def list_messages(
        self, session_id: str, page: int, size: int
    ) -> MessagePage:
        data = await self._request(
            "GET",
            f"{SESSIONS_PATH}/{session_id}/messages",
            params={"page": page, "size": size},
        )
        return self._parse(MessagePage, data)

    async def append_message(
        self,
        session_id: str,
        sender: Sender,
        content: str,
        user_id: str,
        context: Optional[Sequence[ContextSnippet]] = None,
    ) -> Message:
        payload = {
            "sender": sender.value,
            "content": content,
            "userId": user_id,
            "context": (
                [item.to_wire() for item in context] if context is not None else None
            ),
        }
        data = await self._request(
            "POST", f"{SESSIONS_PATH}/{session_id}/messages", json=payload
        )
        return self._parse(Message, data)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        try:
            response = await self._client.request(
                method, path, headers=self._headers, **kwargs
            )
        except httpx.HTTPError as exc:
            logger.warning("%s %s failed: %s", method, path, exc)
            raise RemoteStoreError(f"Storage service unreachable: {exc}") from exc

        if response.is_error:
            message = _error_message(response)
            logger.warning(
                "%s %s returned %d: %s", method, path, response.status_code, message
            )
            raise RemoteStoreError(message, status_code=response.status_code)

        logger.debug("%s %s -> %d", method, path, response.status_code)
        if response.status_code == 204 or not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise RemoteStoreError(
                f"Invalid JSON from storage service: {exc}",
                status_code=response.status_code,
            ) from exc

    @staticmethod
    def _parse(model, data: Any):
        try:
            return model.model_validate(data)
        except PydanticValidationError as exc:
            raise RemoteStoreError(
                f"Unexpected {model.__name__} payload: {exc}"
            ) from exc

    @classmethod
    def _parse_list(cls, model, data: Any) -> list:
        if not isinstance(data, list):
            raise RemoteStoreError(f"Expected a list of {model.__name__}")
        return [cls._parse(model, item) for item in data]


def _error_message(response: httpx.Response) -> str:
    """Extract ``message`` from the service's error body, if any."""
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return f"Storage service error: {response.status_code} {response.reason_phrase}"
