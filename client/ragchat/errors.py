"""Typed errors raised by the chat client core."""

from typing import Any, Dict, Optional


class ChatCoreError(Exception):
    """Base exception for the chat client core."""

    def __init__(
        self,
        message: str,
        error_code: str = "INTERNAL_ERROR",
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        super().__init__(self.message)


class ValidationError(ChatCoreError):
    """Raised when input is rejected before any network call."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, "VALIDATION_ERROR", details)


class FetchError(ChatCoreError):
    """Raised when sessions or message history cannot be retrieved."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, "FETCH_ERROR", details)


class PersistError(ChatCoreError):
    """Raised when a write to the remote store fails."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, "PERSIST_ERROR", details)


class ProviderError(ChatCoreError):
    """Raised when a response provider fails or returns unusable output."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, "PROVIDER_ERROR", details)


class RemoteStoreError(ChatCoreError):
    """Raised by remote store implementations."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.status_code = status_code
        super().__init__(message, "REMOTE_STORE_ERROR", details)

    @property
    def is_not_found(self) -> bool:
        return self.status_code == 404
