"""Chat client core: session mirror and conversation orchestration."""

from .client import ChatClient
from .core import ConversationController, ExchangeState, SessionRegistry
from .errors import (
    ChatCoreError,
    FetchError,
    PersistError,
    ProviderError,
    RemoteStoreError,
    ValidationError,
)

__all__ = [
    "ChatClient",
    "ChatCoreError",
    "ConversationController",
    "ExchangeState",
    "FetchError",
    "PersistError",
    "ProviderError",
    "RemoteStoreError",
    "SessionRegistry",
    "ValidationError",
]
