"""Session mirror and conversation orchestration."""

from .conversation import ConversationController, ExchangeState
from .registry import SessionRegistry

__all__ = ["ConversationController", "ExchangeState", "SessionRegistry"]
