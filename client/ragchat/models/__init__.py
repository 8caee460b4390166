"""Data models for sessions, messages and provider replies."""

from .messages import (
    ContextSnippet,
    GeneratedReply,
    Message,
    MessagePage,
    PageRequest,
    Sender,
)
from .sessions import Session

__all__ = [
    "ContextSnippet",
    "GeneratedReply",
    "Message",
    "MessagePage",
    "PageRequest",
    "Sender",
    "Session",
]
