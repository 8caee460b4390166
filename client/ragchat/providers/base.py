"""Response provider capability.

A provider turns a conversation history into reply text plus optional
retrieval context. The controller only sees this protocol; which variant
runs is decided by configuration (see ``ragchat.dependencies``).
"""

from __future__ import annotations

from typing import Protocol, Sequence

from ragchat.models import GeneratedReply, Message, Sender


class ResponseProvider(Protocol):
    async def generate(
        self, history: Sequence[Message], include_context: bool
    ) -> GeneratedReply: ...


def prompt_history(history: Sequence[Message]) -> list[Message]:
    """Return the history a provider may show the model: no SYSTEM turns."""
    return [m for m in history if m.sender != Sender.SYSTEM]
