"""Simulated response provider for running without model credentials.

Replies are chosen by keyword from the latest user turn; context snippets
imitate a two-source knowledge-base lookup.
"""

import asyncio
import logging
import random
from datetime import datetime, timezone
from typing import Sequence

from ragchat.errors import ProviderError
from ragchat.models import ContextSnippet, GeneratedReply, Message
from ragchat.providers.base import prompt_history

logger = logging.getLogger(__name__)


def _reply_for(text: str) -> str:
    lowered = text.lower()

    if "hello" in lowered or "hi" in lowered:
        return (
            "Hello! I'm a simulated assistant. I'm here to help you try out "
            "the RAG chat client. How can I assist you today?"
        )
    if "what" in lowered and "ai" in lowered:
        return (
            "Artificial Intelligence (AI) refers to machines programmed to "
            "perceive, reason, learn and act. Typical tasks include speech "
            "recognition, decision-making and language translation."
        )
    if "rag" in lowered:
        return (
            "RAG (Retrieval-Augmented Generation) retrieves relevant passages "
            "from a knowledge base before generating an answer. This client "
            "stores that retrieved context alongside each reply."
        )
    if "test" in lowered:
        return (
            "This is a simulated reply for testing. Your message was stored "
            "together with this response and its simulated context."
        )
    return (
        f'I understand you\'re asking about "{text}". This is a simulated '
        "reply; configure a remote provider to get real model answers."
    )


class SimulatedResponseProvider:
    """Keyword-driven stand-in for a real model."""

    def __init__(
        self,
        latency_min: float = 0.5,
        latency_max: float = 1.5,
        rng: random.Random | None = None,
    ) -> None:
        if latency_min < 0 or latency_max < latency_min:
            raise ValueError("Invalid simulated latency range")
        self._latency = (latency_min, latency_max)
        self._rng = rng or random.Random()

    async def generate(
        self, history: Sequence[Message], include_context: bool
    ) -> GeneratedReply:
        turns = prompt_history(history)
        if not turns:
            raise ProviderError("Cannot reply to an empty conversation")

        delay = self._rng.uniform(*self._latency)
        if delay > 0:
            await asyncio.sleep(delay)

        question = turns[-1].content
        context = self._context_for(question) if include_context else None
        logger.debug(
            "Simulated reply after %.2fs (history=%d, context=%s)",
            delay,
            len(turns),
            include_context,
        )
        return GeneratedReply(content=_reply_for(question), context=context)

    def _context_for(self, question: str) -> list[ContextSnippet]:
        now = datetime.now(timezone.utc)
        stamp = int(now.timestamp() * 1000)
        return [
            ContextSnippet(
                source_id=f"doc-{stamp}-1",
                snippet=(
                    f'Retrieved context for query: "{question[:50]}". '
                    "Simulates information from a knowledge base."
                ),
                metadata={
                    "source": "Mock Knowledge Base",
                    "document": "test_document.pdf",
                    "page": self._rng.randint(1, 100),
                    "confidence": round(self._rng.uniform(0.85, 0.99), 3),
                    "timestamp": now.isoformat(),
                    "relevanceScore": 0.90,
                },
            ),
            ContextSnippet(
                source_id=f"doc-{stamp}-2",
                snippet=(
                    "Additional context: a second retrieved passage related "
                    "to the query, demonstrating multi-source context."
                ),
                metadata={
                    "source": "Mock Database",
                    "document": "reference_guide.txt",
                    "confidence": round(self._rng.uniform(0.78, 0.88), 3),
                    "timestamp": now.isoformat(),
                    "relevanceScore": 0.75,
                },
            ),
        ]
