"""Remote response provider backed by a LangChain chat model.

Any ``BaseChatModel`` works; ``ragchat.dependencies`` builds Gemini via
``langchain-google-genai``, and OpenAI or Groq's OpenAI-compatible endpoint
via ``langchain-openai``.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Sequence

from langchain_core.language_models.chat_models import BaseChatModel
from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage

from ragchat.errors import ProviderError
from ragchat.models import ContextSnippet, GeneratedReply, Message, Sender
from ragchat.providers.base import prompt_history

logger = logging.getLogger(__name__)

DEFAULT_SYSTEM_PROMPT = (
    "You are a helpful AI assistant. "
    "Provide clear, concise, and accurate responses."
)


def _to_langchain(message: Message) -> BaseMessage:
    if message.sender == Sender.USER:
        return HumanMessage(content=message.content)
    return AIMessage(content=message.content)


def _content_text(content: Any) -> str:
    """Flatten a chat model's content (plain string or list of parts)."""
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts = []
        for part in content:
            if isinstance(part, str):
                parts.append(part)
            elif isinstance(part, dict) and part.get("type") == "text":
                parts.append(str(part.get("text", "")))
        return "".join(parts)
    return ""


class RemoteResponseProvider:
    """Generates replies with a real model."""

    def __init__(
        self,
        model: BaseChatModel,
        *,
        model_name: str,
        provider_name: str,
        system_prompt: str = DEFAULT_SYSTEM_PROMPT,
    ) -> None:
        self._model = model
        self._model_name = model_name
        self._provider_name = provider_name
        self._system_prompt = system_prompt
        logger.info(
            "RemoteResponseProvider initialised with provider=%s model=%s",
            provider_name,
            model_name,
        )

    async def generate(
        self, history: Sequence[Message], include_context: bool
    ) -> GeneratedReply:
        turns = prompt_history(history)
        if not turns:
            raise ProviderError("Cannot reply to an empty conversation")

        messages = self._build_messages(turns)
        try:
            response = await self._model.ainvoke(messages)
        except Exception as exc:
            logger.warning("%s call failed: %s", self._provider_name, exc)
            raise ProviderError(
                f"Failed to generate AI response: {exc}",
                details={"provider": self._provider_name},
            ) from exc

        text = _content_text(getattr(response, "content", "")).strip()
        if not text:
            raise ProviderError(
                "Model returned an empty reply",
                details={"provider": self._provider_name},
            )

        context = self._context_for(turns[-1].content) if include_context else None
        return GeneratedReply(content=text, context=context)

    def _build_messages(self, turns: Sequence[Message]) -> list[BaseMessage]:
        messages: list[BaseMessage] = [SystemMessage(content=self._system_prompt)]
        messages.extend(_to_langchain(m) for m in turns)
        return messages

    def _context_for(self, question: str) -> list[ContextSnippet]:
        now = datetime.now(timezone.utc)
        return [
            ContextSnippet(
                source_id=f"doc-{int(now.timestamp() * 1000)}",
                snippet=f'Context retrieved for: "{question[:50]}"',
                metadata={
                    "source": "Knowledge Base",
                    "confidence": 0.92,
                    "timestamp": now.isoformat(),
                    "model": self._model_name,
                    "provider": self._provider_name,
                },
            )
        ]
