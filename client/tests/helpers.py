"""Test doubles shared by the chat client test modules."""

import asyncio
from collections.abc import Sequence
from datetime import datetime, timedelta, timezone

from ragchat.models import ContextSnippet, GeneratedReply, Message


class StepClock:
    """Deterministic clock advancing one second per reading."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2026, 1, 1, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        self.now += timedelta(seconds=1)
        return self.now


class ScriptedProvider:
    """Response provider returning canned replies or raising canned errors."""

    def __init__(self, *outcomes: GeneratedReply | Exception) -> None:
        self._outcomes = list(outcomes)
        self.calls: list[tuple[list[Message], bool]] = []

    async def generate(
        self, history: Sequence[Message], include_context: bool
    ) -> GeneratedReply:
        self.calls.append((list(history), include_context))
        outcome = (
            self._outcomes.pop(0)
            if self._outcomes
            else GeneratedReply(content="ok", context=[])
        )
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


class GatedProvider(ScriptedProvider):
    """Scripted provider that blocks until ``release()`` is called."""

    def __init__(self, *outcomes: GeneratedReply | Exception) -> None:
        super().__init__(*outcomes)
        self.started = asyncio.Event()
        self._gate = asyncio.Event()

    def release(self) -> None:
        self._gate.set()

    async def generate(
        self, history: Sequence[Message], include_context: bool
    ) -> GeneratedReply:
        self.started.set()
        await self._gate.wait()
        return await super().generate(history, include_context)


def snippet(source_id: str = "doc-1") -> ContextSnippet:
    return ContextSnippet(
        source_id=source_id,
        snippet="retrieved passage",
        metadata={"source": "Knowledge Base", "nested": {"page": 3}},
    )
