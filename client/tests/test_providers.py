"""Tests for the simulated and remote response providers."""

import random
from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest
from langchain_core.language_models.fake_chat_models import FakeListChatModel
from langchain_core.messages import AIMessage, HumanMessage, SystemMessage

from ragchat.errors import ProviderError
from ragchat.models import Message, Sender
from ragchat.providers import RemoteResponseProvider, SimulatedResponseProvider


def _msg(sender: Sender, content: str, idx: int = 0) -> Message:
    return Message(
        id=f"m{idx}",
        session_id="s1",
        sender=sender,
        content=content,
        created_at=datetime(2026, 1, 1, 0, 0, idx, tzinfo=timezone.utc),
    )


@pytest.fixture
def simulated() -> SimulatedResponseProvider:
    return SimulatedResponseProvider(0, 0, rng=random.Random(7))


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("question", "expected"),
    [
        ("hello there", "Hello!"),
        ("What is AI?", "Artificial Intelligence"),
        ("explain rag", "Retrieval-Augmented Generation"),
        ("run a test", "simulated reply for testing"),
        ("weather tomorrow", 'asking about "weather tomorrow"'),
    ],
)
async def test_simulated_reply_by_keyword(
    simulated: SimulatedResponseProvider, question: str, expected: str
) -> None:
    reply = await simulated.generate([_msg(Sender.USER, question)], False)

    assert expected in reply.content
    assert reply.context is None


@pytest.mark.asyncio
async def test_simulated_context_snippets(simulated: SimulatedResponseProvider) -> None:
    reply = await simulated.generate([_msg(Sender.USER, "explain rag")], True)

    assert len(reply.context) == 2
    first = reply.context[0]
    assert "explain rag" in first.snippet
    assert first.metadata["source"] == "Mock Knowledge Base"
    assert 1 <= first.metadata["page"] <= 100
    assert 0.85 <= first.metadata["confidence"] <= 0.99


@pytest.mark.asyncio
async def test_simulated_answers_latest_non_system_turn(
    simulated: SimulatedResponseProvider,
) -> None:
    history = [
        _msg(Sender.USER, "explain rag", 0),
        _msg(Sender.ASSISTANT, "RAG is ...", 1),
        _msg(Sender.USER, "weather tomorrow", 2),
        _msg(Sender.SYSTEM, "hello from the system", 3),
    ]

    reply = await simulated.generate(history, False)

    assert "weather tomorrow" in reply.content


@pytest.mark.asyncio
async def test_simulated_rejects_empty_history(
    simulated: SimulatedResponseProvider,
) -> None:
    with pytest.raises(ProviderError):
        await simulated.generate([_msg(Sender.SYSTEM, "only system")], True)


def test_simulated_rejects_bad_latency_range() -> None:
    with pytest.raises(ValueError):
        SimulatedResponseProvider(2.0, 1.0)


@pytest.mark.asyncio
async def test_remote_builds_prompt_without_system_turns() -> None:
    model = MagicMock()
    model.ainvoke = AsyncMock(return_value=AIMessage(content="model reply"))
    provider = RemoteResponseProvider(
        model, model_name="test-model", provider_name="Test", system_prompt="Be nice."
    )
    history = [
        _msg(Sender.SYSTEM, "internal note", 0),
        _msg(Sender.USER, "hello", 1),
        _msg(Sender.ASSISTANT, "hi", 2),
        _msg(Sender.USER, "how are you?", 3),
    ]

    reply = await provider.generate(history, include_context=False)

    sent = model.ainvoke.await_args.args[0]
    assert [type(m) for m in sent] == [
        SystemMessage,
        HumanMessage,
        AIMessage,
        HumanMessage,
    ]
    assert sent[0].content == "Be nice."
    assert [m.content for m in sent[1:]] == ["hello", "hi", "how are you?"]
    assert reply.content == "model reply"
    assert reply.context is None


@pytest.mark.asyncio
async def test_remote_with_fake_chat_model_and_context() -> None:
    provider = RemoteResponseProvider(
        FakeListChatModel(responses=["  from the fake model  "]),
        model_name="fake",
        provider_name="Fake",
    )

    reply = await provider.generate([_msg(Sender.USER, "question")], True)

    assert reply.content == "from the fake model"
    assert len(reply.context) == 1
    assert reply.context[0].metadata["model"] == "fake"
    assert reply.context[0].metadata["provider"] == "Fake"
    assert '"question"' in reply.context[0].snippet


@pytest.mark.asyncio
async def test_remote_flattens_content_parts() -> None:
    model = MagicMock()
    model.ainvoke = AsyncMock(
        return_value=AIMessage(
            content=[{"type": "text", "text": "part one, "}, "part two"]
        )
    )
    provider = RemoteResponseProvider(model, model_name="m", provider_name="P")

    reply = await provider.generate([_msg(Sender.USER, "q")], False)

    assert reply.content == "part one, part two"


@pytest.mark.asyncio
async def test_remote_call_failure_raises_provider_error() -> None:
    model = MagicMock()
    model.ainvoke = AsyncMock(side_effect=RuntimeError("quota exceeded"))
    provider = RemoteResponseProvider(model, model_name="m", provider_name="P")

    with pytest.raises(ProviderError) as exc_info:
        await provider.generate([_msg(Sender.USER, "q")], False)

    assert "quota exceeded" in exc_info.value.message
    assert exc_info.value.details["provider"] == "P"


@pytest.mark.asyncio
async def test_remote_empty_reply_raises_provider_error() -> None:
    model = MagicMock()
    model.ainvoke = AsyncMock(return_value=AIMessage(content="   "))
    provider = RemoteResponseProvider(model, model_name="m", provider_name="P")

    with pytest.raises(ProviderError):
        await provider.generate([_msg(Sender.USER, "q")], False)
