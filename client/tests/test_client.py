"""Tests for client wiring and dependency factories."""

from pathlib import Path

import pytest
import yaml

from ragchat import ChatClient
from ragchat.config import Settings
from ragchat.dependencies import (
    build_remote_store,
    build_response_provider,
    load_system_prompt,
)
from ragchat.models import GeneratedReply, Sender
from ragchat.providers import RemoteResponseProvider, SimulatedResponseProvider
from ragchat.providers.remote import DEFAULT_SYSTEM_PROMPT
from ragchat.store import HttpRemoteStore, InMemoryRemoteStore
from tests.helpers import ScriptedProvider


def _settings(**overrides) -> Settings:
    return Settings(_env_file=None, **overrides)


@pytest.mark.asyncio
async def test_full_round_trip_through_client(store: InMemoryRemoteStore) -> None:
    provider = ScriptedProvider(GeneratedReply(content="hi there", context=[]))
    async with ChatClient(store, provider) as client:
        session = await client.sessions.create("alice", "Trip")
        await client.conversations.submit(session.id, "alice", "hello")

        reloaded = await client.conversations.load_history(session.id)

    assert [(m.sender, m.content) for m in reloaded] == [
        (Sender.USER, "hello"),
        (Sender.ASSISTANT, "hi there"),
    ]


@pytest.mark.asyncio
async def test_deleting_session_drops_its_conversation(
    store: InMemoryRemoteStore,
) -> None:
    client = ChatClient(store, ScriptedProvider())
    session = await client.sessions.create("alice", "Trip")
    await client.conversations.submit(session.id, "alice", "hello")
    cleared: list[str] = []
    client.sessions.on_deleted(cleared.append)

    await client.sessions.delete(session.id)

    assert client.conversations.messages(session.id) == []
    assert client.sessions.sessions == []
    assert cleared == [session.id]


@pytest.mark.asyncio
async def test_from_settings_builds_offline_client() -> None:
    settings = _settings(
        remote_store="memory",
        response_provider="simulated",
        simulated_latency_min=0,
        simulated_latency_max=0,
        history_page_size=10,
        include_context=True,
    )
    async with ChatClient.from_settings(settings) as client:
        assert isinstance(client.store, InMemoryRemoteStore)
        session = await client.sessions.create("alice")
        await client.conversations.submit(session.id, "alice", "what is rag?")

        messages = client.conversations.messages(session.id)

    assert len(messages) == 2
    assert "Retrieval-Augmented Generation" in messages[1].content
    assert len(messages[1].context) == 2


def test_build_http_store() -> None:
    store = build_remote_store(
        _settings(remote_store="http", storage_api_url="http://storage.test")
    )
    assert isinstance(store, HttpRemoteStore)


def test_build_simulated_provider() -> None:
    provider = build_response_provider(_settings(response_provider="simulated"))
    assert isinstance(provider, SimulatedResponseProvider)


@pytest.mark.parametrize("name", ["openai", "gemini", "groq"])
def test_remote_provider_requires_api_key(name: str) -> None:
    with pytest.raises(RuntimeError):
        build_response_provider(
            _settings(
                response_provider=name,
                openai_api_key="",
                google_api_key="",
                groq_api_key="",
            )
        )


def test_build_groq_provider() -> None:
    provider = build_response_provider(
        _settings(response_provider="groq", groq_api_key="gsk-test")
    )
    assert isinstance(provider, RemoteResponseProvider)


def test_build_openai_provider() -> None:
    settings = _settings(response_provider="openai", openai_api_key="sk-test")

    provider = build_response_provider(settings)

    assert isinstance(provider, RemoteResponseProvider)
    assert settings.openai_model == "gpt-4o-mini"
    assert provider._model.model_name == "gpt-4o-mini"
    assert provider._provider_name == "OpenAI"


def test_default_system_prompt() -> None:
    assert load_system_prompt() == DEFAULT_SYSTEM_PROMPT


def test_system_prompt_from_persona_file(tmp_path: Path) -> None:
    persona_file = tmp_path / "persona.yaml"
    persona_file.write_text("system_prompt: You answer in haiku.\n", encoding="utf-8")

    assert load_system_prompt(persona_file) == "You answer in haiku."


def test_persona_without_prompt_falls_back(tmp_path: Path) -> None:
    persona_file = tmp_path / "persona.yaml"
    persona_file.write_text("name: Assistant\n", encoding="utf-8")

    assert load_system_prompt(persona_file) == DEFAULT_SYSTEM_PROMPT


def test_persona_must_be_a_mapping(tmp_path: Path) -> None:
    persona_file = tmp_path / "persona.yaml"
    persona_file.write_text("- just\n- a list\n", encoding="utf-8")

    with pytest.raises(yaml.YAMLError):
        load_system_prompt(persona_file)


def test_missing_persona_file(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_system_prompt(tmp_path / "absent.yaml")
