"""Shared test fixtures for the chat client core."""

from collections.abc import AsyncGenerator

import pytest
import pytest_asyncio

from ragchat.core import ConversationController, SessionRegistry
from ragchat.models import GeneratedReply
from ragchat.store import InMemoryRemoteStore
from tests.helpers import ScriptedProvider, StepClock


@pytest.fixture
def clock() -> StepClock:
    return StepClock()


@pytest_asyncio.fixture
async def store(clock: StepClock) -> AsyncGenerator[InMemoryRemoteStore, None]:
    """In-memory remote store with a deterministic clock."""
    store = InMemoryRemoteStore(clock=clock)
    yield store
    await store.close()


@pytest.fixture
def registry(store: InMemoryRemoteStore) -> SessionRegistry:
    return SessionRegistry(store)


@pytest.fixture
def provider() -> ScriptedProvider:
    return ScriptedProvider(GeneratedReply(content="hi there", context=[]))


@pytest.fixture
def controller(
    store: InMemoryRemoteStore, provider: ScriptedProvider
) -> ConversationController:
    return ConversationController(store, provider)
