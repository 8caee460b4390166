"""Remote store capability and its implementations."""

from .base import RemoteStore
from .http_store import HttpRemoteStore
from .memory_store import InMemoryRemoteStore

__all__ = ["RemoteStore", "HttpRemoteStore", "InMemoryRemoteStore"]
