"""Message models shared by the store, providers and controller."""

from datetime import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class Sender(str, Enum):
    """Message author."""

    USER = "USER"
    ASSISTANT = "ASSISTANT"
    SYSTEM = "SYSTEM"


class WireModel(BaseModel):
    """Base model speaking the storage service's camelCase JSON."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class ContextSnippet(WireModel):
    """Retrieval annotation attached to an assistant reply."""

    source_id: str
    snippet: str
    metadata: dict[str, Any] = Field(default_factory=dict)


class Message(WireModel):
    """Persisted chat message. Immutable once the store returns it."""

    id: str
    session_id: str
    sender: Sender
    content: str
    user_id: Optional[str] = None
    context: Optional[list[ContextSnippet]] = None
    created_at: datetime

    @property
    def sort_key(self) -> tuple[datetime, str]:
        return (self.created_at, self.id)


class MessagePage(WireModel):
    """One page of a session's history."""

    content: list[Message] = Field(default_factory=list)
    page: int = 0
    size: int = 0
    total_elements: int = 0
    total_pages: int = 0
    last: bool = True


class PageRequest(BaseModel):
    """History pagination options: zero-based page index and page size."""

    page: int = Field(default=0, ge=0)
    size: int = Field(default=50, ge=1, le=100)


class GeneratedReply(BaseModel):
    """Output of a response provider."""

    content: str
    context: Optional[list[ContextSnippet]] = None
