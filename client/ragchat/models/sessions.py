"""Session models for conversation management."""

from datetime import datetime
from typing import Optional

from ragchat.models.messages import WireModel


class Session(WireModel):
    """Conversation session metadata as stored remotely."""

    id: str
    user_id: str
    title: Optional[str] = None
    favorite: bool = False
    created_at: Optional[datetime] = None
    updated_at: datetime
