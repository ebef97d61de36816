# fitcoach/models/chat.py
from datetime import datetime, timezone

from sqlmodel import SQLModel, Field


class ChatMessage(SQLModel, table=True):
    """
    One turn of the AI coach conversation.

    role: "user" | "assistant"
    """

    __tablename__ = "chat_messages"

    id: int | None = Field(default=None, primary_key=True)

    user_id: int = Field(foreign_key="users.id", index=True)

    role: str = Field(max_length=16)
    content: str

    token_count: int = Field(default=0, ge=0)
    flagged: bool = Field(default=False)

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        index=True,
    )
