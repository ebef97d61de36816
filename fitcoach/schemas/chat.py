# fitcoach/schemas/chat.py
from datetime import datetime
from typing import Literal

from pydantic import field_validator
from sqlmodel import SQLModel, Field


class ChatMessageCreate(SQLModel):
    message: str = Field(max_length=4000)

    @field_validator("message")
    @classmethod
    def not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("message cannot be empty")
        return v


class ChatMessageRead(SQLModel):
    id: int
    user_id: int
    role: Literal["user", "assistant"]
    content: str
    created_at: datetime


class ChatReply(SQLModel):
    message: ChatMessageRead
