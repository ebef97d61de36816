# fitcoach/schemas/user.py
from datetime import datetime
from typing import Literal

from pydantic import ConfigDict, ValidationInfo, field_validator
from sqlmodel import SQLModel, Field

SubscriptionStatus = Literal["inactive", "active", "past_due", "cancelled"]
SubscriptionTier = Literal["free", "premium", "pro"]


class UserRead(SQLModel):
    """
    Profile returned to the owning user.

    Token fields and Stripe ids are not exposed.
    """

    id: int
    username: str
    email: str
    first_name: str | None = None
    last_name: str | None = None
    phone: str | None = None
    subscription_status: SubscriptionStatus
    subscription_tier: SubscriptionTier
    email_verified: bool
    daily_message_count: int
    created_at: datetime


class UserUpdate(SQLModel):
    """
    Partial profile update for authenticated users.
    Email is not editable here; it is the link key to Supabase.
    """

    model_config = ConfigDict(extra="forbid")

    first_name: str | None = Field(default=None, max_length=100)
    last_name: str | None = Field(default=None, max_length=100)
    phone: str | None = Field(default=None, max_length=30)
    username: str | None = Field(default=None, min_length=3, max_length=50)

    @field_validator("first_name", "last_name", "phone", "username")
    @classmethod
    def normalize(cls, v: str | None, info: ValidationInfo) -> str | None:
        if v is None:
            # username is NOT NULL; the other fields may be cleared
            if info.field_name == "username":
                raise ValueError("username cannot be null")
            return v
        v = v.strip()
        if not v:
            raise ValueError("value cannot be empty")
        return v
