# fitcoach/schemas/billing.py
from typing import Literal

from sqlmodel import SQLModel

PaidTier = Literal["premium", "pro"]


class CheckoutRequest(SQLModel):
    tier: PaidTier


class CheckoutResponse(SQLModel):
    session_id: str
    url: str | None = None


class WebhookAck(SQLModel):
    received: bool = True
