# fitcoach/schemas/auth.py
from pydantic import ConfigDict, EmailStr, field_validator
from pydantic.alias_generators import to_camel
from sqlmodel import SQLModel, Field


def _strip_optional(v: str | None) -> str | None:
    if v is None:
        return v
    v = v.strip()
    return v or None


class SignupRequest(SQLModel):
    """
    Payload for POST /signup and POST /auth/register.

    `supabaseId` is sent when the browser already created the Supabase Auth
    user; otherwise the backend creates it from `password`.
    """

    model_config = ConfigDict(populate_by_name=True)

    email: EmailStr
    password: str | None = Field(default=None, min_length=6)
    first_name: str | None = Field(default=None, max_length=100)
    last_name: str | None = Field(default=None, max_length=100)
    username: str | None = Field(default=None, max_length=50)
    supabase_id: str | None = Field(default=None, alias="supabaseId")

    @field_validator("first_name", "last_name", "username", "supabase_id")
    @classmethod
    def normalize_optional(cls, v: str | None) -> str | None:
        return _strip_optional(v)


class LoginRequest(SQLModel):
    email: EmailStr
    password: str


class TokenRequest(SQLModel):
    """Body carrying a verification token or a Supabase session token."""

    token: str | None = None


class EmailRequest(SQLModel):
    email: EmailStr


class SendVerificationRequest(SQLModel):
    """POST /send-verification-email; userId is the Supabase id."""

    model_config = ConfigDict(populate_by_name=True)

    email: EmailStr
    user_id: str = Field(alias="userId")


class ResetPasswordRequest(SQLModel):
    model_config = ConfigDict(populate_by_name=True)

    token: str | None = None
    new_password: str | None = Field(default=None, alias="newPassword")


class MessageResponse(SQLModel):
    message: str


class CamelModel(SQLModel):
    """User projections the SPA reads from auth endpoints are camelCase on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class AuthUser(CamelModel):
    """
    Sanitized user projection returned by auth endpoints.

    Never includes verification or reset token fields.
    max_messages is None for unlimited tiers.
    """

    id: int
    email: str
    first_name: str | None = None
    last_name: str | None = None
    username: str
    subscription_status: str
    subscription_tier: str
    email_verified: bool
    message_count: int = 0
    max_messages: int | None = None


class SignupUser(CamelModel):
    email: str
    email_verified: bool = False


class SignupResponse(SQLModel):
    message: str
    user: SignupUser


class VerifyEmailUser(CamelModel):
    id: int
    email: str
    first_name: str | None = None
    last_name: str | None = None
    email_verified: bool = True


class VerifyEmailResponse(SQLModel):
    message: str
    user: VerifyEmailUser


class SupabaseVerifyResponse(SQLModel):
    verified: bool
    user: AuthUser


class LoginResponse(SQLModel):
    user: AuthUser
