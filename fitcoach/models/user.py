# fitcoach/models/user.py
from datetime import datetime, timezone

from sqlmodel import SQLModel, Field

# subscription_status: inactive | active | past_due | cancelled
# subscription_tier:   free | premium | pro
SUBSCRIPTION_STATUSES = ("inactive", "active", "past_due", "cancelled")
SUBSCRIPTION_TIERS = ("free", "premium", "pro")


class User(SQLModel, table=True):
    """
    Canonical application profile.

    Identity:
      - id: internal serial key, owned by this backend
      - supabase_id: weak reference into Supabase auth.users; filled at
        signup or lazily linked by email on first authenticated request

    Verification:
      - email_verified is the only trusted verification signal. Supabase's
        own email_confirmed_at is mirrored best-effort and never read.
      - A non-null email_verification_token implies email_verified is False.

    This table is *not* responsible for password hashes. Supabase Auth
    stores the password in its own schema.
    """

    __tablename__ = "users"

    id: int | None = Field(default=None, primary_key=True)

    username: str = Field(unique=True, index=True)

    email: str = Field(
        unique=True,
        index=True,
        description="Natural join key when supabase_id linkage is absent",
    )

    supabase_id: str | None = Field(
        default=None,
        unique=True,
        index=True,
        description="Supabase auth.users.id, if linked",
    )

    first_name: str | None = None
    last_name: str | None = None
    phone: str | None = None

    # Billing
    subscription_status: str = Field(default="inactive", index=True)
    subscription_tier: str = Field(default="free")
    stripe_customer_id: str | None = Field(default=None, index=True)
    stripe_subscription_id: str | None = None

    # Daily chat counters (free tier limit)
    daily_message_count: int = Field(default=0, ge=0)
    last_message_date: str | None = Field(
        default=None,
        description="ISO date (UTC) of the last counted message",
    )

    # Email verification
    email_verified: bool = Field(default=False)
    email_verification_token: str | None = Field(default=None, index=True)

    # Password reset; expiry is checked at read time
    password_reset_token: str | None = Field(default=None, index=True)
    password_reset_token_expiry: datetime | None = None

    # Lifecycle
    is_blocked: bool = Field(default=False)
    deleted_at: datetime | None = None

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Creation timestamp (UTC)",
    )
