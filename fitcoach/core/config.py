# fitcoach/core/config.py
from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Centralized application settings loaded from environment.

    Required env vars (.env):
      - SUPABASE_URL
      - SUPABASE_KEY (anon key)
      - DATABASE_URL (Postgres connection string)
      - SUPABASE_JWT_SECRET (JWT signing secret from Supabase project settings)

    Optional:
      - SUPABASE_SERVICE_ROLE_KEY (admin Auth operations: mirror, link, reset)
      - RESEND_API_KEY (transactional email)
      - STRIPE_SECRET_KEY / STRIPE_WEBHOOK_SECRET (billing)
      - OPENAI_API_KEY (AI coach replies)
      - PUBLIC_BASE_URL (override for links in verification emails)
    """

    PROJECT_NAME: str = "FitCoach Backend"
    API_PREFIX: str = "/api"
    LOG_LEVEL: str = "INFO"

    # Supabase / DB config
    SUPABASE_URL: str
    SUPABASE_KEY: str
    DATABASE_URL: str

    # JWT verification (backend-side)
    SUPABASE_JWT_SECRET: str
    SUPABASE_JWT_ALG: str = "HS256"

    # Service role key bypasses RLS (backend only)
    SUPABASE_SERVICE_ROLE_KEY: str | None = None

    # Email (Resend)
    RESEND_API_KEY: str | None = None
    EMAIL_FROM_ADDRESS: str = "no-reply@fitlyai.com"
    EMAIL_FROM_NAME: str = "FitlyAI"

    # Link building
    PUBLIC_BASE_URL: str | None = None
    FRONTEND_URL: str = "https://www.fitlyai.com"
    PASSWORD_RESET_TTL_MINUTES: int = 60

    # Billing
    STRIPE_SECRET_KEY: str | None = None
    STRIPE_WEBHOOK_SECRET: str | None = None

    # AI coach
    OPENAI_API_KEY: str | None = None
    OPENAI_MODEL: str = "gpt-4o"
    FREE_DAILY_MESSAGE_LIMIT: int = 10

    CORS_ORIGINS: list[str] = [
        "http://localhost:3000",
        "http://localhost:5000",
        "http://127.0.0.1:5000",
        "https://www.fitlyai.com",
    ]

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


@lru_cache
def get_settings() -> Settings:
    """
    Cached settings loader.
    Ensures we don't re-parse .env on every import / request.
    """
    return Settings()
