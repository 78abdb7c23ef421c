# app/core/config.py
from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Centralized application settings loaded from environment.

    Required env vars (.env):
      - DATABASE_URL (Postgres connection string; sqlite:// works for local runs)
      - AUTH_JWT_SECRET (signing secret shared with the identity provider)

    Optional:
      - AUTH_JWT_AUDIENCE (verified only when set)
      - ENVIRONMENT ("development" exposes internal error details)
    """

    PROJECT_NAME: str = "Storefront API"
    API_V1_STR: str = "/api/v1"
    ENVIRONMENT: str = "production"
    LOG_LEVEL: str = "INFO"

    DATABASE_URL: str

    # JWT verification (backend-side)
    AUTH_JWT_SECRET: str
    AUTH_JWT_ALG: str = "HS256"
    AUTH_JWT_AUDIENCE: str | None = None
    AUTH_ROLE_CLAIM: str = "role"

    CORS_ORIGINS: list[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
        "http://localhost:5173",
    ]

    # Pricing policy
    TAX_RATE: float = 0.10
    SHIPPING_FEE: float = 0.0

    # Cart / fulfilment rules
    CART_MAX_LINE_QUANTITY: int = 100
    ESTIMATED_DELIVERY_DAYS: int = 5

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    @property
    def is_development(self) -> bool:
        return self.ENVIRONMENT.lower() == "development"


@lru_cache
def get_settings() -> Settings:
    """
    Cached settings loader.
    Ensures we don't re-parse .env on every import / request.
    """
    return Settings()
