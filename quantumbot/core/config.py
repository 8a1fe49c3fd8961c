"""Central config. Sab settings .env / environment se, startup pe sirf ek bar."""
from functools import lru_cache
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

load_dotenv()

DEFAULT_GEMINI_MODEL = "gemini-3-flash-preview"


class Settings(BaseSettings):
    """
    Process-wide configuration. Built once at startup and passed by reference
    into the token manager and the cookie policy. Instances are immutable.
    """

    model_config = SettingsConfigDict(extra="ignore", frozen=True)

    JWT_SECRET: str
    """Secret used to sign identity tokens. Required; startup fails when it is missing or blank."""

    COOKIE_SECRET: Optional[str] = None
    """Secret used to sign the auth cookie. Falls back to JWT_SECRET."""

    COOKIE_NAME: str = "auth_token"
    """Name of the cookie carrying the identity token."""

    COOKIE_DOMAIN: Optional[str] = None
    """Cookie domain when deployed under a known public hostname."""

    ENVIRONMENT: str = "development"
    """`production` switches on secure cookies, strict CORS and hidden stack traces."""

    ALLOWED_ORIGINS: str = "https://quantum-bot-zxdh.vercel.app"
    """Comma separated CORS allow-list, enforced in production."""

    DATABASE_URL: str = "sqlite:///quantumbot.db"

    GEMINI_API_KEY: Optional[str] = None
    GEMINI_MODEL_NAME: Optional[str] = None

    TOKEN_TTL: str = "7d"
    """Identity token lifetime, e.g. `7d`, `12h`, `3600`."""

    COMPLETION_TIMEOUT_SECONDS: float = 120.0
    LOG_LEVEL: str = "INFO"
    PORT: int = 5001

    @field_validator("JWT_SECRET")
    @classmethod
    def jwt_secret_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("JWT_SECRET must not be empty")
        return v

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT.strip().lower() == "production"

    @property
    def allowed_origins(self) -> List[str]:
        return [o.strip() for o in self.ALLOWED_ORIGINS.split(",") if o.strip()]

    @property
    def cookie_secret(self) -> str:
        return self.COOKIE_SECRET or self.JWT_SECRET

    @property
    def gemini_model(self) -> str:
        return (self.GEMINI_MODEL_NAME or "").strip() or DEFAULT_GEMINI_MODEL


@lru_cache
def get_settings() -> Settings:
    return Settings()
