"""Configuration settings for the promptlib backend."""

from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    # Supabase
    supabase_url: str
    # New key system (preferred)
    supabase_secret_key: str | None = None
    # Legacy key, still accepted
    supabase_service_role_key: str | None = None

    # Access tokens are issued by Supabase Auth and signed with the project's JWT secret
    supabase_jwt_secret: str  # Required - no default for security
    jwt_algorithm: str = "HS256"
    jwt_audience: str = "authenticated"

    # App
    debug: bool = False
    # CORS: the web client and the browser extension
    cors_origins: list[str] = [
        "http://localhost:5173",
        "http://127.0.0.1:5173",
    ]

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"  # Ignore extra env vars not in model


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
