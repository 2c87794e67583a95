from functools import lru_cache
from typing import Literal

from pydantic import AliasChoices, Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Pydantic Settings automatically reads env vars matching field names (case-insensitive).
    In development, it also reads from .env file if present.
    In production, set environment variables directly (Docker, k8s, etc.).
    """

    # Supabase project URL, e.g. https://<project>.supabase.co
    supabase_url: str = Field(validation_alias=AliasChoices("SUPABASE_URL", "supabase_url"))

    # The service role key bypasses RLS and MUST stay server-side. Routes scope
    # rows by user_id explicitly, so it is preferred when present.
    supabase_service_role_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("SUPABASE_SERVICE_ROLE_KEY", "supabase_service_role_key"),
    )
    supabase_anon_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("SUPABASE_ANON_KEY", "supabase_anon_key"),
    )

    # Error monitoring is bypassed in development
    environment: Literal["development", "production", "test"] = Field(
        default="development",
        validation_alias=AliasChoices("ENVIRONMENT", "ENV", "environment"),
    )

    # Session identity travels in this cookie (or an Authorization: Bearer header)
    session_cookie_name: str = "sb-access-token"
    session_cookie_secure: bool = True
    session_cookie_max_age: int = 3600  # Seconds; matches Supabase's default JWT expiry

    model_config = SettingsConfigDict(
        env_file=".env",  # Load from .env in development
        env_file_encoding="utf-8",
        extra="ignore",  # Ignore unknown env vars
    )

    @model_validator(mode="after")
    def _require_a_key(self) -> "Settings":
        if self.supabase_service_role_key or self.supabase_anon_key:
            return self
        raise ValueError(
            "Missing Supabase credentials: set SUPABASE_SERVICE_ROLE_KEY or SUPABASE_ANON_KEY"
        )

    @property
    def supabase_key(self) -> str:
        return self.supabase_service_role_key or self.supabase_anon_key or ""


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    # BaseSettings loads required fields from environment/.env at runtime.
    return Settings()  # type: ignore[call-arg]
