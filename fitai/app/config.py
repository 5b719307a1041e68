from __future__ import annotations

from functools import lru_cache
from typing import List, Literal

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Central application configuration."""

    app_name: str = Field(default="FitAI Lead Assistant")
    debug: bool = Field(default=False)
    log_level: str = Field(default="INFO")
    allowed_origins: List[str] = Field(
        default_factory=list,
        validation_alias="ALLOWED_ORIGINS",
    )

    # Gemini
    gemini_api_key: str = Field(default="")
    gemini_model: str = Field(
        default="gemini-2.5-flash",
        validation_alias=AliasChoices("GEMINI_MODEL", "GEMINI_CHAT_MODEL"),
    )
    gemini_alternate_models: List[str] = Field(
        default_factory=lambda: [
            "gemini-1.5-flash",
            "gemini-1.0-pro",
            "gemini-1.0-pro-001",
            "models/gemini-pro",
        ],
    )
    history_window: int = Field(default=3)

    # Chat endpoint
    max_message_length: int = Field(default=500)
    always_respond_ok: bool = Field(default=False)
    contact_email: str = Field(default="hello@trainer.com")
    contact_phone: str = Field(default="(555) 123-4567")

    # Booking
    scheduling_url: str = Field(
        default="https://calendly.com/your-username/fitai-consultation",
        validation_alias=AliasChoices("SCHEDULING_URL", "CALENDLY_URL"),
    )

    # Sessions
    session_ttl_seconds: int = Field(default=3600)
    max_sessions: int = Field(default=1000)

    # Leads
    lead_storage: Literal["memory", "mongo"] = Field(default="memory")
    mongo_uri: str = Field(default="mongodb://localhost:27017")
    mongo_database: str = Field(default="fitai")
    leads_collection: str = Field(default="leads")

    # Email
    email_api_key: str = Field(default="")
    email_sender_email: str = Field(
        default="",
        validation_alias=AliasChoices("EMAIL_SENDER_EMAIL", "EMAIL_SENDER_DOMAIN"),
    )
    trainer_email: str = Field(default="")

    # Demo client
    typing_delay_min_seconds: float = Field(default=1.0)
    typing_delay_max_seconds: float = Field(default=3.0)

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
