"""Pydantic-based configuration helpers for the interaction engine."""

from __future__ import annotations

import os
from functools import lru_cache
from typing import Iterable, List

from pydantic import BaseModel, Field, ValidationError, field_validator

from .constants import DISCORD_API_BASE_URL


class AppSettings(BaseModel):
    """Settings built once at process start and passed to collaborators."""

    application_id: str = Field(..., alias="DISCORD_APPLICATION_ID")
    public_key: str = Field(..., alias="DISCORD_APP_PUBLIC_KEY")
    bot_token: str | None = Field(None, alias="DISCORD_BOT_TOKEN")
    api_base_url: str = Field(DISCORD_API_BASE_URL, alias="DISCORD_API_BASE_URL")
    follow_up_timeout_seconds: float = Field(10.0, alias="FOLLOW_UP_TIMEOUT_SECONDS")

    model_config = {"populate_by_name": True, "frozen": True}

    @field_validator("application_id")
    @classmethod
    def _strip_application_id(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Application id must not be blank")
        return value

    @field_validator("public_key")
    @classmethod
    def _ensure_hex_key(cls, value: str) -> str:
        value = value.strip()
        try:
            raw = bytes.fromhex(value)
        except ValueError as exc:
            raise ValueError("Public key must be hex encoded") from exc
        if len(raw) != 32:
            raise ValueError("Public key must be 32 bytes")
        return value

    @field_validator("api_base_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @field_validator("follow_up_timeout_seconds")
    @classmethod
    def _ensure_positive(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("Follow-up timeout must be greater than zero")
        return value


def _format_missing(fields: Iterable[str]) -> str:
    """Return a human-friendly comma-separated list of missing env vars."""

    unique: List[str] = []
    for field in fields:
        if field not in unique:
            unique.append(field)
    return ", ".join(unique)


@lru_cache()
def get_settings() -> AppSettings:
    """Fetch and cache settings from environment variables."""

    try:
        return AppSettings.model_validate(os.environ)
    except ValidationError as exc:
        missing = [str(error["loc"][0]) for error in exc.errors() if error["type"] == "missing"]
        if not missing:
            raise RuntimeError(f"Invalid configuration: {exc}") from exc
        message = (
            "Missing required environment variables: "
            f"{_format_missing(missing)}"
        )
        raise RuntimeError(message) from exc
