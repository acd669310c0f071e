"""Application settings loaded from the environment (and a local ``.env``)."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Literal, Optional

from dotenv import load_dotenv
from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_TIMER_WARNING_SECONDS = 60 * 60 * 24 * 14  # 2 weeks
DEFAULT_TIMER_DEAD_MAN_SECONDS = 60 * 60 * 24 * 7  # 1 week


class AppSettings(BaseSettings):
    # Timer periods; read by Timer.new and on every transition.
    timer_warning_seconds: int = Field(
        DEFAULT_TIMER_WARNING_SECONDS,
        ge=0,
        validation_alias=AliasChoices("TIMER_WARNING_SECONDS", "TIMER_WARNING"),
    )
    timer_dead_man_seconds: int = Field(
        DEFAULT_TIMER_DEAD_MAN_SECONDS,
        ge=0,
        validation_alias=AliasChoices("TIMER_DEAD_MAN_SECONDS", "TIMER_DEAD_MAN"),
    )
    persist_debounce_ms: int = Field(
        300,
        ge=0,
        validation_alias=AliasChoices("PERSIST_DEBOUNCE_MS"),
        description="Window used to coalesce bursts of state changes into one write.",
    )
    poll_interval_s: float = Field(
        1.0,
        gt=0,
        validation_alias=AliasChoices("POLL_INTERVAL_S"),
        description="Cadence of the host loop that calls Timer.update.",
    )
    state_dir: Optional[Path] = Field(
        None,
        validation_alias=AliasChoices("DEADMAN_STATE_DIR", "STATE_DIR"),
        description="Override for the per-application state directory.",
    )

    log_level: str = Field("INFO", validation_alias=AliasChoices("LOG_LEVEL"))
    log_format: Literal["logfmt", "json"] = Field(
        "logfmt",
        validation_alias=AliasChoices("LOG_FORMAT"),
        description="Output format for structured logs.",
    )

    web_host: str = Field("0.0.0.0", validation_alias=AliasChoices("WEB_HOST"))
    web_port: int = Field(8080, ge=1, le=65535, validation_alias=AliasChoices("WEB_PORT"))

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_level(cls, v: object) -> str:
        return str(v or "INFO").upper()

    @property
    def persist_debounce_s(self) -> float:
        return self.persist_debounce_ms / 1000.0


def load_settings() -> AppSettings:
    """Return application settings loaded from the environment."""

    load_dotenv(override=False)
    cfg = AppSettings()
    logging.getLogger("config").info("settings snapshot: %s", cfg.model_dump(mode="json"))
    return cfg


__all__ = [
    "AppSettings",
    "DEFAULT_TIMER_DEAD_MAN_SECONDS",
    "DEFAULT_TIMER_WARNING_SECONDS",
    "load_settings",
]
