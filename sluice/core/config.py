"""Unified configuration via pydantic-settings."""

import logging
from pathlib import Path
from typing import Annotated

from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class SluiceConfig(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="SLUICE_",
        env_file=".env",
        env_file_encoding="utf-8",
    )

    # Logging
    log_level: str = "INFO"
    log_json: bool = False
    log_dir: Path | None = None
    log_max_bytes: int = 10_485_760
    log_backup_count: int = 5
    log_calls: bool = False

    # Auth & rate limiting
    allowed_user_ids: Annotated[set[str], NoDecode] = set()
    rate_limit_rpm: int = 0
    rate_limit_burst: int = 5

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        level = v.strip().upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"unknown log level: {v}")
        return level

    @field_validator("allowed_user_ids", mode="before")
    @classmethod
    def parse_allowed_user_ids(cls, v: set[str] | str | int) -> set[str]:
        if isinstance(v, int):
            return {str(v)}
        if isinstance(v, str):
            return {s.strip() for s in v.split(",") if s.strip()}
        return v

    @field_validator("rate_limit_rpm", "rate_limit_burst")
    @classmethod
    def non_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError("must not be negative")
        return v
