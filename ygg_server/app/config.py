"""Application configuration management."""
from __future__ import annotations

import json
from pathlib import Path
from typing import Annotated, List

from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    """Server runtime settings."""

    model_config = SettingsConfigDict(
        env_prefix="YGG_",
        env_file=".env",
        env_file_encoding="utf-8",
    )

    data_root: Path = Path("/data")
    mojang_api_url: str = "https://api.mojang.com"
    session_server_url: str = "https://sessionserver.mojang.com"
    request_timeout: float = 10.0
    max_upload_bytes: int = 1 << 20
    texture_max_age: int = 31536000
    log_level: str = "INFO"
    cors_origins: Annotated[List[str], NoDecode] = ["*"]

    @field_validator("cors_origins", mode="before")
    @classmethod
    def parse_cors_origins(cls, value):
        if value in (None, "", [], ()):
            return ["*"]
        if isinstance(value, str):
            try:
                parsed = json.loads(value)
            except json.JSONDecodeError:
                parsed = [item.strip() for item in value.split(",") if item.strip()]
        else:
            parsed = value
        return parsed

    @field_validator("mojang_api_url", "session_server_url")
    @classmethod
    def strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")


settings = Settings()
