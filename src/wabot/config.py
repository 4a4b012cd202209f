"""Configuration loader with YAML parsing, env-var interpolation, and Pydantic validation."""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Literal, Optional

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator


class OwnerConfig(BaseModel):
    number: str  # digits only, without @s.whatsapp.net
    name: str = "Jogab Gebi"

    @field_validator("number", mode="before")
    @classmethod
    def _digits_only(cls, value: object) -> str:
        # YAML reads an unquoted number as int
        digits = re.sub(r"[^0-9]", "", str(value))
        if not digits:
            raise ValueError("owner.number must contain digits")
        return digits


class BotInfoConfig(BaseModel):
    name: str = "Wabot-X AI"
    version: str = "1.0 Stable"
    trigger: str = "."
    platform_label: str = "Termux / Linux / Android"

    @field_validator("trigger")
    @classmethod
    def _single_char(cls, value: str) -> str:
        if len(value) != 1 or value.isspace():
            raise ValueError("bot.trigger must be a single non-space character")
        return value


class AIConfig(BaseModel):
    backend: str = "openai"  # "openai" | "anthropic"
    model: str = "gpt-4o-mini"
    api_key: str = ""
    base_url: Optional[str] = None
    system_prompt: str = "Kamu adalah asisten AI yang membantu user."
    max_tokens: int = 1024
    timeout: int = 120


class MediaConfig(BaseModel):
    temp_dir: str = "./temp_sticker"
    status_dir: str = "./statuses"
    ffmpeg_path: str = "ffmpeg"


class FeaturesConfig(BaseModel):
    # Tell the requester of .s that the status went to the owner
    notify_requester: bool = True


class CacheConfig(BaseModel):
    max_entries: int = Field(default=1000, gt=0)


class GatewayConfig(BaseModel):
    bridge_url: str = "http://localhost:3000"
    auth_dir: str = "./auth"
    poll_timeout: int = 30
    request_timeout: int = 60


class TikTokConfig(BaseModel):
    api_url: str = "https://www.tikwm.com/api/"
    timeout: int = 60


class AppConfig(BaseModel):
    log_level: str = "INFO"
    log_format: Literal["console", "json"] = "console"
    data_dir: str = "./data"
    owner: OwnerConfig
    bot: BotInfoConfig = Field(default_factory=BotInfoConfig)
    ai: AIConfig = Field(default_factory=AIConfig)
    media: MediaConfig = Field(default_factory=MediaConfig)
    features: FeaturesConfig = Field(default_factory=FeaturesConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)
    gateway: GatewayConfig = Field(default_factory=GatewayConfig)
    tiktok: TikTokConfig = Field(default_factory=TikTokConfig)


# ${NAME}; unknown names are left untouched so YAML still parses
_PLACEHOLDER = re.compile(r"\$\{(\w+)\}")


def _interpolate_env_vars(text: str, extra: dict[str, str] | None = None) -> str:
    """Substitute ``${NAME}`` from ``extra`` first, then from the environment."""
    lookup = {**os.environ, **(extra or {})}
    return _PLACEHOLDER.sub(lambda m: lookup.get(m.group(1), m.group(0)), text)


def load_config(config_path: str | Path = "config.yaml", env_path: str | Path = ".env") -> AppConfig:
    """Read ``config_path``, expand placeholders, and validate it.

    ``.env`` values are loaded into the environment first (existing
    variables win). ``${data_dir}`` refers to the file's own ``data_dir``
    key so paths can be declared relative to it.
    """
    if Path(env_path).is_file():
        load_dotenv(env_path)

    source = Path(config_path)
    if not source.is_file():
        raise FileNotFoundError(f"Configuration file not found: {source}")
    text = source.read_text(encoding="utf-8")

    data_dir = str((yaml.safe_load(text) or {}).get("data_dir", "./data"))
    expanded = _interpolate_env_vars(text, extra={"data_dir": _interpolate_env_vars(data_dir)})
    return AppConfig(**(yaml.safe_load(expanded) or {}))
