# Area: Shared
"""
crewmute._config — Bot Configuration
====================================

Configuration model, file loading and environment overrides.
Files are TOML (`Config.toml`) or JSON; environment variables (also
read from a `.env` file) override file values.
"""

from __future__ import annotations
import json
import logging
import os
import tomllib
from pathlib import Path
from typing import Any, Dict, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from ._core.dispatcher import RetryPolicy
from .errors import ConfigError

logger = logging.getLogger("crewmute.config")

DEFAULT_CONFIG_PATH = "Config.toml"

# Environment variable -> config key
ENV_MAPPINGS = {
    "DISCORD_TOKEN": "token",
    "CREWMUTE_LIVING_CHANNEL": "living_channel",
    "CREWMUTE_DEAD_CHANNEL": "dead_channel",
    "CREWMUTE_SPECTATOR_ROLE": "spectator_role",
    "CREWMUTE_LOG_FILE": "log_file",
}


class DispatchSettings(BaseModel):
    """Retry limits for platform calls."""
    max_attempts: int = Field(5, ge=1)
    base_delay_seconds: float = Field(0.5, ge=0)
    max_delay_seconds: float = Field(8.0, ge=0)
    max_total_retry_seconds: float = Field(20.0, gt=0)
    call_timeout_seconds: float = Field(10.0, gt=0)

    def to_retry_policy(self) -> RetryPolicy:
        return RetryPolicy(
            max_attempts=self.max_attempts,
            base_delay_seconds=self.base_delay_seconds,
            max_delay_seconds=self.max_delay_seconds,
            max_total_retry_seconds=self.max_total_retry_seconds,
            call_timeout_seconds=self.call_timeout_seconds,
        )


class BotConfig(BaseModel):
    """Everything the bot needs at startup."""
    token: str
    living_channel: int
    dead_channel: int
    spectator_role: Optional[int] = None
    command_prefix: str = "~"
    start_delay_seconds: float = Field(5.0, ge=0)
    emergency_emoji: str = "🚨"
    dead_emoji: str = "💀"
    log_file: str = "crewmute.log"
    log_level: str = "INFO"
    dispatch: DispatchSettings = Field(default_factory=DispatchSettings)

    @field_validator("token")
    @classmethod
    def _token_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("token must not be empty")
        return value.strip()

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        level = value.upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"unknown log level '{value}'")
        return level

    @model_validator(mode="after")
    def _distinct_channels(self) -> "BotConfig":
        if self.living_channel == self.dead_channel:
            raise ValueError("living_channel and dead_channel must differ")
        return self

    @property
    def log_level_number(self) -> int:
        return logging.getLevelNamesMapping()[self.log_level]


def read_config_file(path: Optional[str]) -> Dict[str, Any]:
    """Read a TOML or JSON file into a dict. Missing file -> empty dict."""
    if not path:
        return {}
    config_path = Path(path)
    if not config_path.exists():
        logger.debug(f"No config file at {config_path}")
        return {}
    try:
        if config_path.suffix == ".toml":
            with open(config_path, "rb") as f:
                return tomllib.load(f)
        with open(config_path, encoding="utf-8") as f:
            return json.load(f)
    except (tomllib.TOMLDecodeError, json.JSONDecodeError) as e:
        raise ConfigError([f"cannot parse file: {e}"], source=str(config_path)) from e


def apply_env_overrides(raw: Dict[str, Any]) -> Dict[str, Any]:
    """Overlay environment variables on top of file values."""
    merged = dict(raw)
    for env_key, config_key in ENV_MAPPINGS.items():
        if env_key in os.environ:
            merged[config_key] = os.environ[env_key]
    return merged


def load_config(path: Optional[str] = DEFAULT_CONFIG_PATH, use_dotenv: bool = True) -> BotConfig:
    """
    Load, merge and validate the bot configuration.

    Args:
        path: TOML or JSON config file
        use_dotenv: Read a `.env` file into the environment first

    Returns:
        Validated BotConfig

    Raises:
        ConfigError: If the merged configuration is invalid
    """
    if use_dotenv:
        load_dotenv()
    raw = apply_env_overrides(read_config_file(path))
    try:
        return BotConfig.model_validate(raw)
    except ValidationError as e:
        problems = [
            f"{'.'.join(str(p) for p in err['loc']) or 'config'}: {err['msg']}"
            for err in e.errors()
        ]
        raise ConfigError(problems, source=path) from e
