"""
Configuration management using Pydantic models loaded from YAML.
"""

import logging
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, Field, field_validator

from .domain.models import DayWindowPolicy


class ApiConfig(BaseModel):
    """Connection settings for the attendance API."""
    base_url: str = "http://localhost:3000/api"
    token: str = ""
    timeout_seconds: float = 30

    @field_validator("base_url")
    @classmethod
    def validate_base_url(cls, value: str) -> str:
        """Ensure the API root is an http(s) URL."""
        if not value.startswith(("http://", "https://")):
            raise ValueError(f"base_url must start with http:// or https://, got {value}")
        return value.rstrip("/")

    @field_validator("timeout_seconds")
    @classmethod
    def validate_timeout(cls, value: float) -> float:
        """Ensure the request timeout is positive."""
        if value <= 0:
            raise ValueError("timeout_seconds must be greater than zero")
        return value


class AppConfig(BaseModel):
    """Application configuration."""
    policy: DayWindowPolicy = DayWindowPolicy.UTC
    api: ApiConfig = Field(default_factory=ApiConfig)
    records_file: Optional[Path] = None
    log_level: str = "WARNING"

    @field_validator("policy", mode="before")
    @classmethod
    def validate_policy(cls, value):
        """Accept policy names in any case."""
        return DayWindowPolicy.parse(value)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        """Ensure the log level is one the logging module knows."""
        level = value.strip().upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {value}")
        return level

    @classmethod
    def load_from_yaml(cls, config_path: Path) -> "AppConfig":
        """
        Load configuration from YAML file.

        Relative ``records_file`` paths are resolved against the config
        file's directory.

        Args:
            config_path: Path to the YAML config file

        Returns:
            AppConfig instance

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If config is invalid
        """
        if not config_path.exists():
            raise FileNotFoundError(
                f"Config file not found: {config_path}\n"
                f"Please create a config.yaml file. See config.example.yaml for reference."
            )

        try:
            with open(config_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ValueError(f"Invalid YAML in {config_path}: {exc}") from exc

        if not isinstance(data, dict):
            raise ValueError("Config file must contain a mapping at the root level.")

        config = cls(**data)
        if config.records_file is not None and not config.records_file.is_absolute():
            config = config.model_copy(
                update={"records_file": config_path.parent / config.records_file}
            )
        return config

    @classmethod
    def load_or_default(cls, config_path: Optional[Path] = None) -> "AppConfig":
        """Load the given (or default) config file, falling back to defaults if it is absent."""
        if config_path is not None:
            return cls.load_from_yaml(config_path)

        default_path = get_default_config_path()
        if default_path.exists():
            return cls.load_from_yaml(default_path)
        return cls()


def get_default_config_path() -> Path:
    """
    Locate config.yaml: the working directory wins, then the checkout that
    holds the attendance_window package.
    """
    candidates = [Path.cwd() / "config.yaml", Path(__file__).resolve().parent.parent / "config.yaml"]
    for candidate in candidates:
        if candidate.exists():
            return candidate
    return candidates[0]
