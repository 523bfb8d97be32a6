"""
Configuration loading.

Settings come from an optional YAML file, overridden by ``CMS_ADMIN_*``
environment variables, and are validated once at startup. The only setting
the stores depend on is the API base URL; the rest tunes the adapters.
"""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Any
from urllib.parse import urlparse

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

DEFAULT_CONFIG_PATH = "cms_admin.yaml"
DEFAULT_TOKEN_PATH = "~/.cms_admin/tokens.json"

ENV_OVERRIDES = {
    "CMS_ADMIN_API_URL": "api_base_url",
    "CMS_ADMIN_TOKEN_PATH": "token_path",
    "CMS_ADMIN_TIMEOUT": "request_timeout",
    "CMS_ADMIN_PAGE_SIZE": "page_size",
    "CMS_ADMIN_LOG_LEVEL": "log_level",
}


class Settings(BaseModel):
    api_base_url: str
    token_path: str = DEFAULT_TOKEN_PATH
    request_timeout: float = Field(default=15.0, gt=0)
    page_size: int = Field(default=10, gt=0)
    log_level: str = "INFO"

    @field_validator("api_base_url")
    @classmethod
    def _check_url(cls, value: str) -> str:
        parsed = urlparse(value)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValueError("api_base_url must be an http or https URL")
        return value.rstrip("/")

    @field_validator("log_level")
    @classmethod
    def _check_level(cls, value: str) -> str:
        level = value.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Unknown log level: {value}")
        return level


def _read_yaml(path: Path) -> dict[str, Any]:
    with open(path) as f:
        content = f.read()

    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML syntax in config file: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"Config file {path} must contain a mapping")
    return data


def load_settings(
    path: Path | None = None,
    environ: dict[str, str] | None = None,
) -> Settings:
    """
    Load and validate settings.

    Raises FileNotFoundError if an explicitly given file is missing.
    Raises ValueError if the YAML or the resulting settings are invalid.
    """
    env = os.environ if environ is None else environ
    data: dict[str, Any] = {}

    if path is None and env.get("CMS_ADMIN_CONFIG"):
        path = Path(env["CMS_ADMIN_CONFIG"])
    if path is not None:
        if not path.exists():
            raise FileNotFoundError(f"Config file not found at: {path}")
        data.update(_read_yaml(path))
    elif Path(DEFAULT_CONFIG_PATH).exists():
        data.update(_read_yaml(Path(DEFAULT_CONFIG_PATH)))

    for env_var, field in ENV_OVERRIDES.items():
        if env.get(env_var):
            data[field] = env[env_var]

    try:
        return Settings.model_validate(data)
    except ValidationError as e:
        raise ValueError(f"Config validation failed:\n{e}") from e


@lru_cache
def get_settings() -> Settings:
    return load_settings()
