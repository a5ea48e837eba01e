"""Configuration management for ODBC Shell.

Handles the TOML config file, environment variables and configuration
precedence resolution. The connection string itself is always given on
the command line.

Precedence order (highest to lowest):
1. CLI flags (--display-max)
2. Environment variables (ODBC_SHELL_DISPLAY_MAX, ODBC_SHELL_MAX_LINE_LENGTH, SENTRY_DSN)
3. Config file
4. Built-in defaults
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any

from pydantic import BaseModel, field_validator

from odbc_shell.core.exceptions import ConfigError
from odbc_shell.core.models import DEFAULT_DISPLAY_MAX, NULL_LABEL

DEFAULT_CONFIG_PATH = Path.home() / ".config" / "odbc-shell" / "config.toml"

DEFAULT_MAX_LINE_LENGTH = 255

_ODBC_VERSIONS = ("3.X", "3.8")

_ENV_VARS: dict[str, str] = {
    "ODBC_SHELL_DISPLAY_MAX": "display_max",
    "ODBC_SHELL_MAX_LINE_LENGTH": "max_line_length",
    "SENTRY_DSN": "sentry_dsn",
}

_INT_FIELDS = {"display_max", "max_line_length"}


def _check_display_max(v: int) -> int:
    if v < len(NULL_LABEL):
        msg = f"Invalid display_max: {v}. Must be at least {len(NULL_LABEL)}"
        raise ValueError(msg)
    return v


class DisplayConfig(BaseModel):
    display_max: int = DEFAULT_DISPLAY_MAX
    # Python type names (as reported by pyodbc) rendered left-aligned.
    character_types: list[str] = ["str"]
    max_line_length: int = DEFAULT_MAX_LINE_LENGTH

    @field_validator("display_max")
    @classmethod
    def validate_display_max(cls, v: int) -> int:
        return _check_display_max(v)

    @field_validator("max_line_length")
    @classmethod
    def validate_max_line_length(cls, v: int) -> int:
        if v < 1:
            msg = f"Invalid max_line_length: {v}. Must be positive"
            raise ValueError(msg)
        return v


class DriverConfig(BaseModel):
    odbc_version: str = "3.X"
    pooling: bool = True
    autocommit: bool = True
    connect_timeout: int = 0

    @field_validator("odbc_version")
    @classmethod
    def validate_odbc_version(cls, v: str) -> str:
        if v not in _ODBC_VERSIONS:
            msg = f"Invalid odbc_version: '{v}'. Must be one of: {', '.join(_ODBC_VERSIONS)}"
            raise ValueError(msg)
        return v


class MonitoringConfig(BaseModel):
    sentry_dsn: str | None = None
    environment: str = "local"


class AppConfig(BaseModel):
    display: DisplayConfig = DisplayConfig()
    driver: DriverConfig = DriverConfig()
    monitoring: MonitoringConfig = MonitoringConfig()


class ResolvedConfig(BaseModel):
    display_max: int = DEFAULT_DISPLAY_MAX
    character_types: list[str] = ["str"]
    max_line_length: int = DEFAULT_MAX_LINE_LENGTH
    odbc_version: str = "3.X"
    pooling: bool = True
    autocommit: bool = True
    connect_timeout: int = 0
    sentry_dsn: str | None = None
    environment: str = "local"
    sources: dict[str, str] = {}

    @field_validator("display_max")
    @classmethod
    def validate_display_max(cls, v: int) -> int:
        return _check_display_max(v)


def load_config(config_path: Path | None = None) -> AppConfig:
    """Load configuration from TOML file.

    Returns default AppConfig if file doesn't exist.
    Raises ConfigError on malformed TOML or invalid config.
    """
    if config_path is None:
        config_path = DEFAULT_CONFIG_PATH

    if not config_path.exists():
        return AppConfig()

    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        msg = f"Malformed TOML in {config_path}: {e}"
        raise ConfigError(msg) from e

    try:
        return AppConfig.model_validate(data)
    except Exception as e:
        msg = f"Invalid configuration in {config_path}: {e}"
        raise ConfigError(msg) from e


def resolve_config(config: AppConfig, **cli_overrides: Any) -> ResolvedConfig:
    """Resolve configuration using precedence chain.

    CLI > env > config file > built-in defaults.
    """
    sources: dict[str, str] = {}
    resolved: dict[str, Any] = {}

    # Layer 1: Built-in defaults
    resolved.update(ResolvedConfig().model_dump(exclude={"sources"}))
    for key in resolved:
        sources[key] = "default"

    # Layer 2: Config file sections
    for section in (config.display, config.driver, config.monitoring):
        for key in section.model_fields_set:
            resolved[key] = getattr(section, key)
            sources[key] = "config"

    # Layer 3: Environment variables
    for env_var, field_name in _ENV_VARS.items():
        value = os.environ.get(env_var)
        if value is None or value == "":
            continue
        if field_name in _INT_FIELDS:
            try:
                resolved[field_name] = int(value)
            except ValueError:
                msg = f"Invalid {env_var} value: '{value}'. Must be an integer"
                raise ConfigError(msg) from None
        else:
            resolved[field_name] = value
        sources[field_name] = f"env: {env_var}"

    # Layer 4: CLI flags (highest priority)
    cli_to_field = {
        "display_max": "display_max",
        "max_line_length": "max_line_length",
    }
    for cli_name, field_name in cli_to_field.items():
        value = cli_overrides.get(cli_name)
        if value is not None:
            resolved[field_name] = value
            sources[field_name] = f"cli: --{cli_name.replace('_', '-')}"

    resolved["sources"] = sources
    try:
        return ResolvedConfig(**resolved)
    except ValueError as e:
        raise ConfigError(f"Invalid configuration: {e}") from e
