"""Configuration system for tablestate using pydantic-settings.

Supports layered configuration:
1. Built-in defaults (lowest priority)
2. pyproject.toml [tool.tablestate] section (project-level)
3. ./tablestate.toml (project-level, explicit)
4. ~/.config/tablestate/config.toml (user-level, overrides project)
5. The file named by TABLESTATE_CONFIG_FILE
6. Environment variables (highest priority)

Environment variables use the TABLESTATE_ prefix with nested delimiter __.
Example: TABLESTATE_PAGINATION__DEFAULT_PAGE_SIZE, TABLESTATE_SORT__NULLS
"""

from __future__ import annotations

import os
import sys

from functools import lru_cache
from pathlib import Path
from typing import Annotated, Any, Literal

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from .log import warn


if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib


DEFAULT_PAGE_SIZE_OPTIONS: list[int] = [5, 10, 25, 50]

SECTION_NAMES: tuple[str, ...] = ("pagination", "sort", "selection", "log")


def user_config_path() -> Path:
    """Location of the per-user configuration file."""
    if sys.platform == "win32":
        base = Path(os.environ.get("APPDATA", "~")) / "tablestate"
    else:
        base = Path("~/.config/tablestate")
    return (base / "config.toml").expanduser()


def config_file_candidates() -> list[tuple[str, Path | None]]:
    """Configuration file locations with display names, lowest precedence first.

    The path of the ``TABLESTATE_CONFIG_FILE`` entry is None while the
    variable is unset.
    """
    env_config = os.environ.get("TABLESTATE_CONFIG_FILE")
    return [
        ("pyproject.toml [tool.tablestate]", Path("pyproject.toml")),
        ("./tablestate.toml", Path("tablestate.toml")),
        ("User config", user_config_path()),
        ("$TABLESTATE_CONFIG_FILE", Path(env_config) if env_config else None),
    ]


def _find_config_files() -> list[Path]:
    """Existing configuration files, lowest precedence first."""
    return [path for _, path in config_file_candidates() if path is not None and path.exists()]


def _load_toml_config() -> dict[str, Any]:
    """Load and merge all TOML configuration files."""
    merged: dict[str, Any] = {}

    for config_file in _find_config_files():
        try:
            data = tomllib.loads(config_file.read_text(encoding="utf-8"))
        except (OSError, tomllib.TOMLDecodeError) as exc:
            warn(f"Ignoring unreadable config file {config_file}: {exc}")
            continue

        # Handle pyproject.toml [tool.tablestate] section
        if config_file.name == "pyproject.toml":
            data = data.get("tool", {}).get("tablestate", {})

        merged = _deep_merge(merged, data)

    return merged


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Deep merge two dictionaries."""
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


class PaginationSettings(BaseSettings):
    """Pagination defaults.

    Environment prefix: TABLESTATE_PAGINATION__
    Example: TABLESTATE_PAGINATION__PAGE_SIZE_OPTIONS="10,20,50"
    """

    model_config = SettingsConfigDict(
        env_prefix="TABLESTATE_PAGINATION__",
        extra="ignore",
    )

    page_size_options: Annotated[list[int], NoDecode] = Field(
        default_factory=lambda: list(DEFAULT_PAGE_SIZE_OPTIONS),
        description="Page sizes a user may pick from.",
    )
    default_page_size: int = 10
    max_page_buttons: int = Field(default=7, ge=5)

    @field_validator("page_size_options", mode="before")
    @classmethod
    def _parse_page_size_options(cls, v: Any) -> list[int]:
        """Accept a comma-separated string (from env var) or a list."""
        if isinstance(v, str):
            v = [int(p.strip()) for p in v.split(",") if p.strip()]
        if not isinstance(v, list):
            msg = f"page_size_options must be a list or comma-separated string, got {type(v).__name__}"
            raise TypeError(msg)
        return v

    @field_validator("page_size_options", mode="after")
    @classmethod
    def _validate_page_size_options(cls, v: list[int]) -> list[int]:
        """Page sizes must be positive and there must be at least one."""
        if not v:
            raise ValueError("page_size_options must not be empty")
        bad = [size for size in v if size < 1]
        if bad:
            raise ValueError(f"Page sizes must be positive, got {bad}")
        return v

    @model_validator(mode="after")
    def _check_default_page_size(self) -> PaginationSettings:
        if self.default_page_size not in self.page_size_options:
            msg = (
                f"default_page_size {self.default_page_size} is not one of "
                f"page_size_options {self.page_size_options}"
            )
            raise ValueError(msg)
        return self


class SortSettings(BaseSettings):
    """Sorting defaults.

    Environment prefix: TABLESTATE_SORT__
    Example: TABLESTATE_SORT__NULLS=first
    """

    model_config = SettingsConfigDict(
        env_prefix="TABLESTATE_SORT__",
        extra="ignore",
    )

    nulls: Literal["first", "last"] = "last"


class SelectionSettings(BaseSettings):
    """Selection defaults.

    Environment prefix: TABLESTATE_SELECTION__
    Example: TABLESTATE_SELECTION__SELECT_ALL_SCOPE=all
    """

    model_config = SettingsConfigDict(
        env_prefix="TABLESTATE_SELECTION__",
        extra="ignore",
    )

    # "page" selects the rows of the current page, "all" every row
    select_all_scope: Literal["page", "all"] = "page"


class LogSettings(BaseSettings):
    """Logging settings.

    Environment prefix: TABLESTATE_LOG__
    Example: TABLESTATE_LOG__LEVEL=DEBUG
    """

    model_config = SettingsConfigDict(
        env_prefix="TABLESTATE_LOG__",
        extra="ignore",
    )

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "WARNING"
    format: str = "%(name)s - %(levelname)s - %(message)s"


class TableStateSettings(BaseSettings):
    """Main settings aggregating all configuration sections.

    Configuration sources (in order of precedence):
    1. Built-in defaults
    2. pyproject.toml [tool.tablestate] section
    3. ./tablestate.toml (project-level)
    4. ~/.config/tablestate/config.toml (user-level, overrides project)
    5. The file named by TABLESTATE_CONFIG_FILE
    6. Environment variables (highest priority)
    """

    model_config = SettingsConfigDict(
        env_prefix="TABLESTATE__",
        env_nested_delimiter="__",
        extra="ignore",
    )

    pagination: PaginationSettings = Field(default_factory=PaginationSettings)
    sort: SortSettings = Field(default_factory=SortSettings)
    selection: SelectionSettings = Field(default_factory=SelectionSettings)
    log: LogSettings = Field(default_factory=LogSettings)

    def __init__(self, **data: Any) -> None:
        # Explicit keyword arguments take precedence over TOML files
        merged = _deep_merge(_load_toml_config(), data)
        super().__init__(**merged)

    def to_toml(self) -> str:
        """Export settings as TOML string."""
        lines = ["# tablestate configuration", "# Generated by: tablestate config --toml", ""]

        all_data = self.model_dump()
        for section_name in SECTION_NAMES:
            lines.append(f"[{section_name}]")
            for field_name, field_value in all_data[section_name].items():
                lines.append(f"{field_name} = {_toml_value(field_value)}")
            lines.append("")

        return "\n".join(lines)

    def to_env(self) -> str:
        """Export settings as shell environment variables."""
        lines = [
            "# tablestate environment variables",
            "# Generated by: tablestate config --env",
            "",
        ]

        all_data = self.model_dump()
        for section_name in SECTION_NAMES:
            for field_name, field_value in all_data[section_name].items():
                env_name = f"TABLESTATE_{section_name.upper()}__{field_name.upper()}"
                if isinstance(field_value, list):
                    value_str = ",".join(str(v) for v in field_value)
                elif isinstance(field_value, bool):
                    value_str = "true" if field_value else "false"
                else:
                    value_str = str(field_value)
                lines.append(f'export {env_name}="{value_str}"')

        return "\n".join(lines)


def _toml_value(value: Any) -> str:
    """Render a scalar or list as a TOML literal."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, list):
        return "[" + ", ".join(_toml_value(v) for v in value) + "]"
    if isinstance(value, str):
        return f'"{value}"'
    return str(value)


@lru_cache(maxsize=1)
def get_settings() -> TableStateSettings:
    """Get the global settings instance (cached).

    Call clear_settings() to reload configuration.
    """
    return TableStateSettings()


def clear_settings() -> None:
    """Clear the cached settings to force reload."""
    get_settings.cache_clear()


def reload_settings() -> TableStateSettings:
    """Reload settings from all sources."""
    clear_settings()
    return get_settings()
