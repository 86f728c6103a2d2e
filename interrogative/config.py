"""Configuration utilities for question resolution.

Settings are loaded with the following rules:
- Primary source: `interrogative_config.json` in the working directory.
- Overrides: environment variables, then optional text files under `config/`.
- Validation: Pydantic models enforce value constraints.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, ValidationError as PydanticValidationError, field_validator


CONFIG_DIR = Path("config")
ROOT_CONFIG = Path("interrogative_config.json")
logger = logging.getLogger(__name__)


def _read_config_file(rel_path: str) -> Optional[str]:
    path = CONFIG_DIR / rel_path
    try:
        if path.exists():
            return path.read_text(encoding="utf-8").strip()
    except (OSError, UnicodeDecodeError) as e:
        logger.warning("Failed to read override %s: %s", path, e)
        return None
    return None


def _env(key: str, default: Optional[str] = None) -> Optional[str]:
    return os.environ.get(key, default)


def _read_json_file(path: Path) -> dict:
    try:
        if path.exists():
            data = json.loads(path.read_text(encoding="utf-8"))
            return data if isinstance(data, dict) else {}
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        logger.error("Failed to read JSON config %s: %s", path, e)
    return {}


class InterrogativeConfig(BaseModel):
    # Suffix for the by-name options convention (`<name>_options`)
    options_suffix: str = Field(default="_options")
    convention_lookup: bool = Field(default=True)
    json_indent: Optional[int] = Field(default=None, ge=0)
    log_level: str = Field(default="INFO")

    @field_validator("options_suffix")
    @classmethod
    def suffix_must_be_identifier_fragment(cls, v: str) -> str:
        if not isinstance(v, str) or not v.strip():
            raise ValueError("options_suffix must be a non-empty string")
        if not ("x" + v).isidentifier():
            raise ValueError("options_suffix must be usable in an attribute name")
        return v

    @field_validator("log_level")
    @classmethod
    def log_level_must_be_known(cls, v: str) -> str:
        level = str(v).strip().upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError("log_level must be a standard logging level name")
        return level


def _truthy(value: str) -> bool:
    return str(value).strip().lower() in {"1", "true", "yes", "on"}


def load_config() -> InterrogativeConfig:
    """Load configuration with validation.

    Precedence (highest first):
    1) Environment variables
    2) Text files in `config/` (optional)
    3) interrogative_config.json in the working directory
    4) Defaults
    """

    base = _read_json_file(ROOT_CONFIG)

    def _base(key: str) -> Optional[str]:
        value = base.get(key)
        return str(value) if value is not None else None

    suffix = (
        _env("INTERROGATIVE_OPTIONS_SUFFIX")
        or _read_config_file("options.suffix")
        or _base("options_suffix")
        or "_options"
    )
    lookup_text = (
        _env("INTERROGATIVE_CONVENTION_LOOKUP")
        or _read_config_file("options.convention_lookup")
        or _base("convention_lookup")
        or "true"
    )
    log_level = (
        _env("INTERROGATIVE_LOG_LEVEL")
        or _read_config_file("logging.level")
        or _base("log_level")
        or "INFO"
    )
    indent_text = (
        _env("INTERROGATIVE_JSON_INDENT")
        or _read_config_file("json.indent")
        or _base("json_indent")
    )

    try:
        indent = int(str(indent_text).strip()) if indent_text not in (None, "") else None
    except ValueError:
        logger.error("Invalid json indent %r", indent_text)
        raise

    try:
        return InterrogativeConfig(
            options_suffix=suffix,
            convention_lookup=_truthy(lookup_text),
            json_indent=indent,
            log_level=log_level,
        )
    except PydanticValidationError as e:
        logger.error("Invalid interrogative configuration: %s", e)
        raise


_CONFIG: Optional[InterrogativeConfig] = None


def get_config() -> InterrogativeConfig:
    """Return the process-wide configuration, loading it on first use."""
    global _CONFIG
    if _CONFIG is None:
        _CONFIG = load_config()
    return _CONFIG


def reset_config() -> None:
    """Drop the cached configuration so the next access reloads it."""
    global _CONFIG
    _CONFIG = None


__all__ = [
    "InterrogativeConfig",
    "load_config",
    "get_config",
    "reset_config",
]
