"""Configuration management for buildstamp."""

from __future__ import annotations

import configparser
import os
import re
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field, field_validator

from buildstamp.versioning.models import PartialVersion
from buildstamp.versioning.parser import parse_version_string


class GitConfig(BaseModel):
    """Git executable configuration."""

    executable: str | None = None  # Defaults to "git" on PATH
    timeout: float = Field(default=10.0, gt=0)


class VersionConfig(BaseModel):
    """Version resolution options."""

    honor_tag_revision: bool = False
    default_version: str = "1.0.0"

    @field_validator("default_version")
    @classmethod
    def _check_default_version(cls, value: str) -> str:
        parse_version_string(value)
        return value.strip()

    @property
    def default(self) -> PartialVersion:
        """Get the fallback version for untagged repositories."""
        return parse_version_string(self.default_version)


class OutputConfig(BaseModel):
    """Output options."""

    format: Literal["text", "json", "env"] = "text"


class LoggingConfig(BaseModel):
    """Logging options."""

    level: str = "WARNING"


class AppConfig(BaseModel):
    """Application configuration."""

    git: GitConfig = Field(default_factory=GitConfig)
    version: VersionConfig = Field(default_factory=VersionConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


# Global config instance
_config: AppConfig | None = None
_config_path: Path | None = None  # Track where config was loaded from


def get_config_paths() -> list[Path]:
    """Get list of config file paths to search, in priority order.

    Search order:
    1. Current working directory (buildstamp.ini)
    2. User home directory (~/.buildstamp/buildstamp.ini)
    3. YAML files in the same places

    Returns:
        List of paths to check for config files.
    """
    cwd = Path.cwd()
    home_dir = Path.home() / ".buildstamp"

    return [
        cwd / "buildstamp.ini",
        home_dir / "buildstamp.ini",
        cwd / ".buildstamp.yaml",
        cwd / ".buildstamp.yml",
        home_dir / "config.yaml",
        home_dir / "config.yml",
    ]


def find_config_file() -> Path | None:
    """Find the first existing config file.

    Returns:
        Path to config file if found, None otherwise.
    """
    for path in get_config_paths():
        if path.exists():
            return path
    return None


def _expand_env_vars(value: Any) -> Any:
    """Recursively expand environment variables in config values.

    Supports ${VAR} and $VAR syntax.

    Args:
        value: Config value (string, dict, list, or other).

    Returns:
        Value with environment variables expanded.
    """
    if isinstance(value, str):
        pattern = re.compile(r"\$\{([^}]+)\}|\$([A-Za-z_][A-Za-z0-9_]*)")

        def replace(match: re.Match[str]) -> str:
            var_name = match.group(1) or match.group(2)
            return os.environ.get(var_name, "")

        return pattern.sub(replace, value)
    elif isinstance(value, dict):
        return {k: _expand_env_vars(v) for k, v in value.items()}
    elif isinstance(value, list):
        return [_expand_env_vars(item) for item in value]
    return value


def _parse_bool(value: str) -> bool:
    """Parse a boolean value from a string (true/false/yes/no/1/0/on/off)."""
    return value.strip().lower() in ("true", "yes", "1", "on")


def _load_ini_config(path: Path) -> dict[str, Any]:
    """Load configuration from INI file.

    Args:
        path: Path to INI config file.

    Returns:
        Dictionary structure matching AppConfig schema.
    """
    parser = configparser.ConfigParser()
    parser.read(path, encoding="utf-8")

    config: dict[str, Any] = {}

    if parser.has_section("git"):
        git: dict[str, Any] = {}
        executable = parser.get("git", "executable", fallback="").strip()
        if executable:
            git["executable"] = executable
        timeout = parser.get("git", "timeout", fallback="").strip()
        if timeout:
            git["timeout"] = timeout  # Validated by pydantic
        if git:
            config["git"] = git

    if parser.has_section("version"):
        version: dict[str, Any] = {}
        if parser.has_option("version", "honor_tag_revision"):
            version["honor_tag_revision"] = _parse_bool(
                parser.get("version", "honor_tag_revision")
            )
        default_version = parser.get("version", "default_version", fallback="").strip()
        if default_version:
            version["default_version"] = default_version
        if version:
            config["version"] = version

    if parser.has_section("output"):
        fmt = parser.get("output", "format", fallback="").strip()
        if fmt:
            config["output"] = {"format": fmt}

    if parser.has_section("logging"):
        level = parser.get("logging", "level", fallback="").strip()
        if level:
            config["logging"] = {"level": level}

    return config


def _load_yaml_config(path: Path) -> dict[str, Any]:
    """Load configuration from YAML file.

    Args:
        path: Path to YAML config file.

    Returns:
        Dictionary structure matching AppConfig schema.
    """
    with open(path, encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def load_config(path: Path | None = None) -> AppConfig:
    """Load configuration from file.

    Supports both INI (.ini/.cfg) and YAML (.yaml/.yml) formats.
    Environment variables are expanded in all values.

    Args:
        path: Explicit path to config file. If None, searches default locations.

    Returns:
        Loaded configuration.

    Raises:
        pydantic.ValidationError: If the file contains invalid values.
    """
    global _config, _config_path

    if path is None:
        path = find_config_file()

    if path is None or not path.exists():
        _config = AppConfig()
        _config_path = None
        return _config

    if path.suffix in (".ini", ".cfg"):
        raw_config = _load_ini_config(path)
    else:
        raw_config = _load_yaml_config(path)

    expanded_config = _expand_env_vars(raw_config)

    _config = AppConfig.model_validate(expanded_config)
    _config_path = path
    return _config


def get_config_path() -> Path | None:
    """Get the path to the currently loaded config file, or None if using defaults."""
    return _config_path


def get_config() -> AppConfig:
    """Get the current configuration, loading it on first use."""
    global _config
    if _config is None:
        _config = load_config()
    return _config


def reset_config() -> None:
    """Reset the cached configuration.

    Useful for testing or when config file changes.
    """
    global _config, _config_path
    _config = None
    _config_path = None


def save_default_config(path: Path | None = None) -> Path:
    """Save a default INI config file.

    Args:
        path: Where to save. Defaults to ./buildstamp.ini.

    Returns:
        Path to saved config file.
    """
    if path is None:
        path = Path.cwd() / "buildstamp.ini"

    default_config = """\
# buildstamp configuration
# You can use environment variables with ${VAR} syntax

[git]
# Path to the git executable (default: git on PATH)
# executable = /usr/bin/git
# Seconds to wait for each git command
timeout = 10

[version]
# Use the fourth number of a MAJOR.MINOR.PATCH.REVISION tag as the
# revision when building exactly the tagged commit
honor_tag_revision = false
# Version used when the repository has no version tag
default_version = 1.0.0

[output]
# text, json or env
format = text

[logging]
# DEBUG, INFO, WARNING or ERROR
level = WARNING
"""

    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, "w", encoding="utf-8") as f:
        f.write(default_config)

    return path
