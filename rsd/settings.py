"""
settings.py

Responsibility: Build the immutable `Settings` record used by every command.

Sources, in order:
- `.env` file (loaded with python-dotenv, never overriding the real environment)
- `RSD_*` environment variables
- the `remote-scripting-development` config lookup, read from `rsd.yaml`
  or, when that file is absent, from the same key in `package.json`

Settings are constructed once by the CLI and passed by parameter; no other
module reads the environment.
"""

from __future__ import annotations

import json
import os
import shlex
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping

import yaml
from dotenv import dotenv_values

CONFIG_KEY = "remote-scripting-development"
DEFAULT_CONFIG_FILE = "rsd.yaml"
PACKAGE_JSON_FILE = "package.json"

DEFAULT_BUNDLER = ("npx", "browserify", "{entry}", "-p", "[", "tsify", "--project", "{project}", "]")


class SettingsError(ValueError):
    pass


@dataclass(frozen=True)
class Settings:
    """Process-wide configuration, read-only after startup."""

    api_endpoint: str | None = None
    api_token: str | None = None
    environment: str = "prod"
    source_roots_pattern: str = ""
    bundler_command: tuple[str, ...] = DEFAULT_BUNDLER
    tsconfig: str = "tsconfig.json"
    output_extension: str = ".js"
    build_dir: Path = field(default_factory=lambda: Path("dest"))
    backups_dir: Path = field(default_factory=lambda: Path("backups"))
    request_timeout: float = 60.0

    @property
    def is_production(self) -> bool:
        # Only an explicit "dev" marks a non-production environment.
        return self.environment != "dev"


def _read_config_section(config_path: Path) -> dict[str, Any]:
    """
    Return the `remote-scripting-development` section, or {} when no config exists.
    """
    if config_path.exists():
        try:
            data = yaml.safe_load(config_path.read_text(encoding="utf-8")) or {}
        except yaml.YAMLError as e:
            raise SettingsError(f"Invalid YAML in {config_path}: {e}") from e
        origin = config_path
    else:
        package_json = config_path.parent / PACKAGE_JSON_FILE
        if not package_json.exists():
            return {}
        try:
            data = json.loads(package_json.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            raise SettingsError(f"Invalid JSON in {package_json}: {e}") from e
        origin = package_json

    if not isinstance(data, dict):
        raise SettingsError(f"{origin} must be a mapping/object at the top level.")
    section = data.get(CONFIG_KEY) or {}
    if not isinstance(section, dict):
        raise SettingsError(f"`{CONFIG_KEY}` in {origin} must be an object/mapping.")
    return section


def _parse_bundler(raw: Any) -> tuple[str, ...]:
    if raw is None:
        return DEFAULT_BUNDLER
    if isinstance(raw, str):
        parts = shlex.split(raw)
    elif isinstance(raw, list) and all(isinstance(p, str) for p in raw):
        parts = list(raw)
    else:
        raise SettingsError("`bundler` must be a command string or a list of strings.")
    if not parts:
        raise SettingsError("`bundler` must not be empty.")
    return tuple(parts)


def _parse_timeout(raw: str | None) -> float:
    if raw is None or not raw.strip():
        return 60.0
    try:
        value = float(raw)
    except ValueError as e:
        raise SettingsError(f"RSD_API_TIMEOUT must be a number, got {raw!r}") from e
    if value <= 0:
        raise SettingsError("RSD_API_TIMEOUT must be positive.")
    return value


def load_settings(
    config_path: str | Path = DEFAULT_CONFIG_FILE,
    *,
    env_file: str | Path | None = ".env",
    environ: Mapping[str, str] | None = None,
) -> Settings:
    """
    Load settings from the environment, an optional `.env` file and the config lookup.

    Values already present in `environ` win over the `.env` file.
    """
    env: dict[str, str] = {}
    if env_file is not None and Path(env_file).exists():
        env.update({k: v for k, v in dotenv_values(env_file).items() if v is not None})
    env.update(os.environ if environ is None else environ)

    section = _read_config_section(Path(config_path))

    pattern = section.get("sourceRootsPattern") or ""
    if not isinstance(pattern, str):
        raise SettingsError("`sourceRootsPattern` must be a string.")

    output_extension = str(section.get("outputExtension") or ".js")
    if not output_extension.startswith("."):
        output_extension = "." + output_extension

    return Settings(
        api_endpoint=env.get("RSD_API_ENDPOINT") or None,
        api_token=env.get("RSD_API_TOKEN") or None,
        environment=(env.get("RSD_ENVIRONMENT") or "prod").strip(),
        source_roots_pattern=pattern.strip(),
        bundler_command=_parse_bundler(section.get("bundler")),
        tsconfig=str(section.get("tsconfig") or "tsconfig.json"),
        output_extension=output_extension,
        request_timeout=_parse_timeout(env.get("RSD_API_TIMEOUT")),
    )
