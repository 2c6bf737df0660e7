"""Settings for request execution.

Values resolve in two tiers: session overrides (CLI options or
environment variables) first, then the workspace file, then the
built-in defaults.
"""

from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict, ValidationError
from pydantic.alias_generators import to_camel

WORKSPACE_FILE = ".esrunner.yaml"
SECTION = "elasticsearch"
DEFAULT_HOST = "localhost:9200"


class ConfigError(ValueError):
    """Raised when the workspace settings file cannot be used."""


class Settings(BaseModel):
    """Execution settings; workspace keys use the camelCase spelling."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    host: str = DEFAULT_HOST
    cert_file_path: str | None = None
    skip_ssl_certificate_verification: bool = False
    ignore_hostname_mismatch: bool = False
    indent_tab_size: int = 2
    show_result_as_document: bool = False
    request_timeout: float = 30.0


def find_workspace_file(start: Path) -> Path | None:
    """Look for the workspace settings file in ``start`` and its parents."""
    directory = start if start.is_dir() else start.parent
    for candidate_dir in (directory, *directory.parents):
        candidate = candidate_dir / WORKSPACE_FILE
        if candidate.is_file():
            return candidate
    return None


def _read_workspace(path: Path) -> dict:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Could not read settings file {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"Settings file {path} must contain a mapping")

    values: dict = {}
    section = data.get(SECTION)
    if isinstance(section, dict):
        values.update(section)
    prefix = SECTION + "."
    for key, value in data.items():
        if isinstance(key, str) and key.startswith(prefix):
            values[key[len(prefix):]] = value
    return values


def load_settings(workspace_file: Path | None = None, **overrides) -> Settings:
    """Build settings from the workspace file and session overrides.

    ``None`` values in either tier count as unset and fall through to the next one.
    """
    values: dict = {}
    if workspace_file is not None:
        # Empty keys (`host:` or `host: ""`) are unset, like missing ones.
        values.update({key: value for key, value in _read_workspace(workspace_file).items() if value not in (None, "")})

    session = {key: value for key, value in overrides.items() if value is not None}
    try:
        workspace = Settings(**values)
        return Settings(**{**workspace.model_dump(), **session})
    except ValidationError as e:
        raise ConfigError(f"Invalid settings: {e}") from e
