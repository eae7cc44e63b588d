"""YAML configuration loader with env var resolution and Pydantic validation.

Loads config from (priority order):
1. --config <path> CLI flag (or INVOICEHUB_CONFIG_PATH)
2. ./invoicehub.yaml (working directory)
3. ~/.invoicehub/config.yaml (user home)

Environment variables override YAML: INVOICEHUB_<SECTION>_<KEY>.
${VAR} references in YAML values resolve from environment at load time.
"""

import logging
import os
import re
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, field_validator

logger = logging.getLogger(__name__)

_ENV_VAR_PATTERN = re.compile(r"\$\{([^}]+)\}")
_ENV_PREFIX = "INVOICEHUB_"


def resolve_env_vars(value: str) -> str:
    """Resolve ${VAR} references in a string from environment variables.

    Missing env vars resolve to empty string.
    """
    def _replace(match: re.Match) -> str:
        return os.environ.get(match.group(1), "")

    return _ENV_VAR_PATTERN.sub(_replace, value)


def _resolve_env_vars_recursive(data: Any) -> Any:
    """Recursively resolve ${VAR} references in a nested data structure."""
    if isinstance(data, str):
        return resolve_env_vars(data)
    elif isinstance(data, dict):
        return {k: _resolve_env_vars_recursive(v) for k, v in data.items()}
    elif isinstance(data, list):
        return [_resolve_env_vars_recursive(item) for item in data]
    return data


class ServerConfig(BaseModel):
    """Configuration for the HTTP server process."""

    host: str = "127.0.0.1"
    port: int = 8000
    log_level: str = "info"
    log_format: Literal["text", "json"] = "text"
    log_file: str | None = None


class FetchConfig(BaseModel):
    """Fetch session behaviour."""

    # Seconds to wait for a verification code; null waits forever.
    code_timeout_seconds: float | None = 600.0

    @field_validator("code_timeout_seconds")
    @classmethod
    def positive_timeout(cls, value: float | None) -> float | None:
        if value is not None and value <= 0:
            raise ValueError("code_timeout_seconds must be positive or null")
        return value


class StorageConfig(BaseModel):
    """Database and export locations."""

    database_url: str | None = None
    output_dir: str | None = None


class VaultConfig(BaseModel):
    """Credential vault configuration."""

    service_name: str = "com.invoicehub.app"


class InvoiceHubConfig(BaseModel):
    """Top-level configuration for InvoiceHub."""

    server: ServerConfig = ServerConfig()
    fetch: FetchConfig = FetchConfig()
    storage: StorageConfig = StorageConfig()
    vault: VaultConfig = VaultConfig()


def _find_config_file() -> Path | None:
    """Search for config file in standard locations.

    Returns:
        Path to config file if found, None otherwise.
    """
    env_path = os.environ.get(f"{_ENV_PREFIX}CONFIG_PATH", "").strip()
    if env_path:
        return Path(env_path).expanduser()

    candidates = [
        Path.cwd() / "invoicehub.yaml",
        Path.cwd() / "invoicehub.yml",
        Path.home() / ".invoicehub" / "config.yaml",
        Path.home() / ".invoicehub" / "config.yml",
    ]
    for candidate in candidates:
        if candidate.exists():
            return candidate
    return None


def _coerce(value: str) -> Any:
    if value.lower() in ("none", "null"):
        return None
    if value.lower() in ("true", "false"):
        return value.lower() == "true"
    for cast in (int, float):
        try:
            return cast(value)
        except ValueError:
            continue
    return value


def _apply_env_overrides(data: dict[str, Any]) -> dict[str, Any]:
    """Apply INVOICEHUB_<SECTION>_<KEY> env var overrides to config data.

    For example, ``INVOICEHUB_FETCH_CODE_TIMEOUT_SECONDS`` maps to section
    ``fetch``, field ``code_timeout_seconds``. Variables that do not name a
    known section (such as ``INVOICEHUB_DATABASE_URL``) are ignored here.
    """
    known_sections = sorted(InvoiceHubConfig.model_fields.keys(), key=len, reverse=True)
    for key, value in os.environ.items():
        if not key.startswith(_ENV_PREFIX):
            continue
        suffix = key[len(_ENV_PREFIX):].lower()
        matched_section = None
        matched_field = None
        for section in known_sections:
            section_prefix = section + "_"
            if suffix.startswith(section_prefix):
                matched_section = section
                matched_field = suffix[len(section_prefix):]
                break
        if matched_section is None or not matched_field:
            continue
        section_data = data.setdefault(matched_section, {})
        if isinstance(section_data, dict):
            section_data[matched_field] = _coerce(value)
    return data


def load_config(config_path: str | None = None) -> InvoiceHubConfig | None:
    """Load configuration from YAML file with env var resolution.

    Args:
        config_path: Explicit path to config file. If None, searches
            standard locations.

    Returns:
        Parsed and validated InvoiceHubConfig, or None if no config found.

    Raises:
        FileNotFoundError: If an explicit path does not exist.
    """
    if config_path:
        path = Path(config_path).expanduser()
    else:
        path = _find_config_file()
        if path is None:
            return None
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    logger.info("Loading config from %s", path)

    with open(path) as f:
        raw_data = yaml.safe_load(f) or {}

    data = _resolve_env_vars_recursive(raw_data)
    data = _apply_env_overrides(data)
    return InvoiceHubConfig(**data)


def load_config_or_default(config_path: str | None = None) -> InvoiceHubConfig:
    """Like :func:`load_config`, but env overrides apply even without a file."""
    config = load_config(config_path)
    if config is None:
        config = InvoiceHubConfig(**_apply_env_overrides({}))
    return config
