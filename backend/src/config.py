import logging
import os
import re
from pathlib import Path
from typing import Any

import toml

DEFAULT_CONFIG_NAME = "config.toml"
DEFAULT_STORAGE_DIR = "storage"
DEFAULT_INGESTION_DIR = "pdfs"
DEFAULT_HTTP_PORT = 3000
DEFAULT_TCP_PORT = 3001
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

_ENV_PATTERN = re.compile(r"\$\{([^}:]+)(?::-([^}]*))?\}")


def resolve_path(path: str | Path, config_path: Path) -> Path:
    """Resolve a path relative to the config file's parent directory.

    Absolute paths are returned unchanged.
    """
    path = Path(path)
    if path.is_absolute():
        return path
    return (config_path.parent / path).resolve()


def find_config_path(explicit_path: Path | None = None) -> Path:
    """Locate config.toml: explicit path, DISTRICT_RAG_CONFIG, cwd, repo root."""
    if explicit_path:
        return explicit_path

    env_path = os.environ.get("DISTRICT_RAG_CONFIG")
    candidates = [Path(env_path)] if env_path else []
    candidates += [
        Path(DEFAULT_CONFIG_NAME),
        Path(__file__).parent.parent.parent / DEFAULT_CONFIG_NAME,
    ]
    for path in candidates:
        if path.exists():
            return path
    raise FileNotFoundError(f"{DEFAULT_CONFIG_NAME} not found")


def load_config(config_path: Path = Path(DEFAULT_CONFIG_NAME)) -> dict[str, Any]:
    """Load configuration from a TOML file with environment variable substitution.

    String values may reference ``${VAR}`` or ``${VAR:-default}``; unset
    variables without a default become empty strings.

    Args:
        config_path: Path to the TOML configuration file.

    Returns:
        Dictionary with configuration values.
    """
    config = toml.load(config_path)
    return _substitute_env_vars(config)


def _substitute_env_vars(value: Any) -> Any:
    if isinstance(value, str):
        return _ENV_PATTERN.sub(_env_replacer, value)
    elif isinstance(value, dict):
        return {k: _substitute_env_vars(v) for k, v in value.items()}
    elif isinstance(value, list):
        return [_substitute_env_vars(item) for item in value]
    return value


def _env_replacer(match: re.Match) -> str:
    return os.environ.get(match.group(1), match.group(2) or "")


def get_config_value(config: dict, key_path: str, default: Any = None) -> Any:
    """Get a nested config value using dot notation (e.g. "retrieval.top_k")."""
    value = config
    for key in key_path.split("."):
        if isinstance(value, dict) and key in value:
            value = value[key]
        else:
            return default
    return value


def get_storage_dir(config: dict, config_path: Path) -> Path:
    storage_dir = get_config_value(config, "storage.directory", DEFAULT_STORAGE_DIR)
    return resolve_path(storage_dir, config_path)


def get_ingestion_dir(config: dict, config_path: Path) -> Path:
    ingestion_dir = get_config_value(
        config, "ingestion.directory", DEFAULT_INGESTION_DIR
    )
    return resolve_path(ingestion_dir, config_path)


def get_server_address(config: dict) -> tuple[str, int, int]:
    """Return (host, http_port, tcp_port) from the [server] section."""
    host = get_config_value(config, "server.host", "0.0.0.0")
    http_port = int(get_config_value(config, "server.http_port", DEFAULT_HTTP_PORT))
    tcp_port = int(get_config_value(config, "server.tcp_port", DEFAULT_TCP_PORT))
    return host, http_port, tcp_port


def configure_logging(config: dict | None = None) -> None:
    """Configure root logging for an entry point."""
    level_name = get_config_value(config or {}, "logging.level", "INFO")
    logging.basicConfig(
        level=getattr(logging, str(level_name).upper(), logging.INFO),
        format=LOG_FORMAT,
    )
