from __future__ import annotations

import logging
import os
import sys
from collections.abc import Mapping
from importlib import metadata
from pathlib import Path

from .errors import ConfigurationError

API_KEY_ENV = "NUTRIENT_DWS_API_KEY"
SANDBOX_ENV = "SANDBOX_PATH"
BASE_URL_ENV = "NUTRIENT_DWS_API_BASE_URL"
DATA_DIR_ENV = "DWS_TOOLBOX_DATA_DIR"
LOG_LEVEL_ENV = "DWS_TOOLBOX_LOG_LEVEL"

DEFAULT_BASE_URL = "https://api.nutrient.io"
DEFAULT_DATA_DIR = Path.home() / ".dws-toolbox"
CREDITS_DB_FILENAME = "credits.db"

# AI redaction typically takes 60-120 seconds on the service side.
AI_REDACT_TIMEOUT_SECONDS = 300.0

_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"

logger = logging.getLogger(__name__)


def get_version() -> str:
    try:
        return metadata.version("dws-toolbox")
    except metadata.PackageNotFoundError:
        logger.debug("dws-toolbox is not installed; reporting unknown version")
        return "unknown"


def get_api_key(environ: Mapping[str, str] | None = None) -> str:
    env = os.environ if environ is None else environ
    api_key = env.get(API_KEY_ENV, "").strip()
    if not api_key:
        raise ConfigurationError(f"{API_KEY_ENV} not set in environment")
    return api_key


def get_base_url(environ: Mapping[str, str] | None = None) -> str:
    env = os.environ if environ is None else environ
    return (env.get(BASE_URL_ENV) or DEFAULT_BASE_URL).rstrip("/")


def resolve_sandbox_setting(cli_value: str | None, env_value: str | None) -> str | None:
    """Pick the sandbox directory; the command line flag wins over the environment."""

    if cli_value:
        return cli_value
    return env_value or None


def data_dir(environ: Mapping[str, str] | None = None) -> Path:
    env = os.environ if environ is None else environ
    configured = env.get(DATA_DIR_ENV)
    if configured:
        return Path(configured).expanduser()
    return DEFAULT_DATA_DIR


def credits_db_path(environ: Mapping[str, str] | None = None) -> Path:
    return data_dir(environ) / CREDITS_DB_FILENAME


def configure_logging(level: str | None = None) -> None:
    """Send log records to stderr; stdout carries the MCP stdio framing."""

    name = (level or os.environ.get(LOG_LEVEL_ENV) or "INFO").upper()
    logging.basicConfig(
        level=getattr(logging, name, logging.INFO),
        stream=sys.stderr,
        format=_LOG_FORMAT,
        force=True,
    )


__all__ = [
    "AI_REDACT_TIMEOUT_SECONDS",
    "API_KEY_ENV",
    "BASE_URL_ENV",
    "DATA_DIR_ENV",
    "DEFAULT_BASE_URL",
    "LOG_LEVEL_ENV",
    "SANDBOX_ENV",
    "configure_logging",
    "credits_db_path",
    "data_dir",
    "get_api_key",
    "get_base_url",
    "get_version",
    "resolve_sandbox_setting",
]
