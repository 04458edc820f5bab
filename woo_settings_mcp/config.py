"""
Configuration helpers for the WooCommerce settings MCP server.

This module centralizes backend selection, store credentials, default timeouts,
and logging options. No secrets are stored in the repository; credentials are
read from environment or a local file if present.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple

# Store connection settings
DEFAULT_STORE_URL = os.getenv("WOO_STORE_URL", "")
REST_API_PREFIX = "/wp-json/wc/v3"


def _load_timeout() -> float:
    raw_timeout = os.getenv("WOO_HTTP_TIMEOUT")
    if raw_timeout:
        try:
            return float(raw_timeout)
        except ValueError:
            return 10.0
    return 10.0


def _env_flag(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y"}


def _default_backend() -> str:
    explicit = os.getenv("WOO_SETTINGS_MCP_BACKEND")
    if explicit:
        return explicit.strip().lower()
    return "rest" if DEFAULT_STORE_URL else "memory"


DEFAULT_TIMEOUT = _load_timeout()

# Credential handling
CONSUMER_KEY_ENV_VAR = "WOO_CONSUMER_KEY"
CONSUMER_SECRET_ENV_VAR = "WOO_CONSUMER_SECRET"
CREDENTIALS_FILE_ENV_VAR = "WOO_CREDENTIALS_FILE"
DEFAULT_CREDENTIALS_FILE = "woo-credentials.txt"
ADMIN_TOKEN_ENV_VAR = "WOO_SETTINGS_MCP_ADMIN_TOKEN"

LOG_LEVEL = os.getenv("WOO_SETTINGS_MCP_LOG_LEVEL", "INFO")
LOG_FORMAT = os.getenv("WOO_SETTINGS_MCP_LOG_FORMAT", "json")  # json or plain


def load_credentials() -> Tuple[Optional[str], Optional[str]]:
    """
    Load the WooCommerce REST consumer key and secret.

    Environment variables win; otherwise a ``key:secret`` line is read from the
    file named by ``WOO_CREDENTIALS_FILE``.

    Returns:
        ``(consumer_key, consumer_secret)``; either may be None. Credentials are
        never logged or returned to MCP callers.
    """
    env_key = os.getenv(CONSUMER_KEY_ENV_VAR)
    env_secret = os.getenv(CONSUMER_SECRET_ENV_VAR)
    if env_key and env_secret:
        return env_key.strip(), env_secret.strip()

    creds_path = os.getenv(CREDENTIALS_FILE_ENV_VAR, DEFAULT_CREDENTIALS_FILE)
    if creds_path:
        path = Path(creds_path)
        if path.is_file():
            raw = path.read_text(encoding="utf-8").strip()
            key, sep, secret = raw.partition(":")
            if sep and key.strip() and secret.strip():
                return key.strip(), secret.strip()

    return None, None


def load_admin_token() -> Optional[str]:
    token = os.getenv(ADMIN_TOKEN_ENV_VAR)
    if token and token.strip():
        return token.strip()
    return None


_CONSUMER_KEY, _CONSUMER_SECRET = load_credentials()


@dataclass(slots=True)
class SettingsMcpConfig:
    """Runtime configuration for the settings MCP server."""

    backend: str = _default_backend()
    store_url: str = DEFAULT_STORE_URL
    consumer_key: Optional[str] = _CONSUMER_KEY
    consumer_secret: Optional[str] = _CONSUMER_SECRET
    timeout: float = DEFAULT_TIMEOUT
    admin_token: Optional[str] = load_admin_token()
    stdio_can_manage: bool = _env_flag("WOO_SETTINGS_MCP_STDIO_CAN_MANAGE", True)
    log_level: str = LOG_LEVEL
    log_format: str = LOG_FORMAT

    @property
    def api_base_url(self) -> str:
        return self.store_url.rstrip("/") + REST_API_PREFIX


default_config = SettingsMcpConfig()
