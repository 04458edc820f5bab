"""Logging setup shared by the HTTP and stdio transports."""

from __future__ import annotations

import json
import logging
import sys

from woo_settings_mcp.config import SettingsMcpConfig

_EXTRA_KEYS = ("tool", "request_id", "method", "option_name", "error")


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "level": record.levelname,
            "message": record.getMessage(),
            "name": record.name,
        }
        for key in _EXTRA_KEYS:
            if hasattr(record, key):
                payload[key] = getattr(record, key)
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


def configure_logging(config: SettingsMcpConfig) -> None:
    """
    Install a single stderr handler on the root logger.

    stdout is left untouched so the stdio transport can own it.
    """
    level = getattr(logging, config.log_level.upper(), logging.INFO)
    handler = logging.StreamHandler(sys.stderr)
    if config.log_format.lower() == "json":
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter("[%(asctime)s] [%(levelname)s] [%(name)s] %(message)s"))
    logging.basicConfig(level=level, handlers=[handler], force=True)
