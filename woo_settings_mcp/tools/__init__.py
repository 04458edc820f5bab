"""LLM-facing tool implementations."""

from .settings import get_setting, list_settings, update_setting

__all__ = [
    "list_settings",
    "get_setting",
    "update_setting",
]
