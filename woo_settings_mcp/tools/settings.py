"""Settings tools exposed over MCP: list, get, and update."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from woo_settings_mcp.auth import Authorizer
from woo_settings_mcp.schema import GROUPS
from woo_settings_mcp.settings import SettingsService
from woo_settings_mcp.woo_api import StoreUnreachableError, UnauthorizedError, WooApiError

logger = logging.getLogger(__name__)

# Distinguishes an omitted ``value`` from an explicit null.
MISSING: Any = object()

PERMISSION_DENIED = "Permission denied: You do not have permission to update WooCommerce settings."


def _store_error(exc: WooApiError) -> Dict[str, Any]:
    if isinstance(exc, UnauthorizedError):
        return {"error": "Unauthorized: the store rejected the configured API credentials."}
    if isinstance(exc, StoreUnreachableError):
        return {"error": "Store unreachable"}
    return {"error": "WooCommerce API error."}


def _check_option_name(option_name: Any) -> Optional[Dict[str, Any]]:
    if option_name is None:
        return {"error": "Missing required parameter: option_name"}
    if not isinstance(option_name, str):
        return {"error": "Invalid parameter: option_name must be a string."}
    return None


async def list_settings(
    group: Optional[str] = None,
    *,
    service: SettingsService,
) -> Dict[str, Any]:
    """
    Return every setting keyed by option name, optionally limited to one group.

    An empty or absent group means no filtering. Unknown groups simply match nothing.
    """
    try:
        settings = await service.list_settings()
    except WooApiError as exc:
        return _store_error(exc)
    except Exception:
        logger.exception("Unexpected error listing settings")
        return {"error": "Unexpected error while listing settings."}

    if group:
        if group not in GROUPS:
            logger.debug("list_settings filter matches no known group: %s", group)
        settings = [setting for setting in settings if setting.group == group]
    return {setting.option_name: setting.to_dict() for setting in settings}


async def get_setting(
    option_name: Any = None,
    *,
    service: SettingsService,
) -> Dict[str, Any]:
    """Return one setting with its metadata and current value."""
    invalid = _check_option_name(option_name)
    if invalid:
        return invalid

    try:
        setting = await service.get_setting(option_name)
    except WooApiError as exc:
        return _store_error(exc)
    except Exception:
        logger.exception("Unexpected error reading setting %s", option_name)
        return {"error": "Unexpected error while retrieving setting."}

    if setting is None:
        return {"error": f"Unknown setting: {option_name}"}
    return setting.to_dict()


async def update_setting(
    option_name: Any = None,
    value: Any = MISSING,
    *,
    service: SettingsService,
    authorizer: Authorizer,
) -> Dict[str, Any]:
    """
    Validate, sanitize, and persist a new value for one setting.

    Argument checks come before the capability check, so callers without the
    capability still learn about malformed calls.
    """
    invalid = _check_option_name(option_name)
    if invalid:
        return invalid
    if value is MISSING:
        return {"error": "Missing required parameter: value"}
    if not authorizer.can_manage_settings():
        logger.warning(
            "update_setting denied for %s", option_name, extra={"option_name": option_name}
        )
        return {"error": PERMISSION_DENIED}

    try:
        result = await service.update_setting(option_name, value)
    except WooApiError as exc:
        return _store_error(exc)
    except Exception:
        logger.exception("Unexpected error updating setting %s", option_name)
        return {"error": "Unexpected error while updating setting."}

    if not result.success:
        return {"error": result.message}
    return {"success": True, "message": result.message, "value": result.value}
