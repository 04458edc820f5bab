"""Option storage backends: an in-process dict and the live WooCommerce store."""

from __future__ import annotations

import asyncio
import copy
import logging
from typing import Any, Dict, Mapping, Optional, Protocol

from woo_settings_mcp.woo_api import NotFoundError, WooApiError, WooCommerceApiClient

logger = logging.getLogger(__name__)


class SettingsStore(Protocol):
    async def get_option(self, key: str, default: Any = "") -> Any: ...

    async def update_option(self, key: str, value: Any) -> bool:
        """Return True only when a write actually happened."""
        ...

    async def is_available(self) -> bool: ...


# Stock WooCommerce values for a fresh install.
WOOCOMMERCE_DEFAULTS: Dict[str, Any] = {
    "woocommerce_store_address": "",
    "woocommerce_store_address_2": "",
    "woocommerce_store_city": "",
    "woocommerce_default_country": "US:CA",
    "woocommerce_store_postcode": "",
    "woocommerce_allowed_countries": "all",
    "woocommerce_all_except_countries": [],
    "woocommerce_specific_allowed_countries": [],
    "woocommerce_ship_to_countries": "",
    "woocommerce_specific_ship_to_countries": [],
    "woocommerce_default_customer_address": "base",
    "woocommerce_currency": "USD",
    "woocommerce_currency_pos": "left",
    "woocommerce_price_thousand_sep": ",",
    "woocommerce_price_decimal_sep": ".",
    "woocommerce_price_num_decimals": "2",
}


class InMemorySettingsStore:
    """Dict-backed store; writing an unchanged value is not a write."""

    def __init__(self, initial: Optional[Mapping[str, Any]] = None) -> None:
        source = WOOCOMMERCE_DEFAULTS if initial is None else initial
        self._options: Dict[str, Any] = copy.deepcopy(dict(source))
        self._lock = asyncio.Lock()

    async def get_option(self, key: str, default: Any = "") -> Any:
        if key not in self._options:
            return default
        return copy.deepcopy(self._options[key])

    async def update_option(self, key: str, value: Any) -> bool:
        async with self._lock:
            if key in self._options and self._options[key] == value:
                return False
            self._options[key] = copy.deepcopy(value)
            return True

    async def is_available(self) -> bool:
        return True

    def snapshot(self) -> Dict[str, Any]:
        return copy.deepcopy(self._options)


class RestSettingsStore:
    """Store adapter over the WooCommerce REST settings endpoints."""

    def __init__(self, client: WooCommerceApiClient) -> None:
        self._client = client

    async def get_option(self, key: str, default: Any = "") -> Any:
        try:
            data = await self._client.fetch_setting(key)
        except NotFoundError:
            return default
        return data.get("value", default)

    async def update_option(self, key: str, value: Any) -> bool:
        current = await self.get_option(key, None)
        if current == value:
            return False
        try:
            await self._client.update_setting(key, value)
        except WooApiError as exc:
            logger.warning(
                "Store rejected write for %s: %s",
                key,
                exc,
                extra={"option_name": key, "error": str(exc)},
            )
            return False
        return True

    async def is_available(self) -> bool:
        return await self._client.ping()
