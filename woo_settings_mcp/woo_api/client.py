"""
Thin HTTP client for the WooCommerce REST API (``/wp-json/wc/v3``).

Only the general-settings and reference-data endpoints are used. HTTP and
transport failures are mapped to internal exceptions that the tool layer turns
into safe, user-facing messages.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import httpx

from woo_settings_mcp.config import SettingsMcpConfig, default_config

logger = logging.getLogger(__name__)

SETTINGS_GROUP = "general"


class WooApiError(Exception):
    """Base exception for WooCommerce REST API errors."""

    def __init__(
        self,
        message: str,
        *,
        code: Optional[str] = None,
        status_code: Optional[int] = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.status_code = status_code


class UnauthorizedError(WooApiError):
    """Raised when the store rejects the consumer key/secret."""


class NotFoundError(WooApiError):
    """Raised when a setting or location does not exist."""


class StoreUnreachableError(WooApiError):
    """Raised when the store cannot be reached."""


def _to_code_map(items: Any, *, label_key: str = "name") -> Dict[str, str]:
    """Collapse ``[{"code": ..., "name": ...}, ...]`` into ``{code: name}``."""
    mapping: Dict[str, str] = {}
    if not isinstance(items, list):
        return mapping
    for item in items:
        if not isinstance(item, dict):
            continue
        code = item.get("code")
        if not isinstance(code, str) or not code:
            continue
        label = item.get(label_key)
        mapping[code] = label if isinstance(label, str) else code
    return mapping


class WooCommerceApiClient:
    """Async client for the limited WooCommerce REST surface."""

    def __init__(
        self,
        config: SettingsMcpConfig | None = None,
        *,
        async_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.config = config or default_config
        self._client: Optional[httpx.AsyncClient] = async_client
        self._owns_client = async_client is None

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            auth = None
            if self.config.consumer_key and self.config.consumer_secret:
                auth = httpx.BasicAuth(self.config.consumer_key, self.config.consumer_secret)
            self._client = httpx.AsyncClient(
                base_url=self.config.api_base_url, timeout=self.config.timeout, auth=auth
            )
            self._owns_client = True
        return self._client

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    def _map_error(self, error_code: Optional[str], status_code: int, message: Optional[str] = None) -> WooApiError:
        if status_code in {401, 403}:
            return UnauthorizedError(
                "Unauthorized: check the WooCommerce consumer key and secret.",
                code=error_code,
                status_code=status_code,
            )
        if status_code == 404:
            return NotFoundError(message or "Resource not found.", code=error_code, status_code=status_code)
        return WooApiError(message or "WooCommerce API error.", code=error_code, status_code=status_code)

    def _process_response(self, response: httpx.Response) -> Any:
        try:
            data = response.json()
        except ValueError:
            data = None

        if response.status_code >= 400:
            error_code: Optional[str] = None
            message: Optional[str] = None
            if isinstance(data, dict):
                raw_code = data.get("code")
                if isinstance(raw_code, str):
                    error_code = raw_code
                raw_message = data.get("message")
                if isinstance(raw_message, str):
                    message = raw_message
            raise self._map_error(error_code, response.status_code, message=message)

        if data is None:
            raise WooApiError("Unexpected response from store.", status_code=response.status_code)
        return data

    async def _request(self, method: str, path: str, *, json_body: Optional[Dict[str, Any]] = None) -> Any:
        client = await self._get_client()
        try:
            response = await client.request(method, path, json=json_body)
        except httpx.RequestError as exc:
            logger.warning("WooCommerce store unreachable for %s %s", method, path)
            raise StoreUnreachableError("Store unreachable") from exc
        return self._process_response(response)

    async def ping(self) -> bool:
        """Return True when the REST index answers."""
        try:
            await self._request("GET", "/")
        except WooApiError:
            return False
        return True

    async def fetch_setting(self, option_name: str) -> Dict[str, Any]:
        """Retrieve one general setting (``{"id", "value", ...}``)."""
        encoded = quote(option_name, safe="")
        data = await self._request("GET", f"/settings/{SETTINGS_GROUP}/{encoded}")
        if not isinstance(data, dict):
            raise WooApiError("Unexpected response from store.")
        return data

    async def update_setting(self, option_name: str, value: Any) -> Dict[str, Any]:
        """Write one general setting and return the store's view of it."""
        encoded = quote(option_name, safe="")
        data = await self._request("PUT", f"/settings/{SETTINGS_GROUP}/{encoded}", json_body={"value": value})
        if not isinstance(data, dict):
            raise WooApiError("Unexpected response from store.")
        return data

    async def fetch_currencies(self) -> Dict[str, str]:
        """Return ``{currency_code: name}``."""
        return _to_code_map(await self._request("GET", "/data/currencies"))

    async def fetch_countries(self) -> Dict[str, str]:
        """Return ``{country_code: name}``."""
        return _to_code_map(await self._request("GET", "/data/countries"))

    async def fetch_states(self, country_code: str) -> Dict[str, str]:
        """Return ``{state_code: name}``; empty when the country has no subdivisions."""
        encoded = quote(country_code.lower(), safe="")
        try:
            data = await self._request("GET", f"/data/countries/{encoded}")
        except NotFoundError:
            return {}
        states: List[Any] = data.get("states", []) if isinstance(data, dict) else []
        return _to_code_map(states)
