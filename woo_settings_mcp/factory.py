"""Build the component graph once, from configuration, for either transport."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

from woo_settings_mcp.auth import Authorizer, StaticAuthorizer
from woo_settings_mcp.config import SettingsMcpConfig, default_config
from woo_settings_mcp.mcp import McpServer
from woo_settings_mcp.metrics import MetricsRecorder, default_metrics
from woo_settings_mcp.reference import ReferenceProvider, ReferenceResolver, StaticReferenceProvider
from woo_settings_mcp.schema import SchemaRegistry, default_registry
from woo_settings_mcp.settings import SettingsService
from woo_settings_mcp.store import InMemorySettingsStore, RestSettingsStore, SettingsStore
from woo_settings_mcp.validation import SettingsValidator
from woo_settings_mcp.woo_api import WooCommerceApiClient

logger = logging.getLogger(__name__)

BACKEND_MEMORY = "memory"
BACKEND_REST = "rest"


@dataclass(slots=True)
class Components:
    config: SettingsMcpConfig
    registry: SchemaRegistry
    store: SettingsStore
    resolver: ReferenceResolver
    service: SettingsService
    mcp_server: McpServer
    metrics: MetricsRecorder
    client: Optional[WooCommerceApiClient] = None

    async def aclose(self) -> None:
        if self.client is not None:
            await self.client.aclose()


def _log_setting_change(option_name: str, value: Any, original: Any) -> None:
    logger.info(
        "setting updated option=%s", option_name, extra={"option_name": option_name}
    )


def build_components(
    config: SettingsMcpConfig = default_config,
    *,
    authorizer: Optional[Authorizer] = None,
    store: Optional[SettingsStore] = None,
    provider: Optional[ReferenceProvider] = None,
    metrics: MetricsRecorder = default_metrics,
) -> Components:
    """
    Wire registry, store, reference data, service, and dispatcher.

    Explicit ``store``/``provider`` arguments win over the configured backend.
    """
    client: Optional[WooCommerceApiClient] = None
    backend = config.backend.lower()
    if backend == BACKEND_REST and (store is None or provider is None):
        if not config.store_url:
            raise ValueError("WOO_STORE_URL is required for the rest backend.")
        client = WooCommerceApiClient(config)
    elif backend not in (BACKEND_REST, BACKEND_MEMORY):
        raise ValueError(f"Unknown backend: {config.backend}")

    if store is None:
        store = RestSettingsStore(client) if client is not None else InMemorySettingsStore()
    if provider is None:
        provider = client if client is not None else StaticReferenceProvider()

    registry = default_registry
    resolver = ReferenceResolver(provider)
    service = SettingsService(
        registry,
        store,
        resolver,
        SettingsValidator(registry, resolver),
        listeners=[_log_setting_change, lambda key, _value, _original: metrics.record_setting_change(key)],
    )
    mcp_server = McpServer(
        service,
        authorizer or StaticAuthorizer(config.stdio_can_manage),
        metrics=metrics,
    )
    logger.debug("components built backend=%s", backend)
    return Components(
        config=config,
        registry=registry,
        store=store,
        resolver=resolver,
        service=service,
        mcp_server=mcp_server,
        metrics=metrics,
        client=client,
    )
