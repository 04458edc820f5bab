"""
Settings service: composes the registry, store, reference data, and validator.

Reads decorate stored values with descriptor metadata. Writes run
validate -> sanitize -> persist, and a write the store declines is told apart
from a genuine no-op by re-reading the stored value.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Optional, Union

from woo_settings_mcp.reference import ReferenceResolver
from woo_settings_mcp.schema import SchemaRegistry, SettingDescriptor
from woo_settings_mcp.store import SettingsStore
from woo_settings_mcp.validation import SettingsValidator

logger = logging.getLogger(__name__)

SettingListener = Callable[[str, Any, Any], None]
AllowedValues = Union[List[str], Dict[str, str], None]

CURRENCY_KEYS = frozenset({"woocommerce_currency"})
COUNTRY_KEYS = frozenset(
    {
        "woocommerce_default_country",
        "woocommerce_all_except_countries",
        "woocommerce_specific_allowed_countries",
        "woocommerce_specific_ship_to_countries",
    }
)


@dataclass(slots=True)
class SettingValue:
    option_name: str
    value: Any
    descriptor: SettingDescriptor
    allowed_values: AllowedValues = None

    @property
    def group(self) -> str:
        return self.descriptor.group

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "option_name": self.option_name,
            "value": self.value,
            "type": self.descriptor.type.value,
            "label": self.descriptor.label,
            "description": self.descriptor.description,
            "group": self.descriptor.group,
            "allowed_values": self.allowed_values,
        }
        if self.descriptor.min is not None:
            data["min"] = self.descriptor.min
        if self.descriptor.max is not None:
            data["max"] = self.descriptor.max
        return data


@dataclass(slots=True)
class UpdateResult:
    success: bool
    message: str
    value: Any = None
    has_value: bool = field(default=False, repr=False)

    @classmethod
    def failed(cls, message: str) -> "UpdateResult":
        return cls(success=False, message=message)

    @classmethod
    def succeeded(cls, message: str, value: Any) -> "UpdateResult":
        return cls(success=True, message=message, value=value, has_value=True)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"success": self.success, "message": self.message}
        if self.has_value:
            data["value"] = self.value
        return data


class SettingsService:
    def __init__(
        self,
        registry: SchemaRegistry,
        store: SettingsStore,
        resolver: ReferenceResolver,
        validator: Optional[SettingsValidator] = None,
        listeners: Optional[Iterable[SettingListener]] = None,
    ) -> None:
        self.registry = registry
        self.store = store
        self.resolver = resolver
        self.validator = validator or SettingsValidator(registry, resolver)
        self._listeners: List[SettingListener] = list(listeners or [])

    def add_listener(self, listener: SettingListener) -> None:
        self._listeners.append(listener)

    async def list_settings(self) -> List[SettingValue]:
        """Every registered setting, in registry order."""
        return [await self._compose(key, descriptor) for key, descriptor in self.registry.all()]

    async def get_setting(self, key: str) -> Optional[SettingValue]:
        descriptor = self.registry.get(key)
        if descriptor is None:
            return None
        return await self._compose(key, descriptor)

    async def update_setting(self, key: str, raw_value: Any) -> UpdateResult:
        descriptor = self.registry.get(key)
        if descriptor is None:
            return UpdateResult.failed(f"Unknown setting: {key}")

        validation = await self.validator.validate_against(descriptor, raw_value)
        if not validation.valid:
            return UpdateResult.failed(validation.message)

        sanitized = self.validator.sanitize_against(descriptor, raw_value)
        if await self.store.update_option(key, sanitized):
            self._notify(key, sanitized, raw_value)
            return UpdateResult.succeeded(f"Setting {key} updated successfully.", sanitized)

        current = await self.store.get_option(key, None)
        if current == sanitized:
            return UpdateResult.succeeded(f"Setting {key} already has this value.", sanitized)

        return UpdateResult.failed(f"Failed to update setting: {key}")

    async def _compose(self, key: str, descriptor: SettingDescriptor) -> SettingValue:
        value = await self.store.get_option(key, "")
        return SettingValue(
            option_name=key,
            value=value,
            descriptor=descriptor,
            allowed_values=await self._allowed_values(key, descriptor),
        )

    async def _allowed_values(self, key: str, descriptor: SettingDescriptor) -> AllowedValues:
        # Dynamic sets replace whatever the descriptor declares for these keys.
        if key in CURRENCY_KEYS:
            return await self.resolver.currencies()
        if key in COUNTRY_KEYS:
            return await self.resolver.countries()
        if descriptor.allowed_values is not None:
            return list(descriptor.allowed_values)
        return None

    def _notify(self, key: str, sanitized: Any, original: Any) -> None:
        for listener in self._listeners:
            try:
                listener(key, sanitized, original)
            except Exception:
                logger.exception(
                    "Setting listener failed for %s", key, extra={"option_name": key}
                )
