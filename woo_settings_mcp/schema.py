"""
Static catalog of the WooCommerce general settings exposed over MCP.

The registry is built once from ``SETTINGS_SCHEMA`` and never mutated. Its
insertion order is the canonical listing order used by ``list_settings``.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, Iterator, List, Optional, Tuple

GROUP_STORE_ADDRESS = "store_address"
GROUP_GENERAL_OPTIONS = "general_options"
GROUP_CURRENCY_OPTIONS = "currency_options"
GROUPS = (GROUP_STORE_ADDRESS, GROUP_GENERAL_OPTIONS, GROUP_CURRENCY_OPTIONS)


class SettingType(str, Enum):
    STRING = "string"
    INTEGER = "integer"
    ARRAY = "array"
    BOOLEAN = "boolean"


class Sanitizer(str, Enum):
    """Named sanitizers a descriptor may declare."""

    TEXT_FIELD = "sanitize_text_field"
    KSES_POST = "wp_kses_post"
    ABSINT = "absint"


class CustomValidator(str, Enum):
    """Named cross-referential validators a descriptor may declare."""

    COUNTRY_STATE = "validate_country_state"
    COUNTRY_CODES = "validate_country_codes"
    CURRENCY = "validate_currency"


@dataclass(frozen=True, slots=True)
class SettingDescriptor:
    type: SettingType
    label: str
    description: str
    group: str
    allowed_values: Optional[Tuple[str, ...]] = None
    min: Optional[int] = None
    max: Optional[int] = None
    sanitizer: Optional[Sanitizer] = None
    validator: Optional[CustomValidator] = None

    def __post_init__(self) -> None:
        if self.group not in GROUPS:
            raise ValueError(f"Unknown settings group: {self.group}")
        if self.min is not None and self.max is not None and self.min > self.max:
            raise ValueError(f"min {self.min} is greater than max {self.max}")

    def to_dict(self) -> Dict[str, Any]:
        """Plain representation used by the schema endpoint."""
        data: Dict[str, Any] = {
            "type": self.type.value,
            "label": self.label,
            "description": self.description,
            "group": self.group,
        }
        if self.allowed_values is not None:
            data["allowed_values"] = list(self.allowed_values)
        if self.min is not None:
            data["min"] = self.min
        if self.max is not None:
            data["max"] = self.max
        if self.sanitizer is not None:
            data["sanitize"] = self.sanitizer.value
        if self.validator is not None:
            data["validate"] = self.validator.value
        return data


SETTINGS_SCHEMA: Tuple[Tuple[str, SettingDescriptor], ...] = (
    # Store address
    (
        "woocommerce_store_address",
        SettingDescriptor(
            type=SettingType.STRING,
            label="Address line 1",
            description="The street address for your business location.",
            group=GROUP_STORE_ADDRESS,
            sanitizer=Sanitizer.TEXT_FIELD,
        ),
    ),
    (
        "woocommerce_store_address_2",
        SettingDescriptor(
            type=SettingType.STRING,
            label="Address line 2",
            description="An additional, optional address line for your business location.",
            group=GROUP_STORE_ADDRESS,
            sanitizer=Sanitizer.TEXT_FIELD,
        ),
    ),
    (
        "woocommerce_store_city",
        SettingDescriptor(
            type=SettingType.STRING,
            label="City",
            description="The city in which your business is located.",
            group=GROUP_STORE_ADDRESS,
            sanitizer=Sanitizer.TEXT_FIELD,
        ),
    ),
    (
        "woocommerce_default_country",
        SettingDescriptor(
            type=SettingType.STRING,
            label="Country / State",
            description=(
                "The country and state or province, if any, in which your business is located "
                "(format: CC:SS, e.g., US:CA)."
            ),
            group=GROUP_STORE_ADDRESS,
            sanitizer=Sanitizer.TEXT_FIELD,
            validator=CustomValidator.COUNTRY_STATE,
        ),
    ),
    (
        "woocommerce_store_postcode",
        SettingDescriptor(
            type=SettingType.STRING,
            label="Postcode / ZIP",
            description="The postal code, if any, in which your business is located.",
            group=GROUP_STORE_ADDRESS,
            sanitizer=Sanitizer.TEXT_FIELD,
        ),
    ),
    # General options
    (
        "woocommerce_allowed_countries",
        SettingDescriptor(
            type=SettingType.STRING,
            label="Selling location(s)",
            description="This option lets you limit which countries you are willing to sell to.",
            group=GROUP_GENERAL_OPTIONS,
            allowed_values=("all", "all_except", "specific"),
            sanitizer=Sanitizer.TEXT_FIELD,
        ),
    ),
    (
        "woocommerce_all_except_countries",
        SettingDescriptor(
            type=SettingType.ARRAY,
            label="Sell to all countries except",
            description='List of country codes to exclude from selling (when "all_except" is selected).',
            group=GROUP_GENERAL_OPTIONS,
            validator=CustomValidator.COUNTRY_CODES,
        ),
    ),
    (
        "woocommerce_specific_allowed_countries",
        SettingDescriptor(
            type=SettingType.ARRAY,
            label="Sell to specific countries",
            description='List of specific country codes to sell to (when "specific" is selected).',
            group=GROUP_GENERAL_OPTIONS,
            validator=CustomValidator.COUNTRY_CODES,
        ),
    ),
    (
        "woocommerce_ship_to_countries",
        SettingDescriptor(
            type=SettingType.STRING,
            label="Shipping location(s)",
            description="Choose which countries you want to ship to, or choose to disable shipping.",
            group=GROUP_GENERAL_OPTIONS,
            allowed_values=("", "all", "specific", "disabled"),
            sanitizer=Sanitizer.TEXT_FIELD,
        ),
    ),
    (
        "woocommerce_specific_ship_to_countries",
        SettingDescriptor(
            type=SettingType.ARRAY,
            label="Ship to specific countries",
            description="List of specific country codes to ship to.",
            group=GROUP_GENERAL_OPTIONS,
            validator=CustomValidator.COUNTRY_CODES,
        ),
    ),
    (
        "woocommerce_default_customer_address",
        SettingDescriptor(
            type=SettingType.STRING,
            label="Default customer location",
            description="This option determines a customers default location.",
            group=GROUP_GENERAL_OPTIONS,
            allowed_values=("", "base", "geolocation", "geolocation_ajax"),
            sanitizer=Sanitizer.TEXT_FIELD,
        ),
    ),
    # Currency options
    (
        "woocommerce_currency",
        SettingDescriptor(
            type=SettingType.STRING,
            label="Currency",
            description=(
                "This controls what currency prices are listed at in the catalog and which "
                "currency gateways will take payments in."
            ),
            group=GROUP_CURRENCY_OPTIONS,
            sanitizer=Sanitizer.TEXT_FIELD,
            validator=CustomValidator.CURRENCY,
        ),
    ),
    (
        "woocommerce_currency_pos",
        SettingDescriptor(
            type=SettingType.STRING,
            label="Currency position",
            description="This controls the position of the currency symbol.",
            group=GROUP_CURRENCY_OPTIONS,
            allowed_values=("left", "right", "left_space", "right_space"),
            sanitizer=Sanitizer.TEXT_FIELD,
        ),
    ),
    (
        "woocommerce_price_thousand_sep",
        SettingDescriptor(
            type=SettingType.STRING,
            label="Thousand separator",
            description="This sets the thousand separator of displayed prices.",
            group=GROUP_CURRENCY_OPTIONS,
            sanitizer=Sanitizer.KSES_POST,
        ),
    ),
    (
        "woocommerce_price_decimal_sep",
        SettingDescriptor(
            type=SettingType.STRING,
            label="Decimal separator",
            description="This sets the decimal separator of displayed prices.",
            group=GROUP_CURRENCY_OPTIONS,
            sanitizer=Sanitizer.KSES_POST,
        ),
    ),
    (
        "woocommerce_price_num_decimals",
        SettingDescriptor(
            type=SettingType.INTEGER,
            label="Number of decimals",
            description="This sets the number of decimal points shown in displayed prices.",
            group=GROUP_CURRENCY_OPTIONS,
            min=0,
            max=8,
            sanitizer=Sanitizer.ABSINT,
        ),
    ),
)


class SchemaRegistry:
    """Read-only, ordered lookup of setting descriptors."""

    def __init__(self, entries: Iterable[Tuple[str, SettingDescriptor]] = SETTINGS_SCHEMA) -> None:
        self._entries: Dict[str, SettingDescriptor] = {}
        for key, descriptor in entries:
            if key in self._entries:
                raise ValueError(f"Duplicate setting key: {key}")
            self._entries[key] = descriptor

    def get(self, key: str) -> Optional[SettingDescriptor]:
        return self._entries.get(key)

    def all(self) -> List[Tuple[str, SettingDescriptor]]:
        return list(self._entries.items())

    def keys(self) -> List[str]:
        return list(self._entries)

    def as_dict(self) -> Dict[str, Dict[str, Any]]:
        return {key: descriptor.to_dict() for key, descriptor in self._entries.items()}

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)


default_registry = SchemaRegistry()
