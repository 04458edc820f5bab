"""
Validation and sanitization of candidate setting values.

Validation never mutates its input. Checks run in a fixed order and stop at the
first failure: type, static allowed values, integer bounds, then the
descriptor's custom validator. Sanitization is a separate pass that only runs
on values validation accepted, and every sanitizer is idempotent.
"""

from __future__ import annotations

import json
import math
import re
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Tuple

from woo_settings_mcp.reference import ReferenceResolver
from woo_settings_mcp.schema import (
    CustomValidator,
    Sanitizer,
    SchemaRegistry,
    SettingDescriptor,
    SettingType,
)

BOOLEAN_STRING_TOKENS = ("yes", "no", "1", "0")
BOOLEAN_TRUE = "yes"
BOOLEAN_FALSE = "no"

# Stored integers saturate at the 64-bit signed maximum.
MAX_INT = 2**63 - 1
_MAX_INT_DIGITS = len(str(MAX_INT))

_DIGITS_REGEX = re.compile(r"^[0-9]+$")
_LEADING_INT_REGEX = re.compile(r"^[+-]?[0-9]+")
_LONE_LESS_THAN_REGEX = re.compile(r"<(?![a-zA-Z/!?])")
_SCRIPT_STYLE_REGEX = re.compile(r"<(script|style)\b[^>]*>.*?</\1\s*>", re.IGNORECASE | re.DOTALL)
_COMMENT_REGEX = re.compile(r"<!--.*?(?:-->|$)", re.DOTALL)
_ANY_TAG_REGEX = re.compile(r"<[^>]*(?:>|$)")
_ELEMENT_TAG_REGEX = re.compile(r"<(/?)([a-zA-Z][a-zA-Z0-9]*)\b[^>]*>")
_UNTERMINATED_TAG_REGEX = re.compile(r"<[^>]*$")
_WHITESPACE_REGEX = re.compile(r"[\r\n\t ]+")
_OCTET_REGEX = re.compile(r"%[a-fA-F0-9]{2}")

# Inline markup that may survive in price separators.
POST_ALLOWED_TAGS = frozenset(
    {"abbr", "b", "bdi", "bdo", "code", "em", "i", "small", "span", "strong", "sub", "sup", "u"}
)


@dataclass(frozen=True, slots=True)
class ValidationResult:
    valid: bool
    message: str = ""

    @classmethod
    def ok(cls) -> "ValidationResult":
        return cls(valid=True, message="")

    @classmethod
    def fail(cls, message: str) -> "ValidationResult":
        return cls(valid=False, message=message)


def describe_type(value: Any) -> str:
    """Name a JSON value's type for error messages."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, int):
        return "integer"
    if isinstance(value, float):
        return "float"
    if isinstance(value, str):
        return "string"
    if isinstance(value, (list, tuple)):
        return "array"
    if isinstance(value, dict):
        return "object"
    return type(value).__name__


def is_digit_string(value: Any) -> bool:
    return isinstance(value, str) and bool(_DIGITS_REGEX.fullmatch(value))


def _digits_to_int(digits: str) -> int:
    """Convert unsigned ASCII digits, saturating at ``MAX_INT`` without converting huge strings."""
    digits = digits.lstrip("0") or "0"
    if len(digits) > _MAX_INT_DIGITS:
        return MAX_INT
    return min(int(digits), MAX_INT)


def _integer_value(value: Any) -> Tuple[int, str]:
    """Numeric value and display text of an input the integer type check accepted."""
    if type(value) is int:
        return value, str(value)
    digits = value.lstrip("0") or "0"
    if len(digits) > _MAX_INT_DIGITS:
        # Beyond any bound; compared as one past the maximum.
        return MAX_INT + 1, digits
    return int(digits), digits


def matches_type(value: Any, setting_type: SettingType) -> bool:
    if setting_type is SettingType.STRING:
        return isinstance(value, str)
    if setting_type is SettingType.INTEGER:
        return type(value) is int or is_digit_string(value)
    if setting_type is SettingType.ARRAY:
        return isinstance(value, list)
    if setting_type is SettingType.BOOLEAN:
        if isinstance(value, bool):
            return True
        if isinstance(value, str):
            return value in BOOLEAN_STRING_TOKENS
        return type(value) is int and value in (0, 1)
    return True


def _is_allowed(value: Any, allowed: Iterable[str]) -> bool:
    return any(type(value) is type(option) and value == option for option in allowed)


def _to_text(value: Any) -> str:
    if value is None or value is False:
        return ""
    if value is True:
        return "1"
    if isinstance(value, str):
        return value
    if isinstance(value, (list, dict)):
        return json.dumps(value)
    return str(value)


# -- sanitizers -------------------------------------------------------------


def sanitize_text_field(value: Any) -> str:
    """Strip markup, collapse whitespace, drop percent-encoded octets, and trim."""
    text = _to_text(value)
    if "<" in text:
        text = _LONE_LESS_THAN_REGEX.sub("&lt;", text)
        text = _SCRIPT_STYLE_REGEX.sub("", text)
        text = _ANY_TAG_REGEX.sub("", text)
    text = _WHITESPACE_REGEX.sub(" ", text).strip()

    found_octets = False
    while True:
        stripped = _OCTET_REGEX.sub("", text)
        if stripped == text:
            break
        text = stripped
        found_octets = True
    if found_octets:
        text = _WHITESPACE_REGEX.sub(" ", text).strip()
    return text


def _rewrite_post_tag(match: "re.Match[str]") -> str:
    closing, name = match.group(1), match.group(2).lower()
    if name not in POST_ALLOWED_TAGS:
        return ""
    return f"<{closing}{name}>"


def kses_post(value: Any) -> str:
    """
    Keep a small set of inline tags (attributes dropped) and remove the rest.

    Whitespace is preserved: a single space is a valid thousand separator.
    """
    text = _to_text(value)
    if "<" not in text:
        return text
    text = _LONE_LESS_THAN_REGEX.sub("&lt;", text)
    text = _SCRIPT_STYLE_REGEX.sub("", text)
    text = _COMMENT_REGEX.sub("", text)
    text = _ELEMENT_TAG_REGEX.sub(_rewrite_post_tag, text)
    text = re.sub(r"<[!?][^>]*>", "", text)
    return _UNTERMINATED_TAG_REGEX.sub("", text)


def absint(value: Any) -> int:
    """Coerce to a non-negative integer (leading digits of strings; 0 otherwise)."""
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return abs(value)
    if isinstance(value, float):
        return min(abs(int(value)), MAX_INT) if math.isfinite(value) else 0
    if isinstance(value, str):
        match = _LEADING_INT_REGEX.match(value.strip())
        return _digits_to_int(match.group(0).lstrip("+-")) if match else 0
    return 0


def canonical_boolean(value: Any) -> str:
    if value is True:
        return BOOLEAN_TRUE
    if isinstance(value, str) and value in ("yes", "1"):
        return BOOLEAN_TRUE
    if type(value) is int and value == 1:
        return BOOLEAN_TRUE
    return BOOLEAN_FALSE


SANITIZERS: Dict[Sanitizer, Callable[[Any], Any]] = {
    Sanitizer.TEXT_FIELD: sanitize_text_field,
    Sanitizer.KSES_POST: kses_post,
    Sanitizer.ABSINT: absint,
}


class SettingsValidator:
    """Schema-driven gate in front of every write."""

    def __init__(self, registry: SchemaRegistry, resolver: ReferenceResolver) -> None:
        self._registry = registry
        self._resolver = resolver
        self._custom_validators: Dict[CustomValidator, Callable[[Any], Awaitable[ValidationResult]]] = {
            CustomValidator.COUNTRY_STATE: self._validate_country_state,
            CustomValidator.COUNTRY_CODES: self._validate_country_codes,
            CustomValidator.CURRENCY: self._validate_currency,
        }

    async def validate(self, key: str, value: Any) -> ValidationResult:
        descriptor = self._registry.get(key)
        if descriptor is None:
            return ValidationResult.fail(f"Unknown setting: {key}")
        return await self.validate_against(descriptor, value)

    async def validate_against(self, descriptor: SettingDescriptor, value: Any) -> ValidationResult:
        if not matches_type(value, descriptor.type):
            return ValidationResult.fail(
                f"Expected type {descriptor.type.value}, got {describe_type(value)}."
            )

        if descriptor.allowed_values is not None and not _is_allowed(value, descriptor.allowed_values):
            shown = value if isinstance(value, str) else json.dumps(value)
            return ValidationResult.fail(
                f'Invalid value "{shown}". Allowed values: {", ".join(descriptor.allowed_values)}'
            )

        if descriptor.type is SettingType.INTEGER:
            number, shown = _integer_value(value)
            if descriptor.min is not None and number < descriptor.min:
                return ValidationResult.fail(f"Value {shown} is below minimum {descriptor.min}.")
            if descriptor.max is not None and number > descriptor.max:
                return ValidationResult.fail(f"Value {shown} is above maximum {descriptor.max}.")

        if descriptor.validator is not None:
            return await self._custom_validators[descriptor.validator](value)

        return ValidationResult.ok()

    def sanitize(self, key: str, value: Any) -> Any:
        descriptor = self._registry.get(key)
        if descriptor is None:
            raise KeyError(key)
        return self.sanitize_against(descriptor, value)

    def sanitize_against(self, descriptor: SettingDescriptor, value: Any) -> Any:
        if descriptor.sanitizer is not None:
            sanitize = SANITIZERS[descriptor.sanitizer]
            if descriptor.type is SettingType.ARRAY and isinstance(value, list):
                return [sanitize(item) for item in value]
            return sanitize(value)

        if descriptor.type is SettingType.STRING:
            return sanitize_text_field(value)
        if descriptor.type is SettingType.INTEGER:
            return absint(value)
        if descriptor.type is SettingType.ARRAY:
            items: List[Any]
            if value is None:
                items = []
            elif isinstance(value, list):
                items = value
            else:
                items = [value]
            return [sanitize_text_field(item) for item in items]
        if descriptor.type is SettingType.BOOLEAN:
            return canonical_boolean(value)
        return value

    async def _validate_country_state(self, value: str) -> ValidationResult:
        countries = await self._resolver.countries()
        parts = value.split(":")
        country_code = parts[0]
        if country_code not in countries:
            return ValidationResult.fail(f"Invalid country code: {country_code}")

        if len(parts) > 1 and parts[1] != "":
            states = await self._resolver.states(country_code)
            # Countries without subdivision data accept any state segment.
            if states and parts[1] not in states:
                return ValidationResult.fail(
                    f'Invalid state code "{parts[1]}" for country "{country_code}".'
                )
        return ValidationResult.ok()

    async def _validate_country_codes(self, value: List[Any]) -> ValidationResult:
        countries = await self._resolver.countries()
        invalid = [code for code in value if not isinstance(code, str) or code not in countries]
        if invalid:
            return ValidationResult.fail(
                f"Invalid country codes: {', '.join(_to_text(code) for code in invalid)}"
            )
        return ValidationResult.ok()

    async def _validate_currency(self, value: str) -> ValidationResult:
        currencies = await self._resolver.currencies()
        if value not in currencies:
            return ValidationResult.fail(f"Invalid currency code: {value}")
        return ValidationResult.ok()
