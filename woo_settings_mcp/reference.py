"""
Dynamic allowed-value sets: currencies, countries, and per-country states.

``ReferenceResolver`` never raises. When the underlying provider is missing or
fails, it logs and answers with an empty mapping so callers can treat "no
reference data" as a normal outcome.
"""

from __future__ import annotations

import logging
from typing import Dict, Mapping, Optional, Protocol

from woo_settings_mcp.woo_api import WooApiError

logger = logging.getLogger(__name__)


class ReferenceProvider(Protocol):
    async def fetch_currencies(self) -> Dict[str, str]: ...

    async def fetch_countries(self) -> Dict[str, str]: ...

    async def fetch_states(self, country_code: str) -> Dict[str, str]: ...


# Bundled reference data for the in-memory backend. A live store supplies its own.
STATIC_CURRENCIES: Dict[str, str] = {
    "AUD": "Australian dollar",
    "BRL": "Brazilian real",
    "CAD": "Canadian dollar",
    "CHF": "Swiss franc",
    "CNY": "Chinese yuan",
    "DKK": "Danish krone",
    "EUR": "Euro",
    "GBP": "Pound sterling",
    "HKD": "Hong Kong dollar",
    "INR": "Indian rupee",
    "JPY": "Japanese yen",
    "KRW": "South Korean won",
    "MXN": "Mexican peso",
    "NOK": "Norwegian krone",
    "NZD": "New Zealand dollar",
    "PLN": "Polish złoty",
    "SEK": "Swedish krona",
    "SGD": "Singapore dollar",
    "USD": "United States (US) dollar",
    "ZAR": "South African rand",
}

STATIC_COUNTRIES: Dict[str, str] = {
    "AU": "Australia",
    "AT": "Austria",
    "BE": "Belgium",
    "BR": "Brazil",
    "CA": "Canada",
    "CH": "Switzerland",
    "CN": "China",
    "DE": "Germany",
    "DK": "Denmark",
    "ES": "Spain",
    "FR": "France",
    "GB": "United Kingdom (UK)",
    "IE": "Ireland",
    "IN": "India",
    "IT": "Italy",
    "JP": "Japan",
    "MX": "Mexico",
    "NL": "Netherlands",
    "NO": "Norway",
    "NZ": "New Zealand",
    "PL": "Poland",
    "SE": "Sweden",
    "SG": "Singapore",
    "US": "United States (US)",
    "ZA": "South Africa",
}

STATIC_STATES: Dict[str, Dict[str, str]] = {
    "US": {
        "AL": "Alabama",
        "AK": "Alaska",
        "AZ": "Arizona",
        "AR": "Arkansas",
        "CA": "California",
        "CO": "Colorado",
        "CT": "Connecticut",
        "DE": "Delaware",
        "DC": "District Of Columbia",
        "FL": "Florida",
        "GA": "Georgia",
        "HI": "Hawaii",
        "ID": "Idaho",
        "IL": "Illinois",
        "IN": "Indiana",
        "IA": "Iowa",
        "KS": "Kansas",
        "KY": "Kentucky",
        "LA": "Louisiana",
        "ME": "Maine",
        "MD": "Maryland",
        "MA": "Massachusetts",
        "MI": "Michigan",
        "MN": "Minnesota",
        "MS": "Mississippi",
        "MO": "Missouri",
        "MT": "Montana",
        "NE": "Nebraska",
        "NV": "Nevada",
        "NH": "New Hampshire",
        "NJ": "New Jersey",
        "NM": "New Mexico",
        "NY": "New York",
        "NC": "North Carolina",
        "ND": "North Dakota",
        "OH": "Ohio",
        "OK": "Oklahoma",
        "OR": "Oregon",
        "PA": "Pennsylvania",
        "RI": "Rhode Island",
        "SC": "South Carolina",
        "SD": "South Dakota",
        "TN": "Tennessee",
        "TX": "Texas",
        "UT": "Utah",
        "VT": "Vermont",
        "VA": "Virginia",
        "WA": "Washington",
        "WV": "West Virginia",
        "WI": "Wisconsin",
        "WY": "Wyoming",
    },
    "CA": {
        "AB": "Alberta",
        "BC": "British Columbia",
        "MB": "Manitoba",
        "NB": "New Brunswick",
        "NL": "Newfoundland and Labrador",
        "NT": "Northwest Territories",
        "NS": "Nova Scotia",
        "NU": "Nunavut",
        "ON": "Ontario",
        "PE": "Prince Edward Island",
        "QC": "Quebec",
        "SK": "Saskatchewan",
        "YT": "Yukon Territory",
    },
    "AU": {
        "ACT": "Australian Capital Territory",
        "NSW": "New South Wales",
        "NT": "Northern Territory",
        "QLD": "Queensland",
        "SA": "South Australia",
        "TAS": "Tasmania",
        "VIC": "Victoria",
        "WA": "Western Australia",
    },
}


class StaticReferenceProvider:
    """Reference provider backed by in-process tables."""

    def __init__(
        self,
        currencies: Optional[Mapping[str, str]] = None,
        countries: Optional[Mapping[str, str]] = None,
        states: Optional[Mapping[str, Mapping[str, str]]] = None,
    ) -> None:
        self._currencies = dict(STATIC_CURRENCIES if currencies is None else currencies)
        self._countries = dict(STATIC_COUNTRIES if countries is None else countries)
        source_states = STATIC_STATES if states is None else states
        self._states = {code: dict(entries) for code, entries in source_states.items()}

    async def fetch_currencies(self) -> Dict[str, str]:
        return dict(self._currencies)

    async def fetch_countries(self) -> Dict[str, str]:
        return dict(self._countries)

    async def fetch_states(self, country_code: str) -> Dict[str, str]:
        return dict(self._states.get(country_code, {}))


class ReferenceResolver:
    """Read-only lookups that degrade to empty mappings."""

    def __init__(self, provider: Optional[ReferenceProvider]) -> None:
        self._provider = provider

    async def currencies(self) -> Dict[str, str]:
        if self._provider is None:
            return {}
        try:
            return dict(await self._provider.fetch_currencies())
        except WooApiError as exc:
            logger.warning("Currency list unavailable: %s", exc, extra={"error": str(exc)})
        except Exception:
            logger.exception("Unexpected error fetching currencies")
        return {}

    async def countries(self) -> Dict[str, str]:
        if self._provider is None:
            return {}
        try:
            return dict(await self._provider.fetch_countries())
        except WooApiError as exc:
            logger.warning("Country list unavailable: %s", exc, extra={"error": str(exc)})
        except Exception:
            logger.exception("Unexpected error fetching countries")
        return {}

    async def states(self, country_code: str) -> Dict[str, str]:
        if self._provider is None or not country_code:
            return {}
        try:
            return dict(await self._provider.fetch_states(country_code))
        except WooApiError as exc:
            logger.warning(
                "State list unavailable for %s: %s", country_code, exc, extra={"error": str(exc)}
            )
        except Exception:
            logger.exception("Unexpected error fetching states for %s", country_code)
        return {}
