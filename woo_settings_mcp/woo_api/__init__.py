"""HTTP client wrappers for the WooCommerce REST API."""

from .client import (
    NotFoundError,
    StoreUnreachableError,
    UnauthorizedError,
    WooApiError,
    WooCommerceApiClient,
)

__all__ = [
    "WooCommerceApiClient",
    "WooApiError",
    "NotFoundError",
    "UnauthorizedError",
    "StoreUnreachableError",
]
