"""Capability checks for operations that change store settings."""

from __future__ import annotations

import secrets
from typing import Optional, Protocol

BEARER_PREFIX = "bearer "


class Authorizer(Protocol):
    def can_manage_settings(self) -> bool: ...


class StaticAuthorizer:
    """Fixed answer; used by the stdio transport and in tests."""

    def __init__(self, allowed: bool) -> None:
        self.allowed = allowed

    def can_manage_settings(self) -> bool:
        return self.allowed


class TokenAuthorizer:
    """Grants the capability when the presented bearer token matches the admin token."""

    def __init__(self, admin_token: Optional[str], authorization_header: Optional[str]) -> None:
        self._admin_token = admin_token
        self._presented = _parse_bearer(authorization_header)

    def can_manage_settings(self) -> bool:
        if not self._admin_token or not self._presented:
            return False
        return secrets.compare_digest(self._presented.encode("utf-8"), self._admin_token.encode("utf-8"))


def _parse_bearer(header: Optional[str]) -> Optional[str]:
    if not header:
        return None
    if not header.lower().startswith(BEARER_PREFIX):
        return None
    token = header[len(BEARER_PREFIX):].strip()
    return token or None
