"""
Immutable auth settings, built once from the Flask config at app creation.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Mapping

from services.exceptions import ConfigurationError

DEFAULT_ACCESS_TTL = timedelta(days=7)
DEFAULT_REFRESH_TTL = timedelta(days=30)


@dataclass(frozen=True)
class AuthSettings:
    access_secret: str
    refresh_secret: str
    algorithm: str = "HS256"
    issuer: str = "personal-finance-api"
    access_ttl: timedelta = DEFAULT_ACCESS_TTL
    refresh_ttl: timedelta = DEFAULT_REFRESH_TTL

    def __post_init__(self):
        if not self.access_secret or not self.refresh_secret:
            raise ConfigurationError("JWT_ACCESS_SECRET and JWT_REFRESH_SECRET must both be set")
        if self.access_secret == self.refresh_secret:
            raise ConfigurationError("JWT_ACCESS_SECRET and JWT_REFRESH_SECRET must differ")
        if self.access_ttl <= timedelta(0) or self.refresh_ttl <= timedelta(0):
            raise ConfigurationError("Token lifetimes must be positive")

    @classmethod
    def from_mapping(cls, config: Mapping[str, Any]) -> "AuthSettings":
        """Build settings from a Flask config (or any mapping)."""
        return cls(
            access_secret=config.get("JWT_ACCESS_SECRET") or "",
            refresh_secret=config.get("JWT_REFRESH_SECRET") or "",
            algorithm=config.get("JWT_ALGORITHM", "HS256"),
            issuer=config.get("JWT_ISSUER", "personal-finance-api"),
            access_ttl=config.get("ACCESS_TOKEN_EXPIRES", DEFAULT_ACCESS_TTL),
            refresh_ttl=config.get("REFRESH_TOKEN_EXPIRES", DEFAULT_REFRESH_TTL),
        )
