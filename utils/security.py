"""
security helpers:
- Argon2 password hashing via argon2-cffi
- JWT creation/verification via PyJWT (access and refresh tokens, two secrets)
- JTI generation for token identifiers
"""
from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional

import jwt
from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError

from services.exceptions import InvalidToken
from services.settings import AuthSettings

ACCESS = "access"
REFRESH = "refresh"

REQUIRED_CLAIMS = ["userId", "type", "jti", "iat", "exp"]


def generate_jti() -> str:
    """Generate a unique JTI (JWT ID).
    """
    return str(uuid.uuid4())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Argon2PasswordHasher:
    """Salted, irreversible password hashing.

    Anything exposing ``hash`` and ``verify`` with the same signatures can be
    passed to the services in its place.
    """

    def __init__(self, **argon2_params):
        self._ph = PasswordHasher(**argon2_params)

    def hash(self, plaintext: str) -> str:
        return self._ph.hash(plaintext)

    def verify(self, plaintext: str, password_hash: str) -> bool:
        """Constant-time check; returns False instead of raising on mismatch."""
        try:
            return self._ph.verify(password_hash, plaintext)
        except (VerificationError, InvalidHashError):
            return False


@dataclass(frozen=True)
class TokenClaims:
    user_id: str
    token_type: str
    jti: str
    issued_at: datetime
    expires_at: datetime
    session_id: Optional[str] = None


@dataclass(frozen=True)
class TokenPair:
    access_token: str
    refresh_token: str
    refresh_expires_at: datetime


class TokenCodec:
    """
    Stateless sign/verify of access and refresh tokens.

    Access tokens are signed with ``settings.access_secret`` and refresh tokens
    with ``settings.refresh_secret``, so one kind can never be accepted as the
    other. Expiry is checked against ``clock`` rather than the wall clock.
    """

    def __init__(self, settings: AuthSettings, clock: Callable[[], datetime] = utcnow):
        self._settings = settings
        self._clock = clock

    def now(self) -> datetime:
        return self._clock()

    def _secret(self, token_type: str) -> str:
        if token_type == ACCESS:
            return self._settings.access_secret
        return self._settings.refresh_secret

    def _issue(self, user_id: str, token_type: str, session_id: str | None = None) -> tuple[str, datetime]:
        ttl = self._settings.access_ttl if token_type == ACCESS else self._settings.refresh_ttl
        # whole seconds, so the returned expiry equals the exp claim
        now = self.now().replace(microsecond=0)
        exp = now + ttl
        payload = {
            "iss": self._settings.issuer,
            "userId": str(user_id),
            "type": token_type,
            "jti": generate_jti(),
            "iat": int(now.timestamp()),
            "exp": int(exp.timestamp()),
        }
        if session_id:
            payload["sid"] = session_id
        token = jwt.encode(payload, self._secret(token_type), algorithm=self._settings.algorithm)
        return token, exp

    def issue_access_token(self, user_id: str) -> str:
        return self._issue(user_id, ACCESS)[0]

    def issue_refresh_token(self, user_id: str) -> str:
        return self._issue(user_id, REFRESH)[0]

    def issue_pair(self, user_id: str, session_id: str | None = None) -> TokenPair:
        """Both tokens of a pair carry ``session_id`` as the ``sid`` claim."""
        access_token, _ = self._issue(user_id, ACCESS, session_id)
        refresh_token, refresh_exp = self._issue(user_id, REFRESH, session_id)
        return TokenPair(access_token, refresh_token, refresh_exp)

    def verify_access_token(self, token: str) -> TokenClaims:
        return self._verify(token, ACCESS)

    def verify_refresh_token(self, token: str) -> TokenClaims:
        return self._verify(token, REFRESH)

    def _verify(self, token: str, expected_type: str) -> TokenClaims:
        """
        Decode and validate a JWT. Raises InvalidToken on a bad signature,
        malformed token, missing claims, wrong type or expiry.
        """
        if not token or not isinstance(token, str):
            raise InvalidToken()
        try:
            decoded: Dict[str, Any] = jwt.decode(
                token,
                self._secret(expected_type),
                algorithms=[self._settings.algorithm],
                issuer=self._settings.issuer,
                options={"verify_exp": False, "verify_iat": False, "require": REQUIRED_CLAIMS},
            )
        except jwt.InvalidTokenError as exc:
            raise InvalidToken() from exc

        if decoded.get("type") != expected_type:
            raise InvalidToken("Wrong token type")

        exp = decoded["exp"]
        iat = decoded["iat"]
        if not isinstance(exp, (int, float)) or not isinstance(iat, (int, float)):
            raise InvalidToken()
        if self.now().timestamp() >= exp:
            raise InvalidToken("Token expired")

        return TokenClaims(
            user_id=str(decoded["userId"]),
            token_type=expected_type,
            jti=str(decoded["jti"]),
            issued_at=datetime.fromtimestamp(iat, tz=timezone.utc),
            expires_at=datetime.fromtimestamp(exp, tz=timezone.utc),
            session_id=decoded.get("sid"),
        )
