"""
Authentication and session lifecycle.

- register: create the user and its default account, return an access token
- login: check credentials, issue an access/refresh pair, persist a TokenRecord
- refresh_access_token: exchange a live refresh token for a new pair (rotation)
- logout: revoke the session(s) a token belongs to
- verify_token: resolve an access token to the current User

Access tokens are self-contained; only the refresh path reads TokenRecords.
"""
from __future__ import annotations

import logging
import secrets
from dataclasses import dataclass
from typing import Optional

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from models.account import Account
from models.base_model import uuid_str, to_naive_utc, utcnow_naive
from models.db_storage import DBStorage
from models.token_record import TokenRecord
from models.user import User
from services.account_service import AccountService
from services.exceptions import DuplicateIdentity, InternalError, InvalidCredentials, InvalidToken
from utils.security import TokenCodec, TokenPair

logger = logging.getLogger(__name__)

USER_FIELDS = ("username", "email", "full_name", "date_of_birth", "phone_number", "address")


@dataclass(frozen=True)
class RegisterResult:
    user: User
    account: Account
    access_token: str


@dataclass(frozen=True)
class LoginResult:
    access_token: str
    refresh_token: str
    user: User
    account: Optional[Account]


class AuthService:
    def __init__(self, storage: DBStorage, codec: TokenCodec, hasher, accounts: AccountService):
        self._storage = storage
        self._codec = codec
        self._hasher = hasher
        self._accounts = accounts
        self._dummy_hash = None

    @property
    def codec(self) -> TokenCodec:
        return self._codec

    def _now(self):
        return to_naive_utc(self._codec.now())

    def _commit(self) -> None:
        try:
            self._storage.save()
        except IntegrityError:
            raise
        except SQLAlchemyError as exc:
            logger.error("Session store failure: %s", exc.__class__.__name__)
            raise InternalError("Session store is unavailable") from exc

    def _find_by_login(self, username_or_email: str) -> Optional[User]:
        session = self._storage.get_session()
        return (
            session.query(User)
            .filter(or_(User.username == username_or_email, User.email == username_or_email.lower()))
            .first()
        )

    def identity_taken(self, username: str | None, email: str | None, exclude_id: str | None = None) -> bool:
        clauses = []
        if username:
            clauses.append(User.username == username)
        if email:
            clauses.append(User.email == email)
        if not clauses:
            return False
        q = self._storage.get_session().query(User.id).filter(or_(*clauses))
        if exclude_id:
            q = q.filter(User.id != exclude_id)
        return q.first() is not None

    def register(self, data: dict) -> RegisterResult:
        if self.identity_taken(data.get("username"), data.get("email")):
            raise DuplicateIdentity()

        user = User(
            password_hash=self._hasher.hash(data["password"]),
            **{k: data[k] for k in USER_FIELDS},
        )
        try:
            self._storage.new(user)
            self._storage.flush()
            account = self._accounts.provision_default(user.id)
            self._storage.save()
        except IntegrityError:
            # lost a race against a concurrent registration with the same identity
            self._storage.rollback()
            raise DuplicateIdentity()

        logger.info("Registered user %s", user.id)
        return RegisterResult(user=user, account=account, access_token=self._codec.issue_access_token(user.id))

    def _check_password(self, user: Optional[User], password: str) -> bool:
        if user is None:
            # Spend the same hashing work as a real check so unknown users are not faster
            if self._dummy_hash is None:
                self._dummy_hash = self._hasher.hash(secrets.token_urlsafe(16))
            self._hasher.verify(password, self._dummy_hash)
            return False
        return self._hasher.verify(password, user.password_hash)

    def login(self, username_or_email: str, password: str) -> LoginResult:
        user = self._find_by_login(username_or_email)
        if not self._check_password(user, password):
            logger.warning("Failed login attempt")
            raise InvalidCredentials()

        session_id = uuid_str()
        pair = self._codec.issue_pair(user.id, session_id=session_id)
        record = TokenRecord(
            id=session_id,
            user_id=user.id,
            access_token=pair.access_token,
            refresh_token=pair.refresh_token,
            expires_at=to_naive_utc(pair.refresh_expires_at),
            revoked=False,
        )
        self._storage.new(record)
        self._commit()

        logger.info("User %s logged in (session %s)", user.id, record.id)
        return LoginResult(
            access_token=pair.access_token,
            refresh_token=pair.refresh_token,
            user=user,
            account=self._accounts.primary_account(user.id),
        )

    def refresh_access_token(self, refresh_token: str) -> TokenPair:
        claims = self._codec.verify_refresh_token(refresh_token)

        session = self._storage.get_session()
        record = (
            session.query(TokenRecord)
            .filter(
                TokenRecord.refresh_token == refresh_token,
                TokenRecord.revoked.is_(False),
                TokenRecord.expires_at > self._now(),
            )
            .first()
        )
        if record is None or record.user_id != claims.user_id or claims.session_id not in (None, record.id):
            logger.warning("Refresh rejected for user %s: no live session", claims.user_id)
            raise InvalidToken("Refresh token is invalid or expired")

        pair = self._codec.issue_pair(claims.user_id, session_id=record.id)
        # Compare-and-swap on the old string: a concurrent use of the same token matches nothing
        rows = (
            session.query(TokenRecord)
            .filter(
                TokenRecord.id == record.id,
                TokenRecord.refresh_token == refresh_token,
                TokenRecord.revoked.is_(False),
            )
            .update(
                {
                    TokenRecord.access_token: pair.access_token,
                    TokenRecord.refresh_token: pair.refresh_token,
                    TokenRecord.expires_at: to_naive_utc(pair.refresh_expires_at),
                    TokenRecord.updated_at: utcnow_naive(),
                }
            )
        )
        if rows != 1:
            self._storage.rollback()
            raise InvalidToken("Refresh token is invalid or expired")
        self._commit()

        logger.info("Rotated session %s for user %s", record.id, claims.user_id)
        return pair

    def _session_id_of(self, token: str) -> str | None:
        for verify in (self._codec.verify_access_token, self._codec.verify_refresh_token):
            try:
                return verify(token).session_id
            except InvalidToken:
                continue
        return None

    def logout(self, token: str, user_id: str | None = None, session_id: str | None = None) -> int:
        """Revoke the live session ``token`` belongs to (limited to ``user_id``
        when given). A session is matched by the ``sid`` claim of the token,
        so access tokens superseded by rotation still end their session, or by
        the stored token strings. Unknown or already revoked tokens are not an
        error; returns the number revoked."""
        if not token:
            return 0
        if session_id is None:
            session_id = self._session_id_of(token)

        matches = [TokenRecord.access_token == token, TokenRecord.refresh_token == token]
        if session_id:
            matches.append(TokenRecord.id == session_id)
        session = self._storage.get_session()
        query = session.query(TokenRecord).filter(or_(*matches), TokenRecord.revoked.is_(False))
        if user_id:
            query = query.filter(TokenRecord.user_id == user_id)
        rows = query.update({TokenRecord.revoked: True, TokenRecord.updated_at: utcnow_naive()})
        self._commit()
        if rows:
            logger.info("Revoked %d session(s)", rows)
        return rows

    def revoke_all_sessions(self, user_id: str) -> int:
        session = self._storage.get_session()
        rows = (
            session.query(TokenRecord)
            .filter(TokenRecord.user_id == user_id, TokenRecord.revoked.is_(False))
            .update({TokenRecord.revoked: True, TokenRecord.updated_at: utcnow_naive()})
        )
        self._commit()
        logger.info("Revoked %d session(s) of user %s", rows, user_id)
        return rows

    def verify_token(self, access_token: str) -> User:
        claims = self._codec.verify_access_token(access_token)
        user = self._storage.get(User, claims.user_id)
        if user is None:
            raise InvalidToken("User no longer exists")
        return user
