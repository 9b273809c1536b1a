"""
Owner-scoped access to a user's financial accounts.

The auth flow only needs ``provision_default`` (one zero-balance account per
new user); the rest backs the /accounts endpoints.
"""
from __future__ import annotations

import logging
from typing import List, Optional

from models.account import Account, DEFAULT_ACCOUNT_NAME, DEFAULT_CURRENCY
from models.db_storage import DBStorage
from services.exceptions import NotFound

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = ("name", "account_type", "total_balance", "currency", "description", "is_active")


class AccountService:
    def __init__(self, storage: DBStorage):
        self._storage = storage

    def provision_default(self, user_id: str) -> Account:
        """Stage the default account for a new user; the caller commits."""
        account = Account(
            user_id=user_id,
            name=DEFAULT_ACCOUNT_NAME,
            account_type="cash",
            total_balance=0,
            currency=DEFAULT_CURRENCY,
            is_active=True,
        )
        self._storage.new(account)
        return account

    def list_for_user(self, user_id: str) -> List[Account]:
        session = self._storage.get_session()
        return (
            session.query(Account)
            .filter(Account.user_id == user_id)
            .order_by(Account.created_at.asc(), Account.id.asc())
            .all()
        )

    def primary_account(self, user_id: str) -> Optional[Account]:
        session = self._storage.get_session()
        return (
            session.query(Account)
            .filter(Account.user_id == user_id)
            .order_by(Account.created_at.asc(), Account.id.asc())
            .first()
        )

    def get_for_user(self, user_id: str, account_id: str) -> Account:
        account = self._storage.get(Account, account_id)
        # Someone else's account looks exactly like a missing one
        if account is None or account.user_id != user_id:
            raise NotFound("Account not found")
        return account

    def create(self, user_id: str, data: dict) -> Account:
        account = Account(user_id=user_id, **{k: v for k, v in data.items() if k in UPDATABLE_FIELDS})
        self._storage.new(account)
        self._storage.save()
        logger.info("Account %s created for user %s", account.id, user_id)
        return account

    def update(self, user_id: str, account_id: str, data: dict) -> Account:
        account = self.get_for_user(user_id, account_id)
        for field in UPDATABLE_FIELDS:
            if field in data:
                setattr(account, field, data[field])
        self._storage.new(account)
        self._storage.save()
        return account

    def delete(self, user_id: str, account_id: str) -> None:
        account = self.get_for_user(user_id, account_id)
        self._storage.delete(account)
        self._storage.save()
        logger.info("Account %s deleted by user %s", account_id, user_id)
