"""Adapter over stored accounts; the booking core only reads phones and credits earnings."""

from __future__ import annotations

import logging
from typing import Optional, TYPE_CHECKING

from rentmarket.exceptions import AccountNotFoundError
from rentmarket.models.account import Account
from rentmarket.services.common import account_from_dict, resolve_store

if TYPE_CHECKING:
    from rentmarket.models.store import Store  # noqa: F401

logger = logging.getLogger(__name__)


class AccountDirectory:

    def __init__(self, store: Optional["Store"] = None):
        self.store = resolve_store(store)

    def get_account(self, account_id: str) -> Account:
        acc = account_from_dict(self.store.get_account(account_id)) if account_id else None
        if acc is None:
            raise AccountNotFoundError(f"Error: account '{account_id}' not found")
        return acc

    def exists(self, account_id: str) -> bool:
        return bool(account_id) and self.store.get_account(account_id) is not None

    def register(self, full_name: str, email: str, phone: str = "", reg_no: str = "",
                 location: str = "") -> Account:
        """Used by seeding and tests; sign-up itself is handled outside this service."""
        aid = self.store.create_account({
            "full_name": full_name,
            "email": email,
            "phone": phone,
            "reg_no": reg_no,
            "location": location,
        })
        logger.info("Account %s registered", aid)
        return self.get_account(aid)
