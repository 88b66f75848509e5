"""
auth/service.py -- Admin business rules on top of AdminStore.

AdminService holds no state besides its store, so one instance is shared by
every request thread.

Registration race:
  The API pre-checks find_one() to answer "already exists" cheaply, but two
  requests can both pass that check. The admins.email constraint is the
  single source of truth: the loser gets AdminAlreadyExistsError from
  register_admin() and must be answered the same way as a failed pre-check.

Authentication:
  authenticate() raises InvalidCredentialsError for both an unknown email and
  a wrong password, and runs Argon2 in both cases (against DUMMY_HASH when the
  account is absent) so neither the message nor the response time reveals
  whether the email is registered.

Layer rule: no imports from api/ or sessions/.
"""

from __future__ import annotations

import logging

from auth.models import AdminAccount
from auth.passwords import DUMMY_HASH, verify_password
from auth.store import AdminStore
from core.errors import InvalidCredentialsError

logger = logging.getLogger("sigma.auth")


class AdminService:
    def __init__(self, store: AdminStore) -> None:
        self.store = store

    def register_admin(self, email: str, name: str, password: str) -> AdminAccount:
        admin = self.store.create(email, name, password)
        logger.info("Registered admin %s", admin.email)
        return admin

    def find_one(self, email: str) -> AdminAccount | None:
        return self.store.find_by_email(email)

    def authenticate(self, email: str, password: str) -> None:
        """Check email/password. Returns None on success, raises InvalidCredentialsError otherwise."""
        self.verify_credentials(email, password)

    def verify_credentials(self, email: str, password: str) -> AdminAccount:
        """Like authenticate(), but hands back the matching account."""
        admin = self.store.find_by_email(email)
        if admin is None:
            # Equalize timing -- do NOT return early before running Argon2
            verify_password(password, DUMMY_HASH)
            logger.info("Authentication failed")
            raise InvalidCredentialsError()
        if not verify_password(password, admin.password_hash):
            logger.info("Authentication failed")
            raise InvalidCredentialsError()
        return admin

    def update_one(self, email: str, new_name: str) -> AdminAccount | None:
        admin = self.store.rename(email, new_name)
        if admin is not None:
            logger.info("Renamed admin %s", email)
        return admin

    def delete_one(self, email: str) -> bool:
        deleted = self.store.delete(email)
        if deleted:
            logger.info("Deleted admin %s", email)
        return deleted
