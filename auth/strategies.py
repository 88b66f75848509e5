"""
auth/strategies.py -- Credential strategies behind one authentication entry point.

The set of strategies is closed and selected by Credentials.strategy, an
explicit string discriminator:

  password -- email + password, checked by AdminService.
  token    -- a bearer token previously issued by this service; its subject
              must still name an existing admin.

An unknown discriminator is rejected with UnsupportedStrategyError rather than
looked up in a registry, so adding a strategy means adding a branch here and a
constant to STRATEGIES.

Layer rule: no imports from api/ or sessions/.
"""

from __future__ import annotations

import logging

from auth.models import AdminAccount, Credentials
from auth.service import AdminService
from auth.tokens import TokenService
from core.errors import InvalidCredentialsError, MissingFieldError, UnsupportedStrategyError

logger = logging.getLogger("sigma.auth.strategies")

PASSWORD = "password"
TOKEN = "token"

STRATEGIES = (PASSWORD, TOKEN)


class Authenticator:
    """Resolve Credentials to an AdminAccount and mint login tokens."""

    def __init__(self, admin_service: AdminService, token_service: TokenService) -> None:
        self.admin_service = admin_service
        self.token_service = token_service

    def authenticate(self, credentials: Credentials) -> AdminAccount:
        if credentials.strategy == PASSWORD:
            return self._authenticate_password(credentials)
        if credentials.strategy == TOKEN:
            return self._authenticate_token(credentials)
        raise UnsupportedStrategyError(credentials.strategy)

    def login(self, credentials: Credentials) -> str:
        """Authenticate and issue a fresh token for the admin's email."""
        admin = self.authenticate(credentials)
        logger.info("Admin %s logged in (strategy=%s)", admin.email, credentials.strategy)
        return self.token_service.create_token(admin.email)

    def _authenticate_password(self, credentials: Credentials) -> AdminAccount:
        if not credentials.email:
            raise MissingFieldError("email")
        if credentials.password is None:
            raise MissingFieldError("password")
        return self.admin_service.verify_credentials(credentials.email, credentials.password)

    def _authenticate_token(self, credentials: Credentials) -> AdminAccount:
        if not credentials.token:
            raise MissingFieldError("token")
        claims = self.token_service.verify_token(credentials.token)
        admin = self.admin_service.find_one(claims.subject)
        if admin is None:
            raise InvalidCredentialsError()
        return admin
