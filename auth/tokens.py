"""
auth/tokens.py -- Bearer token issuance and verification.

Security design decisions:
  JWT: python-jose with HS256. Tokens carry sub, iat, exp and iss and are
       signed with the service's symmetric secret. Nothing is stored server
       side; a token is valid exactly when its signature, issuer and expiry
       check out. There is no revocation list -- a leaked token stays valid
       until it expires.

  Expiry: fixed at TOKEN_TTL (24h) after issuance. Callers cannot choose a
       different lifetime. iat and exp are derived from a single clock read so
       exp - iat is always exactly TOKEN_TTL.

  Failures: verify_token() raises TokenError for every kind of failure. The
       reason (expired, bad signature, wrong issuer, garbage) goes to the debug
       log only -- callers treat all of them as unauthenticated.

  Configuration: the secret and issuer are constructor arguments. The
       lifespan in api/main.py builds one TokenService from Settings at startup.

Layer rule: no imports from api/ or sessions/.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime, timedelta, timezone

from jose import ExpiredSignatureError, JOSEError, JWTError, jwt

from auth.models import TokenClaims
from core.errors import TokenError

logger = logging.getLogger("sigma.auth.tokens")

_ALGORITHM = "HS256"

_DECODE_OPTIONS = {
    "require_sub": True,
    "require_iat": True,
    "require_exp": True,
    "require_iss": True,
    "verify_aud": False,
}

TOKEN_TTL = timedelta(hours=24)


def _now() -> datetime:
    return datetime.now(timezone.utc)


class TokenService:
    """Stateless signer/verifier for bearer tokens.

    Usage:
        tokens = TokenService(secret=settings.secret_key, issuer=settings.service_name)
        token = tokens.create_token("admin@example.com")
        claims = tokens.verify_token(token)   # raises TokenError if invalid
    """

    def __init__(self, secret: str, issuer: str, clock: Callable[[], datetime] | None = None) -> None:
        if not secret:
            raise ValueError("TokenService requires a non-empty signing secret.")
        self._secret = secret
        self.issuer = issuer
        self._clock = clock or _now

    def create_token(self, subject: str) -> str:
        """Sign a token for subject, valid for TOKEN_TTL from now."""
        issued_at = int(self._clock().timestamp())
        payload = {
            "sub": subject,
            "iat": issued_at,
            "exp": issued_at + int(TOKEN_TTL.total_seconds()),
            "iss": self.issuer,
        }
        try:
            return jwt.encode(payload, self._secret, algorithm=_ALGORITHM)
        except JOSEError as exc:
            raise TokenError("Token could not be signed.") from exc

    def verify_token(self, token: str) -> TokenClaims:
        """Decode and verify token. Returns its claims or raises TokenError."""
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[_ALGORITHM],
                issuer=self.issuer,
                options=_DECODE_OPTIONS,
            )
        except ExpiredSignatureError as exc:
            logger.debug("Rejected token: expired")
            raise TokenError() from exc
        except JWTError as exc:
            logger.debug("Rejected token: %s", exc)
            raise TokenError() from exc

        try:
            return TokenClaims(
                subject=str(payload["sub"]),
                issued_at=datetime.fromtimestamp(int(payload["iat"]), tz=timezone.utc),
                expires_at=datetime.fromtimestamp(int(payload["exp"]), tz=timezone.utc),
                issuer=str(payload["iss"]),
            )
        except (KeyError, TypeError, ValueError) as exc:
            logger.debug("Rejected token: malformed claims")
            raise TokenError() from exc
