"""
Identity resolution - bearer tokens to principals.

Tokens are HS256 JWTs carrying the account id (``sub``), the role granted
at issuance and an expiry. The role claim is trusted for the token's whole
lifetime: changing an account's role does not affect tokens already issued.
"""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Protocol

from django.conf import settings

from jose import ExpiredSignatureError, JWTError, jwt

from apps.web.core.exceptions import Unauthenticated, UnknownPrincipal
from apps.web.core.models import User

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuthConfig:
    """Signing configuration for bearer tokens."""

    secret_key: str
    algorithm: str = "HS256"
    token_lifetime: timedelta = timedelta(days=7)

    @classmethod
    def from_settings(cls) -> "AuthConfig":
        """Build the config from Django settings."""
        return cls(
            secret_key=settings.JWT_SECRET_KEY,
            algorithm=settings.JWT_ALGORITHM,
            token_lifetime=timedelta(days=settings.JWT_LIFETIME_DAYS),
        )


@dataclass(frozen=True)
class Principal:
    """An authenticated actor: account id plus the role asserted at issuance."""

    id: int
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role == User.Role.ADMIN

    @property
    def is_owner(self) -> bool:
        return self.role == User.Role.OWNER

    @property
    def is_customer(self) -> bool:
        return self.role == User.Role.CUSTOMER


@dataclass(frozen=True)
class TokenClaims:
    """Verified claims of a bearer token."""

    identity_id: int
    role: str
    expiry: datetime


class TokenService:
    """Issues and verifies signed bearer tokens."""

    def __init__(self, config: AuthConfig) -> None:
        self.config = config

    def issue(self, identity_id: int, role: str, now: datetime | None = None) -> str:
        """Sign a token for the given account and role."""
        issued_at = now or datetime.now(UTC)
        claims = {
            "sub": str(identity_id),
            "role": role,
            "iat": issued_at,
            "exp": issued_at + self.config.token_lifetime,
        }
        return jwt.encode(claims, self.config.secret_key, algorithm=self.config.algorithm)

    def verify(self, raw_token: str) -> TokenClaims:
        """
        Verify signature and expiry and return the token's claims.

        Raises:
            Unauthenticated: If the token is expired, malformed or badly signed
        """
        try:
            payload = jwt.decode(
                raw_token,
                self.config.secret_key,
                algorithms=[self.config.algorithm],
            )
        except ExpiredSignatureError as e:
            raise Unauthenticated("Token has expired") from e
        except JWTError as e:
            raise Unauthenticated("Invalid token") from e

        subject = payload.get("sub")
        role = payload.get("role")
        expiry = payload.get("exp")
        if not isinstance(subject, str) or not subject.isdigit():
            raise Unauthenticated("Invalid token")
        if role not in User.Role.values or not isinstance(expiry, int | float):
            raise Unauthenticated("Invalid token")

        return TokenClaims(
            identity_id=int(subject),
            role=role,
            expiry=datetime.fromtimestamp(expiry, tz=UTC),
        )


class AccountLookup(Protocol):
    """Answers whether an account id still refers to a live account."""

    def exists(self, identity_id: int) -> bool: ...


class UserAccounts:
    """Account lookup backed by the User table."""

    def exists(self, identity_id: int) -> bool:
        return User.objects.filter(pk=identity_id, is_active=True).exists()


def bearer_credential(header: str | None) -> str | None:
    """
    Extract the token from an ``Authorization: Bearer <token>`` header.

    Returns None when the header is absent.

    Raises:
        Unauthenticated: If the header uses another scheme or has no token
    """
    if not header:
        return None
    scheme, _, token = header.strip().partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise Unauthenticated("Malformed Authorization header")
    return token.strip()


class IdentityResolver:
    """Resolves bearer credentials to principals."""

    def __init__(self, tokens: TokenService, accounts: AccountLookup) -> None:
        self.tokens = tokens
        self.accounts = accounts

    def resolve(self, credential: str | None) -> Principal:
        """
        Resolve a raw credential to a principal.

        Raises:
            Unauthenticated: If the credential is missing or fails verification
            UnknownPrincipal: If the account was deleted or deactivated after issuance
        """
        if not credential:
            raise Unauthenticated("No token provided")

        claims = self.tokens.verify(credential)
        if not self.accounts.exists(claims.identity_id):
            raise UnknownPrincipal("User not found")

        return Principal(id=claims.identity_id, role=claims.role)
