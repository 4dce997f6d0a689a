"""
Security utilities for authentication and authorization.

Provides password hashing (bcrypt) and JWT token management.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

import jwt
from jwt.exceptions import ExpiredSignatureError, InvalidTokenError
from passlib.context import CryptContext

from app.core.config import settings
from app.core.errors import ConfigurationError, InvalidToken, MissingToken, TokenExpired
from app.models.user import Role

# Password hashing context using bcrypt
pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.BCRYPT_ROUNDS,
)

REQUIRED_CLAIMS = ["sub", "email", "role", "iat", "exp"]


@dataclass(frozen=True)
class TokenClaims:
    """Identity facts carried inside a verified access token."""

    account_id: str
    email: str
    role: Role

    @property
    def is_admin(self) -> bool:
        return self.role is Role.ADMIN


def verify_password(plain_password: str, hashed_password: Optional[str]) -> bool:
    """
    Verify a plain password against a hashed password.

    When there is no stored hash (unknown account) a dummy verification is
    still performed so both failure paths take comparable time.

    Args:
        plain_password: The plain text password to verify
        hashed_password: The hashed password to compare against, if any

    Returns:
        True if password matches, False otherwise
    """
    if not hashed_password:
        pwd_context.dummy_verify()
        return False
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except ValueError:
        # Malformed hash in storage
        return False


def get_password_hash(password: str) -> str:
    """
    Hash a password using bcrypt.

    Args:
        password: The plain text password to hash

    Returns:
        The hashed password string
    """
    if not password:
        raise ValueError("password_blank")
    return pwd_context.hash(password)


def _signing_secret() -> str:
    secret = (settings.JWT_SECRET or "").strip()
    if not secret:
        raise ConfigurationError("JWT_SECRET is not configured")
    return secret


def ensure_signing_ready() -> None:
    """Raise ``ConfigurationError`` now if tokens cannot be issued later."""
    _signing_secret()


def create_access_token(
    claims: TokenClaims,
    expires_delta: Optional[timedelta] = None,
    issued_at: Optional[datetime] = None,
) -> str:
    """
    Create a JWT access token.

    Args:
        claims: Identity to encode (account id, email, role)
        expires_delta: Optional custom validity window (default 24 hours)
        issued_at: Optional issuance time (default now, UTC)

    Returns:
        The encoded JWT token string
    """
    now = issued_at or datetime.now(timezone.utc)
    if expires_delta is None:
        expires_delta = timedelta(hours=settings.ACCESS_TOKEN_EXPIRE_HOURS)

    payload: dict[str, Any] = {
        "sub": claims.account_id,
        "userId": claims.account_id,
        "email": claims.email,
        "role": claims.role.value,
        "iat": int(now.timestamp()),
        "exp": int((now + expires_delta).timestamp()),
    }

    return jwt.encode(payload, _signing_secret(), algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: Optional[str]) -> TokenClaims:
    """
    Decode and validate a JWT access token.

    Args:
        token: The JWT token string to decode

    Returns:
        The verified claims

    Raises:
        MissingToken: no token was supplied
        TokenExpired: the signature is valid but the token is past its expiry
        InvalidToken: bad signature, malformed token or unusable claims
    """
    if not token:
        raise MissingToken()

    try:
        payload = jwt.decode(
            token,
            _signing_secret(),
            algorithms=[settings.JWT_ALGORITHM],
            options={"require": REQUIRED_CLAIMS},
        )
    except ExpiredSignatureError:
        raise TokenExpired()
    except InvalidTokenError:
        raise InvalidToken()

    try:
        role = Role(payload["role"])
    except ValueError:
        raise InvalidToken()

    account_id = str(payload["sub"]).strip()
    email = str(payload["email"]).strip()
    if not account_id or not email:
        raise InvalidToken()

    return TokenClaims(account_id=account_id, email=email, role=role)


def issue_token_for(account: Any) -> str:
    """Issue an access token for a stored account row."""
    return create_access_token(
        TokenClaims(account_id=account.id, email=account.email, role=Role(account.role))
    )
