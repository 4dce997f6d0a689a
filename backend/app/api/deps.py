"""
Access control dependencies.

``require_auth`` verifies the bearer token before any handler code runs and
exposes the decoded claims on ``request.state.claims``. ``require_admin``
builds on it, so a missing or bad token is always reported (401/403) before
the role check is made.
"""

import logging
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from app.core.errors import Forbidden, InvalidToken, MissingToken
from app.core.security import TokenClaims, decode_access_token
from app.db.session import get_db
from app.models.user import User
from app.services.credential_store import CredentialStore

logger = logging.getLogger("access")

_bearer = HTTPBearer(auto_error=False)


def get_store(db: Session = Depends(get_db)) -> CredentialStore:
    return CredentialStore(db)


def require_auth(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer),
) -> TokenClaims:
    """Authenticate a request from its ``Authorization: Bearer <jwt>`` header."""
    token = credentials.credentials if credentials is not None else None
    try:
        claims = decode_access_token(token)
    except (MissingToken, InvalidToken) as exc:
        logger.debug("Rejected %s %s: %s", request.method, request.url.path, exc.code)
        raise
    request.state.claims = claims
    return claims


def optional_auth(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer),
) -> Optional[TokenClaims]:
    """Like ``require_auth`` but lets anonymous requests through. A bad token is still rejected."""
    if credentials is None or not credentials.credentials:
        return None
    return require_auth(request, credentials)


def require_admin(claims: TokenClaims = Depends(require_auth)) -> TokenClaims:
    if not claims.is_admin:
        logger.debug("Account %s denied admin access", claims.account_id)
        raise Forbidden("Admin access required", code="admin_required")
    return claims


def get_current_user(
    claims: TokenClaims = Depends(require_auth),
    store: CredentialStore = Depends(get_store),
) -> User:
    """Load the account behind a verified token."""
    user = store.find_by_id(claims.account_id)
    if user is None or not user.is_active:
        raise InvalidToken("Account no longer available")
    return user


def ensure_self_or_admin(claims: TokenClaims, account_id: str) -> None:
    """Owners may act on their own account; admins on any account."""
    if claims.account_id != account_id and not claims.is_admin:
        raise Forbidden("Access denied")
