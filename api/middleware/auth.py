"""
Authentication for AutoLead SA API.

JWT bearer tokens carry the caller's id, role and home dealer. Role
checks guard network-admin operations; the dealer id feeds the
self-assignment override of the distributor.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, Optional, Tuple

from fastapi import HTTPException, Security, Depends, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import jwt, JWTError

from config.settings import get_settings
from distribution.models import CurrentUser, UserRole

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


# ── JWT ────────────────────────────────────────────────────────────

def create_jwt_token(data: Dict[str, Any]) -> Tuple[str, int]:
    """
    Create a JWT token.

    Returns:
        Tuple of (token_string, expires_in_seconds)
    """
    settings = get_settings()
    if not settings.jwt_secret_key:
        raise RuntimeError("JWT_SECRET_KEY is not configured")

    expires = datetime.now(timezone.utc) + timedelta(minutes=settings.jwt_expire_minutes)
    payload = {**data, "exp": expires}
    token = jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)
    return token, settings.jwt_expire_minutes * 60


def decode_jwt_token(token: str) -> Dict[str, Any]:
    """Decode and validate a JWT token."""
    settings = get_settings()
    try:
        return jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Invalid token: {e}",
        )


def user_from_claims(payload: Dict[str, Any]) -> CurrentUser:
    """Build the caller context from token claims."""
    if not payload.get("sub") or not payload.get("role"):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token is missing sub or role",
        )
    return CurrentUser(
        id=str(payload["sub"]),
        role=str(payload["role"]).upper(),
        dealer_id=payload.get("dealer_id"),
    )


# ── Dependencies ──────────────────────────────────────────────────

async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Security(bearer_scheme),
) -> CurrentUser:
    """
    Get current user from the bearer token.

    Without a configured secret the API runs in development mode and
    every caller is an anonymous admin.
    """
    settings = get_settings()

    if not settings.jwt_secret_key:
        if credentials:
            logger.warning("JWT_SECRET_KEY not set, ignoring bearer token")
        return CurrentUser(id="anonymous", role=UserRole.ADMIN.value)

    if credentials and credentials.credentials:
        return user_from_claims(decode_jwt_token(credentials.credentials))

    raise HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Authentication required",
        headers={"WWW-Authenticate": "Bearer"},
    )


def require_role(*roles: str) -> Callable:
    """
    Factory that returns a dependency requiring specific roles.

    Usage:
        @router.post("/dealers", dependencies=[Depends(require_role("ADMIN"))])
    """
    async def _check_role(user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
        if user.role not in roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Requires one of roles: {', '.join(roles)}",
            )
        return user
    return _check_role
