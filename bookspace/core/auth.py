"""
Authentication helpers for verifying bearer tokens and resolving the current app User.
"""

from __future__ import annotations

import logging
from typing import Dict, Any

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from bookspace.core.security import decode_access_token
from bookspace.database import get_db
from bookspace.models import User
from bookspace.core.user_helpers import get_or_create_user_by_auth_id

logger = logging.getLogger(__name__)


def _unauthorized(detail: str = "Not authenticated") -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def _extract_bearer_token(request: Request) -> str:
    """
    Extract 'Bearer <token>' from Authorization header.
    """
    auth = request.headers.get("Authorization")
    if not auth:
        raise _unauthorized("Missing Authorization header")

    parts = auth.split()
    if len(parts) != 2:
        raise _unauthorized("Invalid Authorization header format. Expected 'Bearer <token>'")

    scheme, token = parts
    if scheme.lower() != "bearer":
        raise _unauthorized("Invalid auth scheme. Expected 'Bearer'")

    if not token.strip():
        raise _unauthorized("Empty bearer token")

    return token


def _decode_token(token: str) -> Dict[str, Any]:
    payload = decode_access_token(token)
    if payload is None:
        logger.warning("JWT validation failed")
        raise _unauthorized("Token validation failed")
    return payload


def get_current_user(
    request: Request,
    db: Session = Depends(get_db),
) -> User:
    """
    FastAPI dependency: returns the current authenticated User (SQLAlchemy object).

    - Reads Authorization: Bearer <token>
    - Verifies JWT
    - Extracts sub (identity provider user id), email and name
    - Upserts into local users table via get_or_create_user_by_auth_id()
    """
    token = _extract_bearer_token(request)
    payload = _decode_token(token)

    auth_user_id = payload.get("sub")
    if not auth_user_id:
        raise _unauthorized("Token missing subject (sub)")

    return get_or_create_user_by_auth_id(
        db=db,
        auth_user_id=str(auth_user_id),
        email=str(payload.get("email") or ""),
        name=str(payload.get("name") or ""),
    )
