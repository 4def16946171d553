"""FastAPI dependency — JWT bearer authentication gate."""

from typing import Optional
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from app.infrastructure.database import get_db
from app.application.services.auth_service import decode_access_token, get_user_by_email
from app.core.exceptions import UnauthorizedException
from app.domain.models.user import User

# auto_error=False so a missing header gets our own 401 message instead of a 403
security = HTTPBearer(auto_error=False)


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db),
) -> User:
    """Extract and validate the current user from the bearer token."""
    if credentials is None or not credentials.credentials:
        raise UnauthorizedException("Access token required")

    payload = decode_access_token(credentials.credentials)
    if payload is None or not payload.get("sub"):
        raise UnauthorizedException("Invalid token")

    user = get_user_by_email(db, payload["sub"])
    if user is None or not user.is_active:
        raise UnauthorizedException("Invalid token")

    return user
