# jobboard/dependencies/auth.py
from __future__ import annotations

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from jobboard.core.database import get_db
from jobboard.core.security import resolve_identity
from jobboard.models.user import User
from jobboard.services.applications import Actor

bearer_scheme = HTTPBearer(auto_error=False)


def _unauthorized(detail: str = "Could not validate credentials") -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_current_user(
    creds: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> User:
    """
    Validates:
      - Authorization: Bearer <token>
      - token signature + exp + role claim
      - user exists and still has the role the token was issued for
    Returns:
      - User SQLAlchemy model
    """
    if not creds or creds.scheme.lower() != "bearer":
        raise _unauthorized("Missing Authorization header")

    try:
        user_id, role = resolve_identity(creds.credentials)
    except ValueError:
        raise _unauthorized("Invalid or expired token")

    user = db.get(User, user_id)
    if not user:
        raise _unauthorized("User not found")
    if user.role != role:
        raise _unauthorized("Invalid or expired token")

    return user


def require_employer(user: User = Depends(get_current_user)) -> User:
    if not user.is_employer:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Insufficient permissions")
    return user


def require_employee(user: User = Depends(get_current_user)) -> User:
    if not user.is_employee:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Insufficient permissions")
    return user


def actor_for(user: User) -> Actor:
    return Actor(id=user.id, role=user.role)
