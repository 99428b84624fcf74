# jobboard/core/security.py
from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any

from jose import JWTError, jwt
from passlib.context import CryptContext

from jobboard.core.config import settings

pwd_context = CryptContext(schemes=["argon2"], deprecated="auto")

ROLES = ("employer", "employee")


# -------------------------
# Password hashing
# -------------------------
def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    return pwd_context.verify(password, password_hash)


def password_violations(password: str) -> list[str]:
    """
    Returns a list of violation codes if the password does not meet policy.
    """
    min_length = max(int(getattr(settings, "PASSWORD_MIN_LENGTH", 6) or 0), 1)
    if len(password or "") < min_length:
        return ["min_length"]
    return []


# -------------------------
# JWT helpers
# -------------------------
def _now_utc() -> datetime:
    return datetime.now(timezone.utc)


def _require_jwt_secret() -> None:
    if not settings.JWT_SECRET or not settings.JWT_SECRET.strip():
        raise RuntimeError("JWT_SECRET must be set (auth is required).")


def create_access_token(user_id: int, role: str, email: str | None = None) -> str:
    """
    Access token used for API auth: Authorization: Bearer <token>
    sub = user id, role = employer | employee
    """
    _require_jwt_secret()
    if role not in ROLES:
        raise ValueError(f"Unknown role: {role!r}")

    now = _now_utc()
    exp = now + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)

    payload: dict[str, Any] = {
        "sub": str(user_id),
        "role": role,
        "purpose": "access",
        "iat": int(now.timestamp()),
        "exp": int(exp.timestamp()),
    }
    if email:
        payload["email"] = email

    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def decode_token(token: str) -> dict[str, Any]:
    _require_jwt_secret()
    # Let callers decide how to handle JWTError
    return jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])


def resolve_identity(token: str) -> tuple[int, str]:
    """
    Returns (subject id, role) for a valid access token or raises ValueError.
    """
    try:
        payload = decode_token(token)
    except JWTError:
        raise ValueError("Invalid or expired token")

    if payload.get("purpose") != "access":
        raise ValueError("Invalid token purpose")

    role = payload.get("role")
    if role not in ROLES:
        raise ValueError("Invalid token role")

    try:
        subject_id = int(payload.get("sub") or "")
    except (TypeError, ValueError):
        raise ValueError("Token missing 'sub'")

    return subject_id, role
