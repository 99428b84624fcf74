# jobboard/routes/auth.py
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from jobboard.celery_app import enqueue
from jobboard.core.config import settings
from jobboard.core.database import get_db
from jobboard.core.rate_limit import maybe_limit
from jobboard.core.security import create_access_token, hash_password, password_violations, verify_password
from jobboard.dependencies.auth import get_current_user
from jobboard.models.user import User
from jobboard.schemas.auth import AuthOut, LoginIn, RegisterIn, UserOut
from jobboard.tasks.notifications import send_welcome_email

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


def _auth_payload(user: User) -> dict:
    token = create_access_token(user_id=user.id, role=user.role, email=user.email)
    return {"user": user, "token": token, "token_type": "bearer"}


@router.post("/register", response_model=AuthOut, status_code=status.HTTP_201_CREATED)
@maybe_limit(settings.RATE_LIMIT_AUTH)
def register(
    request: Request,
    payload: RegisterIn,
    db: Session = Depends(get_db),
):
    email = payload.email.strip().lower()
    name = payload.name.strip()
    if not name:
        raise HTTPException(status_code=400, detail="Name is required")

    violations = password_violations(payload.password)
    if violations:
        raise HTTPException(
            status_code=400,
            detail={
                "message": f"Password must be at least {settings.PASSWORD_MIN_LENGTH} characters",
                "details": {"code": "WEAK_PASSWORD", "violations": violations},
            },
        )

    existing = db.query(User).filter(User.email == email).first()
    if existing:
        raise HTTPException(status_code=409, detail="User with this email already exists")

    user = User(
        email=email,
        name=name,
        password_hash=hash_password(payload.password),
        role=payload.role,
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail="User with this email already exists")
    db.refresh(user)

    logger.info("User registered: id=%s role=%s", user.id, user.role)
    try:
        enqueue(send_welcome_email, user.email, user.name, user.role)
    except Exception:
        # The account is already committed; a missed welcome email only logs.
        logger.exception("Welcome email enqueue failed: user_id=%s", user.id)
    return _auth_payload(user)


@router.post("/login", response_model=AuthOut)
@maybe_limit(settings.RATE_LIMIT_AUTH)
def login(request: Request, payload: LoginIn, db: Session = Depends(get_db)):
    email = payload.email.strip().lower()

    user = db.query(User).filter(User.email == email).first()
    if not user or not verify_password(payload.password, user.password_hash):
        raise HTTPException(status_code=401, detail="Invalid email or password")

    return _auth_payload(user)


@router.get("/me", response_model=UserOut)
def get_me(user: User = Depends(get_current_user)) -> User:
    return user
