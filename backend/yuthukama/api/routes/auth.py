# backend/yuthukama/api/routes/auth.py
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from yuthukama.api.deps import get_email_dispatcher
from yuthukama.core.config import Settings, get_settings
from yuthukama.core.security import create_access_token, get_current_user, verify_password
from yuthukama.crud import users as crud_users
from yuthukama.db.session import get_db
from yuthukama.models.user import User
from yuthukama.schemas.auth import (
    AuthOut,
    DetailOut,
    ForgotPasswordIn,
    LoginIn,
    RegisterIn,
    ResetPasswordIn,
    UserOut,
)
from yuthukama.security.rate_limit import login_throttle
from yuthukama.services.mailer import EmailDeliveryError, EmailDispatcher

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])

RESET_EMAIL_SENT = "If an account exists for that email, a reset link has been sent"


def _auth_out(u: User) -> AuthOut:
    return AuthOut(
        id=u.id,
        username=u.username,
        email=u.email,
        token=create_access_token(subject=str(u.id)),
    )


@router.post("/register", response_model=AuthOut, status_code=status.HTTP_201_CREATED)
def register(payload: RegisterIn, db: Session = Depends(get_db)):
    if crud_users.exists(db, payload.email, payload.username):
        raise HTTPException(status_code=400, detail="User already exists")

    u = crud_users.create_user(db, payload.username, payload.email, payload.password)
    logger.info("Registered user %s", u.id)
    return _auth_out(u)


@router.post("/login", response_model=AuthOut)
def login(payload: LoginIn, db: Session = Depends(get_db)):
    delay = login_throttle.retry_after(payload.email)
    if delay > 0:
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail=f"Too many login attempts. Try again in {int(delay) + 1} seconds.",
        )

    u = crud_users.get_by_email(db, payload.email)
    if not u or not verify_password(payload.password, u.password_hash):
        login_throttle.record(payload.email, success=False)
        raise HTTPException(status_code=401, detail="Invalid credentials")

    login_throttle.record(payload.email, success=True)
    return _auth_out(u)


@router.api_route("/check", methods=["GET", "POST"], response_model=UserOut)
def check(current_user: User = Depends(get_current_user)):
    """Return the user behind the bearer token; 401 if it is missing, invalid or expired."""
    return UserOut.model_validate(current_user)


@router.post("/logout", response_model=DetailOut)
def logout():
    # tokens are stateless; the client drops its copy
    return DetailOut(message="Logout successful")


@router.post("/forgot-password", response_model=DetailOut)
def forgot_password(
    payload: ForgotPasswordIn,
    db: Session = Depends(get_db),
    mailer: EmailDispatcher = Depends(get_email_dispatcher),
    settings: Settings = Depends(get_settings),
):
    u = crud_users.get_by_email(db, payload.email.strip().lower())
    if not u:
        # same answer either way, so accounts cannot be probed
        return DetailOut(message=RESET_EMAIL_SENT)

    token = crud_users.issue_reset_token(db, u, settings.reset_token_minutes)
    reset_url = f"{settings.frontend_url.rstrip('/')}/reset-password/{token}"
    html = (
        f"<h1>Password Reset Request</h1>"
        f"<p>Hello {u.username},</p>"
        f"<p>Follow this link to choose a new password. It expires in "
        f"{settings.reset_token_minutes} minutes.</p>"
        f'<p><a href="{reset_url}">Reset password</a></p>'
        f"<p>If you did not request this, you can ignore this email.</p>"
    )

    try:
        mailer.send(u.email, "Password Reset Request", html)
    except EmailDeliveryError:
        crud_users.clear_reset_token(db, u)
        raise HTTPException(status_code=500, detail="Email could not be sent")

    return DetailOut(message=RESET_EMAIL_SENT)


@router.post("/reset-password/{reset_token}", response_model=DetailOut)
def reset_password(reset_token: str, payload: ResetPasswordIn, db: Session = Depends(get_db)):
    u = crud_users.get_by_reset_token(db, reset_token)
    if not u:
        raise HTTPException(status_code=400, detail="Invalid or expired reset token")

    crud_users.set_password(db, u, payload.password)
    login_throttle.record(u.email, success=True)
    return DetailOut(message="Password reset successful")
