# backend/yuthukama/crud/users.py
from __future__ import annotations

from datetime import datetime, timedelta

from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from yuthukama.core.security import hash_password, hash_reset_token, new_reset_token
from yuthukama.models.user import User


def get_by_email(db: Session, email: str) -> User | None:
    stmt = select(User).where(User.email == email)
    return db.execute(stmt).scalar_one_or_none()


def get_by_username(db: Session, username: str) -> User | None:
    stmt = select(User).where(User.username == username)
    return db.execute(stmt).scalar_one_or_none()


def exists(db: Session, email: str, username: str) -> bool:
    stmt = select(User.id).where(or_(User.email == email, User.username == username))
    return db.execute(stmt).first() is not None


def create_user(db: Session, username: str, email: str, password: str) -> User:
    u = User(
        username=username,
        email=email,
        password_hash=hash_password(password),
    )

    db.add(u)
    db.commit()
    db.refresh(u)
    return u


def issue_reset_token(db: Session, user: User, ttl_minutes: int) -> str:
    token, token_hash = new_reset_token()
    user.reset_token_hash = token_hash
    user.reset_token_expires_at = datetime.utcnow() + timedelta(minutes=ttl_minutes)
    db.add(user)
    db.commit()
    return token


def clear_reset_token(db: Session, user: User) -> None:
    user.reset_token_hash = None
    user.reset_token_expires_at = None
    db.add(user)
    db.commit()


def get_by_reset_token(db: Session, token: str) -> User | None:
    stmt = select(User).where(
        User.reset_token_hash == hash_reset_token(token),
        User.reset_token_expires_at > datetime.utcnow(),
    )
    return db.execute(stmt).scalar_one_or_none()


def set_password(db: Session, user: User, password: str) -> None:
    user.password_hash = hash_password(password)
    user.reset_token_hash = None
    user.reset_token_expires_at = None
    db.add(user)
    db.commit()
