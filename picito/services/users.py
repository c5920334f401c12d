from __future__ import annotations

import uuid

import structlog
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from picito.auth.tokens import normalize_email, now_utc
from picito.config import settings
from picito.errors import NotFound, ValidationError
from picito.models.enums import GlobalRole
from picito.models.membership import Membership
from picito.models.organization import Organization
from picito.models.user import User
from picito.services import memberships

log = structlog.get_logger()

def _is_bootstrap_admin(email: str) -> bool:
    return email in {normalize_email(e) for e in settings.admin_emails}

def get_by_email(db: Session, email: str) -> User | None:
    return db.scalar(select(User).where(User.email == normalize_email(email)))

def login(db: Session, email: str) -> User:
    """Upsert the user for `email` and stamp the login time."""
    email = normalize_email(email)

    user = db.scalar(select(User).where(User.email == email))
    if user is None:
        user = User(email=email)
        db.add(user)
        try:
            db.flush()
        except IntegrityError:
            # first logins racing on the unique email index
            db.rollback()
            user = db.scalar(select(User).where(User.email == email))
            if user is None:
                raise

    if _is_bootstrap_admin(email):
        user.role = GlobalRole.admin
    user.last_login_at = now_utc()
    db.commit()
    db.refresh(user)

    log.info("auth.login", user_id=str(user.id), role=user.role.value)
    return user

def list_users(db: Session) -> list[User]:
    return list(db.scalars(select(User).order_by(User.created_at.desc())).all())

def change_global_role(db: Session, email: str, role: GlobalRole | str, actor: User) -> User:
    try:
        role = GlobalRole(role)
    except ValueError as e:
        raise ValidationError("Invalid request data") from e

    email = normalize_email(email)
    if email == actor.email and role != GlobalRole.admin:
        raise ValidationError("Cannot demote yourself from admin role")

    user = db.scalar(select(User).where(User.email == email))
    if user is None:
        raise NotFound("User not found")

    old_role = user.role
    user.role = role
    db.commit()
    db.refresh(user)

    log.info(
        "user.role_changed",
        user_id=str(user.id),
        old_role=old_role.value,
        new_role=role.value,
        actor=str(actor.id),
    )
    return user

def memberships_of(db: Session, user_id: uuid.UUID) -> list[tuple[Membership, Organization]]:
    if db.get(User, user_id) is None:
        raise NotFound("User not found")
    return memberships.list_for_user(db, user_id)
