from fastapi import Depends, Request
from sqlalchemy import select
from sqlalchemy.orm import Session

from picito.auth.tokens import resolve_from_request
from picito.db import get_db
from picito.errors import Forbidden, InvalidToken, Unauthorized
from picito.models.user import User
from picito.rbac.perms import GLOBAL_PERMS, has_global_permission

def _load_user(db: Session, email: str) -> User | None:
    return db.scalar(select(User).where(User.email == email))

def get_current_user(request: Request, db: Session = Depends(get_db)) -> User:
    identity = resolve_from_request(request.cookies)
    if identity is None:
        raise Unauthorized()

    # the stored role wins over the one captured in the token
    user = _load_user(db, identity.email)
    if user is None:
        raise InvalidToken()
    return user

def get_optional_user(request: Request, db: Session = Depends(get_db)) -> User | None:
    try:
        identity = resolve_from_request(request.cookies)
    except InvalidToken:
        return None
    if identity is None:
        return None
    return _load_user(db, identity.email)

def require_global(action: str):
    if action not in GLOBAL_PERMS:
        raise RuntimeError(f"unknown permission action: {action}")

    def _checker(user: User = Depends(get_current_user)) -> User:
        if not has_global_permission(user.role, action):
            raise Forbidden("Forbidden: Admin access required")
        return user

    return _checker
