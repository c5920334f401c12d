import uuid

from fastapi import APIRouter, Depends
from pydantic import EmailStr
from sqlalchemy.orm import Session

from picito.auth.deps import require_global
from picito.db import get_db
from picito.errors import NotFound
from picito.models.user import User
from picito.routes.organizations import org_out
from picito.schemas.admin import UserListOut, UserMembershipsOut, UserRoleIn, UserRoleOut
from picito.schemas.auth import UserOut
from picito.services import users

router = APIRouter(prefix="/admin", tags=["admin"])

@router.get("/users", response_model=UserListOut)
def list_users(
    email: EmailStr | None = None,
    _: User = Depends(require_global("users:list")),
    db: Session = Depends(get_db),
) -> UserListOut:
    if email is not None:
        user = users.get_by_email(db, email)
        if user is None:
            raise NotFound("User not found")
        return UserListOut(users=[UserOut.model_validate(user)])

    return UserListOut(users=[UserOut.model_validate(u) for u in users.list_users(db)])

@router.patch("/users", response_model=UserRoleOut)
def change_user_role(
    payload: UserRoleIn,
    actor: User = Depends(require_global("users:update_role")),
    db: Session = Depends(get_db),
) -> UserRoleOut:
    user = users.change_global_role(db, payload.email, payload.role, actor)
    return UserRoleOut(user=UserOut.model_validate(user))

@router.get("/users/{user_id}/memberships", response_model=UserMembershipsOut)
def user_memberships(
    user_id: uuid.UUID,
    _: User = Depends(require_global("users:list")),
    db: Session = Depends(get_db),
) -> UserMembershipsOut:
    rows = users.memberships_of(db, user_id)
    return UserMembershipsOut(memberships=[org_out(o, m) for m, o in rows])
