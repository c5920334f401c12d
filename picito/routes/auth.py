from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from picito.auth.deps import get_current_user
from picito.auth.tokens import Identity, issue, session_max_age
from picito.config import settings
from picito.db import get_db
from picito.models.user import User
from picito.ratelimit import rate_limit
from picito.schemas.auth import LoginIn, LoginOut, SessionOut, UserOut
from picito.schemas.common import MessageOut
from picito.services import users

router = APIRouter(prefix="/auth", tags=["auth"])

@router.post("/login", response_model=LoginOut)
def login(
    payload: LoginIn,
    response: Response,
    db: Session = Depends(get_db),
    _: None = Depends(
        rate_limit(
            "auth:login",
            limit_per_window=settings.rate_limit_login_per_min,
            window_seconds=60,
        )
    ),
) -> LoginOut:
    user = users.login(db, payload.email)
    token = issue(Identity(email=user.email, role=user.role))

    response.set_cookie(
        key=settings.session_cookie_name,
        value=token,
        max_age=session_max_age(),
        httponly=True,
        samesite="lax",
        secure=settings.app_env == "prod",
        path="/",
    )
    return LoginOut(user=UserOut.model_validate(user))

@router.post("/logout", response_model=MessageOut)
def logout(response: Response) -> MessageOut:
    response.delete_cookie(
        key=settings.session_cookie_name,
        httponly=True,
        samesite="lax",
        secure=settings.app_env == "prod",
        path="/",
    )
    return MessageOut(message="Logged out successfully")

@router.get("/me", response_model=SessionOut)
def me(user: User = Depends(get_current_user)) -> SessionOut:
    return SessionOut(user=UserOut.model_validate(user))
