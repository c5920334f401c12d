from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import jwt

from picito.config import settings
from picito.errors import InvalidToken
from picito.models.enums import GlobalRole

@dataclass(frozen=True)
class Identity:
    email: str
    role: GlobalRole

    @property
    def is_admin(self) -> bool:
        return self.role == GlobalRole.admin

def now_utc() -> datetime:
    return datetime.now(timezone.utc)

def normalize_email(email: str) -> str:
    return email.strip().lower()

def session_max_age() -> int:
    return settings.session_expires_hours * 3600

def issue(identity: Identity, issued_at: datetime | None = None) -> str:
    iat = issued_at or now_utc()
    exp = iat + timedelta(hours=settings.session_expires_hours)
    payload = {
        "email": identity.email,
        "role": GlobalRole(identity.role).value,
        "iss": settings.jwt_issuer,
        "aud": settings.jwt_audience,
        "iat": int(iat.timestamp()),
        "exp": int(exp.timestamp()),
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm="HS256")

def verify(token: str) -> Identity:
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=["HS256"],
            audience=settings.jwt_audience,
            issuer=settings.jwt_issuer,
            options={"require": ["exp", "iat", "email", "role"]},
        )
    except jwt.PyJWTError as e:
        raise InvalidToken() from e

    email = payload.get("email")
    if not isinstance(email, str) or not email:
        raise InvalidToken()
    try:
        role = GlobalRole(payload.get("role"))
    except ValueError as e:
        raise InvalidToken() from e

    return Identity(email=email, role=role)

# no cookie is a normal anonymous request; a bad cookie is an error
def resolve_from_request(cookies: Mapping[str, str]) -> Identity | None:
    token = cookies.get(settings.session_cookie_name)
    if not token:
        return None
    return verify(token)
