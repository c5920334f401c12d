import uuid
from datetime import datetime

from pydantic import EmailStr

from picito.models.enums import GlobalRole
from picito.schemas.common import CamelModel

class LoginIn(CamelModel):
    email: EmailStr

class UserOut(CamelModel):
    id: uuid.UUID
    email: str
    role: GlobalRole
    last_login_at: datetime | None = None
    created_at: datetime | None = None
    terms_accepted_at: datetime | None = None
    privacy_accepted_at: datetime | None = None

class LoginOut(CamelModel):
    message: str = "Login successful"
    user: UserOut

class SessionOut(CamelModel):
    user: UserOut
