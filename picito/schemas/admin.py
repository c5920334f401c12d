from pydantic import EmailStr

from picito.models.enums import GlobalRole
from picito.schemas.auth import UserOut
from picito.schemas.common import CamelModel
from picito.schemas.orgs import OrgOut

class UserListOut(CamelModel):
    users: list[UserOut]

class UserRoleIn(CamelModel):
    email: EmailStr
    role: GlobalRole

class UserRoleOut(CamelModel):
    message: str = "User role updated successfully"
    user: UserOut

class UserMembershipsOut(CamelModel):
    memberships: list[OrgOut]
