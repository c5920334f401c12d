import uuid
from datetime import datetime

from pydantic import EmailStr

from picito.models.enums import Role
from picito.schemas.common import CamelModel
from picito.schemas.configs import ProjectConfigOut

class OrgCreateIn(CamelModel):
    name: str
    description: str | None = None

class OrgOut(CamelModel):
    id: uuid.UUID
    name: str
    slug: str
    description: str
    created_at: datetime | None = None
    updated_at: datetime | None = None
    membership_role: Role | None = None
    joined_at: datetime | None = None

class OrgListOut(CamelModel):
    organisations: list[OrgOut]
    count: int

class OrgCreatedOut(CamelModel):
    message: str = "Organization created successfully"
    organisation: OrgOut

class OrgDetailOut(CamelModel):
    organization: OrgOut
    role: Role | None = None

class MemberAddIn(CamelModel):
    email: EmailStr
    role: Role = Role.member

class MemberRoleIn(CamelModel):
    role: Role

class MembershipOut(CamelModel):
    id: uuid.UUID
    user_id: uuid.UUID
    organization_id: uuid.UUID
    role: Role
    joined_at: datetime

class MembershipEnvelope(CamelModel):
    membership: MembershipOut

class MemberUserOut(CamelModel):
    id: uuid.UUID
    email: str
    last_login_at: datetime | None = None

class MemberOut(CamelModel):
    id: uuid.UUID
    user: MemberUserOut
    role: Role
    joined_at: datetime

class MemberListOut(CamelModel):
    members: list[MemberOut]
    count: int
    role: Role | None = None

class OrgUpdateIn(CamelModel):
    name: str | None = None
    slug: str | None = None
    description: str | None = None

class OrgUpdatedOut(CamelModel):
    message: str = "Organization updated successfully"
    organization: OrgOut

class OrgProjectsOut(CamelModel):
    organization: OrgOut
    projects: list[ProjectConfigOut]
    count: int
    role: Role | None = None
