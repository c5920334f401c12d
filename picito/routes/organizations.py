import uuid

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from picito.auth.deps import get_current_user, require_global
from picito.db import get_db
from picito.errors import NotFound
from picito.models.enums import GlobalRole
from picito.models.membership import Membership
from picito.models.organization import Organization
from picito.models.user import User
from picito.rbac.deps import OrgContext, require_perm
from picito.schemas.common import MessageOut
from picito.schemas.configs import ProjectConfigOut
from picito.schemas.orgs import (
    MemberAddIn,
    MemberListOut,
    MemberOut,
    MemberRoleIn,
    MemberUserOut,
    MembershipEnvelope,
    MembershipOut,
    OrgCreatedOut,
    OrgCreateIn,
    OrgDetailOut,
    OrgListOut,
    OrgOut,
    OrgProjectsOut,
    OrgUpdatedOut,
    OrgUpdateIn,
)
from picito.services import configs, memberships, organizations

router = APIRouter(prefix="/organizations", tags=["organizations"])

def org_out(org: Organization, membership: Membership | None = None) -> OrgOut:
    out = OrgOut.model_validate(org)
    if membership is not None:
        out.membership_role = membership.role
        out.joined_at = membership.joined_at
    return out

@router.get("", response_model=OrgListOut)
def list_organizations(
    admin: bool = False,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> OrgListOut:
    # ?admin=true is ignored for non-admins
    if admin and user.role == GlobalRole.admin:
        orgs = [org_out(o) for o in organizations.list_all(db)]
    else:
        orgs = [org_out(o, m) for o, m in organizations.list_for_user(db, user.id)]
    return OrgListOut(organisations=orgs, count=len(orgs))

@router.post("", response_model=OrgCreatedOut, status_code=status.HTTP_201_CREATED)
def create_organization(
    payload: OrgCreateIn,
    user: User = Depends(require_global("orgs:create")),
    db: Session = Depends(get_db),
) -> OrgCreatedOut:
    org, membership = organizations.create(db, payload.name, payload.description, user)
    return OrgCreatedOut(organisation=org_out(org, membership))

@router.delete("/membership/{membership_id}", response_model=MessageOut)
def remove_membership(
    membership_id: uuid.UUID,
    user: User = Depends(require_global("memberships:remove")),
    db: Session = Depends(get_db),
) -> MessageOut:
    memberships.remove(db, membership_id, user)
    return MessageOut(message="Membership removed successfully")

@router.get("/{organization_id}", response_model=OrgDetailOut)
def get_organization(ctx: OrgContext = Depends(require_perm("org:view"))) -> OrgDetailOut:
    return OrgDetailOut(organization=org_out(ctx.org, ctx.membership), role=ctx.role)

@router.patch("/{organization_id}", response_model=OrgUpdatedOut)
def update_organization(
    organization_id: uuid.UUID,
    payload: OrgUpdateIn,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> OrgUpdatedOut:
    org = organizations.update(
        db,
        organization_id,
        user,
        name=payload.name,
        slug=payload.slug,
        description=payload.description,
    )
    return OrgUpdatedOut(organization=org_out(org))

@router.get("/{organization_id}/projects", response_model=OrgProjectsOut)
def list_projects(
    ctx: OrgContext = Depends(require_perm("projects:view")),
    db: Session = Depends(get_db),
) -> OrgProjectsOut:
    projects = [ProjectConfigOut.model_validate(c) for c in configs.list_for_organization(db, ctx.org.id)]
    return OrgProjectsOut(
        organization=org_out(ctx.org, ctx.membership),
        projects=projects,
        count=len(projects),
        role=ctx.role,
    )

@router.delete("/{organization_id}", response_model=MessageOut)
def delete_organization(
    organization_id: uuid.UUID,
    user: User = Depends(require_global("orgs:delete")),
    db: Session = Depends(get_db),
) -> MessageOut:
    organizations.delete(db, organization_id, user)
    return MessageOut(message="Organization deleted successfully")

@router.get("/{organization_id}/members", response_model=MemberListOut)
def list_members(
    ctx: OrgContext = Depends(require_perm("members:view")),
    db: Session = Depends(get_db),
) -> MemberListOut:
    members = [
        MemberOut(
            id=m.id,
            user=MemberUserOut.model_validate(u),
            role=m.role,
            joined_at=m.joined_at,
        )
        for m, u in memberships.list_for_organization(db, ctx.org.id)
    ]
    return MemberListOut(members=members, count=len(members), role=ctx.role)

@router.post(
    "/{organization_id}/members",
    response_model=MembershipEnvelope,
    status_code=status.HTTP_201_CREATED,
)
def add_member(
    organization_id: uuid.UUID,
    payload: MemberAddIn,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> MembershipEnvelope:
    m = memberships.add_member(db, organization_id, payload.email, payload.role, user)
    return MembershipEnvelope(membership=MembershipOut.model_validate(m))

@router.patch("/{organization_id}/members/{membership_id}", response_model=MembershipEnvelope)
def change_member_role(
    organization_id: uuid.UUID,
    membership_id: uuid.UUID,
    payload: MemberRoleIn,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> MembershipEnvelope:
    if memberships.get(db, membership_id).organization_id != organization_id:
        raise NotFound("Membership not found")

    m = memberships.change_role(db, membership_id, payload.role, user)
    return MembershipEnvelope(membership=MembershipOut.model_validate(m))

@router.delete("/{organization_id}/members/{membership_id}", response_model=MessageOut)
def remove_member(
    organization_id: uuid.UUID,
    membership_id: uuid.UUID,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> MessageOut:
    if memberships.get(db, membership_id).organization_id != organization_id:
        raise NotFound("Membership not found")

    memberships.remove(db, membership_id, user)
    return MessageOut(message="Member removed successfully")
