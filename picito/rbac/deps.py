import uuid

from fastapi import Depends
from sqlalchemy import select
from sqlalchemy.orm import Session

from picito import audit
from picito.auth.deps import get_current_user
from picito.db import get_db
from picito.errors import Forbidden, NotFound
from picito.models.enums import GlobalRole, Role
from picito.models.membership import Membership
from picito.models.organization import Organization
from picito.models.user import User
from picito.rbac.perms import PERMS, has_permission

class OrgContext:
    def __init__(self, org: Organization, user: User, membership: Membership | None):
        self.org = org
        self.user = user
        self.membership = membership

    @property
    def role(self) -> Role | None:
        return self.membership.role if self.membership else None

    @property
    def is_global_admin(self) -> bool:
        return self.user.role == GlobalRole.admin

def get_org_context(
    organization_id: uuid.UUID,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> OrgContext:
    org = db.get(Organization, organization_id)
    if org is None:
        raise NotFound("Organization not found")

    membership = db.scalar(
        select(Membership).where(
            Membership.user_id == user.id,
            Membership.organization_id == organization_id,
        )
    )
    ctx = OrgContext(org=org, user=user, membership=membership)
    if membership is None and not ctx.is_global_admin:
        raise Forbidden("Access denied - not a member of this organization")
    return ctx

def require_perm(action: str):
    if action not in PERMS:
        raise RuntimeError(f"unknown permission action: {action}")

    def _checker(ctx: OrgContext = Depends(get_org_context)) -> OrgContext:
        if ctx.is_global_admin:
            return ctx

        allowed = has_permission(ctx.role, action)
        audit.log_permission_check(
            user_id=ctx.user.id,
            organization_id=ctx.org.id,
            role=ctx.role,
            action=action,
            allowed=allowed,
        )
        if not allowed:
            raise Forbidden("Access denied - insufficient permissions")
        return ctx

    return _checker
