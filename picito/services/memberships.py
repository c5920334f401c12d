"""Organization membership store.

Every write that can change who owns an organization locks the organization
row first and then re-reads the memberships it depends on, so concurrent role
changes on the same organization serialize and the owner count used by
`ensure_owner_remains` is always current.
"""

from __future__ import annotations

import uuid

import structlog
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from picito import audit
from picito.auth.tokens import normalize_email
from picito.errors import AppError, DuplicateMembership, Forbidden, LastOwnerViolation, NotFound, ValidationError
from picito.models.enums import GlobalRole, Role
from picito.models.membership import Membership
from picito.models.organization import Organization
from picito.models.user import User
from picito.rbac.perms import ROLE_RANK, can_manage_role, has_permission

log = structlog.get_logger()

def _as_role(role: Role | str) -> Role:
    try:
        return Role(role)
    except ValueError as e:
        raise ValidationError("Invalid role. Must be one of: owner, admin, member") from e

def lock_statement(organization_id: uuid.UUID):
    return select(Organization).where(Organization.id == organization_id).with_for_update()

def lock_organization(db: Session, organization_id: uuid.UUID) -> Organization:
    org = db.scalar(lock_statement(organization_id))
    if org is None:
        raise NotFound("Organization not found")
    return org

def role_in(db: Session, user_id: uuid.UUID, organization_id: uuid.UUID) -> Role | None:
    return db.scalar(
        select(Membership.role).where(
            Membership.user_id == user_id,
            Membership.organization_id == organization_id,
        )
    )

def count_owners(db: Session, organization_id: uuid.UUID, exclude: uuid.UUID | None = None) -> int:
    q = select(func.count()).select_from(Membership).where(
        Membership.organization_id == organization_id,
        Membership.role == Role.owner,
    )
    if exclude is not None:
        q = q.where(Membership.id != exclude)
    return db.scalar(q) or 0

def ensure_owner_remains(db: Session, membership: Membership, new_role: Role | None) -> None:
    """Reject a change that would leave the organization without an owner.

    `new_role` is the role the membership is about to get, or None when the
    membership is about to be removed. Must be called while holding the
    organization lock.
    """
    if membership.role != Role.owner or new_role == Role.owner:
        return
    if count_owners(db, membership.organization_id, exclude=membership.id) == 0:
        raise LastOwnerViolation()

def _authorize(
    db: Session,
    actor: User,
    organization_id: uuid.UUID,
    action: str,
    roles: list[Role],
    target_user_id: uuid.UUID | None = None,
) -> None:
    # platform admins manage every organization, including its owners
    if actor.role == GlobalRole.admin:
        return

    acting = role_in(db, actor.id, organization_id)
    allowed = has_permission(acting, action) and all(can_manage_role(acting, r) for r in roles)
    audit.log_permission_check(
        user_id=actor.id,
        organization_id=organization_id,
        role=acting,
        action=action,
        allowed=allowed,
        target_user_id=target_user_id,
    )
    if not allowed:
        raise Forbidden("Access denied - insufficient permissions")

def add_owner(db: Session, user_id: uuid.UUID, organization_id: uuid.UUID) -> Membership:
    # runs inside the caller's transaction; the caller commits
    m = Membership(user_id=user_id, organization_id=organization_id, role=Role.owner)
    db.add(m)
    try:
        db.flush()
    except IntegrityError as e:
        raise DuplicateMembership() from e
    return m

def add_member(
    db: Session,
    organization_id: uuid.UUID,
    email: str,
    role: Role | str,
    actor: User,
) -> Membership:
    role = _as_role(role)
    try:
        if db.get(Organization, organization_id) is None:
            raise NotFound("Organization not found")
        _authorize(db, actor, organization_id, "members:invite", [role])

        email = normalize_email(email)
        user = db.scalar(select(User).where(User.email == email))
        if user is None:
            user = User(email=email)
            db.add(user)
            db.flush()

        if role_in(db, user.id, organization_id) is not None:
            raise DuplicateMembership()

        m = Membership(user_id=user.id, organization_id=organization_id, role=role)
        db.add(m)
        db.flush()
        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise DuplicateMembership() from e
    except AppError:
        db.rollback()
        raise

    log.info(
        "membership.added",
        membership_id=str(m.id),
        organization_id=str(organization_id),
        user_id=str(m.user_id),
        role=role.value,
    )
    return m

def change_role(db: Session, membership_id: uuid.UUID, new_role: Role | str, actor: User) -> Membership:
    new_role = _as_role(new_role)
    try:
        m = db.get(Membership, membership_id)
        if m is None:
            raise NotFound("Membership not found")

        lock_organization(db, m.organization_id)
        m = db.get(Membership, membership_id, populate_existing=True)
        if m is None:
            raise NotFound("Membership not found")

        _authorize(db, actor, m.organization_id, "members:manage", [m.role, new_role], m.user_id)

        old_role = m.role
        if old_role == new_role:
            db.rollback()
            return m

        ensure_owner_remains(db, m, new_role)
        m.role = new_role
        db.commit()
    except AppError:
        db.rollback()
        raise

    audit.log_role_change(
        performed_by=actor.id,
        organization_id=m.organization_id,
        target_user_id=m.user_id,
        old_role=old_role,
        new_role=new_role,
    )
    log.info("membership.role_changed", membership_id=str(m.id), old_role=old_role.value, new_role=new_role.value)
    return m

def remove(db: Session, membership_id: uuid.UUID, actor: User) -> None:
    try:
        m = db.get(Membership, membership_id)
        if m is None:
            raise NotFound("Membership not found")

        lock_organization(db, m.organization_id)
        m = db.get(Membership, membership_id, populate_existing=True)
        if m is None:
            raise NotFound("Membership not found")

        # anyone may leave; removing someone else follows the role hierarchy
        if m.user_id != actor.id:
            _authorize(db, actor, m.organization_id, "members:manage", [m.role], m.user_id)
        ensure_owner_remains(db, m, None)

        organization_id, user_id = m.organization_id, m.user_id
        db.delete(m)
        db.commit()
    except AppError:
        db.rollback()
        raise

    log.info(
        "membership.removed",
        membership_id=str(membership_id),
        organization_id=str(organization_id),
        user_id=str(user_id),
    )

def get(db: Session, membership_id: uuid.UUID) -> Membership:
    m = db.get(Membership, membership_id)
    if m is None:
        raise NotFound("Membership not found")
    return m

def list_for_user(db: Session, user_id: uuid.UUID) -> list[tuple[Membership, Organization]]:
    q = (
        select(Membership, Organization)
        .join(Organization, Organization.id == Membership.organization_id)
        .where(Membership.user_id == user_id)
        .order_by(Membership.joined_at.desc())
    )
    return [(m, o) for m, o in db.execute(q).all()]

def list_for_organization(db: Session, organization_id: uuid.UUID) -> list[tuple[Membership, User]]:
    q = (
        select(Membership, User)
        .join(User, User.id == Membership.user_id)
        .where(Membership.organization_id == organization_id)
        .order_by(Membership.joined_at.asc())
    )
    rows = [(m, u) for m, u in db.execute(q).all()]
    # role hierarchy first, then join order (sorted is stable)
    return sorted(rows, key=lambda r: -ROLE_RANK[r[0].role])
