"""Organization service: creation, editing, listing, deletion and owner reconciliation."""

from __future__ import annotations

import re
import uuid

import structlog
from sqlalchemy import delete as sa_delete, exists, or_, select, update as sa_update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from picito.errors import AppError, Conflict, Forbidden, NotFound, ValidationError
from picito.models.enums import GlobalRole, Role
from picito.models.membership import Membership
from picito.models.organization import Organization
from picito.models.project_config import ProjectConfig
from picito.models.user import User
from picito.rbac.perms import has_permission
from picito.services import memberships

log = structlog.get_logger()

NAME_MIN = 2
NAME_MAX = 100
DESCRIPTION_MAX = 500
SLUG_FALLBACK = "organization"
SLUG_MAX = 120
CREATE_ATTEMPTS = 5

_NOT_SLUG_CHARS = re.compile(r"[^a-z0-9\s-]")
_WHITESPACE = re.compile(r"\s+")
_HYPHENS = re.compile(r"-+")
_SLUG = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")

def generate_slug(name: str) -> str:
    slug = name.lower().strip()
    slug = _NOT_SLUG_CHARS.sub("", slug)
    slug = _WHITESPACE.sub("-", slug)
    slug = _HYPHENS.sub("-", slug)
    return slug.strip("-")

def unique_slug(db: Session, name: str) -> str:
    base = generate_slug(name) or SLUG_FALLBACK
    taken = set(
        db.scalars(
            select(Organization.slug).where(
                or_(Organization.slug == base, Organization.slug.like(f"{base}-%"))
            )
        ).all()
    )
    slug = base
    counter = 1
    while slug in taken:
        slug = f"{base}-{counter}"
        counter += 1
    return slug

def validate_name(name: str | None) -> str:
    name = (name or "").strip()
    if len(name) < NAME_MIN:
        raise ValidationError("Organization name is required and must be at least 2 characters")
    if len(name) > NAME_MAX:
        raise ValidationError("Organization name cannot exceed 100 characters")
    return name

def validate_description(description: str | None) -> str:
    description = (description or "").strip()
    if len(description) > DESCRIPTION_MAX:
        raise ValidationError("Description cannot exceed 500 characters")
    return description

def validate_slug(slug: str) -> str:
    slug = slug.strip()
    if len(slug) > SLUG_MAX or not _SLUG.match(slug):
        raise ValidationError("Slug must contain only lowercase letters, numbers and single hyphens")
    return slug

def update(
    db: Session,
    organization_id: uuid.UUID,
    actor: User,
    name: str | None = None,
    slug: str | None = None,
    description: str | None = None,
) -> Organization:
    """Rename, re-slug or re-describe an organization.

    Only the fields passed are changed. Platform admins and owners may edit.
    """
    if name is not None:
        name = validate_name(name)
    if slug is not None:
        slug = validate_slug(slug)
    if description is not None:
        description = validate_description(description)

    try:
        org = get(db, organization_id)
        if actor.role != GlobalRole.admin and not has_permission(
            memberships.role_in(db, actor.id, organization_id), "org:edit"
        ):
            raise Forbidden("Access denied - insufficient permissions")

        if slug is not None and slug != org.slug:
            taken = db.scalar(
                select(Organization.id).where(Organization.slug == slug, Organization.id != organization_id)
            )
            if taken is not None:
                raise Conflict("Organization slug already exists")
            org.slug = slug
        if name is not None:
            org.name = name
        if description is not None:
            org.description = description
        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise Conflict("Organization slug already exists") from e
    except AppError:
        db.rollback()
        raise

    db.refresh(org)
    log.info("org.updated", org_id=str(organization_id), slug=org.slug, actor=str(actor.id))
    return org

def create(db: Session, name: str, description: str | None, creator: User) -> tuple[Organization, Membership]:
    """Create an organization with `creator` as its sole owner.

    The organization row and the owner membership are written in one
    transaction, so either both exist afterwards or neither does. A slug taken
    concurrently between lookup and insert is retried with the next suffix.
    """
    name = validate_name(name)
    description = validate_description(description)
    creator_id = creator.id

    for attempt in range(CREATE_ATTEMPTS):
        org = Organization(name=name, slug=unique_slug(db, name), description=description)
        db.add(org)
        try:
            db.flush()
        except IntegrityError:
            db.rollback()
            log.info("org.slug_race", name=name, attempt=attempt)
            continue

        try:
            membership = memberships.add_owner(db, creator_id, org.id)
            db.commit()
        except Exception:
            db.rollback()
            raise

        log.info("org.created", org_id=str(org.id), slug=org.slug, creator=str(creator_id))
        return org, membership

    raise Conflict("Organization with this name already exists")

def get(db: Session, organization_id: uuid.UUID) -> Organization:
    org = db.get(Organization, organization_id)
    if org is None:
        raise NotFound("Organization not found")
    return org

def list_all(db: Session) -> list[Organization]:
    return list(db.scalars(select(Organization).order_by(Organization.created_at.desc())).all())

def list_for_user(db: Session, user_id: uuid.UUID) -> list[tuple[Organization, Membership]]:
    return [(o, m) for m, o in memberships.list_for_user(db, user_id)]

def delete(db: Session, organization_id: uuid.UUID, actor: User) -> None:
    """Delete an organization and everything scoped to it (platform admins only).

    Memberships go first and projects are detached, all in the same
    transaction as the organization row itself.
    """
    if actor.role != GlobalRole.admin:
        raise Forbidden("Forbidden: Admin access required")

    try:
        org = memberships.lock_organization(db, organization_id)
        slug = org.slug
        db.execute(
            sa_update(ProjectConfig)
            .where(ProjectConfig.organization_id == organization_id)
            .values(organization_id=None)
        )
        db.execute(sa_delete(Membership).where(Membership.organization_id == organization_id))
        db.delete(org)
        db.commit()
    except AppError:
        db.rollback()
        raise

    log.info("org.deleted", org_id=str(organization_id), slug=slug, actor=str(actor.id))

def find_ownerless(db: Session) -> list[Organization]:
    has_owner = exists().where(
        Membership.organization_id == Organization.id,
        Membership.role == Role.owner,
    )
    return list(db.scalars(select(Organization).where(~has_owner).order_by(Organization.created_at)).all())

def reconcile_ownerless(db: Session) -> list[dict]:
    """Repair organizations that have no owner.

    The longest-standing admin (or, failing that, member) is promoted to
    owner. An organization without any membership is deleted.
    """
    repairs: list[dict] = []
    for org in find_ownerless(db):
        org_id = org.id
        memberships.lock_organization(db, org_id)
        if memberships.count_owners(db, org_id) > 0:
            db.rollback()
            continue

        rows = [m for m, _ in memberships.list_for_organization(db, org_id)]
        if rows:
            heir = rows[0]
            heir.role = Role.owner
            repair = {"organization_id": org_id, "action": "promoted", "membership_id": heir.id}
        else:
            db.execute(
                sa_update(ProjectConfig).where(ProjectConfig.organization_id == org_id).values(organization_id=None)
            )
            db.delete(org)
            repair = {"organization_id": org_id, "action": "deleted", "membership_id": None}
        db.commit()

        log.warning("org.reconciled", org_id=str(org_id), action=repair["action"])
        repairs.append(repair)
    return repairs
