"""Keyed store of embeddable project configurations.

Each project is its own row addressed by `key`. Writes are compare-and-swap
on the row's `version`, so two editors of the same project cannot silently
overwrite each other and edits of different projects never conflict.
"""

from __future__ import annotations

import uuid
from typing import Any

import structlog
from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from picito.errors import Conflict, Forbidden, NotFound
from picito.models.enums import GlobalRole
from picito.models.membership import Membership
from picito.models.organization import Organization
from picito.models.project_config import ProjectConfig
from picito.models.user import User
from picito.rbac.perms import has_permission
from picito.services.memberships import role_in

log = structlog.get_logger()

def _is_admin(user: User | None) -> bool:
    return user is not None and user.role == GlobalRole.admin

def _member_org_ids(db: Session, user: User) -> set[uuid.UUID]:
    return set(db.scalars(select(Membership.organization_id).where(Membership.user_id == user.id)).all())

def can_view(db: Session, config: ProjectConfig, user: User | None) -> bool:
    if config.is_public or _is_admin(user):
        return True
    if user is None or config.organization_id is None:
        return False
    return role_in(db, user.id, config.organization_id) is not None

def list_configs(db: Session, user: User | None) -> list[ProjectConfig]:
    q = select(ProjectConfig).order_by(ProjectConfig.key)
    if _is_admin(user):
        return list(db.scalars(q).all())

    visible = ProjectConfig.is_public.is_(True)
    if user is not None:
        org_ids = _member_org_ids(db, user)
        if org_ids:
            visible = visible | ProjectConfig.organization_id.in_(org_ids)
    return list(db.scalars(q.where(visible)).all())

def get_config(db: Session, key: str) -> ProjectConfig:
    config = db.scalar(select(ProjectConfig).where(ProjectConfig.key == key))
    if config is None:
        raise NotFound("Project not found")
    return config

def _swap(db: Session, config: ProjectConfig, values: dict[str, Any]) -> ProjectConfig:
    result = db.execute(
        update(ProjectConfig)
        .where(ProjectConfig.id == config.id, ProjectConfig.version == config.version)
        .values(**values, version=config.version + 1)
    )
    if result.rowcount != 1:
        db.rollback()
        raise Conflict("Project was modified concurrently, reload and retry")
    db.commit()
    db.refresh(config)
    return config

def upsert_config(
    db: Session,
    key: str,
    values: dict[str, Any],
    expected_version: int | None = None,
) -> tuple[ProjectConfig, bool]:
    """Create or replace the project stored under `key`.

    Returns (config, created). When `expected_version` is given the write
    only succeeds if the stored version still matches it.
    """
    existing = db.scalar(select(ProjectConfig).where(ProjectConfig.key == key))
    if existing is None:
        if expected_version:
            raise Conflict("Project was modified concurrently, reload and retry")
        config = ProjectConfig(key=key, version=1, **values)
        db.add(config)
        try:
            db.commit()
        except IntegrityError as e:
            db.rollback()
            raise Conflict("Project was modified concurrently, reload and retry") from e
        db.refresh(config)
        log.info("config.created", key=key)
        return config, True

    if expected_version is not None and expected_version != existing.version:
        raise Conflict("Project was modified concurrently, reload and retry")

    config = _swap(db, existing, values)
    log.info("config.updated", key=key, version=config.version)
    return config, False

def delete_config(db: Session, key: str) -> None:
    config = get_config(db, key)
    db.delete(config)
    db.commit()
    log.info("config.deleted", key=key)

def _require_org_perm(db: Session, user: User, organization_id: uuid.UUID | None, action: str) -> None:
    if _is_admin(user):
        return
    if organization_id is None or not has_permission(role_in(db, user.id, organization_id), action):
        raise Forbidden("Access denied - insufficient permissions")

def set_visibility(db: Session, key: str, is_public: bool, user: User) -> ProjectConfig:
    config = get_config(db, key)
    _require_org_perm(db, user, config.organization_id, "projects:edit")
    config = _swap(db, config, {"is_public": is_public})
    log.info("config.visibility_changed", key=key, is_public=is_public, actor=str(user.id))
    return config

def assign_organization(
    db: Session,
    key: str,
    organization_id: uuid.UUID | None,
    user: User,
) -> tuple[ProjectConfig, Organization | None]:
    config = get_config(db, key)

    organization = None
    if organization_id is not None:
        organization = db.get(Organization, organization_id)
        if organization is None:
            raise NotFound("Organization not found")
        _require_org_perm(db, user, organization_id, "projects:create")

    # moving a project out of an organization needs edit rights there too
    if config.organization_id is not None and config.organization_id != organization_id:
        _require_org_perm(db, user, config.organization_id, "projects:edit")

    config = _swap(db, config, {"organization_id": organization_id})
    log.info(
        "config.organization_assigned",
        key=key,
        organization_id=str(organization_id) if organization_id else None,
        actor=str(user.id),
    )
    return config, organization

def resolve_embed(db: Session, key: str, user: User | None) -> ProjectConfig:
    config = get_config(db, key)
    # private projects are indistinguishable from missing ones
    if not can_view(db, config, user):
        raise NotFound("Project not found")
    return config

def owning_organization(db: Session, config: ProjectConfig) -> Organization | None:
    if config.organization_id is None:
        return None
    return db.get(Organization, config.organization_id)

def list_for_organization(db: Session, organization_id: uuid.UUID) -> list[ProjectConfig]:
    return list(
        db.scalars(
            select(ProjectConfig)
            .where(ProjectConfig.organization_id == organization_id)
            .order_by(ProjectConfig.key)
        ).all()
    )
