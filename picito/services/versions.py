from __future__ import annotations

import re

import structlog
from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from picito.config import settings
from picito.errors import Conflict, ValidationError
from picito.models.app_version import AppVersion

log = structlog.get_logger()

SEMVER = re.compile(r"^\d+\.\d+\.\d+$")

def validate_version(version: str) -> str:
    version = (version or "").strip()
    if not SEMVER.match(version):
        raise ValidationError("Version must follow semantic versioning format (e.g., 2.7.1)")
    return version

def current_version(db: Session) -> str:
    v = db.scalar(
        select(AppVersion.version)
        .where(AppVersion.is_active.is_(True))
        .order_by(AppVersion.release_date.desc())
        .limit(1)
    )
    return v or settings.fallback_version

def update_version(db: Session, version: str, description: str | None = None) -> AppVersion:
    version = validate_version(version)
    description = (description or "").strip() or f"Version {version} release"
    if len(description) > 500:
        raise ValidationError("Description cannot exceed 500 characters")

    db.execute(update(AppVersion).values(is_active=False))
    row = AppVersion(version=version, description=description, is_active=True)
    db.add(row)
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise Conflict(f"Version {version} already exists") from e
    db.refresh(row)

    log.info("version.updated", version=version)
    return row
