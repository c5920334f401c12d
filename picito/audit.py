import uuid

import structlog

from picito.models.enums import Role

log = structlog.get_logger(channel="audit")

def log_permission_check(
    *,
    user_id: uuid.UUID,
    organization_id: uuid.UUID,
    role: Role | None,
    action: str,
    allowed: bool,
    target_user_id: uuid.UUID | None = None,
) -> None:
    log.info(
        "audit.permission_check",
        user_id=str(user_id),
        organization_id=str(organization_id),
        role=role.value if role else None,
        action=action,
        target_user_id=str(target_user_id) if target_user_id else None,
        status="success" if allowed else "failure",
    )

def log_role_change(
    *,
    performed_by: uuid.UUID,
    organization_id: uuid.UUID,
    target_user_id: uuid.UUID,
    old_role: Role,
    new_role: Role,
) -> None:
    log.info(
        "audit.role_change",
        user_id=str(performed_by),
        organization_id=str(organization_id),
        target_user_id=str(target_user_id),
        old_role=old_role.value,
        new_role=new_role.value,
        status="success",
    )
