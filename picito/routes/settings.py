from typing import Annotated

from fastapi import APIRouter, Depends, Path, Response, status
from sqlalchemy.orm import Session

from picito.auth.deps import get_current_user, get_optional_user, require_global
from picito.db import get_db
from picito.errors import now_iso
from picito.models.user import User
from picito.schemas.common import MessageOut
from picito.schemas.configs import (
    AssignedOrganization,
    ConfigListOut,
    OrganizationAssignIn,
    ProjectConfigIn,
    ProjectConfigOut,
    ProjectOrganizationOut,
    ProjectOrganizationUpdatedOut,
    SessionUser,
    VisibilityIn,
    VisibilityOut,
    VisibilityUpdatedOut,
)
from picito.services import configs

router = APIRouter(prefix="/settings", tags=["settings"])

ProjectKey = Annotated[str, Path(pattern=r"^[A-Za-z0-9_-]{1,100}$")]

@router.get("", response_model=ConfigListOut)
def list_configs(
    user: User | None = Depends(get_optional_user),
    db: Session = Depends(get_db),
) -> ConfigListOut:
    items = {c.key: ProjectConfigOut.model_validate(c) for c in configs.list_configs(db, user)}
    session = SessionUser(email=user.email, role=user.role.value) if user else None
    return ConfigListOut(configs=items, user=session)

@router.get("/{key}", response_model=ProjectConfigOut)
def get_config(
    key: ProjectKey,
    user: User | None = Depends(get_optional_user),
    db: Session = Depends(get_db),
) -> ProjectConfigOut:
    return ProjectConfigOut.model_validate(configs.resolve_embed(db, key, user))

@router.put("/{key}", response_model=ProjectConfigOut)
def put_config(
    payload: ProjectConfigIn,
    response: Response,
    key: ProjectKey,
    _: User = Depends(require_global("configs:write")),
    db: Session = Depends(get_db),
) -> ProjectConfigOut:
    values = payload.model_dump(exclude={"expected_version"})
    config, created = configs.upsert_config(db, key, values, payload.expected_version)
    if created:
        response.status_code = status.HTTP_201_CREATED
    return ProjectConfigOut.model_validate(config)

@router.delete("/{key}", response_model=MessageOut)
def delete_config(
    key: ProjectKey,
    _: User = Depends(require_global("configs:write")),
    db: Session = Depends(get_db),
) -> MessageOut:
    configs.delete_config(db, key)
    return MessageOut(message="Project deleted successfully")

@router.get("/{key}/visibility", response_model=VisibilityOut)
def get_visibility(
    key: ProjectKey,
    user: User | None = Depends(get_optional_user),
    db: Session = Depends(get_db),
) -> VisibilityOut:
    config = configs.resolve_embed(db, key, user)
    return VisibilityOut(id=config.key, name=config.name, is_public=config.is_public, timestamp=now_iso())

@router.patch("/{key}/visibility", response_model=VisibilityUpdatedOut)
def set_visibility(
    payload: VisibilityIn,
    key: ProjectKey,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> VisibilityUpdatedOut:
    config = configs.set_visibility(db, key, payload.is_public, user)
    state = "public" if config.is_public else "private"
    return VisibilityUpdatedOut(
        message=f"Project is now {state}",
        project=ProjectConfigOut.model_validate(config),
    )

def _organization_out(config, organization) -> ProjectOrganizationOut:
    return ProjectOrganizationOut(
        id=config.key,
        name=config.name,
        organization_id=config.organization_id,
        organization=AssignedOrganization.model_validate(organization) if organization else None,
        timestamp=now_iso(),
    )

@router.get("/{key}/organization", response_model=ProjectOrganizationOut)
def get_organization(
    key: ProjectKey,
    user: User | None = Depends(get_optional_user),
    db: Session = Depends(get_db),
) -> ProjectOrganizationOut:
    config = configs.resolve_embed(db, key, user)
    return _organization_out(config, configs.owning_organization(db, config))

@router.patch("/{key}/organization", response_model=ProjectOrganizationUpdatedOut)
def assign_organization(
    payload: OrganizationAssignIn,
    key: ProjectKey,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> ProjectOrganizationUpdatedOut:
    config, organization = configs.assign_organization(db, key, payload.organization_id, user)
    message = (
        f"Project assigned to {organization.name}"
        if organization
        else "Project removed from organization"
    )
    return ProjectOrganizationUpdatedOut(message=message, project=_organization_out(config, organization))
