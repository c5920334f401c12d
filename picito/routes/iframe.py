from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from picito.auth.deps import get_optional_user
from picito.db import get_db
from picito.models.user import User
from picito.routes.settings import ProjectKey
from picito.schemas.configs import ProjectConfigOut
from picito.services import configs

router = APIRouter(prefix="/iframe", tags=["iframe"])

# embed payload for the frame renderer
@router.get("/{key}", response_model=ProjectConfigOut)
def embed(
    key: ProjectKey,
    user: User | None = Depends(get_optional_user),
    db: Session = Depends(get_db),
) -> ProjectConfigOut:
    return ProjectConfigOut.model_validate(configs.resolve_embed(db, key, user))
