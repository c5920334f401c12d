from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from picito.auth.deps import require_global
from picito.db import get_db
from picito.errors import now_iso
from picito.models.user import User
from picito.schemas.version import VersionCreatedOut, VersionIn, VersionOut
from picito.services import versions

router = APIRouter(prefix="/version", tags=["version"])

@router.get("", response_model=VersionOut)
def get_version(db: Session = Depends(get_db)) -> VersionOut:
    return VersionOut(version=versions.current_version(db), timestamp=now_iso())

@router.post("", response_model=VersionCreatedOut, status_code=status.HTTP_201_CREATED)
def post_version(
    payload: VersionIn,
    _: User = Depends(require_global("version:write")),
    db: Session = Depends(get_db),
) -> VersionCreatedOut:
    row = versions.update_version(db, payload.version, payload.description)
    return VersionCreatedOut(
        version=row.version,
        description=row.description,
        release_date=row.release_date,
        timestamp=now_iso(),
    )
