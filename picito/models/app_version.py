import uuid
from datetime import datetime, timezone

import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column

from picito.db import Base

def _utcnow() -> datetime:
    return datetime.now(timezone.utc)

class AppVersion(Base):
    __tablename__ = "app_versions"
    __table_args__ = (sa.Index("ix_app_versions_active_release", "is_active", "release_date"),)

    id: Mapped[uuid.UUID] = mapped_column(sa.Uuid, primary_key=True, default=uuid.uuid4)
    version: Mapped[str] = mapped_column(sa.String(32), unique=True, nullable=False)
    description: Mapped[str] = mapped_column(sa.String(500), nullable=False, default="")
    release_date: Mapped[datetime] = mapped_column(sa.DateTime(timezone=True), default=_utcnow, nullable=False)
    is_active: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, default=True)
