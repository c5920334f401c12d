import uuid
from datetime import datetime

import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column

from picito.db import Base
from picito.models.enums import HorizontalAlignment, VerticalAlignment

class ProjectConfig(Base):
    """One embeddable project, addressed by its key.

    `version` is bumped on every write and used for optimistic concurrency,
    so concurrent edits of different keys never touch the same row.
    """

    __tablename__ = "project_configs"

    id: Mapped[uuid.UUID] = mapped_column(sa.Uuid, primary_key=True, default=uuid.uuid4)
    key: Mapped[str] = mapped_column(sa.String(100), unique=True, index=True, nullable=False)

    name: Mapped[str] = mapped_column(sa.String(200), nullable=False)
    content_url: Mapped[str] = mapped_column(sa.String(2048), nullable=False)
    original_width: Mapped[int] = mapped_column(sa.Integer, nullable=False)
    original_height: Mapped[int] = mapped_column(sa.Integer, nullable=False)
    aspect_ratio_x: Mapped[int] = mapped_column(sa.Integer, nullable=False)
    aspect_ratio_y: Mapped[int] = mapped_column(sa.Integer, nullable=False)
    background_color: Mapped[str] = mapped_column(sa.String(50), nullable=False)
    background_image_url: Mapped[str] = mapped_column(sa.String(2048), nullable=False, default="")
    horizontal_alignment: Mapped[HorizontalAlignment] = mapped_column(
        sa.Enum(HorizontalAlignment, name="horizontal_alignment"),
        nullable=False,
        default=HorizontalAlignment.center,
    )
    vertical_alignment: Mapped[VerticalAlignment] = mapped_column(
        sa.Enum(VerticalAlignment, name="vertical_alignment"),
        nullable=False,
        default=VerticalAlignment.middle,
    )

    is_public: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, default=False)
    organization_id: Mapped[uuid.UUID | None] = mapped_column(
        sa.Uuid, sa.ForeignKey("organizations.id"), index=True, nullable=True
    )

    version: Mapped[int] = mapped_column(sa.Integer, nullable=False, default=1)

    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True),
        server_default=sa.func.now(),
        onupdate=sa.func.now(),
        nullable=False,
    )
