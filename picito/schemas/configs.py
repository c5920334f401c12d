import uuid
from datetime import datetime

from pydantic import Field, StrictBool

from picito.models.enums import HorizontalAlignment, VerticalAlignment
from picito.schemas.common import CamelModel

class ProjectConfigIn(CamelModel):
    name: str = Field(min_length=1, max_length=200)
    content_url: str = Field(min_length=1, max_length=2048)
    original_width: int = Field(gt=0)
    original_height: int = Field(gt=0)
    aspect_ratio_x: int = Field(gt=0)
    aspect_ratio_y: int = Field(gt=0)
    background_color: str = Field(min_length=1, max_length=50)
    background_image_url: str = Field(default="", max_length=2048)
    horizontal_alignment: HorizontalAlignment = HorizontalAlignment.center
    vertical_alignment: VerticalAlignment = VerticalAlignment.middle
    is_public: StrictBool = False
    expected_version: int | None = Field(default=None, ge=0)

class ProjectConfigOut(CamelModel):
    id: str = Field(validation_alias="key")
    name: str
    content_url: str
    original_width: int
    original_height: int
    aspect_ratio_x: int
    aspect_ratio_y: int
    background_color: str
    background_image_url: str
    horizontal_alignment: HorizontalAlignment
    vertical_alignment: VerticalAlignment
    is_public: bool
    organization_id: uuid.UUID | None = None
    version: int
    updated_at: datetime | None = None

class SessionUser(CamelModel):
    email: str
    role: str

class ConfigListOut(CamelModel):
    configs: dict[str, ProjectConfigOut]
    user: SessionUser | None = None

class VisibilityIn(CamelModel):
    is_public: StrictBool

class VisibilityOut(CamelModel):
    id: str
    name: str
    is_public: bool
    timestamp: str

class VisibilityUpdatedOut(CamelModel):
    message: str
    project: ProjectConfigOut

class OrganizationAssignIn(CamelModel):
    organization_id: uuid.UUID | None = None

class AssignedOrganization(CamelModel):
    id: uuid.UUID
    name: str
    slug: str
    description: str

class ProjectOrganizationOut(CamelModel):
    id: str
    name: str
    organization_id: uuid.UUID | None = None
    organization: AssignedOrganization | None = None
    timestamp: str

class ProjectOrganizationUpdatedOut(CamelModel):
    message: str
    project: ProjectOrganizationOut
