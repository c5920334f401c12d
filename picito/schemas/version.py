from datetime import datetime

from pydantic import Field

from picito.schemas.common import CamelModel

class VersionIn(CamelModel):
    version: str = Field(pattern=r"^\d+\.\d+\.\d+$")
    description: str | None = Field(default=None, max_length=500)

class VersionOut(CamelModel):
    version: str
    timestamp: str

class VersionCreatedOut(CamelModel):
    message: str = "Version updated successfully"
    version: str
    description: str
    release_date: datetime
    timestamp: str
