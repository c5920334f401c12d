from picito.models.app_version import AppVersion
from picito.models.membership import Membership
from picito.models.organization import Organization
from picito.models.project_config import ProjectConfig
from picito.models.user import User

__all__ = ["User", "Organization", "Membership", "ProjectConfig", "AppVersion"]
