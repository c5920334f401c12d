from enum import Enum

class Role(str, Enum):
    owner = "owner"
    admin = "admin"
    member = "member"

class GlobalRole(str, Enum):
    admin = "admin"
    user = "user"

class HorizontalAlignment(str, Enum):
    left = "left"
    center = "center"
    right = "right"

class VerticalAlignment(str, Enum):
    top = "top"
    middle = "middle"
    bottom = "bottom"
