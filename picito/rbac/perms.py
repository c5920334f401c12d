from picito.models.enums import GlobalRole, Role

# organization-scoped actions
PERMS: dict[str, set[Role]] = {
    "org:view": {Role.owner, Role.admin, Role.member},
    "org:edit": {Role.owner},
    "org:delete": {Role.owner},

    "members:view": {Role.owner, Role.admin, Role.member},
    "members:invite": {Role.owner, Role.admin},
    "members:manage": {Role.owner, Role.admin},

    "projects:view": {Role.owner, Role.admin, Role.member},
    "projects:create": {Role.owner, Role.admin},
    "projects:edit": {Role.owner, Role.admin},
    "projects:delete": {Role.owner},

    "settings:view": {Role.owner, Role.admin, Role.member},
    "settings:manage": {Role.owner, Role.admin},
}

# platform-wide actions, independent of any membership
GLOBAL_PERMS: dict[str, set[GlobalRole]] = {
    "orgs:create": {GlobalRole.admin, GlobalRole.user},
    "orgs:view_all": {GlobalRole.admin},
    "orgs:delete": {GlobalRole.admin},
    "memberships:remove": {GlobalRole.admin},
    "users:list": {GlobalRole.admin},
    "users:update_role": {GlobalRole.admin},
    "configs:read": {GlobalRole.admin, GlobalRole.user},
    "configs:write": {GlobalRole.admin},
    "version:write": {GlobalRole.admin},
}

ROLE_RANK: dict[Role, int] = {
    Role.owner: 3,
    Role.admin: 2,
    Role.member: 1,
}

# which roles each role may grant, change or revoke on other members
MANAGEABLE_ROLES: dict[Role, frozenset[Role]] = {
    Role.owner: frozenset({Role.admin, Role.member}),
    Role.admin: frozenset({Role.member}),
    Role.member: frozenset(),
}

def _as_role(role) -> Role | None:
    try:
        return Role(role)
    except ValueError:
        return None

def _as_global_role(role) -> GlobalRole | None:
    try:
        return GlobalRole(role)
    except ValueError:
        return None

def has_permission(role: Role | str | None, action: str) -> bool:
    r = _as_role(role)
    if r is None:
        return False
    return r in PERMS.get(action, set())

def has_global_permission(role: GlobalRole | str | None, action: str) -> bool:
    r = _as_global_role(role)
    if r is None:
        return False
    return r in GLOBAL_PERMS.get(action, set())

def permissions_for(role: Role | str | None) -> set[str]:
    r = _as_role(role)
    if r is None:
        return set()
    return {action for action, roles in PERMS.items() if r in roles}

def at_least(role: Role | str | None, required: Role) -> bool:
    r = _as_role(role)
    if r is None:
        return False
    return ROLE_RANK[r] >= ROLE_RANK[required]

def can_manage_role(acting: Role | str | None, target: Role | str | None) -> bool:
    a = _as_role(acting)
    t = _as_role(target)
    if a is None or t is None:
        return False
    return t in MANAGEABLE_ROLES[a]

def assignable_roles(acting: Role | str | None) -> list[Role]:
    a = _as_role(acting)
    if a is None:
        return []
    return sorted(MANAGEABLE_ROLES[a], key=lambda r: ROLE_RANK[r], reverse=True)
