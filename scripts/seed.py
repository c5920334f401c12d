import uuid
from dataclasses import dataclass

from sqlalchemy import select
from sqlalchemy.orm import Session

from picito.db import session_scope
from picito.models.enums import GlobalRole, Role
from picito.models.membership import Membership
from picito.models.organization import Organization
from picito.models.project_config import ProjectConfig
from picito.models.user import User
from picito.services.organizations import unique_slug

@dataclass
class SeedResult:
    admin_email: str
    owner_email: str
    member_email: str
    org_id: uuid.UUID
    project_key: str

def get_or_create_user(db: Session, email: str, role: GlobalRole = GlobalRole.user) -> User:
    email = email.lower().strip()
    u = db.scalar(select(User).where(User.email == email))
    if u is None:
        u = User(email=email, role=role)
        db.add(u)
        db.flush()
    elif u.role != role:
        u.role = role
        db.flush()
    return u

def get_or_create_membership(db: Session, user_id: uuid.UUID, org_id: uuid.UUID, role: Role) -> Membership:
    m = db.scalar(
        select(Membership).where(Membership.user_id == user_id, Membership.organization_id == org_id)
    )
    if m is None:
        m = Membership(user_id=user_id, organization_id=org_id, role=role)
        db.add(m)
        db.flush()
    elif m.role != role:
        m.role = role
        db.flush()
    return m

def get_or_create_org(db: Session, name: str) -> Organization:
    o = db.scalar(select(Organization).where(Organization.name == name))
    if o is None:
        o = Organization(name=name, slug=unique_slug(db, name))
        db.add(o)
        db.flush()
    return o

def get_or_create_project(db: Session, key: str, org_id: uuid.UUID) -> ProjectConfig:
    p = db.scalar(select(ProjectConfig).where(ProjectConfig.key == key))
    if p is None:
        p = ProjectConfig(
            key=key,
            name="Seeded slideshow",
            content_url="https://example.com/embed/slideshow",
            original_width=1920,
            original_height=1080,
            aspect_ratio_x=16,
            aspect_ratio_y=9,
            background_color="#000000",
            is_public=True,
            organization_id=org_id,
        )
        db.add(p)
        db.flush()
    return p

def seed() -> SeedResult:
    with session_scope() as db:
        admin = get_or_create_user(db, "admin@example.com", GlobalRole.admin)
        owner = get_or_create_user(db, "owner@example.com")
        member = get_or_create_user(db, "member@example.com")

        # owner membership first so the org is never ownerless
        org = get_or_create_org(db, "Seeded Studio")
        get_or_create_membership(db, owner.id, org.id, Role.owner)
        get_or_create_membership(db, member.id, org.id, Role.member)

        project = get_or_create_project(db, "seeded-slideshow", org.id)

        db.commit()

        return SeedResult(
            admin_email=admin.email,
            owner_email=owner.email,
            member_email=member.email,
            org_id=org.id,
            project_key=project.key,
        )

if __name__ == "__main__":
    r = seed()
    print("seed complete")
    print(f"org_id={r.org_id}")
    print(f"project_key={r.project_key}")
    print("users:")
    print(f"  admin:  {r.admin_email}")
    print(f"  owner:  {r.owner_email}")
    print(f"  member: {r.member_email}")
