import uuid

import pytest
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from picito.models.enums import Role
from picito.models.membership import Membership
from picito.models.organization import Organization
from picito.models.project_config import ProjectConfig
from picito.models.user import User
from picito.services import organizations

@pytest.mark.parametrize(
    "name,slug",
    [
        ("Acme Corp", "acme-corp"),
        ("  Hello,   World!  ", "hello-world"),
        ("--Dash -- Land--", "dash-land"),
        ("Café Ünïcode", "caf-ncode"),
    ],
)
def test_generate_slug(name, slug):
    assert organizations.generate_slug(name) == slug

def test_colliding_names_get_suffixes(client, login):
    u = login("u@example.com")
    slugs = []
    for _ in range(3):
        r = u.post("/organizations", json={"name": "Acme Corp"})
        assert r.status_code == 201, r.text
        slugs.append(r.json()["organisation"]["slug"])
    assert slugs == ["acme-corp", "acme-corp-1", "acme-corp-2"]

def test_symbol_only_name_falls_back(login):
    u = login("u@example.com")
    r = u.post("/organizations", json={"name": "!!!"})
    assert r.status_code == 201, r.text
    assert r.json()["organisation"]["slug"] == "organization"

def test_create_and_list(login):
    u = login("u@example.com")
    r = u.post("/organizations", json={"name": "  Test Org ", "description": "things"})
    assert r.status_code == 201, r.text
    body = r.json()
    assert body["message"] == "Organization created successfully"
    org = body["organisation"]
    assert org["name"] == "Test Org"
    assert org["description"] == "things"
    assert org["membershipRole"] == "owner"

    r = u.get("/organizations")
    assert r.status_code == 200
    listed = r.json()
    assert listed["count"] == 1
    assert listed["organisations"][0]["id"] == org["id"]
    assert listed["organisations"][0]["membershipRole"] == "owner"

    r = u.get(f"/organizations/{org['id']}")
    assert r.status_code == 200
    assert r.json()["role"] == "owner"

@pytest.mark.parametrize(
    "payload,message",
    [
        ({"name": "x"}, "Organization name is required and must be at least 2 characters"),
        ({"name": "   "}, "Organization name is required and must be at least 2 characters"),
        ({"name": "n" * 101}, "Organization name cannot exceed 100 characters"),
        ({"name": "ok", "description": "d" * 501}, "Description cannot exceed 500 characters"),
    ],
)
def test_create_validation(login, payload, message):
    u = login("u@example.com")
    r = u.post("/organizations", json=payload)
    assert r.status_code == 400
    assert r.json()["error"] == message

def test_requires_session(client):
    assert client.get("/organizations").status_code == 401
    assert client.post("/organizations", json={"name": "Nope"}).status_code == 401

def test_admin_view_lists_everything(login, root):
    a = login("a@example.com")
    b = login("b@example.com")
    a.post("/organizations", json={"name": "Org A"})
    b.post("/organizations", json={"name": "Org B"})

    # the admin flag is ignored for regular users
    r = a.get("/organizations", params={"admin": "true"})
    assert [o["name"] for o in r.json()["organisations"]] == ["Org A"]

    r = root.get("/organizations", params={"admin": "true"})
    assert sorted(o["name"] for o in r.json()["organisations"]) == ["Org A", "Org B"]
    assert r.json()["count"] == 2

def test_non_member_is_denied(login):
    a = login("a@example.com")
    b = login("b@example.com")
    org_id = a.post("/organizations", json={"name": "Private"}).json()["organisation"]["id"]

    assert b.get(f"/organizations/{org_id}").status_code == 403
    assert b.get(f"/organizations/{org_id}/members").status_code == 403
    assert a.get(f"/organizations/{uuid.uuid4()}").status_code == 404

def test_delete_requires_global_admin(login, root):
    u = login("u@example.com")
    org_id = u.post("/organizations", json={"name": "Mine"}).json()["organisation"]["id"]

    r = u.delete(f"/organizations/{org_id}")
    assert r.status_code == 403
    assert r.json()["error"] == "Forbidden: Admin access required"

    assert root.delete(f"/organizations/{uuid.uuid4()}").status_code == 404

def test_delete_cascades(login, root, db_session: Session):
    u = login("u@example.com")
    org_id = u.post("/organizations", json={"name": "Doomed"}).json()["organisation"]["id"]
    r = u.post(f"/organizations/{org_id}/members", json={"email": "v@example.com", "role": "member"})
    assert r.status_code == 201, r.text

    db_session.add(
        ProjectConfig(
            key="doomed-project",
            name="Doomed project",
            content_url="https://example.com",
            original_width=800,
            original_height=600,
            aspect_ratio_x=4,
            aspect_ratio_y=3,
            background_color="#000",
            organization_id=uuid.UUID(org_id),
        )
    )
    db_session.commit()

    r = root.delete(f"/organizations/{org_id}")
    assert r.status_code == 200, r.text
    assert r.json()["message"] == "Organization deleted successfully"

    db_session.expire_all()
    assert db_session.get(Organization, uuid.UUID(org_id)) is None
    left = db_session.scalar(
        select(func.count()).select_from(Membership).where(Membership.organization_id == uuid.UUID(org_id))
    )
    assert left == 0
    project = db_session.scalar(select(ProjectConfig).where(ProjectConfig.key == "doomed-project"))
    assert project.organization_id is None

def test_last_owner_scenario(login, root, db_session: Session):
    u = login("u@example.com")
    login("v@example.com")

    org_id = u.post("/organizations", json={"name": "Test Org"}).json()["organisation"]["id"]
    members = u.get(f"/organizations/{org_id}/members").json()["members"]
    assert len(members) == 1 and members[0]["role"] == "owner"
    u_membership = members[0]["id"]

    r = root.delete(f"/organizations/membership/{u_membership}")
    assert r.status_code == 409
    assert r.json()["error"] == "Cannot remove the last owner from an organization"

    r = root.post(f"/organizations/{org_id}/members", json={"email": "v@example.com", "role": "owner"})
    assert r.status_code == 201, r.text

    r = root.delete(f"/organizations/membership/{u_membership}")
    assert r.status_code == 200, r.text

    owners = db_session.scalars(
        select(User.email)
        .join(Membership, Membership.user_id == User.id)
        .where(Membership.organization_id == uuid.UUID(org_id), Membership.role == Role.owner)
    ).all()
    assert owners == ["v@example.com"]

def test_membership_removal_is_admin_only(login):
    u = login("u@example.com")
    org_id = u.post("/organizations", json={"name": "Mine"}).json()["organisation"]["id"]
    r = u.post(f"/organizations/{org_id}/members", json={"email": "v@example.com"})
    assert r.status_code == 201
    membership_id = r.json()["membership"]["id"]
    assert r.json()["membership"]["role"] == "member"

    assert u.delete(f"/organizations/membership/{membership_id}").status_code == 403

def test_change_member_role_over_http(login):
    u = login("u@example.com")
    v = login("v@example.com")
    org_id = u.post("/organizations", json={"name": "Team"}).json()["organisation"]["id"]
    membership_id = u.post(
        f"/organizations/{org_id}/members", json={"email": "v@example.com", "role": "member"}
    ).json()["membership"]["id"]

    r = u.patch(f"/organizations/{org_id}/members/{membership_id}", json={"role": "admin"})
    assert r.status_code == 200, r.text
    assert r.json()["membership"]["role"] == "admin"

    # admins may not promote themselves or touch other admins
    r = v.patch(f"/organizations/{org_id}/members/{membership_id}", json={"role": "member"})
    assert r.status_code == 403

    r = u.patch(f"/organizations/{org_id}/members/{membership_id}", json={"role": "boss"})
    assert r.status_code == 400

    other_org = u.post("/organizations", json={"name": "Elsewhere"}).json()["organisation"]["id"]
    r = u.patch(f"/organizations/{other_org}/members/{membership_id}", json={"role": "member"})
    assert r.status_code == 404

def test_duplicate_member_over_http(login):
    u = login("u@example.com")
    org_id = u.post("/organizations", json={"name": "Team"}).json()["organisation"]["id"]
    r = u.post(f"/organizations/{org_id}/members", json={"email": "u@example.com", "role": "member"})
    assert r.status_code == 409
    assert r.json()["error"] == "User is already a member of this organization"

def test_reconcile_ownerless(db_session: Session):
    owner = User(email="owner@example.com")
    admin = User(email="admin@example.com")
    member = User(email="member@example.com")
    db_session.add_all([owner, admin, member])
    db_session.flush()

    healthy = Organization(name="Healthy", slug="healthy")
    headless = Organization(name="Headless", slug="headless")
    empty = Organization(name="Empty", slug="empty")
    db_session.add_all([healthy, headless, empty])
    db_session.flush()
    db_session.add_all(
        [
            Membership(user_id=owner.id, organization_id=healthy.id, role=Role.owner),
            Membership(user_id=member.id, organization_id=headless.id, role=Role.member),
            Membership(user_id=admin.id, organization_id=headless.id, role=Role.admin),
        ]
    )
    db_session.commit()
    healthy_id, headless_id, empty_id = healthy.id, headless.id, empty.id

    assert {o.id for o in organizations.find_ownerless(db_session)} == {headless_id, empty_id}

    repairs = {r["organization_id"]: r["action"] for r in organizations.reconcile_ownerless(db_session)}
    assert repairs == {headless_id: "promoted", empty_id: "deleted"}

    db_session.expire_all()
    assert organizations.find_ownerless(db_session) == []
    assert db_session.get(Organization, empty_id) is None
    assert db_session.get(Organization, healthy_id) is not None
    promoted = db_session.scalar(
        select(User.email)
        .join(Membership, Membership.user_id == User.id)
        .where(Membership.organization_id == headless_id, Membership.role == Role.owner)
    )
    assert promoted == "admin@example.com"

def test_update_organization(login, root):
    u = login("u@example.com")
    login("v@example.com")
    org_id = u.post("/organizations", json={"name": "Old Name"}).json()["organisation"]["id"]
    taken = u.post("/organizations", json={"name": "Taken"}).json()["organisation"]["slug"]
    u.post(f"/organizations/{org_id}/members", json={"email": "v@example.com", "role": "admin"})

    r = u.patch(f"/organizations/{org_id}", json={"name": "  New Name ", "description": "fresh"})
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["message"] == "Organization updated successfully"
    assert body["organization"]["name"] == "New Name"
    assert body["organization"]["description"] == "fresh"
    assert body["organization"]["slug"] == "old-name"

    r = root.patch(f"/organizations/{org_id}", json={"slug": "renamed"})
    assert r.status_code == 200, r.text
    assert r.json()["organization"]["slug"] == "renamed"
    assert r.json()["organization"]["name"] == "New Name"

    r = u.patch(f"/organizations/{org_id}", json={"slug": taken})
    assert r.status_code == 409
    assert r.json()["error"] == "Organization slug already exists"

    assert u.patch(f"/organizations/{org_id}", json={"slug": "Not A Slug"}).status_code == 400
    assert u.patch(f"/organizations/{org_id}", json={"name": "x"}).status_code == 400
    assert u.get(f"/organizations/{org_id}").json()["organization"]["slug"] == "renamed"

def test_update_organization_access(client, login, root):
    u = login("u@example.com")
    v = login("v@example.com")
    w = login("w@example.com")
    org_id = u.post("/organizations", json={"name": "Guarded"}).json()["organisation"]["id"]
    u.post(f"/organizations/{org_id}/members", json={"email": "v@example.com", "role": "admin"})

    assert client.patch(f"/organizations/{org_id}", json={"name": "Nope"}).status_code == 401
    # only owners edit organization details
    assert v.patch(f"/organizations/{org_id}", json={"name": "Nope"}).status_code == 403
    assert w.patch(f"/organizations/{org_id}", json={"name": "Nope"}).status_code == 403
    assert root.patch(f"/organizations/{uuid.uuid4()}", json={"name": "Nope"}).status_code == 404
    assert u.get(f"/organizations/{org_id}").json()["organization"]["name"] == "Guarded"

def test_remove_member_over_http(login):
    u = login("u@example.com")
    a = login("a@example.com")
    m = login("m@example.com")
    login("n@example.com")
    org_id = u.post("/organizations", json={"name": "Crew"}).json()["organisation"]["id"]

    def invite(email, role):
        r = u.post(f"/organizations/{org_id}/members", json={"email": email, "role": role})
        assert r.status_code == 201, r.text
        return r.json()["membership"]["id"]

    a_id = invite("a@example.com", "admin")
    m_id = invite("m@example.com", "member")
    n_id = invite("n@example.com", "member")
    owner_id = next(
        x["id"] for x in u.get(f"/organizations/{org_id}/members").json()["members"] if x["role"] == "owner"
    )

    # members cannot evict anyone; admins cannot evict owners
    assert m.delete(f"/organizations/{org_id}/members/{n_id}").status_code == 403
    assert a.delete(f"/organizations/{org_id}/members/{owner_id}").status_code == 403

    r = a.delete(f"/organizations/{org_id}/members/{n_id}")
    assert r.status_code == 200, r.text
    assert r.json()["message"] == "Member removed successfully"

    assert m.delete(f"/organizations/{org_id}/members/{m_id}").status_code == 200
    assert m.get(f"/organizations/{org_id}").status_code == 403

    assert u.delete(f"/organizations/{org_id}/members/{a_id}").status_code == 200

    r = u.delete(f"/organizations/{org_id}/members/{owner_id}")
    assert r.status_code == 409
    assert r.json()["error"] == "Cannot remove the last owner from an organization"

    members = u.get(f"/organizations/{org_id}/members").json()["members"]
    assert [x["id"] for x in members] == [owner_id]

    other_org = u.post("/organizations", json={"name": "Elsewhere"}).json()["organisation"]["id"]
    assert u.delete(f"/organizations/{other_org}/members/{owner_id}").status_code == 404

def test_owners_cannot_evict_owners(login, root):
    u = login("u@example.com")
    v = login("v@example.com")
    org_id = u.post("/organizations", json={"name": "Co-owned"}).json()["organisation"]["id"]
    r = root.post(f"/organizations/{org_id}/members", json={"email": "v@example.com", "role": "owner"})
    v_id = r.json()["membership"]["id"]

    assert u.delete(f"/organizations/{org_id}/members/{v_id}").status_code == 403
    # with a co-owner in place an owner may step out
    assert v.delete(f"/organizations/{org_id}/members/{v_id}").status_code == 200

def test_organization_projects(client, login, db_session: Session):
    u = login("u@example.com")
    m = login("m@example.com")
    outsider = login("x@example.com")
    org_id = u.post("/organizations", json={"name": "Studio"}).json()["organisation"]["id"]
    u.post(f"/organizations/{org_id}/members", json={"email": "m@example.com", "role": "member"})

    for key, organization_id in [("beta", org_id), ("alpha", org_id), ("loose", None)]:
        db_session.add(
            ProjectConfig(
                key=key,
                name=key.title(),
                content_url="https://example.com",
                original_width=800,
                original_height=600,
                aspect_ratio_x=4,
                aspect_ratio_y=3,
                background_color="#000",
                organization_id=uuid.UUID(organization_id) if organization_id else None,
            )
        )
    db_session.commit()

    r = m.get(f"/organizations/{org_id}/projects")
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["count"] == 2
    assert [p["id"] for p in body["projects"]] == ["alpha", "beta"]
    assert body["role"] == "member"
    assert body["organization"]["id"] == org_id

    assert client.get(f"/organizations/{org_id}/projects").status_code == 401
    assert outsider.get(f"/organizations/{org_id}/projects").status_code == 403
    assert u.get(f"/organizations/{uuid.uuid4()}/projects").status_code == 404
