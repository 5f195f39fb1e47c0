from fastapi import FastAPI
from fastapi.testclient import TestClient

from app.core.database import get_db
from app.core.errors import register_exception_handlers
from app.deps import require_director
from app.models.audit_log import AuditLog
from app.models.staff import STAFF_ROLES, Staff
from app.routers.staff import router as staff_router
from tests.fixtures_data import DIRECTOR, STAFF_PAYLOAD


def _build_client(db) -> TestClient:
    app = FastAPI()
    register_exception_handlers(app)
    app.include_router(staff_router)
    app.dependency_overrides[get_db] = lambda: db
    app.dependency_overrides[require_director] = lambda: DIRECTOR
    return TestClient(app)


def _seed_member(db, **overrides) -> Staff:
    values = {"name": "Sam", "role": "waiter", "status": "active"}
    values.update(overrides)
    member = Staff(**values)
    db.add(member)
    db.commit()
    db.refresh(member)
    return member


def test_meta_lists_roles_and_statuses(db_session):
    client = _build_client(db_session)

    body = client.get("/api/staff/meta").json()

    assert [role["key"] for role in body["roles"]] == list(STAFF_ROLES)
    assert {"key": "on-leave", "label": "On Leave"} in body["statuses"]


def test_listing_groups_members_by_role(db_session):
    _seed_member(db_session, name="Zoe", role="chef")
    _seed_member(db_session, name="Adam", role="chef")
    _seed_member(db_session, name="Pat", role="sommelier")
    client = _build_client(db_session)

    grouped = client.get("/api/staff").json()

    assert [member["name"] for member in grouped["chef"]] == ["Adam", "Zoe"]
    assert grouped["waiter"] == []
    assert [member["role"] for member in grouped["other"]] == ["sommelier"]


def test_listing_omits_empty_other_bucket(db_session):
    _seed_member(db_session)
    client = _build_client(db_session)

    grouped = client.get("/api/staff").json()

    assert "other" not in grouped
    assert len(grouped["waiter"]) == 1


def test_create_staff_member(db_session):
    client = _build_client(db_session)

    response = client.post("/api/staff", json=STAFF_PAYLOAD)

    assert response.status_code == 201
    body = response.json()
    assert body["name"] == "Chef Ana"
    assert body["role"] == "chef"
    assert body["image"] is None


def test_create_uses_custom_role_when_other_is_chosen(db_session):
    client = _build_client(db_session)

    response = client.post(
        "/api/staff",
        json={**STAFF_PAYLOAD, "role": "other", "customRole": "  Sommelier "},
    )

    assert response.status_code == 201
    assert response.json()["role"] == "Sommelier"


def test_create_requires_name_role_and_status(db_session):
    client = _build_client(db_session)

    response = client.post("/api/staff", json={"name": "Ana", "role": "chef"})

    assert response.status_code == 400
    assert response.json() == {"detail": "Missing required fields: name, role, or status"}
    assert db_session.query(Staff).count() == 0


def test_create_rejects_unknown_status(db_session):
    client = _build_client(db_session)

    response = client.post("/api/staff", json={**STAFF_PAYLOAD, "status": "retired"})

    assert response.status_code == 400
    assert response.json()["detail"].startswith("Invalid status")


def test_update_changes_only_given_fields(db_session):
    member = _seed_member(db_session, phone="555-0000")
    client = _build_client(db_session)

    response = client.put(f"/api/staff/{member.id}", json={"status": "on-leave", "unknown": "ignored"})

    assert response.status_code == 200
    assert response.json()["status"] == "on-leave"
    assert response.json()["phone"] == "555-0000"


def test_update_rejects_blank_name(db_session):
    member = _seed_member(db_session)
    client = _build_client(db_session)

    response = client.put(f"/api/staff/{member.id}", json={"name": "   "})

    assert response.status_code == 400
    db_session.refresh(member)
    assert member.name == "Sam"


def test_update_unknown_member_is_404(db_session):
    client = _build_client(db_session)

    response = client.put("/api/staff/77", json={"status": "inactive"})

    assert response.status_code == 404
    assert response.json() == {"detail": "Staff not found"}


def test_delete_member(db_session):
    member = _seed_member(db_session)
    client = _build_client(db_session)

    response = client.delete(f"/api/staff/{member.id}")

    assert response.status_code == 200
    assert response.json()["id"] == member.id
    assert client.get(f"/api/staff/{member.id}").status_code == 404
    assert db_session.query(AuditLog).one().action == "staff_deleted"
