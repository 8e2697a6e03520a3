"""
HTTP layer: routing, multipart parsing, error rendering, Bearer sessions.
Run: pytest tests/test_api_routes.py -v
"""

import pytest
from fastapi.testclient import TestClient

from models import Role
from routes.auth import get_current_user
from server import app
from services.file_storage import get_file_storage
from services.store import get_store
from tests.helpers import HOSPITAL_B, add_user


@pytest.fixture
def client(store, storage):
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_file_storage] = lambda: storage
    yield TestClient(app)
    app.dependency_overrides.clear()


def login_as(actor):
    app.dependency_overrides[get_current_user] = lambda: actor


LEAD_FORM = {"name": "Ravi Kumar", "phone": "9876543210", "specialisation": "Urology"}


class TestLeadEndpoints:
    def test_create_with_documents(self, client, storage, partner):
        login_as(partner)
        r = client.post(
            "/api/leads",
            data={**LEAD_FORM, "status": "CLOSED"},
            files=[("files", ("scan.pdf", b"%PDF", "application/pdf"))],
        )
        assert r.status_code == 201, r.text
        lead = r.json()
        assert lead["status"] == "NEW"
        assert lead["partner_id"] == partner.id
        assert len(lead["documents"]) == 1
        print(f"✅ created lead {lead['id']}")

    def test_duplicate_rendered_with_audit_row(self, client, admin):
        login_as(admin)
        assert client.post("/api/leads", data=LEAD_FORM).status_code == 201

        r = client.post("/api/leads", data=LEAD_FORM)
        assert r.status_code == 400
        body = r.json()
        assert body["kind"] == "duplicate_phone"
        assert body["detail"] == "Phone no already exists in the system"
        assert body["lead"]["status"] == "DUPLICATE"
        assert body["lead"]["points"] == 0

    def test_blank_override_is_not_an_override(self, client, admin):
        login_as(admin)
        r = client.post("/api/leads", data={**LEAD_FORM, "points_override": ""})
        assert r.status_code == 201

    def test_override_by_admin_forbidden(self, client, admin):
        login_as(admin)
        r = client.post("/api/leads", data={**LEAD_FORM, "points_override": "500"})
        assert r.status_code == 403
        assert r.json()["kind"] == "authorization_error"

    def test_non_numeric_override(self, client, superadmin):
        login_as(superadmin)
        r = client.post("/api/leads", data={**LEAD_FORM, "hospital_id": "hospital-a", "points_override": "lots"})
        assert r.status_code == 400
        assert r.json()["kind"] == "validation_error"

    def test_update_and_delete(self, client, store, admin, superadmin):
        login_as(admin)
        lead = client.post("/api/leads", data=LEAD_FORM).json()

        r = client.put(f"/api/leads/{lead['id']}", data={"status": "IPD_DONE"})
        assert r.status_code == 200
        assert r.json()["points"] == 3500

        login_as(superadmin)
        r = client.put(f"/api/leads/{lead['id']}", data={"points_override": "9999"})
        assert r.json()["points"] == 9999

        r = client.delete(f"/api/leads/{lead['id']}")
        assert r.status_code == 200
        assert store.leads.rows == []

        assert client.get(f"/api/leads/{lead['id']}").status_code == 404

    def test_static_paths_not_taken_as_ids(self, client, admin):
        login_as(admin)
        client.post("/api/leads", data=LEAD_FORM)

        r = client.get("/api/leads/analytics")
        assert r.status_code == 200
        assert r.json()["statusCounts"]["NEW"] == 1

        assert client.get("/api/leads/duplicates").json() == []

        r = client.get("/api/leads/export")
        assert r.status_code == 200
        assert r.headers["content-type"].startswith("text/csv")
        assert "leads.csv" in r.headers["content-disposition"]
        assert r.text.splitlines()[0].startswith("name,phone,status,points")

    def test_list_with_filters(self, client, admin):
        login_as(admin)
        client.post("/api/leads", data=LEAD_FORM)
        client.post("/api/leads", data={**LEAD_FORM, "phone": "9000000001", "status": "OPD_DONE"})

        r = client.get("/api/leads", params={"status": "OPD_DONE"})
        assert [l["phone"] for l in r.json()] == ["9000000001"]
        assert len(client.get("/api/leads", params={"status": ""}).json()) == 2

    def test_bulk_upload(self, client, admin):
        login_as(admin)
        r = client.post(
            "/api/leads/bulk-upload",
            files={"file": ("leads.csv", b"name,phone\nAsha,9000000001\nBad,1\n", "text/csv")},
        )
        assert r.status_code == 200
        assert r.json()["created"] == 1
        assert r.json()["skipped"] == 1

    def test_reassign_and_remarks(self, client, admin, partner):
        login_as(admin)
        lead = client.post("/api/leads", data=LEAD_FORM).json()

        r = client.put(f"/api/leads/{lead['id']}/reassign", json={"partner_id": partner.id})
        assert r.status_code == 200
        assert r.json()["partner_id"] == partner.id

        assert client.put(f"/api/leads/{lead['id']}/reassign", json={}).status_code == 400

        r = client.post(f"/api/leads/{lead['id']}/remarks", data={"message": "Called"})
        assert r.status_code == 201
        thread = client.get(f"/api/leads/{lead['id']}/remarks").json()
        assert [m["message"] for m in thread] == ["Called"]

    def test_payload_carries_related_names(self, client, admin, partner, sales_people):
        login_as(admin)
        client.post("/api/leads", data={**LEAD_FORM, "partner_id": partner.id})

        lead = client.get("/api/leads").json()[0]
        assert lead["partner"]["first_name"] == "Prakash"
        assert lead["sales_person"]["id"] == sales_people[0].id
        assert lead["created_by"]["id"] == admin.id
        assert lead["hospital"]["name"] == "City Hospital"

        r = client.put(f"/api/leads/{lead['id']}/reassign", json={"sales_person_id": sales_people[1].id})
        assert r.json()["sales_person"]["first_name"] == "Sales2"

    def test_sales_person_cannot_delete(self, client, admin, sales_people):
        login_as(admin)
        lead = client.post("/api/leads", data=LEAD_FORM).json()

        login_as(sales_people[0])
        assert client.delete(f"/api/leads/{lead['id']}").status_code == 403


class TestPointsApprovalEndpoints:
    def test_request_then_approve(self, client, admin, superadmin, partner):
        login_as(admin)
        r = client.post(
            "/api/points-approval/partner-points",
            json={"partner_id": partner.id, "status": "NEW", "points": 150},
        )
        assert r.status_code == 200
        entry = r.json()
        assert entry["approval_status"] == "PENDING"

        login_as(superadmin)
        pending = client.get("/api/points-approval/pending").json()
        assert [p["id"] for p in pending] == [entry["id"]]

        r = client.post(f"/api/points-approval/{entry['id']}/approve")
        assert r.json()["approval_status"] == "APPROVED"

        rates = client.get("/api/points-approval/partner-points", params={"partner_id": partner.id}).json()
        assert rates[0]["points"] == 150
        assert client.get(f"/api/points-approval/partner-points/{entry['id']}").status_code == 200

    def test_string_points_rejected(self, client, superadmin, partner):
        login_as(superadmin)
        r = client.post(
            "/api/points-approval/partner-points",
            json={"partner_id": partner.id, "status": "NEW", "points": "150"},
        )
        assert r.status_code == 422

    def test_unknown_entry(self, client, superadmin):
        login_as(superadmin)
        assert client.post("/api/points-approval/ghost/reject").status_code == 404


class TestAccountEndpoints:
    def test_deactivate_user_and_hospital(self, client, store, superadmin, partner):
        login_as(superadmin)
        r = client.delete(f"/api/users/{partner.id}")
        assert r.status_code == 200
        assert r.json()["is_active"] is False

        r = client.delete(f"/api/hospitals/{HOSPITAL_B}")
        assert r.status_code == 200
        assert store.hospitals.rows[1]["is_active"] is False

    def test_hospital_deactivation_needs_superadmin(self, client, admin):
        login_as(admin)
        assert client.delete(f"/api/hospitals/{HOSPITAL_B}").status_code == 403

    def test_admin_reassignment(self, client, store, superadmin):
        source = add_user(store, Role.ADMIN, "hospital-a")
        target = add_user(store, Role.ADMIN, HOSPITAL_B)
        login_as(superadmin)

        r = client.post(f"/api/users/{source.id}/reassign", json={"target_admin_id": target.id})
        assert r.status_code == 200
        assert r.json()["admins_deleted"] == 1


class TestBearerSessions:
    def _session(self, store, user_id, expires_at="2999-01-01T00:00:00+00:00", token="tok-1"):
        store.sessions.rows.append({"token": token, "user_id": user_id, "expires_at": expires_at})
        return {"Authorization": f"Bearer {token}"}

    def test_valid_session(self, client, store, admin):
        headers = self._session(store, admin.id)
        assert client.get("/api/leads", headers=headers).status_code == 200

    def test_missing_token(self, client):
        assert client.get("/api/leads").status_code == 401

    def test_expired_session(self, client, store, admin):
        headers = self._session(store, admin.id, expires_at="2000-01-01T00:00:00+00:00")
        assert client.get("/api/leads", headers=headers).status_code == 401

    def test_deactivated_user(self, client, store):
        gone = add_user(store, Role.ADMIN, is_active=False)
        headers = self._session(store, gone.id)
        assert client.get("/api/leads", headers=headers).status_code == 403
