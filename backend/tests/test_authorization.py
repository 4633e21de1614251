"""
Authorization tests.

Verifies:
- Every inventory route returns 401 without a token
- Non-admin roles get 403 on every write but may list
- Denied writes leave the store untouched
"""

import pytest

from tests.conftest import record_count


WRITE_ROUTES = [
    ("POST", "/inventory", {"item_description": "x", "qty": 1}),
    ("PUT", "/inventory/{id}", {"qty": 99}),
    ("DELETE", "/inventory/{id}", None),
    ("POST", "/inventory/{id}/duplicate", None),
    ("POST", "/inventory/{id}/refill", {"refill_status": "YES"}),
]


def _call(client, method, path, body, headers=None):
    return client.open(path, method=method, json=body, headers=headers or {})


# =============================================================================
# UNAUTHENTICATED ACCESS - 401
# =============================================================================


class TestUnauthenticatedAccess:

    @pytest.mark.parametrize("method,path,body", [("GET", "/inventory", None)] + WRITE_ROUTES)
    def test_requires_auth(self, client, method, path, body):
        resp = _call(client, method, path.format(id=1), body)
        assert resp.status_code == 401, f"{method} {path} returned {resp.status_code}"
        assert "error" in resp.get_json()


# =============================================================================
# NON-ADMIN DENIED WRITES - 403
# =============================================================================


class TestNonAdminDenied:

    @pytest.mark.parametrize("method,path,body", WRITE_ROUTES)
    def test_user_role_forbidden(self, client, sample_record, user_headers, method, path, body):
        before = record_count()
        resp = _call(client, method, path.format(id=sample_record["id"]), body, user_headers)
        assert resp.status_code == 403
        assert resp.get_json() == {"error": "Permission denied"}
        assert record_count() == before

    @pytest.mark.parametrize("method,path,body", WRITE_ROUTES)
    def test_counter_role_forbidden(self, client, sample_record, counter_headers, method, path, body):
        resp = _call(client, method, path.format(id=sample_record["id"]), body, counter_headers)
        assert resp.status_code == 403

    def test_forbidden_update_leaves_record_unchanged(self, client, sample_record, user_headers, admin_headers):
        client.put(f"/inventory/{sample_record['id']}", json={"qty": 99}, headers=user_headers)

        listed = client.get("/inventory", headers=admin_headers).get_json()["data"]
        assert listed[0]["qty"] == 10
        assert listed[0]["updated_at"] == sample_record["updated_at"]


# =============================================================================
# READ ACCESS FOR EVERY ROLE - 200
# =============================================================================


class TestReadAccess:

    def test_user_can_list(self, client, sample_record, user_headers):
        resp = client.get("/inventory", headers=user_headers)
        assert resp.status_code == 200
        assert resp.get_json()["pagination"]["total"] == 1

    def test_counter_can_list(self, client, sample_record, counter_headers):
        resp = client.get("/inventory", headers=counter_headers)
        assert resp.status_code == 200
