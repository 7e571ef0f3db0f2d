# hm_ipd/tests/test_error_envelope.py
import json
import uuid

import pytest
from django.contrib.auth.models import User
from django.test import RequestFactory
from rest_framework.test import APIClient

from hm_ipd.common.middleware import TenantScopeMiddleware
from hm_ipd.tests.helpers import scoped


@pytest.mark.django_db
def test_middleware_missing_scope_returns_error_envelope():
    rf = RequestFactory()
    req = rf.get("/api/v1/wards/")
    req.user = User.objects.create_user(username="u1", password="pass123")

    mw = TenantScopeMiddleware(get_response=lambda r: None)
    resp = mw.process_request(req)

    assert resp is not None
    assert resp.status_code == 400

    body = json.loads(resp.content.decode("utf-8"))
    assert body["success"] is False
    assert body["code"] == "validation_error"
    assert "Missing scope header" in body["message"]
    assert body["request_id"]


@pytest.mark.django_db
def test_middleware_invalid_scope_returns_error_envelope():
    rf = RequestFactory()
    req = rf.get("/api/v1/beds/", HTTP_X_TENANT_ID="not-a-uuid")

    mw = TenantScopeMiddleware(get_response=lambda r: None)
    resp = mw.process_request(req)

    assert resp.status_code == 400
    body = json.loads(resp.content.decode("utf-8"))
    assert body["code"] == "validation_error"
    assert "Invalid scope header" in body["message"]


def test_middleware_attaches_tenant_and_skips_docs():
    rf = RequestFactory()
    tenant_id = uuid.uuid4()
    mw = TenantScopeMiddleware(get_response=lambda r: None)

    req = rf.get("/api/v1/admissions/", **scoped(tenant_id))
    assert mw.process_request(req) is None
    assert req.tenant_id == tenant_id

    docs = rf.get("/api/docs/")
    assert mw.process_request(docs) is None
    assert docs.tenant_id is None


@pytest.mark.django_db
def test_request_without_tenant_header_is_rejected(api_client):
    r = api_client.get("/api/v1/admissions/")
    assert r.status_code == 400
    body = r.json()
    assert body["success"] is False
    assert body["code"] == "validation_error"


@pytest.mark.django_db
def test_unauthenticated_request_gets_401_envelope(tenant_id):
    r = APIClient().get("/api/v1/wards/", **scoped(tenant_id))
    assert r.status_code == 401, r.data
    assert r.data["success"] is False
    assert r.data["code"] == "not_authenticated"
    assert r.data["request_id"]


@pytest.mark.django_db
def test_not_found_and_conflict_use_envelope(api_client, tenant_id, ward):
    missing = api_client.get(f"/api/v1/wards/{uuid.uuid4()}/", **scoped(tenant_id))
    assert missing.status_code == 404
    assert missing.data["code"] == "not_found"
    assert missing.data["message"] == "Ward not found in this tenant."

    garbage = api_client.get("/api/v1/wards/not-a-uuid/", **scoped(tenant_id))
    assert garbage.status_code == 404

    dup = api_client.post(
        "/api/v1/wards/",
        {"name": ward.name, "capacity": 2},
        format="json",
        **scoped(tenant_id),
    )
    assert dup.status_code == 409
    assert dup.data["code"] == "conflict"
    assert dup.data["details"] is None


@pytest.mark.django_db
def test_validation_error_carries_field_details(api_client, tenant_id):
    r = api_client.post("/api/v1/wards/", {"capacity": 3}, format="json", **scoped(tenant_id))
    assert r.status_code == 400
    assert r.data["message"] == "Request failed."
    assert "name" in r.data["details"]


@pytest.mark.django_db
def test_unversioned_alias_serves_the_same_api(api_client, tenant_id, ward):
    r = api_client.get(f"/api/wards/{ward.id}/", **scoped(tenant_id))
    assert r.status_code == 200, r.data
    assert r.data["data"]["id"] == str(ward.id)


def test_schema_hook_drops_unversioned_alias_routes():
    from hm_ipd.common.openapi import preprocess_exclude_unversioned_api

    endpoints = [
        ("/api/v1/wards/", r"^api/v1/wards/$", "GET", None),
        ("/api/wards/", r"^api/wards/$", "GET", None),
        ("/admin/", r"^admin/$", "GET", None),
    ]
    kept = [path for path, _, _, _ in preprocess_exclude_unversioned_api(endpoints)]
    assert kept == ["/api/v1/wards/", "/admin/"]


@pytest.mark.django_db
def test_only_x_tenant_id_carries_scope():
    rf = RequestFactory()
    req = rf.get("/api/v1/wards/", HTTP_X_HM_TENANT_ID=str(uuid.uuid4()))

    resp = TenantScopeMiddleware(get_response=lambda r: None).process_request(req)

    assert resp is not None
    assert resp.status_code == 400
    assert "Missing scope header" in json.loads(resp.content.decode("utf-8"))["message"]
