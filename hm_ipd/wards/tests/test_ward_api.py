# hm_ipd/wards/tests/test_ward_api.py
import pytest

from hm_ipd.admissions.services import AdmissionService
from hm_ipd.audit.models import AuditEvent
from hm_ipd.beds.models import Bed
from hm_ipd.beds.services import BedService
from hm_ipd.tests.helpers import data, scoped
from hm_ipd.wards.services import WardService

pytestmark = pytest.mark.django_db


def _create_ward(api_client, tenant_id, name="ICU East", capacity=2, **extra):
    return api_client.post(
        "/api/v1/wards/",
        {"name": name, "capacity": capacity, **extra},
        format="json",
        **scoped(tenant_id),
    )


def test_ward_create_and_retrieve(api_client, tenant_id):
    r = _create_ward(api_client, tenant_id, ward_type="ICU", floor="2", location="East wing")
    assert r.status_code == 201, r.data
    ward = data(r)
    assert ward["name"] == "ICU East"
    assert ward["capacity"] == 2
    assert ward["ward_type"] == "ICU"
    assert ward["is_active"] is True

    g = api_client.get(f"/api/v1/wards/{ward['id']}/", **scoped(tenant_id))
    assert g.status_code == 200, g.data
    assert data(g)["id"] == ward["id"]

    assert AuditEvent.objects.filter(event_code="ward.created", entity_id=ward["id"]).exists()


@pytest.mark.parametrize("capacity", [0, -3])
def test_ward_create_rejects_non_positive_capacity(api_client, tenant_id, capacity):
    r = _create_ward(api_client, tenant_id, capacity=capacity)
    assert r.status_code == 400, r.data
    assert r.data["success"] is False
    assert r.data["code"] == "validation_error"


def test_ward_create_duplicate_name_is_conflict(api_client, tenant_id):
    assert _create_ward(api_client, tenant_id).status_code == 201
    r = _create_ward(api_client, tenant_id)
    assert r.status_code == 409, r.data
    assert r.data["code"] == "conflict"


def test_same_ward_name_allowed_in_another_tenant(api_client, tenant_id, other_tenant_id):
    assert _create_ward(api_client, tenant_id).status_code == 201
    assert _create_ward(api_client, other_tenant_id).status_code == 201


def test_ward_of_other_tenant_is_not_found(api_client, ward, other_tenant_id):
    r = api_client.get(f"/api/v1/wards/{ward.id}/", **scoped(other_tenant_id))
    assert r.status_code == 404, r.data
    assert r.data["code"] == "not_found"


def test_ward_list_active_only(api_client, tenant_id, ward):
    r = _create_ward(api_client, tenant_id, name="Closed Ward")
    closed_id = data(r)["id"]
    d = api_client.post(f"/api/v1/wards/{closed_id}/deactivate/", {}, format="json", **scoped(tenant_id))
    assert d.status_code == 200, d.data

    all_wards = data(api_client.get("/api/v1/wards/", **scoped(tenant_id)))
    assert {w["name"] for w in all_wards} == {"General Ward A", "Closed Ward"}

    active = data(api_client.get("/api/v1/wards/?active_only=true", **scoped(tenant_id)))
    assert [w["name"] for w in active] == ["General Ward A"]


def test_capacity_cannot_drop_below_bed_count(api_client, tenant_id, ward, bed, bed2):
    r = api_client.patch(f"/api/v1/wards/{ward.id}/", {"capacity": 1}, format="json", **scoped(tenant_id))
    assert r.status_code == 409, r.data

    ward.refresh_from_db()
    assert ward.capacity == 4

    ok = api_client.patch(f"/api/v1/wards/{ward.id}/", {"capacity": 2}, format="json", **scoped(tenant_id))
    assert ok.status_code == 200, ok.data
    assert data(ok)["capacity"] == 2


def test_patch_capacity_zero_is_validation_error(api_client, tenant_id, ward):
    r = api_client.patch(f"/api/v1/wards/{ward.id}/", {"capacity": 0}, format="json", **scoped(tenant_id))
    assert r.status_code == 400, r.data


def test_occupancy_counts_occupied_and_available(api_client, tenant_id, ward, bed, bed2, patient_id, doctor_id):
    AdmissionService.admit_patient(
        tenant_id=tenant_id,
        patient_id=patient_id,
        bed_id=bed.id,
        doctor_id=doctor_id,
        reason="Observation",
    )

    r = api_client.get(f"/api/v1/wards/{ward.id}/occupancy/", **scoped(tenant_id))
    assert r.status_code == 200, r.data
    occ = data(r)
    assert occ["capacity"] == 4
    assert occ["occupied_count"] == 1
    assert occ["available_count"] == 1


def test_deactivate_blocked_by_occupied_bed(api_client, tenant_id, ward, bed, patient_id, doctor_id):
    AdmissionService.admit_patient(
        tenant_id=tenant_id,
        patient_id=patient_id,
        bed_id=bed.id,
        doctor_id=doctor_id,
        reason="Observation",
    )

    r = api_client.post(f"/api/v1/wards/{ward.id}/deactivate/", {}, format="json", **scoped(tenant_id))
    assert r.status_code == 409, r.data

    ward.refresh_from_db()
    assert ward.is_active is True


def test_deactivate_is_idempotent_and_blocks_new_beds(api_client, tenant_id, ward, bed):
    for _ in range(2):
        r = api_client.post(
            f"/api/v1/wards/{ward.id}/deactivate/",
            {"reason": "Renovation"},
            format="json",
            **scoped(tenant_id),
        )
        assert r.status_code == 200, r.data
        assert data(r)["is_active"] is False
        assert data(r)["deactivation_reason"] == "Renovation"

    assert AuditEvent.objects.filter(event_code="ward.deactivated", entity_id=ward.id).count() == 1

    b = api_client.post(
        "/api/v1/beds/",
        {"ward_id": str(ward.id), "bed_number": "A-9"},
        format="json",
        **scoped(tenant_id),
    )
    assert b.status_code == 409, b.data


def test_patch_is_active_reactivates(api_client, tenant_id, ward):
    api_client.post(f"/api/v1/wards/{ward.id}/deactivate/", {}, format="json", **scoped(tenant_id))

    r = api_client.patch(f"/api/v1/wards/{ward.id}/", {"is_active": True}, format="json", **scoped(tenant_id))
    assert r.status_code == 200, r.data
    assert data(r)["is_active"] is True
    assert data(r)["deactivated_at"] is None

    BedService.create_bed(tenant_id=tenant_id, ward_id=ward.id, bed_number="A-5")
    assert Bed.objects.filter(ward=ward).count() == 1


def test_ward_beds_lists_only_that_ward(api_client, tenant_id, ward, bed, bed2):
    other = WardService.create(tenant_id=tenant_id, name="Ward B", capacity=1)
    BedService.create_bed(tenant_id=tenant_id, ward_id=other.id, bed_number="B-1")

    r = api_client.get(f"/api/v1/wards/{ward.id}/beds/", **scoped(tenant_id))
    assert r.status_code == 200, r.data
    assert [b["bed_number"] for b in data(r)] == ["A-1", "A-2"]
