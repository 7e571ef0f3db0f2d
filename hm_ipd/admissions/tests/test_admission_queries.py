# hm_ipd/admissions/tests/test_admission_queries.py
import uuid

import pytest

from hm_ipd.admissions.services import AdmissionService
from hm_ipd.beds.models import BedStatus
from hm_ipd.beds.services import BedService
from hm_ipd.common.api.exceptions import ConflictError
from hm_ipd.tests.helpers import data, scoped
from hm_ipd.wards.services import WardService

pytestmark = pytest.mark.django_db


@pytest.fixture
def two_wards(tenant_id):
    a = WardService.create(tenant_id=tenant_id, name="Ward North", capacity=3)
    b = WardService.create(tenant_id=tenant_id, name="Ward South", capacity=3)
    beds_a = [BedService.create_bed(tenant_id=tenant_id, ward_id=a.id, bed_number=f"N-{i}") for i in range(1, 4)]
    beds_b = [BedService.create_bed(tenant_id=tenant_id, ward_id=b.id, bed_number=f"S-{i}") for i in range(1, 4)]
    return a, b, beds_a, beds_b


def _admit(tenant_id, bed, doctor_id, patient_id=None):
    return AdmissionService.admit_patient(
        tenant_id=tenant_id,
        patient_id=patient_id or uuid.uuid4(),
        bed_id=bed.id,
        doctor_id=doctor_id,
        reason="Routine",
    )


def test_list_is_paginated_and_filterable(api_client, tenant_id, two_wards, doctor_id):
    ward_a, ward_b, beds_a, beds_b = two_wards
    other_doctor = uuid.uuid4()

    a1 = _admit(tenant_id, beds_a[0], doctor_id)
    a2 = _admit(tenant_id, beds_a[1], other_doctor)
    b1 = _admit(tenant_id, beds_b[0], doctor_id)
    AdmissionService.discharge_patient(tenant_id=tenant_id, admission_id=a2.id)

    r = api_client.get("/api/v1/admissions/", **scoped(tenant_id))
    assert r.status_code == 200, r.data
    page = data(r)
    assert page["count"] == 3
    assert {"count", "next", "previous", "results"} <= set(page.keys())

    admitted = data(api_client.get("/api/v1/admissions/?status=ADMITTED", **scoped(tenant_id)))
    assert {row["id"] for row in admitted["results"]} == {str(a1.id), str(b1.id)}

    by_doctor = data(api_client.get(f"/api/v1/admissions/?doctor_id={other_doctor}", **scoped(tenant_id)))
    assert [row["id"] for row in by_doctor["results"]] == [str(a2.id)]

    # Discharged stays still match the ward they were admitted to.
    in_ward_a = data(api_client.get(f"/api/v1/admissions/?ward_id={ward_a.id}", **scoped(tenant_id)))
    assert {row["id"] for row in in_ward_a["results"]} == {str(a1.id), str(a2.id)}

    by_patient = data(api_client.get(f"/api/v1/admissions/?patient_id={b1.patient_id}", **scoped(tenant_id)))
    assert [row["id"] for row in by_patient["results"]] == [str(b1.id)]

    by_bed = data(api_client.get(f"/api/v1/admissions/?bed_id={beds_b[0].id}", **scoped(tenant_id)))
    assert [row["id"] for row in by_bed["results"]] == [str(b1.id)]

    small = data(api_client.get("/api/v1/admissions/?page_size=2", **scoped(tenant_id)))
    assert len(small["results"]) == 2
    assert small["next"] is not None


def test_list_rejects_bad_filters(api_client, tenant_id):
    r = api_client.get("/api/v1/admissions/?status=SLEEPING", **scoped(tenant_id))
    assert r.status_code == 400, r.data
    assert r.data["code"] == "validation_error"

    r2 = api_client.get("/api/v1/admissions/?admitted_from=yesterday", **scoped(tenant_id))
    assert r2.status_code == 400, r2.data


def test_list_is_tenant_scoped(api_client, tenant_id, other_tenant_id, bed, doctor_id):
    _admit(tenant_id, bed, doctor_id)

    page = data(api_client.get("/api/v1/admissions/", **scoped(other_tenant_id)))
    assert page["count"] == 0


def test_summary_endpoint_collects_history(api_client, tenant_id, bed, bed2, doctor_id):
    adm = _admit(tenant_id, bed, doctor_id)
    AdmissionService.add_treatment_note(tenant_id=tenant_id, admission_id=adm.id, doctor_id=doctor_id, notes="Day 1")
    AdmissionService.transfer_patient(tenant_id=tenant_id, admission_id=adm.id, new_bed_id=bed2.id, reason="Upgrade")

    r = api_client.get(f"/api/v1/admissions/{adm.id}/summary/", **scoped(tenant_id))
    assert r.status_code == 200, r.data
    body = data(r)
    assert body["admission"]["id"] == str(adm.id)
    assert [n["notes"] for n in body["treatment_notes"]] == ["Day 1"]
    assert body["transfers"][0]["to_bed_number"] == bed2.bed_number
    assert body["discharge_summary"] is None


def test_racing_admission_for_same_patient_leaves_no_claimed_bed(monkeypatch, tenant_id, bed, bed2, doctor_id):
    # Simulate the second request passing the pre-check before the first commits;
    # the partial unique constraint must reject it and the bed claim must roll back.
    monkeypatch.setattr("hm_ipd.admissions.services.active_admission_for_patient", lambda **kwargs: None)

    patient_id = uuid.uuid4()
    _admit(tenant_id, bed, doctor_id, patient_id=patient_id)

    with pytest.raises(ConflictError) as exc:
        _admit(tenant_id, bed2, doctor_id, patient_id=patient_id)
    assert str(exc.value.detail) == "Patient already admitted."

    bed2.refresh_from_db()
    assert bed2.status == BedStatus.AVAILABLE
    assert bed2.current_admission_id is None


def test_ward_filter_follows_transfers_across_wards(api_client, tenant_id, two_wards, doctor_id):
    ward_a, ward_b, beds_a, beds_b = two_wards
    moved = _admit(tenant_id, beds_a[0], doctor_id)
    AdmissionService.transfer_patient(
        tenant_id=tenant_id, admission_id=moved.id, new_bed_id=beds_b[0].id, reason="Step-down care"
    )

    def ids_in(ward, extra=""):
        page = data(api_client.get(f"/api/v1/admissions/?ward_id={ward.id}{extra}", **scoped(tenant_id)))
        return [row["id"] for row in page["results"]]

    assert ids_in(ward_a, "&status=ADMITTED") == []
    assert ids_in(ward_b, "&status=ADMITTED") == [str(moved.id)]

    AdmissionService.discharge_patient(tenant_id=tenant_id, admission_id=moved.id)

    # Discharged from ward B, so it stays listed there.
    assert ids_in(ward_a) == []
    assert ids_in(ward_b) == [str(moved.id)]
