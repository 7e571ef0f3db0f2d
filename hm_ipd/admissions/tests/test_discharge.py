# hm_ipd/admissions/tests/test_discharge.py
import logging

import pytest
from django.core.exceptions import ValidationError as DjangoValidationError

from hm_ipd.admissions.models import AdmissionStatus, DischargeSummary, TreatmentNote
from hm_ipd.admissions.services import ADMISSION_DISCHARGED, AdmissionService, DischargeSummaryInput
from hm_ipd.audit.models import AuditEvent
from hm_ipd.beds.models import BedStatus
from hm_ipd.common.events import subscribe, unsubscribe
from hm_ipd.tests.helpers import data, scoped

pytestmark = pytest.mark.django_db


@pytest.fixture
def admission(tenant_id, bed, patient_id, doctor_id):
    return AdmissionService.admit_patient(
        tenant_id=tenant_id,
        patient_id=patient_id,
        bed_id=bed.id,
        doctor_id=doctor_id,
        reason="Chest pain",
    )


@pytest.fixture
def received():
    events = []

    def handler(payload):
        events.append(payload)

    subscribe(ADMISSION_DISCHARGED)(handler)
    yield events
    unsubscribe(ADMISSION_DISCHARGED, handler)


@pytest.fixture
def failing_subscriber():
    def handler(payload):
        raise RuntimeError("billing is down")

    subscribe(ADMISSION_DISCHARGED)(handler)
    yield handler
    unsubscribe(ADMISSION_DISCHARGED, handler)


def test_discharge_event_is_published_after_commit(
    tenant_id, admission, bed, received, django_capture_on_commit_callbacks
):
    with django_capture_on_commit_callbacks(execute=False) as callbacks:
        AdmissionService.discharge_patient(tenant_id=tenant_id, admission_id=admission.id)

    assert received == []
    assert len(callbacks) == 1

    callbacks[0]()
    assert len(received) == 1
    assert received[0]["admission_id"] == str(admission.id)
    assert received[0]["bed_id"] == str(bed.id)
    assert received[0]["patient_id"] == str(admission.patient_id)


def test_failing_subscriber_does_not_undo_discharge(
    tenant_id, admission, bed, failing_subscriber, received, django_capture_on_commit_callbacks, caplog
):
    with caplog.at_level(logging.ERROR, logger="hm_ipd.common.events"):
        with django_capture_on_commit_callbacks(execute=True):
            result = AdmissionService.discharge_patient(tenant_id=tenant_id, admission_id=admission.id)

    assert result.status == AdmissionStatus.DISCHARGED
    admission.refresh_from_db()
    bed.refresh_from_db()
    assert admission.status == AdmissionStatus.DISCHARGED
    assert bed.status == BedStatus.AVAILABLE

    # The healthy subscriber still ran.
    assert len(received) == 1
    assert any("Event subscriber failed" in rec.getMessage() for rec in caplog.records)


def test_events_can_be_disabled(tenant_id, admission, received, settings, django_capture_on_commit_callbacks):
    settings.IPD_EVENTS_ENABLED = False

    with django_capture_on_commit_callbacks(execute=True) as callbacks:
        AdmissionService.discharge_patient(tenant_id=tenant_id, admission_id=admission.id)

    assert callbacks == []
    assert received == []


def test_discharge_with_summary_then_second_summary_is_conflict(api_client, tenant_id, admission):
    url = f"/api/v1/admissions/{admission.id}"
    d = api_client.post(
        f"{url}/discharge/",
        {"final_diagnosis": "NSTEMI", "follow_up_advice": "Cardiology in 2 weeks"},
        format="json",
        **scoped(tenant_id),
    )
    assert d.status_code == 200, d.data

    summary = DischargeSummary.objects.get(admission_id=admission.id)
    assert summary.final_diagnosis == "NSTEMI"
    assert summary.follow_up_advice == "Cardiology in 2 weeks"
    admission.refresh_from_db()
    assert summary.discharge_date == admission.discharge_date

    again = api_client.post(
        f"{url}/discharge-summary/",
        {"final_diagnosis": "Something else"},
        format="json",
        **scoped(tenant_id),
    )
    assert again.status_code == 409, again.data
    assert DischargeSummary.objects.filter(admission_id=admission.id).count() == 1


def test_summary_added_after_plain_discharge(api_client, tenant_id, admission):
    url = f"/api/v1/admissions/{admission.id}"
    assert api_client.post(f"{url}/discharge/", {}, format="json", **scoped(tenant_id)).status_code == 200

    r = api_client.post(
        f"{url}/discharge-summary/",
        {"final_diagnosis": "Angina", "condition_at_discharge": "Stable"},
        format="json",
        **scoped(tenant_id),
    )
    assert r.status_code == 201, r.data
    body = data(r)
    assert body["final_diagnosis"] == "Angina"

    admission.refresh_from_db()
    assert DischargeSummary.objects.get(admission=admission).discharge_date == admission.discharge_date

    again = api_client.post(f"{url}/discharge-summary/", {"final_diagnosis": "Angina"}, format="json", **scoped(tenant_id))
    assert again.status_code == 409, again.data


def test_summary_on_active_admission_discharges_it(api_client, tenant_id, admission, bed):
    r = api_client.post(
        f"/api/v1/admissions/{admission.id}/discharge-summary/",
        {"final_diagnosis": "Costochondritis"},
        format="json",
        **scoped(tenant_id),
    )
    assert r.status_code == 201, r.data

    admission.refresh_from_db()
    bed.refresh_from_db()
    assert admission.status == AdmissionStatus.DISCHARGED
    assert bed.status == BedStatus.AVAILABLE


def test_summary_fields_without_final_diagnosis_are_rejected(api_client, tenant_id, admission, bed):
    r = api_client.post(
        f"/api/v1/admissions/{admission.id}/discharge/",
        {"follow_up_advice": "Rest"},
        format="json",
        **scoped(tenant_id),
    )
    assert r.status_code == 400, r.data

    bed.refresh_from_db()
    assert bed.status == BedStatus.OCCUPIED


def test_blank_final_diagnosis_rolls_back_service_discharge(tenant_id, admission, bed):
    from rest_framework.exceptions import ValidationError

    with pytest.raises(ValidationError):
        AdmissionService.discharge_patient(
            tenant_id=tenant_id,
            admission_id=admission.id,
            summary=DischargeSummaryInput(final_diagnosis="  "),
        )

    admission.refresh_from_db()
    bed.refresh_from_db()
    assert admission.status == AdmissionStatus.ADMITTED
    assert bed.status == BedStatus.OCCUPIED


def test_add_summary_without_summary_is_rejected_and_keeps_admission(tenant_id, admission, bed):
    from rest_framework.exceptions import ValidationError

    with pytest.raises(ValidationError):
        AdmissionService.add_discharge_summary(tenant_id=tenant_id, admission_id=admission.id, summary=None)

    admission.refresh_from_db()
    bed.refresh_from_db()
    assert admission.status == AdmissionStatus.ADMITTED
    assert bed.status == BedStatus.OCCUPIED
    assert not DischargeSummary.objects.filter(admission_id=admission.id).exists()


def test_treatment_notes_are_append_only(tenant_id, admission, doctor_id):
    note = AdmissionService.add_treatment_note(
        tenant_id=tenant_id,
        admission_id=admission.id,
        doctor_id=doctor_id,
        notes="ECG done",
    )

    note.notes = "Edited"
    with pytest.raises(DjangoValidationError):
        note.save()
    with pytest.raises(DjangoValidationError):
        note.delete()

    assert TreatmentNote.objects.get(id=note.id).notes == "ECG done"


def test_lifecycle_writes_are_audited(tenant_id, admission, bed2, doctor_id):
    AdmissionService.transfer_patient(
        tenant_id=tenant_id, admission_id=admission.id, new_bed_id=bed2.id, reason="Quieter room"
    )
    AdmissionService.add_treatment_note(
        tenant_id=tenant_id, admission_id=admission.id, doctor_id=doctor_id, notes="Stable"
    )
    AdmissionService.discharge_patient(tenant_id=tenant_id, admission_id=admission.id)

    codes = set(
        AuditEvent.objects.filter(entity_type="Admission", entity_id=admission.id).values_list(
            "event_code", flat=True
        )
    )
    assert codes == {
        "admission.admitted",
        "admission.transferred",
        "admission.treatment_added",
        "admission.discharged",
    }
