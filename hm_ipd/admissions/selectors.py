# hm_ipd/admissions/selectors.py
from __future__ import annotations

from typing import Any, Dict
from uuid import UUID

from django.db.models import Count, QuerySet
from rest_framework.exceptions import NotFound

from hm_ipd.admissions.models import Admission, AdmissionStatus, BedTransfer, DischargeSummary, TreatmentNote

ADMISSION_NOT_FOUND_MSG = "Admission not found in this tenant."


def admissions_for_tenant(*, tenant_id: UUID) -> QuerySet[Admission]:
    return (
        Admission.objects.select_related("current_bed", "current_bed__ward", "admitted_bed")
        .filter(tenant_id=tenant_id)
        .order_by("-admission_date", "-created_at")
    )


def admission_by_id(*, tenant_id: UUID, admission_id: UUID) -> Admission:
    try:
        return admissions_for_tenant(tenant_id=tenant_id).get(id=admission_id)
    except Admission.DoesNotExist:
        raise NotFound(ADMISSION_NOT_FOUND_MSG)


def active_admission_for_patient(*, tenant_id: UUID, patient_id: UUID) -> Admission | None:
    return Admission.objects.filter(
        tenant_id=tenant_id,
        patient_id=patient_id,
        status=AdmissionStatus.ADMITTED,
    ).first()


def treatment_notes_for(*, tenant_id: UUID, admission_id: UUID) -> QuerySet[TreatmentNote]:
    admission = admission_by_id(tenant_id=tenant_id, admission_id=admission_id)
    return TreatmentNote.objects.filter(admission=admission).order_by("treatment_date", "created_at")


def transfers_for(*, tenant_id: UUID, admission_id: UUID) -> QuerySet[BedTransfer]:
    admission = admission_by_id(tenant_id=tenant_id, admission_id=admission_id)
    return (
        BedTransfer.objects.select_related("from_bed", "to_bed")
        .filter(admission=admission)
        .order_by("transferred_at", "created_at")
    )


def discharge_summary_for(admission: Admission) -> DischargeSummary | None:
    return DischargeSummary.objects.filter(admission=admission).first()


def admission_summary(*, tenant_id: UUID, admission_id: UUID) -> Dict[str, Any]:
    """
    Everything recorded for one stay, oldest first:
      {admission, treatment_notes, transfers, discharge_summary}
    """
    admission = admission_by_id(tenant_id=tenant_id, admission_id=admission_id)
    return {
        "admission": admission,
        "treatment_notes": list(
            TreatmentNote.objects.filter(admission=admission).order_by("treatment_date", "created_at")
        ),
        "transfers": list(
            BedTransfer.objects.select_related("from_bed", "to_bed")
            .filter(admission=admission)
            .order_by("transferred_at", "created_at")
        ),
        "discharge_summary": discharge_summary_for(admission),
    }


def count_admissions_by_status(*, tenant_id: UUID) -> Dict[str, int]:
    counts = {s: 0 for s in AdmissionStatus.values}
    rows = Admission.objects.filter(tenant_id=tenant_id).values("status").annotate(n=Count("id"))
    for row in rows:
        counts[row["status"]] = row["n"]
    return counts
