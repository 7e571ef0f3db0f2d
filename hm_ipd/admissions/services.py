# hm_ipd/admissions/services.py
from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Optional
from uuid import UUID

from django.conf import settings
from django.db import IntegrityError, transaction
from django.utils import timezone
from rest_framework.exceptions import NotFound, ValidationError

from hm_ipd.admissions.models import Admission, AdmissionStatus, BedTransfer, DischargeSummary, TreatmentNote
from hm_ipd.admissions.selectors import ADMISSION_NOT_FOUND_MSG, active_admission_for_patient, admission_by_id
from hm_ipd.audit.services import AuditService
from hm_ipd.beds.allocator import BedAllocator
from hm_ipd.common.api.exceptions import ConflictError
from hm_ipd.common.events import publish

logger = logging.getLogger(__name__)

ADMISSION_DISCHARGED = "admission.discharged"

PATIENT_ALREADY_ADMITTED_MSG = "Patient already admitted."
ADMISSION_NOT_ACTIVE_MSG = "Admission not active."
SUMMARY_EXISTS_MSG = "Discharge summary already exists for this admission."


@dataclass(frozen=True)
class DischargeSummaryInput:
    final_diagnosis: str
    treatment_given: str = ""
    condition_at_discharge: str = ""
    follow_up_advice: str = ""


@dataclass(frozen=True)
class AdmissionUpdate:
    doctor_id: Optional[UUID] = None
    diagnosis: Optional[str] = None
    reason: Optional[str] = None
    notes: Optional[str] = None


def _required_text(value, field: str) -> str:
    value = (value or "").strip()
    if not value:
        raise ValidationError({field: "This field may not be blank."})
    return value


def _lock_admission(*, tenant_id: UUID, admission_id: UUID) -> Admission:
    # No select_related: FOR UPDATE cannot cover the nullable side of an outer join.
    admission = Admission.objects.select_for_update().filter(id=admission_id, tenant_id=tenant_id).first()
    if not admission:
        raise NotFound(ADMISSION_NOT_FOUND_MSG)
    return admission


def _require_active(admission: Admission) -> None:
    if admission.status != AdmissionStatus.ADMITTED:
        raise ConflictError(ADMISSION_NOT_ACTIVE_MSG)


def _create_summary(
    *,
    admission: Admission,
    summary: DischargeSummaryInput,
    discharge_date: datetime,
    actor_id: str,
) -> DischargeSummary:
    final_diagnosis = _required_text(summary.final_diagnosis, "final_diagnosis")
    try:
        with transaction.atomic():
            return DischargeSummary.objects.create(
                admission=admission,
                discharge_date=discharge_date,
                final_diagnosis=final_diagnosis,
                treatment_given=summary.treatment_given or "",
                condition_at_discharge=summary.condition_at_discharge or "",
                follow_up_advice=summary.follow_up_advice or "",
                created_by=actor_id or "",
            )
    except IntegrityError:
        raise ConflictError(SUMMARY_EXISTS_MSG)


class AdmissionService:
    """
    Admission lifecycle: NONE -> ADMITTED -> DISCHARGED (terminal).

    Rules:
    - Every bed move goes through BedAllocator inside the same transaction as the
      admission write, so a failure anywhere leaves neither side changed.
    - Transfer claims the new bed before releasing the old one; the patient is
      never without a bed.
    - A discharged admission accepts nothing but its one discharge summary.
    """

    @staticmethod
    @transaction.atomic
    def admit_patient(
        *,
        tenant_id: UUID,
        patient_id: UUID,
        bed_id: UUID,
        doctor_id: UUID,
        reason: str,
        diagnosis: str = "",
        notes: str = "",
        actor_id: str = "",
        allocator: Optional[BedAllocator] = None,
    ) -> Admission:
        allocator = allocator or BedAllocator()
        reason = _required_text(reason, "reason")

        if active_admission_for_patient(tenant_id=tenant_id, patient_id=patient_id):
            raise ConflictError(PATIENT_ALREADY_ADMITTED_MSG)

        admission_id = uuid.uuid4()
        allocator.claim_bed(tenant_id=tenant_id, bed_id=bed_id, admission_id=admission_id)

        try:
            with transaction.atomic():
                admission = Admission.objects.create(
                    id=admission_id,
                    tenant_id=tenant_id,
                    patient_id=patient_id,
                    doctor_id=doctor_id,
                    current_bed_id=bed_id,
                    admitted_bed_id=bed_id,
                    status=AdmissionStatus.ADMITTED,
                    admission_date=timezone.now(),
                    reason=reason,
                    diagnosis=diagnosis or "",
                    notes=notes or "",
                    admitted_by=actor_id or "",
                )
        except IntegrityError:
            # A concurrent admit for the same patient won; the outer rollback
            # also undoes the bed claim above.
            raise ConflictError(PATIENT_ALREADY_ADMITTED_MSG)

        AuditService.log(
            event_code="admission.admitted",
            entity_type="Admission",
            entity_id=admission.id,
            tenant_id=tenant_id,
            actor_id=actor_id,
            metadata={
                "patient_id": str(patient_id),
                "doctor_id": str(doctor_id),
                "bed_id": str(bed_id),
            },
        )
        logger.info("Patient admitted admission=%s patient=%s bed=%s", admission.id, patient_id, bed_id)
        return admission

    @staticmethod
    @transaction.atomic
    def transfer_patient(
        *,
        tenant_id: UUID,
        admission_id: UUID,
        new_bed_id: UUID,
        reason: str,
        notes: str = "",
        actor_id: str = "",
        allocator: Optional[BedAllocator] = None,
    ) -> Admission:
        allocator = allocator or BedAllocator()
        reason = _required_text(reason, "reason")

        admission = _lock_admission(tenant_id=tenant_id, admission_id=admission_id)
        _require_active(admission)

        old_bed_id = admission.current_bed_id
        if old_bed_id == new_bed_id:
            raise ValidationError({"new_bed_id": "Patient is already in this bed."})

        allocator.claim_bed(tenant_id=tenant_id, bed_id=new_bed_id, admission_id=admission.id)
        allocator.release_bed(tenant_id=tenant_id, bed_id=old_bed_id, admission_id=admission.id)

        now = timezone.now()
        admission.current_bed_id = new_bed_id
        admission.save(update_fields=["current_bed", "updated_at"])

        BedTransfer.objects.create(
            admission=admission,
            from_bed_id=old_bed_id,
            to_bed_id=new_bed_id,
            reason=reason,
            notes=notes or "",
            transferred_at=now,
            transferred_by=actor_id or "",
        )

        AuditService.log(
            event_code="admission.transferred",
            entity_type="Admission",
            entity_id=admission.id,
            tenant_id=tenant_id,
            actor_id=actor_id,
            metadata={"from_bed_id": str(old_bed_id), "to_bed_id": str(new_bed_id), "reason": reason},
        )
        logger.info("Patient transferred admission=%s %s -> %s", admission.id, old_bed_id, new_bed_id)
        return admission_by_id(tenant_id=tenant_id, admission_id=admission.id)

    @staticmethod
    @transaction.atomic
    def add_treatment_note(
        *,
        tenant_id: UUID,
        admission_id: UUID,
        doctor_id: UUID,
        notes: str,
        treatment_plan: str = "",
        treatment_date: Optional[datetime] = None,
        actor_id: str = "",
    ) -> TreatmentNote:
        notes = _required_text(notes, "notes")

        admission = _lock_admission(tenant_id=tenant_id, admission_id=admission_id)
        _require_active(admission)

        note = TreatmentNote.objects.create(
            admission=admission,
            treatment_date=treatment_date or timezone.now(),
            doctor_id=doctor_id,
            notes=notes,
            treatment_plan=treatment_plan or "",
            recorded_by=actor_id or "",
        )

        AuditService.log(
            event_code="admission.treatment_added",
            entity_type="Admission",
            entity_id=admission.id,
            tenant_id=tenant_id,
            actor_id=actor_id,
            metadata={"treatment_note_id": str(note.id), "doctor_id": str(doctor_id)},
        )
        return note

    @staticmethod
    @transaction.atomic
    def discharge_patient(
        *,
        tenant_id: UUID,
        admission_id: UUID,
        summary: Optional[DischargeSummaryInput] = None,
        actor_id: str = "",
        allocator: Optional[BedAllocator] = None,
    ) -> Admission:
        allocator = allocator or BedAllocator()
        if summary is not None:
            _required_text(summary.final_diagnosis, "final_diagnosis")

        admission = _lock_admission(tenant_id=tenant_id, admission_id=admission_id)
        _require_active(admission)

        bed_id = admission.current_bed_id
        allocator.release_bed(tenant_id=tenant_id, bed_id=bed_id, admission_id=admission.id)

        now = timezone.now()
        admission.status = AdmissionStatus.DISCHARGED
        admission.discharge_date = now
        admission.current_bed = None
        admission.save(update_fields=["status", "discharge_date", "current_bed", "updated_at"])

        if summary is not None:
            _create_summary(admission=admission, summary=summary, discharge_date=now, actor_id=actor_id)

        AuditService.log(
            event_code="admission.discharged",
            entity_type="Admission",
            entity_id=admission.id,
            tenant_id=tenant_id,
            actor_id=actor_id,
            metadata={"bed_id": str(bed_id), "with_summary": summary is not None},
        )
        logger.info("Patient discharged admission=%s bed=%s", admission.id, bed_id)

        if getattr(settings, "IPD_EVENTS_ENABLED", True):
            payload = {
                "tenant_id": str(tenant_id),
                "admission_id": str(admission.id),
                "patient_id": str(admission.patient_id),
                "bed_id": str(bed_id),
                "discharge_date": now.isoformat(),
            }
            transaction.on_commit(lambda: publish(ADMISSION_DISCHARGED, payload))

        return admission_by_id(tenant_id=tenant_id, admission_id=admission.id)

    @staticmethod
    @transaction.atomic
    def add_discharge_summary(
        *,
        tenant_id: UUID,
        admission_id: UUID,
        summary: DischargeSummaryInput,
        actor_id: str = "",
        allocator: Optional[BedAllocator] = None,
    ) -> DischargeSummary:
        """
        ADMITTED: discharges the patient with this summary.
        DISCHARGED without a summary: attaches it, dated at the discharge.
        """
        if summary is None:
            raise ValidationError({"summary": "A discharge summary is required."})
        _required_text(summary.final_diagnosis, "final_diagnosis")

        admission = _lock_admission(tenant_id=tenant_id, admission_id=admission_id)
        if DischargeSummary.objects.filter(admission=admission).exists():
            raise ConflictError(SUMMARY_EXISTS_MSG)

        if admission.status == AdmissionStatus.ADMITTED:
            AdmissionService.discharge_patient(
                tenant_id=tenant_id,
                admission_id=admission.id,
                summary=summary,
                actor_id=actor_id,
                allocator=allocator,
            )
            return DischargeSummary.objects.get(admission_id=admission.id)

        created = _create_summary(
            admission=admission,
            summary=summary,
            discharge_date=admission.discharge_date or timezone.now(),
            actor_id=actor_id,
        )
        AuditService.log(
            event_code="admission.summary_added",
            entity_type="Admission",
            entity_id=admission.id,
            tenant_id=tenant_id,
            actor_id=actor_id,
            metadata={"discharge_summary_id": str(created.id)},
        )
        return created

    @staticmethod
    @transaction.atomic
    def update_admission(
        *,
        tenant_id: UUID,
        admission_id: UUID,
        patch: AdmissionUpdate,
        actor_id: str = "",
    ) -> Admission:
        admission = _lock_admission(tenant_id=tenant_id, admission_id=admission_id)
        _require_active(admission)

        changed = []
        if patch.doctor_id is not None:
            admission.doctor_id = patch.doctor_id
            changed.append("doctor_id")
        if patch.reason is not None:
            admission.reason = _required_text(patch.reason, "reason")
            changed.append("reason")
        if patch.diagnosis is not None:
            admission.diagnosis = patch.diagnosis
            changed.append("diagnosis")
        if patch.notes is not None:
            admission.notes = patch.notes
            changed.append("notes")

        if changed:
            admission.save(update_fields=[*changed, "updated_at"])
            AuditService.log(
                event_code="admission.updated",
                entity_type="Admission",
                entity_id=admission.id,
                tenant_id=tenant_id,
                actor_id=actor_id,
                metadata={"fields": changed},
            )

        return admission_by_id(tenant_id=tenant_id, admission_id=admission.id)
