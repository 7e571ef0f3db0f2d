# hm_ipd/admissions/models.py
from __future__ import annotations

import uuid

from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Q

from hm_ipd.beds.models import Bed
from hm_ipd.common.models import ScopedModel


class AdmissionStatus(models.TextChoices):
    ADMITTED = "ADMITTED", "Admitted"
    DISCHARGED = "DISCHARGED", "Discharged"


class Admission(ScopedModel):
    """
    One in-patient stay: ADMITTED -> DISCHARGED (terminal).

    current_bed is the bed the patient occupies now (None once discharged);
    admitted_bed keeps the bed the stay started in.
    """

    patient_id = models.UUIDField(db_index=True)
    doctor_id = models.UUIDField(db_index=True)

    current_bed = models.ForeignKey(
        Bed,
        on_delete=models.PROTECT,
        related_name="+",
        null=True,
        blank=True,
    )
    admitted_bed = models.ForeignKey(Bed, on_delete=models.PROTECT, related_name="admissions")

    status = models.CharField(
        max_length=16,
        choices=AdmissionStatus.choices,
        default=AdmissionStatus.ADMITTED,
        db_index=True,
    )
    admission_date = models.DateTimeField(db_index=True)
    discharge_date = models.DateTimeField(null=True, blank=True)

    reason = models.TextField()
    diagnosis = models.TextField(blank=True, default="")
    notes = models.TextField(blank=True, default="")

    admitted_by = models.CharField(max_length=64, blank=True, default="")

    class Meta:
        db_table = "admissions_admission"
        indexes = [
            models.Index(fields=["tenant_id", "status"]),
            models.Index(fields=["tenant_id", "patient_id"]),
            models.Index(fields=["tenant_id", "admission_date"]),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["tenant_id", "patient_id"],
                condition=Q(status="ADMITTED"),
                name="uq_active_admission_per_patient",
            ),
            models.UniqueConstraint(
                fields=["current_bed"],
                condition=Q(status="ADMITTED"),
                name="uq_active_admission_per_bed",
            ),
        ]

    def __str__(self) -> str:
        return f"Admission({self.patient_id}, {self.status})"

    @property
    def is_active(self) -> bool:
        return self.status == AdmissionStatus.ADMITTED


class AppendOnlyModel(models.Model):
    """
    Rows are written once; later saves and deletes raise.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        abstract = True

    def save(self, *args, **kwargs):
        # UUID PK exists even before first save, so use _state.adding
        if not self._state.adding:
            raise ValidationError(f"{type(self).__name__} is immutable and cannot be modified once created.")
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError(f"{type(self).__name__} is immutable and cannot be deleted.")


class TreatmentNote(AppendOnlyModel):
    admission = models.ForeignKey(Admission, on_delete=models.PROTECT, related_name="treatment_notes")

    treatment_date = models.DateTimeField(db_index=True)
    doctor_id = models.UUIDField()
    notes = models.TextField()
    treatment_plan = models.TextField(blank=True, default="")

    recorded_by = models.CharField(max_length=64, blank=True, default="")

    class Meta:
        db_table = "admissions_treatment_note"
        ordering = ["treatment_date", "created_at"]

    def __str__(self) -> str:
        return f"TreatmentNote({self.admission_id} @ {self.treatment_date})"


class DischargeSummary(AppendOnlyModel):
    admission = models.OneToOneField(Admission, on_delete=models.PROTECT, related_name="discharge_summary")

    discharge_date = models.DateTimeField()
    final_diagnosis = models.TextField()
    treatment_given = models.TextField(blank=True, default="")
    condition_at_discharge = models.TextField(blank=True, default="")
    follow_up_advice = models.TextField(blank=True, default="")

    created_by = models.CharField(max_length=64, blank=True, default="")

    class Meta:
        db_table = "admissions_discharge_summary"

    def __str__(self) -> str:
        return f"DischargeSummary({self.admission_id})"


class BedTransfer(AppendOnlyModel):
    """
    History of bed moves. Never read to decide who holds a bed.
    """

    admission = models.ForeignKey(Admission, on_delete=models.PROTECT, related_name="transfers")
    from_bed = models.ForeignKey(Bed, on_delete=models.PROTECT, related_name="+")
    to_bed = models.ForeignKey(Bed, on_delete=models.PROTECT, related_name="+")

    reason = models.TextField()
    notes = models.TextField(blank=True, default="")

    transferred_at = models.DateTimeField(db_index=True)
    transferred_by = models.CharField(max_length=64, blank=True, default="")

    class Meta:
        db_table = "admissions_bed_transfer"
        ordering = ["transferred_at", "created_at"]

    def __str__(self) -> str:
        return f"BedTransfer({self.from_bed_id} -> {self.to_bed_id})"
