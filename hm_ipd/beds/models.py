# hm_ipd/beds/models.py
from __future__ import annotations

from django.db import models

from hm_ipd.common.models import ScopedModel
from hm_ipd.wards.models import Ward


class BedStatus(models.TextChoices):
    AVAILABLE = "AVAILABLE", "Available"
    OCCUPIED = "OCCUPIED", "Occupied"
    RESERVED = "RESERVED", "Reserved"
    MAINTENANCE = "MAINTENANCE", "Maintenance"


class Bed(ScopedModel):
    """
    The allocatable unit within a ward.

    status is only ever written through hm_ipd.beds.repositories (compare-and-swap).
    current_admission_id is a weak back-reference to the admission holding the bed;
    it is set iff status == OCCUPIED.
    """

    ward = models.ForeignKey(Ward, on_delete=models.PROTECT, related_name="beds")
    bed_number = models.CharField(max_length=32)
    description = models.CharField(max_length=255, blank=True, default="")

    status = models.CharField(
        max_length=16,
        choices=BedStatus.choices,
        default=BedStatus.AVAILABLE,
        db_index=True,
    )
    current_admission_id = models.UUIDField(null=True, blank=True, db_index=True)
    status_changed_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = "beds_bed"
        constraints = [
            models.UniqueConstraint(fields=["ward", "bed_number"], name="uq_bed_number_per_ward"),
        ]
        indexes = [
            models.Index(fields=["tenant_id", "status"]),
            models.Index(fields=["tenant_id", "ward", "status"]),
        ]

    def __str__(self) -> str:
        return f"{self.bed_number} [{self.status}]"
