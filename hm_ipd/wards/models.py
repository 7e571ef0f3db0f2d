# hm_ipd/wards/models.py
from __future__ import annotations

from django.core.validators import MinValueValidator
from django.db import models

from hm_ipd.common.models import ScopedModel


class WardType(models.TextChoices):
    GENERAL = "GENERAL", "General"
    ICU = "ICU", "Intensive Care"
    PRIVATE = "PRIVATE", "Private"
    SEMI_PRIVATE = "SEMI_PRIVATE", "Semi Private"
    PEDIATRIC = "PEDIATRIC", "Pediatric"
    MATERNITY = "MATERNITY", "Maternity"
    OTHER = "OTHER", "Other"


class Ward(ScopedModel):
    """
    A physical in-patient unit with a fixed number of beds.

    capacity is the maximum number of Bed rows the ward may own;
    the bed service enforces it on every create.
    """

    name = models.CharField(max_length=128)
    ward_type = models.CharField(
        max_length=24,
        choices=WardType.choices,
        default=WardType.GENERAL,
        db_index=True,
    )
    capacity = models.PositiveIntegerField(validators=[MinValueValidator(1)])

    location = models.CharField(max_length=255, blank=True, default="")
    floor = models.CharField(max_length=32, blank=True, default="")

    # Lifecycle
    is_active = models.BooleanField(default=True, db_index=True)
    deactivated_at = models.DateTimeField(null=True, blank=True)
    deactivation_reason = models.CharField(max_length=255, blank=True, default="")

    class Meta:
        db_table = "wards_ward"
        constraints = [
            models.UniqueConstraint(fields=["tenant_id", "name"], name="uq_ward_tenant_name"),
        ]
        indexes = [
            models.Index(fields=["tenant_id", "is_active"]),
            models.Index(fields=["tenant_id", "ward_type"]),
        ]

    def __str__(self) -> str:
        return f"{self.name} ({self.capacity} beds)"
