# hm_ipd/beds/services.py

from __future__ import annotations

import logging
from typing import Optional
from uuid import UUID

from django.db import IntegrityError, transaction
from django.utils import timezone
from rest_framework.exceptions import NotFound, ValidationError

from hm_ipd.audit.services import AuditService
from hm_ipd.beds.allocator import BedAllocator
from hm_ipd.beds.models import Bed, BedStatus
from hm_ipd.beds.selectors import bed_by_id
from hm_ipd.beds.transitions import INITIAL_STATUSES
from hm_ipd.common.api.exceptions import ConflictError
from hm_ipd.wards.models import Ward

logger = logging.getLogger(__name__)


class BedService:
    """
    Bed write-model operations (administrative side).

    Notes:
    - Capacity: a ward never owns more beds than Ward.capacity. The ward row is
      locked while counting so concurrent creates cannot overshoot.
    - Status: OCCUPIED is reachable only through BedAllocator.claim_bed from the
      admission lifecycle; change_status covers maintenance and reservations.
    """

    @staticmethod
    @transaction.atomic
    def create_bed(
        *,
        tenant_id: UUID,
        ward_id: UUID,
        bed_number: str,
        status: str = BedStatus.AVAILABLE,
        description: str = "",
        actor_id: str = "",
    ) -> Bed:
        bed_number = (bed_number or "").strip()
        if not bed_number:
            raise ValidationError({"bed_number": "This field may not be blank."})
        if status not in INITIAL_STATUSES:
            raise ValidationError({"status": f"A bed cannot be created as {status}."})

        ward = Ward.objects.select_for_update().filter(id=ward_id, tenant_id=tenant_id).first()
        if not ward:
            raise NotFound("Ward not found in this tenant.")
        if not ward.is_active:
            raise ConflictError("Ward is deactivated.")

        existing = Bed.objects.filter(ward_id=ward.id)
        if existing.count() >= ward.capacity:
            raise ConflictError(f"Ward capacity reached ({ward.capacity} beds).")
        if existing.filter(bed_number=bed_number).exists():
            raise ConflictError(f"Bed number {bed_number} already exists in this ward.")

        try:
            with transaction.atomic():
                bed = Bed.objects.create(
                    tenant_id=tenant_id,
                    ward=ward,
                    bed_number=bed_number,
                    status=status,
                    description=description or "",
                    status_changed_at=timezone.now(),
                )
        except IntegrityError:
            raise ConflictError(f"Bed number {bed_number} already exists in this ward.")

        AuditService.log(
            event_code="bed.created",
            entity_type="Bed",
            entity_id=bed.id,
            tenant_id=tenant_id,
            actor_id=actor_id,
            metadata={"ward_id": str(ward.id), "bed_number": bed_number, "status": status},
        )
        logger.info("Bed created bed=%s ward=%s number=%s", bed.id, ward.id, bed_number)
        return bed

    @staticmethod
    @transaction.atomic
    def change_status(
        *,
        tenant_id: UUID,
        bed_id: UUID,
        status: str,
        notes: str = "",
        actor_id: str = "",
        allocator: Optional[BedAllocator] = None,
    ) -> Bed:
        allocator = allocator or BedAllocator()
        previous = allocator.change_status(tenant_id=tenant_id, bed_id=bed_id, status=status)

        AuditService.log(
            event_code="bed.status_changed",
            entity_type="Bed",
            entity_id=bed_id,
            tenant_id=tenant_id,
            actor_id=actor_id,
            metadata={"from": previous, "to": status, "notes": notes or ""},
        )
        return bed_by_id(tenant_id=tenant_id, bed_id=bed_id)

