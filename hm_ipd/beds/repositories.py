# hm_ipd/beds/repositories.py
from __future__ import annotations

from typing import Optional, Protocol
from uuid import UUID

from django.db import transaction
from django.utils import timezone

from hm_ipd.beds.models import Bed, BedStatus
from hm_ipd.wards.models import Ward


class BedRepository(Protocol):
    """
    Storage seam for the bed status column.

    Every write is a single compare-and-swap: it either applies atomically
    against the expected current state and returns True, or changes nothing
    and returns False. Callers never read status and then write it.
    """

    def claim(self, *, tenant_id: UUID, bed_id: UUID, admission_id: UUID) -> bool:
        ...

    def release(self, *, tenant_id: UUID, bed_id: UUID, admission_id: UUID) -> bool:
        ...

    def swap_status(self, *, tenant_id: UUID, bed_id: UUID, expected: str, new: str) -> bool:
        ...

    def status_of(self, *, tenant_id: UUID, bed_id: UUID) -> Optional[str]:
        ...


class DjangoBedRepository:
    """
    ORM implementation: each write is one conditional UPDATE whose affected
    row count decides the outcome, e.g.

        UPDATE beds_bed SET status='OCCUPIED', current_admission_id=%s
        WHERE id=%s AND tenant_id=%s AND status='AVAILABLE'

    The database serializes concurrent UPDATEs on the row, so at most one
    caller can observe a match.

    A claim first takes the row lock on the bed's ward, the same lock
    WardService.deactivate holds while it counts occupied beds, so a ward
    never goes inactive underneath a claim.
    """

    def ward_of(self, *, tenant_id: UUID, bed_id: UUID) -> Optional[UUID]:
        return (
            Bed.objects.filter(id=bed_id, tenant_id=tenant_id)
            .values_list("ward_id", flat=True)
            .first()
        )

    def lock_active_ward(self, *, tenant_id: UUID, ward_id: UUID) -> bool:
        locked = (
            Ward.objects.select_for_update()
            .filter(id=ward_id, tenant_id=tenant_id, is_active=True)
            .values_list("id", flat=True)
            .first()
        )
        return locked is not None

    def claim(self, *, tenant_id: UUID, bed_id: UUID, admission_id: UUID) -> bool:
        with transaction.atomic():
            ward_id = self.ward_of(tenant_id=tenant_id, bed_id=bed_id)
            if ward_id is None:
                return False
            if not self.lock_active_ward(tenant_id=tenant_id, ward_id=ward_id):
                return False

            updated = Bed.objects.filter(
                id=bed_id,
                tenant_id=tenant_id,
                ward_id=ward_id,
                status=BedStatus.AVAILABLE,
            ).update(
                status=BedStatus.OCCUPIED,
                current_admission_id=admission_id,
                status_changed_at=timezone.now(),
                updated_at=timezone.now(),
            )
            return updated == 1

    def release(self, *, tenant_id: UUID, bed_id: UUID, admission_id: UUID) -> bool:
        updated = Bed.objects.filter(
            id=bed_id,
            tenant_id=tenant_id,
            status=BedStatus.OCCUPIED,
            current_admission_id=admission_id,
        ).update(
            status=BedStatus.AVAILABLE,
            current_admission_id=None,
            status_changed_at=timezone.now(),
            updated_at=timezone.now(),
        )
        return updated == 1

    def swap_status(self, *, tenant_id: UUID, bed_id: UUID, expected: str, new: str) -> bool:
        updated = Bed.objects.filter(
            id=bed_id,
            tenant_id=tenant_id,
            status=expected,
        ).update(
            status=new,
            status_changed_at=timezone.now(),
            updated_at=timezone.now(),
        )
        return updated == 1

    def status_of(self, *, tenant_id: UUID, bed_id: UUID) -> Optional[str]:
        return (
            Bed.objects.filter(id=bed_id, tenant_id=tenant_id)
            .values_list("status", flat=True)
            .first()
        )
