# hm_ipd/beds/allocator.py
from __future__ import annotations

import logging
from typing import Optional
from uuid import UUID

from rest_framework.exceptions import NotFound, ValidationError

from hm_ipd.beds.models import BedStatus
from hm_ipd.beds.repositories import BedRepository, DjangoBedRepository
from hm_ipd.beds.transitions import can_transition
from hm_ipd.common.api.exceptions import ConflictError

logger = logging.getLogger(__name__)

BED_NOT_FOUND_MSG = "Bed not found in this tenant."
BED_UNAVAILABLE_MSG = "Bed unavailable."


class BedAllocator:
    """
    Owns every write to Bed.status.

    claim_bed / release_bed are the only way in and out of OCCUPIED and are
    called by the admission lifecycle only. Administrative moves go through
    change_status. Each operation is one compare-and-swap on the repository;
    failures propagate to the caller unchanged (no internal retry).
    """

    def __init__(self, repo: Optional[BedRepository] = None):
        self.repo = repo or DjangoBedRepository()

    def _require_exists(self, *, tenant_id: UUID, bed_id: UUID) -> str:
        status = self.repo.status_of(tenant_id=tenant_id, bed_id=bed_id)
        if status is None:
            raise NotFound(BED_NOT_FOUND_MSG)
        return status

    def claim_bed(self, *, tenant_id: UUID, bed_id: UUID, admission_id: UUID) -> None:
        """
        AVAILABLE -> OCCUPIED, recording admission_id as the holder.
        Raises ConflictError if the bed is not AVAILABLE at commit time
        (including when a concurrent caller claimed it first).
        """
        if self.repo.claim(tenant_id=tenant_id, bed_id=bed_id, admission_id=admission_id):
            logger.info("Bed claimed bed=%s admission=%s", bed_id, admission_id)
            return

        # Nothing was written; only now look at why.
        status = self._require_exists(tenant_id=tenant_id, bed_id=bed_id)
        logger.warning("Bed claim rejected bed=%s admission=%s status=%s", bed_id, admission_id, status)
        raise ConflictError(BED_UNAVAILABLE_MSG)

    def release_bed(self, *, tenant_id: UUID, bed_id: UUID, admission_id: UUID) -> None:
        """
        OCCUPIED -> AVAILABLE, only when held by admission_id.
        """
        if self.repo.release(tenant_id=tenant_id, bed_id=bed_id, admission_id=admission_id):
            logger.info("Bed released bed=%s admission=%s", bed_id, admission_id)
            return

        status = self._require_exists(tenant_id=tenant_id, bed_id=bed_id)
        if status == BedStatus.OCCUPIED:
            raise ConflictError("Bed is held by another admission.")
        raise ConflictError(f"Bed is not occupied (status {status}).")

    def change_status(self, *, tenant_id: UUID, bed_id: UUID, status: str) -> str:
        """
        Administrative transition (maintenance, reservation).
        Returns the previous status.
        """
        if status not in BedStatus.values:
            raise ValidationError({"status": f"Unknown bed status {status}."})

        current = self._require_exists(tenant_id=tenant_id, bed_id=bed_id)
        if current == status:
            raise ConflictError(f"Bed is already {status}.")
        if not can_transition(current, status):
            raise ConflictError(f"Invalid bed status transition {current} -> {status}.")

        if not self.repo.swap_status(tenant_id=tenant_id, bed_id=bed_id, expected=current, new=status):
            # Lost a race: someone moved the bed between our read and the swap.
            latest = self._require_exists(tenant_id=tenant_id, bed_id=bed_id)
            raise ConflictError(f"Invalid bed status transition {latest} -> {status}.")

        logger.info("Bed status changed bed=%s %s -> %s", bed_id, current, status)
        return current

    def set_maintenance(self, *, tenant_id: UUID, bed_id: UUID) -> str:
        return self.change_status(tenant_id=tenant_id, bed_id=bed_id, status=BedStatus.MAINTENANCE)

    def clear_maintenance(self, *, tenant_id: UUID, bed_id: UUID) -> str:
        current = self._require_exists(tenant_id=tenant_id, bed_id=bed_id)
        if current != BedStatus.MAINTENANCE:
            raise ConflictError("Bed is not under maintenance.")
        return self.change_status(tenant_id=tenant_id, bed_id=bed_id, status=BedStatus.AVAILABLE)

    def reserve_bed(self, *, tenant_id: UUID, bed_id: UUID) -> str:
        return self.change_status(tenant_id=tenant_id, bed_id=bed_id, status=BedStatus.RESERVED)

    def unreserve_bed(self, *, tenant_id: UUID, bed_id: UUID) -> str:
        current = self._require_exists(tenant_id=tenant_id, bed_id=bed_id)
        if current != BedStatus.RESERVED:
            raise ConflictError("Bed is not reserved.")
        return self.change_status(tenant_id=tenant_id, bed_id=bed_id, status=BedStatus.AVAILABLE)
