# hm_ipd/wards/services.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional
from uuid import UUID

from django.db import IntegrityError, transaction
from django.utils import timezone
from rest_framework.exceptions import NotFound, ValidationError

from hm_ipd.audit.services import AuditService
from hm_ipd.common.api.exceptions import ConflictError
from hm_ipd.wards.models import Ward, WardType

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WardUpdate:
    name: Optional[str] = None
    ward_type: Optional[str] = None
    capacity: Optional[int] = None
    location: Optional[str] = None
    floor: Optional[str] = None

    is_active: Optional[bool] = None
    deactivation_reason: Optional[str] = None


def _validate_capacity(capacity) -> int:
    if isinstance(capacity, bool) or not isinstance(capacity, int):
        raise ValidationError({"capacity": "Capacity must be a positive integer."})
    if capacity <= 0:
        raise ValidationError({"capacity": "Capacity must be greater than zero."})
    return capacity


def _get_for_update(*, tenant_id: UUID, ward_id: UUID) -> Ward:
    ward = Ward.objects.select_for_update().filter(id=ward_id, tenant_id=tenant_id).first()
    if not ward:
        raise NotFound("Ward not found in this tenant.")
    return ward


def _occupied_bed_count(ward: Ward) -> int:
    from hm_ipd.beds.models import BedStatus

    return ward.beds.filter(status=BedStatus.OCCUPIED).count()


class WardService:
    @staticmethod
    @transaction.atomic
    def create(
        *,
        tenant_id: UUID,
        name: str,
        capacity: int,
        location: str = "",
        floor: str = "",
        ward_type: str = WardType.GENERAL,
        actor_id: str = "",
    ) -> Ward:
        name = (name or "").strip()
        if not name:
            raise ValidationError({"name": "This field may not be blank."})
        capacity = _validate_capacity(capacity)
        if ward_type not in WardType.values:
            raise ValidationError({"ward_type": "Invalid ward_type."})

        if Ward.objects.filter(tenant_id=tenant_id, name=name).exists():
            raise ConflictError(f"Ward {name} already exists.")

        try:
            with transaction.atomic():
                ward = Ward.objects.create(
                    tenant_id=tenant_id,
                    name=name,
                    capacity=capacity,
                    location=location or "",
                    floor=floor or "",
                    ward_type=ward_type,
                    is_active=True,
                )
        except IntegrityError:
            raise ConflictError(f"Ward {name} already exists.")

        AuditService.log(
            event_code="ward.created",
            entity_type="Ward",
            entity_id=ward.id,
            tenant_id=tenant_id,
            actor_id=actor_id,
            metadata={"name": name, "capacity": capacity},
        )
        logger.info("Ward created ward=%s capacity=%s", ward.id, capacity)
        return ward

    @staticmethod
    @transaction.atomic
    def update(*, tenant_id: UUID, ward_id: UUID, patch: WardUpdate, actor_id: str = "") -> Ward:
        ward = _get_for_update(tenant_id=tenant_id, ward_id=ward_id)
        changes: dict = {}

        if patch.name is not None:
            name = patch.name.strip()
            if not name:
                raise ValidationError({"name": "This field may not be blank."})
            if name != ward.name and Ward.objects.filter(tenant_id=tenant_id, name=name).exists():
                raise ConflictError(f"Ward {name} already exists.")
            changes["name"] = name

        if patch.ward_type is not None:
            if patch.ward_type not in WardType.values:
                raise ValidationError({"ward_type": "Invalid ward_type."})
            changes["ward_type"] = patch.ward_type

        if patch.capacity is not None:
            capacity = _validate_capacity(patch.capacity)
            bed_count = ward.beds.count()
            if capacity < bed_count:
                raise ConflictError(
                    f"Capacity {capacity} is below the ward's current bed count ({bed_count})."
                )
            changes["capacity"] = capacity

        if patch.location is not None:
            changes["location"] = patch.location
        if patch.floor is not None:
            changes["floor"] = patch.floor

        for field, value in changes.items():
            setattr(ward, field, value)

        if changes:
            ward.save()
            AuditService.log(
                event_code="ward.updated",
                entity_type="Ward",
                entity_id=ward.id,
                tenant_id=tenant_id,
                actor_id=actor_id,
                metadata=dict(changes),
            )

        # activation/deactivation
        if patch.is_active is False:
            ward = WardService.deactivate(
                tenant_id=tenant_id,
                ward_id=ward.id,
                reason=patch.deactivation_reason or "",
                actor_id=actor_id,
            )
        elif patch.is_active is True:
            ward = WardService.reactivate(tenant_id=tenant_id, ward_id=ward.id, actor_id=actor_id)

        return ward

    @staticmethod
    @transaction.atomic
    def deactivate(*, tenant_id: UUID, ward_id: UUID, reason: str = "", actor_id: str = "") -> Ward:
        ward = _get_for_update(tenant_id=tenant_id, ward_id=ward_id)
        if not ward.is_active:
            return ward

        occupied = _occupied_bed_count(ward)
        if occupied:
            raise ConflictError(f"Ward has {occupied} occupied bed(s) and cannot be deactivated.")

        ward.is_active = False
        ward.deactivated_at = timezone.now()
        ward.deactivation_reason = (reason or "").strip()
        ward.save(update_fields=["is_active", "deactivated_at", "deactivation_reason", "updated_at"])

        AuditService.log(
            event_code="ward.deactivated",
            entity_type="Ward",
            entity_id=ward.id,
            tenant_id=tenant_id,
            actor_id=actor_id,
            metadata={"reason": ward.deactivation_reason},
        )
        logger.info("Ward deactivated ward=%s", ward.id)
        return ward

    @staticmethod
    @transaction.atomic
    def reactivate(*, tenant_id: UUID, ward_id: UUID, actor_id: str = "") -> Ward:
        ward = _get_for_update(tenant_id=tenant_id, ward_id=ward_id)
        if ward.is_active:
            return ward

        ward.is_active = True
        ward.deactivated_at = None
        ward.deactivation_reason = ""
        ward.save(update_fields=["is_active", "deactivated_at", "deactivation_reason", "updated_at"])

        AuditService.log(
            event_code="ward.reactivated",
            entity_type="Ward",
            entity_id=ward.id,
            tenant_id=tenant_id,
            actor_id=actor_id,
        )
        return ward
