# hm_ipd/wards/selectors.py
from __future__ import annotations

from uuid import UUID

from django.db.models import QuerySet
from rest_framework.exceptions import NotFound

from hm_ipd.wards.models import Ward


def wards_for_tenant(*, tenant_id: UUID, active_only: bool = True) -> QuerySet[Ward]:
    qs = Ward.objects.filter(tenant_id=tenant_id)
    if active_only:
        qs = qs.filter(is_active=True)
    return qs.order_by("name")


def ward_by_id(*, tenant_id: UUID, ward_id: UUID) -> Ward:
    try:
        return Ward.objects.get(id=ward_id, tenant_id=tenant_id)
    except Ward.DoesNotExist:
        raise NotFound("Ward not found in this tenant.")


def ward_occupancy(*, tenant_id: UUID, ward_id: UUID) -> dict:
    """
    {capacity, occupied_count, available_count} for one ward.
    Bed counts come from the bed selectors.
    """
    from hm_ipd.beds.models import BedStatus
    from hm_ipd.beds.selectors import count_beds_by_status

    ward = ward_by_id(tenant_id=tenant_id, ward_id=ward_id)
    counts = count_beds_by_status(tenant_id=tenant_id, ward_id=ward.id)
    return {
        "ward_id": ward.id,
        "capacity": ward.capacity,
        "occupied_count": counts[BedStatus.OCCUPIED],
        "available_count": counts[BedStatus.AVAILABLE],
    }
