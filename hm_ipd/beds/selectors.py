# hm_ipd/beds/selectors.py
from __future__ import annotations

from typing import Optional
from uuid import UUID

from django.db.models import Count, QuerySet
from rest_framework.exceptions import NotFound

from hm_ipd.beds.models import Bed, BedStatus


def bed_by_id(*, tenant_id: UUID, bed_id: UUID) -> Bed:
    try:
        return Bed.objects.select_related("ward").get(id=bed_id, tenant_id=tenant_id)
    except Bed.DoesNotExist:
        raise NotFound("Bed not found in this tenant.")


def beds_for_tenant(
    *,
    tenant_id: UUID,
    ward_id: Optional[UUID] = None,
    status: Optional[str] = None,
) -> QuerySet[Bed]:
    qs = Bed.objects.select_related("ward").filter(tenant_id=tenant_id)
    if ward_id:
        qs = qs.filter(ward_id=ward_id)
    if status:
        qs = qs.filter(status=status)
    return qs.order_by("ward__name", "bed_number")


def beds_by_ward(*, tenant_id: UUID, ward_id: UUID) -> QuerySet[Bed]:
    return beds_for_tenant(tenant_id=tenant_id, ward_id=ward_id)


def available_beds(*, tenant_id: UUID, ward_id: Optional[UUID] = None) -> QuerySet[Bed]:
    """
    Beds a new admission or transfer could claim right now.
    Beds of deactivated wards are never claimable.
    """
    return beds_for_tenant(tenant_id=tenant_id, ward_id=ward_id, status=BedStatus.AVAILABLE).filter(
        ward__is_active=True
    )


def count_beds_by_status(*, tenant_id: UUID, ward_id: Optional[UUID] = None) -> dict[str, int]:
    """
    {AVAILABLE: n, OCCUPIED: n, RESERVED: n, MAINTENANCE: n}; missing statuses are 0.
    """
    qs = Bed.objects.filter(tenant_id=tenant_id)
    if ward_id:
        qs = qs.filter(ward_id=ward_id)

    counts = {s: 0 for s in BedStatus.values}
    for row in qs.values("status").annotate(n=Count("id")):
        counts[row["status"]] = row["n"]
    return counts


def count_beds_by_ward_and_status(*, tenant_id: UUID) -> dict[UUID, dict[str, int]]:
    """
    One grouped query for every ward of the tenant: {ward_id: {status: n}}.
    """
    out: dict[UUID, dict[str, int]] = {}
    rows = Bed.objects.filter(tenant_id=tenant_id).values("ward_id", "status").annotate(n=Count("id"))
    for row in rows:
        per_ward = out.setdefault(row["ward_id"], {s: 0 for s in BedStatus.values})
        per_ward[row["status"]] = row["n"]
    return out
