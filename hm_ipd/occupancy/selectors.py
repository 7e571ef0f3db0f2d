# hm_ipd/occupancy/selectors.py
from __future__ import annotations

from typing import Any, Dict
from uuid import UUID

from hm_ipd.admissions.models import AdmissionStatus
from hm_ipd.admissions.selectors import count_admissions_by_status
from hm_ipd.beds.models import BedStatus
from hm_ipd.beds.selectors import count_beds_by_status, count_beds_by_ward_and_status
from hm_ipd.wards.models import Ward
from hm_ipd.wards.selectors import ward_by_id, wards_for_tenant


def occupancy_rate(occupied: int, capacity: int) -> float:
    if capacity <= 0:
        return 0.0
    return round(occupied / capacity, 4)


def _ward_stats(ward: Ward, counts: Dict[str, int]) -> Dict[str, Any]:
    occupied = counts[BedStatus.OCCUPIED]
    return {
        "ward_id": ward.id,
        "name": ward.name,
        "ward_type": ward.ward_type,
        "is_active": ward.is_active,
        "capacity": ward.capacity,
        "bed_count": sum(counts.values()),
        "beds": counts,
        "occupied_count": occupied,
        "available_count": counts[BedStatus.AVAILABLE],
        "occupancy_rate": occupancy_rate(occupied, ward.capacity),
    }


def get_ward_stats(*, tenant_id: UUID, ward_id: UUID) -> Dict[str, Any]:
    ward = ward_by_id(tenant_id=tenant_id, ward_id=ward_id)
    return _ward_stats(ward, count_beds_by_status(tenant_id=tenant_id, ward_id=ward.id))


def get_tenant_stats(*, tenant_id: UUID) -> Dict[str, Any]:
    """
    Per-ward breakdown plus tenant totals. Deactivated wards are listed
    (flagged is_active=False) and counted like any other ward.
    """
    per_ward = count_beds_by_ward_and_status(tenant_id=tenant_id)
    empty = {s: 0 for s in BedStatus.values}

    wards = [
        _ward_stats(ward, per_ward.get(ward.id, dict(empty)))
        for ward in wards_for_tenant(tenant_id=tenant_id, active_only=False)
    ]

    beds = count_beds_by_status(tenant_id=tenant_id)
    capacity = sum(w["capacity"] for w in wards)
    admissions = count_admissions_by_status(tenant_id=tenant_id)

    return {
        "wards": wards,
        "beds": {"total": sum(beds.values()), **beds},
        "capacity": capacity,
        "occupancy_rate": occupancy_rate(beds[BedStatus.OCCUPIED], capacity),
        "admissions": {
            "admitted": admissions[AdmissionStatus.ADMITTED],
            "discharged": admissions[AdmissionStatus.DISCHARGED],
        },
    }
