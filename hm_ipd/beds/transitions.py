# hm_ipd/beds/transitions.py
from __future__ import annotations

from hm_ipd.beds.models import BedStatus

# Administrative moves (PATCH /beds/{id}/status). OCCUPIED is entered and left
# only through BedAllocator.claim_bed / release_bed.
ADMIN_TRANSITIONS: dict[str, frozenset[str]] = {
    BedStatus.AVAILABLE: frozenset({BedStatus.MAINTENANCE, BedStatus.RESERVED}),
    BedStatus.RESERVED: frozenset({BedStatus.AVAILABLE}),
    BedStatus.MAINTENANCE: frozenset({BedStatus.AVAILABLE}),
    BedStatus.OCCUPIED: frozenset(),
}

# Statuses a bed may be created in.
INITIAL_STATUSES = frozenset({BedStatus.AVAILABLE, BedStatus.RESERVED, BedStatus.MAINTENANCE})


def can_transition(current: str, target: str) -> bool:
    return target in ADMIN_TRANSITIONS.get(current, frozenset())
