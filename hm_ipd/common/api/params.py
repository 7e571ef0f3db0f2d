# hm_ipd/common/api/params.py
from __future__ import annotations

from typing import Optional
from uuid import UUID

from rest_framework.exceptions import NotFound, ValidationError

from hm_ipd.common.scope import parse_uuid

TRUTHY = {"1", "true", "yes", "y", "on"}


def pk_or_404(pk, label: str) -> UUID:
    """
    Router lookups accept any path segment; a non-UUID can never match a row.
    """
    value = parse_uuid(pk)
    if value is None:
        raise NotFound(f"{label} not found in this tenant.")
    return value


def uuid_param(request, name: str) -> Optional[UUID]:
    raw = request.query_params.get(name)
    if not raw:
        return None
    value = parse_uuid(raw)
    if value is None:
        raise ValidationError({name: "Invalid UUID."})
    return value


def bool_param(request, name: str, default: bool) -> bool:
    raw = request.query_params.get(name)
    if raw is None or raw == "":
        return default
    return raw.strip().lower() in TRUTHY
