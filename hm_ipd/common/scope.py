# hm_ipd/common/scope.py
from __future__ import annotations

from typing import Optional
from uuid import UUID

from rest_framework.exceptions import ValidationError

HDR_TENANT = "X-Tenant-Id"

TENANT_META_KEYS = ("HTTP_X_TENANT_ID",)

MISSING_SCOPE_MSG = "Missing scope header. Provide X-Tenant-Id."
INVALID_SCOPE_MSG = "Invalid scope header. Provide a valid UUID for X-Tenant-Id."


def parse_uuid(value) -> Optional[UUID]:
    try:
        return UUID(str(value))
    except (TypeError, ValueError, AttributeError):
        return None


def tenant_header(request) -> Optional[str]:
    for key in TENANT_META_KEYS:
        v = request.META.get(key)
        if v:
            return v
    return None


def require_tenant(request) -> UUID:
    """
    Tenant is resolved upstream; the middleware attaches request.tenant_id.
    Fall back to the header so views also work when the middleware is disabled.
    """
    tenant_id = getattr(request, "tenant_id", None)
    if tenant_id:
        return tenant_id

    raw = tenant_header(request)
    if not raw:
        raise ValidationError({"detail": MISSING_SCOPE_MSG})
    parsed = parse_uuid(raw)
    if parsed is None:
        raise ValidationError({"detail": INVALID_SCOPE_MSG})
    return parsed


def actor_id(request) -> str:
    """
    Opaque caller identity for audit columns ("" when anonymous).
    """
    user = getattr(request, "user", None)
    uid = getattr(user, "id", None) if user is not None else None
    return "" if uid is None else str(uid)
