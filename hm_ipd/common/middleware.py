# hm_ipd/common/middleware.py
from __future__ import annotations

import logging
from typing import Optional

from django.http import JsonResponse
from django.utils.deprecation import MiddlewareMixin

from hm_ipd.common.api.exceptions import build_error_envelope
from hm_ipd.common.scope import INVALID_SCOPE_MSG, MISSING_SCOPE_MSG, parse_uuid, tenant_header

logger = logging.getLogger(__name__)


class TenantScopeMiddleware(MiddlewareMixin):
    """
    Enforces tenant scope for API requests.

    Behavior:
      - Enforced for both /api/v1/* and /api/* (alias).
      - X-Tenant-Id is required (400 if missing) and must be a UUID (400 if invalid).
      - Docs/schema/admin endpoints and the API roots are public.
      - On success -> attaches request.tenant_id

    Membership/authorization is decided upstream; this service only trusts the
    header once the caller's token has been verified by DRF authentication.
    """

    ENFORCED_PREFIXES = ("/api/v1/", "/api/")

    PUBLIC_PATH_PREFIXES = (
        "/admin/",
        "/api/docs/",
        "/api/schema/",
    )

    ALLOW_NO_SCOPE_EXACT_PATHS = (
        "/api/v1/",
        "/api/",
    )

    def _starts_with_any(self, path: str, prefixes: tuple[str, ...]) -> bool:
        return any(path.startswith(p) for p in prefixes)

    def _json_error(self, request, *, status_code: int, code: str, message: str, details=None) -> JsonResponse:
        return JsonResponse(
            build_error_envelope(
                request=request,
                code=code,
                message=message,
                details=details,
            ),
            status=status_code,
        )

    def process_request(self, request) -> Optional[JsonResponse]:
        request.tenant_id = None

        path = getattr(request, "path", "") or ""

        # Always allow docs/schema/admin without scope.
        if self._starts_with_any(path, self.PUBLIC_PATH_PREFIXES):
            return None

        # If it's not under /api/ or /api/v1/, ignore.
        if not self._starts_with_any(path, self.ENFORCED_PREFIXES):
            return None

        # Allow visiting API roots without forcing scope
        if path in self.ALLOW_NO_SCOPE_EXACT_PATHS:
            return None

        raw = tenant_header(request)
        if not raw:
            return self._json_error(
                request,
                status_code=400,
                code="validation_error",
                message=MISSING_SCOPE_MSG,
            )

        tenant_id = parse_uuid(raw)
        if tenant_id is None:
            logger.warning("Rejected request with invalid tenant header path=%s", path)
            return self._json_error(
                request,
                status_code=400,
                code="validation_error",
                message=INVALID_SCOPE_MSG,
            )

        request.tenant_id = tenant_id
        return None
