# hm_ipd/audit/api/views.py
from __future__ import annotations

from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import viewsets
from rest_framework.exceptions import ValidationError
from rest_framework.permissions import IsAuthenticated

from hm_ipd.audit.api.serializers import AuditEventSerializer
from hm_ipd.audit.models import AuditEvent
from hm_ipd.audit.selectors import list_audit_events
from hm_ipd.common.api.response import ok
from hm_ipd.common.scope import parse_uuid, require_tenant


class AuditEventViewSet(viewsets.GenericViewSet):
    """
    List audit/timeline events (tenant scoped).
    """
    permission_classes = [IsAuthenticated]

    serializer_class = AuditEventSerializer
    queryset = AuditEvent.objects.none()

    @extend_schema(
        tags=["Audit"],
        responses={200: AuditEventSerializer(many=True)},
        parameters=[
            OpenApiParameter(
                name="entity_type",
                type=OpenApiTypes.STR,
                location=OpenApiParameter.QUERY,
                required=False,
                description="Filter by entity type (Admission, Bed, Ward).",
            ),
            OpenApiParameter(
                name="entity_id",
                type=OpenApiTypes.UUID,
                location=OpenApiParameter.QUERY,
                required=False,
                description="Filter by entity UUID.",
            ),
            OpenApiParameter(
                name="event_code",
                type=OpenApiTypes.STR,
                location=OpenApiParameter.QUERY,
                required=False,
                description="Filter by event code (e.g. admission.discharged, bed.status_changed).",
            ),
            OpenApiParameter(
                name="limit",
                type=OpenApiTypes.INT,
                location=OpenApiParameter.QUERY,
                required=False,
                description="Max records to return (default 200, max 500).",
            ),
        ],
    )
    def list(self, request):
        tenant_id = require_tenant(request)

        entity_id = None
        entity_id_raw = request.query_params.get("entity_id") or None
        if entity_id_raw:
            entity_id = parse_uuid(entity_id_raw)
            if entity_id is None:
                raise ValidationError({"detail": "Invalid entity_id (UUID expected)"})

        qs = list_audit_events(
            tenant_id=tenant_id,
            entity_type=request.query_params.get("entity_type") or None,
            entity_id=entity_id,
            event_code=request.query_params.get("event_code") or None,
            actor_id=request.query_params.get("actor_id") or None,
        )

        # keep it safe: timeline endpoints can get huge
        limit = request.query_params.get("limit")
        try:
            limit_n = int(limit) if limit else 200
        except ValueError:
            limit_n = 200
        limit_n = max(1, min(limit_n, 500))

        return ok(AuditEventSerializer(qs[:limit_n], many=True).data)
