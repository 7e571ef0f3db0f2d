# hm_ipd/beds/api/views.py
from __future__ import annotations

from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import ValidationError
from rest_framework.permissions import IsAuthenticated

from hm_ipd.beds.api.serializers import BedCreateSerializer, BedSerializer, BedStatusUpdateSerializer
from hm_ipd.beds.models import BedStatus
from hm_ipd.beds.selectors import available_beds, bed_by_id, beds_for_tenant
from hm_ipd.beds.services import BedService
from hm_ipd.common.api.params import pk_or_404, uuid_param
from hm_ipd.common.api.response import created, ok
from hm_ipd.common.scope import actor_id, require_tenant

WARD_ID_PARAM = OpenApiParameter(
    name="ward_id",
    type=OpenApiTypes.UUID,
    location=OpenApiParameter.QUERY,
    required=False,
    description="Restrict to one ward.",
)


class BedViewSet(viewsets.ViewSet):
    """
    Thin API layer:
    - scope parsing
    - calls selectors for reads
    - calls services for writes (OCCUPIED is never set from here)
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        tags=["Beds"],
        responses={200: BedSerializer(many=True)},
        parameters=[
            WARD_ID_PARAM,
            OpenApiParameter(
                name="status",
                type=OpenApiTypes.STR,
                location=OpenApiParameter.QUERY,
                required=False,
                enum=BedStatus.values,
            ),
        ],
    )
    def list(self, request):
        tenant_id = require_tenant(request)

        status_param = request.query_params.get("status") or None
        if status_param and status_param not in BedStatus.values:
            raise ValidationError({"status": f"Invalid status. Allowed: {BedStatus.values}"})

        qs = beds_for_tenant(
            tenant_id=tenant_id,
            ward_id=uuid_param(request, "ward_id"),
            status=status_param,
        )
        return ok(BedSerializer(qs, many=True).data)

    @extend_schema(tags=["Beds"], responses={200: BedSerializer})
    def retrieve(self, request, pk=None):
        tenant_id = require_tenant(request)
        bed = bed_by_id(tenant_id=tenant_id, bed_id=pk_or_404(pk, "Bed"))
        return ok(BedSerializer(bed).data)

    @extend_schema(tags=["Beds"], request=BedCreateSerializer, responses={201: BedSerializer})
    def create(self, request):
        tenant_id = require_tenant(request)

        s = BedCreateSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        d = s.validated_data

        bed = BedService.create_bed(
            tenant_id=tenant_id,
            ward_id=d["ward_id"],
            bed_number=d["bed_number"],
            status=d.get("status") or BedStatus.AVAILABLE,
            description=d.get("description") or "",
            actor_id=actor_id(request),
        )
        return created(BedSerializer(bed).data, message="Bed created successfully")

    @extend_schema(tags=["Beds"], request=BedStatusUpdateSerializer, responses={200: BedSerializer})
    @action(detail=True, methods=["patch"], url_path="status")
    def status(self, request, pk=None):
        tenant_id = require_tenant(request)

        s = BedStatusUpdateSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        d = s.validated_data

        bed = BedService.change_status(
            tenant_id=tenant_id,
            bed_id=pk_or_404(pk, "Bed"),
            status=d["status"],
            notes=d.get("notes") or "",
            actor_id=actor_id(request),
        )
        return ok(BedSerializer(bed).data, message="Bed status updated")

    @extend_schema(tags=["Beds"], responses={200: BedSerializer(many=True)}, parameters=[WARD_ID_PARAM])
    @action(detail=False, methods=["get"], url_path="available")
    def available(self, request):
        tenant_id = require_tenant(request)
        qs = available_beds(tenant_id=tenant_id, ward_id=uuid_param(request, "ward_id"))
        return ok(BedSerializer(qs, many=True).data)
