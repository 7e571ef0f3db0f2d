# hm_ipd/occupancy/api/views.py
from __future__ import annotations

from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework.permissions import IsAuthenticated
from rest_framework.views import APIView

from hm_ipd.common.api.params import uuid_param
from hm_ipd.common.api.response import ok
from hm_ipd.common.scope import require_tenant
from hm_ipd.occupancy.selectors import get_tenant_stats, get_ward_stats


class StatsView(APIView):
    """
    GET /api/v1/stats/            -> tenant-wide occupancy
    GET /api/v1/stats/?ward_id=.. -> one ward
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        tags=["Occupancy"],
        responses={200: OpenApiTypes.OBJECT},
        parameters=[
            OpenApiParameter(
                name="ward_id",
                type=OpenApiTypes.UUID,
                location=OpenApiParameter.QUERY,
                required=False,
                description="Return the stats of a single ward.",
            ),
        ],
    )
    def get(self, request):
        tenant_id = require_tenant(request)

        ward_id = uuid_param(request, "ward_id")
        if ward_id:
            return ok(get_ward_stats(tenant_id=tenant_id, ward_id=ward_id))
        return ok(get_tenant_stats(tenant_id=tenant_id))
