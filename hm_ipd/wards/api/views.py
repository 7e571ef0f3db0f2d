# hm_ipd/wards/api/views.py
from __future__ import annotations

from drf_spectacular.utils import extend_schema
from rest_framework import viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated

from hm_ipd.beds.api.serializers import BedSerializer
from hm_ipd.beds.selectors import beds_by_ward
from hm_ipd.common.api.params import bool_param, pk_or_404
from hm_ipd.common.api.response import created, ok
from hm_ipd.common.scope import actor_id, require_tenant
from hm_ipd.wards.api.serializers import (
    WardCreateSerializer,
    WardDeactivateSerializer,
    WardOccupancySerializer,
    WardSerializer,
    WardUpdateSerializer,
)
from hm_ipd.wards.selectors import ward_by_id, ward_occupancy, wards_for_tenant
from hm_ipd.wards.services import WardService, WardUpdate


class WardViewSet(viewsets.ViewSet):
    """
    Ward registry. Wards are soft-deactivated, never deleted.
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(tags=["Wards"], responses={200: WardSerializer(many=True)})
    def list(self, request):
        tenant_id = require_tenant(request)
        active_only = bool_param(request, "active_only", default=False)
        qs = wards_for_tenant(tenant_id=tenant_id, active_only=active_only)
        return ok(WardSerializer(qs, many=True).data)

    @extend_schema(tags=["Wards"], responses={200: WardSerializer})
    def retrieve(self, request, pk=None):
        tenant_id = require_tenant(request)
        ward = ward_by_id(tenant_id=tenant_id, ward_id=pk_or_404(pk, "Ward"))
        return ok(WardSerializer(ward).data)

    @extend_schema(tags=["Wards"], request=WardCreateSerializer, responses={201: WardSerializer})
    def create(self, request):
        tenant_id = require_tenant(request)

        s = WardCreateSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        d = s.validated_data

        ward = WardService.create(
            tenant_id=tenant_id,
            name=d["name"],
            capacity=d["capacity"],
            location=d.get("location") or "",
            floor=d.get("floor") or "",
            ward_type=d.get("ward_type"),
            actor_id=actor_id(request),
        )
        return created(WardSerializer(ward).data, message="Ward created successfully")

    @extend_schema(tags=["Wards"], request=WardUpdateSerializer, responses={200: WardSerializer})
    def partial_update(self, request, pk=None):
        tenant_id = require_tenant(request)

        s = WardUpdateSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        d = s.validated_data

        ward = WardService.update(
            tenant_id=tenant_id,
            ward_id=pk_or_404(pk, "Ward"),
            patch=WardUpdate(
                name=d.get("name"),
                ward_type=d.get("ward_type"),
                capacity=d.get("capacity"),
                location=d.get("location"),
                floor=d.get("floor"),
                is_active=d.get("is_active"),
                deactivation_reason=d.get("deactivation_reason"),
            ),
            actor_id=actor_id(request),
        )
        return ok(WardSerializer(ward).data, message="Ward updated successfully")

    @extend_schema(tags=["Wards"], responses={200: WardOccupancySerializer})
    @action(detail=True, methods=["get"], url_path="occupancy")
    def occupancy(self, request, pk=None):
        tenant_id = require_tenant(request)
        data = ward_occupancy(tenant_id=tenant_id, ward_id=pk_or_404(pk, "Ward"))
        return ok(WardOccupancySerializer(data).data)

    @extend_schema(tags=["Wards"], request=WardDeactivateSerializer, responses={200: WardSerializer})
    @action(detail=True, methods=["post"], url_path="deactivate")
    def deactivate(self, request, pk=None):
        tenant_id = require_tenant(request)

        s = WardDeactivateSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        ward = WardService.deactivate(
            tenant_id=tenant_id,
            ward_id=pk_or_404(pk, "Ward"),
            reason=s.validated_data.get("reason") or "",
            actor_id=actor_id(request),
        )
        return ok(WardSerializer(ward).data, message="Ward deactivated")

    @extend_schema(tags=["Wards"], responses={200: BedSerializer(many=True)})
    @action(detail=True, methods=["get"], url_path="beds")
    def beds(self, request, pk=None):
        tenant_id = require_tenant(request)
        ward = ward_by_id(tenant_id=tenant_id, ward_id=pk_or_404(pk, "Ward"))
        return ok(BedSerializer(beds_by_ward(tenant_id=tenant_id, ward_id=ward.id), many=True).data)
