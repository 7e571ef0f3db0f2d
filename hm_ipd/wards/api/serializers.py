# hm_ipd/wards/api/serializers.py
from __future__ import annotations

from rest_framework import serializers

from hm_ipd.wards.models import Ward, WardType


class WardSerializer(serializers.ModelSerializer):
    class Meta:
        model = Ward
        fields = [
            "id",
            "tenant_id",
            "name",
            "ward_type",
            "capacity",
            "location",
            "floor",
            "is_active",
            "deactivated_at",
            "deactivation_reason",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class WardCreateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=128)
    capacity = serializers.IntegerField(min_value=1)
    location = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")
    floor = serializers.CharField(max_length=32, required=False, allow_blank=True, default="")
    ward_type = serializers.ChoiceField(choices=WardType.choices, required=False, default=WardType.GENERAL)


class WardUpdateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=128, required=False)
    capacity = serializers.IntegerField(min_value=1, required=False)
    location = serializers.CharField(max_length=255, required=False, allow_blank=True)
    floor = serializers.CharField(max_length=32, required=False, allow_blank=True)
    ward_type = serializers.ChoiceField(choices=WardType.choices, required=False)

    is_active = serializers.BooleanField(required=False)
    deactivation_reason = serializers.CharField(max_length=255, required=False, allow_blank=True)


class WardDeactivateSerializer(serializers.Serializer):
    reason = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")


class WardOccupancySerializer(serializers.Serializer):
    ward_id = serializers.UUIDField()
    capacity = serializers.IntegerField()
    occupied_count = serializers.IntegerField()
    available_count = serializers.IntegerField()
