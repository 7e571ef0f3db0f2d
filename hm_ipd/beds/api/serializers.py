# hm_ipd/beds/api/serializers.py
from __future__ import annotations

from rest_framework import serializers

from hm_ipd.beds.models import Bed, BedStatus


class BedSerializer(serializers.ModelSerializer):
    ward_id = serializers.UUIDField(read_only=True)
    ward_name = serializers.CharField(source="ward.name", read_only=True)

    class Meta:
        model = Bed
        fields = [
            "id",
            "tenant_id",
            "ward_id",
            "ward_name",
            "bed_number",
            "status",
            "description",
            "current_admission_id",
            "status_changed_at",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class BedCreateSerializer(serializers.Serializer):
    ward_id = serializers.UUIDField()
    bed_number = serializers.CharField(max_length=32)
    status = serializers.ChoiceField(
        choices=[BedStatus.AVAILABLE, BedStatus.RESERVED, BedStatus.MAINTENANCE],
        required=False,
        default=BedStatus.AVAILABLE,
    )
    description = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")


class BedStatusUpdateSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=BedStatus.choices)
    notes = serializers.CharField(required=False, allow_blank=True, default="")
