# hm_ipd/audit/api/serializers.py
from rest_framework import serializers

from hm_ipd.audit.models import AuditEvent


class AuditEventSerializer(serializers.ModelSerializer):
    # Keep API field name "timestamp", mapped to the model field "occurred_at"
    timestamp = serializers.DateTimeField(source="occurred_at", read_only=True)

    class Meta:
        model = AuditEvent
        fields = [
            "id",
            "tenant_id",
            "entity_type",
            "entity_id",
            "event_code",
            "actor_id",
            "timestamp",
            "metadata",
        ]
        read_only_fields = fields
