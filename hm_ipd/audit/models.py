# hm_ipd/audit/models.py
from django.db import models

from hm_ipd.common.models import ScopedModel


class AuditEvent(ScopedModel):
    """
    Immutable audit record.
    Every IPD write (admit, transfer, discharge, bed status change) lands here.
    """
    event_code = models.CharField(max_length=128, db_index=True)  # e.g. "admission.transferred"
    entity_type = models.CharField(max_length=128, db_index=True)  # e.g. "Admission"
    entity_id = models.UUIDField(db_index=True)

    # Opaque caller identity from the verified token (no local user table)
    actor_id = models.CharField(max_length=64, blank=True, default="", db_index=True)

    occurred_at = models.DateTimeField(auto_now_add=True, db_index=True)
    metadata = models.JSONField(default=dict)

    class Meta:
        db_table = "audit_audit_event"
        indexes = [
            models.Index(fields=["tenant_id", "occurred_at"]),
            models.Index(fields=["entity_type", "entity_id"]),
            models.Index(fields=["tenant_id", "event_code"]),
        ]
