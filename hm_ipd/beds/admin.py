from django.contrib import admin

from hm_ipd.beds.models import Bed


@admin.register(Bed)
class BedAdmin(admin.ModelAdmin):
    list_display = ("bed_number", "ward", "status", "current_admission_id", "tenant_id", "status_changed_at")
    list_filter = ("status",)
    search_fields = ("bed_number", "ward__name")
    # Status is owned by the allocator; edit it through the API, not the admin.
    readonly_fields = ("status", "current_admission_id", "status_changed_at", "created_at", "updated_at")
