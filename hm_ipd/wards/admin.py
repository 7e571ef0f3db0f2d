from django.contrib import admin

from hm_ipd.wards.models import Ward


@admin.register(Ward)
class WardAdmin(admin.ModelAdmin):
    list_display = ("name", "ward_type", "capacity", "floor", "tenant_id", "is_active", "created_at")
    list_filter = ("ward_type", "is_active")
    search_fields = ("name", "location")
    readonly_fields = ("created_at", "updated_at", "deactivated_at")
