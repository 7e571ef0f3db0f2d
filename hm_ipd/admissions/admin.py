from django.contrib import admin

from hm_ipd.admissions.models import Admission, BedTransfer, DischargeSummary, TreatmentNote


@admin.register(Admission)
class AdmissionAdmin(admin.ModelAdmin):
    list_display = ("patient_id", "status", "current_bed", "admission_date", "discharge_date", "tenant_id")
    list_filter = ("status",)
    search_fields = ("patient_id", "doctor_id", "diagnosis")
    readonly_fields = ("status", "current_bed", "admitted_bed", "discharge_date", "created_at", "updated_at")


@admin.register(TreatmentNote)
class TreatmentNoteAdmin(admin.ModelAdmin):
    list_display = ("admission", "treatment_date", "doctor_id", "recorded_by")


@admin.register(DischargeSummary)
class DischargeSummaryAdmin(admin.ModelAdmin):
    list_display = ("admission", "discharge_date", "created_by")


@admin.register(BedTransfer)
class BedTransferAdmin(admin.ModelAdmin):
    list_display = ("admission", "from_bed", "to_bed", "transferred_at", "transferred_by")
