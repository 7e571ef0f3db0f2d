# hm_ipd/admissions/api/serializers.py
from __future__ import annotations

from rest_framework import serializers

from hm_ipd.admissions.models import Admission, BedTransfer, DischargeSummary, TreatmentNote

SUMMARY_FIELDS = ("final_diagnosis", "treatment_given", "condition_at_discharge", "follow_up_advice")


class AdmissionSerializer(serializers.ModelSerializer):
    current_bed_id = serializers.UUIDField(read_only=True, allow_null=True)
    current_bed_number = serializers.CharField(source="current_bed.bed_number", read_only=True, allow_null=True)
    ward_id = serializers.UUIDField(source="current_bed.ward_id", read_only=True, allow_null=True)
    ward_name = serializers.CharField(source="current_bed.ward.name", read_only=True, allow_null=True)
    admitted_bed_id = serializers.UUIDField(read_only=True)

    class Meta:
        model = Admission
        fields = [
            "id",
            "tenant_id",
            "patient_id",
            "doctor_id",
            "current_bed_id",
            "current_bed_number",
            "ward_id",
            "ward_name",
            "admitted_bed_id",
            "status",
            "admission_date",
            "discharge_date",
            "reason",
            "diagnosis",
            "notes",
            "admitted_by",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class AdmissionCreateSerializer(serializers.Serializer):
    patient_id = serializers.UUIDField()
    bed_id = serializers.UUIDField()
    doctor_id = serializers.UUIDField()
    reason = serializers.CharField()
    diagnosis = serializers.CharField(required=False, allow_blank=True, default="")
    notes = serializers.CharField(required=False, allow_blank=True, default="")


class AdmissionUpdateSerializer(serializers.Serializer):
    doctor_id = serializers.UUIDField(required=False)
    reason = serializers.CharField(required=False)
    diagnosis = serializers.CharField(required=False, allow_blank=True)
    notes = serializers.CharField(required=False, allow_blank=True)

    def validate(self, attrs):
        if not attrs:
            raise serializers.ValidationError("Provide at least one of doctor_id, reason, diagnosis, notes.")
        return attrs


class TransferSerializer(serializers.Serializer):
    new_bed_id = serializers.UUIDField()
    reason = serializers.CharField()
    notes = serializers.CharField(required=False, allow_blank=True, default="")


class TreatmentNoteSerializer(serializers.ModelSerializer):
    admission_id = serializers.UUIDField(read_only=True)

    class Meta:
        model = TreatmentNote
        fields = [
            "id",
            "admission_id",
            "treatment_date",
            "doctor_id",
            "notes",
            "treatment_plan",
            "recorded_by",
            "created_at",
        ]
        read_only_fields = fields


class TreatmentNoteCreateSerializer(serializers.Serializer):
    doctor_id = serializers.UUIDField()
    notes = serializers.CharField()
    treatment_plan = serializers.CharField(required=False, allow_blank=True, default="")
    treatment_date = serializers.DateTimeField(required=False, allow_null=True, default=None)


class DischargeSerializer(serializers.Serializer):
    """
    Summary fields are optional on discharge; when any is given,
    final_diagnosis is required and the summary is stored with it.
    """

    final_diagnosis = serializers.CharField(required=False, allow_blank=True)
    treatment_given = serializers.CharField(required=False, allow_blank=True)
    condition_at_discharge = serializers.CharField(required=False, allow_blank=True)
    follow_up_advice = serializers.CharField(required=False, allow_blank=True)

    def validate(self, attrs):
        if any(attrs.get(f) for f in SUMMARY_FIELDS) and not (attrs.get("final_diagnosis") or "").strip():
            raise serializers.ValidationError({"final_diagnosis": "Required when a discharge summary is given."})
        return attrs


class DischargeSummaryCreateSerializer(serializers.Serializer):
    final_diagnosis = serializers.CharField()
    treatment_given = serializers.CharField(required=False, allow_blank=True, default="")
    condition_at_discharge = serializers.CharField(required=False, allow_blank=True, default="")
    follow_up_advice = serializers.CharField(required=False, allow_blank=True, default="")


class DischargeSummarySerializer(serializers.ModelSerializer):
    admission_id = serializers.UUIDField(read_only=True)

    class Meta:
        model = DischargeSummary
        fields = [
            "id",
            "admission_id",
            "discharge_date",
            "final_diagnosis",
            "treatment_given",
            "condition_at_discharge",
            "follow_up_advice",
            "created_by",
            "created_at",
        ]
        read_only_fields = fields


class BedTransferSerializer(serializers.ModelSerializer):
    admission_id = serializers.UUIDField(read_only=True)
    from_bed_id = serializers.UUIDField(read_only=True)
    to_bed_id = serializers.UUIDField(read_only=True)
    from_bed_number = serializers.CharField(source="from_bed.bed_number", read_only=True)
    to_bed_number = serializers.CharField(source="to_bed.bed_number", read_only=True)

    class Meta:
        model = BedTransfer
        fields = [
            "id",
            "admission_id",
            "from_bed_id",
            "from_bed_number",
            "to_bed_id",
            "to_bed_number",
            "reason",
            "notes",
            "transferred_at",
            "transferred_by",
        ]
        read_only_fields = fields


class AdmissionSummarySerializer(serializers.Serializer):
    admission = AdmissionSerializer()
    treatment_notes = TreatmentNoteSerializer(many=True)
    transfers = BedTransferSerializer(many=True)
    discharge_summary = DischargeSummarySerializer(allow_null=True)
