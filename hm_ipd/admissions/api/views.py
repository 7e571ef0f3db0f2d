# hm_ipd/admissions/api/views.py
from __future__ import annotations

from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import ValidationError
from rest_framework.permissions import IsAuthenticated

from hm_ipd.admissions.api.serializers import (
    SUMMARY_FIELDS,
    AdmissionCreateSerializer,
    AdmissionSerializer,
    AdmissionSummarySerializer,
    AdmissionUpdateSerializer,
    BedTransferSerializer,
    DischargeSerializer,
    DischargeSummaryCreateSerializer,
    DischargeSummarySerializer,
    TransferSerializer,
    TreatmentNoteCreateSerializer,
    TreatmentNoteSerializer,
)
from hm_ipd.admissions.filters import AdmissionFilter
from hm_ipd.admissions.selectors import (
    admission_by_id,
    admission_summary,
    admissions_for_tenant,
    transfers_for,
    treatment_notes_for,
)
from hm_ipd.admissions.services import AdmissionService, AdmissionUpdate, DischargeSummaryInput
from hm_ipd.common.api.pagination import paginate
from hm_ipd.common.api.params import pk_or_404
from hm_ipd.common.api.response import created, ok
from hm_ipd.common.scope import actor_id, require_tenant


def _summary_input(data) -> DischargeSummaryInput | None:
    if not any(data.get(f) for f in SUMMARY_FIELDS):
        return None
    return DischargeSummaryInput(
        final_diagnosis=data.get("final_diagnosis") or "",
        treatment_given=data.get("treatment_given") or "",
        condition_at_discharge=data.get("condition_at_discharge") or "",
        follow_up_advice=data.get("follow_up_advice") or "",
    )


class AdmissionViewSet(viewsets.ViewSet):
    """
    In-patient admissions: admit, transfer, treat, discharge.
    Bed status is never written here; every move goes through AdmissionService.
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        tags=["Admissions"],
        responses={200: AdmissionSerializer(many=True)},
        parameters=[
            OpenApiParameter("status", OpenApiTypes.STR, OpenApiParameter.QUERY, required=False),
            OpenApiParameter("patient_id", OpenApiTypes.UUID, OpenApiParameter.QUERY, required=False),
            OpenApiParameter("doctor_id", OpenApiTypes.UUID, OpenApiParameter.QUERY, required=False),
            OpenApiParameter("ward_id", OpenApiTypes.UUID, OpenApiParameter.QUERY, required=False),
            OpenApiParameter("bed_id", OpenApiTypes.UUID, OpenApiParameter.QUERY, required=False),
            OpenApiParameter("admitted_on", OpenApiTypes.DATE, OpenApiParameter.QUERY, required=False),
            OpenApiParameter("admitted_from", OpenApiTypes.DATE, OpenApiParameter.QUERY, required=False),
            OpenApiParameter("admitted_to", OpenApiTypes.DATE, OpenApiParameter.QUERY, required=False),
            OpenApiParameter("page", OpenApiTypes.INT, OpenApiParameter.QUERY, required=False),
            OpenApiParameter("page_size", OpenApiTypes.INT, OpenApiParameter.QUERY, required=False),
        ],
    )
    def list(self, request):
        tenant_id = require_tenant(request)

        f = AdmissionFilter(data=request.query_params, queryset=admissions_for_tenant(tenant_id=tenant_id))
        if not f.is_valid():
            raise ValidationError(f.errors)

        return paginate(request, f.qs, AdmissionSerializer)

    @extend_schema(tags=["Admissions"], request=AdmissionCreateSerializer, responses={201: AdmissionSerializer})
    def create(self, request):
        tenant_id = require_tenant(request)

        s = AdmissionCreateSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        d = s.validated_data

        admission = AdmissionService.admit_patient(
            tenant_id=tenant_id,
            patient_id=d["patient_id"],
            bed_id=d["bed_id"],
            doctor_id=d["doctor_id"],
            reason=d["reason"],
            diagnosis=d.get("diagnosis") or "",
            notes=d.get("notes") or "",
            actor_id=actor_id(request),
        )
        admission = admission_by_id(tenant_id=tenant_id, admission_id=admission.id)
        return created(AdmissionSerializer(admission).data, message="Patient admitted successfully")

    @extend_schema(tags=["Admissions"], responses={200: AdmissionSerializer})
    def retrieve(self, request, pk=None):
        tenant_id = require_tenant(request)
        admission = admission_by_id(tenant_id=tenant_id, admission_id=pk_or_404(pk, "Admission"))
        return ok(AdmissionSerializer(admission).data)

    @extend_schema(tags=["Admissions"], request=AdmissionUpdateSerializer, responses={200: AdmissionSerializer})
    def partial_update(self, request, pk=None):
        tenant_id = require_tenant(request)

        s = AdmissionUpdateSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        d = s.validated_data

        admission = AdmissionService.update_admission(
            tenant_id=tenant_id,
            admission_id=pk_or_404(pk, "Admission"),
            patch=AdmissionUpdate(
                doctor_id=d.get("doctor_id"),
                reason=d.get("reason"),
                diagnosis=d.get("diagnosis"),
                notes=d.get("notes"),
            ),
            actor_id=actor_id(request),
        )
        return ok(AdmissionSerializer(admission).data, message="Admission updated")

    @extend_schema(tags=["Admissions"], request=TransferSerializer, responses={200: AdmissionSerializer})
    @action(detail=True, methods=["post"], url_path="transfer")
    def transfer(self, request, pk=None):
        tenant_id = require_tenant(request)

        s = TransferSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        d = s.validated_data

        admission = AdmissionService.transfer_patient(
            tenant_id=tenant_id,
            admission_id=pk_or_404(pk, "Admission"),
            new_bed_id=d["new_bed_id"],
            reason=d["reason"],
            notes=d.get("notes") or "",
            actor_id=actor_id(request),
        )
        return ok(AdmissionSerializer(admission).data, message="Patient transferred")

    @extend_schema(
        tags=["Admissions"],
        request=TreatmentNoteCreateSerializer,
        responses={200: TreatmentNoteSerializer(many=True), 201: TreatmentNoteSerializer},
    )
    @action(detail=True, methods=["get", "post"], url_path="treatments")
    def treatments(self, request, pk=None):
        tenant_id = require_tenant(request)
        admission_id = pk_or_404(pk, "Admission")

        if request.method == "GET":
            qs = treatment_notes_for(tenant_id=tenant_id, admission_id=admission_id)
            return ok(TreatmentNoteSerializer(qs, many=True).data)

        s = TreatmentNoteCreateSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        d = s.validated_data

        note = AdmissionService.add_treatment_note(
            tenant_id=tenant_id,
            admission_id=admission_id,
            doctor_id=d["doctor_id"],
            notes=d["notes"],
            treatment_plan=d.get("treatment_plan") or "",
            treatment_date=d.get("treatment_date"),
            actor_id=actor_id(request),
        )
        return created(TreatmentNoteSerializer(note).data, message="Treatment note added")

    @extend_schema(tags=["Admissions"], request=DischargeSerializer, responses={200: AdmissionSerializer})
    @action(detail=True, methods=["post"], url_path="discharge")
    def discharge(self, request, pk=None):
        tenant_id = require_tenant(request)

        s = DischargeSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        admission = AdmissionService.discharge_patient(
            tenant_id=tenant_id,
            admission_id=pk_or_404(pk, "Admission"),
            summary=_summary_input(s.validated_data),
            actor_id=actor_id(request),
        )
        return ok(AdmissionSerializer(admission).data, message="Patient discharged")

    @extend_schema(
        tags=["Admissions"],
        request=DischargeSummaryCreateSerializer,
        responses={201: DischargeSummarySerializer},
    )
    @action(detail=True, methods=["post"], url_path="discharge-summary")
    def discharge_summary(self, request, pk=None):
        tenant_id = require_tenant(request)

        s = DischargeSummaryCreateSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        summary = AdmissionService.add_discharge_summary(
            tenant_id=tenant_id,
            admission_id=pk_or_404(pk, "Admission"),
            summary=_summary_input(s.validated_data),
            actor_id=actor_id(request),
        )
        return created(DischargeSummarySerializer(summary).data, message="Discharge summary created")

    @extend_schema(tags=["Admissions"], responses={200: AdmissionSummarySerializer})
    @action(detail=True, methods=["get"], url_path="summary")
    def summary(self, request, pk=None):
        tenant_id = require_tenant(request)
        data = admission_summary(tenant_id=tenant_id, admission_id=pk_or_404(pk, "Admission"))
        return ok(AdmissionSummarySerializer(data).data)

    @extend_schema(tags=["Admissions"], responses={200: BedTransferSerializer(many=True)})
    @action(detail=True, methods=["get"], url_path="transfers")
    def transfers(self, request, pk=None):
        tenant_id = require_tenant(request)
        qs = transfers_for(tenant_id=tenant_id, admission_id=pk_or_404(pk, "Admission"))
        return ok(BedTransferSerializer(qs, many=True).data)
