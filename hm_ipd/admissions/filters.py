# hm_ipd/admissions/filters.py
from __future__ import annotations

import django_filters
from django.db import models
from django.db.models import F, OuterRef, Subquery
from django.db.models.functions import Coalesce

from hm_ipd.admissions.models import Admission, AdmissionStatus, BedTransfer


def _last_transfer_ward():
    return Subquery(
        BedTransfer.objects.filter(admission_id=OuterRef("pk"))
        .order_by("-transferred_at", "-created_at")
        .values("to_bed__ward_id")[:1]
    )


class AdmissionFilter(django_filters.FilterSet):
    status = django_filters.ChoiceFilter(choices=AdmissionStatus.choices)
    patient_id = django_filters.UUIDFilter()
    doctor_id = django_filters.UUIDFilter()
    bed_id = django_filters.UUIDFilter(field_name="current_bed_id")
    ward_id = django_filters.UUIDFilter(method="filter_ward")

    admitted_on = django_filters.DateFilter(field_name="admission_date", lookup_expr="date")
    admitted_from = django_filters.DateFilter(field_name="admission_date", lookup_expr="date__gte")
    admitted_to = django_filters.DateFilter(field_name="admission_date", lookup_expr="date__lte")

    class Meta:
        model = Admission
        fields = ["status", "patient_id", "doctor_id", "bed_id", "ward_id"]

    def filter_ward(self, queryset, name, value):
        # Current ward while admitted; discharged stays keep no current bed, so
        # they match the ward of their last transfer, else the admission ward.
        return queryset.annotate(
            stay_ward_id=Coalesce(
                F("current_bed__ward_id"),
                _last_transfer_ward(),
                F("admitted_bed__ward_id"),
                output_field=models.UUIDField(),
            )
        ).filter(stay_ward_id=value)
