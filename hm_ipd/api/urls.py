# hm_ipd/api/urls.py
from __future__ import annotations

from django.urls import path
from rest_framework.routers import DefaultRouter

from hm_ipd.admissions.api.views import AdmissionViewSet
from hm_ipd.audit.api.views import AuditEventViewSet
from hm_ipd.beds.api.views import BedViewSet
from hm_ipd.occupancy.api.views import StatsView
from hm_ipd.wards.api.views import WardViewSet

router = DefaultRouter()

router.register(r"wards", WardViewSet, basename="wards")
router.register(r"beds", BedViewSet, basename="beds")
router.register(r"admissions", AdmissionViewSet, basename="admissions")
router.register(r"audit/events", AuditEventViewSet, basename="audit-events")

urlpatterns = [
    path("stats/", StatsView.as_view(), name="stats"),

    # Router URLs last (so explicit paths win if ever overlapping)
    *router.urls,
]
