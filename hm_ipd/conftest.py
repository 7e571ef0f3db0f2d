# hm_ipd/conftest.py
import uuid

import pytest
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient

from hm_ipd.beds.services import BedService
from hm_ipd.wards.services import WardService


@pytest.fixture
def tenant_id():
    return uuid.uuid4()


@pytest.fixture
def other_tenant_id():
    return uuid.uuid4()


@pytest.fixture
def user(db):
    User = get_user_model()
    return User.objects.create_user(username="testuser", password="testpass", is_active=True)


@pytest.fixture
def api_client(user):
    c = APIClient()
    c.force_authenticate(user=user)
    return c


@pytest.fixture
def ward(db, tenant_id):
    return WardService.create(tenant_id=tenant_id, name="General Ward A", capacity=4)


@pytest.fixture
def bed(ward, tenant_id):
    return BedService.create_bed(tenant_id=tenant_id, ward_id=ward.id, bed_number="A-1")


@pytest.fixture
def bed2(ward, tenant_id):
    return BedService.create_bed(tenant_id=tenant_id, ward_id=ward.id, bed_number="A-2")


@pytest.fixture
def patient_id():
    return uuid.uuid4()


@pytest.fixture
def doctor_id():
    return uuid.uuid4()
