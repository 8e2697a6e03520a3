import pytest

from models import Role
from tests.helpers import HOSPITAL_A, HOSPITAL_B, add_hospital, add_user, MemoryFileStorage
from tests.memory_store import MemoryStore


@pytest.fixture
def store():
    s = MemoryStore()
    add_hospital(s, HOSPITAL_A, "City Hospital")
    add_hospital(s, HOSPITAL_B, "Lake Hospital")
    return s


@pytest.fixture
def storage():
    return MemoryFileStorage()


@pytest.fixture
def superadmin(store):
    return add_user(store, Role.SUPERADMIN, hospital_id=None, first_name="Super", last_name="Admin")


@pytest.fixture
def admin(store):
    return add_user(store, Role.ADMIN, HOSPITAL_A, first_name="Asha", last_name="Admin")


@pytest.fixture
def partner(store):
    return add_user(store, Role.PARTNER, HOSPITAL_A, first_name="Prakash", last_name="Partner")


@pytest.fixture
def other_partner(store):
    return add_user(store, Role.PARTNER, HOSPITAL_A, first_name="Priya", last_name="Partner")


@pytest.fixture
def sales_people(store):
    """Three active sales people in hospital A, roster order s1, s2, s3"""
    return [
        add_user(store, Role.SALES_PERSON, HOSPITAL_A, created_at=f"2026-01-0{i}T00:00:00+00:00",
                 first_name=f"Sales{i}")
        for i in (1, 2, 3)
    ]
