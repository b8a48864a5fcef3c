import pytest
from django.core.cache import cache

from flow.tests.factories import make_user


@pytest.fixture(autouse=True)
def _clear_cache():
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def patient():
    return make_user('patient1', 'patient', first_name='Ada', last_name='Lovelace')


@pytest.fixture
def doctor_one():
    return make_user('doctor1', 'doctor', first_name='Gregory', last_name='House', specialization='Diagnostics')


@pytest.fixture
def doctor_two():
    return make_user('doctor2', 'doctor', first_name='Meredith', last_name='Grey', specialization='Surgery')
