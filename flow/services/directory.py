"""
Patient and doctor lookups used by the queue core.

Patients and doctors are plain users distinguished by ``role``.  The core
only needs to resolve an id or list the active doctors; anything richer
belongs to the registries that own those records.
"""
from typing import Optional

from django.contrib.auth import get_user_model

from flow.exceptions import NotFound

User = get_user_model()


def _resolve(user_id, role: str, label: str):
    try:
        return User.objects.get(pk=int(user_id), role=role, is_active=True)
    except (TypeError, ValueError, User.DoesNotExist):
        raise NotFound(f"{label} {user_id} not found")


def resolve_patient(patient_id):
    return _resolve(patient_id, 'patient', 'Patient')


def resolve_doctor(doctor_id):
    return _resolve(doctor_id, 'doctor', 'Doctor')


def display_name(user) -> str:
    return user.get_full_name() or user.username


def list_available_doctors(*, q: Optional[str] = None) -> list[dict]:
    qs = User.objects.filter(role='doctor', is_active=True).only(
        'id', 'first_name', 'last_name', 'username', 'specialization'
    )
    if q:
        qs = qs.filter(first_name__icontains=q) | qs.filter(last_name__icontains=q) | qs.filter(username__icontains=q)
    return [{
        'id': u.id,
        'name': display_name(u),
        'specialization': u.specialization,
    } for u in qs.order_by('first_name', 'last_name', 'id')]
