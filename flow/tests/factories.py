import itertools

from django.utils import timezone

from flow.models import User, Visit

PASSWORD = 'P@ssw0rd1'

_numbers = itertools.count(1)


def make_user(username, role, **extra):
    return User.objects.create_user(username=username, password=PASSWORD, role=role, **extra)


def make_visit(patient, stage='reception'):
    """A bare visit row with no queue entries, for queue store tests."""
    return Visit.objects.create(
        visit_number=f"V-TEST-{next(_numbers):06d}",
        patient=patient,
        current_stage=stage,
        stage_entered_at=timezone.now(),
    )
