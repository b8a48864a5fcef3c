"""
Visit state machine.

A visit starts at reception and only ever moves forward along
:data:`NEXT_STAGES`.  The stage column doubles as an optimistic
concurrency token: advancing is an ``UPDATE ... WHERE current_stage =
<expected>``, so of two simultaneous advances exactly one matches.

Advancing does not serve the previous stage's entry; stations serve their
own entry once the advance has succeeded.
"""
from __future__ import annotations

from typing import Optional

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import transaction
from django.utils import timezone

from flow.exceptions import InvalidTransition, NotFound
from flow.models import Priority, QueueEntry, Stage, TriageRecord, Visit
from flow.services import directory, queue_store, sequencer

NEXT_STAGES = {
    'reception': {'triage'},
    'triage': {'doctor'},
    'doctor': {'billing', 'pharmacy', 'lab'},
    'pharmacy': {'billing'},
    'lab': {'billing'},
    'billing': set(),
}

TERMINAL_STAGE = 'billing'


def get_visit(visit_id) -> Visit:
    try:
        return Visit.objects.select_related('patient', 'assigned_doctor').get(pk=visit_id)
    except (Visit.DoesNotExist, DjangoValidationError, ValueError, TypeError):
        raise NotFound(f"Visit {visit_id} not found")


def create_visit(patient_id, priority: str = Priority.STANDARD) -> tuple[Visit, QueueEntry]:
    """Open a visit at reception and queue its first token."""
    queue_store.check_priority(priority)
    patient = directory.resolve_patient(patient_id)
    with transaction.atomic():
        visit = Visit.objects.create(
            visit_number=sequencer.next_visit_number(),
            patient=patient,
            current_stage=Stage.RECEPTION,
            stage_entered_at=timezone.now(),
        )
        entry = queue_store.insert(visit, Stage.RECEPTION, priority)
    return visit, entry


def carried_priority(visit: Visit) -> str:
    """Triage priority when recorded, otherwise the visit's latest entry priority."""
    triage_priority = (
        TriageRecord.objects.filter(visit=visit).values_list('priority', flat=True).first()
    )
    if triage_priority:
        return triage_priority
    last = visit.entries.order_by('-created_at', '-token_seq').values_list('priority', flat=True).first()
    return last or Priority.STANDARD


def advance(visit_id, to_stage: str, doctor_id=None, from_stage: Optional[str] = None) -> QueueEntry:
    """Move a visit to ``to_stage`` and queue it there.

    ``from_stage``, when given, must match the visit's current stage.  A
    ``doctor_id`` is validated and bound only when entering the doctor
    stage; it is ignored for every other stage.
    """
    to_stage = queue_store.check_stage(to_stage)
    if from_stage is not None:
        from_stage = queue_store.check_stage(from_stage)
    with transaction.atomic():
        visit = get_visit(visit_id)
        expected = visit.current_stage
        if from_stage is not None and from_stage != expected:
            raise InvalidTransition(f"Visit {visit.visit_number} is at {expected}, not {from_stage}")
        if to_stage not in NEXT_STAGES[expected]:
            raise InvalidTransition(f"Cannot advance visit {visit.visit_number} from {expected} to {to_stage}")

        bound_doctor_id = None
        if to_stage == Stage.DOCTOR and doctor_id not in (None, ''):
            bound_doctor_id = directory.resolve_doctor(doctor_id).pk

        fields = {'current_stage': to_stage, 'stage_entered_at': timezone.now()}
        if bound_doctor_id is not None:
            fields['assigned_doctor_id'] = bound_doctor_id
        if not Visit.objects.filter(pk=visit.pk, current_stage=expected).update(**fields):
            raise InvalidTransition(f"Visit {visit.visit_number} was already advanced")

        entry = queue_store.insert(visit, to_stage, carried_priority(visit), bound_doctor_id)
    return entry
