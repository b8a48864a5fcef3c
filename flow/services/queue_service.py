"""
Queue service: the operations station terminals call.

Each function composes the sequencer, queue store, visit state machine and
triage store, then records the outcome (domain event log line, Prometheus
counter, board refresh push) and returns JSON-ready camelCase data.
Errors from the core are re-raised unchanged after being recorded.
"""
from __future__ import annotations

from contextlib import contextmanager
from typing import Optional

from django.conf import settings
from django.core.cache import cache

from flow.exceptions import FlowError
from flow.models import QueueEntry, TriageRecord, Visit
from flow.observability.logging import log_flow_event
from flow.observability.metrics import record_transition
from flow.services import directory, notify, queue_store, triage, visits


def _iso(value):
    return value.isoformat() if value else None


def format_entry(entry: QueueEntry) -> dict:
    visit = entry.visit
    return {
        'id': str(entry.id),
        'visitId': str(entry.visit_id),
        'visitNumber': visit.visit_number,
        'patientId': visit.patient_id,
        'patientName': directory.display_name(visit.patient),
        'stage': entry.stage,
        'tokenNumber': entry.token_number,
        'priority': entry.priority,
        'status': entry.status,
        'doctorId': entry.doctor_id,
        'createdAt': _iso(entry.created_at),
        'calledAt': _iso(entry.called_at),
        'servedAt': _iso(entry.served_at),
        'skippedAt': _iso(entry.skipped_at),
    }


def format_board_entry(entry: QueueEntry) -> dict:
    # displays are public: token and status only, no patient identity
    return {
        'id': str(entry.id),
        'tokenNumber': entry.token_number,
        'stage': entry.stage,
        'priority': entry.priority,
        'status': entry.status,
        'doctorId': entry.doctor_id,
        'doctorName': directory.display_name(entry.doctor) if entry.doctor_id else None,
        'calledAt': _iso(entry.called_at),
    }


def format_visit(visit: Visit) -> dict:
    entries = visit.entries.select_related('visit', 'visit__patient').order_by('created_at', 'token_seq')
    return {
        'id': str(visit.id),
        'visitNumber': visit.visit_number,
        'patientId': visit.patient_id,
        'patientName': directory.display_name(visit.patient),
        'currentStage': visit.current_stage,
        'assignedDoctorId': visit.assigned_doctor_id,
        'createdAt': _iso(visit.created_at),
        'stageEnteredAt': _iso(visit.stage_entered_at),
        'entries': [format_entry(e) for e in entries],
    }


def format_triage(record: TriageRecord) -> dict:
    return {
        'visitId': str(record.visit_id),
        'temperature': record.temperature,
        'systolic': record.systolic,
        'diastolic': record.diastolic,
        'heartRate': record.heart_rate,
        'spo2': record.spo2,
        'weight': record.weight,
        'height': record.height,
        'symptoms': record.symptoms,
        'allergies': record.allergies,
        'currentMeds': record.current_meds,
        'painScale': record.pain_scale,
        'priority': record.priority,
        'notes': record.notes,
        'recordedBy': record.recorded_by_id,
        'updatedAt': _iso(record.updated_at),
    }


@contextmanager
def _tracked(operation: str, **fields):
    """Count and log a rejected operation, then let the error propagate."""
    try:
        yield
    except FlowError as exc:
        record_transition(operation, 'rejected')
        log_flow_event(operation, result='rejected', code=exc.code, reason=exc.message, **fields)
        raise


def _actor_id(actor):
    return getattr(actor, 'pk', None)


# -----------------------------------------------------------------------------
# Visits
# -----------------------------------------------------------------------------

def create_visit(patient_id, priority: str = 'standard', *, actor=None) -> dict:
    with _tracked('create_visit', patient_id=patient_id):
        visit, entry = visits.create_visit(patient_id, priority)
    record_transition('create_visit')
    log_flow_event(
        'visit_created',
        visit_id=str(visit.id),
        visit_number=visit.visit_number,
        token_number=entry.token_number,
        priority=entry.priority,
        actor_id=_actor_id(actor),
    )
    notify.refresh_boards(entry.stage)
    return {'visit': format_visit(visit), 'entry': format_entry(entry)}


def get_visit(visit_id) -> dict:
    return format_visit(visits.get_visit(visit_id))


def advance_visit(visit_id, to_stage: str, doctor_id=None, from_stage: Optional[str] = None, *, actor=None) -> dict:
    with _tracked('advance', visit_id=str(visit_id), to_stage=to_stage):
        entry = visits.advance(visit_id, to_stage, doctor_id=doctor_id, from_stage=from_stage)
    record_transition('advance')
    log_flow_event(
        'visit_advanced',
        visit_id=str(entry.visit_id),
        to_stage=entry.stage,
        token_number=entry.token_number,
        doctor_id=entry.doctor_id,
        actor_id=_actor_id(actor),
    )
    notify.refresh_boards(entry.stage)
    return format_entry(entry)


def list_available_doctors(q: Optional[str] = None) -> list[dict]:
    key = f'flow:doctors:q={q or ""}'
    data = cache.get(key)
    if data is None:
        data = directory.list_available_doctors(q=q)
        cache.set(key, data, settings.FLOW_DOCTOR_CACHE_SECONDS)
    return data


# -----------------------------------------------------------------------------
# Queue
# -----------------------------------------------------------------------------

def list_queue(stage: str, doctor_id=None) -> list[dict]:
    return [format_entry(e) for e in queue_store.list_entries(stage, doctor_id)]


def get_board(stage: str) -> list[dict]:
    return [format_board_entry(e) for e in queue_store.board(stage)]


def call_next(stage: str, doctor_id=None, *, actor=None) -> Optional[dict]:
    with _tracked('call_next', stage=stage, doctor_id=doctor_id):
        entry = queue_store.call_next(stage, doctor_id)
    if entry is None:
        record_transition('call_next', 'empty')
        return None
    record_transition('call_next')
    log_flow_event(
        'entry_called',
        entry_id=str(entry.id),
        token_number=entry.token_number,
        stage=entry.stage,
        doctor_id=entry.doctor_id,
        actor_id=_actor_id(actor),
    )
    notify.refresh_boards(entry.stage)
    return format_entry(entry)


def call_specific(entry_id, *, actor=None) -> dict:
    with _tracked('call_specific', entry_id=str(entry_id)):
        entry = queue_store.call_specific(entry_id)
    record_transition('call_specific')
    log_flow_event('entry_called', entry_id=str(entry.id), token_number=entry.token_number, stage=entry.stage, actor_id=_actor_id(actor))
    notify.refresh_boards(entry.stage)
    return format_entry(entry)


def serve_entry(entry_id, *, actor=None) -> dict:
    with _tracked('serve', entry_id=str(entry_id)):
        entry = queue_store.serve(entry_id)
    record_transition('serve')
    log_flow_event('entry_served', entry_id=str(entry.id), token_number=entry.token_number, stage=entry.stage, actor_id=_actor_id(actor))
    notify.refresh_boards(entry.stage)
    return format_entry(entry)


def skip_entry(entry_id, *, actor=None) -> dict:
    with _tracked('skip', entry_id=str(entry_id)):
        entry = queue_store.skip(entry_id)
    record_transition('skip')
    log_flow_event('entry_skipped', entry_id=str(entry.id), token_number=entry.token_number, stage=entry.stage, actor_id=_actor_id(actor))
    notify.refresh_boards(entry.stage)
    return format_entry(entry)


# -----------------------------------------------------------------------------
# Triage
# -----------------------------------------------------------------------------

def get_triage(visit_id) -> Optional[dict]:
    record = triage.get_record(visit_id)
    return format_triage(record) if record else None


def put_triage(visit_id, record: dict, *, actor=None) -> dict:
    with _tracked('put_triage', visit_id=str(visit_id)):
        saved = triage.put_record(visit_id, record, recorded_by=actor)
    record_transition('put_triage')
    log_flow_event('triage_saved', visit_id=str(saved.visit_id), priority=saved.priority, actor_id=_actor_id(actor))
    return format_triage(saved)
