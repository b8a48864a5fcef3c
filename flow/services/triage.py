"""
Triage record store.

One record per visit, replaced wholesale on every save.  Only type and
range checks happen here; clinical plausibility is left to the staff.
Free text is stored exactly as typed; stations escape it when rendering.
"""
from __future__ import annotations

import numbers
from typing import Optional

from django.conf import settings
from django.db import transaction

from flow.exceptions import InvalidTransition, ValidationFailed
from flow.models import Priority, TriageRecord
from flow.services.visits import TERMINAL_STAGE, get_visit

VITAL_FIELDS = ('temperature', 'systolic', 'diastolic', 'heart_rate', 'spo2', 'weight', 'height')
TEXT_FIELDS = ('symptoms', 'allergies', 'current_meds', 'notes')
RECORD_FIELDS = VITAL_FIELDS + TEXT_FIELDS + ('pain_scale', 'priority')


def _is_number(value) -> bool:
    return isinstance(value, numbers.Real) and not isinstance(value, bool)


def clean_record(record: dict) -> dict:
    """Validate ``record`` and return the full field set to store.

    Fields absent from ``record`` are returned as ``None`` so that a save
    always overwrites the previous record completely.
    """
    unknown = set(record) - set(RECORD_FIELDS)
    if unknown:
        raise ValidationFailed(f"Unknown triage fields: {', '.join(sorted(unknown))}")

    cleaned = {}
    for name in VITAL_FIELDS:
        value = record.get(name)
        if value is not None and (not _is_number(value) or value < 0):
            raise ValidationFailed(f"{name} must be a non-negative number")
        cleaned[name] = value

    pain = record.get('pain_scale')
    if pain is not None:
        if not isinstance(pain, int) or isinstance(pain, bool) or not 0 <= pain <= settings.FLOW_PAIN_SCALE_MAX:
            raise ValidationFailed(f"pain_scale must be an integer between 0 and {settings.FLOW_PAIN_SCALE_MAX}")
    cleaned['pain_scale'] = pain

    priority = record.get('priority')
    if priority is not None and priority not in Priority.values:
        raise ValidationFailed(f"Unknown priority: {priority!r}")
    cleaned['priority'] = priority

    for name in TEXT_FIELDS:
        value = record.get(name)
        if value is not None and not isinstance(value, str):
            raise ValidationFailed(f"{name} must be text")
        cleaned[name] = value
    return cleaned


def get_record(visit_id) -> Optional[TriageRecord]:
    visit = get_visit(visit_id)
    return TriageRecord.objects.filter(visit=visit).first()


def put_record(visit_id, record: dict, recorded_by=None) -> TriageRecord:
    """Replace the triage record of a visit that has not reached billing."""
    cleaned = clean_record(record)
    with transaction.atomic():
        visit = get_visit(visit_id)
        if visit.current_stage == TERMINAL_STAGE:
            raise InvalidTransition(f"Visit {visit.visit_number} has reached billing")
        triage, _ = TriageRecord.objects.update_or_create(
            visit=visit,
            defaults={**cleaned, 'recorded_by': recorded_by},
        )
    return triage
