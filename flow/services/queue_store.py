"""
Queue store: per-stage queue entries and their status transitions.

Every status change is a compare-and-swap, i.e. a conditional ``UPDATE``
that only matches rows still in the expected status.  An update touching
zero rows means another station got there first, and the caller is told
so instead of the change being applied twice.

Ordering of a queue is ``priority`` descending, then ``created_at``
ascending, then token sequence.
"""
from __future__ import annotations

import logging
import uuid
from typing import Optional

from django.db import IntegrityError, transaction
from django.db.models import Q
from django.utils import timezone

from flow.exceptions import InvalidTransition, NotFound, ValidationFailed
from flow.models import PRIORITY_RANK, Priority, QueueEntry, Stage, Visit
from flow.services import sequencer

logger = logging.getLogger(__name__)

QUEUE_ORDER = ('-priority_rank', 'created_at', 'token_seq')


def check_stage(stage) -> str:
    if stage not in Stage.values:
        raise ValidationFailed(f"Unknown stage: {stage!r}")
    return Stage(stage).value


def check_priority(priority) -> str:
    if priority not in Priority.values:
        raise ValidationFailed(f"Unknown priority: {priority!r}")
    return Priority(priority).value


def _entry_pk(entry_id):
    if isinstance(entry_id, uuid.UUID):
        return entry_id
    try:
        return uuid.UUID(str(entry_id))
    except ValueError:
        raise NotFound(f"Queue entry {entry_id} not found")


def get_entry(entry_id) -> QueueEntry:
    try:
        return QueueEntry.objects.select_related('visit', 'visit__patient', 'doctor').get(pk=_entry_pk(entry_id))
    except QueueEntry.DoesNotExist:
        raise NotFound(f"Queue entry {entry_id} not found")


def insert(visit: Visit, stage: str, priority: str = Priority.STANDARD, doctor_id: Optional[int] = None) -> QueueEntry:
    """Issue a token and create a ``waiting`` entry for ``visit`` at ``stage``.

    Raises :class:`InvalidTransition` when the visit already has an active
    entry at that stage.
    """
    stage = check_stage(stage)
    priority = check_priority(priority)
    with transaction.atomic():
        if QueueEntry.objects.filter(visit=visit, stage=stage, status__in=QueueEntry.ACTIVE_STATUSES).exists():
            raise InvalidTransition(f"Visit {visit.visit_number} already has an active {stage} entry")
        token = sequencer.next_token(stage)
        try:
            with transaction.atomic():
                entry = QueueEntry.objects.create(
                    visit=visit,
                    stage=stage,
                    token_number=token.number,
                    token_date=token.day,
                    token_seq=token.seq,
                    priority=priority,
                    priority_rank=PRIORITY_RANK[priority],
                    doctor_id=doctor_id,
                )
        except IntegrityError:
            raise InvalidTransition(f"Visit {visit.visit_number} already has an active {stage} entry")
    return entry


def active_entries(stage: str, doctor_id: Optional[int] = None):
    """Queryset of waiting and called entries of a stage in queue order.

    With ``doctor_id`` the queue is narrowed to entries bound to that
    doctor plus the unassigned pool.
    """
    check_stage(stage)
    qs = QueueEntry.objects.filter(stage=stage, status__in=QueueEntry.ACTIVE_STATUSES)
    if doctor_id is not None:
        qs = qs.filter(Q(doctor__isnull=True) | Q(doctor_id=doctor_id))
    return qs.select_related('visit', 'visit__patient', 'doctor').order_by(*QUEUE_ORDER)


def list_entries(stage: str, doctor_id: Optional[int] = None) -> list[QueueEntry]:
    return list(active_entries(stage, doctor_id))


def board(stage: str) -> list[QueueEntry]:
    """Read-only snapshot for waiting-room displays; takes no locks."""
    return list(active_entries(stage))


def call_next(stage: str, doctor_id: Optional[int] = None) -> Optional[QueueEntry]:
    """Claim the first waiting entry of the scope, or return ``None``.

    Candidates are tried in queue order; a candidate taken by a concurrent
    caller between the read and the conditional update is skipped.
    """
    tried = set()
    while True:
        waiting = active_entries(stage, doctor_id).filter(status=QueueEntry.STATUS_WAITING).exclude(pk__in=tried)
        pk = waiting.values_list('pk', flat=True).first()
        if pk is None:
            return None
        tried.add(pk)
        now = timezone.now()
        with transaction.atomic():
            claimed = QueueEntry.objects.filter(pk=pk, status=QueueEntry.STATUS_WAITING).update(
                status=QueueEntry.STATUS_CALLED, called_at=now, updated_at=now
            )
            if not claimed:
                logger.debug('call_next lost race for %s', pk)
                continue
            if doctor_id is not None and stage == Stage.DOCTOR:
                _bind_doctor(pk, doctor_id)
        return get_entry(pk)


def _bind_doctor(pk, doctor_id: int) -> None:
    # claiming from the unassigned pool binds the entry and, if unset, the visit
    if QueueEntry.objects.filter(pk=pk, doctor__isnull=True).update(doctor_id=doctor_id):
        visit_id = QueueEntry.objects.values_list('visit_id', flat=True).get(pk=pk)
        Visit.objects.filter(pk=visit_id, assigned_doctor__isnull=True).update(assigned_doctor_id=doctor_id)


def _rejected(entry_id, action: str) -> InvalidTransition:
    entry = get_entry(entry_id)
    return InvalidTransition(f"Cannot {action} entry {entry.token_number} in status {entry.status}")


def call_specific(entry_id) -> QueueEntry:
    """Move a named entry from ``waiting`` to ``called``."""
    pk = _entry_pk(entry_id)
    now = timezone.now()
    updated = QueueEntry.objects.filter(pk=pk, status=QueueEntry.STATUS_WAITING).update(
        status=QueueEntry.STATUS_CALLED, called_at=now, updated_at=now
    )
    if not updated:
        raise _rejected(pk, 'call')
    return get_entry(pk)


def serve(entry_id) -> QueueEntry:
    """Move ``called`` to ``served``; serving a served entry changes nothing."""
    pk = _entry_pk(entry_id)
    now = timezone.now()
    updated = QueueEntry.objects.filter(pk=pk, status=QueueEntry.STATUS_CALLED).update(
        status=QueueEntry.STATUS_SERVED, served_at=now, updated_at=now
    )
    entry = get_entry(pk)
    if not updated and entry.status != QueueEntry.STATUS_SERVED:
        raise InvalidTransition(f"Cannot serve entry {entry.token_number} in status {entry.status}")
    return entry


def skip(entry_id) -> QueueEntry:
    """Move a waiting or called entry to ``skipped``."""
    pk = _entry_pk(entry_id)
    now = timezone.now()
    updated = QueueEntry.objects.filter(pk=pk, status__in=QueueEntry.ACTIVE_STATUSES).update(
        status=QueueEntry.STATUS_SKIPPED, skipped_at=now, updated_at=now
    )
    if not updated:
        raise _rejected(pk, 'skip')
    return get_entry(pk)
