"""
Token sequencer.

Issues per-day, per-scope numbers from :class:`~flow.models.DailySequence`
rows.  The increment is a single ``UPDATE ... SET last_value = last_value + 1``
executed inside the caller's transaction, so two stations issuing tokens
for the same stage at the same time always receive different values and a
rolled back insert gives its number back instead of leaving a duplicate.
"""
from __future__ import annotations

import datetime
from typing import NamedTuple

from django.conf import settings
from django.db import transaction
from django.db.models import F
from django.utils import timezone

from flow.models import DailySequence
from flow.observability.metrics import tokens_issued

STAGE_CODES = {
    'reception': 'R',
    'triage': 'T',
    'doctor': 'D',
    'pharmacy': 'P',
    'lab': 'L',
    'billing': 'B',
}

VISIT_SCOPE = 'visit'


class Token(NamedTuple):
    number: str
    seq: int
    day: datetime.date


def next_value(scope: str, day: datetime.date | None = None) -> int:
    """Atomically increment and return the counter for ``scope`` on ``day``."""
    day = day or timezone.localdate()
    with transaction.atomic():
        seq, _ = DailySequence.objects.get_or_create(scope=scope, day=day)
        DailySequence.objects.filter(pk=seq.pk).update(last_value=F('last_value') + 1)
        return DailySequence.objects.values_list('last_value', flat=True).get(pk=seq.pk)


def format_token(stage: str, day: datetime.date, seq: int) -> str:
    # widths grow past 9999; ordering always uses the integer seq
    return f"{STAGE_CODES[stage]}-{day:%y%m%d}-{seq:04d}"


def next_token(stage: str, day: datetime.date | None = None) -> Token:
    """Issue the next token for ``stage``, e.g. ``T-261019-0007``."""
    day = day or timezone.localdate()
    seq = next_value(stage, day)
    # rolled back tokens are not counted
    transaction.on_commit(tokens_issued.labels(stage=stage).inc)
    return Token(format_token(stage, day, seq), seq, day)


def next_visit_number(day: datetime.date | None = None) -> str:
    day = day or timezone.localdate()
    seq = next_value(VISIT_SCOPE, day)
    return f"V-{settings.FLOW_SITE_CODE}-{day:%y%m%d}-{seq:04d}"
