from datetime import timedelta
from io import StringIO

import pytest
from django.contrib.auth import authenticate
from django.core.management import call_command
from django.utils import timezone

from flow.models import QueueEntry, User
from flow.services import queue_store
from flow.tests.factories import make_visit

pytestmark = pytest.mark.django_db


def _called_entry(patient, stage, minutes_ago):
    entry = queue_store.insert(make_visit(patient, stage), stage)
    queue_store.call_specific(entry.id)
    QueueEntry.objects.filter(pk=entry.pk).update(called_at=timezone.now() - timedelta(minutes=minutes_ago))
    return entry


def test_sweep_skips_only_stale_called_entries(patient):
    stale = _called_entry(patient, 'triage', 45)
    fresh = _called_entry(patient, 'triage', 5)
    waiting = queue_store.insert(make_visit(patient, 'triage'), 'triage')

    out = StringIO()
    call_command('sweep_called_entries', stdout=out)

    statuses = dict(QueueEntry.objects.values_list('id', 'status'))
    assert statuses[stale.id] == 'skipped'
    assert statuses[fresh.id] == 'called'
    assert statuses[waiting.id] == 'waiting'
    assert 'Skipped 1 stale entries' in out.getvalue()


def test_sweep_dry_run_and_stage_filter(patient):
    triage_entry = _called_entry(patient, 'triage', 90)
    lab_entry = _called_entry(patient, 'lab', 90)

    out = StringIO()
    call_command('sweep_called_entries', '--dry-run', stdout=out)
    assert f'would skip {triage_entry.token_number}' in out.getvalue()
    assert QueueEntry.objects.filter(status='skipped').count() == 0

    call_command('sweep_called_entries', '--stage', 'lab', '--minutes', '60', stdout=StringIO())
    assert QueueEntry.objects.get(pk=lab_entry.pk).status == 'skipped'
    assert QueueEntry.objects.get(pk=triage_entry.pk).status == 'called'


def test_ensure_station_users_is_idempotent():
    call_command('ensure_station_users', '--password', 'demo-pass-1', stdout=StringIO())
    call_command('ensure_station_users', '--password', 'demo-pass-2', stdout=StringIO())
    assert User.objects.filter(username='reception1', role='reception').count() == 1
    assert set(User.objects.filter(role='doctor').values_list('username', flat=True)) == {'doctor1', 'doctor2'}
    assert authenticate(username='triage1', password='demo-pass-2') is not None
