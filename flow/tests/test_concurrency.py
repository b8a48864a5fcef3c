"""
Concurrency properties of the queue core, exercised with real threads.

Each worker thread gets its own database connection to the file-backed
SQLite test database, so these tests need ``transaction=True``.
"""
import threading
from concurrent.futures import ThreadPoolExecutor

import pytest
from django.db import connections

from flow.exceptions import InvalidTransition
from flow.models import QueueEntry
from flow.services import queue_store, sequencer, visits
from flow.tests.factories import make_user, make_visit

pytestmark = pytest.mark.django_db(transaction=True)

WORKERS = 8


def run_together(func, count=WORKERS):
    """Start ``count`` calls of ``func`` at the same instant; return results or exceptions."""
    barrier = threading.Barrier(count)

    def worker(_):
        barrier.wait()
        try:
            return func()
        except Exception as exc:
            return exc
        finally:
            connections.close_all()

    with ThreadPoolExecutor(max_workers=count) as pool:
        return list(pool.map(worker, range(count)))


def test_concurrent_token_issuance_never_duplicates():
    tokens = run_together(lambda: sequencer.next_token('reception'))
    assert not [t for t in tokens if isinstance(t, Exception)]
    assert sorted(t.seq for t in tokens) == list(range(1, WORKERS + 1))
    assert len({t.number for t in tokens}) == WORKERS


def test_concurrent_inserts_get_distinct_increasing_tokens():
    patient = make_user('patient1', 'patient')
    pending = [make_visit(patient) for _ in range(WORKERS)]
    lock = threading.Lock()

    def insert_one():
        with lock:
            visit = pending.pop()
        return queue_store.insert(visit, 'reception')

    entries = run_together(insert_one)
    assert not [e for e in entries if isinstance(e, Exception)]
    stored = list(QueueEntry.objects.filter(stage='reception').order_by('token_seq'))
    assert [e.token_seq for e in stored] == list(range(1, WORKERS + 1))
    assert len({e.token_number for e in stored}) == WORKERS


def test_concurrent_call_next_hands_out_each_entry_once():
    patient = make_user('patient1', 'patient')
    inserted = {queue_store.insert(make_visit(patient), 'triage').id for _ in range(WORKERS)}

    results = run_together(lambda: queue_store.call_next('triage'))
    assert not [r for r in results if isinstance(r, Exception)]
    claimed = [r.id for r in results if r is not None]
    assert len(claimed) == WORKERS
    assert set(claimed) == inserted
    assert queue_store.call_next('triage') is None
    assert QueueEntry.objects.filter(stage='triage', status='called').count() == WORKERS


def test_more_callers_than_entries_get_none():
    patient = make_user('patient1', 'patient')
    for _ in range(3):
        queue_store.insert(make_visit(patient), 'lab')

    results = run_together(lambda: queue_store.call_next('lab'))
    claimed = [r for r in results if r is not None and not isinstance(r, Exception)]
    assert len(claimed) == 3
    assert len({r.id for r in claimed}) == 3
    assert results.count(None) == WORKERS - 3


def test_double_advance_has_one_winner():
    patient = make_user('patient1', 'patient')
    visit, _ = visits.create_visit(patient.id)

    results = run_together(lambda: visits.advance(visit.id, 'triage'), count=2)
    winners = [r for r in results if isinstance(r, QueueEntry)]
    losers = [r for r in results if isinstance(r, InvalidTransition)]
    assert len(winners) == 1
    assert len(losers) == 1
    assert QueueEntry.objects.filter(visit=visit, stage='triage').count() == 1
    visit.refresh_from_db()
    assert visit.current_stage == 'triage'
