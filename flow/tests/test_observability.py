import json
import logging

import pytest
from django.db import transaction
from prometheus_client import REGISTRY

from flow.exceptions import InvalidTransition
from flow.observability.logging import SanitizedJSONFormatter, log_flow_event
from flow.services import queue_service, queue_store, sequencer
from flow.tests.factories import make_user, make_visit

pytestmark = pytest.mark.django_db


def _record(**extra):
    record = logging.LogRecord('flow.events', logging.INFO, __file__, 1, 'Flow event: %s', ('triage_saved',), None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_formatter_redacts_clinical_text():
    line = SanitizedJSONFormatter().format(_record(event='triage_saved', symptoms='chest pain', visit_id='v1'))
    data = json.loads(line)
    assert data['message'] == 'Flow event: triage_saved'
    assert data['symptoms'] == '[REDACTED]'
    assert data['visit_id'] == 'v1'


def test_formatter_redacts_nested_keys():
    line = SanitizedJSONFormatter().format(_record(payload={'password': 'x', 'stage': 'lab'}))
    assert json.loads(line)['payload'] == {'password': '[REDACTED]', 'stage': 'lab'}


class _Collect(logging.Handler):
    def __init__(self):
        super().__init__(logging.DEBUG)
        self.records = []

    def emit(self, record):
        self.records.append(record)


def test_log_flow_event_levels():
    events = logging.getLogger('flow.events')
    handler = _Collect()
    previous = events.level
    events.setLevel(logging.INFO)
    events.addHandler(handler)
    try:
        log_flow_event('entry_called', entry_id='e1')
        log_flow_event('advance', result='rejected', code='invalid_transition')
    finally:
        events.removeHandler(handler)
        events.setLevel(previous)
    levels = [(r.event, r.levelname) for r in handler.records]
    assert levels == [('entry_called', 'INFO'), ('advance', 'WARNING')]


def _sample(name, labels):
    return REGISTRY.get_sample_value(name, labels) or 0.0


def test_operations_are_counted(django_capture_on_commit_callbacks):
    patient = make_user('patient1', 'patient')
    before_ok = _sample('flow_queue_transitions_total', {'operation': 'call_next', 'result': 'success'})
    before_empty = _sample('flow_queue_transitions_total', {'operation': 'call_next', 'result': 'empty'})
    before_tokens = _sample('flow_tokens_issued_total', {'stage': 'reception'})

    with django_capture_on_commit_callbacks(execute=True):
        queue_service.create_visit(patient.id)
    queue_service.call_next('reception')
    queue_service.call_next('reception')

    assert _sample('flow_queue_transitions_total', {'operation': 'call_next', 'result': 'success'}) == before_ok + 1
    assert _sample('flow_queue_transitions_total', {'operation': 'call_next', 'result': 'empty'}) == before_empty + 1
    assert _sample('flow_tokens_issued_total', {'stage': 'reception'}) == before_tokens + 1


def test_rolled_back_token_is_not_counted(django_capture_on_commit_callbacks):
    before = _sample('flow_tokens_issued_total', {'stage': 'lab'})
    with django_capture_on_commit_callbacks(execute=True) as callbacks:
        with pytest.raises(RuntimeError):
            with transaction.atomic():
                sequencer.next_token('lab')
                raise RuntimeError('insert failed')
    assert callbacks == []
    assert _sample('flow_tokens_issued_total', {'stage': 'lab'}) == before


def test_duplicate_insert_does_not_count_a_token(django_capture_on_commit_callbacks):
    visit = make_visit(make_user('patient1', 'patient'))
    with django_capture_on_commit_callbacks(execute=True):
        queue_store.insert(visit, 'pharmacy')
    before = _sample('flow_tokens_issued_total', {'stage': 'pharmacy'})
    with django_capture_on_commit_callbacks(execute=True) as callbacks:
        with pytest.raises(InvalidTransition):
            queue_store.insert(visit, 'pharmacy')
    assert callbacks == []
    assert _sample('flow_tokens_issued_total', {'stage': 'pharmacy'}) == before
