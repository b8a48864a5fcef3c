import datetime

import pytest
from django.utils import timezone

from flow.models import DailySequence
from flow.services import sequencer

pytestmark = pytest.mark.django_db


def test_tokens_strictly_increase_within_a_day():
    tokens = [sequencer.next_token('triage') for _ in range(5)]
    assert [t.seq for t in tokens] == [1, 2, 3, 4, 5]
    assert len({t.number for t in tokens}) == 5
    today = timezone.localdate()
    assert tokens[0].number == f"T-{today:%y%m%d}-0001"
    assert all(t.day == today for t in tokens)


def test_each_stage_counts_separately():
    assert sequencer.next_token('reception').seq == 1
    assert sequencer.next_token('reception').seq == 2
    assert sequencer.next_token('doctor').seq == 1


def test_counter_restarts_on_a_new_day():
    first = sequencer.next_token('lab', day=datetime.date(2026, 3, 1))
    sequencer.next_token('lab', day=datetime.date(2026, 3, 1))
    next_day = sequencer.next_token('lab', day=datetime.date(2026, 3, 2))
    assert first.number == 'L-260301-0001'
    assert next_day.number == 'L-260302-0001'
    assert DailySequence.objects.get(scope='lab', day=datetime.date(2026, 3, 1)).last_value == 2


def test_token_width_grows_past_four_digits():
    assert sequencer.format_token('pharmacy', datetime.date(2026, 1, 5), 12345) == 'P-260105-12345'


def test_visit_numbers_use_site_code(settings):
    settings.FLOW_SITE_CODE = 'NORTH'
    day = datetime.date(2026, 10, 19)
    assert sequencer.next_visit_number(day) == 'V-NORTH-261019-0001'
    assert sequencer.next_visit_number(day) == 'V-NORTH-261019-0002'
    # visit numbers do not consume stage tokens
    assert sequencer.next_token('reception', day=day).seq == 1
