import re
import uuid

import pytest

from flow.exceptions import InvalidTransition, NotFound, ValidationFailed
from flow.models import QueueEntry, Visit
from flow.services import queue_store, triage, visits
from flow.tests.factories import make_user

pytestmark = pytest.mark.django_db


def test_create_visit_opens_reception_entry(patient):
    visit, entry = visits.create_visit(patient.id)
    assert visit.current_stage == 'reception'
    assert re.fullmatch(r'V-HOSP-\d{6}-0001', visit.visit_number)
    assert entry.visit_id == visit.id
    assert entry.stage == 'reception'
    assert entry.status == 'waiting'
    assert entry.priority == 'standard'


def test_create_visit_with_priority(patient):
    _, entry = visits.create_visit(patient.id, 'emergency')
    assert entry.priority == 'emergency'
    assert entry.priority_rank == 2


def test_create_visit_rejects_unknown_patient(doctor_one):
    with pytest.raises(NotFound):
        visits.create_visit(999999)
    # a doctor is not a patient
    with pytest.raises(NotFound):
        visits.create_visit(doctor_one.id)
    assert Visit.objects.count() == 0


def test_create_visit_rejects_inactive_patient():
    inactive = make_user('gone', 'patient', is_active=False)
    with pytest.raises(NotFound):
        visits.create_visit(inactive.id)


def test_create_visit_rejects_unknown_priority(patient):
    with pytest.raises(ValidationFailed):
        visits.create_visit(patient.id, 'whenever')


def test_full_path_through_the_stations(patient, doctor_one):
    visit, _ = visits.create_visit(patient.id)
    triage_entry = visits.advance(visit.id, 'triage')
    assert triage_entry.stage == 'triage'
    doctor_entry = visits.advance(visit.id, 'doctor', doctor_id=doctor_one.id)
    assert doctor_entry.doctor_id == doctor_one.id
    lab_entry = visits.advance(visit.id, 'lab')
    assert lab_entry.doctor_id is None
    billing_entry = visits.advance(visit.id, 'billing')
    assert billing_entry.stage == 'billing'

    visit.refresh_from_db()
    assert visit.current_stage == 'billing'
    assert visit.assigned_doctor_id == doctor_one.id
    with pytest.raises(InvalidTransition):
        visits.advance(visit.id, 'pharmacy')


def test_advance_updates_stage_timestamp(patient):
    visit, _ = visits.create_visit(patient.id)
    before = visit.stage_entered_at
    visits.advance(visit.id, 'triage')
    visit.refresh_from_db()
    assert visit.current_stage == 'triage'
    assert visit.stage_entered_at >= before


def test_advance_does_not_serve_previous_entry(patient):
    visit, reception_entry = visits.create_visit(patient.id)
    visits.advance(visit.id, 'triage')
    reception_entry.refresh_from_db()
    assert reception_entry.status == 'waiting'


@pytest.mark.parametrize('target', ['doctor', 'billing', 'reception', 'lab'])
def test_illegal_edges_from_reception(patient, target):
    visit, _ = visits.create_visit(patient.id)
    with pytest.raises(InvalidTransition):
        visits.advance(visit.id, target)
    assert QueueEntry.objects.filter(visit=visit).count() == 1


def test_no_edge_back_to_an_earlier_stage(patient):
    visit, _ = visits.create_visit(patient.id)
    visits.advance(visit.id, 'triage')
    visits.advance(visit.id, 'doctor')
    with pytest.raises(InvalidTransition):
        visits.advance(visit.id, 'triage')


def test_repeated_advance_is_rejected(patient):
    visit, _ = visits.create_visit(patient.id)
    visits.advance(visit.id, 'triage')
    with pytest.raises(InvalidTransition):
        visits.advance(visit.id, 'triage')
    assert QueueEntry.objects.filter(visit=visit, stage='triage').count() == 1


def test_from_stage_must_match(patient):
    visit, _ = visits.create_visit(patient.id)
    visits.advance(visit.id, 'triage')
    with pytest.raises(InvalidTransition):
        visits.advance(visit.id, 'doctor', from_stage='reception')
    entry = visits.advance(visit.id, 'doctor', from_stage='triage')
    assert entry.stage == 'doctor'


def test_unknown_visit_and_stage(patient):
    with pytest.raises(NotFound):
        visits.advance(uuid.uuid4(), 'triage')
    with pytest.raises(NotFound):
        visits.get_visit('nope')
    visit, _ = visits.create_visit(patient.id)
    with pytest.raises(ValidationFailed):
        visits.advance(visit.id, 'radiology')


def test_unknown_doctor_rejects_advance(patient):
    visit, _ = visits.create_visit(patient.id)
    visits.advance(visit.id, 'triage')
    with pytest.raises(NotFound):
        visits.advance(visit.id, 'doctor', doctor_id=424242)
    visit.refresh_from_db()
    assert visit.current_stage == 'triage'


def test_doctor_binding_only_for_doctor_stage(patient, doctor_one):
    visit, _ = visits.create_visit(patient.id)
    entry = visits.advance(visit.id, 'triage', doctor_id=doctor_one.id)
    assert entry.doctor_id is None
    visit.refresh_from_db()
    assert visit.assigned_doctor_id is None


def test_stale_doctor_id_is_ignored_outside_doctor_stage(patient, doctor_one):
    visit, _ = visits.create_visit(patient.id)
    visits.advance(visit.id, 'triage', doctor_id=424242)
    visits.advance(visit.id, 'doctor', doctor_id=doctor_one.id)
    doctor_one.is_active = False
    doctor_one.save(update_fields=['is_active'])
    entry = visits.advance(visit.id, 'billing', doctor_id=doctor_one.id)
    assert entry.stage == 'billing'
    assert entry.doctor_id is None
    visit.refresh_from_db()
    assert visit.current_stage == 'billing'
    assert visit.assigned_doctor_id == doctor_one.id


def test_priority_carries_from_creation_then_triage(patient):
    visit, _ = visits.create_visit(patient.id, 'urgent')
    triage_entry = visits.advance(visit.id, 'triage')
    assert triage_entry.priority == 'urgent'
    triage.put_record(visit.id, {'priority': 'emergency'})
    doctor_entry = visits.advance(visit.id, 'doctor')
    assert doctor_entry.priority == 'emergency'
    billing_entry = visits.advance(visit.id, 'billing')
    assert billing_entry.priority == 'emergency'


def test_unassigned_doctor_entry_is_claimable(patient, doctor_two):
    visit, _ = visits.create_visit(patient.id)
    visits.advance(visit.id, 'triage')
    entry = visits.advance(visit.id, 'doctor')
    assert entry.doctor_id is None
    claimed = queue_store.call_next('doctor', doctor_two.id)
    assert claimed.id == entry.id
    visit.refresh_from_db()
    assert visit.assigned_doctor_id == doctor_two.id
