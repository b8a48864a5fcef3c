import json

import pytest
from asgiref.sync import async_to_sync, sync_to_async
from channels.routing import URLRouter
from channels.testing import WebsocketCommunicator

from flow.realtime.routing import websocket_urlpatterns
from flow.services import notify, queue_service
from flow.tests.factories import make_user


def test_board_socket_receives_refresh_for_its_stage():
    async def scenario():
        communicator = WebsocketCommunicator(URLRouter(websocket_urlpatterns), '/ws/board/triage/')
        connected, _ = await communicator.connect()
        assert connected
        welcome = json.loads(await communicator.receive_from())
        await sync_to_async(notify._send)(('lab', 'triage'))
        event = json.loads(await communicator.receive_from())
        nothing_else = await communicator.receive_nothing()
        await communicator.disconnect()
        return welcome, event, nothing_else

    welcome, event, nothing_else = async_to_sync(scenario)()
    assert welcome == {'type': 'welcome', 'stage': 'triage'}
    assert event['type'] == 'board.refresh'
    assert event['stage'] == 'triage'
    assert isinstance(event['version'], int)
    assert nothing_else


def test_board_socket_rejects_unknown_stage():
    async def scenario():
        communicator = WebsocketCommunicator(URLRouter(websocket_urlpatterns), '/ws/board/radiology/')
        connected, _ = await communicator.connect()
        return connected

    assert async_to_sync(scenario)() is False


@pytest.mark.django_db
def test_mutations_push_after_commit(monkeypatch, django_capture_on_commit_callbacks):
    sent = []
    monkeypatch.setattr(notify, '_send', lambda stages: sent.append(stages))
    patient = make_user('patient1', 'patient')

    with django_capture_on_commit_callbacks(execute=True):
        created = queue_service.create_visit(patient.id)
    assert sent == [('reception',)]

    with django_capture_on_commit_callbacks(execute=True):
        queue_service.advance_visit(created['visit']['id'], 'triage')
    assert sent[-1] == ('triage',)

    # reads never push
    queue_service.get_board('triage')
    assert len(sent) == 2
