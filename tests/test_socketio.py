from conftest import TestConfig, build_test_app, connect_socket, register
from wordrush.services.words.scheduler import schedule_round_timeout


def start_round(client):
    return client.post('/api/game/start').get_json()['session_id']


def test_socket_connect_and_join(flask_app, client):
    register(client)
    sid = start_round(client)
    sio_client = connect_socket(flask_app, client)
    assert sio_client.is_connected('/ws')

    # Flush any initial events
    sio_client.get_received('/ws')

    sio_client.emit('join_session', {'session_id': sid}, namespace='/ws')
    received = sio_client.get_received('/ws')
    assert any(pkt['name'] == 'joined' and pkt['args'][0]['room'] == f'session:{sid}' for pkt in received)
    sio_client.disconnect(namespace='/ws')


def test_join_requires_session_id(sio_client):
    sio_client.get_received('/ws')
    sio_client.emit('join_session', {}, namespace='/ws')
    received = sio_client.get_received('/ws')
    assert any(pkt['name'] == 'error' for pkt in received)


def test_join_is_limited_to_the_session_owner(flask_app, client, sio_client):
    register(client)
    sid = start_round(client)

    # Anonymous socket
    sio_client.get_received('/ws')
    sio_client.emit('join_session', {'session_id': sid}, namespace='/ws')
    received = sio_client.get_received('/ws')
    assert [pkt['name'] for pkt in received] == ['error']

    # Another player's socket
    other = flask_app.test_client()
    register(other, 'bob')
    spy = connect_socket(flask_app, other)
    spy.get_received('/ws')
    spy.emit('join_session', {'session_id': sid}, namespace='/ws')
    received = spy.get_received('/ws')
    assert [pkt['name'] for pkt in received] == ['error']
    assert received[0]['args'][0]['code'] == 'session_not_found'

    client.post('/api/game/submit', json={'session_id': sid, 'words': ['РАД'], 'duration_seconds': 5})
    assert not any(pkt['name'] == 'round_finished' for pkt in spy.get_received('/ws'))
    spy.disconnect(namespace='/ws')


def test_submit_broadcasts_round_finished(flask_app, client):
    register(client)
    sid = start_round(client)
    sio_client = connect_socket(flask_app, client)

    sio_client.emit('join_session', {'session_id': sid}, namespace='/ws')
    sio_client.get_received('/ws')  # flush

    client.post('/api/game/submit', json={'session_id': sid, 'words': ['РАД', 'СУД'], 'duration_seconds': 45})
    events = sio_client.get_received('/ws')
    finished = [e for e in events if e['name'] == 'round_finished']
    assert finished
    assert finished[0]['args'][0] == {'session_id': sid, 'score': 300, 'gems_earned': 6}
    sio_client.disconnect(namespace='/ws')


def test_timeout_broadcasts_round_finished(flask_app, client):
    register(client)
    sid = start_round(client)
    sio_client = connect_socket(flask_app, client)
    sio_client.emit('join_session', {'session_id': sid}, namespace='/ws')
    sio_client.get_received('/ws')

    flask_app.config.update(ENABLE_SCHEDULER_IN_TESTS=True, ROUND_SECONDS=0, ROUND_GRACE_SEC=0)
    schedule_round_timeout(flask_app, sid)

    finished = [e for e in sio_client.get_received('/ws') if e['name'] == 'round_finished']
    assert [e['args'][0] for e in finished] == [{'session_id': sid, 'score': 0, 'gems_earned': 0}]
    assert client.get(f'/api/game/sessions/{sid}').get_json()['status'] == 'completed'
    sio_client.disconnect(namespace='/ws')


class TimeoutConfig(TestConfig):
    ENABLE_SCHEDULER_IN_TESTS = True
    ROUND_SECONDS = 0
    ROUND_GRACE_SEC = 0


def test_round_timeout_finalizes_unsubmitted_round():
    application = build_test_app(TimeoutConfig)
    client = application.test_client()
    register(client)
    started = client.post('/api/game/start').get_json()

    state = client.get(f"/api/game/sessions/{started['session_id']}").get_json()
    assert state['status'] == 'completed'
    assert state['score'] == 0
    assert state['words'] == []

    # The player's late submit gets the frozen timeout result
    res = client.post('/api/game/submit', json={'session_id': started['session_id'], 'words': ['РАД'], 'duration_seconds': 0})
    assert res.get_json()['score'] == 0
    assert client.get('/me').get_json()['total_games'] == 1
