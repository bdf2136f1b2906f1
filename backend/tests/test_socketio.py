from echoarena import socketio


def _game_events(test_client):
    return [
        pkt['args'][0]
        for pkt in test_client.get_received('/ws')
        if pkt['name'] == 'game-event'
    ]


def test_socket_connect_and_join(sio_client):
    # Ensure we are connected to /ws
    if not sio_client.is_connected('/ws'):
        sio_client.connect(namespace='/ws')
    assert sio_client.is_connected('/ws')

    received = sio_client.get_received('/ws')
    assert any(pkt['name'] == 'connected' for pkt in received)

    sio_client.emit('join_room', {'room_id': 'ABC'}, namespace='/ws')
    received = sio_client.get_received('/ws')
    joined = [pkt for pkt in received if pkt['name'] == 'joined']
    assert joined and joined[0]['args'][0] == {'room': 'room:abc'}

    sio_client.emit('leave_room', {'room_id': 'abc'}, namespace='/ws')
    received = sio_client.get_received('/ws')
    assert any(pkt['name'] == 'left' for pkt in received)


def test_join_requires_room_id(sio_client):
    sio_client.get_received('/ws')
    sio_client.emit('join_room', {}, namespace='/ws')
    received = sio_client.get_received('/ws')
    assert any(pkt['name'] == 'error' for pkt in received)


def test_ping(sio_client):
    sio_client.get_received('/ws')
    sio_client.emit('ping', {'n': 1}, namespace='/ws')
    received = sio_client.get_received('/ws')
    assert any(pkt['name'] == 'pong' and pkt['args'][0] == {'n': 1} for pkt in received)


def test_game_events_reach_subscribed_room(flask_app, client, sio_client, users, question_bank, answers, new_room):
    room = new_room(users['alice'], max_stages=1)
    client.post('/api/rooms/join', json={'roomCode': room['code'], 'userId': users['bob']})

    sio_client.emit('join_room', {'room_id': room['id']}, namespace='/ws')
    sio_client.get_received('/ws')  # flush

    # A second socket watching another room hears nothing
    outsider = socketio.test_client(flask_app, namespace='/ws')
    outsider.emit('join_room', {'room_id': '00000000-0000-4000-8000-000000000000'}, namespace='/ws')
    outsider.get_received('/ws')

    client.post(f"/api/game/{room['id']}/start", json={})
    events = _game_events(sio_client)
    assert [e['type'] for e in events] == ['TURN_CHANGED']
    assert events[0]['stageNumber'] == 1
    assert events[0]['turn']['user_id'] == users['alice']

    loaded = client.get(f"/api/game/{room['id']}/question").get_json()
    events = _game_events(sio_client)
    assert [e['type'] for e in events] == ['QUESTION_LOADED']
    assert events[0]['turnId'] == loaded['turnId']
    assert 'correct_answer' not in events[0]['question']

    question_id = loaded['question']['id']
    client.post(f"/api/game/{room['id']}/answer", json={
        'stageNumber': 1,
        'userId': users['alice'],
        'questionId': question_id,
        'selectedAnswer': answers.correct(question_id),
    })
    events = _game_events(sio_client)
    assert [e['type'] for e in events] == ['ANSWER_SUBMITTED', 'TURN_CHANGED']
    assert events[0]['isCorrect'] is True
    assert events[1]['turn']['user_id'] == users['bob']

    client.post(f"/api/game/{room['id']}/next-stage", json={})
    events = _game_events(sio_client)
    assert [e['type'] for e in events] == ['GAME_FINISHED']

    assert _game_events(outsider) == []
    outsider.disconnect(namespace='/ws')


def test_elimination_and_stage_events(flask_app, client, sio_client, users, question_bank, answers, new_room):
    flask_app.config['STARTING_LIVES'] = 1
    room = new_room(users['alice'], max_stages=2)
    sio_client.emit('join_room', {'room_id': room['id']}, namespace='/ws')
    client.post(f"/api/game/{room['id']}/start", json={})
    sio_client.get_received('/ws')

    loaded = client.get(f"/api/game/{room['id']}/question").get_json()
    question_id = loaded['question']['id']
    client.post(f"/api/game/{room['id']}/answer", json={
        'stageNumber': 1,
        'userId': users['alice'],
        'questionId': question_id,
        'selectedAnswer': answers.wrong(question_id),
    })
    events = _game_events(sio_client)
    types = [e['type'] for e in events]
    assert types == ['QUESTION_LOADED', 'ANSWER_SUBMITTED', 'PLAYER_ELIMINATED', 'TURN_CHANGED']
    assert events[2]['username'] == 'alice'
    assert events[3]['turn'] is None
    assert events[3]['stageComplete'] is True


def test_stage_complete_event(client, sio_client, users, question_bank, answers, new_room):
    room = new_room(users['alice'], max_stages=2)
    sio_client.emit('join_room', {'room_id': room['id']}, namespace='/ws')
    client.post(f"/api/game/{room['id']}/start", json={})
    loaded = client.get(f"/api/game/{room['id']}/question").get_json()
    question_id = loaded['question']['id']
    client.post(f"/api/game/{room['id']}/answer", json={
        'stageNumber': 1,
        'userId': users['alice'],
        'questionId': question_id,
        'selectedAnswer': answers.correct(question_id),
    })
    sio_client.get_received('/ws')

    client.post(f"/api/game/{room['id']}/next-stage", json={})
    events = _game_events(sio_client)
    assert [e['type'] for e in events] == ['STAGE_COMPLETE', 'TURN_CHANGED']
    assert events[0]['stageNumber'] == 1
    assert events[0]['nextStage'] == 2
    assert events[1]['stageNumber'] == 2
