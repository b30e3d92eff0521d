def _names(received):
    return [pkt['name'] for pkt in received]


def _first(received, name):
    for pkt in received:
        if pkt['name'] == name:
            return pkt['args'][0] if pkt['args'] else None
    raise AssertionError(f"{name} not in {_names(received)}")


def test_connect_requests_fingerprint(sio_factory):
    sio_client = sio_factory()
    assert sio_client.is_connected()
    assert 'requestFingerprint' in _names(sio_client.get_received())


def test_create_and_join_room(sio_factory):
    host = sio_factory()
    guest = sio_factory()
    host.get_received()
    guest.get_received()

    host.emit('createRoom', {'roomId': 'ABC123'})
    assert _first(host.get_received(), 'roomCreated') == {'roomId': 'ABC123'}

    host.emit('timeControlSet', {'roomId': 'ABC123', 'timeControl': '5+0'})
    guest.emit('joinRoom', {'roomId': 'ABC123'})
    received = guest.get_received()
    assert _names(received) == ['roomJoined', 'timeControlSync']
    assert _first(received, 'timeControlSync') == {'timeControl': '5+0'}
    assert 'opponentJoined' in _names(host.get_received())


def test_room_errors_go_to_sender_only(sio_factory):
    a = sio_factory()
    b = sio_factory()
    c = sio_factory()
    for cl in (a, b, c):
        cl.get_received()

    a.emit('createRoom', {'roomId': 'ABC123'})
    b.emit('createRoom', {'roomId': 'ABC123'})
    assert _first(b.get_received(), 'error') == {'message': 'Room already exists', 'kind': 'room_exists'}

    c.emit('joinRoom', {'roomId': 'MISSING'})
    assert _first(c.get_received(), 'error')['kind'] == 'room_not_found'

    b.emit('joinRoom', {'roomId': 'ABC123'})
    c.emit('joinRoom', {'roomId': 'ABC123'})
    assert _first(c.get_received(), 'error') == {'message': 'Room is full', 'kind': 'room_full'}
    assert 'error' not in _names(a.get_received())


def test_move_relay_between_occupants(sio_factory):
    white = sio_factory()
    black = sio_factory()
    outsider = sio_factory()
    white.emit('createRoom', {'roomId': 'ABC123'})
    black.emit('joinRoom', {'roomId': 'ABC123'})
    for cl in (white, black, outsider):
        cl.get_received()

    move = {'roomId': 'ABC123', 'from': [6, 4], 'to': [4, 4], 'moveType': 'normal',
            'whiteTime': 299, 'blackTime': 300, 'timestamp': 1}
    white.emit('move', move)
    payload = _first(black.get_received(), 'opponentMove')
    assert payload['from'] == [6, 4]
    assert payload['whiteTime'] == 299
    assert 'roomId' not in payload
    assert white.get_received() == []
    assert outsider.get_received() == []

    # Outsider naming the room is silently dropped
    outsider.emit('move', move)
    assert white.get_received() == [] and black.get_received() == []
    assert outsider.get_received() == []


def test_malformed_payloads_are_ignored(sio_factory):
    sio_client = sio_factory()
    sio_client.get_received()
    sio_client.emit('createRoom', 'not-a-dict')
    sio_client.emit('joinRoom', {'roomId': 42})
    sio_client.emit('move', None)
    sio_client.emit('leaveRoom', {})
    assert sio_client.get_received() == []
    assert sio_client.is_connected()


def test_find_match_pairs_two_clients(sio_factory):
    a = sio_factory()
    b = sio_factory()
    a.get_received()
    b.get_received()

    a.emit('findMatch', {'timeControl': '3+0', 'ignoreTime': False})
    assert 'searching' in _names(a.get_received())
    b.emit('findMatch', {'timeControl': '10+0', 'ignoreTime': True})

    found_a = _first(a.get_received(), 'matchFound')
    found_b = _first(b.get_received(), 'matchFound')
    assert found_a['roomId'] == found_b['roomId']
    assert found_a['color'] == 'white' and found_b['color'] == 'black'
    assert found_a['timeControl'] == found_b['timeControl'] == '3+0'

    a.emit('gameOver', {'roomId': found_a['roomId'], 'reason': 'resign'})
    assert _first(b.get_received(), 'gameOver') == {'reason': 'resign'}


def test_cancel_matchmaking_then_disconnect(flask_app, sio_factory):
    sio_client = sio_factory()
    sio_client.emit('findMatch', {'timeControl': '5+0'})
    sio_client.emit('cancelMatchmaking')
    coordinator = flask_app.extensions['coordinator']
    assert len(coordinator.queue) == 0
    sio_client.disconnect()
    assert len(coordinator.registry) == 0


def test_leave_and_disconnect_notify_opponent(flask_app, sio_factory):
    a = sio_factory()
    b = sio_factory()
    a.emit('createRoom', {'roomId': 'ABC123'})
    b.emit('joinRoom', {'roomId': 'ABC123'})
    a.get_received()
    b.get_received()

    a.emit('leaveRoom', {'roomId': 'ABC123'})
    assert 'opponentDisconnected' in _names(b.get_received())
    coordinator = flask_app.extensions['coordinator']
    assert coordinator.rooms.get('ABC123').players != []

    # Transport close after the explicit leave must not signal again
    a.disconnect()
    assert 'opponentDisconnected' not in _names(b.get_received())

    b.disconnect()
    assert coordinator.rooms.get('ABC123') is None


def test_rematch_signals(sio_factory):
    a = sio_factory()
    b = sio_factory()
    a.emit('createRoom', {'roomId': 'R1'})
    b.emit('joinRoom', {'roomId': 'R1'})
    a.get_received()
    b.get_received()

    a.emit('rematchRequest', {'roomId': 'R1'})
    assert 'rematchRequest' in _names(b.get_received())
    b.emit('rematchAccept', {'roomId': 'R1'})
    assert 'rematchAccepted' in _names(a.get_received())
    b.emit('rematchDecline', {'roomId': 'R1'})
    assert 'rematchDeclined' in _names(a.get_received())
