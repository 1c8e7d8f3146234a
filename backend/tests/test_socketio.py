def _events(test_client, name):
    return [pkt['args'][0] for pkt in test_client.get_received() if pkt['name'] == name]


def _create(test_client, room_id='R1', low=1, high=75):
    return test_client.emit(
        'host:createRoom', {'roomId': room_id, 'minNumber': low, 'maxNumber': high}, callback=True
    )


def test_create_room_ack(sio_factory, app_registry):
    host = sio_factory()
    ack = _create(host)
    assert ack['ok'] is True
    assert ack['rejoin'] is False
    assert ack['room']['roomId'] == 'R1'
    assert ack['room']['drawnNumbers'] == []
    assert 'R1' in app_registry.rooms


def test_create_room_rejects_bad_range(sio_factory, app_registry):
    host = sio_factory()
    ack = _create(host, low=10, high=1)
    assert ack['ok'] is False
    assert ack['message']
    assert app_registry.rooms == {}


def test_second_host_is_refused(sio_factory):
    first, second = sio_factory(), sio_factory()
    assert _create(first)['ok'] is True
    ack = _create(second)
    assert ack == {'ok': False, 'message': 'This room already has a host.'}


def test_player_join_save_and_rejoin_with_key(sio_factory):
    host = sio_factory()
    _create(host)
    host.get_received()

    alice = sio_factory()
    joined = alice.emit('player:joinRoom', {'roomId': 'R1', 'name': 'Alice'}, callback=True)
    assert joined['ok'] is True
    assert joined['rejoin'] is False
    assert joined['cardNumbers'] is None
    key = joined['secretKey']
    assert len(key) == 4 and key.isdigit()
    assert joined['room'] == {'roomId': 'R1', 'minNumber': 1, 'maxNumber': 75, 'drawnNumbers': []}
    assert _events(host, 'room:playersUpdate') == [['Alice']]

    card = [[5, 18, 33, 49, 61], [2, 20, 'FREE', 50, 70]]
    saved = alice.emit('player:saveCard', {'roomId': 'R1', 'secretKey': key, 'cardNumbers': card}, callback=True)
    assert saved == {'ok': True}

    alice.disconnect()
    assert _events(host, 'room:playersUpdate') == [[]]

    again = sio_factory()
    resumed = again.emit('player:joinRoom', {'roomId': 'R1', 'name': 'Alice', 'secretKey': key}, callback=True)
    assert resumed['ok'] is True
    assert resumed['rejoin'] is True
    assert resumed['secretKey'] == key
    assert resumed['cardNumbers'] == card


def test_join_errors(sio_factory):
    player = sio_factory()
    missing = player.emit('player:joinRoom', {'roomId': 'nope', 'name': 'Alice'}, callback=True)
    assert missing['ok'] is False

    host = sio_factory()
    _create(host)
    blank = player.emit('player:joinRoom', {'roomId': 'R1', 'name': '  '}, callback=True)
    assert blank == {'ok': False, 'message': 'Please enter a name.'}


def test_save_card_unknown_player(sio_factory):
    player = sio_factory()
    ack = player.emit('player:saveCard', {'roomId': 'R1', 'secretKey': '1234', 'cardNumbers': []}, callback=True)
    assert ack == {'ok': False}


def test_draw_broadcasts_to_room(sio_factory, app_registry):
    host = sio_factory()
    _create(host)
    player = sio_factory()
    player.emit('player:joinRoom', {'roomId': 'R1', 'name': 'Bob'}, callback=True)
    host.get_received()
    player.get_received()

    for n in (17, 17, 42):
        assert host.emit('host:drawNumber', {'roomId': 'R1', 'number': n}, callback=True) == {'ok': True}

    assert app_registry.get('R1').drawn_numbers == [17, 42]
    drawn = _events(player, 'number:drawn')
    assert drawn == [
        {'number': 17, 'drawnNumbers': [17]},
        {'number': 17, 'drawnNumbers': [17]},
        {'number': 42, 'drawnNumbers': [17, 42]},
    ]
    assert len(_events(host, 'number:drawn')) == 3


def test_draw_by_non_host_is_rejected(sio_factory, app_registry):
    host = sio_factory()
    _create(host)
    intruder = sio_factory()
    ack = intruder.emit('host:drawNumber', {'roomId': 'R1', 'number': 5}, callback=True)
    assert ack == {'ok': False, 'message': 'You are not the host of this room.'}
    assert app_registry.get('R1').drawn_numbers == []

    bad = host.emit('host:drawNumber', {'roomId': 'R1', 'number': 'five'}, callback=True)
    assert bad == {'ok': False, 'message': 'Invalid number.'}


def test_bingo_reaches_host_only(sio_factory):
    host = sio_factory()
    _create(host)
    player = sio_factory()
    player.emit('player:joinRoom', {'roomId': 'R1', 'name': 'Carol'}, callback=True)
    host.get_received()
    player.get_received()

    player.emit('player:bingo', {'roomId': 'R1', 'name': 'Carol'})
    assert _events(host, 'player:bingo') == [{'name': 'Carol'}]
    assert _events(player, 'player:bingo') == []


def test_host_disconnect_and_rejoin_keeps_state(sio_factory, app_registry):
    host = sio_factory()
    _create(host)
    player = sio_factory()
    player.emit('player:joinRoom', {'roomId': 'R1', 'name': 'Dana'}, callback=True)
    host.emit('host:drawNumber', {'roomId': 'R1', 'number': 9}, callback=True)

    host.disconnect()
    room = app_registry.get('R1')
    assert room.host_connection_id is None
    assert room.drawn_numbers == [9]

    new_host = sio_factory()
    ack = _create(new_host, high=90)
    assert ack['ok'] is True
    assert ack['rejoin'] is True
    assert ack['room']['drawnNumbers'] == [9]
    assert ack['room']['maxNumber'] == 90
    assert [p['name'] for p in ack['room']['players']] == ['Dana']
    assert _events(new_host, 'room:playersUpdate') == [['Dana']]

    player.get_received()
    new_host.emit('host:drawNumber', {'roomId': 'R1', 'number': 11}, callback=True)
    assert _events(player, 'number:drawn') == [{'number': 11, 'drawnNumbers': [9, 11]}]


def test_malformed_payload_is_tolerated(sio_factory):
    host = sio_factory()
    ack = host.emit('host:createRoom', 'not-a-dict', callback=True)
    assert ack['ok'] is False
