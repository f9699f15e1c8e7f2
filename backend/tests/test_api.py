def test_index(client):
    res = client.get('/')
    assert res.status_code == 200
    data = res.get_json()
    assert data['endpoints']['health'] == '/health'


def test_health_empty(client):
    res = client.get('/health')
    assert res.status_code == 200
    assert res.get_json() == {'status': 'OK', 'activeRooms': 0, 'totalUsers': 0}


def test_health_counts_rooms_and_members(client, make_sio_client):
    alice, bob, cara = make_sio_client(), make_sio_client(), make_sio_client()
    alice.emit('joinRoom', 'one')
    bob.emit('joinRoom', 'one')
    cara.emit('joinRoom', 'two')

    data = client.get('/health').get_json()
    assert data['activeRooms'] == 2
    assert data['totalUsers'] == 3

    bob.disconnect()
    cara.disconnect()
    data = client.get('/health').get_json()
    assert data['activeRooms'] == 1
    assert data['totalUsers'] == 1


def test_health_has_no_side_effects(client, registry):
    client.get('/health')
    client.get('/health')
    assert registry.stats() == (0, 0)


def test_socket_events_are_handled_in_arrival_order(flask_app):
    from watchparty import socketio
    assert socketio.server.async_handlers is False


def test_run_options_keep_werkzeug_locked_by_default(flask_app):
    from watchparty import run_options
    options = run_options(flask_app)
    assert options['allow_unsafe_werkzeug'] is False
    assert options['debug'] is False


def test_run_options_follow_config(flask_app):
    from watchparty import run_options
    flask_app.config.update(ALLOW_UNSAFE_WERKZEUG=True, HOST='127.0.0.1', PORT=8123)
    options = run_options(flask_app)
    assert options['allow_unsafe_werkzeug'] is True
    assert (options['host'], options['port']) == ('127.0.0.1', 8123)
