from flintt import create_app
from flintt.utils.auth import generate_token


def test_join_user_tracks_connections_until_disconnect():
    app, socketio = create_app('testing')
    uid = '605c72a7a0f1b2b4c3d4e5f6'
    with app.app_context():
        token = generate_token(uid)

    # simulate two tabs for same user
    tab1 = socketio.test_client(app)
    tab2 = socketio.test_client(app)
    tab1.emit('join_user', {'token': token})
    tab2.emit('join_user', {'token': token})

    assert len(app.connected_users[uid]) == 2

    tab1.disconnect()
    assert len(app.connected_users[uid]) == 1

    tab2.disconnect()
    assert uid not in app.connected_users
    assert app.sid_to_user == {}


def test_join_user_rejects_bad_token():
    app, socketio = create_app('testing')
    client = socketio.test_client(app)
    client.emit('join_user', {'token': 'garbage'})

    events = [e['name'] for e in client.get_received()]
    assert 'error' in events
    assert app.connected_users == {}
