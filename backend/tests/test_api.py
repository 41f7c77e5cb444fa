def test_index(client):
    res = client.get('/')
    assert res.status_code == 200
    assert 'message' in res.get_json()


def test_health_counts_games(flask_app, client):
    assert client.get('/health').get_json() == {'status': 'ok', 'games': 0}
    flask_app.extensions['guessroom']['service'].create('alice', None)
    assert client.get('/health').get_json() == {'status': 'ok', 'games': 1}


def test_game_state(flask_app, client):
    service = flask_app.extensions['guessroom']['service']
    game = service.create('alice', 'sid-a')
    service.join(game.id, 'bob', 'sid-b')
    service.start(game.id, 'alice', 'Sky colour?', 'Blue')

    res = client.get(f'/api/games/{game.id.lower()}')
    assert res.status_code == 200
    state = res.get_json()
    assert state['id'] == game.id
    assert state['status'] == 'in-progress'
    assert state['question'] == 'Sky colour?'
    assert 'answer' not in state


def test_game_state_missing(client):
    res = client.get('/api/games/NOPE12')
    assert res.status_code == 404
    assert res.get_json() == {'error': 'Game not found'}
