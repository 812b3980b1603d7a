from scoreboard import db
from scoreboard.models import Player
from sqlalchemy import update
from scoreboard.store import SqlStore, get_store
from scoreboard.services.rounds.ledger import recompute_scores


def add(client, name):
    res = client.post('/api/players', json={'name': name})
    assert res.status_code == 201
    return res.get_json()


def score(client, player_id, points, **extra):
    return client.post(f'/api/players/{player_id}/scores', json={'points': points, **extra})


def test_index(client):
    res = client.get('/')
    assert res.status_code == 200
    assert 'message' in res.get_json()


def test_add_player_trims_and_rejects_duplicates(client):
    alice = add(client, '  Alice  ')
    assert alice['name'] == 'Alice'
    assert alice['score'] == 0

    res = client.post('/api/players', json={'name': 'Alice'})
    assert res.status_code == 409
    assert 'already exists' in res.get_json()['error']

    # names are case-sensitive
    assert client.post('/api/players', json={'name': 'alice'}).status_code == 201

    res = client.post('/api/players', json={'name': '   '})
    assert res.status_code == 400
    assert client.post('/api/players', json={}).status_code == 400

    names = [p['name'] for p in client.get('/api/players').get_json()]
    assert names == ['Alice', 'alice']


def test_record_score_updates_total(client):
    alice = add(client, 'Alice')
    res = score(client, alice['id'], 5)
    assert res.status_code == 201
    body = res.get_json()
    assert body['player']['score'] == 5
    assert body['entry']['points'] == 5
    assert body['entry']['action_label'] == '+5'
    assert body['entry']['input_type'] == 'shortcut'

    score(client, alice['id'], -7)
    players = client.get('/api/players').get_json()
    assert players[0]['score'] == -2


def test_record_score_validation(client):
    alice = add(client, 'Alice')
    assert score(client, 999, 1).status_code == 404
    assert score(client, alice['id'], 'abc').status_code == 400
    assert score(client, alice['id'], True).status_code == 400
    assert client.post(f"/api/players/{alice['id']}/scores", json={}).status_code == 400
    assert score(client, alice['id'], 3, input_type='keyboard').status_code == 400

    # manual entries: nonzero and within range
    assert score(client, alice['id'], 0, input_type='manual').status_code == 400
    res = score(client, alice['id'], 501, input_type='manual')
    assert res.status_code == 400
    assert '500' in res.get_json()['error']
    assert score(client, alice['id'], -500, input_type='manual').status_code == 201
    assert score(client, alice['id'], '12', input_type='manual').status_code == 201

    players = client.get('/api/players').get_json()
    assert players[0]['score'] == -488


def test_game_info_and_leaderboard_flow(client):
    a = add(client, 'Alice')
    b = add(client, 'Bob')
    c = add(client, 'Cara')

    info = client.get('/api/game-info').get_json()
    assert info['completed_rounds'] == 0
    assert info['next_round'] == 1
    assert info['direction'] == 'right'
    assert info['mvp'] == []

    for pid, pts in [(a['id'], 5), (b['id'], 2), (c['id'], 1), (a['id'], 3), (b['id'], 7), (c['id'], 1)]:
        assert score(client, pid, pts).status_code == 201

    info = client.get('/api/game-info').get_json()
    assert info['completed_rounds'] == 2
    assert info['next_round'] == 3
    assert info['direction'] == 'right'
    assert info['mvp'] == [{'id': b['id'], 'name': 'Bob'}]
    assert info['lowest'] == [{'id': c['id'], 'name': 'Cara'}]

    rows = client.get('/api/leaderboard').get_json()
    assert [r['name'] for r in rows] == ['Bob', 'Alice', 'Cara']
    assert rows[0]['gap'] is None

    state = client.get('/api/state').get_json()
    assert len(state['players']) == 3
    assert state['game_info']['completed_rounds'] == 2


def test_history_endpoints(client):
    a = add(client, 'Alice')
    b = add(client, 'Bob')
    score(client, a['id'], 4)
    score(client, a['id'], -1)
    score(client, b['id'], 2)

    pivot = client.get('/api/history').get_json()
    assert pivot['players'] == ['Bob', 'Alice']
    assert pivot['rounds'][0]['scores'] == {'Alice': 4, 'Bob': 2}
    assert pivot['rounds'][1]['scores'] == {'Alice': -1, 'Bob': None}

    res = client.get(f"/api/players/{a['id']}/history")
    assert res.status_code == 200
    body = res.get_json()
    assert body['player']['name'] == 'Alice'
    assert [h['points'] for h in body['history']] == [-1, 4]
    assert [h['round'] for h in body['history']] == [2, 1]

    assert client.get('/api/players/999/history').status_code == 404


def test_delete_player_removes_entries(client):
    a = add(client, 'Alice')
    b = add(client, 'Bob')
    score(client, a['id'], 4)
    score(client, b['id'], 1)

    res = client.delete(f"/api/players/{b['id']}")
    assert res.status_code == 200
    assert 'Bob' in res.get_json()['message']
    assert client.delete(f"/api/players/{b['id']}").status_code == 404

    info = client.get('/api/game-info').get_json()
    assert info['completed_rounds'] == 1
    assert info['mvp'] == [{'id': a['id'], 'name': 'Alice'}]


def test_reset_scores(client):
    a = add(client, 'Alice')
    score(client, a['id'], 9)
    res = client.post('/api/scores/reset')
    assert res.status_code == 200

    players = client.get('/api/players').get_json()
    assert players[0]['score'] == 0
    assert client.get('/api/game-info').get_json()['completed_rounds'] == 0
    assert client.get(f"/api/players/{a['id']}/history").get_json()['history'] == []


def test_recompute_scores_restores_totals(flask_app, client):
    a = add(client, 'Alice')
    score(client, a['id'], 3)
    score(client, a['id'], 4)

    player = db.session.get(Player, a['id'])
    player.score = 100
    db.session.commit()

    assert recompute_scores(get_store()) == [a['id']]
    assert client.get('/api/players').get_json()[0]['score'] == 7
    assert recompute_scores(get_store()) == []


def test_db_reset_command_seeds_players(flask_app):
    runner = flask_app.test_cli_runner()
    result = runner.invoke(args=['db-reset'])
    assert 'reset and seeded' in result.output
    assert [p.name for p in Player.query.order_by(Player.id).all()] == ['Alice', 'Bob', 'Charlie', 'Diana']


def test_memory_store_fallback(memory_app):
    client = memory_app.test_client()
    players = client.get('/api/players').get_json()
    assert [p['name'] for p in players] == ['Alice', 'Bob', 'Charlie', 'Diana']

    for p in players:
        assert score(client, p['id'], 2).status_code == 201
    assert score(client, players[0]['id'], 5).status_code == 201

    info = client.get('/api/game-info').get_json()
    assert info['completed_rounds'] == 1
    assert info['direction'] == 'left'
    assert len(info['mvp']) == 4

    assert client.post('/api/players', json={'name': 'Bob'}).status_code == 409
    assert client.post('/api/scores/reset').status_code == 200
    assert all(p['score'] == 0 for p in client.get('/api/players').get_json())


def test_player_limit(client):
    for i in range(8):
        add(client, f'Player {i}')
    res = client.post('/api/players', json={'name': 'Ninth'})
    assert res.status_code == 409
    assert res.get_json()['error'] == 'Player limit reached.'
    assert len(client.get('/api/players').get_json()) == 8

    # freeing a seat allows a new player again
    first = client.get('/api/players').get_json()[0]
    client.delete(f"/api/players/{first['id']}")
    assert client.post('/api/players', json={'name': 'Ninth'}).status_code == 201


def test_duplicate_name_race_returns_conflict(client, monkeypatch):
    add(client, 'Alice')
    # the name check passes, so the insert hits the unique index
    monkeypatch.setattr(SqlStore, 'find_player_by_name', lambda self, name: None)
    res = client.post('/api/players', json={'name': 'Alice'})
    assert res.status_code == 409
    assert 'already exists' in res.get_json()['error']
    assert [p['name'] for p in client.get('/api/players').get_json()] == ['Alice']


def test_score_increment_ignores_stale_total(flask_app, client):
    a = add(client, 'Alice')
    player = db.session.get(Player, a['id'])
    assert player.score == 0

    # another writer bumps the total behind this session's back
    db.session.execute(
        update(Player)
        .where(Player.id == a['id'])
        .values(score=Player.score + 5)
        .execution_options(synchronize_session=False)
    )
    assert player.score == 0

    get_store().append_event(a['id'], 3)
    assert db.session.get(Player, a['id']).score == 8
    assert sum(e.points for e in get_store().list_events(player_id=a['id'])) == 3
