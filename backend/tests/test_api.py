from datetime import timedelta

from mathgame.models import utcnow


def test_index_and_health(client):
    assert client.get('/').status_code == 200
    assert client.get('/health').get_json() == {'ok': True}


def test_login_creates_then_finds_user(client):
    res = client.post('/api/users', json={'username': '  alice  '})
    assert res.status_code == 201
    created = res.get_json()
    assert created['username'] == 'alice'
    assert created['isNew'] is True

    res = client.post('/api/users', json={'username': 'alice'})
    assert res.status_code == 200
    again = res.get_json()
    assert again['id'] == created['id']
    assert again['isNew'] is False

    # Names are case-sensitive
    other = client.post('/api/users', json={'username': 'Alice'}).get_json()
    assert other['id'] != created['id']


def test_login_rejects_blank_username(client):
    res = client.post('/api/users', json={'username': '   '})
    assert res.status_code == 400
    assert 'error' in res.get_json()
    assert client.post('/api/users', json={}).status_code == 400


def test_me_and_logout(client):
    assert client.get('/api/users/me').status_code == 401
    client.post('/api/users', json={'username': 'bob'})
    me = client.get('/api/users/me')
    assert me.status_code == 200
    assert me.get_json()['username'] == 'bob'
    assert client.post('/api/users/logout').get_json() == {'success': True}
    assert client.get('/api/users/me').status_code == 401


def test_save_game_and_fetch_stats(client):
    user = client.post('/api/users', json={'username': 'alice'}).get_json()
    for score in (50, 80, 30):
        res = client.post('/api/games', json={
            'userId': user['id'],
            'score': score,
            'correct': score // 10,
            'wrong': 2,
            'operations': ['add', 'mul'],
        })
        assert res.status_code == 201
        assert 'gameId' in res.get_json()

    data = client.get(f"/api/users/{user['id']}/stats").get_json()
    stats = data['stats']
    assert stats['total_games'] == 3
    assert stats['best_score'] == 80
    assert round(stats['avg_score']) == 53
    assert stats['total_correct'] == 16
    assert stats['total_wrong'] == 6
    assert stats['total_problems'] == 22
    assert stats['accuracy'] == round(100 * 16 / 22)
    assert len(data['recentGames']) == 3
    assert data['operationStats'] == []


def test_save_game_missing_fields(client):
    user = client.post('/api/users', json={'username': 'alice'}).get_json()
    res = client.post('/api/games', json={'userId': user['id'], 'score': 10, 'correct': 1})
    assert res.status_code == 400
    assert res.get_json()['error'] == 'Missing required fields'
    res = client.post('/api/games', json={'score': 10, 'correct': 1, 'wrong': 0, 'operations': ['add']})
    assert res.status_code == 400


def test_save_game_unknown_user(client):
    res = client.post('/api/games', json={
        'userId': 999, 'score': 10, 'correct': 1, 'wrong': 0, 'operations': ['add'],
    })
    assert res.status_code == 404


def test_save_game_with_attempts(client):
    user = client.post('/api/users', json={'username': 'cara'}).get_json()
    attempts = [
        {'operation': 'div', 'num1': 12, 'num2': 3, 'correctAnswer': 4, 'userAnswer': 4, 'isCorrect': True},
        {'operation': 'div', 'num1': 0, 'num2': 5, 'correctAnswer': 0, 'userAnswer': 1, 'isCorrect': False},
        {'operation': 'sub', 'num1': 7, 'num2': 2, 'correctAnswer': 5, 'userAnswer': '5'},
    ]
    res = client.post('/api/games', json={
        'userId': user['id'], 'score': 20, 'correct': 2, 'wrong': 1,
        'totalProblems': 3, 'operations': ['sub', 'div'], 'attempts': attempts,
    })
    assert res.status_code == 201
    game_id = res.get_json()['gameId']

    game = client.get(f'/api/games/{game_id}').get_json()
    assert game['operations'] == ['sub', 'div']
    assert len(game['attempts']) == 3
    assert game['attempts'][2]['is_correct'] is True

    ops = client.get(f"/api/users/{user['id']}/stats").get_json()['operationStats']
    # Canonical order: sub before div
    assert ops == [
        {'operation': 'sub', 'correct': 1, 'wrong': 0, 'total': 1},
        {'operation': 'div', 'correct': 1, 'wrong': 1, 'total': 2},
    ]


def test_save_game_rejects_mismatched_attempts(client):
    user = client.post('/api/users', json={'username': 'cara'}).get_json()
    res = client.post('/api/games', json={
        'userId': user['id'], 'score': 10, 'correct': 1, 'wrong': 1, 'operations': ['add'],
        'attempts': [{'operation': 'add', 'num1': 1, 'num2': 1, 'correctAnswer': 2, 'userAnswer': 2}],
    })
    assert res.status_code == 400
    # Nothing was written
    assert client.get(f"/api/users/{user['id']}/stats").get_json()['stats']['total_games'] == 0


def test_get_unknown_game(client):
    res = client.get('/api/games/12345')
    assert res.status_code == 404
    assert res.get_json()['error'] == 'Game not found'


def test_stats_for_user_without_games(client):
    data = client.get('/api/users/4242/stats').get_json()
    assert data['stats']['total_games'] == 0
    assert data['stats']['best_score'] == 0
    assert data['stats']['accuracy'] == 0
    assert data['recentGames'] == []
    assert data['operationStats'] == []


def test_leaderboard_and_rank(client):
    alice = client.post('/api/users', json={'username': 'alice'}).get_json()
    bob = client.post('/api/users', json={'username': 'bob'}).get_json()
    cara = client.post('/api/users', json={'username': 'cara'}).get_json()
    for uid, score in ((alice['id'], 40), (bob['id'], 90), (bob['id'], 10), (cara['id'], 60)):
        client.post('/api/games', json={
            'userId': uid, 'score': score, 'correct': score // 10, 'wrong': 1, 'operations': ['add'],
        })

    rows = client.get('/api/leaderboard').get_json()
    assert [r['username'] for r in rows] == ['bob', 'cara', 'alice']
    assert rows[0]['best_score'] == 90
    assert rows[0]['games_played'] == 2
    assert rows[0]['avg_score'] == 50

    assert len(client.get('/api/leaderboard?limit=2').get_json()) == 2
    # Non-numeric limit falls back to the default
    assert len(client.get('/api/leaderboard?limit=abc').get_json()) == 3

    assert client.get(f"/api/users/{bob['id']}/rank").get_json() == {'rank': 1}
    assert client.get(f"/api/users/{cara['id']}/rank").get_json() == {'rank': 2}
    assert client.get(f"/api/users/{alice['id']}/rank").get_json() == {'rank': 3}


def test_leaderboard_rejects_unknown_timeframe(client):
    res = client.get('/api/leaderboard?timeframe=decade')
    assert res.status_code == 400


def test_leaderboard_today_excludes_yesterday(client, make_user, play):
    old = make_user('veteran')
    new = make_user('rookie')
    play(old, 500, played_at=utcnow() - timedelta(days=1))
    play(new, 30)

    all_rows = client.get('/api/leaderboard?timeframe=all').get_json()
    assert all_rows[0]['username'] == 'veteran'
    today = client.get('/api/leaderboard?timeframe=today').get_json()
    assert [r['username'] for r in today] == ['rookie']


def test_trends(client, make_user, play):
    user = make_user('alice')
    other = make_user('bob')
    now = utcnow()
    play(user, 20, played_at=now - timedelta(days=2))
    play(user, 40, played_at=now - timedelta(days=2))
    play(user, 70, played_at=now - timedelta(days=20))
    play(other, 90)

    rows = client.get(f'/api/trends?userId={user.id}&days=7').get_json()
    assert len(rows) == 1
    assert rows[0]['games_played'] == 2
    assert rows[0]['avg_score'] == 30
    assert rows[0]['max_score'] == 40

    everyone = client.get('/api/trends').get_json()
    assert sum(r['games_played'] for r in everyone) == 3
    assert [r['date'] for r in everyone] == sorted(r['date'] for r in everyone)

    month = client.get(f'/api/trends?userId={user.id}&days=30').get_json()
    assert sum(r['games_played'] for r in month) == 3


def test_non_object_json_bodies_are_rejected(client):
    res = client.post('/api/games', json=[1, 2])
    assert res.status_code == 400
    assert res.get_json()['error'] == 'Request body must be a JSON object'
    res = client.post('/api/users', json=['alice'])
    assert res.status_code == 400
    assert res.get_json()['error'] == 'Request body must be a JSON object'


def test_trends_rejects_non_numeric_user_id(client, make_user, play):
    play(make_user('alice'), 50)
    res = client.get('/api/trends?userId=abc')
    assert res.status_code == 400
    assert res.get_json()['error'] == 'userId must be an integer'


def test_save_game_rejects_boolean_user_id(client):
    client.post('/api/users', json={'username': 'alice'})
    res = client.post('/api/games', json={
        'userId': True, 'score': 10, 'correct': 1, 'wrong': 0, 'operations': ['add'],
    })
    assert res.status_code == 400
    assert client.get('/api/users/1/stats').get_json()['stats']['total_games'] == 0


def test_save_game_storage_failure(client, monkeypatch):
    from sqlalchemy.exc import SQLAlchemyError
    from mathgame import db
    from mathgame.models import GameSession

    user = client.post('/api/users', json={'username': 'alice'}).get_json()

    def failing_commit():
        raise SQLAlchemyError('disk I/O error')
    monkeypatch.setattr(db.session, 'commit', failing_commit)

    res = client.post('/api/games', json={
        'userId': user['id'], 'score': 10, 'correct': 1, 'wrong': 0, 'operations': ['add'],
        'attempts': [{'operation': 'add', 'num1': 1, 'num2': 1, 'correctAnswer': 2, 'userAnswer': 2}],
    })
    assert res.status_code == 500
    assert res.get_json() == {'error': 'Failed to save game'}

    monkeypatch.undo()
    assert GameSession.query.count() == 0


def test_database_error_during_read(client, monkeypatch):
    from sqlalchemy.exc import OperationalError
    import mathgame.api.users as users_api

    def broken_stats(user_id):
        raise OperationalError('SELECT ...', {}, Exception('database is locked'))
    monkeypatch.setattr(users_api, 'get_user_stats', broken_stats)

    res = client.get('/api/users/1/stats')
    assert res.status_code == 500
    assert res.get_json() == {'error': 'Database error'}


def test_login_returns_user_created_by_concurrent_request(client, monkeypatch):
    from sqlalchemy import insert
    from sqlalchemy.exc import IntegrityError
    from mathgame import db
    from mathgame.models import User, utcnow

    real_commit = db.session.commit

    def commit_after_concurrent_insert():
        # Another request wins the race for the same name
        monkeypatch.setattr(db.session, 'commit', real_commit)
        db.session.rollback()
        db.session.execute(insert(User).values(username='alice', created_at=utcnow()))
        real_commit()
        raise IntegrityError('INSERT INTO user', {}, Exception('UNIQUE constraint failed: user.username'))
    monkeypatch.setattr(db.session, 'commit', commit_after_concurrent_insert)

    res = client.post('/api/users', json={'username': 'alice'})
    assert res.status_code == 200
    data = res.get_json()
    assert data['username'] == 'alice'
    assert data['isNew'] is False
    assert User.query.filter_by(username='alice').count() == 1
    assert data['id'] == User.query.filter_by(username='alice').one().id
