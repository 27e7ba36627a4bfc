from datetime import timedelta

from sportshub import db
from sportshub.models import Game, GameScore, ScreenShareSession, Team, utcnow
from sportshub.services.sports import ensure_sport


def _seed_game(sport, external_id, start, status='SCHEDULED', score=None):
    home = Team(sport_id=sport.id, external_id=f"h{external_id}", name=f"Home {external_id}")
    away = Team(sport_id=sport.id, external_id=f"a{external_id}", name=f"Away {external_id}")
    db.session.add_all([home, away])
    db.session.flush()
    game = Game(sport_id=sport.id, home_team_id=home.id, away_team_id=away.id,
                external_id=external_id, start_time=start, status=status)
    db.session.add(game)
    db.session.flush()
    if score:
        db.session.add(GameScore(game_id=game.id, home_score=score[0], away_score=score[1]))
    db.session.commit()
    return game


def test_index_and_health(client):
    assert client.get('/').status_code == 200
    res = client.get('/api/health')
    assert res.status_code == 200
    body = res.get_json()
    assert body['status'] == 'ok'
    assert body['connections'] == 0


def test_register_login_logout(client):
    res = client.post('/api/auth/register', json={'username': 'alice', 'password': 'pw'})
    assert res.status_code == 201
    assert res.get_json()['user']['username'] == 'alice'
    assert client.post('/api/auth/register', json={'username': 'alice', 'password': 'pw'}).status_code == 400
    assert client.get('/api/auth/me').status_code == 200
    assert client.post('/api/auth/logout').status_code == 200
    assert client.get('/api/auth/me').status_code == 401
    assert client.post('/api/auth/login', json={'username': 'alice', 'password': 'bad'}).status_code == 401
    assert client.post('/api/auth/login', json={'username': 'alice', 'password': 'pw'}).status_code == 200
    assert client.post('/api/auth/login', json={}).status_code == 400


def test_games_today_live_and_merged(client):
    soccer = ensure_sport('soccer', 'Soccer')
    tomorrow = utcnow().replace(hour=12, minute=0, second=0, microsecond=0) + timedelta(days=1)
    _seed_game(soccer, '1', tomorrow)
    _seed_game(soccer, '2', tomorrow + timedelta(hours=3))
    _seed_game(soccer, '3', tomorrow + timedelta(days=2))
    live = _seed_game(soccer, '4', utcnow() - timedelta(hours=1), status='IN_PROGRESS', score=(2, 1))

    today = client.get(f'/api/games/today/{soccer.id}').get_json()
    assert today['count'] == 2
    assert [g['external_id'] for g in today['data']] == ['1', '2']

    live_res = client.get(f'/api/games/live/{soccer.id}').get_json()
    assert live_res['count'] == 1
    assert live_res['data'][0]['id'] == live.id
    assert live_res['data'][0]['score'] == {'home': 2, 'away': 1}

    merged = client.get(f'/api/games/{soccer.id}').get_json()
    assert merged['count'] == 3
    assert merged['breakdown'] == {'today': 2, 'live': 1}

    sports = client.get('/api/games/sports').get_json()
    assert sports == [{'id': soccer.id, 'key': 'soccer', 'name': 'Soccer'}]


def test_games_for_unknown_sport_are_empty(client):
    res = client.get('/api/games/today/999')
    assert res.status_code == 200
    assert res.get_json() == {'data': [], 'count': 0}


def test_create_session_requires_login(client):
    res = client.post('/api/screen-share/sessions', json={'title': 'Derby'})
    assert res.status_code == 401


def test_create_session_validates_body(client, login):
    login()
    res = client.post('/api/screen-share/sessions', json={'title': ''})
    assert res.status_code == 400
    assert res.get_json()['error'] == 'Invalid request data'
    res = client.post('/api/screen-share/sessions', json={'title': 'ok', 'max_viewers': 1000})
    assert res.status_code == 400


def test_session_lifecycle(client, login, flask_app):
    host = login('host')
    res = client.post('/api/screen-share/sessions', json={'title': 'Derby day', 'max_viewers': 2})
    assert res.status_code == 201
    session = res.get_json()
    assert session['status'] == 'ACTIVE'
    assert session['host_user_id'] == host['id']
    assert session['max_viewers'] == 2

    listing = client.get('/api/screen-share/sessions').get_json()
    assert listing['count'] == 1

    res = client.patch(f"/api/screen-share/sessions/{session['id']}", json={'title': 'Derby day (2nd half)'})
    assert res.status_code == 200
    assert res.get_json()['title'] == 'Derby day (2nd half)'

    mine = client.get('/api/screen-share/my-sessions').get_json()
    assert mine['count'] == 1

    res = client.delete(f"/api/screen-share/sessions/{session['id']}")
    assert res.status_code == 200
    ended = client.get(f"/api/screen-share/sessions/{session['id']}").get_json()
    assert ended['status'] == 'ENDED'
    assert ended['ended_at'] is not None
    assert client.get('/api/screen-share/sessions').get_json()['count'] == 0


def test_only_host_may_update(client, login, flask_app):
    login('host')
    session_id = client.post('/api/screen-share/sessions', json={'title': 'Mine'}).get_json()['id']
    client.post('/api/auth/logout')
    login('intruder')
    res = client.patch(f'/api/screen-share/sessions/{session_id}', json={'title': 'Yours'})
    assert res.status_code == 403
    assert client.delete(f'/api/screen-share/sessions/{session_id}').status_code == 403


def test_join_and_leave_counts_viewers(client, login, flask_app):
    login('host')
    session_id = client.post('/api/screen-share/sessions', json={'title': 'Watch', 'max_viewers': 1}).get_json()['id']
    client.post('/api/auth/logout')

    res = client.post(f'/api/screen-share/sessions/{session_id}/join')
    assert res.status_code == 200
    body = res.get_json()
    assert body['ice_servers'] == [{'urls': 'stun:stun.example.org:3478'}]
    viewer_id = body['viewer_id']
    assert db.session.get(ScreenShareSession, session_id).current_viewers == 1

    # Capacity of one is reached
    full = client.post(f'/api/screen-share/sessions/{session_id}/join')
    assert full.status_code == 400
    assert full.get_json()['error'] == 'Session is full'

    assert client.post(f'/api/screen-share/sessions/{session_id}/leave', json={'viewer_id': viewer_id}).status_code == 200
    session = db.session.get(ScreenShareSession, session_id)
    assert session.current_viewers == 0
    assert session.total_views == 1


def test_join_unknown_or_ended_session(client, login):
    assert client.post('/api/screen-share/sessions/does-not-exist/join').status_code == 404
    login('host')
    session_id = client.post('/api/screen-share/sessions', json={'title': 'Soon over'}).get_json()['id']
    client.delete(f'/api/screen-share/sessions/{session_id}')
    res = client.post(f'/api/screen-share/sessions/{session_id}/join')
    assert res.status_code == 400
    assert res.get_json()['error'] == 'Session is not active'


def test_ice_servers_endpoint(client):
    res = client.get('/api/screen-share/ice-servers')
    assert res.get_json() == {'ice_servers': [{'urls': 'stun:stun.example.org:3478'}]}


def test_game_sessions_listing(client, login):
    soccer = ensure_sport('soccer', 'Soccer')
    game = _seed_game(soccer, '10', utcnow())
    login('host')
    res = client.post('/api/screen-share/sessions', json={'title': 'Match cam', 'game_id': game.id})
    assert res.status_code == 201
    assert res.get_json()['game']['home_team']['name'] == 'Home 10'
    assert client.post('/api/screen-share/sessions', json={'title': 'Nope', 'game_id': 12345}).status_code == 400

    listing = client.get(f'/api/screen-share/games/{game.id}/sessions').get_json()
    assert listing['count'] == 1


def test_leave_cannot_close_someone_elses_viewer(client, login):
    login('host')
    session_id = client.post('/api/screen-share/sessions', json={'title': 'Watch'}).get_json()['id']
    client.post('/api/auth/logout')

    login('fan')
    viewer_id = client.post(f'/api/screen-share/sessions/{session_id}/join').get_json()['viewer_id']
    client.post('/api/auth/logout')

    login('troll')
    client.post(f'/api/screen-share/sessions/{session_id}/leave', json={'viewer_id': viewer_id})
    assert db.session.get(ScreenShareSession, session_id).current_viewers == 1
