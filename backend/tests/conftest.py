import os
import sys
import pytest

# Ensure the backend root (containing the `mathgame` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from mathgame import create_app, db


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    CORS_ORIGINS = ['http://localhost:3000']
    POINTS_PER_CORRECT = 10
    STRICT_SCORE_CHECK = False
    LEADERBOARD_DEFAULT_LIMIT = 10
    LEADERBOARD_MAX_LIMIT = 100
    RECENT_GAMES_LIMIT = 10
    TRENDS_DEFAULT_DAYS = 7


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        # Ensure models are imported so tables are created
        import mathgame.models  # noqa: F401
        db.create_all()
        yield application
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def make_user(flask_app):
    from mathgame.models import User

    def _make(username):
        user = User(username=username)
        db.session.add(user)
        db.session.commit()
        return user
    return _make


@pytest.fixture()
def play(flask_app):
    """Record a game with `correct` right answers worth 10 points each."""
    from mathgame.services.games.recorder import record_game

    def _play(user, score, correct=None, wrong=0, played_at=None, operations=('add',)):
        if correct is None:
            correct = max(1, score // 10)
        return record_game(user.id, score, correct, wrong, operations=list(operations), played_at=played_at)
    return _play
