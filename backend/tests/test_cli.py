from mathgame.models import User, GameSession


def test_db_reset_seeds_demo_data(flask_app):
    runner = flask_app.test_cli_runner()
    result = runner.invoke(args=['db-reset', '--games', '2', '--seed', '42'])
    assert result.exit_code == 0, result.output
    assert 'seeded with 6 games' in result.output
    assert User.query.count() == 3
    assert GameSession.query.count() == 6
