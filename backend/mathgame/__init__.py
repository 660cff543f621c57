from flask import Flask, jsonify
from flask_sqlalchemy import SQLAlchemy
from flask_login import LoginManager
from flask_cors import CORS
from flask_migrate import Migrate
import click
from config import Config

db = SQLAlchemy()
login_manager = LoginManager()
migrate = Migrate()

DEMO_USERS = ['alice', 'bob', 'cara']


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)

    db.init_app(flask_app)
    login_manager.init_app(flask_app)
    migrate.init_app(flask_app, db)
    CORS(flask_app, supports_credentials=True, origins=flask_app.config.get('CORS_ORIGINS') or '*')

    # Import and register blueprints here
    from mathgame.routes import main
    flask_app.register_blueprint(main)

    from mathgame.api.users import users
    flask_app.register_blueprint(users, url_prefix='/api/users')

    from mathgame.api.games import games
    flask_app.register_blueprint(games, url_prefix='/api/games')

    from mathgame.api.leaderboard import leaderboard
    flask_app.register_blueprint(leaderboard, url_prefix='/api')

    from mathgame.api.errors import register_error_handlers
    register_error_handlers(flask_app)

    # Flask-Login user loader
    from mathgame.models import User

    @login_manager.user_loader
    def load_user(user_id):
        return db.session.get(User, int(user_id))

    @login_manager.unauthorized_handler
    def unauthorized():
        return jsonify({'error': 'Not logged in'}), 401

    @click.command('db-reset')
    @click.option('--games', 'games_per_user', default=5, show_default=True,
                  help='Simulated games to record for each demo user.')
    @click.option('--seed', default=None, type=int, help='Random seed for repeatable demo data.')
    def db_reset_command(games_per_user, seed):
        """Drops, recreates, and seeds the database."""
        from mathgame.services.games.seed import seed_demo_data
        with flask_app.app_context():
            db.drop_all()
            db.create_all()
            recorded = seed_demo_data(DEMO_USERS, games_per_user=games_per_user, seed=seed)
            print(f'Database has been reset and seeded with {recorded} games!')

    flask_app.cli.add_command(db_reset_command)

    return flask_app
