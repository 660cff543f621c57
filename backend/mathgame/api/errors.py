from flask import jsonify
from sqlalchemy.exc import SQLAlchemyError

from mathgame import db
from mathgame.services.games.errors import GameServiceError


def register_error_handlers(flask_app) -> None:
    @flask_app.errorhandler(GameServiceError)
    def handle_game_service_error(exc):
        return jsonify(exc.to_dict()), exc.status_code

    @flask_app.errorhandler(SQLAlchemyError)
    def handle_database_error(exc):
        db.session.rollback()
        flask_app.logger.exception(f"[db-error] {exc.__class__.__name__}")
        return jsonify({'error': 'Database error'}), 500

    @flask_app.errorhandler(404)
    def handle_not_found(exc):
        return jsonify({'error': 'Not found'}), 404
