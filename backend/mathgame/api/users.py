from flask import Blueprint, jsonify, request, current_app
from flask_login import login_user, logout_user, login_required, current_user
from sqlalchemy.exc import IntegrityError

from mathgame import db
from mathgame.models import User
from mathgame.services.games.errors import ValidationError
from mathgame.services.games.stats import get_user_stats, get_recent_games, get_operation_stats
from mathgame.services.games.leaderboard import get_user_rank


users = Blueprint('users', __name__)


@users.route('', methods=['POST'])
def login_or_register():
    """
    Looks up a player by name, creating the account on first use, and logs them in.
    """
    data = request.get_json(silent=True)
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ValidationError('Request body must be a JSON object')
    username = data.get('username')
    if not isinstance(username, str) or not username.strip():
        raise ValidationError('Username is required')
    username = username.strip()
    if len(username) > 64:
        raise ValidationError('Username must be at most 64 characters')

    user = User.query.filter_by(username=username).first()
    is_new = False
    if not user:
        user = User(username=username)
        db.session.add(user)
        try:
            db.session.commit()
            is_new = True
        except IntegrityError:
            # Another request created the same name first
            db.session.rollback()
            user = User.query.filter_by(username=username).first_or_404()

    login_user(user, remember=True)
    current_app.logger.info(f"[login] user={user.id} username={user.username!r} new={is_new}")
    return jsonify({'id': user.id, 'username': user.username, 'isNew': is_new}), (201 if is_new else 200)


@users.route('/me', methods=['GET'])
@login_required
def me():
    return jsonify(current_user.to_dict())


@users.route('/logout', methods=['POST'])
@login_required
def logout():
    logout_user()
    return jsonify({'success': True})


@users.route('/<int:user_id>/stats', methods=['GET'])
def user_stats(user_id):
    # Unknown users get the empty stats shape rather than a 404
    limit = int(current_app.config.get('RECENT_GAMES_LIMIT', 10))
    return jsonify({
        'stats': get_user_stats(user_id),
        'recentGames': get_recent_games(user_id, limit=limit),
        'operationStats': get_operation_stats(user_id),
    })


@users.route('/<int:user_id>/rank', methods=['GET'])
def user_rank(user_id):
    return jsonify({'rank': get_user_rank(user_id)})
