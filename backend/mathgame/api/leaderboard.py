from flask import Blueprint, jsonify, request, current_app

from mathgame.services.games.errors import ValidationError
from mathgame.services.games.leaderboard import get_leaderboard
from mathgame.services.games.stats import get_trends


leaderboard = Blueprint('leaderboard', __name__)


def _int_arg(name: str, default: int) -> int:
    # Missing, non-numeric and zero values all fall back to the default
    value = request.args.get(name, type=int)
    return value or default


@leaderboard.route('/leaderboard', methods=['GET'])
def leaderboard_view():
    cfg = current_app.config
    limit = _int_arg('limit', int(cfg.get('LEADERBOARD_DEFAULT_LIMIT', 10)))
    limit = max(1, min(int(cfg.get('LEADERBOARD_MAX_LIMIT', 100)), limit))
    timeframe = request.args.get('timeframe') or 'all'
    return jsonify(get_leaderboard(timeframe=timeframe, limit=limit))


@leaderboard.route('/trends', methods=['GET'])
def trends_view():
    days = max(1, _int_arg('days', int(current_app.config.get('TRENDS_DEFAULT_DAYS', 7))))
    user_id = None
    raw_user_id = request.args.get('userId')
    if raw_user_id:
        try:
            user_id = int(raw_user_id)
        except ValueError:
            raise ValidationError('userId must be an integer')
    return jsonify(get_trends(days=days, user_id=user_id))
