from flask import Blueprint, jsonify, request

from mathgame.services.games.errors import ValidationError
from mathgame.services.games.recorder import record_game, get_game


games = Blueprint('games', __name__)


@games.route('', methods=['POST'])
def save_game():
    data = request.get_json(silent=True)
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ValidationError('Request body must be a JSON object')
    game = record_game(
        data.get('userId'),
        data.get('score'),
        data.get('correct'),
        data.get('wrong'),
        total_problems=data.get('totalProblems'),
        operations=data.get('operations'),
        attempts=data.get('attempts'),
    )
    return jsonify({'gameId': game.id, 'message': 'Game saved successfully'}), 201


@games.route('/<int:game_id>', methods=['GET'])
def game_detail(game_id):
    return jsonify(get_game(game_id).to_dict(include_attempts=True))
