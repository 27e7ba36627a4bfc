from flask import Blueprint, current_app, jsonify

from sportshub.models import Sport
from sportshub.services.sports import GameService

games = Blueprint('games', __name__)

_game_service = GameService()


@games.route('/today/<int:sport_id>', methods=['GET'])
def get_todays_games(sport_id):
    try:
        items = _game_service.get_todays_games(sport_id)
    except Exception as exc:
        current_app.logger.error(f"[games] today sport={sport_id} failed: {exc}")
        return jsonify({'error': "Failed to fetch today's games"}), 500
    return jsonify({'data': [g.to_dict() for g in items], 'count': len(items)})


@games.route('/live/<int:sport_id>', methods=['GET'])
def get_live_games(sport_id):
    try:
        items = _game_service.get_live_games(sport_id)
    except Exception as exc:
        current_app.logger.error(f"[games] live sport={sport_id} failed: {exc}")
        return jsonify({'error': 'Failed to fetch live games'}), 500
    return jsonify({'data': [g.to_dict() for g in items], 'count': len(items)})


@games.route('/<int:sport_id>', methods=['GET'])
def get_games(sport_id):
    """Today's games plus any live game not already on today's list."""
    try:
        todays = _game_service.get_todays_games(sport_id)
        live = _game_service.get_live_games(sport_id)
    except Exception as exc:
        current_app.logger.error(f"[games] all sport={sport_id} failed: {exc}")
        return jsonify({'error': 'Failed to fetch games'}), 500

    merged = list(todays)
    seen = {g.id for g in todays}
    for game in live:
        if game.id not in seen:
            merged.append(game)
    return jsonify({
        'data': [g.to_dict() for g in merged],
        'count': len(merged),
        'breakdown': {'today': len(todays), 'live': len(live)},
    })


@games.route('/sports', methods=['GET'])
def list_sports():
    return jsonify([s.to_dict() for s in Sport.query.order_by(Sport.id).all()])
