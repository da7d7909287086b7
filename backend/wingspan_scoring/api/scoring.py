from flask import Blueprint, jsonify, current_app

from wingspan_scoring.errors import InvalidInput
from wingspan_scoring.services.history import save_game_result
from wingspan_scoring.services.scoring import calculate_game_end
from . import flag_value, json_body

scoring = Blueprint('scoring', __name__)


def _score_request():
    data = json_body()
    players = data.get('players')
    if not isinstance(players, list):
        raise InvalidInput('players must be a list')
    include_oceania = bool(flag_value(data, 'include_oceania'))
    ranked, nectar_scoring = calculate_game_end(players, include_oceania)
    return ranked, nectar_scoring, include_oceania


@scoring.route('/calculate-final-score', methods=['POST'])
def calculate_final_score():
    ranked, nectar_scoring, _ = _score_request()
    return jsonify({'players': ranked, 'nectar_scoring': nectar_scoring})


@scoring.route('/calculate-game-end', methods=['POST'])
def calculate_and_save_game_end():
    ranked, nectar_scoring, include_oceania = _score_request()
    game_id = save_game_result(ranked, nectar_scoring, include_oceania)
    current_app.logger.info(f"[game_end] game={game_id} winner={ranked[0]['player_name']} total={ranked[0]['total']}")
    return jsonify({'game_id': game_id, 'players': ranked, 'nectar_scoring': nectar_scoring}), 201
