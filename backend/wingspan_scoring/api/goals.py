from flask import Blueprint, jsonify, request, current_app

from wingspan_scoring.errors import InvalidInput
from wingspan_scoring.services.goals import (
    ROUNDS,
    calculate_blue_scores,
    calculate_green_scores,
    get_goals,
    select_round_goals,
)
from . import flag_value, json_body

goals = Blueprint('goals', __name__)

EXPANSION_FLAGS = ('base', 'european', 'oceania')


@goals.route('/goals', methods=['GET'])
def list_goals():
    flags = {name: flag_value(request.args, name) for name in EXPANSION_FLAGS}
    # No flags at all means the whole catalog
    if not any(flags.values()):
        flags = {name: True for name in EXPANSION_FLAGS}
    return jsonify(get_goals(flags['base'], flags['european'], flags['oceania']))


@goals.route('/new-game', methods=['POST'])
def new_game():
    source = request.form or request.get_json(silent=True) or {}
    if not hasattr(source, 'get'):
        raise InvalidInput('Request body must be a JSON object')
    flags = {name: bool(flag_value(source, name)) for name in EXPANSION_FLAGS}
    # Base game only when nothing was selected
    if not any(flags.values()):
        flags['base'] = True
    selected = select_round_goals(get_goals(flags['base'], flags['european'], flags['oceania']))
    current_app.logger.info(f"[new_game] goals={[g['id'] if g else None for g in selected.values()]}")
    return jsonify([selected[r] for r in ROUNDS])


@goals.route('/calculate-scores', methods=['POST'])
def calculate_scores():
    data = json_body()
    counts = data.get('player_counts')
    if counts is None:
        counts = data.get('playerCounts')
    if not isinstance(counts, dict):
        raise InvalidInput('player_counts must be an object of player name to count')
    try:
        counts = {str(name): int(count) for name, count in counts.items()}
    except (TypeError, ValueError):
        raise InvalidInput('player_counts values must be integers')

    if data.get('mode') == 'green':
        try:
            round_no = int(data.get('round') or 1)
        except (TypeError, ValueError):
            raise InvalidInput('round must be an integer')
        scores = calculate_green_scores(counts, round_no)
    else:
        scores = calculate_blue_scores(counts)
    return jsonify(scores)
