from datetime import datetime

from flask import Blueprint, Response, jsonify, request, current_app

from wingspan_scoring.errors import InvalidInput
from wingspan_scoring.services import history as store

history = Blueprint('history', __name__)


def _int_arg(name: str, default: int) -> int:
    value = request.args.get(name)
    if value in (None, ''):
        return default
    try:
        return int(value)
    except ValueError:
        raise InvalidInput(f'{name} must be an integer')


@history.route('/games', methods=['GET'])
def list_games():
    default_limit = int(current_app.config.get('HISTORY_PAGE_LIMIT', store.DEFAULT_LIMIT))
    limit = _int_arg('limit', default_limit)
    offset = _int_arg('offset', 0)
    if limit <= 0:
        limit = default_limit
    offset = max(offset, 0)
    games = store.list_game_results(limit, offset)
    return jsonify({
        'games': [g.to_dict() for g in games],
        'total_count': store.count_game_results(),
        'limit': limit,
        'offset': offset,
    })


@history.route('/games/<int:game_id>', methods=['GET'])
def get_game(game_id):
    return jsonify(store.get_game_result(game_id).to_dict())


@history.route('/games/<int:game_id>', methods=['DELETE'])
def delete_game(game_id):
    store.delete_game_result(game_id)
    return jsonify({'success': True, 'message': 'Game deleted successfully'})


@history.route('/stats/<string:player_name>', methods=['GET'])
def player_stats(player_name):
    return jsonify(store.get_player_stats(player_name))


@history.route('/leaderboard', methods=['GET'])
def leaderboard():
    return jsonify(store.get_leaderboard())


@history.route('/import', methods=['POST'])
def import_csv():
    upload = request.files.get('file')
    if upload is not None:
        source = upload.read()
    else:
        source = request.get_data()
    if not source:
        raise InvalidInput('No CSV data provided')

    result = store.import_games(source)
    if result['errors']:
        return jsonify({
            'error': f"Import failed: {len(result['errors'])} errors found",
            'games_imported': 0,
            'errors': result['errors'],
        }), 400
    return jsonify(result)


@history.route('/export', methods=['GET'])
def export_csv():
    csv_text = store.export_games_to_csv(store.all_game_results())
    filename = f"wingspan_games_{datetime.utcnow().strftime('%Y%m%d')}.csv"
    return Response(
        csv_text,
        mimetype='text/csv',
        headers={'Content-Disposition': f'attachment; filename={filename}'},
    )
