from flask import Blueprint, jsonify, request, current_app
from sqlalchemy.exc import SQLAlchemyError

from wingspan_scoring import db, socketio
from wingspan_scoring.errors import GameNotFound, InvalidInput, StoreUnavailable
from wingspan_scoring.models import ScoringSession
from wingspan_scoring.services.history import save_game_result
from wingspan_scoring.services.scoring import calculate_game_end
from wingspan_scoring.services.session import default_state, dispatch, game_end_players, project_state
from . import flag_value, json_body

sessions = Blueprint('sessions', __name__)


def session_room(code: str) -> str:
    return f"session:{code.upper()}"


def _get_session(code: str) -> ScoringSession:
    session = ScoringSession.query.filter_by(session_code=code.upper()).first()
    if session is None:
        raise GameNotFound('Session not found')
    return session


def _optional_body() -> dict:
    if not request.get_data():
        return {}
    return json_body()


def _commit(action: str) -> None:
    try:
        db.session.commit()
    except SQLAlchemyError as exc:
        db.session.rollback()
        current_app.logger.error(f"[session] {action} failed: {exc}")
        raise StoreUnavailable('The session store is unavailable; please try again')


@sessions.route('', methods=['POST'])
def create_session():
    data = _optional_body()
    num_players = data.get('num_players', current_app.config.get('DEFAULT_NUM_PLAYERS', 4))
    try:
        num_players = int(num_players)
    except (TypeError, ValueError):
        raise InvalidInput('num_players must be an integer')
    expansions = None
    if any(name in data for name in ('base', 'european', 'oceania')):
        expansions = {name: bool(flag_value(data, name)) for name in ('base', 'european', 'oceania')}
    state = default_state(num_players, expansions=expansions)

    session = ScoringSession()
    session.store_state(state)
    db.session.add(session)
    _commit('create')
    current_app.logger.info(f"[session] created code={session.session_code} players={num_players}")
    return jsonify({
        'message': 'New session created!',
        'session_code': session.session_code,
        'state': project_state(state, session.session_code),
    }), 201


@sessions.route('/<string:session_code>', methods=['GET'])
def get_session(session_code):
    session = _get_session(session_code)
    return jsonify(project_state(session.load_state(), session.session_code))


@sessions.route('/<string:session_code>', methods=['DELETE'])
def end_session(session_code):
    session = _get_session(session_code)
    code = session.session_code
    db.session.delete(session)
    _commit('delete')
    socketio.emit('session_ended', {'session_code': code}, to=session_room(code), namespace='/ws')
    current_app.logger.info(f"[session] ended code={code}")
    return jsonify({'success': True})


@sessions.route('/<string:session_code>/actions', methods=['POST'])
def apply_action(session_code):
    data = json_body()
    action = data.get('action')
    if not action:
        raise InvalidInput('action is required')
    session = _get_session(session_code)
    state = dispatch(session.load_state(), action, data.get('payload'))
    session.store_state(state)
    _commit(action)

    projection = project_state(state, session.session_code)
    current_app.logger.info(f"[action] session={session.session_code} action={action}")
    # Emit live update to all clients watching the session
    socketio.emit('state_update', {'session_code': session.session_code, 'action': action},
                  to=session_room(session.session_code), namespace='/ws')
    return jsonify(projection)


@sessions.route('/<string:session_code>/game-end', methods=['POST'])
def session_game_end(session_code):
    data = _optional_body()
    session = _get_session(session_code)
    state = session.load_state()
    ranked, nectar_scoring = calculate_game_end(game_end_players(state), state.include_oceania)

    payload = {'players': ranked, 'nectar_scoring': nectar_scoring}
    if flag_value(data, 'save'):
        payload['game_id'] = save_game_result(ranked, nectar_scoring, state.include_oceania)
    return jsonify(payload)
