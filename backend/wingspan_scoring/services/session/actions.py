"""Action dispatch for scoring sessions.

Each user action maps to one handler. ``dispatch`` runs the handler on a
copy of the state, so a rejected action leaves the caller's state as it was.
"""
import logging

from wingspan_scoring.errors import DataIntegrity, InvalidInput
from wingspan_scoring.services.goals import MODES, ROUNDS, find_goal, is_no_goal
from wingspan_scoring.services.scoring import CATEGORIES, coerce_count
from .state import (
    DEFAULT_EXPANSIONS,
    MAX_PLAYERS,
    MIN_PLAYERS,
    PLAYER_COLORS,
    GameState,
    Player,
    default_player_name,
    default_state,
)

logger = logging.getLogger(__name__)


def _flag(value) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ('true', '1', 'yes', 'on')
    return bool(value)


def _int(payload, key):
    try:
        return int(payload[key])
    except KeyError:
        raise InvalidInput(f'{key} is required')
    except (TypeError, ValueError):
        raise InvalidInput(f'{key} must be an integer')


def _round(payload):
    round_no = _int(payload, 'round')
    if round_no not in ROUNDS:
        raise InvalidInput(f'round must be one of {list(ROUNDS)}')
    return round_no


def _drop_color(state: GameState, color: str, round_no=None) -> None:
    for key in list(state.placements):
        if round_no is not None and key[0] != round_no:
            continue
        colors = [c for c in state.placements[key] if c != color]
        if colors:
            state.placements[key] = colors
        else:
            del state.placements[key]


def _free_default_name(state: GameState) -> str:
    used = state.used_names()
    index = len(state.players)
    while default_player_name(index) in used:
        index += 1
    return default_player_name(index)


def _check_name(state: GameState, name: str, player=None) -> str:
    if name in state.used_names(exclude=player):
        raise DataIntegrity(f'Name {name!r} is already used by another player')
    return name


def add_player(state, payload, rng=None):
    if len(state.players) >= MAX_PLAYERS:
        raise InvalidInput(f'At most {MAX_PLAYERS} players can take part')
    used = state.used_colors()
    color = payload.get('color')
    if color:
        if color not in PLAYER_COLORS:
            raise InvalidInput(f'Unknown color {color!r}')
        if color in used:
            raise DataIntegrity(f'Color {color} is already taken')
    else:
        color = next(c for c in PLAYER_COLORS if c not in used)
    name = str(payload.get('name') or '').strip()
    name = _check_name(state, name) if name else _free_default_name(state)
    state.players.append(Player(state.next_player_id(), name, color))
    return state


def remove_player(state, payload, rng=None):
    player = state.player(payload.get('player_id'))
    if len(state.players) <= MIN_PLAYERS:
        raise InvalidInput('At least one player is required')
    _drop_color(state, player.color)
    state.end_game.pop(player.id, None)
    state.players.remove(player)
    return state


def rename_player(state, payload, rng=None):
    player = state.player(payload.get('player_id'))
    name = str(payload.get('name') or '').strip()
    player.name = _check_name(state, name or default_player_name(state.index_of(player)), player)
    return state


def change_color(state, payload, rng=None):
    player = state.player(payload.get('player_id'))
    color = payload.get('color')
    if color not in PLAYER_COLORS:
        raise InvalidInput(f'Unknown color {color!r}')
    if color == player.color:
        return state
    if color in state.used_colors(exclude=player):
        raise DataIntegrity(f'Color {color} is already taken')
    old = player.color
    for key, colors in state.placements.items():
        state.placements[key] = [color if c == old else c for c in colors]
    player.color = color
    return state


def place_cube(state, payload, rng=None):
    player = state.player(payload.get('player_id'))
    round_no = _round(payload)
    score = _int(payload, 'score')
    if is_no_goal(state.goals.get(round_no)) and score != 0:
        raise InvalidInput(f'Round {round_no} has no goal; only the 0 slot can be used')
    if score not in state.valid_slots(round_no):
        raise InvalidInput(f'Score {score} is not a valid {state.mode} slot for round {round_no}')
    _drop_color(state, player.color, round_no)
    state.placements.setdefault((round_no, score), []).append(player.color)
    return state


def remove_cube(state, payload, rng=None):
    player = state.player(payload.get('player_id'))
    _drop_color(state, player.color, _round(payload))
    return state


def set_mode(state, payload, rng=None):
    mode = payload.get('mode')
    if mode not in MODES:
        raise InvalidInput(f'mode must be one of {list(MODES)}')
    if mode == state.mode:
        return state
    if state.placements and not _flag(payload.get('confirm')):
        raise InvalidInput('Switching the scoring mode clears all cube placements; confirm to continue')
    state.placements = {}
    state.mode = mode
    return state


def set_goal(state, payload, rng=None):
    round_no = _round(payload)
    goal_id = payload.get('goal_id')
    if not goal_id:
        state.goals[round_no] = None
        return state
    goal = find_goal(goal_id)
    if goal is None or not state.expansions.get(goal['expansion']):
        raise InvalidInput(f'Goal {goal_id!r} is not available for the selected expansions')
    state.goals[round_no] = goal
    if is_no_goal(goal):
        for key in [k for k in state.placements if k[0] == round_no and k[1] != 0]:
            del state.placements[key]
    return state


def new_game(state, payload, rng=None):
    flags = {e: _flag(payload.get(e)) for e in DEFAULT_EXPANSIONS}
    fresh = default_state(len(state.players), expansions=flags, rng=rng)
    state.goals = fresh.goals
    state.expansions = fresh.expansions
    state.include_oceania = fresh.include_oceania
    state.placements = {}
    state.end_game = {}
    return state


def set_end_game_entry(state, payload, rng=None):
    player = state.player(payload.get('player_id'))
    entry = dict(state.end_game.get(player.id, {}))
    for field in CATEGORIES:
        if field in payload:
            entry[field] = coerce_count(payload[field], field)
    state.end_game[player.id] = entry
    return state


def set_include_oceania(state, payload, rng=None):
    state.include_oceania = _flag(payload.get('include_oceania'))
    return state


def clear_placements(state, payload, rng=None):
    state.placements = {}
    return state


def clear_end_game(state, payload, rng=None):
    state.end_game = {}
    return state


def reset(state, payload, rng=None):
    num_players = payload.get('num_players', len(state.players))
    try:
        num_players = int(num_players)
    except (TypeError, ValueError):
        raise InvalidInput('num_players must be an integer')
    return default_state(num_players, rng=rng)


ACTIONS = {
    'add_player': add_player,
    'remove_player': remove_player,
    'rename_player': rename_player,
    'change_color': change_color,
    'place_cube': place_cube,
    'remove_cube': remove_cube,
    'set_mode': set_mode,
    'set_goal': set_goal,
    'new_game': new_game,
    'set_end_game_entry': set_end_game_entry,
    'set_include_oceania': set_include_oceania,
    'clear_placements': clear_placements,
    'clear_end_game': clear_end_game,
    'reset': reset,
}


def dispatch(state: GameState, action: str, payload=None, rng=None) -> GameState:
    """Apply one named action and return the resulting state."""
    handler = ACTIONS.get(action)
    if handler is None:
        raise InvalidInput(f'Unknown action {action!r}')
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise InvalidInput('payload must be an object')
    new_state = handler(state.copy(), payload, rng=rng)
    new_state.check_integrity()
    logger.debug(f"[action] {action} applied players={len(new_state.players)} placements={len(new_state.placements)}")
    return new_state
