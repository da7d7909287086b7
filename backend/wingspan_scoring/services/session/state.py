"""Scoring session state container.

A ``GameState`` is the whole in-progress session: roster, round goals,
cube placements, scoring mode and end-game entries. It is only changed
through the action handlers in ``actions`` and persisted as a JSON blob.
``project_state`` is the read-only view sent to clients.
"""
import copy
from typing import Dict, List, Optional

from wingspan_scoring.errors import DataIntegrity, InvalidInput
from wingspan_scoring.services.goals import (
    ROUNDS,
    get_goals,
    is_no_goal,
    score_slots,
    select_round_goals,
)
from wingspan_scoring.services.scoring import (
    CATEGORIES,
    placements_from_dict,
    placements_to_dict,
    round_scores,
    validate_placements,
)

PLAYER_COLORS = ('blue', 'purple', 'green', 'red', 'yellow')
MIN_PLAYERS = 1
MAX_PLAYERS = len(PLAYER_COLORS)
DEFAULT_EXPANSIONS = {'base': True, 'european': True, 'oceania': True}


def default_player_name(index: int) -> str:
    return f'Player {index + 1}'


class Player:
    def __init__(self, player_id: int, name: str, color: str):
        self.id = player_id
        self.name = name
        self.color = color

    def to_dict(self):
        return {'id': self.id, 'name': self.name, 'color': self.color}

    @classmethod
    def from_dict(cls, data):
        return cls(int(data['id']), str(data.get('name') or ''), str(data['color']))


class GameState:
    def __init__(self, players=None, goals=None, placements=None, mode='blue',
                 expansions=None, include_oceania=True, end_game=None):
        self.players: List[Player] = players or []
        self.goals: Dict[int, Optional[dict]] = goals or {r: None for r in ROUNDS}
        self.placements = placements or {}
        self.mode = mode
        self.expansions = dict(expansions or DEFAULT_EXPANSIONS)
        self.include_oceania = include_oceania
        self.end_game: Dict[int, dict] = end_game or {}

    def copy(self) -> 'GameState':
        return copy.deepcopy(self)

    def player(self, player_id) -> Player:
        try:
            pid = int(player_id)
        except (TypeError, ValueError):
            raise InvalidInput('player_id must be an integer')
        for p in self.players:
            if p.id == pid:
                return p
        raise InvalidInput(f'No player with id {pid}')

    def index_of(self, player: Player) -> int:
        return self.players.index(player)

    def used_colors(self, exclude: Optional[Player] = None) -> set:
        return {p.color for p in self.players if p is not exclude}

    def used_names(self, exclude: Optional[Player] = None) -> set:
        return {p.name for p in self.players if p is not exclude}

    def next_player_id(self) -> int:
        return max((p.id for p in self.players), default=-1) + 1

    def valid_slots(self, round_no: int) -> list:
        if is_no_goal(self.goals.get(round_no)):
            return [0]
        return score_slots(self.mode, round_no)

    def check_integrity(self) -> None:
        if not MIN_PLAYERS <= len(self.players) <= MAX_PLAYERS:
            raise DataIntegrity(f'A session holds {MIN_PLAYERS} to {MAX_PLAYERS} players, found {len(self.players)}')
        colors = [p.color for p in self.players]
        unknown = [c for c in colors if c not in PLAYER_COLORS]
        if unknown:
            raise DataIntegrity(f'Unknown player color(s): {", ".join(unknown)}')
        if len(set(colors)) != len(colors):
            raise DataIntegrity('Each color may be used by only one player')
        if len({p.id for p in self.players}) != len(self.players):
            raise DataIntegrity('Player ids must be unique')
        if len({p.name for p in self.players}) != len(self.players):
            raise DataIntegrity('Player names must be unique')
        validate_placements(self.placements)

    def to_dict(self):
        return {
            'players': [p.to_dict() for p in self.players],
            'goals': {str(r): self.goals.get(r) for r in ROUNDS},
            'cube_placements': placements_to_dict(self.placements),
            'mode': self.mode,
            'expansions': dict(self.expansions),
            'include_oceania': self.include_oceania,
            'end_game': {str(pid): dict(entry) for pid, entry in self.end_game.items()},
        }

    @classmethod
    def from_dict(cls, data) -> 'GameState':
        try:
            state = cls(
                players=[Player.from_dict(p) for p in data.get('players', [])],
                goals={r: (data.get('goals') or {}).get(str(r)) for r in ROUNDS},
                placements=placements_from_dict(data.get('cube_placements')),
                mode=data.get('mode', 'blue'),
                expansions=data.get('expansions'),
                include_oceania=bool(data.get('include_oceania', True)),
                end_game={int(pid): dict(entry) for pid, entry in (data.get('end_game') or {}).items()},
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise DataIntegrity(f'Malformed session state: {exc}')
        state.check_integrity()
        return state


def default_state(num_players: int = 4, expansions=None, rng=None) -> GameState:
    if not MIN_PLAYERS <= num_players <= MAX_PLAYERS:
        raise InvalidInput(f'Number of players must be between {MIN_PLAYERS} and {MAX_PLAYERS}')
    flags = dict(expansions or DEFAULT_EXPANSIONS)
    if not any(flags.get(e) for e in DEFAULT_EXPANSIONS):
        raise InvalidInput('Please select at least one expansion')
    players = [Player(i, default_player_name(i), PLAYER_COLORS[i]) for i in range(num_players)]
    goals = select_round_goals(
        get_goals(bool(flags.get('base')), bool(flags.get('european')), bool(flags.get('oceania'))),
        rng=rng,
    )
    return GameState(players=players, goals=goals, expansions=flags, include_oceania=bool(flags.get('oceania')))


def round_goal_totals(state: GameState) -> list:
    totals = []
    for p in state.players:
        rounds, total = round_scores(p.color, state.placements)
        totals.append({'player_id': p.id, 'rounds': rounds, 'total': total})
    return totals


def game_end_players(state: GameState) -> list:
    """Build calculator input from the session's end-game entries.

    Round goals come from the cube placements unless the entry sets them
    explicitly.
    """
    players = []
    for p, rg in zip(state.players, round_goal_totals(state)):
        entry = state.end_game.get(p.id, {})
        row = {'player_name': p.name}
        row.update({c: entry.get(c, 0) for c in CATEGORIES})
        if 'round_goals' not in entry:
            row['round_goals'] = rg['total']
            row['round_goals_breakdown'] = [s or 0 for s in rg['rounds']]
        players.append(row)
    return players


def project_state(state: GameState, session_code: Optional[str] = None) -> dict:
    payload = state.to_dict()
    if session_code:
        payload['session_code'] = session_code
    payload['round_goal_scores'] = round_goal_totals(state)
    payload['valid_slots'] = {str(r): state.valid_slots(r) for r in ROUNDS}
    return payload
