from .state import (
    PLAYER_COLORS,
    MAX_PLAYERS,
    GameState,
    Player,
    default_state,
    game_end_players,
    project_state,
    round_goal_totals,
)
from .actions import ACTIONS, dispatch
