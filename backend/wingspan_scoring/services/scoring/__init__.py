from .round_goals import round_scores, validate_placements, placements_to_dict, placements_from_dict
from .game_end import (
    BASE_CATEGORIES,
    CATEGORIES,
    HABITATS,
    calculate_game_end,
    coerce_count,
    determine_rankings,
    score_habitat,
)
