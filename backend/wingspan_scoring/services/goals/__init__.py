from .catalog import NO_GOAL_ID, get_goals, find_goal, is_no_goal
from .selector import ROUNDS, select_round_goals
from .scorer import MODES, score_slots, calculate_green_scores, calculate_blue_scores
