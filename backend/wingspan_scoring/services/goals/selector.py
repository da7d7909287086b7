import logging
import random

ROUNDS = (1, 2, 3, 4)

logger = logging.getLogger(__name__)


def select_round_goals(available_goals, rng=None) -> dict:
    """Pick one distinct goal per round.

    When fewer than four goals are available the rounds are filled in order
    and the remaining rounds are left as None.
    """
    rng = rng or random.SystemRandom()
    if len(available_goals) < len(ROUNDS):
        logger.warning(f"[goals] only {len(available_goals)} goals available; some rounds stay empty")
        picked = list(available_goals)
    else:
        picked = rng.sample(list(available_goals), len(ROUNDS))
    return {r: (dict(picked[i]) if i < len(picked) else None) for i, r in enumerate(ROUNDS)}
