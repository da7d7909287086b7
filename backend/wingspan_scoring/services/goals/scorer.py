"""Per-round goal scoring for the two sides of the goal board.

Green (competitive) side ranks players by their count against a per-round
points table. Blue (linear) side awards one point per item, capped at five.
"""

# Green side points by round, indexed by placement (1st, 2nd, 3rd)
GREEN_SCORING_RULES = {
    1: {1: 4, 2: 1, 3: 0},
    2: {1: 5, 2: 2, 3: 0},
    3: {1: 6, 2: 3, 3: 2},
    4: {1: 7, 2: 4, 3: 2},
}

BLUE_MAX_POINTS = 5

MODES = ('blue', 'green')


def score_slots(mode: str, round_no: int) -> list:
    """Score values a cube may occupy for the given mode and round."""
    if mode == 'green':
        return sorted({0, *GREEN_SCORING_RULES[round_no].values()})
    return list(range(0, BLUE_MAX_POINTS + 1))


def calculate_green_scores(player_counts: dict, round_no: int) -> list:
    if round_no not in GREEN_SCORING_RULES:
        round_no = 1
    rules = GREEN_SCORING_RULES[round_no]

    scores = [{'player_name': name, 'count': int(count), 'points': 0, 'rank': 0}
              for name, count in player_counts.items()]
    scores.sort(key=lambda s: (-s['count'], s['player_name']))

    i = 0
    while i < len(scores):
        j = i
        while j < len(scores) and scores[j]['count'] == scores[i]['count']:
            j += 1
        rank = i + 1
        group = scores[i:j]
        # Tied players share the points of every place they occupy, rounded down
        pooled = sum(rules.get(r, 0) for r in range(rank, rank + len(group)))
        points = pooled // len(group)
        for s in group:
            s['rank'] = rank
            s['points'] = 0 if s['count'] == 0 else points
        i = j
    return scores


def calculate_blue_scores(player_counts: dict) -> list:
    scores = [{'player_name': name, 'count': int(count),
               'points': min(max(int(count), 0), BLUE_MAX_POINTS), 'rank': None}
              for name, count in player_counts.items()]
    scores.sort(key=lambda s: (-s['points'], s['player_name']))
    return scores
