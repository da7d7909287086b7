"""End-game score calculation.

Totals every player's scoring categories, awards the Oceania nectar
bonuses per habitat and ranks the table. Ties on total are broken by
unused food; players tied on both share a rank (1, 1, 3 ...).
"""
import logging

from wingspan_scoring.errors import InvalidInput

logger = logging.getLogger(__name__)

BASE_CATEGORIES = (
    'bird_points',
    'bonus_cards',
    'round_goals',
    'eggs',
    'cached_food',
    'tucked_cards',
)

HABITATS = ('forest', 'grassland', 'wetland')
NECTAR_CATEGORIES = tuple(f'nectar_{h}' for h in HABITATS)

CATEGORIES = BASE_CATEGORIES + NECTAR_CATEGORIES + ('unused_food',)

# Nectar bonus per tier: most nectar in a habitat, then the next distinct count
NECTAR_TIER_POINTS = (5, 2)


def coerce_count(value, field: str) -> int:
    """Read a category value; absent or non-numeric values count as zero."""
    if value is None or isinstance(value, bool):
        return 0
    try:
        number = int(float(str(value).strip()))
    except (ValueError, OverflowError):
        return 0
    if number < 0:
        raise InvalidInput(f'{field} must be non-negative')
    return number


def normalize_player(raw: dict, index: int) -> dict:
    if not isinstance(raw, dict):
        raise InvalidInput(f'Player {index + 1} must be an object')
    name = str(raw.get('player_name') or '').strip() or f'Player {index + 1}'
    player = {'player_name': name}
    for field in CATEGORIES:
        player[field] = coerce_count(raw.get(field), field)
    breakdown = raw.get('round_goals_breakdown')
    if breakdown is not None:
        if not isinstance(breakdown, (list, tuple)) or len(breakdown) != 4:
            raise InvalidInput('round_goals_breakdown must list 4 round scores')
        player['round_goals_breakdown'] = [coerce_count(v, 'round_goals_breakdown') for v in breakdown]
    return player


def score_habitat(counts: list) -> list:
    """Nectar points for one habitat, aligned with ``counts``.

    The highest distinct count earns the first tier bonus and the next
    distinct count the second; tied players each receive the full bonus of
    their tier. Players without nectar in the habitat earn nothing.
    """
    tiers = sorted({c for c in counts if c > 0}, reverse=True)[:len(NECTAR_TIER_POINTS)]
    bonus = dict(zip(tiers, NECTAR_TIER_POINTS))
    return [bonus.get(c, 0) for c in counts]


def calculate_nectar_points(players: list) -> list:
    per_habitat = {h: score_habitat([p[f'nectar_{h}'] for p in players]) for h in HABITATS}
    return [{h: per_habitat[h][i] for h in HABITATS} for i in range(len(players))]


def determine_rankings(players: list) -> list:
    """Sort by total then unused food (both descending) and assign competition ranks."""
    ranked = sorted(players, key=lambda p: (-p['total'], -p['unused_food']))
    for i, p in enumerate(ranked):
        prev = ranked[i - 1] if i else None
        if prev and prev['total'] == p['total'] and prev['unused_food'] == p['unused_food']:
            p['rank'] = prev['rank']
        else:
            p['rank'] = i + 1
        p['is_winner'] = p['rank'] == 1
    return ranked


def calculate_game_end(raw_players, include_oceania: bool):
    """Score a finished game.

    Returns ``(players, nectar_scoring)`` where ``players`` is in ranked
    order with ``total``, ``rank``, ``is_winner`` and ``nectar_points``
    filled in, and ``nectar_scoring`` maps each habitat to the points earned
    per player name.
    """
    if not raw_players:
        raise InvalidInput('At least one player is required')
    players = [normalize_player(p, i) for i, p in enumerate(raw_players)]
    names = [p['player_name'] for p in players]
    duplicates = sorted({n for n in names if names.count(n) > 1})
    if duplicates:
        raise InvalidInput(f'Player names must be unique: {", ".join(duplicates)}')

    if include_oceania:
        nectar = calculate_nectar_points(players)
    else:
        nectar = [{h: 0 for h in HABITATS} for _ in players]

    nectar_scoring = {h: {} for h in HABITATS}
    for player, points in zip(players, nectar):
        player['nectar_points'] = points
        player['total'] = sum(player[c] for c in BASE_CATEGORIES) + sum(points.values())
        for h in HABITATS:
            if points[h]:
                nectar_scoring[h][player['player_name']] = points[h]

    ranked = determine_rankings(players)
    logger.info(
        f"[game_end] scored {len(ranked)} players oceania={include_oceania} "
        f"winner(s)={[p['player_name'] for p in ranked if p['is_winner']]}"
    )
    return ranked, nectar_scoring
