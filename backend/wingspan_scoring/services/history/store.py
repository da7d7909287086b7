"""Game history persistence: saved results, player statistics and the leaderboard."""
from contextlib import contextmanager
from datetime import datetime
import json
import logging

from sqlalchemy.exc import SQLAlchemyError

from wingspan_scoring import db
from wingspan_scoring.errors import GameNotFound, InvalidInput, StoreUnavailable
from wingspan_scoring.models import GameResult

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 50

# Leaderboard category -> field of a stored player record
LEADERBOARD_CATEGORIES = {
    'total_score': 'total',
    'bird_points': 'bird_points',
    'bonus_cards': 'bonus_cards',
    'round_goals': 'round_goals',
    'eggs': 'eggs',
    'cached_food': 'cached_food',
    'tucked_cards': 'tucked_cards',
    'nectar_forest': 'nectar_forest',
    'nectar_grassland': 'nectar_grassland',
    'nectar_wetland': 'nectar_wetland',
}


@contextmanager
def _store(action: str):
    try:
        yield
    except SQLAlchemyError as exc:
        db.session.rollback()
        logger.error(f"[history] {action} failed: {exc}")
        raise StoreUnavailable('The game history store is unavailable; please try again')


def save_game_result(players, nectar_scoring, include_oceania: bool, created_at: datetime = None,
                     commit: bool = True) -> int:
    """Persist a scored game and return its id.

    With ``commit=False`` the row is only flushed so several games can be
    committed together by ``commit_pending``.
    """
    if not players:
        raise InvalidInput('No players provided')
    winner = next((p for p in players if p.get('rank') == 1), None)
    if winner is None:
        raise InvalidInput('No winner (rank 1) found in player data')

    result = GameResult(
        num_players=len(players),
        include_oceania=bool(include_oceania),
        winner_name=winner['player_name'],
        winner_score=int(winner.get('total', 0)),
        players_json=json.dumps(list(players)),
        nectar_json=json.dumps(nectar_scoring) if include_oceania else None,
    )
    if created_at is not None:
        result.created_at = created_at
    with _store('save'):
        db.session.add(result)
        if commit:
            db.session.commit()
        else:
            db.session.flush()
    logger.info(f"[history] saved game={result.id} players={result.num_players} winner={result.winner_name}")
    return result.id


def commit_pending() -> None:
    with _store('commit'):
        db.session.commit()


def get_game_result(game_id: int) -> GameResult:
    with _store('get'):
        result = db.session.get(GameResult, game_id)
    if result is None:
        raise GameNotFound('Game result not found')
    return result


def list_game_results(limit: int = DEFAULT_LIMIT, offset: int = 0) -> list:
    if limit is None or limit <= 0:
        limit = DEFAULT_LIMIT
    offset = max(offset or 0, 0)
    with _store('list'):
        return (GameResult.query
                .order_by(GameResult.created_at.desc(), GameResult.id.desc())
                .limit(limit)
                .offset(offset)
                .all())


def all_game_results() -> list:
    """Every stored game, oldest first."""
    with _store('list'):
        return GameResult.query.order_by(GameResult.created_at.asc(), GameResult.id.asc()).all()


def count_game_results() -> int:
    with _store('count'):
        return GameResult.query.count()


def delete_game_result(game_id: int) -> None:
    result = get_game_result(game_id)
    with _store('delete'):
        db.session.delete(result)
        db.session.commit()
    logger.info(f"[history] deleted game={game_id}")


def get_player_stats(player_name: str) -> dict:
    games_played = 0
    wins = 0
    total_score = 0
    for game in all_game_results():
        entry = next((p for p in game.players if p.get('player_name') == player_name), None)
        if entry is None:
            continue
        games_played += 1
        total_score += int(entry.get('total', 0))
        if game.winner_name == player_name:
            wins += 1
    return {
        'player_name': player_name,
        'games_played': games_played,
        'wins': wins,
        'average_score': (total_score / games_played) if games_played else 0.0,
        'win_rate': (wins / games_played * 100) if games_played else 0.0,
    }


def get_leaderboard() -> dict:
    """Highest single-game value per category; the first holder keeps a tie."""
    leaders = {c: {'player_name': '', 'score': 0, 'game_id': None} for c in LEADERBOARD_CATEGORIES}
    for game in all_game_results():
        for p in game.players:
            for category, field in LEADERBOARD_CATEGORIES.items():
                value = int(p.get(field) or 0)
                if value > leaders[category]['score']:
                    leaders[category] = {'player_name': p.get('player_name', ''), 'score': value, 'game_id': game.id}
    return leaders
