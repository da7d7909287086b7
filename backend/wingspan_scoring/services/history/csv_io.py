"""CSV import and export of the game history.

One row per player per game, grouped by ``GameID`` on import. Import is
all-or-nothing: any row or game error means no game is stored.
"""
from datetime import datetime
import io
import logging

import pandas as pd

from wingspan_scoring.services.scoring import BASE_CATEGORIES, HABITATS, score_habitat
from . import store

logger = logging.getLogger(__name__)

CSV_COLUMNS = [
    'GameID',
    'Date',
    'IncludeOceania',
    'PlayerName',
    'BirdPoints',
    'BonusCards',
    'RoundGoals',
    'Eggs',
    'CachedFood',
    'TuckedCards',
    'NectarForest',
    'NectarGrassland',
    'NectarWetland',
    'UnusedFood',
    'Total',
    'Rank',
]

# CSV column -> stored player field
_FIELD_COLUMNS = {
    'bird_points': 'BirdPoints',
    'bonus_cards': 'BonusCards',
    'round_goals': 'RoundGoals',
    'eggs': 'Eggs',
    'cached_food': 'CachedFood',
    'tucked_cards': 'TuckedCards',
    'nectar_forest': 'NectarForest',
    'nectar_grassland': 'NectarGrassland',
    'nectar_wetland': 'NectarWetland',
    'unused_food': 'UnusedFood',
    'total': 'Total',
    'rank': 'Rank',
}

# Overflow column collecting any fields beyond the expected ones
_EXTRA = '__extra__'

DATE_FORMATS = (
    '%Y-%m-%d %H:%M:%S',
    '%Y-%m-%d %H:%M',
    '%Y-%m-%d',
    '%m/%d/%Y %H:%M:%S',
    '%m/%d/%Y %H:%M',
    '%m/%d/%Y',
)

_TRUE = ('true', 'yes', '1', 'y')
_FALSE = ('false', 'no', '0', 'n')

MIN_IMPORT_PLAYERS = 1
MAX_IMPORT_PLAYERS = 5


class ImportRowError:
    def __init__(self, line, game_id, message):
        self.line = line
        self.game_id = game_id
        self.message = message

    def to_dict(self):
        return {'line': self.line, 'game_id': self.game_id, 'message': self.message}


class GameValidationError(ValueError):
    def __init__(self, message, line=None):
        super().__init__(message)
        self.line = line


# ----------------------------------------------------------------------
# Export
# ----------------------------------------------------------------------
def export_games_to_csv(games) -> str:
    rows = []
    for game in games:
        date = game.created_at.strftime('%Y-%m-%d') if game.created_at else ''
        for p in game.players:
            row = {
                'GameID': game.id,
                'Date': date,
                'IncludeOceania': 'true' if game.include_oceania else 'false',
                'PlayerName': p.get('player_name', ''),
            }
            for field, column in _FIELD_COLUMNS.items():
                row[column] = int(p.get(field) or 0)
            rows.append(row)
    df = pd.DataFrame(rows, columns=CSV_COLUMNS)
    logger.info(f"[export] {len(games)} games, {len(rows)} player rows")
    return df.to_csv(index=False, lineterminator='\n')


# ----------------------------------------------------------------------
# Import
# ----------------------------------------------------------------------
def _cell(value) -> str:
    if value is None or (not isinstance(value, str) and pd.isna(value)):
        return ''
    return str(value).strip()


def _keep_overflow(fields):
    # Rows with too many fields keep their extras in the overflow column
    return fields[:len(CSV_COLUMNS)] + [','.join(fields[len(CSV_COLUMNS):])]


def parse_csv(text: str):
    """Group CSV rows by GameID.

    Returns ``(games, errors)`` where ``games`` maps each GameID to a list of
    ``(line, record)`` pairs in file order.
    """
    try:
        header_df = pd.read_csv(io.StringIO(text), nrows=0, skipinitialspace=True)
    except (pd.errors.EmptyDataError, pd.errors.ParserError) as exc:
        return {}, [ImportRowError(1, '', f'failed to read header: {exc}')]
    header = [str(c).strip() for c in header_df.columns]
    if header != CSV_COLUMNS:
        return {}, [ImportRowError(
            1, '', f'invalid header: expected {len(CSV_COLUMNS)} columns {",".join(CSV_COLUMNS)}, got {len(header)}'
        )]

    df = pd.read_csv(
        io.StringIO(text),
        header=None,
        skiprows=1,
        names=CSV_COLUMNS + [_EXTRA],
        index_col=False,
        dtype=str,
        keep_default_na=False,
        skipinitialspace=True,
        skip_blank_lines=False,
        engine='python',
        on_bad_lines=_keep_overflow,
    )

    games = {}
    errors = []
    for idx, row in enumerate(df.itertuples(index=False, name=None)):
        line = idx + 2
        cells = [_cell(v) for v in row]
        if not any(cells):
            continue
        record = dict(zip(CSV_COLUMNS, cells))
        if cells[-1]:
            errors.append(ImportRowError(line, record['GameID'],
                                         f'invalid column count: expected {len(CSV_COLUMNS)}'))
            continue
        if not record['GameID']:
            errors.append(ImportRowError(line, '', 'GameID cannot be empty'))
            continue
        games.setdefault(record['GameID'], []).append((line, record))
    return games, errors


def parse_int(value: str, field: str) -> int:
    if value == '':
        raise ValueError(f'{field} cannot be empty')
    try:
        number = int(value)
    except ValueError:
        raise ValueError(f'invalid {field}: {value!r}')
    if number < 0:
        raise ValueError(f'{field} must be non-negative')
    return number


def parse_bool(value: str) -> bool:
    lower = value.lower()
    if lower in _TRUE:
        return True
    if lower in _FALSE:
        return False
    raise ValueError(f'invalid boolean value: {value}')


def parse_date(value: str) -> datetime:
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(value, fmt)
        except ValueError:
            continue
    raise ValueError(f'unable to parse date: {value}')


def convert_player(record: dict, include_oceania: bool) -> dict:
    if not record['PlayerName']:
        raise ValueError('player name cannot be empty')
    player = {'player_name': record['PlayerName']}
    for field in BASE_CATEGORIES + ('rank',):
        player[field] = parse_int(record[_FIELD_COLUMNS[field]], _FIELD_COLUMNS[field])
    if player['rank'] < 1:
        raise ValueError('Rank must be >= 1')
    unused = record['UnusedFood']
    player['unused_food'] = parse_int(unused, 'UnusedFood') if unused else 0
    for h in HABITATS:
        column = _FIELD_COLUMNS[f'nectar_{h}']
        player[f'nectar_{h}'] = parse_int(record[column], column) if include_oceania else 0
    total = record['Total']
    if total:
        player['total'] = parse_int(total, 'Total')
    else:
        player['total'] = sum(player[c] for c in BASE_CATEGORIES)
    player['is_winner'] = player['rank'] == 1
    return player


def nectar_scoring_for(players: list) -> dict:
    scoring = {}
    for h in HABITATS:
        points = score_habitat([p[f'nectar_{h}'] for p in players])
        scoring[h] = {p['player_name']: pts for p, pts in zip(players, points) if pts}
    return scoring


def is_competition_ranking(ranks: list) -> bool:
    """True for sorted ranks such as 1, 2, 3 or 1, 1, 3 where tied players share a rank."""
    for position, rank in enumerate(ranks, start=1):
        if rank != position and (position == 1 or rank != ranks[position - 2]):
            return False
    return True


def validate_game(game_id: str, records: list) -> dict:
    """Validate one game's rows and convert them into a storable game."""
    if not records:
        raise GameValidationError('no players for game')
    first_line, first = records[0]
    try:
        created_at = parse_date(first['Date'])
    except ValueError as exc:
        raise GameValidationError(f'invalid date format: {exc}', first_line)
    try:
        include_oceania = parse_bool(first['IncludeOceania'])
    except ValueError as exc:
        raise GameValidationError(f'invalid IncludeOceania value: {exc}', first_line)
    if not MIN_IMPORT_PLAYERS <= len(records) <= MAX_IMPORT_PLAYERS:
        raise GameValidationError(
            f'invalid player count: {len(records)} (must be {MIN_IMPORT_PLAYERS}-{MAX_IMPORT_PLAYERS})', first_line
        )

    players = []
    seen_names = set()
    for line, record in records:
        if record['Date'] != first['Date']:
            raise GameValidationError('inconsistent dates within game', line)
        if record['IncludeOceania'] != first['IncludeOceania']:
            raise GameValidationError('inconsistent IncludeOceania within game', line)
        try:
            player = convert_player(record, include_oceania)
        except ValueError as exc:
            raise GameValidationError(f'player {record["PlayerName"] or "?"}: {exc}', line)
        if player['player_name'] in seen_names:
            raise GameValidationError(f'duplicate player name {player["player_name"]}', line)
        seen_names.add(player['player_name'])
        players.append(player)

    ranks = sorted(p['rank'] for p in players)
    if not is_competition_ranking(ranks):
        raise GameValidationError(
            f'ranks must follow competition ranking (1, 1, 3 ...): got {", ".join(map(str, ranks))}', first_line
        )

    return {
        'created_at': created_at,
        'include_oceania': include_oceania,
        'players': players,
        'nectar_scoring': nectar_scoring_for(players) if include_oceania else None,
    }


def import_games(source) -> dict:
    """Import games from CSV text, bytes or a readable stream."""
    if hasattr(source, 'read'):
        source = source.read()
    if isinstance(source, bytes):
        try:
            source = source.decode('utf-8-sig')
        except UnicodeDecodeError:
            logger.warning("[import] rejected: file is not valid UTF-8")
            return {'games_imported': 0, 'errors': [ImportRowError(1, '', 'file is not valid UTF-8').to_dict()]}
    games, errors = parse_csv(source)

    converted = []
    for game_id, records in games.items():
        try:
            converted.append(validate_game(game_id, records))
        except GameValidationError as exc:
            errors.append(ImportRowError(exc.line, game_id, str(exc)))

    if errors:
        logger.warning(f"[import] rejected: {len(errors)} errors found")
        return {'games_imported': 0, 'errors': [e.to_dict() for e in errors]}

    for game in converted:
        store.save_game_result(game['players'], game['nectar_scoring'], game['include_oceania'],
                               created_at=game['created_at'], commit=False)
    store.commit_pending()
    logger.info(f"[import] imported {len(converted)} games")
    return {'games_imported': len(converted), 'errors': []}
