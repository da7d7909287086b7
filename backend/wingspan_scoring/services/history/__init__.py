from .store import (
    DEFAULT_LIMIT,
    LEADERBOARD_CATEGORIES,
    all_game_results,
    commit_pending,
    count_game_results,
    delete_game_result,
    get_game_result,
    get_leaderboard,
    get_player_stats,
    list_game_results,
    save_game_result,
)
from .csv_io import CSV_COLUMNS, ImportRowError, export_games_to_csv, import_games
