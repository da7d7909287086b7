from datetime import datetime

import pytest

from wingspan_scoring.errors import GameNotFound, InvalidInput
from wingspan_scoring.services import history
from wingspan_scoring.services.history import CSV_COLUMNS, csv_io
from wingspan_scoring.services.scoring import calculate_game_end


def scored(*players, include_oceania=False):
    return calculate_game_end(list(players), include_oceania)


def save(players, include_oceania=False, created_at=None):
    ranked, nectar = scored(*players, include_oceania=include_oceania)
    return history.save_game_result(ranked, nectar, include_oceania, created_at=created_at)


HEADER = ','.join(CSV_COLUMNS)


def csv_text(*rows):
    return '\n'.join((HEADER,) + rows) + '\n'


def test_save_and_get_round_trip(flask_app):
    game_id = save([
        {'player_name': 'Alice', 'bird_points': 40, 'round_goals': 6, 'round_goals_breakdown': [4, 0, 2, 0]},
        {'player_name': 'Bob', 'bird_points': 35},
    ])
    result = history.get_game_result(game_id)
    assert result.winner_name == 'Alice'
    assert result.winner_score == 46
    assert result.num_players == 2
    assert result.nectar_scoring is None
    assert result.round_breakdown == {'Alice': {'round1': 4, 'round2': 0, 'round3': 2, 'round4': 0}}
    data = result.to_dict()
    assert [p['player_name'] for p in data['players']] == ['Alice', 'Bob']


def test_save_requires_players_and_winner(flask_app):
    with pytest.raises(InvalidInput):
        history.save_game_result([], {}, False)
    with pytest.raises(InvalidInput):
        history.save_game_result([{'player_name': 'Alice', 'rank': 2, 'total': 10}], {}, False)


def test_missing_game(flask_app):
    with pytest.raises(GameNotFound):
        history.get_game_result(999)
    with pytest.raises(GameNotFound):
        history.delete_game_result(999)


def test_list_newest_first_with_pagination(flask_app):
    ids = [
        save([{'player_name': f'P{i}', 'eggs': i}], created_at=datetime(2024, 1, i + 1))
        for i in range(5)
    ]
    page = history.list_game_results(limit=2, offset=0)
    assert [g.id for g in page] == [ids[4], ids[3]]
    page = history.list_game_results(limit=2, offset=2)
    assert [g.id for g in page] == [ids[2], ids[1]]
    assert len(history.list_game_results(limit=0)) == 5
    assert history.count_game_results() == 5


def test_delete_game(flask_app):
    game_id = save([{'player_name': 'Alice'}])
    history.delete_game_result(game_id)
    assert history.count_game_results() == 0


def test_player_stats(flask_app):
    save([{'player_name': 'Alice', 'bird_points': 50}, {'player_name': 'Bob', 'bird_points': 40}])
    save([{'player_name': 'Alice', 'bird_points': 30}, {'player_name': 'Bob', 'bird_points': 60}])
    save([{'player_name': 'Alice', 'bird_points': 70}, {'player_name': 'Cara', 'bird_points': 10}])
    stats = history.get_player_stats('Alice')
    assert stats['games_played'] == 3
    assert stats['wins'] == 2
    assert stats['average_score'] == pytest.approx(50.0)
    assert stats['win_rate'] == pytest.approx(200 / 3)

    nobody = history.get_player_stats('Zed')
    assert nobody['games_played'] == 0
    assert nobody['win_rate'] == 0


def test_leaderboard_first_holder_keeps_tie(flask_app):
    save([{'player_name': 'Alice', 'eggs': 12}], created_at=datetime(2024, 1, 1))
    save([{'player_name': 'Bob', 'eggs': 12, 'bird_points': 5}], created_at=datetime(2024, 2, 1))
    board = history.get_leaderboard()
    assert board['eggs']['player_name'] == 'Alice'
    assert board['eggs']['score'] == 12
    assert board['total_score']['player_name'] == 'Bob'
    assert board['total_score']['score'] == 17
    assert board['nectar_forest']['player_name'] == ''
    assert board['nectar_forest']['score'] == 0


def test_empty_leaderboard(flask_app):
    board = history.get_leaderboard()
    assert set(board) == set(history.LEADERBOARD_CATEGORIES)
    assert all(entry['player_name'] == '' and entry['score'] == 0 for entry in board.values())


def test_import_valid_games(flask_app):
    text = csv_text(
        'g1,2024-03-01,false,Alice,40,5,6,8,2,3,0,0,0,1,,1',
        'g1,2024-03-01,false,Bob,30,5,6,8,2,3,0,0,0,0,54,2',
        '',
        'g2,03/04/2024 18:30,yes,Cara,20,0,0,0,0,0,4,2,0,,,1',
        'g2,03/04/2024 18:30,yes,Dan,10,0,0,0,0,0,1,3,0,,,2',
    )
    result = history.import_games(text)
    assert result == {'games_imported': 2, 'errors': []}

    games = history.all_game_results()
    assert [g.num_players for g in games] == [2, 2]
    first = games[0]
    assert first.include_oceania is False
    assert first.winner_name == 'Alice'
    # Blank total is computed from the base categories
    assert first.winner_score == 64
    second = games[1]
    assert second.created_at == datetime(2024, 3, 4, 18, 30)
    assert second.nectar_scoring == {
        'forest': {'Cara': 5, 'Dan': 2},
        'grassland': {'Dan': 5, 'Cara': 2},
        'wetland': {},
    }


def test_import_is_all_or_nothing(flask_app):
    text = csv_text(
        'g1,2024-03-01,false,Alice,40,5,6,8,2,3,0,0,0,1,64,1',
        'g1,2024-03-01,false,Bob,30,5,6,8,2,3,0,0,0,0,54,2',
        'g2,2024-03-02,false,Cara,20,0,0,0,0,0,0,0,0,0,20,1',
        'g2,2024-03-02,false,Dan,-1,0,0,0,0,0,0,0,0,0,10,2',
    )
    result = history.import_games(text)
    assert result['games_imported'] == 0
    assert len(result['errors']) == 1
    error = result['errors'][0]
    assert error['line'] == 5
    assert error['game_id'] == 'g2'
    assert 'non-negative' in error['message']
    assert history.count_game_results() == 0


@pytest.mark.parametrize('rows, message', [
    (tuple(f'g1,2024-03-01,false,P{i},1,0,0,0,0,0,0,0,0,0,1,{i}' for i in range(1, 7)), 'player count'),
    (('g1,2024-03-01,false,Alice,1,0,0,0,0,0,0,0,0,0,1,1',
      'g1,2024-03-02,false,Bob,1,0,0,0,0,0,0,0,0,0,1,2'), 'inconsistent dates'),
    (('g1,2024-03-01,false,Alice,1,0,0,0,0,0,0,0,0,0,1,1',
      'g1,2024-03-01,false,Bob,1,0,0,0,0,0,0,0,0,0,1,1',
      'g1,2024-03-01,false,Cara,0,0,0,0,0,0,0,0,0,0,0,2'), 'competition ranking'),
    (('g1,2024-03-01,false,Alice,1,0,0,0,0,0,0,0,0,0,1,1',
      'g1,2024-03-01,false,Alice,0,0,0,0,0,0,0,0,0,0,0,2'), 'duplicate player name'),
    (('g1,2024-03-01,false,Alice,1,0,0,0,0,0,0,0,0,0,1,1',
      'g1,2024-03-01,false,Bob,1,0,0,0,0,0,0,0,0,0,1,3'), 'competition ranking'),
    (('g1,yesterday,false,Alice,1,0,0,0,0,0,0,0,0,0,1,1',
      'g1,yesterday,false,Bob,1,0,0,0,0,0,0,0,0,0,1,2'), 'date'),
    (('g1,2024-03-01,maybe,Alice,1,0,0,0,0,0,0,0,0,0,1,1',
      'g1,2024-03-01,maybe,Bob,1,0,0,0,0,0,0,0,0,0,1,2'), 'IncludeOceania'),
    (('g1,2024-03-01,false,,1,0,0,0,0,0,0,0,0,0,1,1',
      'g1,2024-03-01,false,Bob,1,0,0,0,0,0,0,0,0,0,1,2'), 'name'),
    ((',2024-03-01,false,Alice,1,0,0,0,0,0,0,0,0,0,1,1',), 'GameID'),
    (('g1,2024-03-01,false,Alice,1,0,0,0,0,0,0,0,0,0,1,1,extra',), 'column count'),
])
def test_import_rejects_invalid_games(flask_app, rows, message):
    result = history.import_games(csv_text(*rows))
    assert result['games_imported'] == 0
    assert any(message in e['message'] for e in result['errors'])
    assert history.count_game_results() == 0


def test_import_rejects_wrong_header(flask_app):
    result = history.import_games('GameID,Date,Player\ng1,2024-03-01,Alice\n')
    assert result['games_imported'] == 0
    assert result['errors'][0]['line'] == 1
    assert 'header' in result['errors'][0]['message']


def test_export_round_trips_through_import(flask_app):
    save([{'player_name': 'Alice', 'bird_points': 40, 'nectar_forest': 3, 'unused_food': 2},
          {'player_name': 'Bob', 'bird_points': 38, 'nectar_forest': 1}],
         include_oceania=True, created_at=datetime(2024, 5, 1))
    save([{'player_name': 'Cara', 'eggs': 9}, {'player_name': 'Dan', 'eggs': 3}],
         created_at=datetime(2024, 6, 1))

    exported = history.export_games_to_csv(history.all_game_results())
    lines = exported.strip().split('\n')
    assert lines[0] == HEADER
    assert len(lines) == 5
    assert lines[1].startswith('1,2024-05-01,true,Alice,40,')

    before = [(g.winner_name, g.winner_score, g.include_oceania) for g in history.all_game_results()]
    result = history.import_games(exported)
    assert result['errors'] == []
    assert result['games_imported'] == 2
    after = [(g.winner_name, g.winner_score, g.include_oceania) for g in sorted(history.all_game_results(), key=lambda g: g.id)[2:]]
    assert after == before


def test_tied_and_solo_games_round_trip(flask_app):
    save([{'player_name': 'Alice', 'eggs': 10, 'unused_food': 1},
          {'player_name': 'Bob', 'eggs': 10, 'unused_food': 1},
          {'player_name': 'Cara', 'eggs': 4}], created_at=datetime(2024, 7, 1))
    save([{'player_name': 'Solo', 'bird_points': 61}], created_at=datetime(2024, 7, 2))

    exported = history.export_games_to_csv(history.all_game_results())
    result = history.import_games(exported)
    assert result == {'games_imported': 2, 'errors': []}

    imported = sorted(history.all_game_results(), key=lambda g: g.id)[2:]
    assert sorted(p['rank'] for p in imported[0].players) == [1, 1, 3]
    assert imported[0].winner_name == 'Alice'
    assert imported[1].num_players == 1
    assert imported[1].winner_score == 61


def test_import_rejects_non_utf8_bytes(flask_app):
    body = csv_text('g1,2024-03-01,false,José,1,0,0,0,0,0,0,0,0,0,1,1').encode('latin-1')
    result = history.import_games(body)
    assert result['games_imported'] == 0
    assert result['errors'] == [{'line': 1, 'game_id': '', 'message': 'file is not valid UTF-8'}]
    assert history.count_game_results() == 0


@pytest.mark.parametrize('ranks, valid', [
    ([1], True),
    ([1, 2, 3], True),
    ([1, 1, 3], True),
    ([1, 2, 2], True),
    ([1, 1, 1, 4], True),
    ([1, 1, 2], False),
    ([1, 3], False),
    ([2], False),
])
def test_competition_ranking(ranks, valid):
    assert csv_io.is_competition_ranking(ranks) is valid
