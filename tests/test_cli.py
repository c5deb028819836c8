"""Tests for the club_admin command line."""

import argparse

import pytest

import club_admin


def run(data_dir, *argv):
    args = club_admin.build_parser().parse_args(['--data-dir', str(data_dir), *argv])
    club_admin.run(args)


class TestParsePoints:
    def test_pairs(self):
        assert club_admin.parse_points(['3:1', '2:5']) == [
            {'player_id': '1', 'points': 3},
            {'player_id': '5', 'points': 2},
        ]

    @pytest.mark.parametrize('value', ['3', 'x:1', ':1'])
    def test_bad_pair(self, value):
        with pytest.raises(argparse.ArgumentTypeError):
            club_admin.parse_points([value])


class TestCommands:
    """Tests for commands against a JSON data directory."""

    def test_seed_then_vote_and_score(self, tmp_path, capsys):
        run(tmp_path, 'seed')
        assert (tmp_path / 'games.json').exists()

        run(tmp_path, '--as', 'mike@baseball.com', 'vote', '3', '--fielder', '3', '--batter', '5')
        run(tmp_path, '--as', 'manager@baseball.com', 'close-voting', '3')
        run(tmp_path, '--as', 'manager@baseball.com', 'assign-points', '3', '3:3', '2:5', '1:2')
        run(tmp_path, '--as', 'admin@baseball.com', 'leaderboard')

        out = capsys.readouterr().out
        assert 'Vote 3-1 saved' in out
        assert 'Voting closed for game 3' in out
        assert '1. Shohei Ohtani (Pitcher/DH): 8' in out

    def test_command_needs_user(self, tmp_path):
        with pytest.raises(SystemExit):
            run(tmp_path, 'complete', '4')

    def test_games_listing(self, tmp_path, capsys):
        run(tmp_path, 'games', '--team', '4')
        out = capsys.readouterr().out
        assert 'Marlins' in out
        assert 'Yankees' not in out
