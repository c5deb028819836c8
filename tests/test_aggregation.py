"""Tests for derived totals, tallies and leaderboards."""

import pytest

from ballclub.aggregation import (
    batter_vote_count_for,
    fielder_vote_count_for,
    leaderboard,
    refresh_player_counters,
    tally_game_votes,
    total_points_for,
)
from ballclub.mock_data import mock_players, mock_scores, mock_votes
from ballclub.models import Player, Score, Vote


class TestCounts:
    """Tests for per-player totals."""

    def test_total_points(self):
        scores = mock_scores()
        assert total_points_for(scores, '3') == 5
        assert total_points_for(scores, '3', game_id='1') == 3
        assert total_points_for(scores, '10') == 0

    def test_vote_counts(self):
        votes = mock_votes()
        assert fielder_vote_count_for(votes, '4') == 4
        assert batter_vote_count_for(votes, '2') == 4
        assert batter_vote_count_for(votes, '10') == 0


class TestTally:
    """Tests for per-game vote tallies."""

    def test_tally_sorted_by_count(self):
        tally = tally_game_votes(mock_votes(), '2')
        assert tally['fielder'] == [('4', 4), ('1', 1)]
        assert tally['batter'] == [('2', 4), ('3', 1)]

    def test_empty_picks_not_counted(self):
        votes = [
            Vote(id='v1', game_id='g', voter_id='a', best_fielder_id=None, best_batter_id='b'),
            Vote(id='v2', game_id='g', voter_id='c'),
        ]
        assert tally_game_votes(votes, 'g') == {'fielder': [], 'batter': [('b', 1)]}

    def test_ties_keep_first_seen_order(self):
        votes = [
            Vote(id='v1', game_id='g', voter_id='a', best_fielder_id='x'),
            Vote(id='v2', game_id='g', voter_id='b', best_fielder_id='y'),
        ]
        assert tally_game_votes(votes, 'g')['fielder'] == [('x', 1), ('y', 1)]


class TestLeaderboard:
    """Tests for leaderboard ranking."""

    def test_points_leaderboard(self):
        board = leaderboard(mock_players(), mock_scores(), mock_votes(), 'points')
        assert [(p.id, v) for p, v in board[:3]] == [('3', 5), ('2', 3), ('1', 2)]

    def test_fielder_leaderboard(self):
        board = leaderboard(mock_players(), mock_scores(), mock_votes(), 'fielder')
        assert (board[0][0].id, board[0][1]) == ('3', 4)
        assert (board[1][0].id, board[1][1]) == ('4', 4)

    def test_ties_are_stable(self):
        """Test equal values keep roster order."""
        players = [Player(id=pid, name=pid, position='P') for pid in ('a', 'b', 'c')]
        scores = [Score(id='s1', game_id='g', player_id='c', points=3)]
        board = leaderboard(players, scores, [], 'points')
        assert [p.id for p, _ in board] == ['c', 'a', 'b']

    def test_unknown_metric(self):
        with pytest.raises(ValueError):
            leaderboard(mock_players(), [], [], 'assists')

    def test_ignores_stored_counters(self):
        """Test ranking comes from live scores, not seeded totals."""
        board = leaderboard(mock_players(), [], [], 'points')
        assert all(value == 0 for _, value in board)


class TestRefresh:
    """Tests for recomputing stored counters."""

    def test_refresh(self):
        players = refresh_player_counters(mock_players(), mock_scores(), mock_votes())
        mike = next(p for p in players if p.id == '1')
        assert (mike.total_points, mike.best_fielder, mike.best_batter) == (2, 1, 4)

    def test_refresh_returns_copies(self):
        original = mock_players()
        refresh_player_counters(original, [], [])
        assert original[0].total_points == 12
