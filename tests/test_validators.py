"""Unit tests for validation functions."""

from ballclub.mock_data import mock_games, mock_players, mock_scores, mock_teams, mock_votes
from ballclub.models import Game, Score, Vote
from ballclub.schemas import PointsEntry
from ballclub.validators import (
    audit_club_data,
    validate_game_input,
    validate_points_entries,
    validate_vote_picks,
)


class TestGameInputValidation:
    """Tests for new game input."""

    def test_valid_game(self):
        assert validate_game_input('1', 'Rivals', '2024-05-01', 'Home') == []

    def test_all_missing(self):
        errors = validate_game_input('', None, ' ', '')
        assert errors == ['Missing team_id', 'Missing opponent', 'Missing date', 'Missing location']


class TestPointsValidation:
    """Tests for assign-points entries."""

    def test_valid_top_three(self):
        """Test a full 3/2/1 assignment passes all checks."""
        entries = [
            PointsEntry(player_id='p1', points=3),
            PointsEntry(player_id='p2', points=2),
            PointsEntry(player_id='p3', points=1),
        ]
        assert validate_points_entries(entries) == ([], [])

    def test_partial_assignment_is_valid(self):
        assert validate_points_entries([PointsEntry(player_id='p1', points=2)]) == ([], [])

    def test_invalid_points(self):
        errors, conflicts = validate_points_entries([PointsEntry(player_id='p1', points=5)])
        assert len(errors) == 1
        assert 'invalid points 5' in errors[0]
        assert conflicts == []

    def test_blank_player(self):
        errors, _ = validate_points_entries([PointsEntry(player_id=' ', points=3)])
        assert errors == ['Entry 1 has no player']

    def test_duplicate_point_value(self):
        _, conflicts = validate_points_entries([
            PointsEntry(player_id='p1', points=2),
            PointsEntry(player_id='p2', points=2),
        ])
        assert conflicts == ['2nd place (2 pts) assigned to 2 players']

    def test_duplicate_player(self):
        _, conflicts = validate_points_entries([
            PointsEntry(player_id='p1', points=3),
            PointsEntry(player_id='p1', points=1),
        ])
        assert conflicts == ['Players listed more than once: p1']


class TestVotePicks:
    """Tests for vote pick checks."""

    def test_valid_picks(self):
        assert validate_vote_picks('p1', 'p2', 'p3') == []

    def test_empty_picks(self):
        assert validate_vote_picks('p1', None, None) == []

    def test_self_picks(self):
        conflicts = validate_vote_picks('p1', 'p1', 'p1')
        assert len(conflicts) == 2
        assert 'best fielder' in conflicts[0]
        assert 'best batter' in conflicts[1]


class TestAudit:
    """Tests for stored data audits."""

    def test_mock_club_is_clean(self):
        warnings = audit_club_data(
            mock_games(), mock_scores(), mock_votes(), players=mock_players(), teams=mock_teams()
        )
        assert warnings == []

    def test_dangling_references(self):
        games = [Game(id='g1', team_id='t9', opponent='X', date='2024-05-01', location='Y',
                      participants=['ghost'])]
        scores = [Score(id='s1', game_id='g2', player_id='1', points=3)]
        votes = [Vote(id='v1', game_id='g1', voter_id='1', best_fielder_id='ghost')]

        warnings = audit_club_data(games, scores, votes, players=mock_players(), teams=mock_teams())

        assert 'Game g1 references missing team t9' in warnings
        assert 'Game g1 has unknown participants: ghost' in warnings
        assert 'Score s1 references missing game g2' in warnings
        assert 'Vote v1 picks missing player ghost' in warnings

    def test_duplicates_and_bad_phase(self):
        games = [Game(id='g1', team_id='t1', opponent='X', date='2024-05-01', location='Y', voting_open=True)]
        scores = [
            Score(id='s1', game_id='g1', player_id='a', points=3),
            Score(id='s2', game_id='g1', player_id='b', points=3),
        ]
        votes = [
            Vote(id='v1', game_id='g1', voter_id='a'),
            Vote(id='v2', game_id='g1', voter_id='a'),
        ]

        warnings = audit_club_data(games, scores, votes)

        assert warnings == [
            'Game g1 has voting open but is not completed',
            'Game g1 has 2 players with 3 pts',
            'Game g1 has 2 votes from voter a',
        ]
