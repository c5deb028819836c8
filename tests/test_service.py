"""Tests for the role-gated club service over the mock club."""

import threading

import pytest

from ballclub.auth import Caller, Role
from ballclub.errors import AuthorizationError, ConflictError, NotFoundError, ValidationError
from ballclub.service import ClubService
from ballclub.storage import MemoryStorage


@pytest.fixture
def club():
    """Service seeded with the mock club in memory."""
    return ClubService.open(MemoryStorage(), seed=True)


@pytest.fixture
def admin(club):
    return club.login('admin@baseball.com')


@pytest.fixture
def manager(club):
    return club.login('manager@baseball.com')


@pytest.fixture
def mike(club):
    """Player account linked to player '1'."""
    return club.login('MIKE@baseball.com')


class TestOpen:
    """Tests for building the service."""

    def test_seeded(self, club):
        assert len(club.roster.teams) == 8
        assert len(club.roster.players) == 10
        assert len(club.engine.games) == 8
        assert len(club.identity.users) == 4

    def test_unseeded(self):
        club = ClubService.open(MemoryStorage(), seed=False)
        assert club.engine.games == []
        assert club.roster.players == []

    def test_flush_then_reopen(self):
        """Test a reopened service sees the same storage contents."""
        storage = MemoryStorage()
        club = ClubService.open(storage, seed=True)
        manager = club.login('manager@baseball.com')
        club.flush()
        club.complete_game(manager, '4')

        reopened = ClubService.open(storage, seed=False)

        assert len(reopened.roster.players) == 10
        assert reopened.engine.get_game('4').is_completed

    def test_login_unknown_email(self, club):
        with pytest.raises(AuthorizationError):
            club.login('nobody@baseball.com')


class TestGameCommands:
    """Tests for manager game commands."""

    def test_manager_runs_lifecycle(self, club, manager):
        game = club.add_game(manager, '1', 'Padres', '2023-07-06', 'Home')
        club.update_participants(manager, game.id, ['1', '2', '3'])
        club.complete_game(manager, game.id)

        opened = club.toggle_voting(manager, game.id)
        assert opened.voting_open
        closed = club.toggle_voting(manager, game.id)
        assert not closed.voting_open

    def test_player_cannot_manage_games(self, club, mike):
        with pytest.raises(AuthorizationError):
            club.complete_game(mike, '4')
        assert not club.engine.get_game('4').is_completed

    def test_add_game_for_unknown_team(self, club, manager):
        with pytest.raises(NotFoundError):
            club.add_game(manager, '99', 'Padres', '2023-07-06', 'Home')

    def test_update_game_for_unknown_team(self, club, manager):
        game = club.engine.get_game('4')
        game.team_id = '99'
        with pytest.raises(NotFoundError):
            club.update_game(manager, game)

    def test_delete_game(self, club, manager):
        club.delete_game(manager, '1')
        assert club.engine.get_scores_for_game('1') == []


class TestAssignPoints:
    """Tests for points through the service."""

    def test_assign_points(self, club, manager):
        scores = club.assign_points(manager, '3', [
            {'player_id': '3', 'points': 3},
            {'player_id': '5', 'points': 2},
            {'player_id': '1', 'points': 1},
        ])
        assert [s.player_id for s in scores] == ['3', '5', '1']
        assert club.engine.get_game('3').points_assigned

    def test_upcoming_game_rejected(self, club, manager):
        with pytest.raises(ConflictError):
            club.assign_points(manager, '4', [{'player_id': '1', 'points': 3}])

    def test_non_participant_rejected(self, club, manager):
        """Test player 4 did not play game 3 and cannot score in it."""
        with pytest.raises(ConflictError) as exc_info:
            club.assign_points(manager, '3', [{'player_id': '4', 'points': 3}])
        assert '4' in str(exc_info.value)

    def test_duplicate_points_rejected(self, club, manager):
        with pytest.raises(ConflictError):
            club.assign_points(manager, '3', [{'player_id': '1', 'points': 2}, {'player_id': '2', 'points': 2}])

    def test_bad_entry_is_validation_error(self, club, manager):
        with pytest.raises(ValidationError):
            club.assign_points(manager, '3', [{'player_id': '1', 'points': 'three'}])

    def test_player_cannot_assign(self, club, mike):
        with pytest.raises(AuthorizationError):
            club.assign_points(mike, '3', [{'player_id': '1', 'points': 3}])

    def test_unknown_player_rejected(self, club, manager):
        """Test a game without a participant list still only scores real players."""
        game = club.add_game(manager, '1', 'Mets', '2023-07-06', 'Home')
        club.complete_game(manager, game.id)

        with pytest.raises(NotFoundError) as exc_info:
            club.assign_points(manager, game.id, [{'player_id': '1', 'points': 3}, {'player_id': 'ghost', 'points': 2}])

        assert 'ghost' in str(exc_info.value)
        assert club.engine.get_scores_for_game(game.id) == []
        assert not club.engine.get_game(game.id).points_assigned
        assert club.audit() == []

    def test_unknown_player_reported_before_participants(self, club, manager):
        with pytest.raises(NotFoundError):
            club.assign_points(manager, '3', [{'player_id': 'ghost', 'points': 3}])


class TestVoting:
    """Tests for voting eligibility and submission."""

    def test_player_votes(self, club, mike):
        assert club.can_vote(mike, '3')

        vote = club.submit_vote(mike, '3', '3', '5')

        assert vote.voter_id == '1'
        assert club.my_vote(mike, '3') == vote

    def test_revote_keeps_one_vote(self, club, mike):
        club.submit_vote(mike, '3', '3', '5')
        club.submit_vote(mike, '3', '2', '5')

        votes = club.engine.get_votes_for_game('3')
        assert len(votes) == 1
        assert votes[0].best_fielder_id == '2'

    def test_manager_cannot_vote(self, club, manager):
        assert not club.can_vote(manager, '3')
        with pytest.raises(AuthorizationError):
            club.submit_vote(manager, '3', '3', '5')

    def test_unlinked_player_cannot_vote(self, club):
        caller = Caller(user_id='u9', role=Role.PLAYER)
        assert not club.can_vote(caller, '3')
        with pytest.raises(AuthorizationError):
            club.submit_vote(caller, '3', '3', '5')

    def test_vote_on_closed_game(self, club, mike):
        assert not club.can_vote(mike, '1')
        with pytest.raises(ConflictError):
            club.submit_vote(mike, '1', '3', '5')

    def test_can_vote_unknown_game(self, club, mike):
        assert not club.can_vote(mike, 'missing')

    def test_pick_must_have_played(self, club, mike):
        with pytest.raises(ConflictError):
            club.submit_vote(mike, '3', '4', '5')

    def test_pick_must_exist(self, club, mike):
        with pytest.raises(NotFoundError):
            club.submit_vote(mike, '3', 'ghost', None)

    def test_self_pick(self, club, mike):
        with pytest.raises(ConflictError):
            club.submit_vote(mike, '3', '1', '5')


class TestResults:
    """Tests for results, leaderboards and audit."""

    def test_game_results(self, club, manager):
        results = club.game_results(manager, '1')

        assert [s.points for s in results['scores']] == [3, 2, 1]
        assert results['votes']['fielder'][0] == ('3', 4)
        assert results['votes']['batter'][0] == ('1', 4)

    def test_player_cannot_see_results(self, club, mike):
        with pytest.raises(AuthorizationError):
            club.game_results(mike, '1')

    def test_leaderboard_is_admin_only(self, club, admin, manager):
        board = club.leaderboard(admin)
        assert board[0][0].id == '3'
        assert board[0][1] == 5
        with pytest.raises(AuthorizationError):
            club.leaderboard(manager)

    def test_leaderboard_follows_new_points(self, club, admin, manager):
        club.assign_points(manager, '3', [{'player_id': '5', 'points': 3}])
        values = {p.id: v for p, v in club.leaderboard(admin)}
        assert values['5'] == 4

    def test_refresh_player_counters(self, club, admin):
        players = {p.id: p for p in club.refresh_player_counters(admin)}
        assert players['3'].total_points == 5
        assert players['3'].best_fielder == 4
        assert club.roster.get_player('3').total_points == 5

    def test_audit_clean_mock_club(self, club):
        assert club.audit() == []

    def test_export(self, club, admin, manager, tmp_path):
        path = club.export(admin, tmp_path / 'club.xlsx')
        assert path.exists()
        with pytest.raises(AuthorizationError):
            club.export(manager, tmp_path / 'other.xlsx')


class TestRosterCommands:
    """Tests for admin roster commands and referential integrity."""

    def test_manager_cannot_edit_roster(self, club, manager):
        with pytest.raises(AuthorizationError):
            club.add_player(manager, 'New Player', 'Catcher')

    def test_add_and_assign_teams(self, club, admin):
        player = club.add_player(admin, 'New Player', 'Catcher', number=8)
        updated = club.set_player_teams(admin, player.id, ['1', '2', '1'])
        assert updated.team_ids == ['1', '2']

    def test_delete_team_with_games(self, club, admin):
        with pytest.raises(ConflictError):
            club.delete_team(admin, '1')
        assert club.roster.team_exists('1')

    def test_delete_team_without_games(self, club, admin):
        club.delete_team(admin, '2')
        assert not club.roster.team_exists('2')
        assert club.roster.get_player('1').team_ids == ['1']

    def test_delete_player_cascades(self, club, admin):
        summary = club.delete_player(admin, '5')

        assert summary['scores'] == 1
        assert not club.roster.player_exists('5')
        assert all('5' not in g.participants for g in club.engine.games)
        assert club.audit() == []

    def test_delete_unknown_player(self, club, admin):
        with pytest.raises(NotFoundError):
            club.delete_player(admin, 'missing')

    def test_import_games_and_players(self, club, admin):
        games = club.import_games(admin, [{'teamId': '1', 'opponent': 'Mets'}])
        players = club.import_players(admin, [{'name': 'Rookie', 'teamIds': '1;2', 'number': '12'}])

        assert games[0].location == 'Unknown Location'
        assert players[0].position == 'Unknown Position'
        assert players[0].team_ids == ['1', '2']
        assert players[0].number == 12

    def test_import_games_unknown_team_rejects_batch(self, club, admin):
        """Test one row with an unknown team stops the whole import."""
        with pytest.raises(ValidationError) as exc_info:
            club.import_games(admin, [{'teamId': '1', 'opponent': 'Mets'}, {'teamId': 'ghost', 'opponent': 'Cubs'}])

        assert exc_info.value.errors == ['Row 2: Unknown team ghost']
        assert len(club.engine.games) == 8
        assert club.audit() == []

    def test_import_games_blank_team_still_reported(self, club, admin):
        with pytest.raises(ValidationError) as exc_info:
            club.import_games(admin, [{'teamId': ' '}])
        assert exc_info.value.errors == ['Row 1: Missing team_id']

    def test_import_players_unknown_team_rejects_batch(self, club, admin):
        with pytest.raises(ValidationError) as exc_info:
            club.import_players(admin, [{'name': 'Rookie', 'teamIds': '1;ghost'}])

        assert exc_info.value.errors == ['Row 1: Unknown team ghost']
        assert len(club.roster.players) == 10
        assert club.audit() == []


class TestConcurrentCommands:
    """Tests for cross-collection commands racing each other."""

    def test_delete_player_while_participants_change(self, club, admin, manager):
        """Test a deleted player never lingers in a participant list."""
        start = threading.Event()
        deleted = threading.Event()

        def keep_adding():
            start.wait()
            while not deleted.is_set():
                try:
                    club.update_participants(manager, '3', ['1', '5'])
                except NotFoundError:
                    pass

        def delete():
            start.wait()
            club.delete_player(admin, '5')
            deleted.set()

        threads = [threading.Thread(target=keep_adding), threading.Thread(target=delete)]
        for t in threads:
            t.start()
        start.set()
        for t in threads:
            t.join()

        assert not club.roster.player_exists('5')
        assert all('5' not in g.participants for g in club.engine.games)
        assert club.audit() == []
        with pytest.raises(NotFoundError):
            club.update_participants(manager, '3', ['1', '5'])

    def test_delete_team_while_games_import(self, club, admin):
        """Test a team is either kept with its imported games or gone with none."""
        start = threading.Event()
        outcomes = []

        def import_games():
            start.wait()
            try:
                club.import_games(admin, [{'teamId': '2', 'opponent': 'Mets'}])
                outcomes.append('imported')
            except ValidationError:
                outcomes.append('rejected')

        def delete_team():
            start.wait()
            try:
                club.delete_team(admin, '2')
                outcomes.append('deleted')
            except ConflictError:
                outcomes.append('kept')

        threads = [threading.Thread(target=import_games), threading.Thread(target=delete_team)]
        for t in threads:
            t.start()
        start.set()
        for t in threads:
            t.join()

        assert sorted(outcomes) in (['imported', 'kept'], ['deleted', 'rejected'])
        assert club.audit() == []
