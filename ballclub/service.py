"""Club service: role-gated commands over the roster, the game engine and identities.

Callers are resolved by the identity provider; every command checks the
caller's capability before touching state.
"""

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterable, Optional

from . import aggregation
from .auth import Caller, Capability, MockIdentityProvider, authorize, is_allowed
from .config import should_seed_mock_data
from .engine import GameLifecycleEngine, parse_input
from .errors import AuthorizationError, ConflictError, NotFoundError, ValidationError
from .export import export_club, read_game_rows, read_player_rows
from .mock_data import (
    mock_games,
    mock_players,
    mock_scores,
    mock_teams,
    mock_users,
    mock_votes,
)
from .models import Game, Player, Score, Team, Vote
from .roster import RosterRegistry
from .schemas import GameImportRow, PointsEntry
from .storage import MemoryStorage, Storage
from .validators import audit_club_data

logger = logging.getLogger('ballclub.service')


class ClubService:
    """Entry point for UI or CLI callers."""

    def __init__(
        self,
        identity: MockIdentityProvider,
        roster: RosterRegistry,
        engine: GameLifecycleEngine,
    ):
        self.identity = identity
        self.roster = roster
        self.engine = engine

    @classmethod
    def open(cls, storage: Optional[Storage] = None, seed: Optional[bool] = None) -> 'ClubService':
        """
        Build a service over a storage adapter.

        Collections already in storage are used as-is; missing ones start
        from the mock club when seeding is on (config default) or empty.
        """
        if storage is None:
            storage = MemoryStorage()
        if seed is None:
            seed = should_seed_mock_data()

        identity = MockIdentityProvider(mock_users() if seed else (), storage=storage)
        roster = RosterRegistry(
            mock_teams() if seed else (),
            mock_players() if seed else (),
            storage=storage,
        )
        engine = GameLifecycleEngine(
            mock_games() if seed else (),
            mock_scores() if seed else (),
            mock_votes() if seed else (),
            storage=storage,
            player_exists=roster.player_exists,
        )
        return cls(identity, roster, engine)

    def flush(self) -> None:
        """Write every collection to storage."""
        self.identity.flush()
        self.roster.flush()
        self.engine.flush()

    def login(self, email: str, password: str = '') -> Caller:
        user = self.identity.login(email, password)
        return self.identity.caller_for(user)

    @contextmanager
    def _locked(self):
        """Hold the engine lock, then the roster lock, for commands that touch both."""
        with self.engine.lock, self.roster.lock:
            yield

    # ------------------------------------------------------------------
    # Game lifecycle
    # ------------------------------------------------------------------
    def add_game(self, caller: Caller, team_id: str, opponent: str, date: str, location: str) -> Game:
        authorize(caller.role, Capability.MANAGE_GAMES)
        with self._locked():
            if team_id and not self.roster.team_exists(team_id):
                raise NotFoundError('Team', team_id)
            return self.engine.add_game(team_id, opponent, date, location)

    def update_game(self, caller: Caller, game: Game) -> Game:
        authorize(caller.role, Capability.MANAGE_GAMES)
        with self._locked():
            if not self.roster.team_exists(game.team_id):
                raise NotFoundError('Team', game.team_id)
            return self.engine.update_game(game)

    def delete_game(self, caller: Caller, game_id: str) -> None:
        authorize(caller.role, Capability.MANAGE_GAMES)
        self.engine.delete_game(game_id)

    def complete_game(self, caller: Caller, game_id: str) -> Game:
        authorize(caller.role, Capability.MANAGE_GAMES)
        return self.engine.complete_game(game_id)

    def open_voting(self, caller: Caller, game_id: str) -> Game:
        authorize(caller.role, Capability.MANAGE_GAMES)
        return self.engine.open_voting(game_id)

    def close_voting(self, caller: Caller, game_id: str) -> Game:
        authorize(caller.role, Capability.MANAGE_GAMES)
        return self.engine.close_voting(game_id)

    def toggle_voting(self, caller: Caller, game_id: str) -> Game:
        """Open voting if it is closed, close it if it is open."""
        authorize(caller.role, Capability.MANAGE_GAMES)
        game = self.engine.get_game(game_id)
        if game.voting_open:
            return self.close_voting(caller, game_id)
        return self.open_voting(caller, game_id)

    def update_participants(self, caller: Caller, game_id: str, player_ids: Iterable[str]) -> Game:
        authorize(caller.role, Capability.MANAGE_GAMES)
        return self.engine.update_participants(game_id, player_ids)

    def assign_points(self, caller: Caller, game_id: str, entries: Iterable[Any]) -> list[Score]:
        """
        Award 3/2/1 points for a completed game.

        Every scored player must exist; when the game has a participant
        list, only participants can score.
        """
        authorize(caller.role, Capability.ASSIGN_POINTS)
        with self._locked():
            game = self.engine.get_game(game_id)
            if not game.is_completed:
                raise ConflictError(f'Game {game_id} must be completed before points are assigned')

            parsed = [parse_input(PointsEntry, e, f'Entry {i}') for i, e in enumerate(entries, start=1)]
            for entry in parsed:
                if entry.player_id.strip() and not self.roster.player_exists(entry.player_id):
                    raise NotFoundError('Player', entry.player_id)
            if game.participants:
                outsiders = [e.player_id for e in parsed if e.player_id not in game.participants]
                if outsiders:
                    raise ConflictError(f'Not participants of game {game_id}: {", ".join(outsiders)}')

            return self.engine.assign_points(game_id, parsed)

    # ------------------------------------------------------------------
    # Voting
    # ------------------------------------------------------------------
    def _voting_block(self, caller: Caller, game: Game) -> Optional[str]:
        """Reason the caller cannot vote on this game, or None."""
        if not is_allowed(caller.role, Capability.VOTE):
            return f'Role {caller.role.value} may not vote'
        if not caller.linked_player_id:
            return f'User {caller.user_id} is not linked to a player'
        if not game.is_completed or not game.voting_open:
            return f'Voting is not open for game {game.id}'
        return None

    def can_vote(self, caller: Caller, game_id: str) -> bool:
        """Whether the caller may submit or edit a vote for the game right now."""
        try:
            game = self.engine.get_game(game_id)
        except NotFoundError:
            return False
        return self._voting_block(caller, game) is None

    def submit_vote(
        self,
        caller: Caller,
        game_id: str,
        best_fielder_id: Optional[str],
        best_batter_id: Optional[str],
    ) -> Vote:
        """Cast or edit the caller's vote. Picks must be game participants when the game has any."""
        with self._locked():
            game = self.engine.get_game(game_id)
            reason = self._voting_block(caller, game)
            if reason is not None:
                logger.warning(f'Vote refused for {caller.user_id}: {reason}')
                if not is_allowed(caller.role, Capability.VOTE) or not caller.linked_player_id:
                    raise AuthorizationError(reason)
                raise ConflictError(reason)

            for pick in (best_fielder_id, best_batter_id):
                if pick is None:
                    continue
                if not self.roster.player_exists(pick):
                    raise NotFoundError('Player', pick)
                if game.participants and pick not in game.participants:
                    raise ConflictError(f'Player {pick} did not play in game {game_id}')

            return self.engine.submit_vote(
                {
                    'game_id': game_id,
                    'voter_id': caller.voter_id,
                    'best_fielder_id': best_fielder_id,
                    'best_batter_id': best_batter_id,
                }
            )

    def my_vote(self, caller: Caller, game_id: str) -> Optional[Vote]:
        return self.engine.get_player_vote(game_id, caller.voter_id)

    # ------------------------------------------------------------------
    # Results and reporting
    # ------------------------------------------------------------------
    def game_results(self, caller: Caller, game_id: str) -> dict[str, Any]:
        """Scores (highest first) and per-category vote tallies for one game."""
        authorize(caller.role, Capability.VIEW_RESULTS)
        self.engine.get_game(game_id)
        scores = sorted(self.engine.get_scores_for_game(game_id), key=lambda s: s.points, reverse=True)
        return {
            'scores': scores,
            'votes': aggregation.tally_game_votes(self.engine.get_votes_for_game(game_id), game_id),
        }

    def leaderboard(self, caller: Caller, metric: str = 'points') -> list[tuple[Player, int]]:
        authorize(caller.role, Capability.VIEW_LEADERBOARD)
        return aggregation.leaderboard(self.roster.players, self.engine.scores, self.engine.votes, metric)

    def refresh_player_counters(self, caller: Caller) -> list[Player]:
        """Overwrite each player's stored counters with values computed from scores and votes."""
        authorize(caller.role, Capability.MANAGE_ROSTER)
        refreshed = aggregation.refresh_player_counters(
            self.roster.players, self.engine.scores, self.engine.votes
        )
        return [self.roster.update_player(p) for p in refreshed]

    def export(self, caller: Caller, path: str | Path) -> Path:
        authorize(caller.role, Capability.EXPORT_DATA)
        return export_club(path, self.roster.players, self.engine.scores, self.engine.votes)

    def audit(self) -> list[str]:
        return audit_club_data(
            self.engine.games,
            self.engine.scores,
            self.engine.votes,
            players=self.roster.players,
            teams=self.roster.teams,
        )

    # ------------------------------------------------------------------
    # Roster
    # ------------------------------------------------------------------
    def import_games(self, caller: Caller, rows: Iterable[Any]) -> list[Game]:
        """Import games; the batch is rejected if any row names an unknown team."""
        authorize(caller.role, Capability.MANAGE_ROSTER)
        return self._import_games(rows)

    def _import_games(self, rows: Iterable[Any]) -> list[Game]:
        parsed = [parse_input(GameImportRow, row, f'Row {i}') for i, row in enumerate(rows, start=1)]
        with self._locked():
            unknown = [
                f'Row {i}: Unknown team {row.team_id.strip()}'
                for i, row in enumerate(parsed, start=1)
                if row.team_id.strip() and not self.roster.team_exists(row.team_id.strip())
            ]
            if unknown:
                logger.warning(f'Rejected game import: {"; ".join(unknown)}')
                raise ValidationError(unknown)
            return self.engine.bulk_import_games(parsed)

    def import_players(self, caller: Caller, rows: Iterable[Any]) -> list[Player]:
        authorize(caller.role, Capability.MANAGE_ROSTER)
        return self.roster.bulk_import_players(rows)

    def import_games_workbook(self, caller: Caller, path: str | Path) -> list[Game]:
        """Import games from an .xlsx sheet; any bad row rejects the file."""
        authorize(caller.role, Capability.MANAGE_ROSTER)
        return self._import_games(read_game_rows(path))

    def import_players_workbook(self, caller: Caller, path: str | Path) -> list[Player]:
        authorize(caller.role, Capability.MANAGE_ROSTER)
        return self.roster.bulk_import_players(read_player_rows(path))

    def add_team(self, caller: Caller, name: str, color: str, **details) -> Team:
        authorize(caller.role, Capability.MANAGE_ROSTER)
        return self.roster.add_team(name, color, **details)

    def update_team(self, caller: Caller, team: Team) -> Team:
        authorize(caller.role, Capability.MANAGE_ROSTER)
        return self.roster.update_team(team)

    def delete_team(self, caller: Caller, team_id: str) -> None:
        """Delete a team with no games; players lose the team from their lists."""
        authorize(caller.role, Capability.MANAGE_ROSTER)
        with self._locked():
            games = self.engine.get_games_by_team(team_id)
            if games:
                raise ConflictError(f'Team {team_id} still has {len(games)} games')
            self.roster.delete_team(team_id)

    def add_player(self, caller: Caller, name: str, position: str, **details) -> Player:
        authorize(caller.role, Capability.MANAGE_ROSTER)
        return self.roster.add_player(name, position, **details)

    def update_player(self, caller: Caller, player: Player) -> Player:
        authorize(caller.role, Capability.MANAGE_ROSTER)
        return self.roster.update_player(player)

    def set_player_teams(self, caller: Caller, player_id: str, team_ids: Iterable[str]) -> Player:
        authorize(caller.role, Capability.MANAGE_ROSTER)
        return self.roster.update_player_teams(player_id, team_ids)

    def delete_player(self, caller: Caller, player_id: str) -> dict[str, int]:
        """Delete a player and every game-side reference to them, as one step."""
        authorize(caller.role, Capability.MANAGE_ROSTER)
        with self._locked():
            self.roster.get_player(player_id)
            summary = self.engine.purge_player(player_id)
            self.roster.delete_player(player_id)
        return summary
