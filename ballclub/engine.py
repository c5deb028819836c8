"""Game lifecycle engine: games, participants, placement points and votes.

A game moves Upcoming -> Completed -> (VotingOpen <-> VotingClosed), with
points assignable once it has been played. The engine owns the Game, Score
and Vote collections; every command runs under one lock and saves the
collections it touched before returning.
"""

import copy
import logging
import threading
from dataclasses import replace
from typing import Any, Callable, Iterable, Optional

from pydantic import BaseModel
from pydantic import ValidationError as SchemaValidationError

from .constants import UNKNOWN_LOCATION, UNKNOWN_OPPONENT
from .errors import ConflictError, NotFoundError, ValidationError
from .models import Game, Score, Vote
from .schemas import GameImportRow, PointsEntry, VoteInput
from .storage import Storage, to_records
from .utils import new_id, utc_now_iso
from .validators import validate_game_input, validate_points_entries, validate_vote_picks

logger = logging.getLogger('ballclub.engine')


def parse_input(schema: type[BaseModel], value: Any, label: str) -> Any:
    """Accept a schema instance or a plain dict; map schema errors to ValidationError."""
    if isinstance(value, schema):
        return value
    try:
        return schema.model_validate(value)
    except SchemaValidationError as e:
        messages = [f'{label}: {err["loc"][0] if err["loc"] else ""} {err["msg"]}'.strip() for err in e.errors()]
        raise ValidationError(messages) from e


class GameLifecycleEngine:
    """
    Owns games, scores and votes and every transition between game phases.

    Args:
        games, scores, votes: Initial collections (used when storage has none)
        storage: Optional storage adapter; collections it already holds win
        player_exists: Optional lookup used to reject unknown participant ids

    Example:
        engine = GameLifecycleEngine(storage=MemoryStorage())
        game = engine.add_game('t1', 'Rivals', '2024-05-01', 'Home')
        engine.complete_game(game.id)
        engine.open_voting(game.id)
    """

    def __init__(
        self,
        games: Iterable[Game] = (),
        scores: Iterable[Score] = (),
        votes: Iterable[Vote] = (),
        storage: Optional[Storage] = None,
        player_exists: Optional[Callable[[str], bool]] = None,
    ):
        self._lock = threading.RLock()
        self._storage = storage
        self._player_exists = player_exists

        self._games: list[Game] = list(games)
        self._scores: list[Score] = list(scores)
        self._votes: list[Vote] = list(votes)

        if storage is not None:
            stored = storage.load('games')
            if stored is not None:
                self._games = [Game(**r) for r in stored]
            stored = storage.load('scores')
            if stored is not None:
                self._scores = [Score(**r) for r in stored]
            stored = storage.load('votes')
            if stored is not None:
                self._votes = [Vote(**r) for r in stored]

        logger.debug(
            f'Engine loaded {len(self._games)} games, {len(self._scores)} scores, '
            f'{len(self._votes)} votes'
        )

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    def _save(self, *collections: str) -> None:
        if self._storage is None:
            return
        sources = {'games': self._games, 'scores': self._scores, 'votes': self._votes}
        for name in collections:
            self._storage.save(name, to_records(sources[name]))

    @property
    def lock(self):
        """Lock held by every command; hold it to run several commands as one."""
        return self._lock

    def flush(self) -> None:
        """Save every collection, e.g. to write seed data to a fresh store."""
        with self._lock:
            self._save('games', 'scores', 'votes')

    def _find_game(self, game_id: str) -> Game:
        game = next((g for g in self._games if g.id == game_id), None)
        if game is None:
            raise NotFoundError('Game', game_id)
        return game

    def _put_game(self, updated: Game) -> Game:
        self._games = [updated if g.id == updated.id else g for g in self._games]
        self._save('games')
        return copy.deepcopy(updated)

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------
    @property
    def games(self) -> list[Game]:
        with self._lock:
            return copy.deepcopy(self._games)

    @property
    def scores(self) -> list[Score]:
        with self._lock:
            return copy.deepcopy(self._scores)

    @property
    def votes(self) -> list[Vote]:
        with self._lock:
            return copy.deepcopy(self._votes)

    def get_game(self, game_id: str) -> Game:
        with self._lock:
            return copy.deepcopy(self._find_game(game_id))

    def get_games_by_team(self, team_id: str) -> list[Game]:
        with self._lock:
            return [copy.deepcopy(g) for g in self._games if g.team_id == team_id]

    def get_games_by_player(self, player_id: str) -> list[Game]:
        """Games the player is a participant of."""
        with self._lock:
            return [copy.deepcopy(g) for g in self._games if player_id in g.participants]

    def get_participants(self, game_id: str) -> list[str]:
        """Participant ids, or an empty list for an unknown game."""
        with self._lock:
            game = next((g for g in self._games if g.id == game_id), None)
            return list(game.participants) if game else []

    def get_scores_for_game(self, game_id: str) -> list[Score]:
        with self._lock:
            return [copy.deepcopy(s) for s in self._scores if s.game_id == game_id]

    def get_votes_for_game(self, game_id: str) -> list[Vote]:
        with self._lock:
            return [copy.deepcopy(v) for v in self._votes if v.game_id == game_id]

    def has_player_voted(self, game_id: str, player_id: str) -> bool:
        with self._lock:
            return any(v.game_id == game_id and v.voter_id == player_id for v in self._votes)

    def get_player_vote(self, game_id: str, player_id: str) -> Optional[Vote]:
        with self._lock:
            vote = next(
                (v for v in self._votes if v.game_id == game_id and v.voter_id == player_id),
                None,
            )
            return copy.deepcopy(vote) if vote else None

    # ------------------------------------------------------------------
    # Game commands
    # ------------------------------------------------------------------
    def add_game(self, team_id: str, opponent: str, date: str, location: str) -> Game:
        """Schedule a new game in the Upcoming phase."""
        errors = validate_game_input(team_id, opponent, date, location)
        if errors:
            raise ValidationError(errors)

        game = Game(
            id=new_id(),
            team_id=team_id.strip(),
            opponent=opponent.strip(),
            date=date.strip(),
            location=location.strip(),
        )
        with self._lock:
            self._games.append(game)
            self._save('games')

        logger.info(f'Added game {game.id}: team {game.team_id} vs {game.opponent} on {game.date}')
        return copy.deepcopy(game)

    def update_game(self, game: Game) -> Game:
        """
        Replace a stored game with an edited copy carrying the same id.

        Raises:
            ConflictError: the edit reopens a played game, or sets voting or
                points flags on a game that is not completed
        """
        errors = validate_game_input(game.team_id, game.opponent, game.date, game.location)
        if errors:
            raise ValidationError(errors)
        if game.voting_open and not game.is_completed:
            raise ConflictError(f'Game {game.id} cannot have voting open before it is completed')
        if game.points_assigned and not game.is_completed:
            raise ConflictError(f'Game {game.id} cannot have points before it is completed')

        with self._lock:
            stored = self._find_game(game.id)
            if stored.is_completed and not game.is_completed:
                logger.warning(f'Refused to mark completed game {game.id} as upcoming')
                raise ConflictError(f'Game {game.id} is already completed')
            updated = self._put_game(replace(game, participants=list(dict.fromkeys(game.participants))))

        logger.info(f'Updated game {game.id}')
        return updated

    def delete_game(self, game_id: str) -> None:
        """Remove a game and its scores and votes. Unknown ids are ignored."""
        with self._lock:
            if not any(g.id == game_id for g in self._games):
                logger.debug(f'Delete ignored, no game {game_id}')
                return

            scores = [s for s in self._scores if s.game_id != game_id]
            votes = [v for v in self._votes if v.game_id != game_id]
            removed_scores = len(self._scores) - len(scores)
            removed_votes = len(self._votes) - len(votes)

            self._games = [g for g in self._games if g.id != game_id]
            self._scores, self._votes = scores, votes
            self._save('games', 'scores', 'votes')

        logger.info(f'Deleted game {game_id} with {removed_scores} scores and {removed_votes} votes')

    def complete_game(self, game_id: str) -> Game:
        """Mark a game as played. Completing twice is a no-op."""
        with self._lock:
            game = self._find_game(game_id)
            if game.is_completed:
                return copy.deepcopy(game)
            updated = self._put_game(replace(game, is_completed=True))

        logger.info(f'Game {game_id} completed')
        return updated

    def open_voting(self, game_id: str) -> Game:
        with self._lock:
            game = self._find_game(game_id)
            if not game.is_completed:
                logger.warning(f'Refused to open voting on upcoming game {game_id}')
                raise ConflictError(f'Game {game_id} must be completed before voting opens')
            updated = self._put_game(replace(game, voting_open=True))

        logger.info(f'Voting opened for game {game_id}')
        return updated

    def close_voting(self, game_id: str) -> Game:
        with self._lock:
            game = self._find_game(game_id)
            updated = self._put_game(replace(game, voting_open=False))

        logger.info(f'Voting closed for game {game_id}')
        return updated

    def update_participants(self, game_id: str, player_ids: Iterable[str]) -> Game:
        """Replace the participant list; duplicates are dropped keeping first order."""
        participants = list(dict.fromkeys(player_ids))

        with self._lock:
            game = self._find_game(game_id)
            if self._player_exists is not None:
                for player_id in participants:
                    if not self._player_exists(player_id):
                        raise NotFoundError('Player', player_id)
            updated = self._put_game(replace(game, participants=participants))

        logger.info(f'Game {game_id} now has {len(participants)} participants')
        return updated

    def bulk_import_games(self, rows: Iterable[Any]) -> list[Game]:
        """
        Append imported games.

        Missing opponent/location get placeholders and a missing date becomes
        now. Imported games always start Upcoming with no participants,
        whatever the row says. The whole batch is rejected if any row lacks
        a team.
        """
        parsed = [parse_input(GameImportRow, row, f'Row {i}') for i, row in enumerate(rows, start=1)]

        errors = [f'Row {i}: Missing team_id' for i, row in enumerate(parsed, start=1) if not row.team_id.strip()]
        if errors:
            raise ValidationError(errors)

        new_games = [
            Game(
                id=new_id(),
                team_id=row.team_id.strip(),
                opponent=(row.opponent or '').strip() or UNKNOWN_OPPONENT,
                date=(row.date or '').strip() or utc_now_iso(),
                location=(row.location or '').strip() or UNKNOWN_LOCATION,
            )
            for row in parsed
        ]

        with self._lock:
            self._games.extend(new_games)
            self._save('games')

        logger.info(f'Imported {len(new_games)} games')
        return copy.deepcopy(new_games)

    # ------------------------------------------------------------------
    # Points
    # ------------------------------------------------------------------
    def assign_points(self, game_id: str, entries: Iterable[Any]) -> list[Score]:
        """
        Replace the game's placement points with the given entries.

        Entries are PointsEntry objects or dicts with player_id and points.
        An empty list is legal and still marks the game as scored.

        Raises:
            NotFoundError: unknown game
            ValidationError: blank player or points outside 3/2/1
            ConflictError: a point value or a player appears twice
        """
        entries = list(entries)

        with self._lock:
            game = self._find_game(game_id)

            parsed = [parse_input(PointsEntry, e, f'Entry {i}') for i, e in enumerate(entries, start=1)]
            errors, conflicts = validate_points_entries(parsed)
            if errors:
                raise ValidationError(errors)
            if conflicts:
                logger.warning(f'Rejected points for game {game_id}: {"; ".join(conflicts)}')
                raise ConflictError('; '.join(conflicts))

            new_scores = [
                Score(id=f'{game_id}-{e.player_id}', game_id=game_id, player_id=e.player_id, points=e.points)
                for e in parsed
            ]
            self._scores = [s for s in self._scores if s.game_id != game_id] + new_scores
            self._games = [
                replace(g, points_assigned=True) if g.id == game.id else g for g in self._games
            ]
            self._save('scores', 'games')

        logger.info(f'Assigned points for game {game_id} to {len(new_scores)} players')
        return copy.deepcopy(new_scores)

    # ------------------------------------------------------------------
    # Votes
    # ------------------------------------------------------------------
    def submit_vote(self, vote: Any) -> Vote:
        """
        Record a voter's picks, updating their earlier vote for the game if any.

        Raises:
            NotFoundError: unknown game
            ConflictError: voting is closed, or the voter picked themself
        """
        data = parse_input(VoteInput, vote, 'Vote')
        if not data.voter_id.strip():
            raise ValidationError('Vote has no voter')

        with self._lock:
            game = self._find_game(data.game_id)
            if not game.voting_open:
                logger.warning(f'Vote from {data.voter_id} rejected, voting closed for game {game.id}')
                raise ConflictError(f'Voting is not open for game {game.id}')

            conflicts = validate_vote_picks(data.voter_id, data.best_fielder_id, data.best_batter_id)
            if conflicts:
                raise ConflictError('; '.join(conflicts))

            existing = next(
                (v for v in self._votes if v.game_id == data.game_id and v.voter_id == data.voter_id),
                None,
            )
            if existing is not None:
                result = replace(
                    existing,
                    best_fielder_id=data.best_fielder_id,
                    best_batter_id=data.best_batter_id,
                )
                self._votes = [result if v is existing else v for v in self._votes]
                action = 'Updated'
            else:
                result = Vote(
                    id=f'{data.game_id}-{data.voter_id}',
                    game_id=data.game_id,
                    voter_id=data.voter_id,
                    best_fielder_id=data.best_fielder_id,
                    best_batter_id=data.best_batter_id,
                )
                self._votes.append(result)
                action = 'Recorded'
            self._save('votes')

        logger.info(f'{action} vote {result.id} for game {data.game_id}')
        return copy.deepcopy(result)

    # ------------------------------------------------------------------
    # Roster cleanup
    # ------------------------------------------------------------------
    def purge_player(self, player_id: str) -> dict[str, int]:
        """
        Remove every reference to a deleted player.

        The player leaves all participant lists, their scores and the votes
        they cast are deleted, and picks of them on other votes become None.

        Returns:
            Counts of touched games, deleted scores, deleted votes and cleared picks
        """
        with self._lock:
            touched_games = 0
            games = []
            for g in self._games:
                if player_id in g.participants:
                    touched_games += 1
                    g = replace(g, participants=[p for p in g.participants if p != player_id])
                games.append(g)

            scores = [s for s in self._scores if s.player_id != player_id]
            cast = [v for v in self._votes if v.voter_id != player_id]

            cleared = 0
            votes = []
            for v in cast:
                if v.best_fielder_id == player_id:
                    v = replace(v, best_fielder_id=None)
                    cleared += 1
                if v.best_batter_id == player_id:
                    v = replace(v, best_batter_id=None)
                    cleared += 1
                votes.append(v)

            summary = {
                'games': touched_games,
                'scores': len(self._scores) - len(scores),
                'votes': len(self._votes) - len(cast),
                'picks': cleared,
            }
            self._games, self._scores, self._votes = games, scores, votes
            self._save('games', 'scores', 'votes')

        logger.info(f'Purged player {player_id}: {summary}')
        return summary
