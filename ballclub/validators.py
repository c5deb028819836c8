"""Validation functions for game input, points, votes and stored club data."""

from collections import Counter
from typing import Iterable, Optional

from .constants import POINT_LABELS, POINT_VALUES
from .models import Game, Player, Score, Team, Vote
from .schemas import PointsEntry


def validate_game_input(team_id: str, opponent: str, date: str, location: str) -> list[str]:
    """
    Check the required fields of a new game.

    Returns:
        List of validation error messages (empty if valid)
    """
    errors = []
    fields = {'team_id': team_id, 'opponent': opponent, 'date': date, 'location': location}
    for name, value in fields.items():
        if value is None or not str(value).strip():
            errors.append(f'Missing {name}')
    return errors


def validate_points_entries(entries: list[PointsEntry]) -> tuple[list[str], list[str]]:
    """
    Validate an assign-points submission.

    Checks:
    - Every entry names a player
    - Points are a placement value (3, 2 or 1)
    - Each point value is held by at most one player
    - No player is listed twice

    Args:
        entries: PointsEntry list for one game

    Returns:
        Tuple of (errors, conflicts)
        - errors: malformed entries
        - conflicts: duplicate point values or players
    """
    errors = []
    conflicts = []

    for index, entry in enumerate(entries, start=1):
        if not entry.player_id or not entry.player_id.strip():
            errors.append(f'Entry {index} has no player')
        if entry.points not in POINT_VALUES:
            errors.append(f'Entry {index} has invalid points {entry.points} (expected 3, 2 or 1)')

    point_counts = Counter(e.points for e in entries if e.points in POINT_VALUES)
    for points, count in sorted(point_counts.items(), reverse=True):
        if count > 1:
            conflicts.append(f'{POINT_LABELS[points]} place ({points} pts) assigned to {count} players')

    player_counts = Counter(e.player_id for e in entries if e.player_id)
    duplicates = sorted(pid for pid, count in player_counts.items() if count > 1)
    if duplicates:
        conflicts.append(f'Players listed more than once: {", ".join(duplicates)}')

    return errors, conflicts


def validate_vote_picks(
    voter_id: str, best_fielder_id: Optional[str], best_batter_id: Optional[str]
) -> list[str]:
    """
    Check a voter's picks; voters may not pick themselves.

    Returns:
        List of conflict messages (empty if valid)
    """
    conflicts = []
    if best_fielder_id is not None and best_fielder_id == voter_id:
        conflicts.append(f'Voter {voter_id} cannot vote for themself as best fielder')
    if best_batter_id is not None and best_batter_id == voter_id:
        conflicts.append(f'Voter {voter_id} cannot vote for themself as best batter')
    return conflicts


def audit_club_data(
    games: Iterable[Game],
    scores: Iterable[Score],
    votes: Iterable[Vote],
    players: Iterable[Player] = (),
    teams: Iterable[Team] = (),
) -> list[str]:
    """
    Report inconsistencies in stored club data.

    Checks:
    - voting_open without is_completed
    - Scores and votes pointing at missing games
    - Ids pointing at missing players or teams (only when those are given)
    - More than one vote per (game, voter)
    - Point values held by more than one player in a game

    Returns:
        List of warning messages (empty if no issues)
    """
    games = list(games)
    scores = list(scores)
    votes = list(votes)
    player_ids = {p.id for p in players}
    team_ids = {t.id for t in teams}
    game_ids = {g.id for g in games}
    warnings = []

    for game in games:
        if game.voting_open and not game.is_completed:
            warnings.append(f'Game {game.id} has voting open but is not completed')
        if team_ids and game.team_id not in team_ids:
            warnings.append(f'Game {game.id} references missing team {game.team_id}')
        if player_ids:
            missing = [pid for pid in game.participants if pid not in player_ids]
            if missing:
                warnings.append(f'Game {game.id} has unknown participants: {", ".join(missing)}')

    for score in scores:
        if score.game_id not in game_ids:
            warnings.append(f'Score {score.id} references missing game {score.game_id}')
        if player_ids and score.player_id not in player_ids:
            warnings.append(f'Score {score.id} references missing player {score.player_id}')

    point_holders = Counter((s.game_id, s.points) for s in scores)
    for (game_id, points), count in sorted(point_holders.items()):
        if count > 1:
            warnings.append(f'Game {game_id} has {count} players with {points} pts')

    voter_counts = Counter((v.game_id, v.voter_id) for v in votes)
    for (game_id, voter_id), count in sorted(voter_counts.items()):
        if count > 1:
            warnings.append(f'Game {game_id} has {count} votes from voter {voter_id}')

    for vote in votes:
        if vote.game_id not in game_ids:
            warnings.append(f'Vote {vote.id} references missing game {vote.game_id}')
        if player_ids:
            for pick in (vote.best_fielder_id, vote.best_batter_id):
                if pick is not None and pick not in player_ids:
                    warnings.append(f'Vote {vote.id} picks missing player {pick}')

    return warnings
