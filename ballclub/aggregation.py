"""Derived totals, vote tallies and leaderboards over live scores and votes.

Player.total_points / best_fielder / best_batter are seed values. The
functions here compute the same figures from the Score and Vote collections.
"""

from collections import Counter
from dataclasses import replace
from typing import Iterable, Optional

from .constants import LEADERBOARD_METRICS
from .models import Player, Score, Vote


def total_points_for(scores: Iterable[Score], player_id: str, game_id: Optional[str] = None) -> int:
    """Sum of a player's placement points, optionally for one game only."""
    return sum(
        s.points
        for s in scores
        if s.player_id == player_id and (game_id is None or s.game_id == game_id)
    )


def fielder_vote_count_for(votes: Iterable[Vote], player_id: str) -> int:
    return sum(1 for v in votes if v.best_fielder_id == player_id)


def batter_vote_count_for(votes: Iterable[Vote], player_id: str) -> int:
    return sum(1 for v in votes if v.best_batter_id == player_id)


def tally_game_votes(votes: Iterable[Vote], game_id: str) -> dict[str, list[tuple[str, int]]]:
    """
    Count a game's votes per category.

    Returns:
        {'fielder': [(player_id, votes), ...], 'batter': [...]} sorted by
        votes descending; ties keep the order the picks were first seen.
    """
    game_votes = [v for v in votes if v.game_id == game_id]
    fielders = Counter(v.best_fielder_id for v in game_votes if v.best_fielder_id)
    batters = Counter(v.best_batter_id for v in game_votes if v.best_batter_id)
    return {
        'fielder': sorted(fielders.items(), key=lambda item: item[1], reverse=True),
        'batter': sorted(batters.items(), key=lambda item: item[1], reverse=True),
    }


def metric_values(
    players: Iterable[Player], scores: Iterable[Score], votes: Iterable[Vote], metric: str
) -> dict[str, int]:
    """Map player id to the live value of a leaderboard metric."""
    if metric not in LEADERBOARD_METRICS:
        raise ValueError(f'Unknown leaderboard metric: {metric}')

    scores = list(scores)
    votes = list(votes)
    values = {}
    for player in players:
        if metric == 'points':
            values[player.id] = total_points_for(scores, player.id)
        elif metric == 'fielder':
            values[player.id] = fielder_vote_count_for(votes, player.id)
        else:
            values[player.id] = batter_vote_count_for(votes, player.id)
    return values


def leaderboard(
    players: Iterable[Player],
    scores: Iterable[Score],
    votes: Iterable[Vote],
    metric: str = 'points',
) -> list[tuple[Player, int]]:
    """
    Rank players by a metric ('points', 'fielder' or 'batter'), highest first.

    The sort is stable, so tied players keep their roster order.
    """
    players = list(players)
    values = metric_values(players, scores, votes, metric)
    ranked = sorted(players, key=lambda p: values[p.id], reverse=True)
    return [(p, values[p.id]) for p in ranked]


def refresh_player_counters(
    players: Iterable[Player], scores: Iterable[Score], votes: Iterable[Vote]
) -> list[Player]:
    """Copies of the players with counters recomputed from scores and votes."""
    scores = list(scores)
    votes = list(votes)
    return [
        replace(
            p,
            total_points=total_points_for(scores, p.id),
            best_fielder=fielder_vote_count_for(votes, p.id),
            best_batter=batter_vote_count_for(votes, p.id),
        )
        for p in players
    ]
