"""Data models for the ballclub roster and voting app."""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional


class GamePhase(str, Enum):
    """Lifecycle phase derived from a game's flags."""
    UPCOMING = 'upcoming'
    COMPLETED = 'completed'
    VOTING_OPEN = 'voting_open'
    VOTING_CLOSED = 'voting_closed'


@dataclass
class Team:
    """A club team; games are scoped to one team."""
    id: str
    name: str
    color: str
    description: Optional[str] = None
    image: Optional[str] = None


@dataclass
class Player:
    """A club member who can play, be voted for and earn points."""
    id: str
    name: str
    position: str
    number: Optional[int] = None
    image: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    team_ids: List[str] = field(default_factory=list)
    # Seeded counters; live values come from ballclub.aggregation
    total_points: int = 0
    best_fielder: int = 0
    best_batter: int = 0


@dataclass
class Game:
    """A scheduled or played match against an opponent."""
    id: str
    team_id: str
    opponent: str
    date: str
    location: str
    is_completed: bool = False
    voting_open: bool = False
    points_assigned: bool = False
    result: Optional[str] = None
    participants: List[str] = field(default_factory=list)

    @property
    def phase(self) -> GamePhase:
        if not self.is_completed:
            return GamePhase.UPCOMING
        if self.voting_open:
            return GamePhase.VOTING_OPEN
        # (True, False, False) is reported as COMPLETED; the flags cannot tell it apart
        if self.points_assigned:
            return GamePhase.VOTING_CLOSED
        return GamePhase.COMPLETED


@dataclass
class Score:
    """Placement points (3/2/1) awarded to one player for one game."""
    id: str
    game_id: str
    player_id: str
    points: int


@dataclass
class Vote:
    """One voter's best fielder / best batter picks for a game."""
    id: str
    game_id: str
    voter_id: str
    best_fielder_id: Optional[str] = None
    best_batter_id: Optional[str] = None


@dataclass
class User:
    """An app account; players link to a Player record via player_id."""
    id: str
    email: str
    name: str
    role: str = 'player'
    phone: Optional[str] = None
    player_id: Optional[str] = None
    created_at: str = ''
