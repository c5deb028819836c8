from .models import Team, Player, Game, GamePhase, Score, Vote, User
from .errors import (
    ClubError,
    ValidationError,
    NotFoundError,
    ConflictError,
    AuthorizationError,
)
from .auth import Role, Capability, Caller, MockIdentityProvider, authorize, is_allowed
from .storage import Storage, MemoryStorage, JsonFileStorage
from .engine import GameLifecycleEngine
from .roster import RosterRegistry
from .aggregation import (
    total_points_for,
    fielder_vote_count_for,
    batter_vote_count_for,
    tally_game_votes,
    leaderboard,
    refresh_player_counters,
)
from .export import (
    export_club,
    write_template,
    read_game_rows,
    read_player_rows,
)
from .service import ClubService

__all__ = [
    # Models
    'Team',
    'Player',
    'Game',
    'GamePhase',
    'Score',
    'Vote',
    'User',
    # Errors
    'ClubError',
    'ValidationError',
    'NotFoundError',
    'ConflictError',
    'AuthorizationError',
    # Roles and identity
    'Role',
    'Capability',
    'Caller',
    'MockIdentityProvider',
    'authorize',
    'is_allowed',
    # Storage
    'Storage',
    'MemoryStorage',
    'JsonFileStorage',
    # Core
    'GameLifecycleEngine',
    'RosterRegistry',
    'ClubService',
    # Aggregation
    'total_points_for',
    'fielder_vote_count_for',
    'batter_vote_count_for',
    'tally_game_votes',
    'leaderboard',
    'refresh_player_counters',
    # Excel
    'export_club',
    'write_template',
    'read_game_rows',
    'read_player_rows',
]
