"""Pydantic schemas for command inputs, import rows, JSON data files and config."""

import re

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .constants import DATE_PATTERN, ID_LIST_SEPARATOR, POINT_VALUES

ROLE_PATTERN = r'^(player|manager|admin|masterAdmin)$'


def _split_ids(v):
    """Accept either a list of ids or a 'a;b;c' string from a sheet cell."""
    if v is None or v == '':
        return []
    if isinstance(v, str):
        return [part.strip() for part in v.split(ID_LIST_SEPARATOR) if part.strip()]
    return [str(part).strip() for part in v if str(part).strip()]


def _as_text(v):
    """Spreadsheet cells may arrive as numbers; text fields want strings."""
    if v is None or isinstance(v, str):
        return v
    return str(v)


# ---------------------------------------------------------------------------
# Persisted records
# ---------------------------------------------------------------------------
class TeamRecord(BaseModel):
    """Team as stored in teams.json."""

    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    color: str
    description: str | None = None
    image: str | None = None

    class Config:
        extra = 'forbid'


class PlayerRecord(BaseModel):
    """Player as stored in players.json."""

    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    position: str
    number: int | None = None
    image: str | None = None
    email: str | None = None
    phone: str | None = None
    team_ids: list[str] = Field(default_factory=list)
    total_points: int = Field(default=0, ge=0)
    best_fielder: int = Field(default=0, ge=0)
    best_batter: int = Field(default=0, ge=0)

    class Config:
        extra = 'forbid'


class GameRecord(BaseModel):
    """Game as stored in games.json."""

    id: str = Field(..., min_length=1)
    team_id: str
    opponent: str
    date: str
    location: str
    is_completed: bool = False
    voting_open: bool = False
    points_assigned: bool = False
    result: str | None = None
    participants: list[str] = Field(default_factory=list)

    class Config:
        extra = 'forbid'


class ScoreRecord(BaseModel):
    """Score as stored in scores.json."""

    id: str = Field(..., min_length=1)
    game_id: str
    player_id: str
    points: int

    @field_validator('points')
    @classmethod
    def validate_points(cls, v):
        """Ensure stored points are a placement value."""
        if v not in POINT_VALUES:
            raise ValueError(f'Invalid points value: {v}')
        return v

    class Config:
        extra = 'forbid'


class VoteRecord(BaseModel):
    """Vote as stored in votes.json."""

    id: str = Field(..., min_length=1)
    game_id: str
    voter_id: str
    best_fielder_id: str | None = None
    best_batter_id: str | None = None

    class Config:
        extra = 'forbid'


class UserRecord(BaseModel):
    """User account as stored in users.json."""

    id: str = Field(..., min_length=1)
    email: str = Field(..., min_length=3)
    name: str
    role: str = Field(default='player', pattern=ROLE_PATTERN)
    phone: str | None = None
    player_id: str | None = None
    created_at: str = ''

    class Config:
        extra = 'forbid'


class TeamsFile(BaseModel):
    """Complete teams.json file structure."""

    teams: list[TeamRecord]

    class Config:
        extra = 'forbid'


class PlayersFile(BaseModel):
    """Complete players.json file structure."""

    players: list[PlayerRecord]

    class Config:
        extra = 'forbid'


class GamesFile(BaseModel):
    """Complete games.json file structure."""

    games: list[GameRecord]

    class Config:
        extra = 'forbid'


class ScoresFile(BaseModel):
    """Complete scores.json file structure."""

    scores: list[ScoreRecord]

    class Config:
        extra = 'forbid'


class VotesFile(BaseModel):
    """Complete votes.json file structure."""

    votes: list[VoteRecord]

    class Config:
        extra = 'forbid'


class UsersFile(BaseModel):
    """Complete users.json file structure."""

    users: list[UserRecord]

    class Config:
        extra = 'forbid'


COLLECTION_SCHEMAS: dict[str, type[BaseModel]] = {
    'teams': TeamsFile,
    'players': PlayersFile,
    'games': GamesFile,
    'scores': ScoresFile,
    'votes': VotesFile,
    'users': UsersFile,
}


# ---------------------------------------------------------------------------
# Command inputs
# ---------------------------------------------------------------------------
class PointsEntry(BaseModel):
    """One line of an assign-points command."""

    player_id: str
    points: int

    class Config:
        extra = 'forbid'


class VoteInput(BaseModel):
    """A vote submission; the id is assigned by the engine."""

    game_id: str
    voter_id: str
    best_fielder_id: str | None = None
    best_batter_id: str | None = None

    class Config:
        extra = 'forbid'


class GameImportRow(BaseModel):
    """Loose game row accepted by bulk_import_games; blanks get defaults."""

    model_config = ConfigDict(extra='ignore', populate_by_name=True)

    team_id: str = Field(default='', alias='teamId')
    opponent: str | None = None
    date: str | None = None
    location: str | None = None
    participants: list[str] = Field(default_factory=list)

    @field_validator('team_id', 'opponent', 'date', 'location', mode='before')
    @classmethod
    def cells_as_text(cls, v):
        return _as_text(v)

    @field_validator('participants', mode='before')
    @classmethod
    def split_participants(cls, v):
        return _split_ids(v)


class PlayerImportRow(BaseModel):
    """Loose player row accepted by bulk_import_players; blanks get defaults."""

    model_config = ConfigDict(extra='ignore', populate_by_name=True)

    name: str | None = None
    position: str | None = None
    number: int | None = None
    email: str | None = None
    phone: str | None = None
    image: str | None = None
    team_ids: list[str] = Field(default_factory=list, alias='teamIds')

    @field_validator('name', 'position', 'email', 'phone', 'image', mode='before')
    @classmethod
    def cells_as_text(cls, v):
        return _as_text(v)

    @field_validator('team_ids', mode='before')
    @classmethod
    def split_team_ids(cls, v):
        return _split_ids(v)

    @field_validator('number', mode='before')
    @classmethod
    def blank_number(cls, v):
        """Sheet cells come through as '' when empty."""
        if v == '' or v is None:
            return None
        return int(v)


class GameSheetRow(GameImportRow):
    """Game row read from an import workbook; every column is required."""

    team_id: str = Field(..., min_length=1, alias='teamId')
    opponent: str = Field(..., min_length=1)
    date: str = Field(..., min_length=1)
    location: str = Field(..., min_length=1)

    @field_validator('date')
    @classmethod
    def validate_date(cls, v):
        """Ensure date is YYYY-MM-DD or YYYY-MM-DDTHH:MM[:SS]."""
        if not re.match(DATE_PATTERN, v):
            raise ValueError('Invalid date format. Use YYYY-MM-DD or YYYY-MM-DDTHH:MM:SS')
        return v


class PlayerSheetRow(PlayerImportRow):
    """Player row read from an import workbook; name and position are required."""

    name: str = Field(..., min_length=1)
    position: str = Field(..., min_length=1)


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------
class ClubConfig(BaseModel):
    """Club configuration settings."""

    club_name: str = 'Baseball Club'
    data_dir: str = 'data'
    seed_mock_data: bool = True
    log_dir: str = 'logs'
    log_level: str = Field(default='INFO', pattern=r'^(DEBUG|INFO|WARNING|ERROR)$')
    log_to_file: bool = False

    class Config:
        extra = 'forbid'
