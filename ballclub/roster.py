"""Roster registry: teams, players and team membership."""

import copy
import logging
import threading
from dataclasses import replace
from typing import Any, Iterable, Optional

from pydantic import ValidationError as SchemaValidationError

from .constants import UNKNOWN_PLAYER, UNKNOWN_POSITION
from .errors import NotFoundError, ValidationError
from .models import Player, Team
from .schemas import PlayerImportRow
from .storage import Storage, to_records
from .utils import new_id

logger = logging.getLogger('ballclub.roster')


class RosterRegistry:
    """Owns Team and Player records; lookups by id and by team membership."""

    def __init__(
        self,
        teams: Iterable[Team] = (),
        players: Iterable[Player] = (),
        storage: Optional[Storage] = None,
    ):
        self._lock = threading.RLock()
        self._storage = storage
        self._teams: list[Team] = list(teams)
        self._players: list[Player] = list(players)

        if storage is not None:
            stored = storage.load('teams')
            if stored is not None:
                self._teams = [Team(**r) for r in stored]
            stored = storage.load('players')
            if stored is not None:
                self._players = [Player(**r) for r in stored]

    def _save(self, *collections: str) -> None:
        if self._storage is None:
            return
        sources = {'teams': self._teams, 'players': self._players}
        for name in collections:
            self._storage.save(name, to_records(sources[name]))

    @property
    def lock(self):
        """Lock held by every command; hold it to run several commands as one."""
        return self._lock

    def flush(self) -> None:
        with self._lock:
            self._save('teams', 'players')

    # ------------------------------------------------------------------
    # Teams
    # ------------------------------------------------------------------
    @property
    def teams(self) -> list[Team]:
        with self._lock:
            return copy.deepcopy(self._teams)

    def get_team(self, team_id: str) -> Team:
        with self._lock:
            team = next((t for t in self._teams if t.id == team_id), None)
            if team is None:
                raise NotFoundError('Team', team_id)
            return copy.deepcopy(team)

    def team_exists(self, team_id: str) -> bool:
        with self._lock:
            return any(t.id == team_id for t in self._teams)

    def get_teams_by_ids(self, team_ids: Iterable[str]) -> list[Team]:
        wanted = set(team_ids)
        with self._lock:
            return [copy.deepcopy(t) for t in self._teams if t.id in wanted]

    def add_team(
        self,
        name: str,
        color: str,
        description: Optional[str] = None,
        image: Optional[str] = None,
    ) -> Team:
        errors = _missing(name=name, color=color)
        if errors:
            raise ValidationError(errors)

        team = Team(id=new_id(), name=name.strip(), color=color.strip(), description=description, image=image)
        with self._lock:
            self._teams.append(team)
            self._save('teams')

        logger.info(f'Added team {team.id} ({team.name})')
        return copy.deepcopy(team)

    def update_team(self, team: Team) -> Team:
        errors = _missing(name=team.name, color=team.color)
        if errors:
            raise ValidationError(errors)

        with self._lock:
            self.get_team(team.id)
            self._teams = [team if t.id == team.id else t for t in self._teams]
            self._save('teams')

        logger.info(f'Updated team {team.id}')
        return copy.deepcopy(team)

    def delete_team(self, team_id: str) -> None:
        """Remove a team and strip it from every player's team list. Unknown ids are ignored."""
        with self._lock:
            if not self.team_exists(team_id):
                return
            self._teams = [t for t in self._teams if t.id != team_id]
            self._players = [
                replace(p, team_ids=[t for t in p.team_ids if t != team_id]) if team_id in p.team_ids else p
                for p in self._players
            ]
            self._save('teams', 'players')

        logger.info(f'Deleted team {team_id}')

    # ------------------------------------------------------------------
    # Players
    # ------------------------------------------------------------------
    @property
    def players(self) -> list[Player]:
        with self._lock:
            return copy.deepcopy(self._players)

    def get_player(self, player_id: str) -> Player:
        with self._lock:
            player = next((p for p in self._players if p.id == player_id), None)
            if player is None:
                raise NotFoundError('Player', player_id)
            return copy.deepcopy(player)

    def player_exists(self, player_id: str) -> bool:
        with self._lock:
            return any(p.id == player_id for p in self._players)

    def get_players_by_team(self, team_id: str) -> list[Player]:
        with self._lock:
            return [copy.deepcopy(p) for p in self._players if team_id in p.team_ids]

    def get_players_sorted_by_points(self) -> list[Player]:
        """Players by their stored total_points, highest first."""
        with self._lock:
            return sorted(copy.deepcopy(self._players), key=lambda p: p.total_points, reverse=True)

    def add_player(
        self,
        name: str,
        position: str,
        number: Optional[int] = None,
        email: Optional[str] = None,
        phone: Optional[str] = None,
        image: Optional[str] = None,
    ) -> Player:
        """Create a player with zeroed counters and no teams."""
        errors = _missing(name=name, position=position)
        if errors:
            raise ValidationError(errors)

        player = Player(
            id=new_id(),
            name=name.strip(),
            position=position.strip(),
            number=number,
            email=email,
            phone=phone,
            image=image,
        )
        with self._lock:
            self._players.append(player)
            self._save('players')

        logger.info(f'Added player {player.id} ({player.name})')
        return copy.deepcopy(player)

    def update_player(self, player: Player) -> Player:
        errors = _missing(name=player.name, position=player.position)
        if errors:
            raise ValidationError(errors)

        with self._lock:
            self.get_player(player.id)
            updated = replace(player, team_ids=list(dict.fromkeys(player.team_ids)))
            self._players = [updated if p.id == player.id else p for p in self._players]
            self._save('players')

        logger.info(f'Updated player {player.id}')
        return copy.deepcopy(updated)

    def delete_player(self, player_id: str) -> None:
        """Remove a player record. Unknown ids are ignored."""
        with self._lock:
            if not self.player_exists(player_id):
                return
            self._players = [p for p in self._players if p.id != player_id]
            self._save('players')

        logger.info(f'Deleted player {player_id}')

    def _set_team_ids(self, player_id: str, team_ids: list[str]) -> Player:
        with self._lock:
            player = self.get_player(player_id)
            for team_id in team_ids:
                if not self.team_exists(team_id):
                    raise NotFoundError('Team', team_id)
            updated = replace(player, team_ids=list(dict.fromkeys(team_ids)))
            self._players = [updated if p.id == player_id else p for p in self._players]
            self._save('players')
            return copy.deepcopy(updated)

    def add_player_to_team(self, player_id: str, team_id: str) -> Player:
        player = self.get_player(player_id)
        if team_id in player.team_ids:
            return player
        return self._set_team_ids(player_id, player.team_ids + [team_id])

    def remove_player_from_team(self, player_id: str, team_id: str) -> Player:
        player = self.get_player(player_id)
        return self._set_team_ids(player_id, [t for t in player.team_ids if t != team_id])

    def update_player_teams(self, player_id: str, team_ids: Iterable[str]) -> Player:
        return self._set_team_ids(player_id, list(team_ids))

    def bulk_import_players(self, rows: Iterable[Any]) -> list[Player]:
        """
        Append imported players; blank names and positions get placeholders.

        The whole batch is rejected if any row lists a team that does not exist.
        """
        parsed = []
        for index, row in enumerate(rows, start=1):
            try:
                parsed.append(row if isinstance(row, PlayerImportRow) else PlayerImportRow.model_validate(row))
            except SchemaValidationError as e:
                raise ValidationError(f'Row {index}: {e.errors()[0]["msg"]}') from e

        new_players = [
            Player(
                id=new_id(),
                name=(row.name or '').strip() or UNKNOWN_PLAYER,
                position=(row.position or '').strip() or UNKNOWN_POSITION,
                number=row.number,
                email=row.email or None,
                phone=row.phone or None,
                image=row.image or None,
                team_ids=list(dict.fromkeys(row.team_ids)),
            )
            for row in parsed
        ]

        with self._lock:
            errors = [
                f'Row {index}: Unknown team {team_id}'
                for index, player in enumerate(new_players, start=1)
                for team_id in player.team_ids
                if not self.team_exists(team_id)
            ]
            if errors:
                logger.warning(f'Rejected player import: {"; ".join(errors)}')
                raise ValidationError(errors)
            self._players.extend(new_players)
            self._save('players')

        logger.info(f'Imported {len(new_players)} players')
        return copy.deepcopy(new_players)


def _missing(**fields: Optional[str]) -> list[str]:
    return [f'Missing {name}' for name, value in fields.items() if value is None or not str(value).strip()]
