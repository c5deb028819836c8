"""Roles, capabilities and the mock identity provider.

Every role-gated command goes through ``authorize(role, capability)``;
call sites never combine role checks themselves.
"""

import logging
import threading
from dataclasses import dataclass, replace
from enum import Enum
from typing import Iterable, Optional

from .errors import AuthorizationError, ConflictError, NotFoundError, ValidationError
from .models import User
from .storage import Storage, to_records
from .utils import new_id, utc_now_iso

logger = logging.getLogger('ballclub.auth')


class Role(str, Enum):
    PLAYER = 'player'
    MANAGER = 'manager'
    ADMIN = 'admin'
    MASTER_ADMIN = 'masterAdmin'

    @property
    def rank(self) -> int:
        return _ROLE_RANK[self]


_ROLE_RANK = {
    Role.PLAYER: 0,
    Role.MANAGER: 1,
    Role.ADMIN: 2,
    Role.MASTER_ADMIN: 3,
}


class Capability(str, Enum):
    MANAGE_GAMES = 'manage_games'
    ASSIGN_POINTS = 'assign_points'
    VIEW_RESULTS = 'view_results'
    MANAGE_ROSTER = 'manage_roster'
    VIEW_LEADERBOARD = 'view_leaderboard'
    EXPORT_DATA = 'export_data'
    PROMOTE_MANAGER = 'promote_manager'
    PROMOTE_ADMIN = 'promote_admin'
    VOTE = 'vote'


# Minimum role for management capabilities; VOTE is handled separately.
_MINIMUM_ROLE = {
    Capability.MANAGE_GAMES: Role.MANAGER,
    Capability.ASSIGN_POINTS: Role.MANAGER,
    Capability.VIEW_RESULTS: Role.MANAGER,
    Capability.MANAGE_ROSTER: Role.ADMIN,
    Capability.VIEW_LEADERBOARD: Role.ADMIN,
    Capability.EXPORT_DATA: Role.ADMIN,
    Capability.PROMOTE_MANAGER: Role.ADMIN,
    Capability.PROMOTE_ADMIN: Role.MASTER_ADMIN,
}


def is_allowed(role: Role | str, capability: Capability) -> bool:
    """Whether a role grants a capability."""
    role = Role(role)
    if capability == Capability.VOTE:
        # Voting is for players only; managers and admins run the game
        return role == Role.PLAYER
    return role.rank >= _MINIMUM_ROLE[capability].rank


def authorize(role: Role | str, capability: Capability) -> None:
    """
    Raise AuthorizationError unless the role grants the capability.

    Example:
        authorize(caller.role, Capability.ASSIGN_POINTS)
    """
    if not is_allowed(role, capability):
        logger.warning(f'Role {Role(role).value} denied {capability.value}')
        raise AuthorizationError(f'Role {Role(role).value} may not {capability.value}')


@dataclass(frozen=True)
class Caller:
    """Resolved identity of whoever issues a command."""
    user_id: str
    role: Role
    linked_player_id: Optional[str] = None

    @property
    def voter_id(self) -> str:
        """Linked player id when present, else the raw user id."""
        return self.linked_player_id or self.user_id


class MockIdentityProvider:
    """
    Resolves callers from a seeded user list.

    Login is a case-insensitive email lookup; passwords are accepted but not
    checked. There is no session store beyond ``current_user``.
    """

    def __init__(self, users: Iterable[User] = (), storage: Optional[Storage] = None):
        self._lock = threading.RLock()
        self._storage = storage
        self.users: list[User] = list(users)
        self.current_user: Optional[User] = None

        if storage is not None:
            records = storage.load('users')
            if records is not None:
                self.users = [User(**r) for r in records]

    def _persist(self) -> None:
        if self._storage is not None:
            self._storage.save('users', to_records(self.users))

    def flush(self) -> None:
        with self._lock:
            self._persist()

    def find_by_email(self, email: str) -> Optional[User]:
        email = email.strip().lower()
        return next((u for u in self.users if u.email.lower() == email), None)

    def get_user(self, user_id: str) -> User:
        user = next((u for u in self.users if u.id == user_id), None)
        if user is None:
            raise NotFoundError('User', user_id)
        return user

    def login(self, email: str, password: str) -> User:
        user = self.find_by_email(email)
        if user is None:
            logger.warning(f'Failed login for {email}')
            raise AuthorizationError('Invalid email or password')
        self.current_user = user
        logger.info(f'{user.email} logged in as {user.role}')
        return user

    def logout(self) -> None:
        self.current_user = None

    def register(self, email: str, password: str, name: str, phone: Optional[str] = None) -> User:
        """Create a player account; the very first account becomes master admin."""
        if not email or not email.strip() or not name or not name.strip():
            raise ValidationError('Email and name are required')

        with self._lock:
            if self.find_by_email(email) is not None:
                raise ConflictError('Email already in use')

            role = Role.MASTER_ADMIN if not self.users else Role.PLAYER
            user = User(
                id=new_id(),
                email=email.strip(),
                name=name.strip(),
                phone=phone,
                role=role.value,
                created_at=utc_now_iso(),
            )
            self.users.append(user)
            self._persist()

        self.current_user = user
        logger.info(f'Registered {user.email} as {user.role}')
        return user

    def caller_for(self, user: User) -> Caller:
        return Caller(user_id=user.id, role=Role(user.role), linked_player_id=user.player_id)

    def current_caller(self) -> Caller:
        if self.current_user is None:
            raise AuthorizationError('Not logged in')
        return self.caller_for(self.current_user)

    def _update_user(self, user_id: str, **changes) -> User:
        with self._lock:
            user = self.get_user(user_id)
            updated = replace(user, **changes)
            self.users = [updated if u.id == user_id else u for u in self.users]
            self._persist()

        if self.current_user is not None and self.current_user.id == user_id:
            self.current_user = updated
        return updated

    def link_player(self, user_id: str, player_id: str) -> User:
        user = self._update_user(user_id, player_id=player_id)
        logger.info(f'Linked user {user_id} to player {player_id}')
        return user

    def promote_to_admin(self, acting: Caller, user_id: str) -> User:
        authorize(acting.role, Capability.PROMOTE_ADMIN)
        return self._set_role(user_id, Role.ADMIN)

    def promote_to_manager(self, acting: Caller, user_id: str) -> User:
        authorize(acting.role, Capability.PROMOTE_MANAGER)
        return self._set_role(user_id, Role.MANAGER)

    def demote_to_player(self, acting: Caller, user_id: str) -> User:
        authorize(acting.role, Capability.PROMOTE_MANAGER)
        if self.get_user(user_id).role == Role.MASTER_ADMIN.value:
            raise ConflictError('The master admin cannot be demoted')
        return self._set_role(user_id, Role.PLAYER)

    def _set_role(self, user_id: str, role: Role) -> User:
        user = self._update_user(user_id, role=role.value)
        logger.info(f'User {user_id} is now {role.value}')
        return user
