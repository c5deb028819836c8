"""Error taxonomy for club commands."""


class ClubError(Exception):
    """Base class for every error raised by ballclub commands."""


class ValidationError(ClubError, ValueError):
    """Required field missing or malformed."""

    def __init__(self, errors: list[str] | str):
        if isinstance(errors, str):
            errors = [errors]
        self.errors = list(errors)
        super().__init__('; '.join(self.errors))


class NotFoundError(ClubError, LookupError):
    """Command referenced an id that is not in the collection."""

    def __init__(self, kind: str, item_id: str):
        self.kind = kind
        self.id = item_id
        super().__init__(f'{kind} not found: {item_id}')


class ConflictError(ClubError):
    """Command is illegal in the current state (closed voting, duplicate points, ...)."""


class AuthorizationError(ClubError):
    """Caller's role does not grant the capability a command needs."""
