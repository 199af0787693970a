"""Domain errors raised by the engine and translated to HTTP errors by the routers."""


class TeamForgeError(Exception):
    """Base class for all TeamForge domain errors."""


class NotFoundError(TeamForgeError):
    """A referenced team, user, challenge, attempt or room does not exist."""


class ConflictError(TeamForgeError):
    """The operation clashes with existing state (duplicate attempt, membership, ...)."""


class InvalidTransitionError(TeamForgeError):
    """An attempt update would leave a terminal status."""

    def __init__(self, current: str, target: str):
        self.current = current
        self.target = target
        super().__init__(f"Cannot move attempt from '{current}' to '{target}'")
