"""Domain exceptions raised by the service layer.

Routers translate these into HTTP responses; services never build
``HTTPException`` themselves.
"""


class YokedError(Exception):
    """Base exception for domain errors."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(YokedError):
    """A referenced user, program, workout, session or exercise does not exist."""

    pass


class ValidationError(YokedError):
    """A field is out of range or malformed."""

    def __init__(self, message: str, field: str | None = None):
        super().__init__(message)
        self.field = field


class StateConflictError(YokedError):
    """The operation is not allowed in the current state."""

    pass


class NoPriorDataError(StateConflictError):
    """There is no completed session to progress from."""

    pass


class AuthenticationError(YokedError):
    """Credentials or token are invalid."""

    pass
