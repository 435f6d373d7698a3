class SessionError(Exception):
    """Base exception for session and cycle record operations."""


class ValidationError(SessionError):
    """Raised when a submitted form fails validation.

    ``field_errors`` maps each offending field to a human readable message.
    """

    def __init__(self, field_errors: dict[str, str]):
        self.field_errors = dict(field_errors)
        joined = ", ".join(f"{field}: {message}" for field, message in self.field_errors.items())
        super().__init__(f"Invalid fields ({joined})")


class PersistenceError(SessionError):
    """Raised when the session database cannot be read or written."""


class SessionNotFoundError(SessionError):
    """Raised when a session or cycle id does not exist."""
