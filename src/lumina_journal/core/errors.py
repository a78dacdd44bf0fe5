"""Domain errors."""


class JournalError(Exception):
    """Base error for the journal."""


class PersistenceError(JournalError):
    """Entry store request failed."""


class AuthError(JournalError):
    """Auth service request failed."""
