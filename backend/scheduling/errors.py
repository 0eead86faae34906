from __future__ import annotations


class PersistenceError(RuntimeError):
    """Raised by a schedule backend when a durable read/write did not complete.

    Retryable: the in-memory draft is never assumed to have been saved.
    """


class ScheduleNotFoundError(LookupError):
    """Raised when a saved schedule does not exist or is not owned by the caller."""


class DraftInvariantError(AssertionError):
    """Raised when a draft holds state that only a bypass of ``add_section`` can produce."""
