"""
Store errors for the content store adapters.

Every store-level failure is mapped to a StoreError subclass carrying a short
machine-readable code. Adapters report these as data in WriteOutcome.
"""


class StoreError(Exception):
    """Base operational error for a content store."""

    code = "store_error"


class RetryableError(StoreError):
    """Temporary errors that may succeed on retry (serialization, network)."""

    code = "retryable"


class ConstraintViolation(StoreError):
    """Database constraint violations (unique, foreign key, check)."""

    code = "constraint_violation"


class MissingFieldError(StoreError):
    """A NOT NULL column was left empty at the store layer."""

    code = "missing_field"


class PermissionDenied(StoreError):
    """Privilege or row level security violations."""

    code = "permission_denied"


class TimeoutExceeded(StoreError):
    """Query, pool checkout, or client-side timeout."""

    code = "timeout"


_PERMISSION_MARKERS = ("row level security", "permission denied", "insufficient privilege")


def map_db_error(e: Exception) -> StoreError:
    if isinstance(e, StoreError):
        return e

    import psycopg
    import psycopg.errors as E
    from psycopg_pool import PoolTimeout

    if isinstance(e, (E.QueryCanceled, PoolTimeout, TimeoutError)):
        return TimeoutExceeded(str(e) or "store call timed out")
    if isinstance(e, E.InsufficientPrivilege):
        return PermissionDenied(str(e))
    if isinstance(e, E.NotNullViolation):
        return MissingFieldError(str(e))
    if isinstance(e, (E.UniqueViolation, E.CheckViolation, E.ForeignKeyViolation)):
        return ConstraintViolation(str(e))
    if any(m in str(e).lower() for m in _PERMISSION_MARKERS):
        return PermissionDenied(str(e))
    if isinstance(e, (E.SerializationFailure, E.DeadlockDetected, psycopg.OperationalError)):
        return RetryableError(str(e))
    return StoreError(str(e))
