"""Classification of persistence errors raised by the ORM and by raw drivers.

Every exception that escapes either persistence path is translated into one
``ErrorKind`` here. The fallback decision in ``taskboard.data.resilience`` is a
match over these kinds, never over driver-specific codes or messages.
"""

import sqlite3
from enum import StrEnum

import psycopg2
import psycopg2.errors
from sqlalchemy import exc as sa_exc

# SQLSTATE class 0A: feature_not_supported and friends
PG_FEATURE_NOT_SUPPORTED_CLASS = "0A"
# SQLSTATE class 08: connection_exception and friends
PG_CONNECTION_EXCEPTION_CLASS = "08"
PG_UNIQUE_VIOLATION = "23505"
SQLITE_UNIQUE_MESSAGE = "UNIQUE constraint failed"
SQLITE_OPEN_FAILED_MESSAGE = "unable to open database file"

DRIVER_NOT_SUPPORTED = (psycopg2.NotSupportedError, sqlite3.NotSupportedError)
DRIVER_INTEGRITY = (psycopg2.IntegrityError, sqlite3.IntegrityError)
DRIVER_CONNECTION = (
    psycopg2.InterfaceError,
    psycopg2.errors.ConnectionException,
    psycopg2.errors.AdminShutdown,
    psycopg2.errors.CrashShutdown,
    psycopg2.errors.CannotConnectNow,
    sqlite3.InterfaceError,
)


class ErrorKind(StrEnum):
    """Closed set of persistence failure categories.

    NOT_FOUND is never raised; stores report it as a None or False result.
    """

    CAPABILITY_UNSUPPORTED = "capability_unsupported"
    UNIQUE_VIOLATION = "unique_violation"
    NOT_FOUND = "not_found"
    CONNECTION_FAILURE = "connection_failure"
    OTHER = "other"


class DataAccessError(Exception):
    """Base class for classified data-access failures."""

    kind: ErrorKind = ErrorKind.OTHER

    def __init__(self, message: str, operation: str | None = None):
        super().__init__(message)
        self.operation = operation


class CapabilityUnsupportedError(DataAccessError):
    """The store lacks a feature the ORM execution model needs."""

    kind = ErrorKind.CAPABILITY_UNSUPPORTED


class UniqueConstraintError(DataAccessError):
    """A write collided with an existing unique value."""

    kind = ErrorKind.UNIQUE_VIOLATION


class ConnectionFailureError(DataAccessError):
    """The backing store could not be reached."""

    kind = ErrorKind.CONNECTION_FAILURE


ERROR_TYPES: dict[ErrorKind, type[DataAccessError]] = {
    ErrorKind.CAPABILITY_UNSUPPORTED: CapabilityUnsupportedError,
    ErrorKind.UNIQUE_VIOLATION: UniqueConstraintError,
    ErrorKind.CONNECTION_FAILURE: ConnectionFailureError,
}


def _sqlstate(error: BaseException | None) -> str | None:
    """Return the SQLSTATE of a psycopg2 error, if any."""
    return getattr(error, "pgcode", None)


def _is_connection_failure(error: BaseException, code: str | None) -> bool:
    """True when the backend itself could not be reached.

    Deadlocks, serialization failures and statement timeouts are also
    OperationalErrors in psycopg2 but leave the server reachable.
    """
    if isinstance(error, DRIVER_CONNECTION):
        return True
    if code is not None:
        return code.startswith(PG_CONNECTION_EXCEPTION_CLASS)
    if isinstance(error, sqlite3.OperationalError):
        return SQLITE_OPEN_FAILED_MESSAGE in str(error)
    # libpq reports refused and dropped connections without a SQLSTATE
    return type(error) is psycopg2.OperationalError


def _classify_driver_error(error: BaseException) -> ErrorKind:
    code = _sqlstate(error)
    if isinstance(error, DRIVER_NOT_SUPPORTED):
        return ErrorKind.CAPABILITY_UNSUPPORTED
    if code and code.startswith(PG_FEATURE_NOT_SUPPORTED_CLASS):
        return ErrorKind.CAPABILITY_UNSUPPORTED
    if code == PG_UNIQUE_VIOLATION:
        return ErrorKind.UNIQUE_VIOLATION
    if isinstance(error, DRIVER_INTEGRITY) and SQLITE_UNIQUE_MESSAGE in str(error):
        return ErrorKind.UNIQUE_VIOLATION
    if _is_connection_failure(error, code):
        return ErrorKind.CONNECTION_FAILURE
    return ErrorKind.OTHER


def classify_error(error: BaseException) -> ErrorKind:
    """Translate an ORM or driver exception into an ``ErrorKind``."""
    if isinstance(error, DataAccessError):
        return error.kind
    if isinstance(error, sa_exc.NotSupportedError):
        return ErrorKind.CAPABILITY_UNSUPPORTED
    if isinstance(error, sa_exc.DisconnectionError):
        return ErrorKind.CONNECTION_FAILURE
    if isinstance(error, sa_exc.DBAPIError):
        if error.connection_invalidated:
            return ErrorKind.CONNECTION_FAILURE
        kind = _classify_driver_error(error.orig) if error.orig is not None else ErrorKind.OTHER
        if kind is not ErrorKind.OTHER:
            return kind
        if isinstance(error, sa_exc.IntegrityError) and SQLITE_UNIQUE_MESSAGE in str(error):
            return ErrorKind.UNIQUE_VIOLATION
        return ErrorKind.OTHER
    return _classify_driver_error(error)


def to_data_access_error(
    error: BaseException, operation: str, kind: ErrorKind | None = None
) -> DataAccessError | None:
    """Build the classified exception for ``error``.

    Returns None for ``ErrorKind.OTHER`` so the caller re-raises the original.
    An error that is already classified is returned unchanged.
    """
    if isinstance(error, DataAccessError):
        return error
    kind = kind or classify_error(error)
    error_type = ERROR_TYPES.get(kind)
    if error_type is None:
        return None
    return error_type(f"{operation} failed: {error}", operation=operation)
