"""Resilient data access: ORM first, direct driver when the store can't serve the ORM."""

from taskboard.data.direct import DirectConnector, resolve_database_name
from taskboard.data.errors import (
    CapabilityUnsupportedError,
    ConnectionFailureError,
    DataAccessError,
    ErrorKind,
    UniqueConstraintError,
    classify_error,
)
from taskboard.data.records import TaskRecord, UserCredentials, UserProfile
from taskboard.data.resilience import run_with_fallback
from taskboard.data.tasks import TaskStore
from taskboard.data.users import UserStore

__all__ = [
    "DirectConnector",
    "resolve_database_name",
    "ErrorKind",
    "DataAccessError",
    "CapabilityUnsupportedError",
    "UniqueConstraintError",
    "ConnectionFailureError",
    "classify_error",
    "run_with_fallback",
    "UserCredentials",
    "UserProfile",
    "TaskRecord",
    "UserStore",
    "TaskStore",
]
