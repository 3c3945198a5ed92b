"""Shared plumbing for the resilient stores."""

from collections.abc import Iterable, Iterator, Mapping
from contextlib import contextmanager
from typing import Any
from uuid import UUID

from sqlalchemy.orm import Session

from taskboard.data.resilience import run_with_fallback


def parse_key(identifier: Any) -> str | None:
    """Convert an identifier to the store-native key form.

    Returns None when the identifier is not a UUID; callers treat that as a
    record that does not exist, on either path.
    """
    if isinstance(identifier, UUID):
        return str(identifier)
    try:
        return str(UUID(str(identifier)))
    except (TypeError, ValueError):
        return None


def checked_values(values: Mapping[str, Any], allowed: Iterable[str]) -> dict[str, Any]:
    """Return ``values`` as a dict, rejecting keys outside ``allowed``."""
    unknown = set(values) - set(allowed)
    if unknown:
        raise ValueError(f"Unknown fields: {', '.join(sorted(unknown))}")
    return dict(values)


@contextmanager
def orm_transaction(db: Session, commit: bool = True) -> Iterator[Session]:
    """Commit the session on success; roll it back if anything fails."""
    try:
        yield db
        if commit:
            db.commit()
    except Exception:
        db.rollback()
        raise


class ResilientStore:
    """Facade dispatching each operation to a primary and a fallback repository.

    Both repositories expose the same method names; an operation is always the
    same method called with the same arguments on whichever path serves it.
    """

    primary: Any
    fallback: Any

    def __init__(self, fallback_enabled: bool = True):
        self.fallback_enabled = fallback_enabled

    def _dispatch(self, operation: str, method: str, *args: Any) -> Any:
        return run_with_fallback(
            operation,
            lambda: getattr(self.primary, method)(*args),
            lambda: getattr(self.fallback, method)(*args),
            fallback_enabled=self.fallback_enabled,
        )
