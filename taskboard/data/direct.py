"""Direct DB-API connections for the fallback path.

Each fallback operation gets its own connection, opened from the connection
string and closed before the operation returns. Nothing here is pooled.
"""

import logging
import re
import sqlite3
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from datetime import UTC, datetime
from typing import Any

import psycopg2
from sqlalchemy.engine import URL, make_url
from sqlalchemy.exc import ArgumentError

from taskboard.data.errors import ConnectionFailureError

logger = logging.getLogger(__name__)

DEFAULT_DATABASE_NAME = "taskmanagement"

# SQLAlchemy's storage format for SQLite DATETIME columns
SQLITE_DATETIME_FORMAT = "%Y-%m-%d %H:%M:%S.%f"

_NAMED_PARAM = re.compile(r"(?<!:):(\w+)")
_PATH_DATABASE = re.compile(r"/([^/?]+)(?:\?|$)")


def resolve_database_name(url: str, default: str = DEFAULT_DATABASE_NAME) -> str:
    """Derive the database name from the path component of a connection string."""
    try:
        database = make_url(url).database
    except ArgumentError:
        match = _PATH_DATABASE.search(url)
        database = match.group(1) if match else None
    return database or default


class DirectSession:
    """Thin wrapper around a DB-API connection that speaks ``:name`` parameters."""

    def __init__(self, connection: Any, paramstyle: str, dialect: str):
        self.connection = connection
        self.paramstyle = paramstyle
        self.dialect = dialect

    def _statement(self, sql: str) -> str:
        if self.paramstyle == "pyformat":
            return _NAMED_PARAM.sub(r"%(\1)s", sql)
        return sql

    def _bind(self, params: Mapping[str, Any] | None) -> dict[str, Any]:
        bound = dict(params or {})
        if self.dialect == "sqlite":
            for key, value in bound.items():
                if isinstance(value, datetime):
                    if value.tzinfo is not None:
                        value = value.astimezone(UTC).replace(tzinfo=None)
                    bound[key] = value.strftime(SQLITE_DATETIME_FORMAT)
        return bound

    def _run(self, sql: str, params: Mapping[str, Any] | None) -> Any:
        cursor = self.connection.cursor()
        cursor.execute(self._statement(sql), self._bind(params))
        return cursor

    @staticmethod
    def _rows(cursor: Any, rows: list[tuple]) -> list[dict[str, Any]]:
        columns = [column[0] for column in cursor.description]
        return [dict(zip(columns, row, strict=True)) for row in rows]

    def fetch_one(self, sql: str, params: Mapping[str, Any] | None = None) -> dict[str, Any] | None:
        """Run a query and return its first row as a dict."""
        cursor = self._run(sql, params)
        try:
            row = cursor.fetchone()
            return self._rows(cursor, [row])[0] if row is not None else None
        finally:
            cursor.close()

    def fetch_all(self, sql: str, params: Mapping[str, Any] | None = None) -> list[dict[str, Any]]:
        """Run a query and return every row as a dict."""
        cursor = self._run(sql, params)
        try:
            return self._rows(cursor, cursor.fetchall())
        finally:
            cursor.close()

    def execute(self, sql: str, params: Mapping[str, Any] | None = None) -> int:
        """Run a statement and return the affected row count."""
        cursor = self._run(sql, params)
        try:
            return cursor.rowcount
        finally:
            cursor.close()


class DirectConnector:
    """Opens one-shot driver connections from a connection string."""

    def __init__(self, url: str, default_database: str = DEFAULT_DATABASE_NAME):
        self.url = url
        self.database_name = resolve_database_name(url, default_database)

    def _parsed(self) -> URL:
        try:
            return make_url(self.url)
        except ArgumentError as e:
            raise ConnectionFailureError(f"Invalid connection string: {e}") from e

    def _open(self) -> DirectSession:
        url = self._parsed()
        backend = url.get_backend_name()
        try:
            if backend == "sqlite":
                connection = sqlite3.connect(url.database or ":memory:")
                return DirectSession(connection, "named", "sqlite")
            if backend == "postgresql":
                connection = psycopg2.connect(
                    host=url.host,
                    port=url.port,
                    user=url.username,
                    password=url.password,
                    dbname=self.database_name,
                    **url.query,
                )
                return DirectSession(connection, psycopg2.paramstyle, "postgresql")
        except (sqlite3.Error, psycopg2.Error) as e:
            raise ConnectionFailureError(f"Direct connection failed: {e}") from e
        raise ConnectionFailureError(f"No direct driver for '{backend}' connection strings")

    @contextmanager
    def connect(self) -> Iterator[DirectSession]:
        """Open a connection for one operation and always release it."""
        session = self._open()
        logger.debug(f"Opened direct connection to {self.database_name}")
        try:
            yield session
            session.connection.commit()
        except Exception:
            session.connection.rollback()
            raise
        finally:
            session.connection.close()
            logger.debug(f"Closed direct connection to {self.database_name}")
