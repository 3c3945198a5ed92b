"""User persistence over the ORM with a direct-driver fallback."""

import logging
from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Any
from uuid import uuid4

from sqlalchemy.orm import Session

from taskboard.data.base import ResilientStore, checked_values, orm_transaction, parse_key
from taskboard.data.direct import DirectConnector
from taskboard.data.errors import UniqueConstraintError
from taskboard.data.records import UserCredentials, UserProfile
from taskboard.models.user import User

logger = logging.getLogger(__name__)

PROFILE_FIELDS = ("email", "first_name", "last_name", "bio", "avatar")

PROFILE_COLUMNS = (
    "id, username, email, first_name, last_name, bio, avatar, created_at, updated_at"
)
CREDENTIAL_COLUMNS = "id, username, password_hash"


class OrmUserRepository:
    """User operations through SQLAlchemy."""

    def __init__(self, db: Session):
        self.db = db

    def _get(self, key: str) -> User | None:
        return self.db.query(User).filter(User.id == key).first()

    def find_by_username(self, username: str) -> UserCredentials | None:
        with orm_transaction(self.db, commit=False):
            user = self.db.query(User).filter(User.username == username).first()
        return UserCredentials.model_validate(user) if user else None

    def find_by_id(self, key: str) -> UserProfile | None:
        with orm_transaction(self.db, commit=False):
            user = self._get(key)
        return UserProfile.model_validate(user) if user else None

    def find_credentials_by_id(self, key: str) -> UserCredentials | None:
        with orm_transaction(self.db, commit=False):
            user = self._get(key)
        return UserCredentials.model_validate(user) if user else None

    def create(self, username: str, password_hash: str) -> UserProfile:
        user = User(username=username, password_hash=password_hash)
        with orm_transaction(self.db):
            self.db.add(user)
            self.db.flush()
            self.db.refresh(user)
            record = UserProfile.model_validate(user)
        return record

    def update(self, key: str, values: dict[str, Any]) -> UserProfile | None:
        with orm_transaction(self.db):
            user = self._get(key)
            if user is None:
                return None
            for field, value in values.items():
                setattr(user, field, value)
            user.updated_at = datetime.now(UTC)
            self.db.flush()
            self.db.refresh(user)
            record = UserProfile.model_validate(user)
        return record

    def update_password(self, key: str, password_hash: str) -> bool:
        with orm_transaction(self.db):
            user = self._get(key)
            if user is None:
                return False
            user.password_hash = password_hash
            user.updated_at = datetime.now(UTC)
        return True


class DirectUserRepository:
    """User operations through a one-shot driver connection."""

    def __init__(self, connector: DirectConnector):
        self.connector = connector

    def find_by_username(self, username: str) -> UserCredentials | None:
        with self.connector.connect() as conn:
            row = conn.fetch_one(
                f"SELECT {CREDENTIAL_COLUMNS} FROM users WHERE username = :username",
                {"username": username},
            )
        return UserCredentials.model_validate(row) if row else None

    def find_by_id(self, key: str) -> UserProfile | None:
        with self.connector.connect() as conn:
            row = conn.fetch_one(f"SELECT {PROFILE_COLUMNS} FROM users WHERE id = :id", {"id": key})
        return UserProfile.model_validate(row) if row else None

    def find_credentials_by_id(self, key: str) -> UserCredentials | None:
        with self.connector.connect() as conn:
            row = conn.fetch_one(
                f"SELECT {CREDENTIAL_COLUMNS} FROM users WHERE id = :id", {"id": key}
            )
        return UserCredentials.model_validate(row) if row else None

    def create(self, username: str, password_hash: str) -> UserProfile:
        now = datetime.now(UTC)
        key = uuid4()
        with self.connector.connect() as conn:
            # No ORM constraint handling on this path, so check before inserting
            existing = conn.fetch_one(
                "SELECT id FROM users WHERE username = :username", {"username": username}
            )
            if existing:
                raise UniqueConstraintError(
                    f"Username '{username}' already exists", operation="create_user"
                )
            conn.execute(
                "INSERT INTO users (id, username, password_hash, created_at, updated_at) "
                "VALUES (:id, :username, :password_hash, :created_at, :updated_at)",
                {
                    "id": str(key),
                    "username": username,
                    "password_hash": password_hash,
                    "created_at": now,
                    "updated_at": now,
                },
            )
            row = conn.fetch_one(
                f"SELECT {PROFILE_COLUMNS} FROM users WHERE id = :id", {"id": str(key)}
            )
        logger.info(f"Created user {key} through direct driver")
        return UserProfile.model_validate(row)

    def update(self, key: str, values: dict[str, Any]) -> UserProfile | None:
        assignments = {**values, "updated_at": datetime.now(UTC)}
        set_clause = ", ".join(f"{column} = :{column}" for column in assignments)
        with self.connector.connect() as conn:
            updated = conn.execute(
                f"UPDATE users SET {set_clause} WHERE id = :id", {**assignments, "id": key}
            )
            if not updated:
                return None
            row = conn.fetch_one(f"SELECT {PROFILE_COLUMNS} FROM users WHERE id = :id", {"id": key})
        return UserProfile.model_validate(row) if row else None

    def update_password(self, key: str, password_hash: str) -> bool:
        with self.connector.connect() as conn:
            updated = conn.execute(
                "UPDATE users SET password_hash = :password_hash, updated_at = :updated_at "
                "WHERE id = :id",
                {"password_hash": password_hash, "updated_at": datetime.now(UTC), "id": key},
            )
        return updated > 0


class UserStore(ResilientStore):
    """User operations with transparent fallback to the direct driver."""

    def __init__(self, db: Session, connector: DirectConnector, fallback_enabled: bool = True):
        super().__init__(fallback_enabled)
        self.primary = OrmUserRepository(db)
        self.fallback = DirectUserRepository(connector)

    def find_by_username(self, username: str) -> UserCredentials | None:
        """Look up a user for credential verification."""
        return self._dispatch("find_user_by_username", "find_by_username", username)

    def find_by_id(self, user_id: str) -> UserProfile | None:
        """Look up a user's public profile."""
        key = parse_key(user_id)
        if key is None:
            return None
        return self._dispatch("find_user_by_id", "find_by_id", key)

    def find_credentials_by_id(self, user_id: str) -> UserCredentials | None:
        """Look up a user's credentials by identifier."""
        key = parse_key(user_id)
        if key is None:
            return None
        return self._dispatch("find_user_credentials", "find_credentials_by_id", key)

    def create(self, username: str, password_hash: str) -> UserProfile:
        """Create a user; raises UniqueConstraintError if the username is taken."""
        return self._dispatch("create_user", "create", username, password_hash)

    def update_profile(self, user_id: str, changes: Mapping[str, Any]) -> UserProfile | None:
        """Apply profile changes; returns None if the user does not exist."""
        key = parse_key(user_id)
        if key is None:
            return None
        values = checked_values(changes, PROFILE_FIELDS)
        return self._dispatch("update_user", "update", key, values)

    def update_password(self, user_id: str, password_hash: str) -> bool:
        """Replace the stored password hash; returns False if the user does not exist."""
        key = parse_key(user_id)
        if key is None:
            return False
        return self._dispatch("update_user_password", "update_password", key, password_hash)
