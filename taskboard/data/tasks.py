"""Task persistence over the ORM with a direct-driver fallback.

Every read and write is scoped by task id and owner id together.
"""

import logging
from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Any
from uuid import uuid4

from sqlalchemy.orm import Session

from taskboard.data.base import ResilientStore, checked_values, orm_transaction, parse_key
from taskboard.data.direct import DirectConnector
from taskboard.data.records import TaskRecord
from taskboard.models.enums import TaskStatus
from taskboard.models.task import Task

logger = logging.getLogger(__name__)

TASK_FIELDS = ("title", "description", "status")
TASK_COLUMNS = "id, user_id, title, description, status, created_at, updated_at"


class OrmTaskRepository:
    """Task operations through SQLAlchemy."""

    def __init__(self, db: Session):
        self.db = db

    def _get(self, key: str, owner_key: str) -> Task | None:
        return self.db.query(Task).filter(Task.id == key, Task.user_id == owner_key).first()

    def list_for_user(self, owner_key: str) -> list[TaskRecord]:
        with orm_transaction(self.db, commit=False):
            tasks = (
                self.db.query(Task)
                .filter(Task.user_id == owner_key)
                .order_by(Task.created_at.desc(), Task.id.desc())
                .all()
            )
        return [TaskRecord.model_validate(task) for task in tasks]

    def get(self, key: str, owner_key: str) -> TaskRecord | None:
        with orm_transaction(self.db, commit=False):
            task = self._get(key, owner_key)
        return TaskRecord.model_validate(task) if task else None

    def create(self, owner_key: str, values: dict[str, Any]) -> TaskRecord:
        task = Task(user_id=owner_key, **values)
        with orm_transaction(self.db):
            self.db.add(task)
            self.db.flush()
            self.db.refresh(task)
            record = TaskRecord.model_validate(task)
        return record

    def update(self, key: str, owner_key: str, values: dict[str, Any]) -> TaskRecord | None:
        with orm_transaction(self.db):
            task = self._get(key, owner_key)
            if task is None:
                return None
            for field, value in values.items():
                setattr(task, field, value)
            task.updated_at = datetime.now(UTC)
            self.db.flush()
            self.db.refresh(task)
            record = TaskRecord.model_validate(task)
        return record

    def delete(self, key: str, owner_key: str) -> bool:
        with orm_transaction(self.db):
            task = self._get(key, owner_key)
            if task is None:
                return False
            self.db.delete(task)
        return True


class DirectTaskRepository:
    """Task operations through a one-shot driver connection."""

    def __init__(self, connector: DirectConnector):
        self.connector = connector

    def list_for_user(self, owner_key: str) -> list[TaskRecord]:
        with self.connector.connect() as conn:
            rows = conn.fetch_all(
                f"SELECT {TASK_COLUMNS} FROM tasks WHERE user_id = :user_id "
                "ORDER BY created_at DESC, id DESC",
                {"user_id": owner_key},
            )
        logger.info(f"Found {len(rows)} tasks for user {owner_key}")
        return [TaskRecord.model_validate(row) for row in rows]

    def get(self, key: str, owner_key: str) -> TaskRecord | None:
        with self.connector.connect() as conn:
            row = conn.fetch_one(
                f"SELECT {TASK_COLUMNS} FROM tasks WHERE id = :id AND user_id = :user_id",
                {"id": key, "user_id": owner_key},
            )
        return TaskRecord.model_validate(row) if row else None

    def create(self, owner_key: str, values: dict[str, Any]) -> TaskRecord:
        now = datetime.now(UTC)
        key = str(uuid4())
        document = {
            "id": key,
            "user_id": owner_key,
            "title": values["title"],
            "description": values.get("description"),
            "status": values.get("status", TaskStatus.PENDING.value),
            "created_at": now,
            "updated_at": now,
        }
        with self.connector.connect() as conn:
            conn.execute(
                f"INSERT INTO tasks ({TASK_COLUMNS}) VALUES "
                "(:id, :user_id, :title, :description, :status, :created_at, :updated_at)",
                document,
            )
            row = conn.fetch_one(f"SELECT {TASK_COLUMNS} FROM tasks WHERE id = :id", {"id": key})
            if row is None:
                raise RuntimeError(f"Task {key} not found after creation")
            # Validated before commit so a rejected row is rolled back
            record = TaskRecord.model_validate(row)
        logger.info(f"Created task {key} through direct driver")
        return record

    def update(self, key: str, owner_key: str, values: dict[str, Any]) -> TaskRecord | None:
        assignments = {**values, "updated_at": datetime.now(UTC)}
        set_clause = ", ".join(f"{column} = :{column}" for column in assignments)
        scope = {"id": key, "user_id": owner_key}
        with self.connector.connect() as conn:
            updated = conn.execute(
                f"UPDATE tasks SET {set_clause} WHERE id = :id AND user_id = :user_id",
                {**assignments, **scope},
            )
            if not updated:
                return None
            row = conn.fetch_one(
                f"SELECT {TASK_COLUMNS} FROM tasks WHERE id = :id AND user_id = :user_id", scope
            )
            return TaskRecord.model_validate(row) if row else None

    def delete(self, key: str, owner_key: str) -> bool:
        with self.connector.connect() as conn:
            deleted = conn.execute(
                "DELETE FROM tasks WHERE id = :id AND user_id = :user_id",
                {"id": key, "user_id": owner_key},
            )
        logger.info(f"Task {key} deleted: {deleted > 0}")
        return deleted > 0


def _task_values(changes: Mapping[str, Any]) -> dict[str, Any]:
    values = checked_values(changes, TASK_FIELDS)
    if "status" in values:
        # Raises ValueError for an unknown status before either path writes
        values["status"] = TaskStatus(values["status"]).value
    return values


class TaskStore(ResilientStore):
    """Owner-scoped task operations with transparent fallback to the direct driver."""

    def __init__(self, db: Session, connector: DirectConnector, fallback_enabled: bool = True):
        super().__init__(fallback_enabled)
        self.primary = OrmTaskRepository(db)
        self.fallback = DirectTaskRepository(connector)

    def list_for_user(self, user_id: str) -> list[TaskRecord]:
        """All tasks owned by the user, newest first."""
        owner_key = parse_key(user_id)
        if owner_key is None:
            return []
        return self._dispatch("list_tasks", "list_for_user", owner_key)

    def get(self, task_id: str, user_id: str) -> TaskRecord | None:
        """Fetch one task; None if it does not exist or belongs to someone else."""
        key, owner_key = parse_key(task_id), parse_key(user_id)
        if key is None or owner_key is None:
            return None
        return self._dispatch("find_task", "get", key, owner_key)

    def create(
        self,
        user_id: str,
        title: str,
        description: str | None = None,
        status: TaskStatus | str | None = None,
    ) -> TaskRecord:
        """Create a task for the user; status defaults to pending.

        Raises ValueError for an invalid owner id or an unknown status.
        """
        owner_key = parse_key(user_id)
        if owner_key is None:
            raise ValueError(f"Invalid user identifier: {user_id!r}")
        values = _task_values(
            {
                "title": title,
                "description": description,
                "status": status or TaskStatus.PENDING,
            }
        )
        return self._dispatch("create_task", "create", owner_key, values)

    def update(self, task_id: str, user_id: str, changes: Mapping[str, Any]) -> TaskRecord | None:
        """Apply changes to an owned task; None if it is not found for this user."""
        key, owner_key = parse_key(task_id), parse_key(user_id)
        if key is None or owner_key is None:
            return None
        return self._dispatch("update_task", "update", key, owner_key, _task_values(changes))

    def delete(self, task_id: str, user_id: str) -> bool:
        """Permanently delete an owned task; False if it is not found for this user."""
        key, owner_key = parse_key(task_id), parse_key(user_id)
        if key is None or owner_key is None:
            return False
        return self._dispatch("delete_task", "delete", key, owner_key)
