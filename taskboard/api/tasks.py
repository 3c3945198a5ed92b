"""Task API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status

from taskboard.api.dependencies import get_current_user_id, get_task_store
from taskboard.data.records import TaskRecord
from taskboard.data.tasks import TaskStore
from taskboard.schemas.task import TaskCreate, TaskUpdate

router = APIRouter(prefix="/api/tasks", tags=["tasks"])


def task_not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Task not found")


@router.get("", response_model=list[TaskRecord])
async def get_tasks(
    user_id: Annotated[str, Depends(get_current_user_id)],
    tasks: Annotated[TaskStore, Depends(get_task_store)],
):
    """Get all tasks for the current user, newest first."""
    return tasks.list_for_user(user_id)


@router.post("", response_model=TaskRecord, status_code=status.HTTP_201_CREATED)
async def create_task(
    task_data: TaskCreate,
    user_id: Annotated[str, Depends(get_current_user_id)],
    tasks: Annotated[TaskStore, Depends(get_task_store)],
):
    """Create a new task."""
    return tasks.create(
        user_id,
        title=task_data.title,
        description=task_data.description or None,
        status=task_data.status,
    )


@router.get("/{task_id}", response_model=TaskRecord)
async def get_task(
    task_id: str,
    user_id: Annotated[str, Depends(get_current_user_id)],
    tasks: Annotated[TaskStore, Depends(get_task_store)],
):
    """Get a specific task."""
    task = tasks.get(task_id, user_id)
    if task is None:
        raise task_not_found()
    return task


@router.put("/{task_id}", response_model=TaskRecord)
async def update_task(
    task_id: str,
    task_data: TaskUpdate,
    user_id: Annotated[str, Depends(get_current_user_id)],
    tasks: Annotated[TaskStore, Depends(get_task_store)],
):
    """Update a task."""
    changes = {}
    if task_data.title:
        changes["title"] = task_data.title
    if "description" in task_data.model_fields_set:
        changes["description"] = task_data.description or None
    if task_data.status:
        changes["status"] = task_data.status

    task = tasks.update(task_id, user_id, changes)
    if task is None:
        raise task_not_found()
    return task


@router.delete("/{task_id}")
async def delete_task(
    task_id: str,
    user_id: Annotated[str, Depends(get_current_user_id)],
    tasks: Annotated[TaskStore, Depends(get_task_store)],
):
    """Permanently delete a task."""
    if not tasks.delete(task_id, user_id):
        raise task_not_found()
    return {"message": "Task deleted successfully"}
