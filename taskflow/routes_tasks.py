# -*- coding: utf-8 -*-

"""
Task Management - API Routes.

Owner-scoped task endpoints at /api/tasks. The bearer API key resolves to
the user id every operation is scoped to.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, Security
from fastapi.security import APIKeyHeader
from loguru import logger

from taskflow.config import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from taskflow.errors import Unauthenticated
from taskflow.models_tasks import (
    BulkUpdateResponse,
    MessageResponse,
    StatsResponse,
    TaskBulkUpdate,
    TaskCreate,
    TaskListResponse,
    TaskMutationResponse,
    TaskPatch,
    TaskResponse,
)
from taskflow.service_tasks import TaskService

# --- Security ---
api_key_header = APIKeyHeader(name="Authorization", auto_error=False)


async def current_user(request: Request, auth_header: str = Security(api_key_header)) -> str:
    """Resolve the Authorization bearer key to a user id."""
    if not auth_header or not auth_header.startswith("Bearer "):
        logger.warning("Access attempt with missing API key.")
        raise Unauthenticated()
    user_id = request.app.state.apikey_manager.verify_key(auth_header[7:])
    if not user_id:
        logger.warning("Access attempt with invalid API key.")
        raise Unauthenticated()
    return user_id


def task_service(request: Request) -> TaskService:
    return request.app.state.task_service


router = APIRouter(prefix="/api/tasks")


@router.get("", response_model=TaskListResponse)
async def list_tasks(
    status: Optional[str] = Query(None, description="Filter by status ('all' for any)"),
    priority: Optional[str] = Query(None, description="Filter by priority ('all' for any)"),
    search: Optional[str] = Query(None, description="Text in title, description or tags"),
    page: int = Query(1, ge=1, description="Page number"),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE, description="Items per page"),
    sort_by: str = Query("createdAt", alias="sortBy"),
    sort_order: str = Query("desc", alias="sortOrder", pattern="^(asc|desc)$"),
    user_id: str = Depends(current_user),
    service: TaskService = Depends(task_service),
):
    """List the caller's tasks with filtering, sorting, and pagination."""
    tasks, pagination = service.list_tasks(
        user_id,
        status=status, priority=priority, search=search,
        sort_by=sort_by, sort_order=sort_order,
        page=page, limit=limit,
    )
    return TaskListResponse(tasks=tasks, pagination=pagination)


@router.get("/stats/overview", response_model=StatsResponse)
async def get_stats(
    user_id: str = Depends(current_user),
    service: TaskService = Depends(task_service),
):
    """Per-status counts and tasks due in the next days."""
    return StatsResponse(stats=service.stats(user_id))


@router.patch("/bulk-update", response_model=BulkUpdateResponse)
async def bulk_update(
    body: Optional[TaskBulkUpdate] = None,
    user_id: str = Depends(current_user),
    service: TaskService = Depends(task_service),
):
    """Apply the same field updates to several tasks (drag & drop)."""
    body = body or TaskBulkUpdate()
    updates = body.updates.model_dump(by_alias=True, exclude_unset=True)
    modified = service.bulk_update(user_id, body.task_ids, updates)
    return BulkUpdateResponse(
        message=f"{modified} tasks updated successfully",
        modified_count=modified,
    )


@router.get("/{task_id}", response_model=TaskResponse)
async def get_task(
    task_id: str,
    user_id: str = Depends(current_user),
    service: TaskService = Depends(task_service),
):
    """Get a single task by ID."""
    return TaskResponse(task=service.get_task(user_id, task_id))


@router.post("", response_model=TaskMutationResponse, status_code=201)
async def create_task(
    data: TaskCreate,
    user_id: str = Depends(current_user),
    service: TaskService = Depends(task_service),
):
    """Create a new task owned by the caller."""
    task = service.create_task(user_id, data)
    return TaskMutationResponse(message="Task created successfully", task=task)


@router.put("/{task_id}", response_model=TaskMutationResponse)
@router.patch("/{task_id}", response_model=TaskMutationResponse)
async def update_task(
    task_id: str,
    data: TaskPatch,
    user_id: str = Depends(current_user),
    service: TaskService = Depends(task_service),
):
    """Update the fields present in the body; other fields are kept."""
    task = service.update_task(user_id, task_id, data)
    return TaskMutationResponse(message="Task updated successfully", task=task)


@router.delete("/{task_id}", response_model=MessageResponse)
async def delete_task(
    task_id: str,
    user_id: str = Depends(current_user),
    service: TaskService = Depends(task_service),
):
    """Delete a task."""
    service.delete_task(user_id, task_id)
    return MessageResponse(message="Task deleted successfully")
