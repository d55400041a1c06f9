# -*- coding: utf-8 -*-

"""
TaskFlow - application entry point.

Builds the FastAPI app, wires the task store, API key manager and task
service onto app.state, and maps service errors to JSON envelopes.

Run with:
    taskflow
or:
    uvicorn taskflow.main:create_app --factory
"""

import sys
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger
from starlette.exceptions import HTTPException as StarletteHTTPException

from taskflow.config import (
    APIKEYS_STORAGE_PATH,
    APP_TITLE,
    APP_VERSION,
    CORS_ORIGINS,
    DEFAULT_PAGE_SIZE,
    LOG_LEVEL,
    SEED_API_KEY,
    SEED_API_KEY_USER,
    SERVER_HOST,
    SERVER_PORT,
    TASKS_STORAGE_PATH,
    UPCOMING_DAYS,
)
from taskflow.errors import TaskflowError
from taskflow.routes_info import router as info_router
from taskflow.routes_tasks import router as tasks_router
from taskflow.service_tasks import TaskService
from taskflow.store_apikeys import ApiKeyManager
from taskflow.store_tasks import TaskStore


def setup_logging(level: str = LOG_LEVEL) -> None:
    """Replace loguru's default sink with a stderr sink at the configured level."""
    logger.remove()
    logger.add(
        sys.stderr,
        level=level,
        format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
               "<cyan>{name}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>",
    )


async def taskflow_error_handler(request: Request, exc: TaskflowError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "message": exc.message},
    )


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Unknown routes and other framework HTTP errors, in the failure envelope."""
    message = "API route not found" if exc.status_code == 404 else str(exc.detail)
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "message": message},
        headers=getattr(exc, "headers", None),
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=500,
        content={"success": False, "message": "Something went wrong!"},
    )


def create_app(
    task_store: Optional[TaskStore] = None,
    apikey_manager: Optional[ApiKeyManager] = None,
) -> FastAPI:
    """
    Build the application.

    Args:
        task_store: Store to use; defaults to one built from TASKFLOW_TASKS_PATH
        apikey_manager: Key manager to use; defaults to one built from TASKFLOW_APIKEYS_PATH
    """
    if task_store is None:
        task_store = TaskStore(TASKS_STORAGE_PATH or None)
    if apikey_manager is None:
        apikey_manager = ApiKeyManager(
            APIKEYS_STORAGE_PATH or None,
            seed_key=SEED_API_KEY or None,
            seed_user=SEED_API_KEY_USER,
        )

    app = FastAPI(title=APP_TITLE, version=APP_VERSION)
    app.state.task_store = task_store
    app.state.apikey_manager = apikey_manager
    app.state.task_service = TaskService(
        task_store,
        default_page_size=DEFAULT_PAGE_SIZE,
        upcoming_days=UPCOMING_DAYS,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ORIGINS,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(TaskflowError, taskflow_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    app.include_router(info_router)
    app.include_router(tasks_router)
    return app


def run() -> None:
    setup_logging()
    logger.info(f"Starting {APP_TITLE} {APP_VERSION} on {SERVER_HOST}:{SERVER_PORT}")
    uvicorn.run(
        "taskflow.main:create_app",
        factory=True,
        host=SERVER_HOST,
        port=SERVER_PORT,
    )


if __name__ == "__main__":
    run()
