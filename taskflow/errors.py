# -*- coding: utf-8 -*-

"""
Task Management - Error Types.

Typed failures raised by the task service. Each one carries the HTTP status
and the caller-safe message used by the exception handlers in main.py.
"""


class TaskflowError(Exception):
    """Base class for failures surfaced to API callers."""

    status_code = 500
    default_message = "Something went wrong!"

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class Unauthenticated(TaskflowError):
    """No valid user identity was presented."""

    status_code = 401
    default_message = "Invalid or missing API Key"


class NotFound(TaskflowError):
    """
    No task matches (id, owner).

    Also raised when the task exists but belongs to another user, so callers
    cannot probe for other users' task ids.
    """

    status_code = 404
    default_message = "Task not found"


class InvalidArgument(TaskflowError):
    status_code = 400
    default_message = "Invalid request"


class StoreFailure(TaskflowError):
    """Persistence failure. The message never contains store internals."""

    status_code = 500
    default_message = "Server error"
