# -*- coding: utf-8 -*-

"""
Configuration for TaskFlow.

Values are read once at import time from the environment. A local .env file
is loaded first (existing environment variables win).
"""

import os
from typing import List

from dotenv import load_dotenv

load_dotenv(override=False)


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_list(name: str, default: List[str]) -> List[str]:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return list(default)
    return [part.strip() for part in raw.split(",") if part.strip()]


# ==================================================================================================
# Application
# ==================================================================================================

APP_TITLE = "TaskFlow"
APP_VERSION = "1.0.0"
APP_ENV = os.getenv("TASKFLOW_ENV", "development")

# ==================================================================================================
# Server
# ==================================================================================================

SERVER_HOST = os.getenv("TASKFLOW_HOST", "0.0.0.0")
SERVER_PORT = _env_int("TASKFLOW_PORT", 5000)
CORS_ORIGINS = _env_list("TASKFLOW_CORS_ORIGINS", ["*"])

# ==================================================================================================
# Logging
# ==================================================================================================

LOG_LEVEL = os.getenv("TASKFLOW_LOG_LEVEL", "INFO").upper()

# ==================================================================================================
# Storage
# ==================================================================================================

# Empty means the task store lives in memory only.
TASKS_STORAGE_PATH = os.getenv("TASKFLOW_TASKS_PATH", "")
APIKEYS_STORAGE_PATH = os.getenv("TASKFLOW_APIKEYS_PATH", "apikeys.json")

# ==================================================================================================
# Identity
# ==================================================================================================

# Optional key seeded into the key manager at startup, owned by SEED_API_KEY_USER.
SEED_API_KEY = os.getenv("TASKFLOW_API_KEY", "")
SEED_API_KEY_USER = os.getenv("TASKFLOW_API_KEY_USER", "default")

# ==================================================================================================
# Query / statistics
# ==================================================================================================

DEFAULT_PAGE_SIZE = _env_int("TASKFLOW_DEFAULT_PAGE_SIZE", 10)
MAX_PAGE_SIZE = _env_int("TASKFLOW_MAX_PAGE_SIZE", 100)
UPCOMING_DAYS = _env_int("TASKFLOW_UPCOMING_DAYS", 7)
