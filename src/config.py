"""Configuration loaded from .env"""

import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv(Path(__file__).parent.parent / ".env")

# ExerciseDB API
EXERCISEDB_BASE_URL = os.getenv("EXERCISEDB_BASE_URL", "https://exercisedb.dev/api/v1").rstrip("/")
REQUEST_TIMEOUT = int(os.getenv("EXERCISEDB_REQUEST_TIMEOUT", "30"))

# Retry / throttling
MAX_RETRIES = int(os.getenv("EXERCISEDB_MAX_RETRIES", "3"))
DEFAULT_RETRY_DELAY = int(os.getenv("EXERCISEDB_RETRY_DELAY", "60"))
PAGE_DELAY_SECONDS = float(os.getenv("EXERCISEDB_PAGE_DELAY", "2"))

# Import
BATCH_CHUNK_SIZE = int(os.getenv("IMPORT_CHUNK_SIZE", "50"))
DEFAULT_LIMIT = int(os.getenv("IMPORT_LIMIT", "2000"))

# Resume cursor (Redis)
REDIS_URL = os.getenv("REDIS_URL", "redis://localhost:6379/0")
CURSOR_KEY = os.getenv("IMPORT_CURSOR_KEY", "last_imported_muscle")
CURSOR_TTL_HOURS = int(os.getenv("IMPORT_CURSOR_TTL_HOURS", "24"))
