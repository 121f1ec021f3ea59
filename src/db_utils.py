"""
Shared database utilities.
Single source of truth for PostgreSQL connection-string resolution.
"""

from __future__ import annotations

import logging
import os

import psycopg2
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

log = logging.getLogger("db_utils")


def get_conn_str() -> str:
    """Return PostgreSQL connection string.

    Checks POSTGRES_CONNECTION_STRING first, falls back to DATABASE_URL
    (Heroku standard).  Normalises postgres:// to postgresql:// for psycopg2.
    """
    url = os.getenv("POSTGRES_CONNECTION_STRING") or os.getenv("DATABASE_URL") or ""
    if url.startswith("postgres://"):
        url = "postgresql://" + url[len("postgres://"):]
    return url


@retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=2, min=2, max=30),
    retry=retry_if_exception_type(psycopg2.OperationalError),
    reraise=True,
)
def connect(conn_str: str | None = None):
    """Open a psycopg2 connection, retrying while the server is unreachable."""
    cs = conn_str or get_conn_str()
    if not cs:
        raise RuntimeError("POSTGRES_CONNECTION_STRING (or DATABASE_URL) is not configured")
    return psycopg2.connect(cs)
