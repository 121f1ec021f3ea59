"""Startup migration helpers for the exercise import."""

from __future__ import annotations

import logging

from dotenv import load_dotenv

from db_utils import connect, get_conn_str

log = logging.getLogger("pipeline.migrations")

EXERCISES_SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS exercises (
    id                SERIAL PRIMARY KEY,
    external_id       TEXT NOT NULL,
    name              TEXT NOT NULL,
    media_url         TEXT NOT NULL DEFAULT '',
    target_muscles    JSONB NOT NULL DEFAULT '[]'::jsonb,
    body_parts        JSONB NOT NULL DEFAULT '[]'::jsonb,
    equipment         JSONB NOT NULL DEFAULT '[]'::jsonb,
    secondary_muscles JSONB NOT NULL DEFAULT '[]'::jsonb,
    instructions      JSONB NOT NULL DEFAULT '[]'::jsonb,
    category          SMALLINT NOT NULL DEFAULT 1,  -- 1 strength, 2 bodyweight, 3 cardio
    created_at        TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    updated_at        TIMESTAMP DEFAULT CURRENT_TIMESTAMP
);

CREATE UNIQUE INDEX IF NOT EXISTS idx_exercises_external_id ON exercises(external_id);

CREATE INDEX IF NOT EXISTS idx_exercises_category ON exercises(category)
"""


def _resolve_conn_str(conn_str: str | None) -> str:
    load_dotenv()
    return (conn_str or get_conn_str()).strip()


def ensure_startup_schema(conn_str: str | None = None) -> None:
    """Run idempotent startup migrations before the import."""
    cs = _resolve_conn_str(conn_str)
    if not cs:
        raise RuntimeError("POSTGRES_CONNECTION_STRING (or DATABASE_URL) is not configured")

    conn = connect(cs)
    conn.autocommit = True
    try:
        with conn.cursor() as cur:
            for statement in EXERCISES_SCHEMA_SQL.split(";"):
                stmt = statement.strip()
                if stmt:
                    cur.execute(stmt)
    finally:
        conn.close()

    log.info("Startup migrations completed.")
