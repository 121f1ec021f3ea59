"""
PostgreSQL persistence for exercises.

Writes go through `transaction()` so a caller can group many upserts into
one unit of work.  Reads open their own short-lived connection.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Iterator, List, Optional, Tuple

from psycopg2.extras import Json, RealDictCursor

from constants import BEGINNER_EQUIPMENT
from db_utils import connect, get_conn_str
from exercise_model import EXERCISE_COLS, LIST_COLS, ExerciseRecord

log = logging.getLogger("exercise_repository")

SELECT_COLS = ", ".join(EXERCISE_COLS + ["created_at", "updated_at"])

_update_str = ",\n        ".join(
    f"{c} = EXCLUDED.{c}" for c in EXERCISE_COLS if c != "external_id"
)
UPSERT_SQL = f"""
    INSERT INTO exercises ({", ".join(EXERCISE_COLS)})
    VALUES ({", ".join(["%s"] * len(EXERCISE_COLS))})
    ON CONFLICT (external_id) DO UPDATE SET
        {_update_str},
        updated_at = NOW()
"""


class ExerciseRepository:
    """Upserts and queries over the `exercises` table."""

    def __init__(self, conn_str: str | None = None):
        self.conn_str = conn_str or get_conn_str()

    # ─── Writes ───────────────────────────────────────────────

    @contextmanager
    def transaction(self) -> Iterator[Any]:
        """Yield a cursor; commit on success, roll back and re-raise on error."""
        conn = connect(self.conn_str)
        cur = conn.cursor()
        try:
            yield cur
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            cur.close()
            conn.close()

    def upsert(self, cur, record: ExerciseRecord) -> None:
        cur.execute(UPSERT_SQL, self._params(record))

    @staticmethod
    def _params(record: ExerciseRecord) -> Tuple[Any, ...]:
        values = record.column_values()
        return tuple(
            Json(values[col]) if col in LIST_COLS else values[col]
            for col in EXERCISE_COLS
        )

    # ─── Reads ────────────────────────────────────────────────

    def _select(self, where: str = "", params: Tuple[Any, ...] = ()) -> List[ExerciseRecord]:
        conn = connect(self.conn_str)
        try:
            with conn.cursor(cursor_factory=RealDictCursor) as cur:
                cur.execute(
                    f"SELECT {SELECT_COLS} FROM exercises {where} ORDER BY external_id",
                    params,
                )
                rows = cur.fetchall()
        finally:
            conn.close()
        return [ExerciseRecord.from_row(r) for r in rows]

    def fetch_all(self) -> List[ExerciseRecord]:
        return self._select()

    def find(self, external_id: str) -> Optional[ExerciseRecord]:
        rows = self._select("WHERE external_id = %s", (external_id,))
        return rows[0] if rows else None

    def count(self) -> int:
        conn = connect(self.conn_str)
        try:
            with conn.cursor() as cur:
                cur.execute("SELECT COUNT(*) FROM exercises")
                return int(cur.fetchone()[0])
        finally:
            conn.close()

    def by_muscle(self, muscle: str) -> List[ExerciseRecord]:
        return self._select("WHERE target_muscles @> %s::jsonb", (Json([muscle]),))

    def by_equipment(self, equipment: str) -> List[ExerciseRecord]:
        return self._select("WHERE equipment @> %s::jsonb", (Json([equipment]),))

    def compound_exercises(self, min_muscles: int = 2) -> List[ExerciseRecord]:
        """Exercises listing at least `min_muscles` target muscles."""
        return self._select("WHERE jsonb_array_length(target_muscles) >= %s", (min_muscles,))

    def for_beginners(self) -> List[ExerciseRecord]:
        """Exercises needing no equipment or only basic equipment."""
        clause = " OR ".join(["equipment @> %s::jsonb"] * len(BEGINNER_EQUIPMENT))
        return self._select(f"WHERE {clause}", tuple(Json([e]) for e in BEGINNER_EQUIPMENT))
