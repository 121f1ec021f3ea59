"""Transactional batch upsert of one category's exercises."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Sequence, Union

from config import BATCH_CHUNK_SIZE
from exercise_model import ExerciseRecord

log = logging.getLogger("record_upserter")


class PersistenceFailure(RuntimeError):
    """A category batch could not be written and was rolled back."""


@dataclass(frozen=True)
class Committed:
    count: int


@dataclass(frozen=True)
class Failed:
    error: PersistenceFailure


BatchResult = Union[Committed, Failed]


def chunked(items: Sequence[Any], size: int) -> List[Sequence[Any]]:
    return [items[i:i + size] for i in range(0, len(items), size)]


class RecordUpserter:
    """Writes a category batch as a single unit of work.

    Chunks only drive progress logging; the transaction always spans the
    whole batch, so a failure in any chunk leaves nothing behind.
    """

    def __init__(self, repository, chunk_size: int = BATCH_CHUNK_SIZE):
        if chunk_size < 1:
            raise ValueError("chunk_size must be positive")
        self.repository = repository
        self.chunk_size = chunk_size

    def save_batch(self, category_key: str, records: Sequence[Dict[str, Any]]) -> BatchResult:
        chunks = chunked(list(records), self.chunk_size)
        log.info("Saving %d %s exercises in %d chunks...", len(records), category_key, len(chunks))
        try:
            with self.repository.transaction() as cur:
                for i, chunk in enumerate(chunks, start=1):
                    for raw in chunk:
                        self.repository.upsert(cur, ExerciseRecord.from_api(raw))
                    log.info("  Chunk %d/%d for %s written", i, len(chunks), category_key)
        except Exception as e:
            log.error("Rolled back %s batch: %s", category_key, e)
            failure = PersistenceFailure(f"Could not save {category_key} exercises: {e}")
            failure.__cause__ = e
            return Failed(failure)
        return Committed(len(records))
