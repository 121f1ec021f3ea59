"""Ordered, resumable traversal of the ExerciseDB category keys."""

from __future__ import annotations

import logging
from datetime import timedelta
from typing import List, Optional, Sequence

from config import CURSOR_KEY, CURSOR_TTL_HOURS
from record_upserter import Failed

log = logging.getLogger("category_walker")


class CategoryWalker:
    """Fetches and persists categories one at a time, checkpointing each.

    The cursor always names the last category whose batch committed, so an
    aborted or terminated run can be resumed from the next one.
    """

    def __init__(
        self,
        fetcher,
        upserter,
        cursor_store,
        cursor_key: str = CURSOR_KEY,
        cursor_ttl: timedelta = timedelta(hours=CURSOR_TTL_HOURS),
    ):
        self.fetcher = fetcher
        self.upserter = upserter
        self.cursor_store = cursor_store
        self.cursor_key = cursor_key
        self.cursor_ttl = cursor_ttl

    def remaining_categories(self, categories: Sequence[str], resume: bool) -> List[str]:
        """Categories still to import, honouring the cursor when resuming."""
        categories = list(categories)
        if not resume:
            return categories

        last = self.cursor_store.get(self.cursor_key)
        if not last:
            log.info("No resume cursor found; starting from the beginning.")
            return categories
        if last not in categories:
            log.warning("Cursor '%s' is not a known category; starting from the beginning.", last)
            return categories

        log.info("Resuming from after %s", last)
        return categories[categories.index(last) + 1:]

    def run(self, categories: Sequence[str], resume: bool = False, limit: Optional[int] = None) -> int:
        """Import the remaining categories and return the imported record count.

        Raises RetryExhausted (fetch) or PersistenceFailure (save) and stops at
        the failing category.  A limit stop keeps the cursor for a later resume.
        """
        remaining = self.remaining_categories(categories, resume)
        total = 0

        for i, category in enumerate(remaining, start=1):
            if limit and total >= limit:
                log.warning(
                    "Limit of %d records reached after %d; stopping before %s (resume to continue).",
                    limit, total, category,
                )
                return total

            log.info("[%d/%d] Processing %s...", i, len(remaining), category)
            records = self.fetcher.fetch_category(category)
            if not records:
                log.info("No exercises saved for %s", category)
                continue

            result = self.upserter.save_batch(category, records)
            if isinstance(result, Failed):
                raise result.error

            self.cursor_store.put(self.cursor_key, category, self.cursor_ttl)
            total += result.count

        self.cursor_store.delete(self.cursor_key)
        return total
