"""Post-import distribution statistics (read-only)."""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Iterable, List, Tuple

from exercise_model import ExerciseRecord, name_for_category

log = logging.getLogger("stats_reporter")

Distribution = List[Tuple[str, int]]


def _sorted_counts(counter: Counter) -> Distribution:
    return sorted(counter.items(), key=lambda kv: (-kv[1], kv[0]))


@dataclass
class ImportStats:
    total: int = 0
    by_category: Distribution = field(default_factory=list)
    by_muscle: Distribution = field(default_factory=list)
    by_equipment: Distribution = field(default_factory=list)


def compute_stats(records: Iterable[ExerciseRecord]) -> ImportStats:
    categories: Counter = Counter()
    muscles: Counter = Counter()
    equipment: Counter = Counter()
    total = 0
    for rec in records:
        total += 1
        categories[name_for_category(rec.category)] += 1
        muscles.update(rec.target_muscles)
        equipment.update(rec.equipment)
    return ImportStats(
        total=total,
        by_category=_sorted_counts(categories),
        by_muscle=_sorted_counts(muscles),
        by_equipment=_sorted_counts(equipment),
    )


class StatsReporter:
    def __init__(self, repository):
        self.repository = repository

    def collect(self) -> ImportStats:
        return compute_stats(self.repository.fetch_all())

    def report(self, stats: ImportStats | None = None) -> ImportStats:
        stats = stats or self.collect()
        for title, rows in (
            ("category", stats.by_category),
            ("target muscle", stats.by_muscle),
            ("equipment", stats.by_equipment),
        ):
            log.info("Exercise distribution by %s:", title)
            for name, count in rows:
                log.info("  - %s: %d exercises", name, count)
        return stats
