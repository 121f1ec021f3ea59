"""
Exercise entity and category classification.

Maps raw ExerciseDB API records onto the `exercises` table row shape.
Category is derived from the equipment list, never taken from upstream.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from constants import (
    CARDIO_EQUIPMENT,
    CATEGORY_BODYWEIGHT,
    CATEGORY_CARDIO,
    CATEGORY_NAMES,
    CATEGORY_STRENGTH,
    STRENGTH_EQUIPMENT,
    UNKNOWN_CATEGORY_NAME,
)

STEP_PREFIX_RE = re.compile(r"^Step:\d+\s*")

# Columns written on every upsert, in SQL order
EXERCISE_COLS = [
    "external_id", "name", "media_url",
    "target_muscles", "body_parts", "equipment",
    "secondary_muscles", "instructions", "category",
]
LIST_COLS = {"target_muscles", "body_parts", "equipment", "secondary_muscles", "instructions"}


def determine_category(equipment: List[str]) -> int:
    """Classify an exercise by its equipment list.

    The first item matching either keyword set decides; for a single item
    the cardio set is checked before the strength set.  No match at all
    means bodyweight.
    """
    for item in equipment or []:
        key = str(item).lower()
        if key in CARDIO_EQUIPMENT:
            return CATEGORY_CARDIO
        if key in STRENGTH_EQUIPMENT:
            return CATEGORY_STRENGTH
    return CATEGORY_BODYWEIGHT


def name_for_category(category: Optional[int]) -> str:
    return CATEGORY_NAMES.get(category, UNKNOWN_CATEGORY_NAME)


@dataclass
class ExerciseRecord:
    external_id: str
    name: str
    media_url: str
    target_muscles: List[str] = field(default_factory=list)
    body_parts: List[str] = field(default_factory=list)
    equipment: List[str] = field(default_factory=list)
    secondary_muscles: List[str] = field(default_factory=list)
    instructions: List[str] = field(default_factory=list)
    category: int = CATEGORY_STRENGTH
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_api(cls, raw: Dict[str, Any]) -> "ExerciseRecord":
        """Build a record from one element of the API `data` array.

        Raises KeyError when `exerciseId` is missing and ValueError when it
        is null or blank.
        """
        external_id = raw["exerciseId"]
        if external_id is None or not str(external_id).strip():
            raise ValueError(f"Exercise {raw.get('name')!r} has no exerciseId")
        equipment = list(raw.get("equipments") or [])
        return cls(
            external_id=str(external_id),
            name=raw.get("name") or "",
            media_url=raw.get("gifUrl") or "",
            target_muscles=list(raw.get("targetMuscles") or []),
            body_parts=list(raw.get("bodyParts") or []),
            equipment=equipment,
            secondary_muscles=list(raw.get("secondaryMuscles") or []),
            instructions=list(raw.get("instructions") or []),
            category=determine_category(equipment),
        )

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "ExerciseRecord":
        """Build a record from a RealDictCursor row."""
        return cls(
            external_id=row["external_id"],
            name=row["name"],
            media_url=row["media_url"],
            target_muscles=list(row.get("target_muscles") or []),
            body_parts=list(row.get("body_parts") or []),
            equipment=list(row.get("equipment") or []),
            secondary_muscles=list(row.get("secondary_muscles") or []),
            instructions=list(row.get("instructions") or []),
            category=row.get("category"),
            created_at=row.get("created_at"),
            updated_at=row.get("updated_at"),
        )

    @property
    def category_name(self) -> str:
        return name_for_category(self.category)

    def formatted_instructions(self) -> List[str]:
        """Instructions with any leading `Step:N` marker removed."""
        return [STEP_PREFIX_RE.sub("", step) for step in self.instructions]

    def column_values(self) -> Dict[str, Any]:
        return {col: getattr(self, col) for col in EXERCISE_COLS}
