"""
Shared test configuration.

Adds src/ to sys.path so flat modules (page_fetcher, category_walker, ...)
import with plain `import module_name` and the pipeline package resolves
as `pipeline.*`.

Also provides in-memory stand-ins for the two external stores (Redis
cursor and PostgreSQL exercises table) so pipeline behaviour can be
checked without live services.
"""

import os
import sys
from contextlib import contextmanager
from dataclasses import replace
from unittest.mock import MagicMock

import pytest

_project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
_src_dir = os.path.join(_project_root, "src")

if _src_dir not in sys.path:
    sys.path.insert(0, _src_dir)


class InMemoryCursorStore:
    """CursorStore double that remembers TTLs."""

    def __init__(self, initial=None):
        self.values = dict(initial or {})
        self.ttls = {}

    def get(self, key):
        return self.values.get(key)

    def put(self, key, value, ttl):
        self.values[key] = value
        self.ttls[key] = ttl

    def delete(self, key):
        self.values.pop(key, None)
        self.ttls.pop(key, None)


class InMemoryExerciseRepository:
    """ExerciseRepository double with all-or-nothing transactions.

    `fail_on_upsert=n` makes the n-th upsert call (counted over the
    repository's lifetime) raise.
    """

    def __init__(self, fail_on_upsert=None):
        self.rows = {}
        self.fail_on_upsert = fail_on_upsert
        self.upsert_calls = 0
        self.commits = 0
        self.rollbacks = 0

    @contextmanager
    def transaction(self):
        staged = dict(self.rows)
        try:
            yield staged
        except Exception:
            self.rollbacks += 1
            raise
        self.rows = staged
        self.commits += 1

    def upsert(self, cur, record):
        self.upsert_calls += 1
        if self.fail_on_upsert and self.upsert_calls == self.fail_on_upsert:
            raise RuntimeError("simulated write failure")
        cur[record.external_id] = replace(record)

    def fetch_all(self):
        return [self.rows[k] for k in sorted(self.rows)]

    def count(self):
        return len(self.rows)


def make_raw(exercise_id, name=None, equipments=None, target=None):
    """One element of the API `data` array."""
    return {
        "exerciseId": exercise_id,
        "name": name or f"exercise {exercise_id}",
        "gifUrl": f"https://static.test/{exercise_id}.gif",
        "targetMuscles": target or ["biceps"],
        "bodyParts": ["upper arms"],
        "equipments": equipments if equipments is not None else ["dumbbell"],
        "secondaryMuscles": ["forearms"],
        "instructions": ["Step:1 Stand up straight.", "Step:2 Curl the weight."],
    }


def make_response(status_code=200, payload=None, json_error=None):
    """requests.Response look-alike."""
    resp = MagicMock()
    resp.status_code = status_code
    resp.ok = status_code < 400
    if json_error is not None:
        resp.json.side_effect = json_error
    else:
        resp.json.return_value = payload
    return resp


def make_page(records, total_pages=1, next_page=None, total=None):
    return {
        "data": records,
        "metadata": {
            "totalExercises": total if total is not None else len(records),
            "totalPages": total_pages,
            "nextPage": next_page,
        },
    }


class FakeFetcher:
    """Fetcher double returning canned records per category.

    A value that is an exception instance is raised instead.
    """

    def __init__(self, by_category=None):
        self.by_category = dict(by_category or {})
        self.calls = []

    def fetch_category(self, category_key):
        self.calls.append(category_key)
        value = self.by_category.get(category_key, [])
        if isinstance(value, Exception):
            raise value
        return list(value)


@pytest.fixture
def cursor_store():
    return InMemoryCursorStore()


@pytest.fixture
def repository():
    return InMemoryExerciseRepository()
