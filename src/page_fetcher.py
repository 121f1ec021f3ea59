"""
ExerciseDB page fetcher with rate-limit backoff.

One category key is fetched as a sequence of pages:
  1. GET {base}/muscles/{key}/exercises
  2. follow metadata.nextPage until it is absent or totalPages is reached

Failure handling:
  • 429                  →  exponential backoff, retry the same page
  • transport / bad body →  same backoff, same budget
  • any other non-2xx    →  category skipped (empty result)
  • budget spent         →  RetryExhausted, fatal to the run

The retry budget belongs to the category, not to a page: a 429 on page 1
and another on page 4 both count toward the same max_retries.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

import requests
from tenacity import RetryCallState, RetryError, Retrying, retry_if_exception_type

from config import (
    DEFAULT_RETRY_DELAY,
    EXERCISEDB_BASE_URL,
    MAX_RETRIES,
    PAGE_DELAY_SECONDS,
    REQUEST_TIMEOUT,
)

log = logging.getLogger("page_fetcher")


class FetchError(RuntimeError):
    """Base class for category fetch failures."""


class RateLimited(FetchError):
    """Upstream answered 429."""


class TransientFetchFailure(FetchError):
    """Network error or unparseable response body."""


class NonRetryableFetchFailure(FetchError):
    """Non-2xx status other than 429; the category is skipped."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class RetryExhausted(FetchError):
    """Retry budget for a category was spent; the import must stop."""

    def __init__(self, category: str, attempts: int):
        super().__init__(f"Giving up on '{category}' after {attempts} failed attempts")
        self.category = category
        self.attempts = attempts


def backoff_delay(attempt: int, base_delay: float) -> float:
    """Delay before the n-th retry (n starts at 1): base, 2*base, 4*base, ..."""
    if attempt < 1:
        raise ValueError("attempt starts at 1")
    return base_delay * 2 ** (attempt - 1)


@dataclass
class _RetryBudget:
    category: str
    max_retries: int
    used: int = 0

    def spend(self) -> int:
        self.used += 1
        return self.used

    @property
    def exhausted(self) -> bool:
        return self.used >= self.max_retries


class PageFetcher:
    """Fetches every page of one category from the ExerciseDB API."""

    def __init__(
        self,
        base_url: str = EXERCISEDB_BASE_URL,
        session: Optional[requests.Session] = None,
        base_delay: float = DEFAULT_RETRY_DELAY,
        max_retries: int = MAX_RETRIES,
        page_delay: float = PAGE_DELAY_SECONDS,
        timeout: int = REQUEST_TIMEOUT,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.base_delay = base_delay
        self.max_retries = max_retries
        self.page_delay = page_delay
        self.timeout = timeout
        self._sleep = sleep

    def category_url(self, category_key: str) -> str:
        return f"{self.base_url}/muscles/{category_key}/exercises"

    def fetch_category(self, category_key: str) -> List[Dict[str, Any]]:
        """Return all raw records for a category, in page order.

        Returns [] when upstream answers a non-retryable status.  Raises
        RetryExhausted once the category's retry budget is spent.
        """
        budget = _RetryBudget(category=category_key, max_retries=self.max_retries)

        try:
            payload = self._get_page(self.category_url(category_key), budget)
        except NonRetryableFetchFailure as e:
            log.error("Failed to fetch exercises for %s: %s", category_key, e)
            return []

        records = list(payload["data"])
        metadata = payload["metadata"]
        total_pages = int(metadata.get("totalPages") or 1)
        log.info(
            "Found %s %s exercises across %d pages",
            metadata.get("totalExercises", len(records)),
            category_key,
            total_pages,
        )

        next_page = metadata.get("nextPage")
        current_page = 1
        while next_page and current_page < total_pages:
            # Upstream rate limit is global; stay under it between pages.
            self._sleep(self.page_delay)
            try:
                payload = self._get_page(next_page, budget)
            except NonRetryableFetchFailure as e:
                log.error("Failed to fetch page %d for %s: %s", current_page + 1, category_key, e)
                return []
            records.extend(payload["data"])
            next_page = payload["metadata"].get("nextPage")
            current_page += 1
            log.info("  Page %d/%d for %s (%d records so far)", current_page, total_pages, category_key, len(records))

        return records

    # ─── Single page with retries ─────────────────────────────

    def _get_page(self, url: str, budget: _RetryBudget) -> Dict[str, Any]:
        # stop/wait read the category budget, so every page shares one allowance
        retryer = Retrying(
            stop=lambda _state: budget.exhausted,
            wait=lambda _state: backoff_delay(budget.used, self.base_delay),
            retry=retry_if_exception_type((RateLimited, TransientFetchFailure)),
            before_sleep=lambda state: self._log_retry(budget, state),
            sleep=self._sleep,
        )
        try:
            return retryer(self._request_page, url, budget)
        except RetryError as e:
            raise RetryExhausted(budget.category, budget.used) from e.last_attempt.exception()

    def _request_page(self, url: str, budget: _RetryBudget) -> Dict[str, Any]:
        try:
            response = self.session.get(url, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            budget.spend()
            raise TransientFetchFailure(f"Request error for {url}: {e}") from e

        if response.status_code == 429:
            self._on_rate_limited(budget)

        if not response.ok:
            raise NonRetryableFetchFailure(
                f"HTTP {response.status_code} for {url}", status_code=response.status_code
            )

        try:
            return self._parse(response)
        except TransientFetchFailure:
            budget.spend()
            raise

    @staticmethod
    def _parse(response: requests.Response) -> Dict[str, Any]:
        try:
            payload = response.json()
        except ValueError as e:
            raise TransientFetchFailure(f"Malformed JSON body: {e}") from e
        if not isinstance(payload, dict):
            raise TransientFetchFailure("Response body is not an object")
        if not isinstance(payload.get("data"), list) or not isinstance(payload.get("metadata"), dict):
            raise TransientFetchFailure("Response body lacks data/metadata")
        return payload

    def _on_rate_limited(self, budget: _RetryBudget) -> None:
        """Count a 429; the last one still waits its full backoff before giving up."""
        budget.spend()
        error = RateLimited(f"HTTP 429 for '{budget.category}'")
        if not budget.exhausted:
            raise error
        wait = backoff_delay(budget.used, self.base_delay)
        log.warning(
            "Rate limit hit, waiting %s seconds before giving up on %s (%d/%d)...",
            wait, budget.category, budget.used, budget.max_retries,
        )
        self._sleep(wait)
        raise RetryExhausted(budget.category, budget.used) from error

    @staticmethod
    def _log_retry(budget: _RetryBudget, retry_state: RetryCallState) -> None:
        error = retry_state.outcome.exception()
        prefix = "Rate limit hit" if isinstance(error, RateLimited) else str(error)
        log.warning(
            "%s, waiting %s seconds before retry %d/%d...",
            prefix, retry_state.next_action.sleep, budget.used, budget.max_retries,
        )
