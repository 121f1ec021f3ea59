"""Exercise import orchestration with explicit health signaling."""

from __future__ import annotations

import json
import logging
import os
from datetime import datetime
from typing import Any, Dict, Optional, Sequence

from config import DEFAULT_LIMIT
from constants import MUSCLE_CATEGORIES
from pipeline.migrations import ensure_startup_schema

log = logging.getLogger("exercise_import")


class ExerciseImportPipeline:
    """Imports every category, then reports the catalog distribution."""

    def __init__(
        self,
        walker,
        stats_reporter,
        conn_str: Optional[str] = None,
        categories: Sequence[str] = MUSCLE_CATEGORIES,
        run_migrations: bool = True,
    ):
        self.walker = walker
        self.stats_reporter = stats_reporter
        self.conn_str = conn_str
        self.categories = list(categories)
        self.run_migrations = run_migrations
        self.last_status: Optional[Dict[str, Any]] = None

    def run(self, resume: bool = False, limit: Optional[int] = DEFAULT_LIMIT) -> bool:
        """Execute the import and return True when every step that matters succeeded."""
        import_status: Dict[str, Any] = {
            "run_started_at": datetime.utcnow().isoformat() + "Z",
            "resume": resume,
            "limit": limit,
            "import_ok": False,
            "stats_ok": False,
            "total_imported": 0,
            "error": None,
        }

        log.info("=" * 60)
        log.info("  EXERCISE IMPORT STARTED (%d categories)", len(self.categories))
        log.info("=" * 60)

        try:
            if self.run_migrations:
                log.info("Step 0/2: Running startup migrations...")
                ensure_startup_schema(self.conn_str)

            log.info("Step 1/2: Importing exercises...")
            total = self.walker.run(self.categories, resume=resume, limit=limit)
            import_status["total_imported"] = total
            import_status["import_ok"] = True
            log.info("Import completed successfully! Imported %d total exercises.", total)
        except Exception as e:
            import_status["error"] = f"{type(e).__name__}: {e}"
            log.error("Error importing exercises: %s", e)

        if import_status["import_ok"]:
            log.info("Step 2/2: Reporting distribution...")
            import_status["stats_ok"] = self._report_stats()

        import_status["run_finished_at"] = datetime.utcnow().isoformat() + "Z"
        import_status["overall_status"] = self._overall_status(import_status)
        self._write_import_status_file(import_status)

        log.info("=" * 60)
        log.info("  EXERCISE IMPORT COMPLETE (status=%s)", import_status["overall_status"])
        log.info("=" * 60)
        self.last_status = import_status
        return import_status["import_ok"]

    def _report_stats(self) -> bool:
        """Log distribution stats; failures here never fail the import."""
        try:
            self.stats_reporter.report()
            return True
        except Exception as e:
            log.warning("Statistics report failed (non-fatal): %s", e)
            return False

    @staticmethod
    def _overall_status(status: Dict[str, Any]) -> str:
        if not status.get("import_ok", False):
            return "failed"
        if not status.get("stats_ok", False):
            return "degraded"
        return "success"

    @staticmethod
    def _write_import_status_file(status: Dict[str, Any]) -> None:
        path = os.getenv("IMPORT_STATUS_PATH")
        if not path:
            return
        try:
            with open(path, "w", encoding="utf-8") as fh:
                json.dump(status, fh, indent=2, ensure_ascii=False)
            log.info("Import status written to %s", path)
        except Exception as e:
            log.warning("Failed to write import status file: %s", e)
