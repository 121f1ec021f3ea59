"""Exercise import pipeline: orchestration and startup migrations."""
