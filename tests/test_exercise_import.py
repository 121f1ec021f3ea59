"""Tests for the exercises-import command line entry point."""
from unittest.mock import MagicMock, patch

import pytest

import exercise_import
from category_walker import CategoryWalker
from cursor_store import RedisCursorStore
from pipeline.import_pipeline import ExerciseImportPipeline


class TestParseArgs:

    def test_defaults(self):
        args = exercise_import.parse_args([])
        assert args.limit == 2000
        assert args.resume is False
        assert args.retry_delay == 60

    def test_options(self):
        args = exercise_import.parse_args(["--limit", "50", "--resume", "--retry-delay", "5"])
        assert (args.limit, args.resume, args.retry_delay) == (50, True, 5)

    def test_limit_help_describes_per_muscle_counting(self, capsys):
        with pytest.raises(SystemExit):
            exercise_import.parse_args(["--help"])
        help_text = " ".join(capsys.readouterr().out.split())
        assert "records fetched" in help_text
        assert "counts once per muscle" in help_text

    def test_negative_limit_rejected(self):
        with pytest.raises(SystemExit):
            exercise_import.parse_args(["--limit", "-1"])


class TestMain:

    def test_success_exits_zero(self):
        pipeline = MagicMock()
        pipeline.run.return_value = True
        with patch("exercise_import.build_pipeline", return_value=pipeline) as mock_build, \
                patch("exercise_import.requests.Session") as mock_session_cls:
            assert exercise_import.main(["--resume", "--retry-delay", "7"]) == 0

        session = mock_session_cls.return_value.__enter__.return_value
        mock_build.assert_called_once_with(
            base_url=exercise_import.EXERCISEDB_BASE_URL, retry_delay=7, session=session
        )
        pipeline.run.assert_called_once_with(resume=True, limit=2000)

    def test_failure_exits_one(self):
        pipeline = MagicMock()
        pipeline.run.return_value = False
        with patch("exercise_import.build_pipeline", return_value=pipeline):
            assert exercise_import.main([]) == 1

    def test_zero_limit_means_unbounded(self):
        pipeline = MagicMock()
        pipeline.run.return_value = True
        with patch("exercise_import.build_pipeline", return_value=pipeline):
            exercise_import.main(["--limit", "0"])
        pipeline.run.assert_called_once_with(resume=False, limit=None)

    def test_http_session_closed_after_run(self):
        pipeline = MagicMock()
        pipeline.run.return_value = False
        with patch("exercise_import.build_pipeline", return_value=pipeline), \
                patch("exercise_import.requests.Session") as mock_session_cls:
            exercise_import.main([])

        mock_session_cls.return_value.__exit__.assert_called_once()

    def test_http_session_closed_when_startup_fails(self):
        with patch("exercise_import.build_pipeline", side_effect=RuntimeError("no database")), \
                patch("exercise_import.requests.Session") as mock_session_cls:
            assert exercise_import.main([]) == 1

        mock_session_cls.return_value.__exit__.assert_called_once()

    def test_startup_error_exits_one(self):
        with patch("exercise_import.build_pipeline", side_effect=RuntimeError("no database")):
            assert exercise_import.main([]) == 1


class TestBuildPipeline:

    def test_requires_connection_string(self):
        with patch("exercise_import.get_conn_str", return_value=""):
            with pytest.raises(RuntimeError):
                exercise_import.build_pipeline()

    def test_wires_components(self):
        with patch("exercise_import.get_conn_str", return_value="postgresql://fake"), \
                patch("exercise_import.RedisCursorStore.from_url") as mock_store:
            mock_store.return_value = MagicMock(spec=RedisCursorStore)
            pipeline = exercise_import.build_pipeline(retry_delay=3)

        assert isinstance(pipeline, ExerciseImportPipeline)
        assert isinstance(pipeline.walker, CategoryWalker)
        assert pipeline.walker.fetcher.base_delay == 3
        assert pipeline.conn_str == "postgresql://fake"
        assert len(pipeline.categories) == 19

    def test_uses_given_session(self):
        session = MagicMock()
        with patch("exercise_import.get_conn_str", return_value="postgresql://fake"), \
                patch("exercise_import.RedisCursorStore.from_url"):
            pipeline = exercise_import.build_pipeline(session=session)

        assert pipeline.walker.fetcher.session is session
