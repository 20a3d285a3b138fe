"""
Tests for logger functionality.
"""

import pytest
from jobly.logger import StructuredLogger, get_logger, reset_logger


class TestStructuredLogger:
    """Test structured logging functionality."""

    def test_logger_creation(self, tmp_path):
        """Logger should be created with default settings."""
        logger = StructuredLogger(
            name="test",
            level="INFO",
            log_dir=tmp_path,
            enable_console=False,
        )

        assert logger.logger.name == "test"
        assert logger.metrics["statements_executed"] == 0

    def test_log_methods(self, tmp_path):
        """All log level methods should work."""
        logger = StructuredLogger(
            name="test",
            log_dir=tmp_path,
            enable_console=False,
        )

        # Should not raise exceptions
        logger.debug("Debug message")
        logger.info("Info message")
        logger.warning("Warning message")
        logger.error("Error message")
        logger.critical("Critical message")

    def test_log_with_context(self, tmp_path):
        """Context is appended as JSON."""
        logger = StructuredLogger(
            name="test",
            log_dir=tmp_path,
            enable_console=False,
        )

        logger.info("Company created", handle="c1", count=5)

        log_content = next(tmp_path.glob("*.log")).read_text()
        assert 'Company created | Context: {"handle": "c1", "count": 5}' in log_content

    def test_metrics_tracking(self, tmp_path):
        """Metrics should be tracked correctly."""
        logger = StructuredLogger(
            name="test",
            log_dir=tmp_path,
            enable_console=False,
        )

        for _ in range(4):
            logger.record_statement()
        logger.record_statement_failure("IntegrityError")
        logger.record_api_error("not_found")
        logger.record_api_error("not_found")

        metrics = logger.get_metrics()

        assert metrics["statements_executed"] == 4
        assert metrics["statements_failed"] == 1
        assert metrics["errors_by_type"]["IntegrityError"] == 1
        assert metrics["api_errors_by_kind"]["not_found"] == 2
        assert metrics["failure_rate"] == pytest.approx(0.25)

    def test_no_failure_rate_without_statements(self, tmp_path):
        logger = StructuredLogger(name="test", log_dir=tmp_path, enable_console=False)
        assert "failure_rate" not in logger.get_metrics()

    def test_metrics_summary(self, tmp_path):
        logger = StructuredLogger(name="test", log_dir=tmp_path, enable_console=False)
        logger.record_statement()
        logger.record_statement_failure("OperationalError")

        logger.log_metrics_summary()

        log_content = next(tmp_path.glob("*.log")).read_text()
        assert "Statements: 1 executed, 1 failed (100.0%)" in log_content
        assert "OperationalError: 1" in log_content

    def test_log_file_creation(self, tmp_path):
        """Log file should be created in specified directory."""
        logger = StructuredLogger(
            name="test",
            log_dir=tmp_path,
            enable_console=False,
        )

        logger.info("Test message")

        # Check that a log file was created
        log_files = list(tmp_path.glob("*.log"))
        assert len(log_files) == 1

        # Check that message was written
        log_content = log_files[0].read_text()
        assert "Test message" in log_content


class TestGlobalLogger:
    """Test global logger singleton."""

    def test_get_logger_singleton(self, tmp_path):
        """get_logger should return same instance."""
        reset_logger()  # Start fresh

        logger1 = get_logger(log_dir=tmp_path, enable_console=False)
        logger2 = get_logger()

        assert logger1 is logger2

    def test_reset_logger(self, tmp_path):
        """reset_logger should create new instance."""
        reset_logger()

        logger1 = get_logger(log_dir=tmp_path, enable_console=False)
        logger1.record_statement()

        reset_logger()

        logger2 = get_logger(log_dir=tmp_path, enable_console=False)

        # Should be different instance with fresh metrics
        assert logger2.metrics["statements_executed"] == 0

    def test_file_output_follows_env(self, tmp_path, monkeypatch):
        """Without a log dir no file handler is attached."""
        monkeypatch.delenv("JOBLY_LOG_DIR", raising=False)
        reset_logger()

        logger = get_logger(enable_console=False)

        assert logger.logger.handlers == []
        reset_logger()

    def test_log_dir_from_env(self, tmp_path, monkeypatch):
        monkeypatch.setenv("JOBLY_LOG_DIR", str(tmp_path / "logs"))
        reset_logger()

        logger = get_logger(enable_console=False)
        logger.info("to file")

        assert list((tmp_path / "logs").glob("jobly_*.log"))
        reset_logger()
