"""
Tests for log setup and teardown.
"""

import logging

import pytest

from self_updater.utils.logging import (PerformanceLogger, get_log_file_path,
                                        is_logging_configured, setup_logging,
                                        shutdown_logging)


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    level = root.level
    yield
    shutdown_logging()
    root.setLevel(level)


@pytest.mark.usefixtures("restore_root_logger")
class TestSetupLogging:

    def test_appends_timestamped_lines(self, temp_directory):
        log_file = temp_directory / "update.log"
        log_file.write_text("previous session\n", encoding="utf-8")

        setup_logging(log_file=str(log_file), log_to_console=False)
        logging.getLogger("self_updater.test").info("extracting")
        shutdown_logging()

        content = log_file.read_text(encoding="utf-8")
        assert content.startswith("previous session\n")
        assert "========================================" in content
        assert "extracting" in content

    def test_mirrors_to_stdout(self, temp_directory, capsys):
        setup_logging(log_file=str(temp_directory / "update.log"), log_to_console=True)
        logging.getLogger("self_updater.test").info("visible on console")
        assert "visible on console" in capsys.readouterr().out

    def test_shutdown_closes_handlers(self, temp_directory):
        setup_logging(log_file=str(temp_directory / "update.log"), log_to_console=False)
        assert is_logging_configured()
        assert get_log_file_path() == str(temp_directory / "update.log")

        shutdown_logging()

        assert not is_logging_configured()
        assert get_log_file_path() is None


class TestPerformanceLogger:

    def test_time_block(self, caplog):
        perf = PerformanceLogger(logging.getLogger("self_updater.perf"))
        with caplog.at_level("INFO"), perf.time_block("extract"):
            pass
        assert perf.get_last_duration("extract") is not None
        assert "'extract' finished" in caplog.text

    def test_stop_without_start(self):
        assert PerformanceLogger().stop("never") == -1.0
