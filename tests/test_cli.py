"""
Tests for the command line entry point.
"""

import json
import logging
import sys
from unittest.mock import AsyncMock, patch

import pytest

from self_updater import cli
from self_updater.core.exceptions import ExitCode


@pytest.fixture
def config_file(temp_directory, monkeypatch):
    path = temp_directory / "updater.json"
    path.write_text(json.dumps({
        "logging": {"file_path": str(temp_directory / "update.log"), "log_to_console": False},
        "launch": {"wait_for_acknowledgment": False, "idle_seconds": 0},
    }), encoding="utf-8")
    monkeypatch.setenv("SELF_UPDATER_CONFIG", str(path))
    return path


@pytest.fixture
def restore_hooks():
    hook = sys.excepthook
    level = logging.getLogger().level
    yield
    sys.excepthook = hook
    logging.getLogger().setLevel(level)


@pytest.mark.usefixtures("restore_hooks")
class TestMain:

    def test_returns_app_exit_code_and_closes_log(self, config_file, temp_directory):
        with patch("self_updater.cli.UpdaterApp.run",
                   AsyncMock(return_value=ExitCode.FILE_PATH_INVALID)) as run:
            assert cli.main(["missing.zip", "C:/App"]) == ExitCode.FILE_PATH_INVALID

        run.assert_awaited_once_with(["missing.zip", "C:/App"])
        assert (temp_directory / "update.log").exists()
        assert not any(isinstance(h, logging.FileHandler) for h in logging.getLogger().handlers)

    def test_invalid_config_disables_update_check(self, config_file, temp_directory):
        data = json.loads(config_file.read_text(encoding="utf-8"))
        data["updates"] = {"manifest_url": "not a url"}
        config_file.write_text(json.dumps(data), encoding="utf-8")

        captured = {}

        async def fake_run(self, argv):
            captured["check"] = self.config.updates.check_on_startup
            return ExitCode.OK

        with patch("self_updater.cli.UpdaterApp.run", fake_run):
            assert cli.main([]) == ExitCode.OK
        assert captured["check"] is False

    def test_last_resort_handler_logs(self, temp_directory):
        cli.install_last_resort_handler(wait=False)
        log_file = temp_directory / "last_resort.log"
        handler = logging.FileHandler(log_file, encoding="utf-8")
        logging.getLogger().addHandler(handler)
        try:
            sys.excepthook(RuntimeError, RuntimeError("escaped"), None)
        finally:
            logging.getLogger().removeHandler(handler)
            handler.close()

        assert "Unhandled exception: escaped" in log_file.read_text(encoding="utf-8")

    def test_config_outcome_reaches_log_file(self, config_file, temp_directory):
        data = json.loads(config_file.read_text(encoding="utf-8"))
        data["staging"] = {"grace_period_seconds": "10", "package_name": 5}
        config_file.write_text(json.dumps(data), encoding="utf-8")

        with patch("self_updater.cli.UpdaterApp.run", AsyncMock(return_value=ExitCode.OK)):
            assert cli.main([]) == ExitCode.OK

        log = (temp_directory / "update.log").read_text(encoding="utf-8")
        assert f"Config loaded from {config_file}" in log
        assert "Ignoring StagingConfig.package_name=5" in log

    def test_escaped_error_is_logged_and_mapped(self, config_file, temp_directory):
        with patch("self_updater.cli.UpdaterApp.run",
                   AsyncMock(side_effect=TypeError("'<' not supported"))):
            assert cli.main(["a", "b"]) == ExitCode.UNEXPECTED

        log = (temp_directory / "update.log").read_text(encoding="utf-8")
        assert "Unhandled exception: '<' not supported" in log
        assert "Traceback" in log
        assert not any(isinstance(h, logging.FileHandler) for h in logging.getLogger().handlers)

    def test_escaped_error_waits_for_acknowledgment(self, config_file, monkeypatch):
        data = json.loads(config_file.read_text(encoding="utf-8"))
        data["launch"]["wait_for_acknowledgment"] = True
        config_file.write_text(json.dumps(data), encoding="utf-8")
        prompts = []
        monkeypatch.setattr("builtins.input", lambda *args: prompts.append(args))

        with patch("self_updater.cli.UpdaterApp.run", AsyncMock(side_effect=RuntimeError("boom"))):
            assert cli.main([]) == ExitCode.UNEXPECTED

        assert len(prompts) == 1
