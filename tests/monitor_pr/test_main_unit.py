"""Unit tests for the monitor-pr command line entry point."""

import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from src.monitor_pr import main as cli
from src.monitor_pr.config import MonitorSettings
from src.monitor_pr.session import StartupError


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("OWNER", "REPO", "MAX_DEPTH", "WEBHOOK_SECRET", "LOG_LEVEL"):
        monkeypatch.delenv(f"MONITOR_PR_{name}", raising=False)


class TestParseRepo:
    def test_owner_and_repo(self):
        assert cli.parse_repo("acme/widgets") == ("acme", "widgets")

    @pytest.mark.parametrize("value", ["acme", "acme/", "/widgets", "a/b/c", ""])
    def test_malformed_rejected(self, value):
        with pytest.raises(ValueError):
            cli.parse_repo(value)


class TestParsePrNumber:
    def test_positive_number(self):
        assert cli.parse_pr_number("42") == 42

    @pytest.mark.parametrize("value", ["0", "-3", "abc", "4.2", ""])
    def test_invalid_rejected(self, value):
        with pytest.raises(ValueError, match="Invalid PR number"):
            cli.parse_pr_number(value)


class TestRedactSecret:
    def test_unset_secret(self):
        assert cli._redact_secret(None) == "(generated)"

    def test_secret_partially_hidden(self):
        assert cli._redact_secret("abcdefgh") == "abcd****"

    def test_short_secret_fully_hidden(self):
        assert cli._redact_secret("abc") == "***"


class TestMain:
    def test_missing_pr_number_exits_with_usage_error(self):
        with pytest.raises(SystemExit) as exc_info:
            cli.main([])

        assert exc_info.value.code == 2

    def test_invalid_pr_number_returns_1(self):
        with patch.object(cli, "run_monitor") as run_monitor:
            assert cli.main(["abc"]) == 1

        run_monitor.assert_not_called()

    def test_malformed_repo_returns_1(self):
        with patch.object(cli, "run_monitor") as run_monitor:
            assert cli.main(["42", "--repo", "not-a-repo"]) == 1

        run_monitor.assert_not_called()

    def test_negative_max_depth_returns_1(self):
        with patch.object(cli, "run_monitor") as run_monitor:
            assert cli.main(["42", "--max-depth", "-1"]) == 1

        run_monitor.assert_not_called()

    def test_defaults_passed_to_run_monitor(self):
        run_monitor = AsyncMock(return_value=0)
        with patch.object(cli, "run_monitor", run_monitor):
            assert cli.main(["42"]) == 0

        owner, repo, pr_number, max_depth, settings = run_monitor.call_args.args
        assert (owner, repo, pr_number, max_depth) == ("ambient-labs", "vst", 42, 3)
        assert isinstance(settings, MonitorSettings)

    def test_repo_and_depth_overrides(self):
        run_monitor = AsyncMock(return_value=0)
        with patch.object(cli, "run_monitor", run_monitor):
            cli.main(["7", "--repo", "acme/widgets", "--max-depth", "0"])

        assert run_monitor.call_args.args[:4] == ("acme", "widgets", 7, 0)

    def test_invalid_environment_returns_1(self, monkeypatch):
        monkeypatch.setenv("MONITOR_PR_MAX_DEPTH", "-4")

        assert cli.main(["42"]) == 1

    def test_keyboard_interrupt_returns_130(self):
        run_monitor = AsyncMock(side_effect=KeyboardInterrupt)
        with patch.object(cli, "run_monitor", run_monitor):
            assert cli.main(["42"]) == 130


class TestRunMonitor:
    def test_startup_failure_returns_1_and_shuts_down(self):
        session = MagicMock()
        session.start = AsyncMock(side_effect=StartupError("Failed to fetch PR: 404"))
        session.shutdown = AsyncMock()

        with patch.object(cli, "MonitorSession", return_value=session):
            code = asyncio.run(
                cli.run_monitor("acme", "widgets", 42, 3, MonitorSettings())
            )

        assert code == 1
        session.shutdown.assert_awaited_once()

    def test_returns_0_after_shutdown(self):
        session = MagicMock()
        session.start = AsyncMock(return_value=50000)
        session.wait_closed = AsyncMock()

        with patch.object(cli, "MonitorSession", return_value=session) as factory:
            code = asyncio.run(
                cli.run_monitor("acme", "widgets", 42, 2, MonitorSettings())
            )

        assert code == 0
        session.wait_closed.assert_awaited_once()
        kwargs = factory.call_args.kwargs
        assert kwargs["pr_number"] == 42
        assert kwargs["max_depth"] == 2
        assert kwargs["secret"] is None

    def test_failed_shutdown_returns_1(self):
        session = MagicMock()
        session.start = AsyncMock(return_value=50000)
        session.wait_closed = AsyncMock(side_effect=RuntimeError("stop failed"))

        with patch.object(cli, "MonitorSession", return_value=session):
            code = asyncio.run(
                cli.run_monitor("acme", "widgets", 42, 3, MonitorSettings())
            )

        assert code == 1
