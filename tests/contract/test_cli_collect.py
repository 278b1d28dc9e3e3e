"""Contract tests for the collect and config CLI commands."""

import json
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from conftest import TOTAL_MEMORY_COMMAND, WMIC_CPU_COMMAND

PROCESSES = [
    ("svchost.exe", 800, "10,240 K"),
    ("notepad.exe", 1234, "10,000 K"),
]


@pytest.fixture(autouse=True)
def _clear_env(monkeypatch):
    for name in (
        "WINPROCMON_LOG_LEVEL",
        "WINPROCMON_LOG_FILE",
        "WINPROCMON_REPORT_INTERVAL",
        "WINPROCMON_FETCHES_PER_INTERVAL",
        "WINPROCMON_CSV_FILE_PATH",
        "WINPROCMON_EXCLUDE_PROCESSES",
    ):
        monkeypatch.delenv(name, raising=False)


class TestCollectCommandContract:
    """Test contract for winprocmon collect."""

    def setup_method(self):
        self.runner = CliRunner()

    def _invoke(self, fake_runner, args):
        from winprocmon.cli.main import cli

        with patch("winprocmon.services.parser.run_command", fake_runner), patch(
            "winprocmon.services.metrics_collector.time.sleep"
        ) as sleep:
            result = self.runner.invoke(cli, args)
        return result, sleep

    def test_collect_command_exists(self):
        from winprocmon.cli.main import cli

        result = self.runner.invoke(cli, ["--help"])
        assert result.exit_code == 0
        assert "collect" in result.output
        assert "config" in result.output

    def test_collect_json_output(self, fake_runner):
        fake_runner.add_cycle(PROCESSES, [("svchost.exe", 800, 0, 0)])
        fake_runner.add_cycle(PROCESSES, [("svchost.exe", 800, 30_000_000, 0)])

        result, sleep = self._invoke(fake_runner, ["collect", "--json"])

        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["cycles"] == 2
        assert data["total_memory_mb"] == 1000
        # default window is (60 // 2) * 1000 ms
        assert data["processes"]["svchost.exe"]["cpu_percent"] == pytest.approx(10.0)
        assert data["processes"]["notepad.exe"]["memory_percent"] == pytest.approx(
            0.9765625
        )
        sleep.assert_called_once_with(30.0)

    def test_collect_metrics_output(self, fake_runner):
        fake_runner.add_cycle(PROCESSES, [])

        result, _ = self._invoke(fake_runner, ["collect", "--cycles", "1", "--metrics"])

        assert result.exit_code == 0, result.output
        lines = result.output.strip().splitlines()
        assert (
            "Custom Metrics|Process Monitor|Windows Processes|Total Memory Size MB=1000"
            in lines
        )
        assert (
            "Custom Metrics|Process Monitor|Windows Processes|"
            "svchost.exe|Memory Utilization in Percent=1"
        ) in lines

    def test_collect_table_output_with_top(self, fake_runner):
        fake_runner.add_cycle(PROCESSES, [])

        result, _ = self._invoke(fake_runner, ["collect", "-n", "1", "--top", "1"])

        assert result.exit_code == 0, result.output
        assert "Windows Processes" in result.output
        assert "notepad.exe" in result.output
        assert "svchost.exe" not in result.output

    def test_collect_failure_exits_nonzero(self, fake_runner):
        fake_runner.add(TOTAL_MEMORY_COMMAND, ["TotalVisibleMemorySize", "", "n/a"])

        result, _ = self._invoke(fake_runner, ["collect", "-n", "1"])

        assert result.exit_code == 1
        assert "Error collecting process metrics" in result.output
        assert TOTAL_MEMORY_COMMAND in result.output

    def test_collect_uses_configured_template(self, fake_runner, tmp_path):
        template = "C:\\monitor\\csv.xsl"
        config_path = tmp_path / "winprocmon.json"
        config_path.write_text(json.dumps({"csv_file_path": template}))
        fake_runner.add_cycle(
            PROCESSES,
            [],
            cpu_command=f'{WMIC_CPU_COMMAND[:-3]}"{template}"',
        )

        result, _ = self._invoke(
            fake_runner, ["--config", str(config_path), "collect", "-n", "1"]
        )

        assert result.exit_code == 0, result.output
        assert fake_runner.calls[-1].endswith(f'/format:"{template}"')


class TestConfigCommandContract:
    """Test contract for winprocmon config."""

    def setup_method(self):
        self.runner = CliRunner()

    def test_config_show_json(self):
        from winprocmon.cli.main import cli

        result = self.runner.invoke(cli, ["config", "show", "--json"])

        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["csv_file_path"] == "csv"
        assert data["fetches_per_interval"] == 2

    def test_config_show_text(self):
        from winprocmon.cli.main import cli

        result = self.runner.invoke(cli, ["config", "show"])

        assert result.exit_code == 0
        assert "Report Interval: 60s" in result.output

    def test_config_init_writes_file(self, tmp_path):
        from winprocmon.cli.main import cli

        target = tmp_path / "winprocmon.json"
        result = self.runner.invoke(cli, ["config", "init", str(target)])

        assert result.exit_code == 0, result.output
        assert json.loads(target.read_text())["report_interval_secs"] == 60

        again = self.runner.invoke(cli, ["config", "init", str(target)])
        assert again.exit_code == 1
        assert "already exists" in again.output

    def test_invalid_config_file_exits(self, tmp_path):
        from winprocmon.cli.main import cli

        config_path = tmp_path / "bad.json"
        config_path.write_text(json.dumps({"fetches_per_interval": 0}))

        result = self.runner.invoke(cli, ["--config", str(config_path), "config", "show"])

        assert result.exit_code == 1
        assert "Error initializing" in result.output

    def test_version(self):
        from winprocmon.cli.main import cli

        result = self.runner.invoke(cli, ["--version"])

        assert result.exit_code == 0
        assert "1.0.0" in result.output
