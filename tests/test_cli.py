"""Tests for the command-line interface"""
import json
import logging
from logging.handlers import RotatingFileHandler

import pytest

from catalog_governance.cli.main import EXIT_CRITICAL_FINDINGS, EXIT_ERROR, EXIT_SUCCESS, main
from catalog_governance.cli.parser import parse_arguments
from catalog_governance.core.colors import ConsoleColors


@pytest.fixture(autouse=True)
def isolated_cli(monkeypatch, tmp_path):
    """Run from an empty directory with no governance environment"""
    for name in ("GOVERNANCE_DATA_URL", "GOVERNANCE_DATA_DIR", "GOVERNANCE_DATA_VERSION", "LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    previous = ConsoleColors.is_enabled()
    yield
    ConsoleColors.set_enabled(previous)


def _run(*args):
    return main([*args, "--no-log-file", "--no-color"])


class TestParseArguments:
    """Test argument parsing"""

    def test_defaults_are_unset(self):
        """Settings that may come from a file or the environment default to None"""
        args = parse_arguments([])
        assert args.data_base_url is None
        assert args.period is None
        assert args.top_n is None
        assert args.quiet is None
        assert args.fail_on_critical is None
        assert args.log_dir == "logs"

    def test_flags(self):
        args = parse_arguments(
            ["--data-url", "https://x", "--period", "Last 30 Days", "--top-n", "5", "--format", "json", "--log-level", "debug"]
        )
        assert args.data_base_url == "https://x"
        assert args.period == "Last 30 Days"
        assert args.top_n == 5
        assert args.format == "json"
        assert args.log_level == "DEBUG"

    def test_invalid_format_exits(self):
        with pytest.raises(SystemExit):
            parse_arguments(["--format", "pdf"])


class TestMain:
    """Test end-to-end runs of the CLI"""

    def test_console_report(self, data_dir, capsys):
        assert _run("--data-dir", str(data_dir)) == EXIT_SUCCESS
        out = capsys.readouterr().out
        assert "CATALOG GOVERNANCE REPORT" in out
        assert "Ghost Fields Detected" in out

    def test_json_to_stdout(self, data_dir, capsys):
        assert _run("--data-dir", str(data_dir), "--format", "json", "--output", "-") == EXIT_SUCCESS
        data = json.loads(capsys.readouterr().out)
        assert data["period"] == "All Time"
        assert data["ghost_field_count"] == 1
        assert data["dataset_counts"]["unresolved_references"] == 1

    def test_files_written_to_output_dir(self, data_dir, tmp_path, capsys):
        out_dir = tmp_path / "reports"
        assert _run("--data-dir", str(data_dir), "--format", "markdown", "--output-dir", str(out_dir)) == EXIT_SUCCESS
        files = list(out_dir.glob("governance_report_all_time_*.md"))
        assert len(files) == 1
        assert str(files[0]) in capsys.readouterr().out

    @pytest.mark.parametrize("output_format", ["csv", "excel"])
    def test_stdout_rejected_for_file_formats(self, data_dir, tmp_path, capsys, output_format):
        assert _run("--data-dir", str(data_dir), "--format", output_format, "--output", "-") == EXIT_ERROR
        assert "cannot be written to stdout" in capsys.readouterr().err
        assert not (tmp_path / "-").exists()

    def test_list_periods(self, capsys):
        assert _run("--list-periods") == EXIT_SUCCESS
        out = capsys.readouterr().out
        assert "Last 12 Months" in out
        assert "All time" in out

    def test_unknown_period(self, data_dir, capsys):
        assert _run("--data-dir", str(data_dir), "--period", "Yesterday") == EXIT_ERROR
        assert "Unknown activity period 'Yesterday'" in capsys.readouterr().err

    def test_no_source_configured(self, capsys):
        assert _run() == EXIT_ERROR
        assert "No data source configured" in capsys.readouterr().err

    def test_source_from_environment(self, data_dir, monkeypatch):
        monkeypatch.setenv("GOVERNANCE_DATA_DIR", str(data_dir))
        assert _run("--quiet") == EXIT_SUCCESS

    def test_missing_tables(self, tmp_path, capsys):
        empty = tmp_path / "empty"
        empty.mkdir()
        assert _run("--data-dir", str(empty)) == EXIT_ERROR
        assert "Table not found" in capsys.readouterr().err

    def test_fail_on_critical(self, data_dir):
        """Ghost fields in scope produce exit code 2 when requested"""
        assert _run("--data-dir", str(data_dir), "--fail-on-critical", "--quiet") == EXIT_CRITICAL_FINDINGS

    def test_fail_on_critical_clean_period(self, data_dir):
        """No in-scope ghost fields means a clean exit even with the flag"""
        # Fixture activity is from 2024, so the current week is empty
        code = _run("--data-dir", str(data_dir), "--period", "Current Week (Mon-Today)", "--fail-on-critical", "-q")
        assert code == EXIT_SUCCESS

    def test_quiet_suppresses_console_report(self, data_dir, capsys):
        assert _run("--data-dir", str(data_dir), "--quiet") == EXIT_SUCCESS
        assert capsys.readouterr().out == ""

    def test_config_file(self, data_dir, tmp_path, capsys):
        config = tmp_path / "governance.json"
        config.write_text(json.dumps({"data_dir": str(data_dir), "top_n": 1}), encoding="utf-8")
        assert _run("--config", str(config), "--format", "json", "--output", "-") == EXIT_SUCCESS
        assert len(json.loads(capsys.readouterr().out)["top_fields"]) == 1

    def test_config_file_log_rotation(self, data_dir, tmp_path):
        config = tmp_path / "governance.json"
        config.write_text(
            json.dumps({"data_dir": str(data_dir), "log_file_max_bytes": 4096, "log_file_backup_count": 1}),
            encoding="utf-8",
        )
        assert main(["--config", str(config), "--log-dir", str(tmp_path / "logs"), "--no-color", "-q"]) == EXIT_SUCCESS
        (handler,) = [h for h in logging.root.handlers if isinstance(h, RotatingFileHandler)]
        assert handler.maxBytes == 4096
        assert handler.backupCount == 1

    def test_invalid_config_file(self, tmp_path, capsys):
        config = tmp_path / "governance.json"
        config.write_text("{", encoding="utf-8")
        assert _run("--config", str(config)) == EXIT_ERROR
        assert "Invalid JSON" in capsys.readouterr().err
