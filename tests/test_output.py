"""Tests for report writers"""
import json
import zipfile
from pathlib import Path

import pandas as pd
import pytest

from catalog_governance.core.colors import ConsoleColors
from catalog_governance.core.exceptions import OutputError
from catalog_governance.data.models import Asset
from catalog_governance.output import FILE_WRITERS, report_frames, write_report
from catalog_governance.output.console import write_report_console
from catalog_governance.output.frames import REPORT_TABLES, report_basename, resolve_output_file
from catalog_governance.output.writers import (
    build_report_json_data,
    render_report_markdown,
    write_report_csv,
    write_report_excel,
    write_report_json,
    write_report_markdown,
)
from catalog_governance.report import build_governance_report
from conftest import NOW, days_ago, make_session


@pytest.fixture
def report(sample_session, test_logger):
    return build_governance_report(sample_session, "All Time", now=NOW, logger=test_logger)


@pytest.fixture
def empty_report(test_logger):
    return build_governance_report(make_session(), "Last 30 Days", now=NOW, logger=test_logger)


@pytest.fixture(autouse=True)
def plain_console():
    """Disable ANSI colors so console assertions see plain text"""
    previous = ConsoleColors.is_enabled()
    ConsoleColors.set_enabled(False)
    yield
    ConsoleColors.set_enabled(previous)


class TestFileNaming:
    """Test default and explicit output paths"""

    def test_basename_slug(self, report):
        assert report_basename(report).startswith("governance_report_all_time_")

    def test_explicit_path_gets_suffix(self, tmp_path):
        assert resolve_output_file(tmp_path / "out", tmp_path, "stem", ".json") == tmp_path / "out.json"
        assert resolve_output_file(tmp_path / "out.json", tmp_path, "stem", ".json") == tmp_path / "out.json"

    def test_default_path_in_output_dir(self, tmp_path):
        assert resolve_output_file(None, tmp_path, "stem", ".md") == tmp_path / "stem.md"


class TestReportFrames:
    """Test the tabular views shared by CSV and Excel"""

    def test_table_order(self, report):
        assert list(report_frames(report)) == [
            "Summary",
            "Insights",
            "Top Fields",
            "Cross Tab",
            "Field Impact",
            "Pareto",
            "Timeline",
            "Ghost Fields",
        ]

    def test_insights_frame(self, report):
        frame = report_frames(report)["Insights"]
        assert list(frame["Severity"]) == ["critical", "info", "warning"]

    def test_timeline_frame_columns(self, report):
        frame = report_frames(report)["Timeline"]
        assert list(frame.columns) == ["Month", "Campaign", "Canvas", "Unknown"]
        assert list(frame["Campaign"]) == [1, 0, 1]

    def test_empty_report_frames(self, empty_report):
        frames = report_frames(empty_report)
        assert frames["Top Fields"].empty
        assert frames["Ghost Fields"].empty
        assert list(frames["Timeline"].columns) == ["Month", "Campaign", "Canvas"]


class TestJsonWriter:
    """Test JSON output"""

    def test_write_file(self, report, tmp_path, test_logger):
        path = write_report_json(report, None, tmp_path, test_logger)
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
        assert data["period"] == "All Time"
        assert data["tool_version"]
        assert data["top_fields"][0] == {"field_name": "f1", "references": 3}
        assert data["pareto_crossing_rank"] == 3

    def test_write_stdout(self, report, capsys, test_logger):
        assert write_report_json(report, "-", ".", test_logger) == "stdout"
        data = json.loads(capsys.readouterr().out)
        assert data["kpis"]["campaigns"] == 2

    def test_build_data_includes_version(self, report):
        assert "tool_version" in build_report_json_data(report)

    def test_unwritable_path_raises_output_error(self, report, tmp_path, test_logger):
        blocker = tmp_path / "blocker"
        blocker.write_text("x", encoding="utf-8")
        with pytest.raises(OutputError) as exc_info:
            write_report_json(report, blocker / "report.json", tmp_path, test_logger)
        assert exc_info.value.output_format == "json"


class TestCsvWriter:
    """Test CSV output"""

    def test_directory_of_tables(self, report, tmp_path, test_logger):
        csv_dir = write_report_csv(report, None, tmp_path, test_logger)
        names = sorted(p.name for p in Path(csv_dir).iterdir())
        assert names == sorted(
            [
                "summary.csv",
                "insights.csv",
                "top_fields.csv",
                "cross_tab.csv",
                "field_impact.csv",
                "pareto.csv",
                "timeline.csv",
                "ghost_fields.csv",
            ]
        )

    def test_table_contents(self, report, tmp_path, test_logger):
        csv_dir = write_report_csv(report, tmp_path / "out", tmp_path, test_logger)
        top = pd.read_csv(f"{csv_dir}/top_fields.csv")
        assert list(top["Field"]) == ["f1", "f2", "f3", "f6"]
        ghosts = pd.read_csv(f"{csv_dir}/ghost_fields.csv")
        assert ghosts.loc[0, "Ghost Field"] == "ghost_x"
        assert ghosts.loc[0, "Occurrences"] == 2

    def test_csv_suffix_becomes_directory(self, report, tmp_path, test_logger):
        csv_dir = write_report_csv(report, tmp_path / "report.csv", tmp_path, test_logger)
        assert csv_dir == str(tmp_path / "report")

    def test_stdout_rejected(self, report, tmp_path, test_logger, monkeypatch):
        monkeypatch.chdir(tmp_path)
        with pytest.raises(OutputError) as exc_info:
            write_report_csv(report, "-", tmp_path, test_logger)
        assert exc_info.value.output_format == "csv"
        assert not (tmp_path / "-").exists()


class TestExcelWriter:
    """Test Excel output"""

    def test_workbook_sheets(self, report, tmp_path, test_logger):
        path = write_report_excel(report, tmp_path / "report", tmp_path, test_logger)
        assert path.endswith("report.xlsx")
        with zipfile.ZipFile(path) as workbook:
            xml = workbook.read("xl/workbook.xml").decode("utf-8")
        for sheet in REPORT_TABLES:
            assert f'name="{sheet}"' in xml

    def test_empty_report(self, empty_report, tmp_path, test_logger):
        path = write_report_excel(empty_report, None, tmp_path, test_logger)
        assert zipfile.is_zipfile(path)

    def test_stdout_rejected(self, report, tmp_path, test_logger, monkeypatch):
        monkeypatch.chdir(tmp_path)
        with pytest.raises(OutputError) as exc_info:
            write_report_excel(report, "-", tmp_path, test_logger)
        assert exc_info.value.output_format == "excel"
        assert list(tmp_path.iterdir()) == []


class TestMarkdownWriter:
    """Test Markdown output"""

    def test_render(self, report):
        content = render_report_markdown(report)
        assert content.startswith("# Catalog Governance Report")
        assert "## Insights" in content
        assert "**Ghost Fields Detected**" in content
        assert "| 1 | `f1` | 3 |" in content
        assert "## Ghost Fields" in content
        assert "The top 3 field(s) account for 80%" in content

    def test_render_empty_report_omits_tables(self, empty_report):
        content = render_report_markdown(empty_report)
        assert "## Top Fields" not in content
        assert "All Systems Operational" in content

    def test_pipe_escaped(self):
        session = make_session(
            assets=[Asset("A1", asset_type="Campaign", last_active=days_ago(1))],
            block_index={"B1": "A1"},
            references=[("B1", "a|b", "false")],
        )
        content = render_report_markdown(build_governance_report(session, now=NOW))
        assert "`a\\|b`" in content

    def test_write_file(self, report, tmp_path, test_logger):
        path = write_report_markdown(report, tmp_path / "report.md", tmp_path, test_logger)
        assert (tmp_path / "report.md").read_text(encoding="utf-8").startswith("# Catalog Governance Report")
        assert path == str(tmp_path / "report.md")

    def test_write_stdout(self, report, capsys, test_logger):
        assert write_report_markdown(report, "-", ".", test_logger) == "stdout"
        assert capsys.readouterr().out.startswith("# Catalog Governance Report")


class TestConsoleWriter:
    """Test console rendering"""

    def test_sections(self, report, capsys):
        write_report_console(report)
        out = capsys.readouterr().out
        assert "CATALOG GOVERNANCE REPORT" in out
        assert "KEY METRICS" in out
        assert "[CRITICAL]" in out
        assert "Ghost Fields Detected" in out
        assert "GHOST FIELDS" in out
        assert "could not be matched to an asset" in out

    def test_quiet_prints_nothing(self, report, capsys):
        write_report_console(report, quiet=True)
        assert capsys.readouterr().out == ""

    def test_empty_report(self, empty_report, capsys):
        write_report_console(empty_report)
        out = capsys.readouterr().out
        assert "No field usage data for this period." in out
        assert "GHOST FIELDS" not in out


class TestWriteReport:
    """Test format dispatch"""

    def test_console_returns_no_paths(self, report, capsys, test_logger):
        assert write_report(report, "console", None, ".", test_logger) == []
        assert "CATALOG GOVERNANCE REPORT" in capsys.readouterr().out

    def test_single_format(self, report, tmp_path, test_logger):
        paths = write_report(report, "json", None, tmp_path, test_logger)
        assert len(paths) == 1
        assert paths[0].endswith(".json")

    def test_all_formats(self, report, tmp_path, test_logger):
        paths = write_report(report, "all", "ignored", tmp_path, test_logger, quiet=True)
        assert len(paths) == len(FILE_WRITERS)
        assert any(p.endswith(".xlsx") for p in paths)
        assert any(p.endswith(".md") for p in paths)

    def test_unknown_format(self, report, tmp_path, test_logger):
        with pytest.raises(OutputError):
            write_report(report, "pdf", None, tmp_path, test_logger)
