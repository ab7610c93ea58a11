"""Tests for the lcovtrace CLI commands."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from lcovtrace.cli.main import cli

E2E_TEXT = "TN:t\nSF:/a.c\nDA:1,2\nDA:2,1\nDA:3,5\nend_of_record\n"


@pytest.fixture
def runner(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> CliRunner:
    # Keep a developer's ./.lcovtrace.yaml out of the picture
    monkeypatch.chdir(tmp_path)
    return CliRunner()


class TestParseCommand:
    """lcovtrace parse"""

    def test_counts_records_by_kind(self, runner: CliRunner, write_trace) -> None:
        path = write_trace("a.info", E2E_TEXT)

        result = runner.invoke(cli, ["parse", str(path)])

        assert result.exit_code == 0, result.output
        assert f"{path}: 6 records" in result.output
        assert "LineData: 3" in result.output
        assert "EndOfRecord: 1" in result.output

    @pytest.mark.parametrize("extra", [[], ["--lazy"]])
    def test_json_output(self, runner: CliRunner, write_trace, extra: list[str]) -> None:
        path = write_trace("a.info", E2E_TEXT)

        result = runner.invoke(cli, ["parse", str(path), "--json", *extra])

        assert result.exit_code == 0, result.output
        records = json.loads(result.output)
        assert records[0] == {"kind": "TestName", "name": "t"}
        assert records[2] == {"kind": "LineData", "line": 1, "count": 2, "checksum": None}
        assert len(records) == 6

    def test_parse_error(self, runner: CliRunner, write_trace) -> None:
        path = write_trace("bad.info", "TN:t\nXX:1\n")

        result = runner.invoke(cli, ["parse", str(path)])

        assert result.exit_code == 1
        assert "line 2" in result.output

    def test_missing_file(self, runner: CliRunner, tmp_path: Path) -> None:
        result = runner.invoke(cli, ["parse", str(tmp_path / "missing.info")])

        assert result.exit_code == 2


class TestMergeCommand:
    """lcovtrace merge"""

    def test_writes_stdout(self, runner: CliRunner, write_trace) -> None:
        a = write_trace("a.info", E2E_TEXT)
        b = write_trace("b.info", E2E_TEXT)

        result = runner.invoke(cli, ["merge", str(a), str(b)])

        assert result.exit_code == 0, result.output
        assert "DA:1,4\n" in result.output
        assert "LF:3\n" in result.output

    def test_writes_output_file(self, runner: CliRunner, write_trace, tmp_path: Path) -> None:
        a = write_trace("a.info", E2E_TEXT)
        output = tmp_path / "merged.info"

        result = runner.invoke(cli, ["merge", str(a), "-o", str(output)])

        assert result.exit_code == 0, result.output
        assert output.read_text().startswith("TN:t\nSF:/a.c\n")

    def test_conflict_fails_without_output(
        self, runner: CliRunner, write_trace, tmp_path: Path
    ) -> None:
        a = write_trace("a.info", "TN:x\nSF:/f.c\nDA:4,1,CK1\nend_of_record\n")
        b = write_trace("b.info", "TN:x\nSF:/f.c\nDA:4,1,CK2\nend_of_record\n")
        output = tmp_path / "merged.info"

        result = runner.invoke(cli, ["merge", str(a), str(b), "-o", str(output)])

        assert result.exit_code == 1
        assert "MERGE_CONFLICT" in result.output
        assert not output.exists()

    def test_requires_paths(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["merge"])
        assert result.exit_code == 2


class TestSummaryCommand:
    """lcovtrace summary"""

    def test_text(self, runner: CliRunner, write_trace) -> None:
        path = write_trace("a.info", "TN:t\nSF:/a.c\nDA:1,1\nDA:2,0\nend_of_record\n")

        result = runner.invoke(cli, ["summary", str(path)])

        assert result.exit_code == 0, result.output
        assert "/a.c" in result.output
        assert "Coverage: 50.0% (1/2 lines)" in result.output

    def test_json(self, runner: CliRunner, write_trace) -> None:
        path = write_trace("a.info", E2E_TEXT)

        result = runner.invoke(cli, ["summary", str(path), "--json"])

        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["summary"]["total_lines"] == 3
        assert data["files"][0]["path"] == "/a.c"


class TestGlobalOptions:
    def test_version(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert "0.1.0" in result.output

    def test_config_file_applied(self, runner: CliRunner, write_trace, tmp_path: Path) -> None:
        config = tmp_path / "cfg.yaml"
        config.write_text("merge:\n  orphan_records: ignore\n")
        path = write_trace("a.info", "SF:/a.c\nDA:1,1\nend_of_record\n")

        result = runner.invoke(cli, ["--config", str(config), "merge", str(path)])

        assert result.exit_code == 0, result.output
        assert result.output == ""

    def test_bad_config_file(self, runner: CliRunner, tmp_path: Path) -> None:
        config = tmp_path / "cfg.yaml"
        config.write_text("merge:\n  orphan_records: drop\n")

        result = runner.invoke(cli, ["--config", str(config), "summary", "x.info"])

        assert result.exit_code == 1
        assert "CONFIG_INVALID_VALUE" in result.output
