"""Tests for the plens command group: query, serve and shared utilities."""

from __future__ import annotations

import json
import os
from collections.abc import Generator
from pathlib import Path
from unittest.mock import patch

import click
import pytest
from click.testing import CliRunner

from projectlens.cli.main import cli
from projectlens.cli.query import _exit_code
from projectlens.cli.utils import (
    EXIT_CONFIG_ERROR,
    EXIT_INDEX_LOAD_FAILURE,
    EXIT_INTERNAL_FAULT,
    EXIT_QUERY_ERROR,
    parse_assignments,
)
from projectlens.core.errors import ErrorCode

runner = CliRunner()


@pytest.fixture(autouse=True)
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Keep the developer's global config and env out of CLI runs."""
    monkeypatch.setattr("projectlens.config.loader.GLOBAL_CONFIG_PATH", tmp_path / "no-global.yaml")
    for key in [k for k in os.environ if k.startswith("PROJECTLENS__")]:
        monkeypatch.delenv(key)
    yield


@pytest.fixture
def empty_project(tmp_path: Path) -> Path:
    root = tmp_path / "empty"
    root.mkdir()
    return root


class TestVersion:
    def test_version(self) -> None:
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert "0.1.0" in result.output


class TestQueryCommand:
    """plens query command tests."""

    def test_given_index_when_query_then_prints_envelope(self, project_dir: Path) -> None:
        result = runner.invoke(cli, ["query", "get_architecture", str(project_dir)])
        assert result.exit_code == 0, result.output
        envelope = json.loads(result.stdout)
        assert envelope["success"] is True
        assert envelope["result"]["project"] == "shop"

    def test_given_typed_args_when_query_then_coerced(self, project_dir: Path) -> None:
        result = runner.invoke(
            cli, ["query", "get_hotpaths", str(project_dir), "-a", "n=2", "-a", "scope=domain:core"]
        )
        assert result.exit_code == 0, result.output
        envelope = json.loads(result.stdout)
        assert envelope["result"]["count"] == 2
        assert envelope["result"]["scope"] == {"kind": "domain", "name": "core"}

    def test_given_unknown_tool_when_query_then_fails(self, project_dir: Path) -> None:
        result = runner.invoke(cli, ["query", "get_everything", str(project_dir)])
        assert result.exit_code == EXIT_QUERY_ERROR
        envelope = json.loads(result.stdout)
        assert envelope["success"] is False
        assert envelope["meta"]["error"]["error"] == "UNKNOWN_TOOL"

    def test_given_typed_error_when_query_then_query_exit_code(self, project_dir: Path) -> None:
        result = runner.invoke(cli, ["query", "expand_variable", str(project_dir), "-a", "name=NOPE"])
        assert result.exit_code == EXIT_QUERY_ERROR
        envelope = json.loads(result.stdout)
        assert envelope["meta"]["error"]["error"] == "UNDEFINED_VARIABLE"

    @pytest.mark.parametrize(
        ("code", "expected"),
        [
            (ErrorCode.NOT_FOUND, EXIT_QUERY_ERROR),
            (ErrorCode.BUDGET_TOO_SMALL, EXIT_QUERY_ERROR),
            (ErrorCode.INTERNAL_ERROR, EXIT_INTERNAL_FAULT),
            (ErrorCode.INTERNAL_TIMEOUT, EXIT_INTERNAL_FAULT),
        ],
    )
    def test_exit_code_by_error_range(self, code: ErrorCode, expected: int) -> None:
        assert _exit_code(code.value) == expected

    def test_given_explicit_index_when_query_then_used(self, tmp_path: Path, sample_json: str) -> None:
        index_file = tmp_path / "elsewhere.json"
        index_file.write_text(sample_json)
        root = tmp_path / "root"
        root.mkdir()
        result = runner.invoke(
            cli, ["query", "get_domain_files", str(root), "--index", str(index_file), "-a", "domain=db"]
        )
        assert result.exit_code == 0, result.output
        assert json.loads(result.stdout)["result"]["count"] == 1

    def test_given_no_index_when_query_then_index_exit_code(self, empty_project: Path) -> None:
        result = runner.invoke(cli, ["query", "get_architecture", str(empty_project)])
        assert result.exit_code == EXIT_INDEX_LOAD_FAILURE
        assert "Failed to load index" in result.stderr

    def test_given_bad_index_when_query_then_index_exit_code(self, empty_project: Path) -> None:
        lens_dir = empty_project / ".projectlens"
        lens_dir.mkdir()
        (lens_dir / "index.json").write_text('{"meta": {"version": "9.0"}}')
        result = runner.invoke(cli, ["query", "get_architecture", str(empty_project)])
        assert result.exit_code == EXIT_INDEX_LOAD_FAILURE

    def test_given_invalid_config_when_query_then_config_exit_code(self, project_dir: Path) -> None:
        (project_dir / ".projectlens" / "config.yaml").write_text("unknown_option: true\n")
        result = runner.invoke(cli, ["query", "get_architecture", str(project_dir)])
        assert result.exit_code == EXIT_CONFIG_ERROR
        assert "Configuration error" in result.stderr

    def test_given_malformed_arg_when_query_then_usage_error(self, project_dir: Path) -> None:
        result = runner.invoke(cli, ["query", "get_hotpaths", str(project_dir), "-a", "n"])
        assert result.exit_code == 2
        assert "expected key=value" in result.output


class TestServeCommand:
    """plens serve command tests."""

    def test_given_index_when_serve_then_runs_server(self, project_dir: Path) -> None:
        with patch("projectlens.cli.serve.run_server") as mock_run:
            result = runner.invoke(cli, ["serve", str(project_dir)])
        assert result.exit_code == 0, result.output
        mock_run.assert_called_once()
        context = mock_run.call_args.args[0]
        assert context.root == project_dir.resolve()
        assert context.store.is_loaded

    def test_given_server_crash_when_serve_then_internal_exit_code(self, project_dir: Path) -> None:
        with patch("projectlens.cli.serve.run_server", side_effect=RuntimeError("stdio closed")):
            result = runner.invoke(cli, ["serve", str(project_dir)])
        assert result.exit_code == EXIT_INTERNAL_FAULT
        assert "Server stopped: stdio closed" in result.stderr

    def test_given_no_index_when_serve_then_server_not_started(self, empty_project: Path) -> None:
        with patch("projectlens.cli.serve.run_server") as mock_run:
            result = runner.invoke(cli, ["serve", str(empty_project)])
        assert result.exit_code == EXIT_INDEX_LOAD_FAILURE
        mock_run.assert_not_called()


class TestParseAssignments:
    def test_pairs(self) -> None:
        assert parse_assignments(("a=1", "b=x=y")) == {"a": "1", "b": "x=y"}

    def test_empty_value(self) -> None:
        assert parse_assignments(("scope=",)) == {"scope": ""}

    def test_later_wins(self) -> None:
        assert parse_assignments(("n=1", "n=2")) == {"n": "2"}

    @pytest.mark.parametrize("pair", ["novalue", "=x"])
    def test_rejects_malformed(self, pair: str) -> None:
        with pytest.raises(click.BadParameter):
            parse_assignments((pair,))
