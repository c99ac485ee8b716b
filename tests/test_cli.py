from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import Any, Sequence

import pytest
from typer.testing import CliRunner

from dws_toolbox import cli
from dws_toolbox.schemas import Instructions, ToolResult

runner = CliRunner()


@pytest.fixture(autouse=True)
def _keep_test_logging(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(cli, "configure_logging", lambda level=None: None)


class _FakeServer:
    def __init__(self) -> None:
        self.ran = False

    def run(self) -> None:
        self.ran = True


def _patch_server(monkeypatch: pytest.MonkeyPatch) -> dict[str, Any]:
    created: dict[str, Any] = {}

    def fake_create_server(sandbox: Any, **kwargs: Any) -> _FakeServer:
        server = _FakeServer()
        created.update(sandbox=sandbox, server=server, **kwargs)
        return server

    monkeypatch.setattr(cli, "create_server", fake_create_server)
    return created


def test_start_mcp_server_runs_with_quiet(monkeypatch: pytest.MonkeyPatch, capsys: Any) -> None:
    created = _patch_server(monkeypatch)
    cli.start_mcp_server(["--quiet"])

    assert created["server"].ran
    assert not created["sandbox"].enabled
    captured = capsys.readouterr()
    assert captured.out == ""
    assert "Starting" not in captured.err


def test_start_mcp_server_prints_banner_to_stderr(
    monkeypatch: pytest.MonkeyPatch, capsys: Any
) -> None:
    _patch_server(monkeypatch)
    cli.start_mcp_server([])
    captured = capsys.readouterr()
    assert captured.out == ""
    assert "Starting Nutrient DWS MCP server" in captured.err
    assert "no sandbox directory set" in captured.err


def test_sandbox_flag_wins_over_environment(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    created = _patch_server(monkeypatch)
    monkeypatch.setenv("SANDBOX_PATH", str(tmp_path / "from-env"))

    cli.start_mcp_server(["--quiet", "--sandbox", str(tmp_path / "from-flag")])

    assert created["sandbox"].root == (tmp_path / "from-flag").resolve()
    assert not (tmp_path / "from-env").exists()


def test_sandbox_from_environment(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    created = _patch_server(monkeypatch)
    monkeypatch.setenv("SANDBOX_PATH", str(tmp_path / "jail"))

    cli.start_mcp_server(["--quiet"])

    assert created["sandbox"].root == (tmp_path / "jail").resolve()


def test_missing_api_key_aborts(monkeypatch: pytest.MonkeyPatch, capsys: Any) -> None:
    created = _patch_server(monkeypatch)
    monkeypatch.delenv("NUTRIENT_DWS_API_KEY")

    with pytest.raises(SystemExit):
        cli.start_mcp_server(["--quiet"])

    assert "NUTRIENT_DWS_API_KEY not set in environment" in capsys.readouterr().err
    assert created == {}


def test_start_mcp_server_rejects_non_stdio(monkeypatch: pytest.MonkeyPatch) -> None:
    class DummyParser:
        def parse_args(self, argv: Sequence[str] | None) -> argparse.Namespace:
            return argparse.Namespace(transport="tcp", quiet=True, sandbox=None, log_level=None)

        def error(self, message: str) -> None:
            raise RuntimeError(message)

    monkeypatch.setattr(cli, "_build_parser", lambda: DummyParser())
    _patch_server(monkeypatch)
    with pytest.raises(RuntimeError, match="Only the stdio"):
        cli.start_mcp_server([])


def test_build_cli_invokes_gateway(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    captured: dict[str, Any] = {}

    async def fake_build(instructions: Instructions, output_path: str, **kwargs: Any) -> ToolResult:
        captured.update(instructions=instructions, output_path=output_path, **kwargs)
        return ToolResult.success(f"File processed successfully and saved to: {output_path}")

    monkeypatch.setattr(cli.operations_service, "perform_build_call", fake_build)
    payload = json.dumps({"parts": [{"file": "a.pdf"}], "output": {"type": "pdf"}})

    result = runner.invoke(
        cli.tool_app,
        ["build", payload, "out.pdf", "--sandbox", str(tmp_path / "jail")],
    )

    assert result.exit_code == 0, result.output
    assert "Build finished successfully" in result.output
    assert captured["output_path"] == "out.pdf"
    assert captured["instructions"].parts[0].file == "a.pdf"
    assert captured["sandbox"].root == (tmp_path / "jail").resolve()


def test_build_cli_rejects_invalid_instructions() -> None:
    result = runner.invoke(cli.tool_app, ["build", '{"parts": "nope"}', "out.pdf"])
    assert result.exit_code == 1
    assert "Build failed" in result.output


def test_ai_redact_cli_reports_failure(tmp_path: Path) -> None:
    result = runner.invoke(
        cli.tool_app,
        [
            "ai-redact",
            "doc.pdf",
            "names",
            "out.pdf",
            "--stage",
            "--apply",
            "--sandbox",
            str(tmp_path / "jail"),
        ],
    )

    assert result.exit_code == 1
    assert "AI redaction failed" in result.output


def test_credit_usage_cli_prints_json() -> None:
    result = runner.invoke(cli.tool_app, ["credit-usage", "--period", "all"])
    assert result.exit_code == 0, result.output
    assert "total_operations" in result.output


def test_credit_usage_cli_rejects_unknown_period() -> None:
    result = runner.invoke(cli.tool_app, ["credit-usage", "--period", "year"])
    assert result.exit_code == 1


def test_run_tool_cli_returns_exit_code(tmp_path: Path) -> None:
    (tmp_path / "doc.pdf").write_bytes(b"d")
    assert cli.run_tool_cli(["tree", str(tmp_path)]) == 0
    assert cli.run_tool_cli(["tree", "relative/dir"]) == 1
