from __future__ import annotations

import argparse
import json
import os
import sys
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import Sequence, cast

import anyio
import typer
from pydantic import ValidationError
from rich.console import Console
from rich.panel import Panel

from .config import SANDBOX_ENV, configure_logging, get_api_key, resolve_sandbox_setting
from .credits import CreditLedger
from .errors import DWSToolboxError
from .schemas import Instructions, Period, SignatureOptions, ToolResult
from .server import create_server
from .services import DWSClient, Sandbox
from .services import account as account_service
from .services import directory_tree as tree_service
from .services import operations as operations_service

console = Console()
tool_app = typer.Typer(
    name="dws-tool",
    add_completion=False,
    help="Run the DWS document tools locally (build, sign, AI redaction, credits, file tree).",
)

ClientCall = Callable[[DWSClient, CreditLedger], Awaitable[ToolResult]]

_SANDBOX_OPTION = typer.Option(
    None,
    "--sandbox",
    "-s",
    envvar=SANDBOX_ENV,
    help="Restrict file access to this directory. Paths are then relative to it.",
)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dws-toolbox",
        description="Run the Nutrient DWS MCP server over STDIO.",
    )
    parser.add_argument(
        "--sandbox",
        "-s",
        default=None,
        help=f"Sandbox directory for file access. Overrides the {SANDBOX_ENV} variable.",
    )
    parser.add_argument(
        "--transport",
        choices=["stdio"],
        default="stdio",
        help="Transport to use. Only stdio is supported for now.",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress informational output before the server starts.",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Logging level (DEBUG, INFO, WARNING...). Logs always go to stderr.",
    )
    return parser


def _print_payload(text: str) -> None:
    """Pretty-print JSON payloads, anything else as plain text."""

    try:
        data = json.loads(text)
    except ValueError:
        console.print(text)
        return
    console.print_json(data=data)


def _show_result(action: str, result: ToolResult) -> None:
    if result.is_error:
        console.print(Panel(result.text, title=f"{action} failed", border_style="red"))
        raise typer.Exit(code=1)

    console.print(Panel(f"{action} finished successfully.", border_style="green"))
    _print_payload(result.text)


def _run_command(action: str, call: ClientCall) -> None:
    async def runner() -> ToolResult:
        ledger = CreditLedger()
        try:
            async with DWSClient() as client:
                return await call(client, ledger)
        finally:
            ledger.close()

    try:
        result = anyio.run(runner)
    except DWSToolboxError as exc:
        console.print(Panel(str(exc), title=f"{action} failed", border_style="red"))
        raise typer.Exit(code=1) from exc
    _show_result(action, result)


def _sandbox_or_exit(action: str, sandbox: str | None) -> Sandbox:
    try:
        return Sandbox.create(sandbox)
    except (DWSToolboxError, OSError) as exc:
        console.print(Panel(str(exc), title=f"{action} failed", border_style="red"))
        raise typer.Exit(code=1) from exc


def _load_instructions(raw: str) -> Instructions:
    candidate = Path(raw)
    text = candidate.read_text(encoding="utf-8") if candidate.is_file() else raw
    return Instructions.model_validate_json(text)


@tool_app.command("build")
def build_command(
    instructions: str = typer.Argument(
        ...,
        help="Build instructions as a JSON string or the path of a JSON file.",
    ),
    output_path: str = typer.Argument(
        ...,
        help="Where to store the result. Validated but not written for json-content output.",
    ),
    sandbox: str | None = _SANDBOX_OPTION,
) -> None:
    """Process documents with the Build API."""

    try:
        parsed = _load_instructions(instructions)
    except (OSError, ValidationError) as exc:
        console.print(Panel(str(exc), title="Build failed", border_style="red"))
        raise typer.Exit(code=1) from exc
    jail = _sandbox_or_exit("Build", sandbox)

    _run_command(
        "Build",
        lambda client, ledger: operations_service.perform_build_call(
            parsed,
            output_path,
            sandbox=jail,
            client=client,
            ledger=ledger,
        ),
    )


@tool_app.command("sign")
def sign_command(
    file_path: str = typer.Argument(..., help="PDF to sign."),
    output_path: str = typer.Argument(..., help="Where to store the signed PDF."),
    signature_type: str = typer.Option("cms", "--type", "-t", help="cms or cades."),
    flatten: bool = typer.Option(False, "--flatten", help="Flatten the document first."),
    watermark_image: str | None = typer.Option(None, "--watermark-image", "-w"),
    graphic_image: str | None = typer.Option(None, "--graphic-image", "-g"),
    sandbox: str | None = _SANDBOX_OPTION,
) -> None:
    """Digitally sign a PDF."""

    try:
        options = SignatureOptions(signature_type=signature_type, flatten=flatten)
    except ValidationError as exc:
        console.print(Panel(str(exc), title="Signing failed", border_style="red"))
        raise typer.Exit(code=1) from exc
    jail = _sandbox_or_exit("Signing", sandbox)

    _run_command(
        "Signing",
        lambda client, ledger: operations_service.perform_sign_call(
            file_path,
            output_path,
            sandbox=jail,
            client=client,
            signature_options=options,
            watermark_image_path=watermark_image,
            graphic_image_path=graphic_image,
            ledger=ledger,
        ),
    )


@tool_app.command("ai-redact")
def ai_redact_command(
    file_path: str = typer.Argument(..., help="Document to redact."),
    criteria: str = typer.Argument(..., help="What should be redacted."),
    output_path: str = typer.Argument(..., help="Where to store the redacted document."),
    stage: bool = typer.Option(False, "--stage", help="Only create redactions for review."),
    apply: bool = typer.Option(False, "--apply", help="Apply previously staged redactions."),
    sandbox: str | None = _SANDBOX_OPTION,
) -> None:
    """Redact sensitive content with AI."""

    jail = _sandbox_or_exit("AI redaction", sandbox)
    _run_command(
        "AI redaction",
        lambda client, ledger: operations_service.perform_ai_redact_call(
            file_path,
            criteria,
            output_path,
            sandbox=jail,
            client=client,
            stage=stage,
            apply=apply,
            ledger=ledger,
        ),
    )


@tool_app.command("check-credits")
def check_credits_command() -> None:
    """Show the account subscription and remaining credits."""

    _run_command(
        "Credit check",
        lambda client, ledger: account_service.perform_check_credits_call(client),
    )


@tool_app.command("credit-usage")
def credit_usage_command(
    period: str = typer.Option("week", "--period", "-p", help="day, week, month or all."),
) -> None:
    """Summarize credits spent per operation from the local usage log."""

    if period not in ("day", "week", "month", "all"):
        console.print(
            Panel(f"Unknown period: {period}", title="Credit usage failed", border_style="red")
        )
        raise typer.Exit(code=1)
    ledger = CreditLedger()
    try:
        result = account_service.perform_credit_usage_call(ledger, cast(Period, period))
    finally:
        ledger.close()
    _show_result("Credit usage", result)


@tool_app.command("credit-forecast")
def credit_forecast_command() -> None:
    """Forecast when the credit balance runs out."""

    ledger = CreditLedger()
    try:
        result = account_service.perform_credit_forecast_call(ledger)
    finally:
        ledger.close()
    _show_result("Credit forecast", result)


@tool_app.command("tree")
def tree_command(
    path: str = typer.Argument(".", help="Directory to list (absolute without a sandbox)."),
    sandbox: str | None = _SANDBOX_OPTION,
) -> None:
    """Print the directory tree as JSON."""

    jail = _sandbox_or_exit("Directory tree", sandbox)
    result = anyio.run(lambda: tree_service.perform_directory_tree_call(path, sandbox=jail))
    _show_result("Directory tree", result)


def run_tool_cli(argv: Sequence[str] | None = None) -> int:
    """Entry point of the `dws-tool` command."""

    configure_logging()
    args = list(argv) if argv is not None else None
    try:
        outcome = tool_app(prog_name="dws-tool", args=args, standalone_mode=False)
    except typer.Exit as exc:
        return exc.exit_code
    # click hands the exit code back instead of raising when standalone_mode is off.
    return outcome if isinstance(outcome, int) else 0


def start_mcp_server(argv: Sequence[str] | None = None) -> None:
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.transport != "stdio":
        parser.error("Only the stdio transport is supported at the moment.")

    configure_logging(args.log_level)

    try:
        api_key = get_api_key()
    except DWSToolboxError as exc:
        parser.error(str(exc))

    setting = resolve_sandbox_setting(args.sandbox, os.environ.get(SANDBOX_ENV))
    try:
        sandbox = Sandbox.create(setting)
    except (DWSToolboxError, OSError) as exc:
        parser.error(f"Cannot use sandbox directory {setting}: {exc}")

    # stdout carries the MCP protocol, so anything human readable goes to stderr.
    if not args.quiet:
        print("Starting Nutrient DWS MCP server (transport=stdio).", file=sys.stderr, flush=True)
        if sandbox.enabled:
            print(f"Sandbox enabled: {sandbox.root}", file=sys.stderr, flush=True)
        else:
            print(
                "Warning: no sandbox directory set. The server can access any file the "
                "current user can read; pass --sandbox to restrict it.",
                file=sys.stderr,
                flush=True,
            )

    mcp = create_server(
        sandbox,
        client=DWSClient(api_key=api_key),
        ledger=CreditLedger(),
    )
    mcp.run()


__all__ = ["run_tool_cli", "start_mcp_server", "tool_app"]
