from __future__ import annotations

from typing import Any

from fastmcp import FastMCP

from .config import get_version
from .credits import CreditLedger
from .services import DWSClient, Sandbox
from .tools import register_dws_tools

SERVER_NAME = "nutrient-dws-mcp-server"


def create_server(
    sandbox: Sandbox | None = None,
    *,
    client: DWSClient | None = None,
    ledger: CreditLedger | None = None,
) -> FastMCP[Any]:
    """Build the MCP server with every DWS tool bound to one sandbox, client and ledger."""

    sandbox = sandbox or Sandbox.disabled()
    mcp: FastMCP[Any] = FastMCP(
        SERVER_NAME,
        version=get_version(),
        instructions=(
            "Document processing tools backed by the Nutrient DWS Processor API. "
            + (
                "File paths are relative to the sandbox directory; use sandbox_file_tree to "
                "discover them."
                if sandbox.enabled
                else "File paths must be absolute; use directory_tree to discover them."
            )
        ),
    )
    register_dws_tools(
        mcp,
        sandbox=sandbox,
        client=client or DWSClient(),
        ledger=ledger,
    )
    return mcp


__all__ = ["SERVER_NAME", "create_server"]
