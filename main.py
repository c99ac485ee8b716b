from __future__ import annotations

from dws_toolbox.cli import start_mcp_server
from dws_toolbox.server import create_server


def main() -> None:
    start_mcp_server()


if __name__ == "__main__":
    main()


__all__ = ["create_server", "main"]
