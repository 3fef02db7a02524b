#!/usr/bin/env python3
"""gitea-mcp entry point.

Run:
  gitea-mcp                      # serve over stdio (GITEA_URL and GITEA_TOKEN required)
  gitea-mcp --test               # list tools/resources then exit
  python -m gitea_mcp --log-level DEBUG
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from gitea_mcp import __version__
from gitea_mcp.errors import SafeError
from gitea_mcp.server import run_server, test_server


def parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="gitea-mcp", description="Gitea/Forgejo MCP server (stdio).")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--test",
        action="store_true",
        help="Run the built-in self check (tool and resource listing) then exit.",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level for stderr logging (default: INFO).",
    )
    return parser.parse_args(argv)


def main() -> None:
    args = parse_args(sys.argv[1:])
    logging.getLogger().setLevel(args.log_level)
    try:
        asyncio.run(test_server() if args.test else run_server())
    except KeyboardInterrupt:
        print("\nServer stopped by user", file=sys.stderr)
    except SafeError as exc:
        # Configuration problems were already logged by run_server.
        sys.exit(2 if exc.code == "Config" else 1)


if __name__ == "__main__":
    main()
