from __future__ import annotations

import argparse
import logging
from typing import List, Optional

from .bootstrap import configure_logging
from .config import get_settings
from .services.http import run_local_server
from .services.mcp import run_mcp_server


def build_parser() -> argparse.ArgumentParser:
    settings = get_settings()
    parser = argparse.ArgumentParser(description="Scheduling gateway command line interface.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    api_parser = subparsers.add_parser("api", help="Start the HTTP tool gateway.")
    api_parser.add_argument("--host", default=settings.server.host)
    api_parser.add_argument("--port", type=int, default=settings.server.port)

    mcp_parser = subparsers.add_parser("mcp", help="Start the FastMCP server exposing the same tools.")
    mcp_parser.add_argument("--host", default="127.0.0.1")
    mcp_parser.add_argument("--port", type=int, default=8765)

    return parser


def main(argv: Optional[List[str]] = None) -> None:
    configure_logging()
    logging.getLogger(__name__).info("Scheduling gateway CLI starting")
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command == "api":
        run_local_server(host=args.host, port=args.port)
    elif args.command == "mcp":
        run_mcp_server(host=args.host, port=args.port)
    else:  # pragma: no cover - argparse enforces choices
        parser.print_help()


if __name__ == "__main__":
    main()
