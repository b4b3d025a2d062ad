"""
Start the jrunner dashboard for the project in the current directory.

Example:
    jrunner --port 3000
"""

from __future__ import annotations

import argparse
import logging
import threading
import webbrowser
from typing import Optional, Sequence

import uvicorn

from jrunner.core.config import ServerSettings, Settings, get_settings
from jrunner.main import create_app

BROWSER_DELAY_SECONDS = 0.5


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="jrunner", description="Run project scripts from a local dashboard.")
    parser.add_argument("--host", default=None, help="interface to bind (default: settings.server.host)")
    parser.add_argument("--port", type=int, default=None, help="port to listen on (default: $PORT or 3000)")
    parser.add_argument("--no-open", action="store_true", help="do not open a browser window")
    return parser.parse_args(argv)


def build_settings(args: argparse.Namespace, base: Optional[Settings] = None) -> Settings:
    base = base or get_settings()
    server = ServerSettings(host=args.host or base.host, port=args.port or base.port)
    return base.model_copy(update={"environment": "production", "server": server, "port_override": None})


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = parse_args(argv)
    settings = build_settings(args)
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    url = f"http://localhost:{settings.port}"
    print(f"jrunner server listening on {url}")
    if not args.no_open:
        threading.Timer(BROWSER_DELAY_SECONDS, webbrowser.open, args=(url,)).start()

    uvicorn.run(create_app(settings), host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    main()
