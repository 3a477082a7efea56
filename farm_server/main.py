"""
Entry point for running the farm session server.

Usage:
    python -m farm_server [--host HOST] [--port PORT] [--log-level LEVEL]
"""

import argparse
import asyncio
import logging
import signal

from farm_server.config import settings
from farm_server.network import ServerSupervisor, get_join_url


logger = logging.getLogger(__name__)


async def run_server(host: str | None = None, port: int | None = None) -> int:
    """
    Run the server until SIGINT or SIGTERM.

    Returns:
        Process exit code
    """
    supervisor = ServerSupervisor(host)
    success, message, handle = await supervisor.start(port if port is not None else settings.PORT)
    print(message)
    if not success:
        return 1

    print(f"Players can join at {get_join_url(handle.port)}")
    print("Press Ctrl+C to stop")

    stop_requested = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGTERM, signal.SIGINT):
        loop.add_signal_handler(sig, stop_requested.set)

    try:
        await stop_requested.wait()
    finally:
        for sig in (signal.SIGTERM, signal.SIGINT):
            loop.remove_signal_handler(sig)

    _, message = await supervisor.stop(handle)
    print(message)
    return 0


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Farm multiplayer session server")
    parser.add_argument("--host", default=settings.HOST, help="Interface to bind")
    parser.add_argument("--port", type=int, default=settings.PORT, help="Port to listen on")
    parser.add_argument("--log-level", default=settings.LOG_LEVEL, help="Logging level")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    """Entry point for running the server."""
    args = parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    try:
        return asyncio.run(run_server(args.host, args.port))
    except KeyboardInterrupt:
        print("\nServer stopped")
        return 0
