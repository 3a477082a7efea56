"""
WebSocket server supervisor for the farm session.

Owns the listening socket. Each accepted and upgraded connection gets its
own ConnectionHandler; a watcher task waits on the shutdown signal and then
stops accepting without closing connections that are already established.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any

from websockets.asyncio.server import Server, ServerConnection, serve

from farm_server.config import settings
from farm_server.network.broadcaster import Broadcaster
from farm_server.network.connection_handler import ConnectionHandler
from farm_server.session.game_session import GameSession


logger = logging.getLogger(__name__)

handshake_logger = logging.getLogger("farm_server.network.handshake")


@dataclass
class ServerHandle:
    """A running server: its listener, session and shutdown signal."""
    host: str
    port: int
    server: Server
    session: GameSession
    broadcaster: Broadcaster
    shutdown_event: asyncio.Event = field(default_factory=asyncio.Event)
    watcher: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return not self.shutdown_event.is_set()

    @property
    def url(self) -> str:
        return f"ws://{self.host}:{self.port}"


class ServerSupervisor:
    """
    Starts and stops the farm session server.

    Only one server runs per supervisor at a time. start() and stop()
    return (success, message) tuples whose messages are meant for display.
    """

    def __init__(self, host: str | None = None, config=settings):
        self.host = host or config.HOST
        self._config = config
        self._handle: ServerHandle | None = None

    @property
    def handle(self) -> ServerHandle | None:
        return self._handle

    @property
    def running(self) -> bool:
        return self._handle is not None and self._handle.running

    async def start(self, port: int) -> tuple[bool, str, ServerHandle | None]:
        """
        Bind the listening socket and start accepting connections.

        Returns immediately once the socket is bound; connections are served
        in the background.

        Returns:
            Tuple of (success, message, ServerHandle or None)
        """
        if self.running:
            return False, f"Server already running on port {self._handle.port}", None

        session = GameSession()
        broadcaster = Broadcaster(session.connections)

        async def handle_client(websocket: ServerConnection) -> None:
            handler = ConnectionHandler(websocket, session, broadcaster, self._config)
            logger.info(f"New connection from: {handler.peer}")
            await handler.run()

        try:
            server = await serve(
                handle_client,
                self.host,
                port,
                ping_interval=self._config.PING_INTERVAL,
                ping_timeout=self._config.PING_TIMEOUT,
                logger=handshake_logger,
            )
        except OSError as e:
            logger.error(f"Failed to start server on port {port}: {e}")
            return False, f"Failed to start server: {e}", None

        bound_port = port
        if server.sockets:
            bound_port = server.sockets[0].getsockname()[1]

        handle = ServerHandle(
            host=self.host,
            port=bound_port,
            server=server,
            session=session,
            broadcaster=broadcaster,
        )
        handle.watcher = asyncio.create_task(self._watch_shutdown(handle))
        self._handle = handle

        logger.info(f"Game server started on ws://{self.host}:{bound_port}")
        return True, f"Game server started on port {bound_port}", handle

    async def stop(self, handle: ServerHandle | None = None) -> tuple[bool, str]:
        """
        Stop accepting new connections.

        Established connections are left to finish on their own.

        Returns:
            Tuple of (success, message)
        """
        handle = handle or self._handle
        if handle is None or handle is not self._handle or not handle.running:
            return True, "No server running"

        logger.info("Shutting down server...")
        try:
            handle.shutdown_event.set()
            if handle.watcher is not None:
                await handle.watcher
        except Exception as e:
            logger.exception(f"Error stopping server: {e}")
            return False, f"Failed to stop server: {e}"
        finally:
            self._handle = None

        logger.info("Server stopped")
        return True, "Game server stopped"

    async def _watch_shutdown(self, handle: ServerHandle) -> None:
        """Wait for the shutdown signal, then close the listener."""
        await handle.shutdown_event.wait()
        handle.server.close(close_connections=False)
        # Let the close task run far enough to release the listening socket
        await asyncio.sleep(0)

    def get_stats(self) -> dict[str, Any]:
        """Get server statistics."""
        if not self.running:
            return {"running": False}
        return {
            "running": True,
            "port": self._handle.port,
            "session": self._handle.session.get_stats(),
        }
