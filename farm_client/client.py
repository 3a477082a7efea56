"""
WebSocket client for connecting to the farm session server.

Handles connection, message passing and a local view of the lobby.
"""

import asyncio
import json
import logging
import uuid
from enum import Enum, auto
from typing import Callable, Optional

import websockets
from websockets.asyncio.client import ClientConnection, connect

from farm_client.config import settings
from farm_shared.constants import SPAWN_X, SPAWN_Y
from farm_shared.enums import MessageType
from farm_shared.player import Player
from farm_shared.protocol import (
    Envelope,
    GameStartMessage,
    HostReadyMessage,
    PlayerJoinMessage,
    PlayerLeaveMessage,
    PlayerUpdateMessage,
)


logger = logging.getLogger(__name__)


class ClientState(Enum):
    """Connection state."""
    DISCONNECTED = auto()
    CONNECTED = auto()
    JOINED = auto()


class FarmClient:
    """
    Client for one player in a farm session.

    Received messages are kept in arrival order and can be read with
    recv()/wait_for(). The latest PLAYER_LIST and LOBBY_INFO are also
    tracked in `players` and `lobby_info`.
    """

    def __init__(
        self,
        url: str | None = None,
        player_id: str | None = None,
        on_message: Callable[[dict], None] | None = None
    ):
        self.url = url or settings.server_url
        self.player_id = player_id or f"player_{uuid.uuid4().hex[:12]}"
        self.player_name: Optional[str] = None

        self.players: dict[str, dict] = {}
        self.lobby_info: Optional[dict] = None

        self._on_message = on_message
        self._websocket: Optional[ClientConnection] = None
        self._state = ClientState.DISCONNECTED
        self._inbox: asyncio.Queue[dict] = asyncio.Queue()
        self._receive_task: Optional[asyncio.Task] = None

    @property
    def state(self) -> ClientState:
        return self._state

    @property
    def is_connected(self) -> bool:
        return self._state != ClientState.DISCONNECTED

    async def connect(self) -> bool:
        """
        Open the websocket connection.

        Returns:
            True if connection successful
        """
        if self.is_connected:
            return True

        try:
            self._websocket = await connect(self.url)
        except (OSError, websockets.InvalidHandshake) as e:
            logger.error(f"Connection to {self.url} failed: {e}")
            return False

        self._state = ClientState.CONNECTED
        self._receive_task = asyncio.create_task(self._receive_loop())
        logger.info(f"Connected to {self.url}")
        return True

    async def disconnect(self) -> None:
        """Close the connection without sending PLAYER_LEAVE."""
        if self._websocket:
            await self._websocket.close()
            self._websocket = None

        if self._receive_task:
            self._receive_task.cancel()
            try:
                await self._receive_task
            except asyncio.CancelledError:
                pass
            self._receive_task = None

        self._state = ClientState.DISCONNECTED
        logger.info("Disconnected from server")

    async def _receive_loop(self) -> None:
        """Receive messages from server."""
        try:
            async for raw_message in self._websocket:
                try:
                    data = json.loads(raw_message)
                except json.JSONDecodeError as e:
                    logger.error(f"Failed to parse message: {e}")
                    continue
                self._handle_message(data)

        except websockets.ConnectionClosed:
            logger.info("Connection closed by server")
        finally:
            self._state = ClientState.DISCONNECTED

    def _handle_message(self, data: dict) -> None:
        """Update local state from a server message and queue it."""
        msg_type = data.get("type")

        if msg_type == MessageType.PLAYER_LIST.value:
            players = data.get("data", {}).get("players", [])
            self.players = {p["id"]: p for p in players}

        elif msg_type == MessageType.LOBBY_INFO.value:
            self.lobby_info = data.get("data")

        elif msg_type == MessageType.PLAYER_UPDATE.value:
            origin = data.get("player_id")
            update = data.get("data", {})
            if origin in self.players:
                self.players[origin].update({k: v for k, v in update.items() if k in ("x", "y", "facing")})

        self._inbox.put_nowait(data)
        if self._on_message:
            self._on_message(data)

    # =========================================================================
    # Sending
    # =========================================================================

    async def send(self, message: Envelope | dict | str) -> None:
        """Send a message to the server."""
        if not self._websocket:
            raise ConnectionError("Not connected to server")

        if isinstance(message, Envelope):
            data = message.to_json()
        elif isinstance(message, dict):
            data = json.dumps(message)
        else:
            data = message

        await self._websocket.send(data)

    async def join(
        self,
        player_name: str,
        x: float = SPAWN_X,
        y: float = SPAWN_Y,
        role: str | None = None
    ) -> Envelope:
        """Join the session as this client's player."""
        self.player_name = player_name
        player = Player(id=self.player_id, name=player_name, x=x, y=y, role=role)
        message = PlayerJoinMessage.create(player)
        await self.send(message)
        self._state = ClientState.JOINED
        return message

    async def update_position(self, x: float, y: float, facing: str | None = None) -> Envelope:
        """Send a position update. Returns the envelope sent."""
        message = PlayerUpdateMessage.create(self.player_id, x, y, facing)
        await self.send(message)
        return message

    async def start_game(self) -> Envelope:
        message = GameStartMessage.create(started_by=self.player_id)
        await self.send(message)
        return message

    async def host_ready(self, ready: bool = True) -> Envelope:
        message = HostReadyMessage.create(ready, player_id=self.player_id)
        await self.send(message)
        return message

    async def leave(self) -> None:
        """Leave the session. The server ends the session for this connection."""
        await self.send(PlayerLeaveMessage.create(self.player_id))
        self._state = ClientState.CONNECTED

    # =========================================================================
    # Receiving
    # =========================================================================

    async def recv(self, timeout: float | None = None) -> dict:
        """
        Next received message.

        Raises:
            asyncio.TimeoutError: if nothing arrives in time
        """
        timeout = settings.response_timeout if timeout is None else timeout
        return await asyncio.wait_for(self._inbox.get(), timeout)

    async def wait_for(self, msg_type: MessageType | str, timeout: float | None = None) -> dict:
        """
        Skip messages until one of the given type arrives.

        Raises:
            asyncio.TimeoutError: if none arrives in time
        """
        wanted = msg_type.value if isinstance(msg_type, MessageType) else msg_type
        timeout = settings.response_timeout if timeout is None else timeout

        async def _wait() -> dict:
            while True:
                message = await self._inbox.get()
                if message.get("type") == wanted:
                    return message

        return await asyncio.wait_for(_wait(), timeout)

    async def drain(self, timeout: float = 0.3) -> list[dict]:
        """Read any pending messages until none arrive for timeout seconds."""
        messages = []
        while True:
            try:
                messages.append(await asyncio.wait_for(self._inbox.get(), timeout))
            except asyncio.TimeoutError:
                return messages
