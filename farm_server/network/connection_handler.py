"""
Per-connection handler.

Reads envelopes from one websocket in arrival order, applies them to the
shared GameSession and asks the Broadcaster to notify peers. Outbound frames
go through the connection's OutboundChannel and are written by a paired
writer task, so a slow send never delays inbound processing.

States:
    CONNECTING -> AWAITING_IDENTITY -> ACTIVE -> CLOSING -> CLOSED
"""

import asyncio
import logging
from enum import Enum, auto
from typing import Callable

import websockets

from farm_server.config import settings
from farm_server.network.broadcaster import Broadcaster
from farm_server.network.outbound import OutboundChannel
from farm_server.session.game_session import GameSession
from farm_shared.enums import MessageType
from farm_shared.player import Player, PlayerDataError, parse_coordinate, parse_facing
from farm_shared.protocol import (
    Envelope,
    EnvelopeDecodeError,
    GameStartMessage,
    LobbyInfoMessage,
    PlayerListMessage,
    parse_message,
)


logger = logging.getLogger(__name__)


class ConnectionState(Enum):
    """Lifecycle of a single client connection."""
    CONNECTING = auto()
    AWAITING_IDENTITY = auto()
    ACTIVE = auto()
    CLOSING = auto()
    CLOSED = auto()


def describe_peer(websocket) -> str:
    """Printable remote address of a websocket, for logs."""
    address = getattr(websocket, "remote_address", None)
    if isinstance(address, tuple) and len(address) >= 2:
        return f"{address[0]}:{address[1]}"
    return str(address) if address else "unknown peer"


class ConnectionHandler:
    """
    Drives one connection through its lifecycle.

    Frame handlers return True to keep reading and False to end the read
    loop. Cleanup runs exactly once, whatever ended the loop.
    """

    def __init__(
        self,
        websocket,
        session: GameSession,
        broadcaster: Broadcaster,
        config=settings
    ):
        self._websocket = websocket
        self._session = session
        self._broadcaster = broadcaster
        self._config = config

        self.peer = describe_peer(websocket)
        self.channel = OutboundChannel(owner=self.peer, maxsize=config.OUTBOUND_QUEUE_SIZE)
        self.player_id: str | None = None
        self.state = ConnectionState.CONNECTING

        self._decode_failures = 0

    # =========================================================================
    # Connection Lifecycle
    # =========================================================================

    async def run(self) -> None:
        """
        Process the connection until it leaves, fails or closes.

        The websocket handed in has already completed the upgrade handshake.
        """
        self._set_state(ConnectionState.AWAITING_IDENTITY)
        writer = asyncio.create_task(self.channel.drain(self._websocket))

        try:
            async for raw_message in self._websocket:
                if not self.handle_frame(raw_message):
                    break

        except websockets.ConnectionClosed:
            logger.debug(f"Connection closed for {self.player_id or self.peer}")
        except Exception as e:
            logger.exception(f"Error handling client {self.player_id or self.peer}: {e}")
        finally:
            self.close()
            await self.channel.shutdown(writer, self._config.WRITER_DRAIN_TIMEOUT)

    def close(self) -> None:
        """
        Remove this connection's player from the session and tell the others.

        Idempotent: only the first call has any effect.
        """
        if self.state == ConnectionState.CLOSED:
            return

        self._set_state(ConnectionState.CLOSING)
        if self.player_id:
            self._leave_session()
        self._set_state(ConnectionState.CLOSED)

        logger.info(f"Connection {self.peer} closed (player {self.player_id})")

    def _set_state(self, state: ConnectionState) -> None:
        if self.state != state:
            logger.debug(f"{self.peer}: {self.state.name} -> {state.name}")
            self.state = state

    # =========================================================================
    # Frame Dispatch
    # =========================================================================

    def handle_frame(self, raw_message: str | bytes) -> bool:
        """
        Handle one inbound frame.

        Returns:
            False if the read loop should stop, True otherwise
        """
        if self.state in (ConnectionState.CLOSING, ConnectionState.CLOSED):
            return False

        try:
            if isinstance(raw_message, bytes):
                raw_message = raw_message.decode("utf-8")
            envelope = parse_message(raw_message)
        except (EnvelopeDecodeError, UnicodeDecodeError) as e:
            return self._on_decode_failure(e)

        self._decode_failures = 0

        msg_type = envelope.message_type
        if msg_type is None:
            logger.warning(f"Unhandled message type from {self.peer}: {envelope.type}")
            return True

        handler = self._get_handler(msg_type)
        if handler is None:
            logger.warning(f"Ignoring server-only message {msg_type.value} from {self.peer}")
            return True

        logger.debug(f"{msg_type.value} from {self.player_id or self.peer}")
        return handler(envelope, raw_message)

    def _get_handler(self, message_type: MessageType) -> Callable[[Envelope, str], bool] | None:
        """Get the handler method for a message type."""
        handlers = {
            MessageType.PLAYER_JOIN: self._handle_join,
            MessageType.PLAYER_UPDATE: self._handle_update,
            MessageType.PLAYER_LEAVE: self._handle_leave,
            MessageType.GAME_START: self._handle_game_start,
            MessageType.HOST_READY: self._handle_host_ready,
        }
        return handlers.get(message_type)

    def _on_decode_failure(self, error: Exception) -> bool:
        self._decode_failures += 1
        logger.warning(
            f"Dropping undecodable frame from {self.peer} "
            f"({self._decode_failures}/{self._config.MAX_DECODE_FAILURES}): {error}"
        )
        if self._decode_failures >= self._config.MAX_DECODE_FAILURES:
            logger.warning(f"Too many undecodable frames from {self.peer}, closing connection")
            return False
        return True

    # =========================================================================
    # Message Handlers
    # =========================================================================

    def _handle_join(self, envelope: Envelope, raw_message: str) -> bool:
        try:
            player = Player.from_dict(envelope.data)
        except PlayerDataError as e:
            logger.warning(f"Failed to parse PLAYER_JOIN data from {self.peer}: {e}")
            return True

        if self.player_id is not None and player.id != self.player_id:
            logger.warning(
                f"Connection {self.peer} already joined as {self.player_id}, "
                f"ignoring join as {player.id}"
            )
            return True

        players = self._session.join(player, self.channel)
        self.player_id = player.id
        self._set_state(ConnectionState.ACTIVE)

        self._broadcaster.broadcast_all(PlayerListMessage.create(players))

        lobby_info = LobbyInfoMessage.create(
            farm_name=self._config.LOBBY_NAME,
            player_count=len(players),
        )
        self._broadcaster.send_to(self.player_id, lobby_info)
        return True

    def _handle_update(self, envelope: Envelope, raw_message: str) -> bool:
        if self.player_id is None:
            logger.debug(f"Ignoring PLAYER_UPDATE from {self.peer} before join")
            return True

        data = envelope.data
        try:
            if not isinstance(data, dict):
                raise PlayerDataError("update payload must be an object")
            x = parse_coordinate(data, "x")
            y = parse_coordinate(data, "y")
            facing = parse_facing(data)
        except PlayerDataError as e:
            logger.warning(f"Dropping PLAYER_UPDATE from {self.player_id}: {e}")
            return True

        if not self._session.players.update_position(self.player_id, x, y, facing):
            logger.debug(f"PLAYER_UPDATE for {self.player_id} who is not in the session")

        # Forward the original frame so its id and timestamp survive
        self._broadcaster.broadcast_others(raw_message, exclude_id=self.player_id)
        return True

    def _handle_game_start(self, envelope: Envelope, raw_message: str) -> bool:
        if self.player_id is None:
            logger.debug(f"Ignoring GAME_START from {self.peer} before join")
            return True

        logger.info(f"Game started by {self.player_id}")
        self._broadcaster.broadcast_all(GameStartMessage.create(started_by=self.player_id))
        return True

    def _handle_host_ready(self, envelope: Envelope, raw_message: str) -> bool:
        if self.player_id is None:
            logger.debug(f"Ignoring HOST_READY from {self.peer} before join")
            return True

        self._broadcaster.broadcast_others(raw_message, exclude_id=self.player_id)
        return True

    def _handle_leave(self, envelope: Envelope, raw_message: str) -> bool:
        self._set_state(ConnectionState.CLOSING)
        if self.player_id is None:
            logger.info(f"Connection {self.peer} left before joining")
            return False

        self._leave_session()
        return False

    def _leave_session(self) -> None:
        players = self._session.leave(self.player_id, self.channel)
        if players is not None:
            self._broadcaster.broadcast_all(PlayerListMessage.create(players))
