"""
Message protocol for client-server communication.

Every frame is a JSON envelope:

    {"type": ..., "data": ..., "player_id": ..., "timestamp": ..., "id": ...}

"type" is one of MessageType, "data" is kind-specific, "timestamp" is
milliseconds since the epoch and "id" is a unique "msg_<uuid>" string.
"""

import json
import time
import uuid
from dataclasses import dataclass, field
from typing import Any, Iterable

from farm_shared.constants import MESSAGE_ID_PREFIX
from farm_shared.enums import MessageType, LobbyStatus
from farm_shared.player import Player


class EnvelopeDecodeError(ValueError):
    """Raised when a frame cannot be decoded as an envelope wrapper."""


def now_millis() -> int:
    """Current wall-clock time in milliseconds since the epoch."""
    return int(time.time() * 1000)


def new_message_id() -> str:
    return f"{MESSAGE_ID_PREFIX}{uuid.uuid4()}"


@dataclass
class Envelope:
    """Base message structure for all client-server communication."""
    type: str
    data: Any = field(default_factory=dict)
    player_id: str | None = None
    timestamp: int = field(default_factory=now_millis)
    id: str = field(default_factory=new_message_id)

    def __post_init__(self) -> None:
        if isinstance(self.type, MessageType):
            self.type = self.type.value

    @property
    def message_type(self) -> MessageType | None:
        """The envelope kind, or None if the tag is not recognized."""
        return MessageType.parse(self.type)

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "type": self.type,
            "data": self.data,
            "player_id": self.player_id,
            "timestamp": self.timestamp,
            "id": self.id,
        }

    def to_json(self) -> str:
        """Serialize envelope to JSON string."""
        return json.dumps(self.to_dict())

    @classmethod
    def from_dict(cls, raw: Any) -> "Envelope":
        """
        Create an envelope from a decoded JSON value.

        Only "type" is required. Missing "data" defaults to an empty object,
        missing "timestamp" and "id" are filled in with server values.

        Raises:
            EnvelopeDecodeError: if the value is not a valid envelope wrapper
        """
        if not isinstance(raw, dict):
            raise EnvelopeDecodeError(f"envelope must be a JSON object, got {type(raw).__name__}")

        msg_type = raw.get("type")
        if not isinstance(msg_type, str) or not msg_type:
            raise EnvelopeDecodeError("envelope 'type' must be a non-empty string")

        player_id = raw.get("player_id")
        if player_id is not None and not isinstance(player_id, str):
            raise EnvelopeDecodeError("envelope 'player_id' must be a string or null")

        timestamp = raw.get("timestamp")
        if timestamp is None:
            timestamp = now_millis()
        elif not isinstance(timestamp, int) or isinstance(timestamp, bool):
            raise EnvelopeDecodeError("envelope 'timestamp' must be an integer")

        message_id = raw.get("id")
        if message_id is None:
            message_id = new_message_id()
        elif not isinstance(message_id, str):
            raise EnvelopeDecodeError("envelope 'id' must be a string")

        data = raw.get("data")
        return cls(
            type=msg_type,
            data={} if data is None else data,
            player_id=player_id,
            timestamp=timestamp,
            id=message_id,
        )

    @classmethod
    def from_json(cls, json_str: str | bytes) -> "Envelope":
        """
        Deserialize an envelope from a text (or UTF-8 binary) frame.

        Raises:
            EnvelopeDecodeError: on invalid JSON or an invalid wrapper
        """
        try:
            raw = json.loads(json_str)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise EnvelopeDecodeError(f"invalid JSON: {e}") from e
        return cls.from_dict(raw)


# =============================================================================
# Client -> Server
# =============================================================================

@dataclass
class PlayerJoinMessage(Envelope):
    """Announce a player joining the session."""
    type: str = MessageType.PLAYER_JOIN.value

    @classmethod
    def create(cls, player: Player) -> "PlayerJoinMessage":
        return cls(data=player.to_dict(), player_id=player.id)


@dataclass
class PlayerUpdateMessage(Envelope):
    """Position update for the sending player."""
    type: str = MessageType.PLAYER_UPDATE.value

    @classmethod
    def create(
        cls,
        player_id: str,
        x: float,
        y: float,
        facing: str | None = None
    ) -> "PlayerUpdateMessage":
        data = {"x": x, "y": y}
        if facing is not None:
            data["facing"] = facing
        return cls(data=data, player_id=player_id)


@dataclass
class PlayerLeaveMessage(Envelope):
    """Leave the session."""
    type: str = MessageType.PLAYER_LEAVE.value

    @classmethod
    def create(cls, player_id: str | None = None) -> "PlayerLeaveMessage":
        return cls(player_id=player_id)


@dataclass
class HostReadyMessage(Envelope):
    """Host toggled its ready state. Relayed to everyone else."""
    type: str = MessageType.HOST_READY.value

    @classmethod
    def create(cls, ready: bool, player_id: str | None = None) -> "HostReadyMessage":
        return cls(data={"ready": ready, "timestamp": now_millis()}, player_id=player_id)


# =============================================================================
# Server -> Client
# =============================================================================

@dataclass
class PlayerListMessage(Envelope):
    """Full list of players in the session."""
    type: str = MessageType.PLAYER_LIST.value

    @classmethod
    def create(cls, players: Iterable[Player]) -> "PlayerListMessage":
        return cls(data={"players": [p.to_dict() for p in players]})


@dataclass
class LobbyInfoMessage(Envelope):
    """Lobby summary sent to a player right after it joins."""
    type: str = MessageType.LOBBY_INFO.value

    @classmethod
    def create(
        cls,
        farm_name: str,
        player_count: int,
        status: str = LobbyStatus.WAITING.value
    ) -> "LobbyInfoMessage":
        return cls(data={
            "farmName": farm_name,
            "status": status,
            "playerCount": player_count,
        })


@dataclass
class GameStartMessage(Envelope):
    """Game start notification. Sent by clients and re-issued by the server."""
    type: str = MessageType.GAME_START.value

    @classmethod
    def create(cls, started_by: str | None = None) -> "GameStartMessage":
        timestamp = now_millis()
        return cls(
            data={"startedBy": started_by, "timestamp": timestamp},
            player_id=started_by,
            timestamp=timestamp,
        )


# =============================================================================
# Helper function for parsing incoming messages
# =============================================================================

def parse_message(json_str: str | bytes) -> Envelope:
    """
    Parse a frame into an Envelope.

    The connection handler uses the type field to decide how to process it.
    """
    return Envelope.from_json(json_str)


def serialize_message(message: Envelope | dict | str) -> str:
    """Serialize a message once; strings are assumed to be encoded already."""
    if isinstance(message, Envelope):
        return message.to_json()
    if isinstance(message, dict):
        return json.dumps(message)
    return message
