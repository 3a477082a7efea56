"""
Enumerations shared by the server and clients.
"""
from enum import Enum


class MessageType(str, Enum):
    """Envelope kinds exchanged between client and server."""
    # Connection
    PLAYER_JOIN = "PLAYER_JOIN"
    PLAYER_LEAVE = "PLAYER_LEAVE"
    PLAYER_LIST = "PLAYER_LIST"  # server -> client only

    # Game state
    PLAYER_UPDATE = "PLAYER_UPDATE"
    GAME_START = "GAME_START"

    # Lobby
    LOBBY_INFO = "LOBBY_INFO"  # server -> client only

    # Host actions
    HOST_READY = "HOST_READY"

    @classmethod
    def parse(cls, value: str) -> "MessageType | None":
        """Return the matching kind, or None for an unrecognized tag."""
        try:
            return cls(value)
        except ValueError:
            return None


class Facing(str, Enum):
    """Direction a player sprite is facing."""
    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"


class LobbyStatus(str, Enum):
    """Lobby status reported in LOBBY_INFO."""
    WAITING = "waiting"
