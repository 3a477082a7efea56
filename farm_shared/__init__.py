"""
Wire model shared by the farm session server and its clients.
"""

from farm_shared.enums import MessageType, Facing, LobbyStatus
from farm_shared.player import Player, PlayerDataError
from farm_shared.protocol import (
    Envelope,
    EnvelopeDecodeError,
    PlayerJoinMessage,
    PlayerUpdateMessage,
    PlayerLeaveMessage,
    PlayerListMessage,
    LobbyInfoMessage,
    GameStartMessage,
    HostReadyMessage,
    parse_message,
    serialize_message,
)


__all__ = [
    "MessageType",
    "Facing",
    "LobbyStatus",
    "Player",
    "PlayerDataError",
    "Envelope",
    "EnvelopeDecodeError",
    "PlayerJoinMessage",
    "PlayerUpdateMessage",
    "PlayerLeaveMessage",
    "PlayerListMessage",
    "LobbyInfoMessage",
    "GameStartMessage",
    "HostReadyMessage",
    "parse_message",
    "serialize_message",
]
