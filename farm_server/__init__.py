"""
Farm multiplayer session server.

Keeps the authoritative player list for one game session and replicates
joins, leaves and position updates to every connected client over WebSockets.
"""

from farm_server.network import ServerSupervisor, ServerHandle
from farm_server.session import GameSession


__all__ = [
    "ServerSupervisor",
    "ServerHandle",
    "GameSession",
]
