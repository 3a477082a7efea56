"""
Session state for the farm server.

Provides the player store, the connection registry, and the GameSession
that guards both with one lock.
"""

from farm_server.session.session_store import SessionStore
from farm_server.session.connection_registry import ConnectionRegistry
from farm_server.session.game_session import GameSession


__all__ = [
    "SessionStore",
    "ConnectionRegistry",
    "GameSession",
]
