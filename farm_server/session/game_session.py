"""
The shared state of one in-progress game session.

Combines the session store and the connection registry under a single lock.
Join and leave touch both maps in one critical section and return the
player snapshot taken inside it, so a PLAYER_LIST built from the result never
shows a player without its connection or the reverse.
"""

import logging
import threading
from typing import Any, TYPE_CHECKING

from farm_shared.player import Player
from farm_server.session.session_store import SessionStore
from farm_server.session.connection_registry import ConnectionRegistry

if TYPE_CHECKING:
    from farm_server.network.outbound import OutboundChannel


logger = logging.getLogger(__name__)


class GameSession:
    """
    Authoritative session state shared by every connection handler.

    All methods are synchronous and never block on I/O. Callers send
    network messages after the call returns, using the returned snapshot.
    """

    def __init__(self):
        self._lock = threading.RLock()
        self.players = SessionStore(self._lock)
        self.connections = ConnectionRegistry(self._lock)

    def join(self, player: Player, channel: "OutboundChannel") -> list[Player]:
        """
        Add (or replace) a player and bind it to a connection.

        Returns:
            Snapshot of all players taken after the join
        """
        with self._lock:
            replaced = self.players.upsert(player)
            self.connections.register(player.id, channel)
            snapshot = self.players.snapshot()

        if replaced:
            logger.info(f"Player {player.name} ({player.id}) rejoined, record replaced")
        else:
            logger.info(f"Player {player.name} ({player.id}) joined. Total players: {len(snapshot)}")
        return snapshot

    def leave(
        self,
        player_id: str,
        channel: "OutboundChannel | None" = None
    ) -> list[Player] | None:
        """
        Remove a player and its connection.

        Idempotent: a second call for the same player is a no-op. If channel
        is given and the player id is now registered to another connection
        (a newer join won), nothing is removed.

        Returns:
            Snapshot of remaining players, or None if nothing was removed
        """
        with self._lock:
            current = self.connections.handle_for(player_id)
            if channel is not None and current is not None and current is not channel:
                logger.debug(f"Player {player_id} now owned by another connection, skipping leave")
                return None

            removed = self.players.remove(player_id)
            unregistered = self.connections.unregister(player_id)
            if removed is None and not unregistered:
                return None
            snapshot = self.players.snapshot()

        logger.info(f"Player {player_id} left. Total players: {len(snapshot)}")
        return snapshot

    @property
    def player_count(self) -> int:
        return len(self.players)

    def get_stats(self) -> dict[str, Any]:
        """Get session statistics."""
        with self._lock:
            return {
                "total_players": len(self.players),
                "total_connections": len(self.connections),
            }
