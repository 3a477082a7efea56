"""
Registry of live connections, keyed by the player that owns them.
"""

import logging
import threading
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from farm_server.network.outbound import OutboundChannel


logger = logging.getLogger(__name__)


class ConnectionRegistry:
    """
    Maps player_id -> outbound channel of that player's connection.

    A player id has at most one live entry; registering again replaces it.
    """

    def __init__(self, lock: "threading.RLock | None" = None):
        self._channels: dict[str, "OutboundChannel"] = {}
        self._lock = lock or threading.RLock()

    def register(self, player_id: str, channel: "OutboundChannel") -> "OutboundChannel | None":
        """
        Register a connection for a player, replacing any prior one.

        Returns:
            The replaced channel, or None
        """
        with self._lock:
            previous = self._channels.get(player_id)
            self._channels[player_id] = channel
            if previous is not None and previous is not channel:
                logger.info(f"Connection for player {player_id} replaced by a newer join")
            return previous

    def unregister(self, player_id: str, channel: "OutboundChannel | None" = None) -> bool:
        """
        Remove a player's connection.

        If channel is given, the entry is only removed when it still
        belongs to that channel.

        Returns:
            True if an entry was removed
        """
        with self._lock:
            current = self._channels.get(player_id)
            if current is None:
                return False
            if channel is not None and current is not channel:
                return False
            del self._channels[player_id]
            return True

    def handle_for(self, player_id: str) -> "OutboundChannel | None":
        with self._lock:
            return self._channels.get(player_id)

    def all(self) -> list[tuple[str, "OutboundChannel"]]:
        """Snapshot of (player_id, channel) pairs for fan-out."""
        with self._lock:
            return list(self._channels.items())

    def __len__(self) -> int:
        with self._lock:
            return len(self._channels)

    def __contains__(self, player_id: object) -> bool:
        with self._lock:
            return player_id in self._channels
