"""
Authoritative in-memory store of the players in a session.

The store never performs I/O. Its lock is shared with the connection
registry so that join and leave can mutate both inside one critical section.
"""

import threading

from farm_shared.player import Player


class SessionStore:
    """Maps player_id -> Player for the one running session."""

    def __init__(self, lock: "threading.RLock | None" = None):
        self._players: dict[str, Player] = {}
        self._lock = lock or threading.RLock()

    def upsert(self, player: Player) -> Player | None:
        """
        Insert a player, replacing any record with the same id.

        Returns:
            The replaced record, or None if the id was new
        """
        with self._lock:
            previous = self._players.get(player.id)
            self._players[player.id] = player
            return previous

    def update_position(
        self,
        player_id: str,
        x: float,
        y: float,
        facing: str | None = None
    ) -> bool:
        """
        Move an existing player. Never creates a record.

        Returns:
            True if the player exists and was updated, False otherwise
        """
        with self._lock:
            player = self._players.get(player_id)
            if player is None:
                return False
            player.move_to(x, y, facing)
            return True

    def remove(self, player_id: str) -> Player | None:
        """Remove a player. Returns the removed record, or None if absent."""
        with self._lock:
            return self._players.pop(player_id, None)

    def get(self, player_id: str) -> Player | None:
        """Get a copy of a player's current record."""
        with self._lock:
            player = self._players.get(player_id)
            return player.copy() if player else None

    def snapshot(self) -> list[Player]:
        """Point-in-time copy of every player. Order is not guaranteed."""
        with self._lock:
            return [player.copy() for player in self._players.values()]

    def __len__(self) -> int:
        with self._lock:
            return len(self._players)

    def __contains__(self, player_id: object) -> bool:
        with self._lock:
            return player_id in self._players
