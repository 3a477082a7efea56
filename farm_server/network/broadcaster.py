"""
Fan-out of messages to the connections in a session.
"""

import logging

from farm_server.session.connection_registry import ConnectionRegistry
from farm_shared.protocol import Envelope, serialize_message


logger = logging.getLogger(__name__)


class Broadcaster:
    """
    Serializes a message once and enqueues it on each selected connection.

    Delivery is fire-and-forget per recipient: a full or closed channel is
    logged and skipped, the remaining recipients still get the message.
    """

    def __init__(self, registry: ConnectionRegistry):
        self._registry = registry

    def broadcast_all(self, message: Envelope | dict | str) -> int:
        """
        Send a message to every registered connection.

        Returns:
            Number of connections the message was queued for
        """
        return self._fan_out(message, exclude_id=None)

    def broadcast_others(self, message: Envelope | dict | str, exclude_id: str | None) -> int:
        """
        Send a message to every registered connection except exclude_id.

        Returns:
            Number of connections the message was queued for
        """
        return self._fan_out(message, exclude_id=exclude_id)

    def send_to(self, player_id: str, message: Envelope | dict | str) -> bool:
        """Send a message to a single player's connection."""
        channel = self._registry.handle_for(player_id)
        if channel is None:
            return False
        return self._deliver(player_id, channel, serialize_message(message))

    def _fan_out(self, message: Envelope | dict | str, exclude_id: str | None) -> int:
        text = serialize_message(message)
        sent_count = 0

        for player_id, channel in self._registry.all():
            if exclude_id is not None and player_id == exclude_id:
                continue
            if self._deliver(player_id, channel, text):
                sent_count += 1

        return sent_count

    def _deliver(self, player_id: str, channel, text: str) -> bool:
        try:
            if channel.send(text):
                return True
            logger.warning(f"Failed to queue message for {player_id}")
        except Exception as e:
            logger.error(f"Failed to send message to {player_id}: {e}")
        return False
