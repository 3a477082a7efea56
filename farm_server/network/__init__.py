"""
Network layer for the farm session server.

Provides the WebSocket server supervisor, per-connection handlers,
outbound channels and broadcasting.
"""

from farm_server.network.outbound import OutboundChannel
from farm_server.network.broadcaster import Broadcaster
from farm_server.network.connection_handler import ConnectionHandler, ConnectionState
from farm_server.network.supervisor import ServerSupervisor, ServerHandle
from farm_server.network.local_address import get_local_ip, get_join_url


__all__ = [
    "OutboundChannel",
    "Broadcaster",
    "ConnectionHandler",
    "ConnectionState",
    "ServerSupervisor",
    "ServerHandle",
    "get_local_ip",
    "get_join_url",
]
