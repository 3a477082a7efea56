"""
Asyncio client for the farm session server.
"""

from farm_client.client import FarmClient, ClientState
from farm_client.config import ClientSettings, settings


__all__ = [
    "FarmClient",
    "ClientState",
    "ClientSettings",
    "settings",
]
