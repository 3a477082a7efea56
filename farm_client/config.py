"""
Client configuration settings.
"""

import os
from dataclasses import dataclass

from farm_shared.constants import DEFAULT_PORT


@dataclass
class ClientSettings:
    """Client configuration."""

    # Server connection
    server_host: str = "localhost"
    server_port: int = DEFAULT_PORT

    # Seconds to wait for a server reply before giving up
    response_timeout: float = 5.0

    @property
    def server_url(self) -> str:
        return f"ws://{self.server_host}:{self.server_port}"


def load_settings() -> ClientSettings:
    """Load settings from environment variables."""
    return ClientSettings(
        server_host=os.getenv("FARM_SERVER_HOST", "localhost"),
        server_port=int(os.getenv("FARM_SERVER_PORT", str(DEFAULT_PORT))),
        response_timeout=float(os.getenv("FARM_RESPONSE_TIMEOUT", "5.0")),
    )


settings = load_settings()
