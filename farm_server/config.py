"""
Server configuration loaded from environment variables.
"""
import os
from dotenv import load_dotenv

from farm_shared.constants import (
    DEFAULT_HOST,
    DEFAULT_PORT,
    DEFAULT_LOBBY_NAME,
    MAX_DECODE_FAILURES,
)

load_dotenv()

class Config:
    """Server configuration."""

    # Server settings
    HOST: str = os.getenv("SERVER_HOST", DEFAULT_HOST)
    PORT: int = int(os.getenv("SERVER_PORT", str(DEFAULT_PORT)))

    # Logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # Lobby
    LOBBY_NAME: str = os.getenv("LOBBY_NAME", DEFAULT_LOBBY_NAME)

    # Connection handling
    MAX_DECODE_FAILURES: int = int(os.getenv("MAX_DECODE_FAILURES", str(MAX_DECODE_FAILURES)))
    OUTBOUND_QUEUE_SIZE: int = int(os.getenv("OUTBOUND_QUEUE_SIZE", "256"))  # 0 = unbounded
    WRITER_DRAIN_TIMEOUT: float = float(os.getenv("WRITER_DRAIN_TIMEOUT", "1.0"))

    # WebSocket keepalive
    PING_INTERVAL: float = float(os.getenv("PING_INTERVAL", "30"))
    PING_TIMEOUT: float = float(os.getenv("PING_TIMEOUT", "10"))


config = Config()
settings = config
