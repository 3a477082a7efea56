"""
Constants for the farm session protocol.
"""

# Network
DEFAULT_PORT = 3847  # Uncommon to avoid conflicts on a LAN host
DEFAULT_HOST = "0.0.0.0"

# Lobby
DEFAULT_LOBBY_NAME = "Local Farm"

# Spawn point used when a client does not pick one
SPAWN_X = 400.0
SPAWN_Y = 300.0

# Envelope ids look like "msg_<uuid4>"
MESSAGE_ID_PREFIX = "msg_"

# Consecutive undecodable frames tolerated before a connection is dropped
MAX_DECODE_FAILURES = 3
