"""
Local network address lookup, shown to the host so others can join.
"""

import logging
import socket


logger = logging.getLogger(__name__)

LOOPBACK = "127.0.0.1"


def get_local_ip() -> str:
    """
    Return the LAN IPv4 address of this machine.

    Connecting a UDP socket picks the outbound interface without sending
    anything. Falls back to loopback when there is no route.
    """
    sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    try:
        sock.connect(("10.255.255.255", 1))
        return sock.getsockname()[0]
    except OSError as e:
        logger.warning(f"Failed to get local IP, using {LOOPBACK}: {e}")
        return LOOPBACK
    finally:
        sock.close()


def get_join_url(port: int) -> str:
    """WebSocket URL other players on the LAN can connect to."""
    return f"ws://{get_local_ip()}:{port}"
