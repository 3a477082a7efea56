#!/usr/bin/env python3
"""
Smoke script simulating two players against a running server.

Joins Alice and Bob, moves Alice, starts the game and leaves.

Usage:
    python -m farm_server &
    python demo_two_players.py [--host HOST] [--port PORT]
"""

import argparse
import asyncio
import sys

from farm_client import FarmClient
from farm_shared.constants import DEFAULT_PORT
from farm_shared.enums import MessageType


def show(name: str, messages: list[dict]) -> None:
    for msg in messages:
        print(f"[{name}] → {msg.get('type')}: {str(msg.get('data', {}))[:100]}")


async def run(host: str, port: int) -> bool:
    url = f"ws://{host}:{port}"
    alice = FarmClient(url, player_id="p1")
    bob = FarmClient(url, player_id="p2")

    if not await alice.connect() or not await bob.connect():
        print(f"✗ Could not connect to {url}")
        return False

    try:
        await alice.join("Alice", 400, 300)
        lobby = await alice.wait_for(MessageType.LOBBY_INFO)
        print(f"[Alice] ✓ Joined {lobby['data']['farmName']} ({lobby['data']['playerCount']} player)")

        await bob.join("Bob", 420, 300)
        await bob.wait_for(MessageType.LOBBY_INFO)
        show("Alice", await alice.drain())
        print(f"[Bob] ✓ Joined, sees {len(bob.players)} players")

        sent = await alice.update_position(410, 305, "right")
        update = await bob.wait_for(MessageType.PLAYER_UPDATE)
        ok = update["id"] == sent.id
        print(f"[Bob] {'✓' if ok else '✗'} Received Alice's move to ({update['data']['x']}, {update['data']['y']})")

        await alice.start_game()
        await bob.wait_for(MessageType.GAME_START)
        print("[Bob] ✓ Game started")

        await alice.leave()
        listing = await bob.wait_for(MessageType.PLAYER_LIST)
        remaining = [p["id"] for p in listing["data"]["players"]]
        print(f"[Bob] ✓ Alice left, remaining: {remaining}")
        return ok and remaining == ["p2"]

    except asyncio.TimeoutError:
        print("✗ Timed out waiting for the server")
        return False
    finally:
        await alice.disconnect()
        await bob.disconnect()


def main() -> int:
    parser = argparse.ArgumentParser(description="Two-player smoke test")
    parser.add_argument("--host", default="localhost")
    parser.add_argument("--port", type=int, default=DEFAULT_PORT)
    args = parser.parse_args()

    return 0 if asyncio.run(run(args.host, args.port)) else 1


if __name__ == "__main__":
    sys.exit(main())
