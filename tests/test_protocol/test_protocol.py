"""
Test suite for the shared wire model: envelopes, typed messages and
player payload validation.

Run from project root: python -m pytest tests/test_protocol -v
Or run directly: python tests/test_protocol/test_protocol.py
"""

import json
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from harness import (
    SuiteResults,
    assert_test,
    print_header,
    print_subheader,
    run_suites,
)


def test_envelope() -> None:
    """Test Envelope decoding and encoding."""
    print_header("ENVELOPE TESTS")
    results = SuiteResults()

    from farm_shared.protocol import Envelope, EnvelopeDecodeError, parse_message
    from farm_shared.enums import MessageType

    print_subheader("Decoding")

    raw = json.dumps({
        "type": "PLAYER_UPDATE",
        "data": {"x": 1, "y": 2},
        "player_id": "p1",
        "timestamp": 1700000000000,
        "id": "msg_abc",
    })
    env = parse_message(raw)
    results.add(assert_test(
        env.type == "PLAYER_UPDATE" and env.message_type == MessageType.PLAYER_UPDATE,
        "Kind decoded",
        f"Wrong kind: {env.type}"
    ))
    results.add(assert_test(
        env.player_id == "p1" and env.timestamp == 1700000000000 and env.id == "msg_abc",
        "Origin, timestamp and id preserved",
        f"Fields lost: {env}"
    ))

    # Clients may omit everything but the type
    env = parse_message('{"type": "PLAYER_LEAVE"}')
    results.add(assert_test(
        env.data == {} and env.player_id is None and env.id.startswith("msg_") and env.timestamp > 0,
        "Missing optional fields defaulted",
        f"Defaults wrong: {env}"
    ))

    env = parse_message('{"type": "SOMETHING_ELSE", "data": {}}')
    results.add(assert_test(
        env.message_type is None,
        "Unknown kind decodes with message_type None",
        "Unknown kind not recognized as unknown"
    ))

    print_subheader("Malformed Wrappers")

    bad_frames = [
        "not json",
        "[1, 2, 3]",
        '"PLAYER_JOIN"',
        '{"data": {}}',
        '{"type": 5}',
        '{"type": "PLAYER_JOIN", "timestamp": "yesterday"}',
        '{"type": "PLAYER_JOIN", "timestamp": true}',
        '{"type": "PLAYER_JOIN", "id": 7}',
        '{"type": "PLAYER_JOIN", "player_id": 7}',
    ]
    rejected = 0
    for frame in bad_frames:
        try:
            parse_message(frame)
        except EnvelopeDecodeError:
            rejected += 1
    results.add(assert_test(
        rejected == len(bad_frames),
        f"All {len(bad_frames)} malformed wrappers rejected",
        f"Only {rejected}/{len(bad_frames)} rejected"
    ))

    print_subheader("Encoding")

    env = Envelope(type=MessageType.HOST_READY, data={"ready": True}, player_id="host")
    encoded = json.loads(env.to_json())
    results.add(assert_test(
        set(encoded) == {"type", "data", "player_id", "timestamp", "id"} and encoded["type"] == "HOST_READY",
        "Wire shape has exactly the five envelope fields",
        f"Wrong wire shape: {encoded}"
    ))

    other = Envelope(type=MessageType.HOST_READY)
    results.add(assert_test(
        other.id != env.id,
        "Message ids are unique",
        "Duplicate message id generated"
    ))

    assert results.failed == 0


def test_player() -> None:
    """Test Player payload validation."""
    print_header("PLAYER TESTS")
    results = SuiteResults()

    from farm_shared.player import Player, PlayerDataError

    print_subheader("Valid Payloads")

    player = Player.from_dict({"id": "p1", "name": "Alice", "x": 400, "y": 300, "connected": True})
    results.add(assert_test(
        player.id == "p1" and player.x == 400.0 and player.y == 300.0 and player.facing == "down",
        "Join payload parsed with default facing",
        f"Parsed wrong: {player}"
    ))

    player = Player.from_dict({"id": "p2", "name": "Bob", "x": 1.5, "y": -2, "role": "tiller", "facing": "up"})
    results.add(assert_test(
        player.role == "tiller" and player.facing == "up" and player.connected,
        "Optional fields parsed, connected defaults to True",
        f"Optional fields wrong: {player}"
    ))

    player = Player.from_dict({"id": "p3", "name": "Carol", "x": 0, "y": 0, "facing": None})
    results.add(assert_test(
        player.facing == "down",
        "Null facing falls back to down",
        f"Null facing parsed as {player.facing!r}"
    ))

    payload = player.to_dict()
    results.add(assert_test(
        {"id", "name", "x", "y", "connected"} <= set(payload),
        "Wire payload carries id, name, x, y, connected",
        f"Payload missing fields: {payload}"
    ))

    print_subheader("Invalid Payloads")

    bad_payloads = [
        None,
        [],
        {"name": "NoId", "x": 0, "y": 0},
        {"id": "", "name": "Empty", "x": 0, "y": 0},
        {"id": "p", "name": "NoX", "y": 0},
        {"id": "p", "name": "StrX", "x": "1", "y": 0},
        {"id": "p", "name": "BoolY", "x": 0, "y": True},
        {"id": "p", "name": "Inf", "x": float("inf"), "y": 0},
        {"id": "p", "name": 5, "x": 0, "y": 0},
        {"id": "p", "name": "C", "x": 0, "y": 0, "connected": "yes"},
        {"id": "p", "name": "R", "x": 0, "y": 0, "role": 3},
        {"id": "p", "name": "F", "x": 0, "y": 0, "facing": "sideways"},
        {"id": "p", "name": "G", "x": 0, "y": 0, "facing": 3},
    ]
    rejected = 0
    for payload in bad_payloads:
        try:
            Player.from_dict(payload)
        except PlayerDataError:
            rejected += 1
    results.add(assert_test(
        rejected == len(bad_payloads),
        f"All {len(bad_payloads)} invalid player payloads rejected",
        f"Only {rejected}/{len(bad_payloads)} rejected"
    ))

    assert results.failed == 0


def test_typed_messages() -> None:
    """Test the message builders."""
    print_header("TYPED MESSAGE TESTS")
    results = SuiteResults()

    from farm_shared.player import Player
    from farm_shared.protocol import (
        LobbyInfoMessage,
        PlayerListMessage,
        GameStartMessage,
        PlayerUpdateMessage,
        serialize_message,
    )

    players = [
        Player(id="p1", name="Alice", x=400, y=300),
        Player(id="p2", name="Bob", x=10, y=20),
    ]
    msg = PlayerListMessage.create(players)
    results.add(assert_test(
        msg.type == "PLAYER_LIST" and [p["id"] for p in msg.data["players"]] == ["p1", "p2"],
        "PLAYER_LIST carries every player",
        f"Wrong list: {msg.data}"
    ))

    msg = LobbyInfoMessage.create("Local Farm", 3)
    results.add(assert_test(
        msg.data == {"farmName": "Local Farm", "status": "waiting", "playerCount": 3},
        "LOBBY_INFO data shape",
        f"Wrong lobby info: {msg.data}"
    ))

    msg = GameStartMessage.create(started_by="p1")
    results.add(assert_test(
        msg.type == "GAME_START" and msg.data["startedBy"] == "p1" and msg.data["timestamp"] == msg.timestamp,
        "GAME_START stamped with server time",
        f"Wrong game start: {msg}"
    ))

    msg = PlayerUpdateMessage.create("p1", 1.0, 2.0)
    results.add(assert_test(
        msg.data == {"x": 1.0, "y": 2.0} and msg.player_id == "p1",
        "PLAYER_UPDATE omits facing when not given",
        f"Wrong update: {msg.data}"
    ))

    results.add(assert_test(
        serialize_message("already encoded") == "already encoded"
        and json.loads(serialize_message({"type": "X"})) == {"type": "X"},
        "serialize_message passes strings through and encodes dicts",
        "serialize_message mishandled input"
    ))

    assert results.failed == 0


def run_all_tests() -> bool:
    return run_suites("FARM PROTOCOL TEST SUITE", [
        ("Envelope", test_envelope),
        ("Player", test_player),
        ("Typed Messages", test_typed_messages),
    ])


if __name__ == "__main__":
    success = run_all_tests()
    sys.exit(0 if success else 1)
