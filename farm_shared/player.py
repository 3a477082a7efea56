"""
Player record replicated to every participant in a session.
"""
import math
from dataclasses import dataclass, asdict
from typing import Any

from farm_shared.enums import Facing


class PlayerDataError(ValueError):
    """Raised when a player payload cannot be turned into a Player."""


def _is_number(value: Any) -> bool:
    # bool is an int subclass but never a valid coordinate
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def parse_coordinate(data: dict, key: str) -> float:
    """
    Read a finite numeric coordinate from a payload.

    Raises:
        PlayerDataError: if the key is missing or not a finite number
    """
    if key not in data:
        raise PlayerDataError(f"missing field '{key}'")
    value = data[key]
    if not _is_number(value) or not math.isfinite(value):
        raise PlayerDataError(f"field '{key}' must be a finite number, got {value!r}")
    return float(value)


def parse_facing(data: dict) -> str | None:
    """
    Read an optional facing direction from a payload.

    Raises:
        PlayerDataError: if the value is not one of the Facing directions
    """
    facing = data.get("facing")
    if facing is None:
        return None
    try:
        return Facing(facing).value
    except ValueError:
        raise PlayerDataError(f"field 'facing' must be one of up, down, left, right, got {facing!r}")


@dataclass
class Player:
    """Represents a player in the session."""

    id: str
    name: str
    x: float
    y: float
    facing: str = Facing.DOWN.value
    connected: bool = True
    role: str | None = None

    def move_to(self, x: float, y: float, facing: str | None = None) -> None:
        """Move the player, optionally turning to a new facing."""
        self.x = x
        self.y = y
        if facing is not None:
            self.facing = facing

    def copy(self) -> "Player":
        return Player(**asdict(self))

    def to_dict(self) -> dict:
        """Convert to the wire payload shape."""
        return {
            "id": self.id,
            "name": self.name,
            "x": self.x,
            "y": self.y,
            "facing": self.facing,
            "connected": self.connected,
            "role": self.role,
        }

    @classmethod
    def from_dict(cls, data: Any) -> "Player":
        """
        Create a player from a PLAYER_JOIN payload.

        Required: id (non-empty string), name (string), x and y (numbers).
        Optional: connected (bool), facing (up/down/left/right), role (string or null).

        Raises:
            PlayerDataError: if the payload does not describe a valid player
        """
        if not isinstance(data, dict):
            raise PlayerDataError(f"player payload must be an object, got {type(data).__name__}")

        player_id = data.get("id")
        if not isinstance(player_id, str) or not player_id:
            raise PlayerDataError("field 'id' must be a non-empty string")

        name = data.get("name")
        if not isinstance(name, str):
            raise PlayerDataError("field 'name' must be a string")

        x = parse_coordinate(data, "x")
        y = parse_coordinate(data, "y")

        connected = data.get("connected", True)
        if not isinstance(connected, bool):
            raise PlayerDataError("field 'connected' must be a boolean")

        facing = parse_facing(data) or Facing.DOWN.value

        role = data.get("role")
        if role is not None and not isinstance(role, str):
            raise PlayerDataError("field 'role' must be a string or null")

        return cls(
            id=player_id,
            name=name,
            x=x,
            y=y,
            facing=facing,
            connected=connected,
            role=role,
        )
