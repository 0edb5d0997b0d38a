"""
Command set shared by both bus encodings

Whatever encoding a bus message arrives in, it is reduced to one of these
commands before it reaches a car.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ..core.car import Direction


class Command(Enum):
    START = "START"
    STOP = "STOP"
    RESET = "RESET"
    FIRE_ON = "FIRE_ON"
    FIRE_CLEAR = "FIRE_CLEAR"
    MODE_CENTRALIZED = "MODE_CENTRALIZED"
    MODE_INDEPENDENT = "MODE_INDEPENDENT"
    GOTO = "GOTO"
    OPEN = "OPEN"
    CLOSE = "CLOSE"
    ENABLE = "ENABLE"
    DISABLE = "DISABLE"
    STATUS = "STATUS"
    # Not on the bus: delivered by the hall button topic
    HALL_CALL = "HALL_CALL"


# Commands that act on every car at once when broadcast
SYSTEM_MODE_COMMANDS = (Command.MODE_CENTRALIZED, Command.MODE_INDEPENDENT)


@dataclass(frozen=True)
class CarCommand:
    """A single command for one car, as it sits in the car's inbox"""
    command: Command
    floor: Optional[int] = None
    direction: Optional[Direction] = None

    def __str__(self):
        parts = [self.command.value]
        if self.floor is not None:
            parts.append(f"floor={self.floor}")
        if self.direction is not None:
            parts.append(self.direction.value)
        return " ".join(parts)
