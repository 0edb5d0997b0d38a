from enum import Enum
from typing import Optional

from .errors import CarDisabled, FireRestricted, InvalidFloor, PowerOff

RECALL_FLOOR = 1
DEFAULT_NUM_FLOORS = 10


class Direction(Enum):
    UP = "UP"
    DOWN = "DOWN"
    IDLE = "IDLE"


class Power(Enum):
    ON = "ON"
    OFF = "OFF"


class Mode(Enum):
    NORMAL = "NORMAL"
    FIRE = "FIRE"
    AUTO = "AUTO"


class Car:
    """
    Physical and operational state of one elevator car.

    The car knows nothing about queues or scheduling. It enforces the
    legality of a single request (floor bounds, power, mode, enabled) and
    moves at most one floor per call to advance_one_floor(). Scheduling is
    done by the Dispatcher that owns it.
    """

    def __init__(self, num_floors: int = DEFAULT_NUM_FLOORS):
        """
        Args:
            num_floors: Highest floor served. Floor 1 is the recall floor.
        """
        if num_floors < 2:
            raise ValueError("num_floors must be at least 2")
        self.num_floors = num_floors
        # Bumped by every recall; owners compare it to notice overrides they did not apply
        self.recalls = 0
        self._set_initial_state()

    def _set_initial_state(self):
        self.current_floor: int = RECALL_FLOOR
        self.destination_floor: Optional[int] = None
        self.direction: Direction = Direction.IDLE
        self.moving: bool = False
        self.door_open: bool = False
        self.power: Power = Power.ON
        self.mode: Mode = Mode.NORMAL
        self.enabled: bool = True

    # --- Requests ---

    def check_request(self, floor: int):
        """
        Raise if a request for `floor` is not allowed right now.

        Raises:
            InvalidFloor: floor outside 1..num_floors
            PowerOff: car is powered off
            FireRestricted: car is in FIRE mode and floor is not the recall floor
            CarDisabled: car has been disabled
        """
        if floor < RECALL_FLOOR or floor > self.num_floors:
            raise InvalidFloor(floor, self.num_floors)
        if self.power is Power.OFF:
            raise PowerOff(floor)
        if self.mode is Mode.FIRE and floor != RECALL_FLOOR:
            raise FireRestricted(floor, RECALL_FLOOR)
        if not self.enabled:
            raise CarDisabled(floor)

    def request(self, floor: int):
        """Validate and head directly for `floor`."""
        self.check_request(floor)
        self.dispatch_to(floor)

    def dispatch_to(self, floor: int):
        """
        Start a leg toward `floor` without legality checks.

        A request for the floor the car is standing on opens the door at once.
        """
        if floor == self.current_floor:
            self.stop_here()
            return
        self.destination_floor = floor
        self.direction = Direction.UP if floor > self.current_floor else Direction.DOWN
        self.door_open = False
        self.moving = True

    # --- Movement ---

    def advance_one_floor(self):
        if not self.moving:
            return

        if self.direction is Direction.UP:
            self.current_floor = min(self.current_floor + 1, self.num_floors)
        elif self.direction is Direction.DOWN:
            self.current_floor = max(self.current_floor - 1, RECALL_FLOOR)

        # Clamped at a bound short of the destination: nowhere left to go
        at_bound = self.current_floor in (RECALL_FLOOR, self.num_floors)
        if self.current_floor == self.destination_floor or at_bound:
            self.stop_here()

    def stop_here(self):
        """Halt at the current floor with the door open."""
        self.moving = False
        self.direction = Direction.IDLE
        self.destination_floor = None
        self.door_open = True

    def open_door(self) -> bool:
        if self.moving:
            return False
        self.door_open = True
        return True

    def close_door(self) -> bool:
        if self.moving:
            return False
        self.door_open = False
        return True

    # --- Overrides ---

    def recall(self):
        """
        Drive the car to the recall floor synchronously, one floor per iteration.

        The whole trip completes inside this call; it is not spread over ticks.
        """
        self.recalls += 1
        self.door_open = False
        self.destination_floor = RECALL_FLOOR
        self.direction = Direction.DOWN if self.current_floor > RECALL_FLOOR else Direction.IDLE
        self.moving = self.current_floor != RECALL_FLOOR
        while self.moving:
            self.advance_one_floor()
        self.stop_here()

    def set_power(self, power: Power):
        """
        Low-level power switch. OFF recalls the car; queued stops are owned by
        the Dispatcher, which drops them on its next tick. Use
        OverrideController to apply the change and clear the queues at once.
        """
        self.power = power
        if power is Power.OFF:
            self.recall()

    def set_mode(self, mode: Mode):
        """Low-level mode switch. FIRE recalls the car, as set_power(OFF) does."""
        self.mode = mode
        if mode is Mode.FIRE:
            self.recall()
            # Powered, but only the recall floor is served
            self.power = Power.ON

    def reset(self):
        """Recall to floor 1 and return to the power-on state (door closed)."""
        self.recall()
        self._set_initial_state()

    # --- Reporting ---

    def snapshot(self) -> dict:
        return {
            "current_floor": self.current_floor,
            "destination_floor": self.destination_floor,
            "direction": self.direction.value,
            "moving": self.moving,
            "door_open": self.door_open,
            "power": self.power.value,
            "mode": self.mode.value,
            "enabled": self.enabled,
        }

    def __repr__(self):
        return (f"Car(floor={self.current_floor}, dir={self.direction.value}, moving={self.moving}, "
                f"door_open={self.door_open}, power={self.power.value}, mode={self.mode.value})")
