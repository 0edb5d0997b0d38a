from enum import Enum
from typing import List, Optional, Set, Tuple

from .car import Car, Direction, Mode, Power

DWELL_TICKS = 2


class DispatcherState(Enum):
    IDLE = "IDLE"
    SCANNING_UP = "SCANNING_UP"
    SCANNING_DOWN = "SCANNING_DOWN"
    DOOR_OPEN_DWELLING = "DOOR_OPEN_DWELLING"
    OVERRIDE = "OVERRIDE"


class Dispatcher:
    """
    Per-car scheduler driven one discrete step at a time.

    Pending stops are kept in two sets: up_stops (served in ascending order
    while scanning up) and down_stops (served in descending order while
    scanning down). A floor is never in both sets. Each call to tick() does
    a bounded amount of work: wait out a door dwell, close the door, service
    the current floor, or move the car one floor.

    The scan direction survives a stop's dwell, so the car keeps going the
    way it was going as long as a stop remains ahead of it. Only when that
    direction runs dry does it pick the nearest stop again.
    """

    def __init__(self, car: Car, dwell_ticks: int = DWELL_TICKS):
        """
        Args:
            car: The car this dispatcher exclusively drives
            dwell_ticks: Ticks the door stays open at a serviced stop
        """
        if dwell_ticks < 0:
            raise ValueError("dwell_ticks cannot be negative")
        self.car = car
        self.dwell_ticks = dwell_ticks
        self.up_stops: Set[int] = set()
        self.down_stops: Set[int] = set()
        self.door_dwell_remaining: int = 0
        self.state: DispatcherState = DispatcherState.IDLE
        self.scan_direction: Direction = Direction.IDLE
        self._recalls_seen: int = car.recalls

    # --- Request ingestion ---

    def add_hall_request(self, floor: int, direction: Direction) -> bool:
        """
        Register a hall call.

        Returns:
            True if a new stop was scheduled, False if the floor was already pending

        Raises:
            RequestRejected: if the car cannot accept a request for this floor
            ValueError: if direction is not UP or DOWN
        """
        if direction not in (Direction.UP, Direction.DOWN):
            raise ValueError(f"Hall call direction must be UP or DOWN, got {direction}")
        self.car.check_request(floor)
        if self.car.mode is Mode.FIRE:
            # Nothing is scheduled under fire service; the car is parked at the recall floor
            return False
        return self._queue_stop(floor, direction)

    def add_car_request(self, floor: int) -> bool:
        """
        Register a car call. A call for the current floor opens the door at once.

        Raises:
            RequestRejected: if the car cannot accept a request for this floor
        """
        self.car.check_request(floor)
        here = self.car.current_floor
        if floor == here:
            self.car.dispatch_to(floor)
            return False
        return self._queue_stop(floor, Direction.UP if floor > here else Direction.DOWN)

    def _queue_stop(self, floor: int, direction: Direction) -> bool:
        if self._suspended():
            return False
        if floor in self.up_stops or floor in self.down_stops:
            return False
        if direction is Direction.UP:
            self.up_stops.add(floor)
        else:
            self.down_stops.add(floor)
        return True

    def clear_requests(self):
        self.up_stops.clear()
        self.down_stops.clear()

    def has_pending_stops(self) -> bool:
        return bool(self.up_stops or self.down_stops)

    def pending_stops(self) -> Tuple[List[int], List[int]]:
        """Return (up stops ascending, down stops descending)."""
        return sorted(self.up_stops), sorted(self.down_stops, reverse=True)

    # --- Door commands ---

    def hold_door_open(self) -> bool:
        """Open (or keep open) the door for a full dwell, if the car is standing."""
        if self._suspended() or not self.car.open_door():
            return False
        self.door_dwell_remaining = self.dwell_ticks
        return True

    def close_door_now(self) -> bool:
        """Cut the dwell short and close the door, if the car is standing."""
        if self._suspended() or not self.car.close_door():
            return False
        self.door_dwell_remaining = 0
        if not self.has_pending_stops():
            self._rest()
        return True

    # --- Override hooks ---

    def enter_override(self):
        self.clear_requests()
        self._recalls_seen = self.car.recalls
        self.door_dwell_remaining = 0
        self.scan_direction = Direction.IDLE
        self.state = DispatcherState.OVERRIDE

    def release_override(self):
        if not self._suspended():
            self.state = DispatcherState.IDLE

    def reset(self):
        self.clear_requests()
        self._recalls_seen = self.car.recalls
        self.door_dwell_remaining = 0
        self.scan_direction = Direction.IDLE
        self.state = DispatcherState.IDLE

    # --- Simulation step ---

    def tick(self) -> DispatcherState:
        """Advance the scheduler by one discrete step and return the resulting state."""
        car = self.car
        if car.recalls != self._recalls_seen:
            # Recalled directly on the car: nothing queued before it is replayed
            self.enter_override()
        if self._suspended():
            self.enter_override()
            return self.state

        if car.door_open:
            if self.door_dwell_remaining > 0:
                self.door_dwell_remaining -= 1
                self.state = DispatcherState.DOOR_OPEN_DWELLING
                return self.state
            if not self.has_pending_stops():
                # Nothing left to do: rest here with the door open
                self._rest()
                return self.state
            car.close_door()

        if self._service_current_floor():
            return self.state

        direction, target = self._plan()
        if target is None:
            self._rest()
            return self.state

        self.scan_direction = direction
        self.state = DispatcherState.SCANNING_UP if direction is Direction.UP else DispatcherState.SCANNING_DOWN
        if target == car.current_floor:
            self._service_current_floor(force=True)
            return self.state

        car.dispatch_to(target)
        car.advance_one_floor()
        self._service_current_floor()
        return self.state

    def _suspended(self) -> bool:
        return self.car.mode is Mode.FIRE or self.car.power is Power.OFF

    def _service_current_floor(self, force: bool = False) -> bool:
        """
        Service the current floor if it is a pending stop for the car's direction.

        When the car is IDLE (standing, or just arrived at its leg target) a
        stop in either set counts.
        """
        car = self.car
        here = car.current_floor
        direction = Direction.IDLE if force else car.direction

        if direction in (Direction.UP, Direction.IDLE) and here in self.up_stops:
            self.up_stops.discard(here)
        elif direction in (Direction.DOWN, Direction.IDLE) and here in self.down_stops:
            self.down_stops.discard(here)
        else:
            return False

        car.stop_here()
        self.door_dwell_remaining = self.dwell_ticks
        self.state = DispatcherState.DOOR_OPEN_DWELLING
        return True

    def _plan(self) -> Tuple[Direction, Optional[int]]:
        """Pick the travel direction and the floor of the next stop."""
        here = self.car.current_floor
        next_up = min((f for f in self.up_stops if f >= here), default=None)
        next_down = max((f for f in self.down_stops if f <= here), default=None)

        # Keep scanning while something is still ahead
        if self.scan_direction is Direction.UP and next_up is not None:
            return Direction.UP, next_up
        if self.scan_direction is Direction.DOWN and next_down is not None:
            return Direction.DOWN, next_down

        if next_up is not None and next_down is not None:
            if next_up - here <= here - next_down:
                return Direction.UP, next_up
            return Direction.DOWN, next_down
        if next_up is not None:
            return Direction.UP, next_up
        if next_down is not None:
            return Direction.DOWN, next_down

        # Every pending stop lies behind its own travel direction: go to the far end
        candidates = []
        if self.up_stops:
            candidates.append(min(self.up_stops))
        if self.down_stops:
            candidates.append(max(self.down_stops))
        if candidates:
            target = min(candidates, key=lambda f: (abs(f - here), f < here))
            return (Direction.UP if target > here else Direction.DOWN), target

        # A leg started directly on the car is carried to completion
        if self.car.moving and self.car.destination_floor is not None:
            return self.car.direction, self.car.destination_floor
        return Direction.IDLE, None

    def _rest(self):
        car = self.car
        car.moving = False
        car.direction = Direction.IDLE
        car.destination_floor = None
        self.scan_direction = Direction.IDLE
        self.state = DispatcherState.IDLE

    def __repr__(self):
        up, down = self.pending_stops()
        return f"Dispatcher(state={self.state.value}, up={up}, down={down}, dwell={self.door_dwell_remaining})"
