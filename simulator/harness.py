"""
Console self-test

Runs a fixed set of scenarios against the car, its dispatcher, the
override controller and the bus path, printing one [PASS]/[FAIL] line per
scenario. Exits 0 when every scenario passes, 1 otherwise.

    python -m simulator.harness
"""

import sys
from typing import Callable, List, Tuple

import simpy

from .bus.codec import BusMessage, B_MODE_TEST_FIRE, OP_GOTO, T_CLEAR_FIRE, T_MODE, encode
from .core.car import Car, Direction, Mode, Power
from .core.dispatcher import Dispatcher
from .core.elevator import Elevator
from .core.errors import FireRestricted, InvalidFloor, PowerOff
from .core.override import OverrideController
from .infrastructure.message_broker import MessageBroker

_SCENARIOS: List[Tuple[str, Callable[[], bool]]] = []


def scenario(name: str):
    """Register a scenario function that returns True on success."""
    def register(fn):
        _SCENARIOS.append((name, fn))
        return fn
    return register


# --- Helpers ---

def run_ticks(dispatcher: Dispatcher, max_ticks: int) -> List[dict]:
    """
    Tick the dispatcher and return one trace entry per tick.

    Each entry holds the floor before and after the tick and the stops that
    were pending before it.
    """
    trace = []
    for _ in range(max_ticks):
        car = dispatcher.car
        before = car.current_floor
        pending = dispatcher.up_stops | dispatcher.down_stops
        dispatcher.tick()
        trace.append({
            'from': before,
            'to': car.current_floor,
            'pending': pending,
            'moving': car.moving,
            'door_open': car.door_open,
        })
    return trace


def door_safe(trace: List[dict]) -> bool:
    return not any(step['moving'] and step['door_open'] for step in trace)


def reversed_with_stop_ahead(trace: List[dict]) -> bool:
    """True if the car ever turned around while a stop was still ahead of it."""
    heading = 0
    for step in trace:
        delta = step['to'] - step['from']
        if delta == 0:
            continue
        new_heading = 1 if delta > 0 else -1
        if heading and new_heading != heading:
            ahead = [f for f in step['pending'] if (f - step['from']) * heading > 0]
            if ahead:
                return True
        heading = new_heading
    return False


def drive(car: Car, guard: int = 50):
    while car.moving and guard > 0:
        car.advance_one_floor()
        guard -= 1


# --- Car ---

@scenario("Initial state: floor=1, idle, doors closed")
def initial_state():
    car = Car()
    return (car.current_floor == 1 and not car.door_open and not car.moving
            and car.direction is Direction.IDLE and car.power is Power.ON and car.mode is Mode.NORMAL)


@scenario("Request same floor opens door")
def same_floor_request():
    car = Car()
    car.request(1)
    return car.door_open and not car.moving and car.direction is Direction.IDLE


@scenario("Request every floor from 1 arrives with door open")
def request_every_floor():
    for floor in range(1, 11):
        car = Car()
        dispatcher = Dispatcher(car)
        car.request(floor)
        trace = run_ticks(dispatcher, 20)
        if car.current_floor != floor or not car.door_open or car.moving or not door_safe(trace):
            return False
    return True


@scenario("Request invalid floor is rejected")
def invalid_floor():
    car = Car()
    for floor in (0, 11, -1):
        try:
            car.request(floor)
            return False
        except InvalidFloor:
            pass
    return car.current_floor == 1 and not car.moving


@scenario("Fire mode: recall to 1, open, deny other floors")
def fire_recall():
    car = Car()
    car.request(6)
    drive(car)
    if car.current_floor != 6:
        return False
    car.set_mode(Mode.FIRE)
    if car.current_floor != 1 or not car.door_open or car.mode is not Mode.FIRE:
        return False
    try:
        car.request(3)
        return False
    except FireRestricted:
        return True


@scenario("OFF power: recall/open; deny requests")
def power_off_recall():
    car = Car()
    car.request(4)
    drive(car)
    if car.current_floor != 4:
        return False
    car.set_power(Power.OFF)
    if car.current_floor != 1 or not car.door_open:
        return False
    try:
        car.request(2)
        return False
    except PowerOff:
        return True


# --- Dispatcher ---

@scenario("Dispatcher: up calls 4,7,10 from floor 1")
def up_sweep():
    car = Car()
    dispatcher = Dispatcher(car)
    for floor in (4, 7, 10):
        dispatcher.add_hall_request(floor, Direction.UP)
    trace = run_ticks(dispatcher, 200)
    floors = [step['to'] for step in trace]
    monotonic = all(b >= a for a, b in zip(floors, floors[1:]))
    return (car.current_floor == 10 and car.door_open and not car.moving
            and not dispatcher.has_pending_stops() and monotonic and door_safe(trace))


@scenario("Dispatcher: mixed up/down calls serviced in sweep order")
def mixed_sweep():
    car = Car()
    dispatcher = Dispatcher(car)
    dispatcher.add_hall_request(3, Direction.UP)
    dispatcher.add_car_request(6)
    dispatcher.add_hall_request(9, Direction.UP)
    dispatcher.add_hall_request(8, Direction.DOWN)
    dispatcher.add_hall_request(2, Direction.DOWN)
    trace = run_ticks(dispatcher, 500)
    return (car.current_floor <= 3 and car.door_open and not car.moving
            and not dispatcher.has_pending_stops()
            and not reversed_with_stop_ahead(trace) and door_safe(trace))


@scenario("Dispatcher: idle tick changes nothing")
def idle_tick():
    car = Car()
    dispatcher = Dispatcher(car)
    before = (car.snapshot(), dispatcher.pending_stops(), dispatcher.state, dispatcher.door_dwell_remaining)
    dispatcher.tick()
    after = (car.snapshot(), dispatcher.pending_stops(), dispatcher.state, dispatcher.door_dwell_remaining)
    return before == after


@scenario("Override: FIRE discards pending stops and suspends ticking")
def fire_override():
    car = Car()
    dispatcher = Dispatcher(car)
    override = OverrideController(dispatcher)
    dispatcher.add_car_request(8)
    run_ticks(dispatcher, 4)
    override.set_mode(Mode.FIRE)
    trace = run_ticks(dispatcher, 10)
    if dispatcher.has_pending_stops() or car.current_floor != 1 or not car.door_open:
        return False
    if any(step['to'] != 1 for step in trace):
        return False
    override.set_mode(Mode.NORMAL)
    dispatcher.add_car_request(5)
    run_ticks(dispatcher, 30)
    return car.current_floor == 5 and car.door_open


# --- Bus ---

@scenario("Bus: GOTO, TEST FIRE and CLEAR FIRE reach a car through the inbox")
def bus_round_trip():
    from controller.command_center import CommandCenter

    env = simpy.Environment()
    broker = MessageBroker(env, verbose=False)
    center = CommandCenter("CommandCenter", broker, verbose=False)
    elevator = Elevator(env, "Car_1", 1, broker, verbose=False)
    center.register_elevator(elevator)
    env.process(center.run())

    center.publish(1, 0, encode(OP_GOTO, 7))
    env.run(until=20)
    if elevator.car.current_floor != 7:
        return False

    center.publish(T_MODE, 0, B_MODE_TEST_FIRE)
    env.run(until=22)
    if elevator.car.mode is not Mode.FIRE or elevator.car.current_floor != 1:
        return False

    center.publish(1, 0, encode(OP_GOTO, 4))  # rejected under fire service
    center.publish(T_CLEAR_FIRE, 0, 0)
    env.run(until=24)
    return elevator.car.mode is Mode.NORMAL and len(elevator.rejections) == 1


@scenario("Bus: unknown triplets are dropped")
def bus_garbage():
    from controller.command_center import CommandCenter

    env = simpy.Environment()
    broker = MessageBroker(env, verbose=False)
    center = CommandCenter("CommandCenter", broker, verbose=False)
    center.register_elevator(Elevator(env, "Car_1", 1, broker, verbose=False))
    handled = [
        center.handle_message(BusMessage(9, 0, 0)),
        center.handle_message(BusMessage(T_MODE, 0, 1234)),
        center.handle_message(BusMessage(6, 5, 0)),
        center.handle_message(("x", 0, 0)),
    ]
    return not any(handled) and center.ignored_count == 4


# --- Runner ---

def run_all() -> List[Tuple[str, bool]]:
    """Run every registered scenario. A scenario that raises counts as failed."""
    results = []
    for name, fn in _SCENARIOS:
        try:
            ok = bool(fn())
        except Exception as e:
            print(f"  {name}: {type(e).__name__}: {e}")
            ok = False
        results.append((name, ok))
    return results


def main() -> int:
    results = run_all()
    print("==== Test Results ====")
    for name, ok in results:
        print(f"[{'PASS' if ok else 'FAIL'}] {name}")
    passed = sum(1 for _, ok in results if ok)
    failed = len(results) - passed
    print(f"Summary: {passed} passed, {failed} failed")
    return 1 if failed else 0


if __name__ == '__main__':
    sys.exit(main())
