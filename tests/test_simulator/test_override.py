"""
Override controller tests: power, fire service, enable/disable and reset.
"""

import sys
from pathlib import Path

# Add project root to path for imports
project_root = Path(__file__).parent.parent.parent
sys.path.insert(0, str(project_root))

import pytest

from simulator.core.car import Car, Direction, Mode, Power
from simulator.core.dispatcher import Dispatcher, DispatcherState
from simulator.core.errors import CarDisabled, FireRestricted, PowerOff
from simulator.core.override import OverrideController


@pytest.fixture
def bank():
    car = Car()
    dispatcher = Dispatcher(car)
    return car, dispatcher, OverrideController(dispatcher)


def ticks(dispatcher, n):
    for _ in range(n):
        dispatcher.tick()


def test_fire_discards_requests_and_recalls(bank):
    car, dispatcher, override = bank
    dispatcher.add_car_request(8)
    dispatcher.add_hall_request(3, Direction.DOWN)
    ticks(dispatcher, 4)
    assert car.current_floor > 1

    override.set_mode(Mode.FIRE)
    assert override.active
    assert car.current_floor == 1
    assert car.door_open
    assert not car.moving
    assert not dispatcher.has_pending_stops()
    assert dispatcher.state is DispatcherState.OVERRIDE

    with pytest.raises(FireRestricted):
        dispatcher.add_car_request(3)


def test_tick_does_nothing_during_fire(bank):
    car, dispatcher, override = bank
    override.set_mode(Mode.FIRE)
    before = car.snapshot()
    ticks(dispatcher, 10)
    assert car.snapshot() == before
    assert dispatcher.state is DispatcherState.OVERRIDE


def test_clearing_fire_resumes_nothing(bank):
    car, dispatcher, override = bank
    dispatcher.add_car_request(6)
    ticks(dispatcher, 2)
    override.set_mode(Mode.FIRE)
    override.set_mode(Mode.NORMAL)

    assert not override.active
    assert dispatcher.state is DispatcherState.IDLE
    ticks(dispatcher, 20)
    # The request made before the fire is not replayed
    assert car.current_floor == 1

    dispatcher.add_car_request(4)
    ticks(dispatcher, 20)
    assert car.current_floor == 4
    assert car.door_open


def test_power_off_behaves_like_fire_for_recall(bank):
    car, dispatcher, override = bank
    dispatcher.add_car_request(7)
    ticks(dispatcher, 5)

    override.set_power(Power.OFF)
    assert override.active
    assert car.current_floor == 1
    assert car.door_open
    assert not dispatcher.has_pending_stops()
    with pytest.raises(PowerOff):
        dispatcher.add_hall_request(5, Direction.UP)

    ticks(dispatcher, 5)
    assert car.current_floor == 1

    override.set_power(Power.ON)
    assert not override.active
    dispatcher.add_car_request(3)
    ticks(dispatcher, 10)
    assert car.current_floor == 3


def test_power_on_does_not_leave_fire(bank):
    car, dispatcher, override = bank
    override.set_mode(Mode.FIRE)
    override.set_power(Power.ON)
    assert car.mode is Mode.FIRE
    assert dispatcher.state is DispatcherState.OVERRIDE


def test_fire_while_powered_off_powers_on(bank):
    car, dispatcher, override = bank
    override.set_power(Power.OFF)
    override.set_mode(Mode.FIRE)
    assert car.power is Power.ON
    assert car.mode is Mode.FIRE


def test_auto_mode_is_normal_service(bank):
    car, dispatcher, override = bank
    override.set_mode(Mode.AUTO)
    assert not override.active
    dispatcher.add_car_request(5)
    ticks(dispatcher, 10)
    assert car.current_floor == 5


def test_disable_keeps_pending_stops(bank):
    car, dispatcher, override = bank
    dispatcher.add_car_request(4)
    override.set_enabled(False)
    with pytest.raises(CarDisabled):
        dispatcher.add_car_request(9)
    ticks(dispatcher, 10)
    assert car.current_floor == 4

    override.set_enabled(True)
    dispatcher.add_car_request(9)
    ticks(dispatcher, 10)
    assert car.current_floor == 9


def test_reset_returns_everything_to_power_on_state(bank):
    car, dispatcher, override = bank
    dispatcher.add_car_request(9)
    ticks(dispatcher, 3)
    override.set_enabled(False)
    override.set_mode(Mode.FIRE)

    override.reset()
    assert car.current_floor == 1
    assert not car.door_open
    assert car.mode is Mode.NORMAL
    assert car.power is Power.ON
    assert car.enabled
    assert dispatcher.state is DispatcherState.IDLE
    assert not dispatcher.has_pending_stops()
    assert dispatcher.door_dwell_remaining == 0

    # Reset from a clean car is an idle tick afterwards
    ticks(dispatcher, 3)
    assert car.current_floor == 1 and not car.door_open
