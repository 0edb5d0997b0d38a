"""
Command center tests: bus decoding, routing and the system-wide view.
"""

import sys
from pathlib import Path

# Add project root to path for imports
project_root = Path(__file__).parent.parent.parent
sys.path.insert(0, str(project_root))

import pytest
import simpy

from controller.command_center import CommandCenter, SystemMode
from simulator.bus import codec
from simulator.bus.codec import BusMessage, encode
from simulator.core.car import Mode, Power
from simulator.core.elevator import Elevator
from simulator.infrastructure.message_broker import MessageBroker, car_topic


@pytest.fixture
def bank():
    env = simpy.Environment()
    broker = MessageBroker(env, verbose=False)
    center = CommandCenter("CommandCenter", broker, verbose=False)
    elevators = []
    for i in range(1, 4):
        elevator = Elevator(env, f"Car_{i}", i, broker, verbose=False)
        center.register_elevator(elevator)
        elevators.append(elevator)
    env.process(center.run())
    for elevator in elevators:
        env.process(center.start_status_listener(elevator.name))
    return env, broker, center, elevators


def test_duplicate_registration_rejected(bank):
    env, broker, center, elevators = bank
    with pytest.raises(ValueError):
        center.register_elevator(elevators[0])


def test_broadcast_stop_and_start(bank):
    env, broker, center, elevators = bank
    center.publish(codec.T_SYSTEM_STOP, 0, 0)
    env.run(until=3)
    assert all(e.car.power is Power.OFF for e in elevators)
    assert not center.system_running

    center.publish(codec.T_SYSTEM_START, 0, 0)
    env.run(until=5)
    assert all(e.car.power is Power.ON for e in elevators)
    assert center.system_running


def test_single_car_routing(bank):
    env, broker, center, elevators = bank
    center.publish(codec.T_STOP_ONE, 2, 0)
    center.publish(1, 0, encode(codec.OP_GOTO, 5))
    env.run(until=15)
    assert elevators[0].car.current_floor == 5
    assert elevators[1].car.power is Power.OFF
    assert elevators[2].car.power is Power.ON
    assert elevators[2].car.current_floor == 1
    # Single-car messages do not touch the system view
    assert center.system_running


def test_fire_drill(bank):
    env, broker, center, elevators = bank
    elevators[0].press_car_button(9)
    elevators[1].press_car_button(6)
    env.run(until=5)

    center.publish(codec.T_MODE, 0, codec.B_MODE_TEST_FIRE)
    env.run(until=7)
    assert center.system_mode is SystemMode.FIRE
    for elevator in elevators:
        assert elevator.car.mode is Mode.FIRE
        assert elevator.car.current_floor == 1
        assert elevator.car.door_open

    # Mode toggles are dropped at the boundary while in fire service
    assert center.handle_message(BusMessage(codec.T_MODE, 0, codec.B_MODE_INDEPENDENT)) is False
    assert center.system_mode is SystemMode.FIRE

    center.publish(codec.T_CLEAR_FIRE, 0, 0)
    env.run(until=9)
    assert center.system_mode is SystemMode.CENTRALIZED
    assert all(e.car.mode is Mode.NORMAL for e in elevators)


def test_mode_toggles(bank):
    env, broker, center, elevators = bank
    center.publish(codec.T_MODE, 0, codec.B_MODE_INDEPENDENT)
    env.run(until=3)
    assert center.system_mode is SystemMode.INDEPENDENT
    assert all(e.car.mode is Mode.AUTO for e in elevators)

    center.publish(codec.T_MODE, 0, codec.B_MODE_CENTRALIZED)
    env.run(until=5)
    assert center.system_mode is SystemMode.CENTRALIZED
    assert all(e.car.mode is Mode.NORMAL for e in elevators)


def test_reset_broadcast(bank):
    env, broker, center, elevators = bank
    center.publish(0, 0, encode(codec.OP_FIRE_ON))
    env.run(until=3)
    center.publish(codec.T_SYSTEM_RESET, 0, 0)
    env.run(until=5)
    assert center.system_mode is SystemMode.CENTRALIZED
    for elevator in elevators:
        assert elevator.car.mode is Mode.NORMAL
        assert not elevator.car.door_open


@pytest.mark.parametrize("message", [
    BusMessage(9, 0, 0),
    BusMessage(codec.T_MODE, 0, 1234),
    BusMessage(codec.T_START_ONE, 7, 0),     # no such car
    BusMessage(codec.T_STOP_ONE, 0, 0),     # per-car topic without a car
    BusMessage(4, 0, encode(codec.OP_GOTO, 3)),
    (1, 2),
    ("a", "b", "c"),
    None,
])
def test_garbage_is_ignored(bank, message):
    env, broker, center, elevators = bank
    assert center.handle_message(message) is False
    assert center.ignored_count == 1


def test_tuple_messages_accepted(bank):
    env, broker, center, elevators = bank
    assert center.handle_message((codec.T_STOP_ONE, 3, 0)) is True
    env.run(until=2)
    assert elevators[2].car.power is Power.OFF


def test_operation_board_tracks_status(bank):
    env, broker, center, elevators = bank
    elevators[0].press_car_button(4)
    env.run(until=10)
    status = center.elevator_statuses["Car_1"]
    assert status['current_floor'] == 4
    assert status['car_id'] == 1
    assert set(center.elevator_statuses) == {"Car_1", "Car_2", "Car_3"}


def test_commands_go_through_car_topics(bank):
    env, broker, center, elevators = bank
    center.handle_message(BusMessage(codec.T_STOP_ONE, 1, 0))
    # Nothing is applied until the car's own process runs
    assert elevators[0].car.power is Power.ON
    assert len(broker.get_pipe(car_topic("Car_1", "commands")).items) == 1
