"""
Statistics recorder tests
"""

import sys
import json
from pathlib import Path

# Add project root to path for imports
project_root = Path(__file__).parent.parent.parent
sys.path.insert(0, str(project_root))

import matplotlib
matplotlib.use("Agg")

import simpy

from analyzer.statistics import Statistics
from simulator.bus.commands import CarCommand, Command
from simulator.core.elevator import Elevator
from simulator.infrastructure.message_broker import MessageBroker


def make_run():
    env = simpy.Environment()
    broker = MessageBroker(env, verbose=False)
    statistics = Statistics(env, broker.get_broadcast_pipe())
    env.process(statistics.start_listening())
    elevator = Elevator(env, "Car_1", 1, broker, verbose=False)
    return env, broker, statistics, elevator


def test_trajectory_and_door_events():
    env, broker, statistics, elevator = make_run()
    elevator.press_car_button(3)
    elevator.press_car_button(5)
    env.run(until=20)

    floors = [floor for _, floor in statistics.elevator_trajectories["Car_1"]]
    assert floors == [1, 2, 3, 4, 5]
    assert statistics.floors_visited("Car_1") == [3, 5]
    assert statistics.car_calls_history["Car_1"][0][1] == 3
    assert statistics.violations == []


def test_rejections_and_overrides_recorded():
    env, broker, statistics, elevator = make_run()
    elevator.press_car_button(12)
    elevator.press_hall_button(4, "UP")
    env.run(until=10)
    broker.put("elevator/Car_1/commands", CarCommand(Command.FIRE_ON))
    env.run(until=15)

    assert len(statistics.rejections) == 1
    assert statistics.rejections[0]['reason'] == 'InvalidFloor'
    modes = [mode for _, _, mode in statistics.override_history["Car_1"]]
    assert modes == ["NORMAL", "FIRE"]
    assert statistics.hall_calls_history["Car_1"][0][1:] == (4, "UP")


def test_summary():
    env, broker, statistics, elevator = make_run()
    elevator.press_car_button(6)
    env.run(until=20)
    summary = statistics.print_summary()
    car = summary['cars']['Car_1']
    assert car['final_floor'] == 6
    assert car['final_state'] == 'IDLE'
    assert car['floor_changes'] == 5
    assert car['door_openings'] == 1
    assert summary['violations'] == 0


def test_violation_detected():
    env = simpy.Environment()
    statistics = Statistics(env, simpy.Store(env))
    statistics.record("elevator/Car_9/status", {
        'timestamp': 0.0, 'current_floor': 4, 'moving': True, 'door_open': True,
        'power': 'ON', 'mode': 'NORMAL',
    })
    assert len(statistics.violations) == 1
    assert statistics.violations[0]['elevator'] == 'Car_9'


def test_event_log(tmp_path):
    env, broker, statistics, elevator = make_run()
    statistics.set_simulation_metadata({'num_floors': 10, 'num_cars': 1})
    elevator.press_car_button(2)
    env.run(until=5)

    path = statistics.save_event_log(str(tmp_path / "log.jsonl"))
    lines = [json.loads(line) for line in Path(path).read_text(encoding="utf-8").splitlines()]
    assert lines[0]['type'] == 'metadata'
    assert lines[0]['data']['config']['num_cars'] == 1
    types = {line['type'] for line in lines[1:]}
    assert {'elevator_status', 'car_call'} <= types


def test_plot_trajectory_diagram(tmp_path):
    env, broker, statistics, elevator = make_run()
    elevator.press_car_button(4)
    elevator.press_hall_button(2, "DOWN")
    env.run(until=20)

    output = tmp_path / "trajectory.png"
    assert statistics.plot_trajectory_diagram(str(output)) == str(output)
    assert output.exists()
    assert output.stat().st_size > 0
