import simpy
import sys

# Configuration
from config import load_simulation_config, load_scenario_config, SimulationConfig, ScenarioConfig

# Simulator components
from simulator.infrastructure.message_broker import MessageBroker
from simulator.infrastructure.realtime_env import RealtimeEnvironment
from simulator.core.elevator import Elevator

# Controller
from controller.command_center import CommandCenter

# Analyzer
from analyzer.statistics import Statistics


def build_simulation(sim_config: SimulationConfig):
    """
    Create the environment, broker, recorder, command center and cars.

    Returns:
        (env, broker, statistics, command_center, elevators)
    """
    if sim_config.realtime_factor > 0:
        env = RealtimeEnvironment(speed_factor=sim_config.realtime_factor)
        print(f"Real-time pacing at x{sim_config.realtime_factor}")
    else:
        env = simpy.Environment()

    broker = MessageBroker(env, verbose=sim_config.verbose)

    # Create statistics collector
    statistics = Statistics(env, broker.get_broadcast_pipe())
    env.process(statistics.start_listening())

    command_center = CommandCenter("CommandCenter", broker, command_topic=sim_config.command_topic,
                                   verbose=sim_config.verbose)

    elevators = []
    for i in range(1, sim_config.car.num_cars + 1):
        elevator = Elevator(
            env, f"Car_{i}", i, broker,
            num_floors=sim_config.building.num_floors,
            dwell_ticks=sim_config.car.dwell_ticks,
            tick_interval=sim_config.tick_interval,
            inbox_capacity=sim_config.car.inbox_capacity,
            verbose=sim_config.verbose
        )
        command_center.register_elevator(elevator)
        elevators.append(elevator)

    # Start command center processes
    env.process(command_center.run())
    for elevator in elevators:
        env.process(command_center.start_status_listener(elevator.name))

    return env, broker, statistics, command_center, elevators


def scenario_player(env, command_center, elevators, scenario: ScenarioConfig):
    """Feed scripted inputs into the running simulation at their scheduled times."""
    print(f"--- Scenario '{scenario.name}': {len(scenario.events)} events ---")
    by_id = {elevator.car_id: elevator for elevator in elevators}

    for event in scenario.events:
        if event.time > env.now:
            yield env.timeout(event.time - env.now)

        if event.type == "bus":
            command_center.publish(event.topic, event.subtopic, event.bus_body())
        elif event.type == "hall_call":
            by_id[event.car].press_hall_button(event.floor, event.direction)
        elif event.type == "car_call":
            by_id[event.car].press_car_button(event.floor)


def run_simulation(sim_config_path="scenarios/simulation/default.yaml",
                   scenario_path="scenarios/commands/demo.yaml"):
    """
    Set up and run the entire simulation

    Args:
        sim_config_path: Path to simulation configuration YAML file
        scenario_path: Path to scenario YAML file
    """
    print("--- Loading Configuration ---")

    sim_config = load_simulation_config(sim_config_path)
    scenario = load_scenario_config(scenario_path)
    scenario.validate(sim_config.car.num_cars)

    print(f"Simulation Config: {sim_config_path}")
    print(f"Scenario: {scenario_path}")

    print("\n--- Simulation Setup ---")
    env, broker, statistics, command_center, elevators = build_simulation(sim_config)

    # Set simulation metadata for JSON Lines log
    statistics.set_simulation_metadata({
        'num_floors': sim_config.building.num_floors,
        'num_cars': sim_config.car.num_cars,
        'dwell_ticks': sim_config.car.dwell_ticks,
        'tick_interval': sim_config.tick_interval,
        'sim_duration': sim_config.duration,
        'config_files': {
            'simulation': sim_config_path,
            'scenario': scenario_path
        }
    })

    env.process(scenario_player(env, command_center, elevators, scenario))

    print("\n--- Simulation Start ---")
    env.run(until=sim_config.duration)
    print("--- Simulation End ---")

    for elevator in elevators:
        print(f"{elevator.name}: {elevator.car!r} {elevator.dispatcher!r}")
    print(f"Command center: mode={command_center.system_mode.value}, "
          f"running={command_center.system_running}, ignored={command_center.ignored_count}")

    statistics.save_event_log('simulation_log.jsonl')
    statistics.print_summary()
    statistics.plot_trajectory_diagram()
    return statistics


if __name__ == '__main__':
    # Accept command line arguments for config files
    sim_config_path = sys.argv[1] if len(sys.argv) > 1 else "scenarios/simulation/default.yaml"
    scenario_path = sys.argv[2] if len(sys.argv) > 2 else "scenarios/commands/demo.yaml"
    run_simulation(sim_config_path=sim_config_path, scenario_path=scenario_path)
