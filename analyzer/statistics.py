import matplotlib.pyplot as plt
import re
import json
from datetime import datetime


class Statistics:
    """
    Receives all communications on the broker's broadcast pipe and records,
    as an independent "recorder", what the cars did.

    Collects per-car floor trajectories, door and override transitions,
    requests and rejections, and any status report in which a car was moving
    with its door open. Everything is also kept as a JSON Lines event log.
    """
    def __init__(self, env, broadcast_pipe, verbose=False):
        self.env = env
        self.broadcast_pipe = broadcast_pipe
        self.verbose = verbose
        self.elevator_trajectories = {}  # name -> [(time, floor)]
        self.door_events_history = {}    # name -> [(time, floor, 'OPEN' | 'CLOSE')]
        self.override_history = {}       # name -> [(time, power, mode)]
        self.hall_calls_history = {}     # name -> [(time, floor, direction)]
        self.car_calls_history = {}      # name -> [(time, floor)]
        self.rejections = []             # rejection reports as published
        self.violations = []             # status reports with moving and door_open both set
        self.bus_messages = 0
        self.bus_status_replies = []

        # Last reported state per car, to detect transitions
        self.current_elevator_states = {}

        # JSON Lines event log for offline playback
        self.event_log = []
        self.simulation_metadata = {}

    def _add_event_log(self, event_type, event_data):
        """
        Add an event to the JSON Lines log.

        Args:
            event_type (str): Type of event (e.g., 'elevator_status', 'rejected')
            event_data (dict): Event-specific data
        """
        self.event_log.append({
            "time": self.env.now,
            "type": event_type,
            "data": event_data
        })

    def set_simulation_metadata(self, metadata):
        """
        Set simulation metadata (called before simulation starts).

        Args:
            metadata (dict): Simulation configuration (num_floors, cars, etc.)
        """
        self.simulation_metadata = {
            "format_version": "1.0",
            "timestamp": datetime.now().isoformat(),
            "config": metadata
        }

    def start_listening(self):
        """
        Main process to start intercepting global broadcasts.
        """
        while True:
            data = yield self.broadcast_pipe.get()
            self.record(data.get('topic', ''), data.get('message'))

    def record(self, topic, message):
        """Record one published message."""
        status_match = re.search(r'elevator/(.*?)/status$', topic)
        if status_match and isinstance(message, dict):
            self._record_status(status_match.group(1), message)
            return

        hall_call_match = re.search(r'elevator/(.*?)/hall_call$', topic)
        if hall_call_match and isinstance(message, dict):
            name = hall_call_match.group(1)
            entry = (self.env.now, message.get('floor'), message.get('direction'))
            self.hall_calls_history.setdefault(name, []).append(entry)
            self._add_event_log('hall_call', {'elevator': name, 'floor': entry[1], 'direction': entry[2]})
            return

        car_call_match = re.search(r'elevator/(.*?)/car_call$', topic)
        if car_call_match and isinstance(message, dict):
            name = car_call_match.group(1)
            self.car_calls_history.setdefault(name, []).append((self.env.now, message.get('floor')))
            self._add_event_log('car_call', {'elevator': name, 'floor': message.get('floor')})
            return

        rejected_match = re.search(r'elevator/(.*?)/rejected$', topic)
        if rejected_match:
            self.rejections.append(message)
            self._add_event_log('rejected', dict(message, elevator=rejected_match.group(1)))
            return

        if topic == 'bus/commands':
            self.bus_messages += 1
            self._add_event_log('bus_command', {'message': str(message)})
        elif topic == 'bus/status':
            self.bus_status_replies.append(message)
            self._add_event_log('bus_status', {'message': str(message)})

    def _record_status(self, name, message):
        timestamp = message.get('timestamp', self.env.now)
        floor = message.get('current_floor')
        previous = self.current_elevator_states.get(name)

        trajectory = self.elevator_trajectories.setdefault(name, [])
        if not trajectory or trajectory[-1][1] != floor:
            trajectory.append((timestamp, floor))

        door_open = message.get('door_open')
        # Adjacent stops close and reopen the door between two reports
        reopened = door_open and previous is not None and previous.get('current_floor') != floor
        if previous is None or previous.get('door_open') != door_open or reopened:
            self.door_events_history.setdefault(name, []).append(
                (timestamp, floor, 'OPEN' if door_open else 'CLOSE'))

        power, mode = message.get('power'), message.get('mode')
        if previous is None or (previous.get('power'), previous.get('mode')) != (power, mode):
            self.override_history.setdefault(name, []).append((timestamp, power, mode))

        if message.get('moving') and door_open:
            self.violations.append(dict(message, elevator=name))
            print(f"{timestamp:.2f} [Statistics] WARNING: {name} moving with door open at floor {floor}")

        self.current_elevator_states[name] = message
        self._add_event_log('elevator_status', {
            'elevator': name,
            'floor': floor,
            'direction': message.get('direction'),
            'state': message.get('state'),
            'door_open': door_open,
            'moving': message.get('moving'),
            'power': power,
            'mode': mode,
        })

    # --- Summary ---

    def floors_visited(self, elevator_name):
        """Floors at which the car opened its door, in order."""
        return [floor for _, floor, event in self.door_events_history.get(elevator_name, []) if event == 'OPEN']

    def get_summary(self):
        cars = {}
        for name in sorted(self.current_elevator_states):
            state = self.current_elevator_states[name]
            trajectory = self.elevator_trajectories.get(name, [])
            cars[name] = {
                'final_floor': state.get('current_floor'),
                'final_state': state.get('state'),
                'floor_changes': max(len(trajectory) - 1, 0),
                'door_openings': len(self.floors_visited(name)),
                'hall_calls': len(self.hall_calls_history.get(name, [])),
                'car_calls': len(self.car_calls_history.get(name, [])),
            }
        return {
            'cars': cars,
            'bus_messages': self.bus_messages,
            'rejections': len(self.rejections),
            'violations': len(self.violations),
        }

    def print_summary(self):
        summary = self.get_summary()
        print("\n" + "=" * 60)
        print("SIMULATION SUMMARY")
        print("=" * 60)
        for name, car in summary['cars'].items():
            print(f"{name}: floor {car['final_floor']} ({car['final_state']}), "
                  f"{car['floor_changes']} floor changes, {car['door_openings']} door openings, "
                  f"{car['hall_calls']} hall calls, {car['car_calls']} car calls")
        print(f"Bus messages: {summary['bus_messages']}")
        print(f"Rejected requests: {summary['rejections']}")
        print(f"Door/motion violations: {summary['violations']}")
        print("=" * 60)
        return summary

    # --- Plotting ---

    def plot_trajectory_diagram(self, output_filename='elevator_trajectory_diagram.png', show=False):
        """Draw trajectory diagram after simulation ends

        Args:
            output_filename: PNG file to write
            show: Also open an interactive window

        Returns:
            output_filename
        """
        print("\n--- Plotting: Elevator Trajectory Diagram ---")
        plt.figure(figsize=(14, 8))

        elevator_colors = ['#1f77b4', '#ff7f0e', '#2ca02c', '#d62728', '#9467bd', '#8c564b']
        end_time = self.env.now

        for idx, name in enumerate(sorted(self.elevator_trajectories.keys())):
            trajectory = self.elevator_trajectories[name]
            if not trajectory:
                continue

            times, floors = zip(*sorted(trajectory, key=lambda x: x[0]))
            # Hold the last floor until the end of the run
            times = list(times) + [max(end_time, times[-1])]
            floors = list(floors) + [floors[-1]]

            color = elevator_colors[idx % len(elevator_colors)]
            plt.step(times, floors, where='post', label=name, linewidth=2.5, color=color, alpha=0.8)

            # Door openings
            openings = [(t, f) for t, f, event in self.door_events_history.get(name, []) if event == 'OPEN']
            if openings:
                plt.scatter(*zip(*openings), s=60, c=color, marker='s', alpha=0.6)

            # Hall calls
            for timestamp, floor, direction in self.hall_calls_history.get(name, []):
                plt.annotate('↑' if direction == 'UP' else '↓', (timestamp, floor),
                             fontsize=12, color=color, fontweight='bold', ha='center', va='center')

            # Car calls
            for timestamp, floor in self.car_calls_history.get(name, []):
                plt.scatter(timestamp, floor, s=80, facecolors='none', edgecolors=color, marker='o', linewidth=1.5)

        plt.title("Elevator Trajectory Diagram")
        plt.xlabel("Time (s)")
        plt.ylabel("Floor")
        plt.grid(True, which='both', linestyle='--', alpha=0.7)

        all_floors = [floor for trajectory in self.elevator_trajectories.values() for _, floor in trajectory]
        if all_floors:
            plt.yticks(range(int(min(all_floors)), int(max(all_floors)) + 1))
        if self.elevator_trajectories:
            plt.legend(loc='upper right', fontsize=10)

        plt.savefig(output_filename, dpi=150, bbox_inches='tight')
        print(f"Trajectory diagram saved to: {output_filename}")

        if show:
            plt.show()
        plt.close()
        return output_filename

    def save_event_log(self, filename='simulation_log.jsonl'):
        """
        Save the event log to a JSON Lines file.

        Args:
            filename (str): Name of the output file (default: 'simulation_log.jsonl')
        """
        print(f"\nSaving event log to {filename}...")

        with open(filename, 'w', encoding='utf-8') as f:
            # Write metadata as first line
            if self.simulation_metadata:
                f.write(json.dumps({
                    "type": "metadata",
                    "data": self.simulation_metadata
                }) + '\n')

            for event in self.event_log:
                f.write(json.dumps(event, ensure_ascii=False, default=str) + '\n')

        print(f"Event log saved: {len(self.event_log)} events written to {filename}")
        return filename
