from enum import Enum

from simulator.bus.codec import BusMessage, decode, tsbbbb
from simulator.bus.commands import Command, SYSTEM_MODE_COMMANDS
from simulator.core.elevator import Elevator
from simulator.infrastructure.message_broker import COMMAND_TOPIC, MessageBroker, car_topic


class SystemMode(Enum):
    CENTRALIZED = "CENTRALIZED"
    INDEPENDENT = "INDEPENDENT"
    FIRE = "FIRE"


class CommandCenter:
    """
    Bus endpoint for the whole bank of cars.

    Receives (topic, subtopic, body) triplets on the command topic, decodes
    them in either encoding, and routes the resulting command to one car or
    to every car through the car's command topic. The car's own listener
    puts it in the car's inbox; the command center never touches car state.

    It also keeps the system-wide view (running flag, operating mode) and an
    operation board with the latest status of every registered car. It does
    not decide which car answers a hall call: every car schedules itself.
    """
    def __init__(self, name: str, broker: MessageBroker, command_topic: str = COMMAND_TOPIC,
                 verbose: bool = True):
        self.name = name
        self.broker = broker
        self.command_topic = command_topic
        self.verbose = verbose
        self.elevators = {}  # car_id -> Elevator
        # Operation board: latest status of each car by name
        self.elevator_statuses = {}
        self.system_mode = SystemMode.CENTRALIZED
        self.system_running = True
        self.ignored_count = 0

    def _log(self, message: str):
        if self.verbose:
            print(f"{self.broker.get_current_time():.2f} [{self.name}] {message}")

    def register_elevator(self, elevator: Elevator):
        """
        Register a car under this command center.

        The status listener must be started separately with
        env.process(command_center.start_status_listener(elevator.name)).
        """
        if elevator.car_id in self.elevators:
            raise ValueError(f"Car id {elevator.car_id} already registered")
        self.elevators[elevator.car_id] = elevator
        self._log(f"Elevator '{elevator.name}' registered as car {elevator.car_id}.")

    def start_status_listener(self, elevator_name: str):
        return self._status_listener(elevator_name)

    def _status_listener(self, elevator_name: str):
        status_topic = car_topic(elevator_name, "status")
        while True:
            status_message = yield self.broker.get(status_topic)
            self.elevator_statuses[elevator_name] = status_message

    def publish(self, topic: int, subtopic: int, body: int):
        """Put a raw triplet on the command bus, as an external client would."""
        return self.broker.put(self.command_topic, BusMessage(topic, subtopic, body))

    def run(self):
        """Main process: decode and route every message on the command topic."""
        self._log(f"Listening for bus commands on '{self.command_topic}'")
        while True:
            message = yield self.broker.get(self.command_topic)
            self.handle_message(message)

    def handle_message(self, message) -> bool:
        """
        Decode and route one bus message.

        Returns:
            True if at least one car was addressed, False if the message was ignored
        """
        if not isinstance(message, BusMessage):
            try:
                message = BusMessage(*(int(v) for v in message))
            except (TypeError, ValueError):
                self.ignored_count += 1
                return False

        decoded = decode(message)
        if decoded is None:
            self.ignored_count += 1
            return False

        command = decoded.command.command
        if command in SYSTEM_MODE_COMMANDS and self.system_mode is SystemMode.FIRE:
            # Mode toggles have no effect during fire service
            self.ignored_count += 1
            return False

        if decoded.is_broadcast:
            targets = list(self.elevators.values())
            self._update_system_view(command)
        elif decoded.target in self.elevators:
            targets = [self.elevators[decoded.target]]
        else:
            self.ignored_count += 1
            return False

        label = tsbbbb(message.topic, message.subtopic, message.body) if message.body < 10000 else str(message)
        self._log(f"Bus {label} -> {decoded.command} for {', '.join(e.name for e in targets)}")
        for elevator in targets:
            self.broker.put(car_topic(elevator.name, "commands"), decoded.command)
        return True

    def _update_system_view(self, command: Command):
        if command is Command.FIRE_ON:
            self.system_mode = SystemMode.FIRE
        elif command is Command.FIRE_CLEAR or command is Command.MODE_CENTRALIZED:
            self.system_mode = SystemMode.CENTRALIZED
        elif command is Command.MODE_INDEPENDENT:
            self.system_mode = SystemMode.INDEPENDENT
        elif command is Command.RESET:
            self.system_mode = SystemMode.CENTRALIZED
            self.system_running = True
        elif command is Command.START:
            self.system_running = True
        elif command is Command.STOP:
            self.system_running = False
