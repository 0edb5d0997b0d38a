import simpy
from .entity import Entity
from .car import Car, Direction, Mode, Power, DEFAULT_NUM_FLOORS
from .dispatcher import Dispatcher, DWELL_TICKS
from .errors import RequestRejected
from .override import OverrideController
from ..bus.commands import CarCommand, Command
from ..bus.codec import status_message
from ..infrastructure.message_broker import MessageBroker, STATUS_TOPIC, car_topic


class Elevator(Entity):
    """
    One car in the simulation: a Car, its Dispatcher and its OverrideController,
    driven tick by tick as a SimPy process.

    Commands reach the car asynchronously through broker topics. Listener
    processes only enqueue them into a bounded inbox; run() is the single
    consumer, and it drains the inbox completely before every tick so car
    state is never mutated from two places at once.

    Topics (name = elevator name):
        elevator/<name>/commands   CarCommand values routed by the command center
        elevator/<name>/hall_call  {'floor': int, 'direction': 'UP' | 'DOWN'}
        elevator/<name>/car_call   {'floor': int}
        elevator/<name>/status     status report, published when it changes
        elevator/<name>/rejected   requests the car refused
        bus/status                 packed STATUS reply on the bus
    """

    def __init__(self, env: simpy.Environment, name: str, car_id: int, broker: MessageBroker,
                 num_floors: int = DEFAULT_NUM_FLOORS, dwell_ticks: int = DWELL_TICKS,
                 tick_interval: float = 1.0, inbox_capacity: int = 32, verbose: bool = True):
        """
        Args:
            env: SimPy environment
            name: Elevator name, used in topic names
            car_id: Bus address of this car (1..N)
            broker: Message broker
            num_floors: Floors served
            dwell_ticks: Ticks the door stays open at a serviced stop
            tick_interval: Simulation time between two ticks
            inbox_capacity: Commands buffered before listeners block
            verbose: Print state transitions and rejections
        """
        if tick_interval <= 0:
            raise ValueError("tick_interval must be positive")
        self.car_id = car_id
        self.broker = broker
        self.tick_interval = tick_interval
        self.car = Car(num_floors)
        self.dispatcher = Dispatcher(self.car, dwell_ticks)
        self.override = OverrideController(self.dispatcher)
        self.inbox = simpy.Store(env, capacity=inbox_capacity)
        self.ticks = 0
        self.rejections = []  # (time, command, error)
        self._last_status = None

        super().__init__(env, name, verbose)
        self.status_topic = car_topic(self.name, "status")
        self.set_state(self.dispatcher.state.value)

        self._handlers = {
            Command.START: lambda c: self.override.set_power(Power.ON),
            Command.STOP: lambda c: self.override.set_power(Power.OFF),
            Command.RESET: lambda c: self.override.reset(),
            Command.FIRE_ON: lambda c: self.override.set_mode(Mode.FIRE),
            Command.FIRE_CLEAR: lambda c: self.override.set_mode(Mode.NORMAL),
            Command.MODE_CENTRALIZED: lambda c: self._switch_operation_mode(Mode.NORMAL),
            Command.MODE_INDEPENDENT: lambda c: self._switch_operation_mode(Mode.AUTO),
            Command.GOTO: lambda c: self.dispatcher.add_car_request(c.floor),
            Command.HALL_CALL: lambda c: self.dispatcher.add_hall_request(c.floor, c.direction),
            Command.OPEN: lambda c: self.dispatcher.hold_door_open(),
            Command.CLOSE: lambda c: self.dispatcher.close_door_now(),
            Command.ENABLE: lambda c: self.override.set_enabled(True),
            Command.DISABLE: lambda c: self.override.set_enabled(False),
            Command.STATUS: lambda c: self.broker.put(STATUS_TOPIC, status_message(self.car_id, self.car)),
        }

        self.env.process(self._command_listener())
        self.env.process(self._hall_call_listener())
        self.env.process(self._car_call_listener())

    # --- Main loop ---

    def run(self):
        while True:
            # Apply everything that arrived since the last tick, at the current instant
            while self.inbox.items:
                command = yield self.inbox.get()
                self.apply(command)

            self.dispatcher.tick()
            self.ticks += 1
            self.set_state(self.dispatcher.state.value)
            self._report_status()
            yield self.env.timeout(self.tick_interval)

    def apply(self, command: CarCommand):
        """
        Apply one command to the car. Rejected requests are logged and
        published, never raised.
        """
        handler = self._handlers.get(command.command)
        if handler is None:
            return
        try:
            handler(command)
        except RequestRejected as e:
            self.rejections.append((self.env.now, command, e))
            self.log(f"[{self.name}] Rejected {command}: {e}")
            self.broker.put(car_topic(self.name, "rejected"), {
                "timestamp": self.env.now,
                "car_id": self.car_id,
                "command": str(command),
                "reason": type(e).__name__,
            })

    def _switch_operation_mode(self, mode: Mode):
        # Only FIRE_CLEAR or RESET take a car out of fire service
        if self.car.mode is Mode.FIRE:
            self.log(f"[{self.name}] Ignoring {mode.value} while in FIRE service")
            return
        self.override.set_mode(mode)

    # --- Listeners (enqueue only) ---

    def _command_listener(self):
        topic = car_topic(self.name, "commands")
        while True:
            command = yield self.broker.get(topic)
            yield self.inbox.put(command)

    def _hall_call_listener(self):
        topic = car_topic(self.name, "hall_call")
        while True:
            message = yield self.broker.get(topic)
            try:
                direction = Direction(message['direction'])
                if direction is Direction.IDLE:
                    raise ValueError("hall call needs UP or DOWN")
                command = CarCommand(Command.HALL_CALL, floor=int(message['floor']), direction=direction)
            except (KeyError, TypeError, ValueError):
                self.log(f"[{self.name}] Dropped malformed hall call: {message}")
                continue
            yield self.inbox.put(command)

    def _car_call_listener(self):
        topic = car_topic(self.name, "car_call")
        while True:
            message = yield self.broker.get(topic)
            try:
                command = CarCommand(Command.GOTO, floor=int(message['floor']))
            except (KeyError, TypeError, ValueError):
                self.log(f"[{self.name}] Dropped malformed car call: {message}")
                continue
            yield self.inbox.put(command)

    # --- Helpers for scenario scripts ---

    def press_hall_button(self, floor: int, direction: str):
        return self.broker.put(car_topic(self.name, "hall_call"), {'floor': floor, 'direction': direction})

    def press_car_button(self, floor: int):
        return self.broker.put(car_topic(self.name, "car_call"), {'floor': floor})

    # --- Reporting ---

    def status(self) -> dict:
        up_stops, down_stops = self.dispatcher.pending_stops()
        status = self.car.snapshot()
        status.update({
            "car_id": self.car_id,
            "state": self.dispatcher.state.value,
            "up_stops": up_stops,
            "down_stops": down_stops,
            "door_dwell_remaining": self.dispatcher.door_dwell_remaining,
            "num_floors": self.car.num_floors,
        })
        return status

    def _report_status(self):
        status = self.status()
        if status == self._last_status:
            return
        self._last_status = status
        message = dict(status, timestamp=self.env.now, tick=self.ticks)
        self.broker.put(self.status_topic, message)
