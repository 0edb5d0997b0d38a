"""
Bus message codec

Messages on the command bus are integer triplets (topic, subtopic, body).
Two encodings are in use and both decode to the same CarCommand values:

Flag-body encoding (topic selects the command class):
    1 = STOP all          5 = MODE (body 1000 CENTRALIZED, 1100 INDEPENDENT, 1110 TEST FIRE)
    2 = START all         6 = START one (subtopic = car id)
    3 = RESET all         7 = STOP one  (subtopic = car id)
    4 = CLEAR FIRE all
    subtopic 0 broadcasts, 1..N addresses one car.

Opcode encoding:
    body = (opcode << 16) | (arg & 0xFFFF)
    topic 0 broadcasts, 1..N addresses one car; subtopic unused.

A message whose opcode field is non-zero uses the opcode encoding, anything
else is read as flag-body. Unknown topics, bodies and opcodes decode to None.
"""

from dataclasses import dataclass
from typing import NamedTuple, Optional

from ..core.car import Car, Direction
from .commands import CarCommand, Command

# Flag-body topics
T_SYSTEM_STOP = 1
T_SYSTEM_START = 2
T_SYSTEM_RESET = 3
T_CLEAR_FIRE = 4
T_MODE = 5
T_START_ONE = 6
T_STOP_ONE = 7

# Flag-body MODE bodies
B_MODE_CENTRALIZED = 1000
B_MODE_INDEPENDENT = 1100
B_MODE_TEST_FIRE = 1110

# Opcodes
OP_START = 1
OP_STOP = 2
OP_RESET = 3
OP_FIRE_ON = 4
OP_FIRE_CLEAR = 5
OP_GOTO = 6
OP_OPEN = 7
OP_CLOSE = 8
OP_ENABLE = 9
OP_DISABLE = 10
OP_STATUS = 11
OP_ELEV_START = 12
OP_ELEV_STOP = 13

BROADCAST = 0

_FLAG_TOPICS = {
    T_SYSTEM_STOP: Command.STOP,
    T_SYSTEM_START: Command.START,
    T_SYSTEM_RESET: Command.RESET,
    T_CLEAR_FIRE: Command.FIRE_CLEAR,
    T_START_ONE: Command.START,
    T_STOP_ONE: Command.STOP,
}

# Topics that always address one car
_SINGLE_CAR_TOPICS = (T_START_ONE, T_STOP_ONE)

_MODE_BODIES = {
    B_MODE_CENTRALIZED: Command.MODE_CENTRALIZED,
    B_MODE_INDEPENDENT: Command.MODE_INDEPENDENT,
    B_MODE_TEST_FIRE: Command.FIRE_ON,
}

_OPCODES = {
    OP_START: Command.START,
    OP_STOP: Command.STOP,
    OP_RESET: Command.RESET,
    OP_FIRE_ON: Command.FIRE_ON,
    OP_FIRE_CLEAR: Command.FIRE_CLEAR,
    OP_GOTO: Command.GOTO,
    OP_OPEN: Command.OPEN,
    OP_CLOSE: Command.CLOSE,
    OP_ENABLE: Command.ENABLE,
    OP_DISABLE: Command.DISABLE,
    OP_STATUS: Command.STATUS,
    OP_ELEV_START: Command.START,
    OP_ELEV_STOP: Command.STOP,
}

_DIRECTION_CODES = {Direction.IDLE: 0, Direction.UP: 1, Direction.DOWN: 2}


@dataclass(frozen=True)
class BusMessage:
    topic: int
    subtopic: int
    body: int

    def __str__(self):
        return f"({self.topic}-{self.subtopic}-{self.body})"


@dataclass(frozen=True)
class DecodedCommand:
    """A command together with the car it addresses (None = every car)"""
    target: Optional[int]
    command: CarCommand

    @property
    def is_broadcast(self) -> bool:
        return self.target is None


class StatusFlags(NamedTuple):
    floor: int
    door_open: bool
    moving: bool
    direction: Direction


# --- Opcode helpers ---

def encode(opcode: int, arg: int = 0) -> int:
    return (opcode << 16) | (arg & 0xFFFF)


def opcode_of(body: int) -> int:
    return (body >> 16) & 0xFFFF


def arg_of(body: int) -> int:
    return body & 0xFFFF


def tsbbbb(topic: int, subtopic: int, body: int) -> str:
    """Log form of a flag-body message: topic, subtopic, 4-digit body."""
    return f"{topic}{subtopic}{body:04d}"


# --- Decoding ---

def _target(address: int) -> Optional[int]:
    return None if address == BROADCAST else address


def decode_flag_body(message: BusMessage) -> Optional[DecodedCommand]:
    if message.topic == T_MODE:
        command = _MODE_BODIES.get(message.body)
    else:
        command = _FLAG_TOPICS.get(message.topic)
    if command is None:
        return None
    if message.topic in _SINGLE_CAR_TOPICS and message.subtopic == BROADCAST:
        return None
    return DecodedCommand(_target(message.subtopic), CarCommand(command))


def decode_opcode(message: BusMessage) -> Optional[DecodedCommand]:
    command = _OPCODES.get(opcode_of(message.body))
    if command is None:
        return None
    floor = arg_of(message.body) if command is Command.GOTO else None
    return DecodedCommand(_target(message.topic), CarCommand(command, floor=floor))


def decode(message: BusMessage) -> Optional[DecodedCommand]:
    """
    Decode a bus message in either encoding.

    Returns:
        DecodedCommand, or None if the message is not understood
    """
    if message.topic < 0 or message.subtopic < 0:
        return None
    if opcode_of(message.body):
        return decode_opcode(message)
    return decode_flag_body(message)


# --- Status packing ---

def status_arg(car: Car) -> int:
    """
    Pack a car's status into a 16-bit STATUS argument.

    bits 0-7 floor, bit 8 door open, bit 9 moving, bits 10-11 direction
    (0 IDLE, 1 UP, 2 DOWN).
    """
    arg = car.current_floor & 0xFF
    if car.door_open:
        arg |= 1 << 8
    if car.moving:
        arg |= 1 << 9
    arg |= (_DIRECTION_CODES[car.direction] & 0x3) << 10
    return arg


def unpack_status(arg: int) -> StatusFlags:
    code = (arg >> 10) & 0x3
    direction = next((d for d, c in _DIRECTION_CODES.items() if c == code), Direction.IDLE)
    return StatusFlags(
        floor=arg & 0xFF,
        door_open=bool((arg >> 8) & 1),
        moving=bool((arg >> 9) & 1),
        direction=direction,
    )


def status_message(car_id: int, car: Car) -> BusMessage:
    return BusMessage(topic=car_id, subtopic=0, body=encode(OP_STATUS, status_arg(car)))
