"""
Bus codec tests: both triplet encodings and STATUS packing.
"""

import sys
from pathlib import Path

# Add project root to path for imports
project_root = Path(__file__).parent.parent.parent
sys.path.insert(0, str(project_root))

import pytest

from simulator.bus import codec
from simulator.bus.codec import BusMessage, decode, encode
from simulator.bus.commands import CarCommand, Command
from simulator.core.car import Car, Direction


@pytest.mark.parametrize("topic, command", [
    (codec.T_SYSTEM_STOP, Command.STOP),
    (codec.T_SYSTEM_START, Command.START),
    (codec.T_SYSTEM_RESET, Command.RESET),
    (codec.T_CLEAR_FIRE, Command.FIRE_CLEAR),
])
def test_flag_body_broadcasts(topic, command):
    decoded = decode(BusMessage(topic, 0, 0))
    assert decoded.is_broadcast
    assert decoded.command == CarCommand(command)


@pytest.mark.parametrize("topic, command", [
    (codec.T_START_ONE, Command.START),
    (codec.T_STOP_ONE, Command.STOP),
])
def test_flag_body_single_car(topic, command):
    decoded = decode(BusMessage(topic, 3, 0))
    assert decoded.target == 3
    assert not decoded.is_broadcast
    assert decoded.command.command is command


@pytest.mark.parametrize("body, command", [
    (codec.B_MODE_CENTRALIZED, Command.MODE_CENTRALIZED),
    (codec.B_MODE_INDEPENDENT, Command.MODE_INDEPENDENT),
    (codec.B_MODE_TEST_FIRE, Command.FIRE_ON),
])
def test_flag_body_modes(body, command):
    decoded = decode(BusMessage(codec.T_MODE, 0, body))
    assert decoded.command.command is command


@pytest.mark.parametrize("message", [
    BusMessage(9, 0, 0),                # unknown topic
    BusMessage(codec.T_MODE, 0, 1234),  # unknown mode body
    BusMessage(0, 0, 0),
    BusMessage(-1, 0, 0),
    BusMessage(1, -2, 0),
    BusMessage(1, 0, encode(99, 0)),    # unknown opcode
])
def test_unknown_messages_decode_to_none(message):
    assert decode(message) is None


@pytest.mark.parametrize("topic", [codec.T_START_ONE, codec.T_STOP_ONE])
def test_single_car_topic_needs_a_car(topic):
    assert decode(BusMessage(topic, 0, 0)) is None


def test_opcode_goto_carries_floor():
    decoded = decode(BusMessage(2, 0, encode(codec.OP_GOTO, 7)))
    assert decoded.target == 2
    assert decoded.command == CarCommand(Command.GOTO, floor=7)


def test_opcode_broadcast():
    decoded = decode(BusMessage(codec.BROADCAST, 0, encode(codec.OP_FIRE_ON)))
    assert decoded.is_broadcast
    assert decoded.command.command is Command.FIRE_ON


@pytest.mark.parametrize("opcode, command", [
    (codec.OP_START, Command.START),
    (codec.OP_STOP, Command.STOP),
    (codec.OP_RESET, Command.RESET),
    (codec.OP_FIRE_CLEAR, Command.FIRE_CLEAR),
    (codec.OP_OPEN, Command.OPEN),
    (codec.OP_CLOSE, Command.CLOSE),
    (codec.OP_ENABLE, Command.ENABLE),
    (codec.OP_DISABLE, Command.DISABLE),
    (codec.OP_STATUS, Command.STATUS),
    (codec.OP_ELEV_START, Command.START),
    (codec.OP_ELEV_STOP, Command.STOP),
])
def test_opcodes(opcode, command):
    decoded = decode(BusMessage(1, 0, encode(opcode)))
    assert decoded.command.command is command
    # Only GOTO carries a floor
    assert decoded.command.floor is None


def test_opcode_field_selects_encoding():
    # Topic 5 would be MODE under flag-body, but the opcode field wins
    decoded = decode(BusMessage(5, 0, encode(codec.OP_GOTO, 3)))
    assert decoded.target == 5
    assert decoded.command.command is Command.GOTO


def test_encode_masks_arg():
    body = encode(codec.OP_GOTO, 0x1FFFF)
    assert codec.opcode_of(body) == codec.OP_GOTO
    assert codec.arg_of(body) == 0xFFFF


def test_tsbbbb():
    assert codec.tsbbbb(5, 0, 1110) == "501110"
    assert codec.tsbbbb(6, 2, 0) == "620000"


def test_status_packing():
    car = Car()
    car.request(6)
    car.advance_one_floor()
    flags = codec.unpack_status(codec.status_arg(car))
    assert flags.floor == 2
    assert flags.moving
    assert not flags.door_open
    assert flags.direction is Direction.UP

    message = codec.status_message(4, car)
    assert message.topic == 4
    assert codec.opcode_of(message.body) == codec.OP_STATUS


def test_command_str():
    assert str(CarCommand(Command.GOTO, floor=4)) == "GOTO floor=4"
    assert str(CarCommand(Command.HALL_CALL, floor=2, direction=Direction.DOWN)) == "HALL_CALL floor=2 DOWN"
    assert str(BusMessage(1, 0, 0)) == "(1-0-0)"
