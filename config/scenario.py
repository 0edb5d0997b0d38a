"""
Scenario Configuration

A scenario is a timed script of inputs played into a running simulation:
raw bus triplets, hall calls and car calls.

Bus events give either a raw body or an opcode (name or number) plus arg:

    - {time: 0, type: bus, topic: 2, subtopic: 0, body: 0}       # START all
    - {time: 5, type: bus, topic: 1, opcode: GOTO, arg: 6}       # car 1 -> floor 6
    - {time: 6, type: hall_call, car: 2, floor: 4, direction: UP}
    - {time: 7, type: car_call, car: 2, floor: 9}
"""

from dataclasses import dataclass, field
from typing import List, Optional, Union

from simulator.bus import codec

EVENT_TYPES = ("bus", "hall_call", "car_call")

OPCODE_NAMES = {
    "START": codec.OP_START,
    "STOP": codec.OP_STOP,
    "RESET": codec.OP_RESET,
    "FIRE_ON": codec.OP_FIRE_ON,
    "FIRE_CLEAR": codec.OP_FIRE_CLEAR,
    "GOTO": codec.OP_GOTO,
    "OPEN": codec.OP_OPEN,
    "CLOSE": codec.OP_CLOSE,
    "ENABLE": codec.OP_ENABLE,
    "DISABLE": codec.OP_DISABLE,
    "STATUS": codec.OP_STATUS,
    "ELEV_START": codec.OP_ELEV_START,
    "ELEV_STOP": codec.OP_ELEV_STOP,
}


@dataclass
class ScenarioEvent:
    """One scripted input"""
    time: float
    type: str
    # bus events
    topic: int = 0
    subtopic: int = 0
    body: Optional[int] = None
    opcode: Optional[Union[int, str]] = None
    arg: int = 0
    # hall_call / car_call events
    car: Optional[int] = None
    floor: Optional[int] = None
    direction: Optional[str] = None

    def __post_init__(self):
        if self.time < 0:
            raise ValueError("event time cannot be negative")
        if self.type not in EVENT_TYPES:
            raise ValueError(f"event type must be one of {EVENT_TYPES}, got '{self.type}'")
        if self.type == "bus":
            if (self.body is None) == (self.opcode is None):
                raise ValueError("bus event needs exactly one of 'body' or 'opcode'")
            if isinstance(self.opcode, str) and self.opcode.upper() not in OPCODE_NAMES:
                raise ValueError(f"unknown opcode '{self.opcode}'")
        else:
            if self.car is None or self.floor is None:
                raise ValueError(f"{self.type} event needs 'car' and 'floor'")
            if self.type == "hall_call" and self.direction not in ("UP", "DOWN"):
                raise ValueError("hall_call direction must be 'UP' or 'DOWN'")

    def bus_body(self) -> int:
        """Body of a bus event, encoding opcode + arg when no raw body is given."""
        if self.body is not None:
            return self.body
        opcode = OPCODE_NAMES[self.opcode.upper()] if isinstance(self.opcode, str) else self.opcode
        return codec.encode(opcode, self.arg)

    @classmethod
    def from_dict(cls, data: dict) -> 'ScenarioEvent':
        return cls(
            time=float(data.get('time', 0.0)),
            type=data.get('type', 'bus'),
            topic=data.get('topic', 0),
            subtopic=data.get('subtopic', 0),
            body=data.get('body'),
            opcode=data.get('opcode'),
            arg=data.get('arg', 0),
            car=data.get('car'),
            floor=data.get('floor'),
            direction=data.get('direction')
        )

    def to_dict(self) -> dict:
        if self.type == "bus":
            result = {'time': self.time, 'type': self.type, 'topic': self.topic, 'subtopic': self.subtopic}
            if self.body is not None:
                result['body'] = self.body
            else:
                result['opcode'] = self.opcode
                result['arg'] = self.arg
            return result
        result = {'time': self.time, 'type': self.type, 'car': self.car, 'floor': self.floor}
        if self.direction is not None:
            result['direction'] = self.direction
        return result


@dataclass
class ScenarioConfig:
    """Named, ordered list of scripted inputs"""
    name: str = "unnamed"
    description: str = ""
    events: List[ScenarioEvent] = field(default_factory=list)

    def __post_init__(self):
        self.events = sorted(self.events, key=lambda e: e.time)

    @classmethod
    def from_dict(cls, data: dict) -> 'ScenarioConfig':
        """Create ScenarioConfig from dictionary"""
        scenario_data = data.get('scenario', data)
        return cls(
            name=scenario_data.get('name', 'unnamed'),
            description=scenario_data.get('description', ''),
            events=[ScenarioEvent.from_dict(e) for e in scenario_data.get('events', [])]
        )

    def to_dict(self) -> dict:
        return {
            'scenario': {
                'name': self.name,
                'description': self.description,
                'events': [e.to_dict() for e in self.events]
            }
        }

    def validate(self, num_cars: int):
        """Check that every car-addressed event names a car that exists"""
        for event in self.events:
            if event.type != "bus" and not (1 <= event.car <= num_cars):
                raise ValueError(f"event at t={event.time} addresses car {event.car}, bank has {num_cars}")
