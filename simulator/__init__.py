"""
Elevator Dispatch Simulator - Core simulation engine

This package provides the per-car state machine, its tick-driven scheduler
and override handling, the bus codec, and the SimPy entities that run a
bank of cars.
"""

__version__ = "0.1.0"

from .core.car import Car, Direction, Mode, Power
from .core.dispatcher import Dispatcher, DispatcherState
from .core.override import OverrideController
from .core.errors import RequestRejected, InvalidFloor, PowerOff, FireRestricted, CarDisabled
from .core.entity import Entity
from .core.elevator import Elevator

from .infrastructure.message_broker import MessageBroker
from .infrastructure.realtime_env import RealtimeEnvironment

__all__ = [
    'Car',
    'Direction',
    'Mode',
    'Power',
    'Dispatcher',
    'DispatcherState',
    'OverrideController',
    'RequestRejected',
    'InvalidFloor',
    'PowerOff',
    'FireRestricted',
    'CarDisabled',
    'Entity',
    'Elevator',
    'MessageBroker',
    'RealtimeEnvironment',
]
