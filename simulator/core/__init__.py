"""Core simulation entities"""

from .car import Car, Direction, Mode, Power
from .errors import RequestRejected, InvalidFloor, PowerOff, FireRestricted, CarDisabled
from .dispatcher import Dispatcher, DispatcherState
from .override import OverrideController
from .entity import Entity
from .elevator import Elevator

__all__ = [
    'Car',
    'Direction',
    'Mode',
    'Power',
    'RequestRejected',
    'InvalidFloor',
    'PowerOff',
    'FireRestricted',
    'CarDisabled',
    'Dispatcher',
    'DispatcherState',
    'OverrideController',
    'Entity',
    'Elevator',
]
