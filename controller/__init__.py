"""
Elevator bank command center

Bus endpoint that decodes command triplets and routes them to the cars.
"""

__version__ = "0.1.0"

from .command_center import CommandCenter, SystemMode

__all__ = ['CommandCenter', 'SystemMode']
