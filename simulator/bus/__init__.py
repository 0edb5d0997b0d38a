"""Bus command set and triplet codec"""

from .commands import CarCommand, Command
from .codec import BusMessage, DecodedCommand, StatusFlags, decode, encode, status_message, unpack_status

__all__ = [
    'CarCommand',
    'Command',
    'BusMessage',
    'DecodedCommand',
    'StatusFlags',
    'decode',
    'encode',
    'status_message',
    'unpack_status',
]
