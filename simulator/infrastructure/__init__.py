"""Infrastructure components for simulation"""

from .message_broker import MessageBroker, COMMAND_TOPIC, STATUS_TOPIC, car_topic
from .realtime_env import RealtimeEnvironment

__all__ = [
    'MessageBroker',
    'COMMAND_TOPIC',
    'STATUS_TOPIC',
    'car_topic',
    'RealtimeEnvironment',
]
