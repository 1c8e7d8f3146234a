"""Room domain services: registry, host policy and idle sweeping.

Pure(ish) session logic that the Socket.IO handlers call into. Nothing in
here knows about Flask requests; pushes go through a notifier object so the
transport can be swapped out in tests.
"""

from .errors import (
    SessionError,
    InvalidRangeError,
    HostAlreadyPresentError,
    RoomNotFoundError,
    MissingNameError,
    NotHostError,
    InvalidNumberError,
    KeyspaceExhaustedError,
)
from .policy import ConnectionHostPolicy
from .registry import RoomRegistry, Notifier, NullNotifier

__all__ = [
    'SessionError',
    'InvalidRangeError',
    'HostAlreadyPresentError',
    'RoomNotFoundError',
    'MissingNameError',
    'NotHostError',
    'InvalidNumberError',
    'KeyspaceExhaustedError',
    'ConnectionHostPolicy',
    'RoomRegistry',
    'Notifier',
    'NullNotifier',
]
