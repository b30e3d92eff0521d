"""Room, matchmaking and relay coordination.

Transport-free core used by the Socket.IO handlers: every component shares
one lock and one notifier, so tests can drive it with a recording notifier
and no running server.
"""

import logging
import threading

from .disconnect import DisconnectCoordinator
from .errors import CoordinationError, RoomAlreadyExists, RoomFull, RoomNotFound
from .matchmaking import MatchmakingQueue
from .registry import ConnectionRegistry
from .relay import EventRelay
from .rooms import Room, RoomStore

__all__ = [
    'Coordinator',
    'CoordinationError',
    'RoomAlreadyExists',
    'RoomFull',
    'RoomNotFound',
    'Room',
]


class Coordinator:
    def __init__(self, notifier, presence=None, logger=None, room_id_bytes: int = 3):
        self.lock = threading.RLock()
        self.logger = logger or logging.getLogger(__name__)
        self.notifier = notifier
        self.presence = presence
        self.registry = ConnectionRegistry(lock=self.lock)
        self.rooms = RoomStore(self.registry, notifier, lock=self.lock, logger=self.logger)
        self.queue = MatchmakingQueue(
            self.rooms, self.registry, notifier,
            lock=self.lock, logger=self.logger, room_id_bytes=room_id_bytes,
        )
        self.relay = EventRelay(self.rooms, logger=self.logger)
        self.disconnects = DisconnectCoordinator(
            self.registry, self.rooms, self.queue, notifier,
            presence=presence, lock=self.lock, logger=self.logger,
        )

    def connect(self, conn_id: str) -> None:
        self.registry.register(conn_id)

    def disconnect(self, conn_id: str) -> None:
        self.disconnects.disconnect(conn_id)
