import logging

from .matchmaking import MatchmakingQueue
from .registry import ConnectionRegistry
from .rooms import RoomStore


class DisconnectCoordinator:
    """Unwind everything a connection holds when its transport closes.

    Safe to run after an explicit leave or cancel, and safe to run twice:
    every step is a no-op when its target is already gone.
    """

    def __init__(self, registry: ConnectionRegistry, rooms: RoomStore, queue: MatchmakingQueue,
                 notifier, presence=None, lock=None, logger=None):
        self.registry = registry
        self.rooms = rooms
        self.queue = queue
        self.notifier = notifier
        self.presence = presence
        self._lock = lock
        self.logger = logger or logging.getLogger(__name__)

    def disconnect(self, conn_id: str) -> None:
        self.logger.info(f"[disconnect] sid={conn_id}")
        if self._lock is not None:
            with self._lock:
                self._unwind(conn_id)
        else:
            self._unwind(conn_id)
        self._notify_presence(conn_id)

    def _unwind(self, conn_id: str) -> None:
        if self.registry.is_queued(conn_id) and self.queue.cancel(conn_id):
            self.logger.info(f"[disconnect] sid={conn_id} removed from matchmaking queue")
        room_id = self.registry.room_of(conn_id)
        if room_id:
            self.rooms.leave(room_id, conn_id)
        self.registry.discard(conn_id)

    def _notify_presence(self, conn_id: str) -> None:
        if self.presence is None:
            return
        try:
            self.presence.record_disconnect(conn_id)
            self.notifier.broadcast('analyticsUpdate', self.presence.snapshot())
        except Exception:
            self.logger.exception(f"[presence-fail] sid={conn_id} record_disconnect")
