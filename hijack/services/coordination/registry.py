import threading
from typing import Dict, Optional


class ConnectionRegistry:
    """Back-references from each live connection to the state it holds.

    Only the room id and an in-queue flag are kept, so disconnect cleanup can
    find what to unwind without scanning rooms or the queue. Room and queue
    data themselves belong to the Room Store and the Matchmaking Queue.
    """

    def __init__(self, lock=None):
        self._lock = lock or threading.RLock()
        self._connections: Dict[str, Dict[str, object]] = {}

    def register(self, conn_id: str) -> None:
        with self._lock:
            self._connections.setdefault(conn_id, {'room_id': None, 'in_queue': False})

    def discard(self, conn_id: str) -> None:
        with self._lock:
            self._connections.pop(conn_id, None)

    def room_of(self, conn_id: str) -> Optional[str]:
        with self._lock:
            ctx = self._connections.get(conn_id)
            return ctx['room_id'] if ctx else None

    def bind_room(self, conn_id: str, room_id: str) -> None:
        """Point conn_id at room_id. Unknown (already disconnected) connections are ignored."""
        with self._lock:
            ctx = self._connections.get(conn_id)
            if ctx:
                ctx['room_id'] = room_id

    def unbind_room(self, conn_id: str, room_id: str) -> None:
        """Clear the room back-reference, but only if it still points at room_id."""
        with self._lock:
            ctx = self._connections.get(conn_id)
            if ctx and ctx['room_id'] == room_id:
                ctx['room_id'] = None

    def is_queued(self, conn_id: str) -> bool:
        with self._lock:
            ctx = self._connections.get(conn_id)
            return bool(ctx and ctx['in_queue'])

    def set_queued(self, conn_id: str, queued: bool) -> None:
        with self._lock:
            ctx = self._connections.get(conn_id)
            if ctx:
                ctx['in_queue'] = queued

    def __contains__(self, conn_id) -> bool:
        with self._lock:
            return conn_id in self._connections

    def __len__(self) -> int:
        with self._lock:
            return len(self._connections)
