import logging
import threading
from typing import Any, Dict, List, Optional

from .errors import RoomAlreadyExists, RoomFull, RoomNotFound
from .registry import ConnectionRegistry

MAX_OCCUPANTS = 2


class Room:
    def __init__(self, room_id: str, white: str, black: Optional[str] = None,
                 time_control: Optional[str] = None):
        self.room_id = room_id
        self.players: List[str] = [white] + ([black] if black else [])
        # Roles are assigned once and never swapped, even if the white player leaves
        self.white = white
        self.black = black
        self.time_control = time_control

    @property
    def state(self) -> str:
        if not self.players:
            return 'empty'
        return 'active' if len(self.players) >= MAX_OCCUPANTS else 'waiting'

    def is_full(self) -> bool:
        return len(self.players) >= MAX_OCCUPANTS

    def color_of(self, conn_id: str) -> Optional[str]:
        if conn_id == self.white:
            return 'white'
        if conn_id == self.black:
            return 'black'
        return None


class RoomStore:
    """Owns every live room.

    All mutations run under the shared coordinator lock and notify the
    affected connections before releasing it, so notifications for one room
    go out in the order the mutations happened.
    """

    def __init__(self, registry: ConnectionRegistry, notifier, lock=None, logger=None):
        self.registry = registry
        self.notifier = notifier
        self._lock = lock or threading.RLock()
        self.logger = logger or logging.getLogger(__name__)
        self._rooms: Dict[str, Room] = {}

    # ---- queries ----

    def get(self, room_id: str) -> Optional[Room]:
        with self._lock:
            return self._rooms.get(room_id)

    def exists(self, room_id: str) -> bool:
        with self._lock:
            return room_id in self._rooms

    def is_occupant(self, room_id: str, conn_id: str) -> bool:
        with self._lock:
            room = self._rooms.get(room_id)
            return bool(room and conn_id in room.players)

    def __len__(self) -> int:
        with self._lock:
            return len(self._rooms)

    # ---- mutations ----

    def create_room(self, room_id: str, creator_id: str) -> Optional[Room]:
        with self._lock:
            if not self._is_live(creator_id, 'createRoom'):
                return None
            if room_id in self._rooms:
                raise RoomAlreadyExists(room_id)
            room = Room(room_id, white=creator_id)
            self._rooms[room_id] = room
            self._register(creator_id, room_id)
            self.notifier.send(creator_id, 'roomCreated', {'roomId': room_id})
            self.logger.info(f"[room-create] room={room_id} sid={creator_id}")
            return room

    def join_room(self, room_id: str, joiner_id: str) -> Optional[Room]:
        with self._lock:
            if not self._is_live(joiner_id, 'joinRoom'):
                return None
            room = self._rooms.get(room_id)
            if room is None:
                raise RoomNotFound(room_id)
            if joiner_id in room.players:
                # Rejoining a room you already sit in only re-acknowledges
                self.notifier.send(joiner_id, 'roomJoined', {'roomId': room_id})
                return room
            if room.is_full():
                raise RoomFull(room_id)

            room.players.append(joiner_id)
            if room.black is None:
                room.black = joiner_id
            self._register(joiner_id, room_id)

            self.notifier.send(joiner_id, 'roomJoined', {'roomId': room_id})
            if room.time_control:
                self.notifier.send(joiner_id, 'timeControlSync', {'timeControl': room.time_control})
            for other in room.players:
                if other != joiner_id:
                    self.notifier.send(other, 'opponentJoined')
            self.logger.info(f"[room-join] room={room_id} sid={joiner_id}")
            return room

    def create_matched_room(self, room_id: str, first_id: str, second_id: str,
                            time_control: Optional[str]) -> Optional[Room]:
        with self._lock:
            if not (self._is_live(first_id, 'match') and self._is_live(second_id, 'match')):
                return None
            if room_id in self._rooms:
                raise RoomAlreadyExists(room_id)
            room = Room(room_id, white=first_id, black=second_id, time_control=time_control)
            self._rooms[room_id] = room
            self._register(first_id, room_id)
            self._register(second_id, room_id)
            self.logger.info(
                f"[room-match] room={room_id} white={first_id} black={second_id} time={time_control}"
            )
            return room

    def set_time_control(self, room_id: str, value: Optional[str]) -> None:
        with self._lock:
            room = self._rooms.get(room_id)
            if room is None:
                return
            room.time_control = value
            self.logger.debug(f"[room-time] room={room_id} time={value}")

    def leave(self, room_id: str, conn_id: str) -> None:
        with self._lock:
            self._leave_locked(room_id, conn_id)

    def relay_scoped(self, room_id: str, sender_id: str, event: str,
                     payload: Optional[Any] = None) -> bool:
        """Send event to every occupant of room_id except the sender.

        Returns False, without raising, when the room is gone or the sender
        does not occupy it.
        """
        with self._lock:
            room = self._rooms.get(room_id)
            if room is None or sender_id not in room.players:
                return False
            for conn_id in room.players:
                if conn_id == sender_id:
                    continue
                try:
                    self.notifier.send(conn_id, event, payload)
                except Exception:
                    self.logger.exception(f"[relay-fail] room={room_id} event={event} to={conn_id}")
            return True

    # ---- internals (lock held) ----

    def _is_live(self, conn_id: str, action: str) -> bool:
        # Handlers can run after their connection's disconnect; those requests are dropped
        if conn_id in self.registry:
            return True
        self.logger.debug(f"[room-drop] sid={conn_id} action={action} connection gone")
        return False

    def _register(self, conn_id: str, room_id: str) -> None:
        previous = self.registry.room_of(conn_id)
        if previous and previous != room_id:
            # A connection sits in at most one room; entering a new one leaves the old
            self._leave_locked(previous, conn_id)
        self.registry.bind_room(conn_id, room_id)

    def _leave_locked(self, room_id: str, conn_id: str) -> None:
        self.registry.unbind_room(conn_id, room_id)
        room = self._rooms.get(room_id)
        if room is None or conn_id not in room.players:
            return
        room.players = [p for p in room.players if p != conn_id]
        if not room.players:
            del self._rooms[room_id]
            self.logger.info(f"[room-delete] room={room_id}")
            return
        for remaining in room.players:
            self.notifier.send(remaining, 'opponentDisconnected')
        self.logger.info(f"[room-leave] room={room_id} sid={conn_id} remaining={len(room.players)} state={room.state}")
