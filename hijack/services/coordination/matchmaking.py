"""Matchmaking queue for anonymous random-opponent games.

Entries are scanned front to back and the first compatible one is taken.
That is a first-fit match: an earlier entry that ignores time control wins
over a later exact time-control match.
"""

import itertools
import logging
import secrets
import threading
from typing import List, Optional

from .registry import ConnectionRegistry
from .rooms import RoomStore

NO_CLOCK = 'none'


class QueueEntry:
    def __init__(self, conn_id: str, time_control: Optional[str], ignore_time: bool, seq: int):
        self.conn_id = conn_id
        self.time_control = time_control
        self.ignore_time = ignore_time
        self.seq = seq


def compatible(waiting: QueueEntry, time_control: Optional[str], ignore_time: bool) -> bool:
    return waiting.time_control == time_control or waiting.ignore_time or ignore_time


def resolve_time_control(waiting: QueueEntry, time_control: Optional[str], ignore_time: bool) -> Optional[str]:
    """Pick the time control for a match between a waiting entry and a new request.

    - same value on both sides -> that value
    - only the newcomer ignores time -> the waiting player's value
    - only the waiting player ignores time -> the newcomer's value
    - both ignore -> the waiting player's value (they queued first)
    """
    if waiting.time_control == time_control:
        return time_control
    if not waiting.ignore_time and ignore_time:
        return waiting.time_control
    if waiting.ignore_time and not ignore_time:
        return time_control
    return waiting.time_control


class MatchmakingQueue:
    def __init__(self, rooms: RoomStore, registry: ConnectionRegistry, notifier,
                 lock=None, logger=None, room_id_bytes: int = 3):
        self.rooms = rooms
        self.registry = registry
        self.notifier = notifier
        self._lock = lock or threading.RLock()
        self.logger = logger or logging.getLogger(__name__)
        self.room_id_bytes = room_id_bytes
        self._entries: List[QueueEntry] = []
        self._seq = itertools.count(1)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, conn_id) -> bool:
        with self._lock:
            return any(e.conn_id == conn_id for e in self._entries)

    def entries(self) -> List[QueueEntry]:
        with self._lock:
            return list(self._entries)

    def enqueue(self, conn_id: str, time_control: Optional[str], ignore_time: bool = False):
        """Match conn_id against the queue, or add it to the queue.

        Returns the created room on a match, otherwise None.
        """
        ignore_time = bool(ignore_time)
        with self._lock:
            if conn_id not in self.registry:
                # Late findMatch from a connection whose disconnect already ran
                self.logger.debug(f"[queue-drop] sid={conn_id} connection gone")
                return None

            # One entry per connection; a repeated request replaces the old one
            # and can never be matched against itself.
            self._remove(conn_id)

            match_index = None
            for index, waiting in enumerate(self._entries):
                if compatible(waiting, time_control, ignore_time):
                    match_index = index
                    break

            if match_index is None:
                self._entries.append(QueueEntry(conn_id, time_control, ignore_time, next(self._seq)))
                self.registry.set_queued(conn_id, True)
                self.notifier.send(conn_id, 'searching')
                self.logger.info(
                    f"[queue-add] sid={conn_id} waiting_for={'any' if ignore_time else time_control} size={len(self._entries)}"
                )
                return None

            opponent = self._entries.pop(match_index)
            self.registry.set_queued(opponent.conn_id, False)
            final_time = resolve_time_control(opponent, time_control, ignore_time)
            room_id = self._new_room_id()
            room = self.rooms.create_matched_room(room_id, opponent.conn_id, conn_id, final_time)

            for player in room.players:
                self.notifier.send(player, 'matchFound',
                                   {'roomId': room_id, 'color': room.color_of(player), 'timeControl': final_time})
            self.logger.info(
                f"[queue-match] room={room_id} white={opponent.conn_id} black={conn_id} time={final_time}"
            )
            return room

    def cancel(self, conn_id: str) -> bool:
        with self._lock:
            removed = self._remove(conn_id)
            if removed:
                self.logger.info(f"[queue-cancel] sid={conn_id}")
            return removed

    def _remove(self, conn_id: str) -> bool:
        before = len(self._entries)
        self._entries = [e for e in self._entries if e.conn_id != conn_id]
        self.registry.set_queued(conn_id, False)
        return len(self._entries) != before

    def _new_room_id(self) -> str:
        while True:
            room_id = secrets.token_hex(self.room_id_bytes).upper()
            if not self.rooms.exists(room_id):
                return room_id
