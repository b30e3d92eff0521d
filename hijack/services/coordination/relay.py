import logging
from typing import Any, Dict, Optional

from .rooms import RoomStore

MOVE_FIELDS = ('from', 'to', 'moveType', 'whiteTime', 'blackTime', 'timestamp')


class EventRelay:
    """Forward in-game signals from one occupant to the other.

    Payloads are passed through untouched; move legality and game outcome
    are decided by the clients. Anything sent to a room the sender does not
    occupy is dropped.
    """

    def __init__(self, rooms: RoomStore, logger=None):
        self.rooms = rooms
        self.logger = logger or logging.getLogger(__name__)

    def move(self, sender_id: str, room_id: str, data: Dict[str, Any]) -> bool:
        payload = {field: data.get(field) for field in MOVE_FIELDS}
        delivered = self._relay(sender_id, room_id, 'opponentMove', payload)
        if delivered:
            self.logger.debug(f"[move] room={room_id} from={payload['from']} to={payload['to']}")
        return delivered

    def game_over(self, sender_id: str, room_id: str, reason: Optional[Any]) -> bool:
        delivered = self._relay(sender_id, room_id, 'gameOver', {'reason': reason})
        if delivered:
            self.logger.info(f"[game-over] room={room_id} reason={reason}")
        return delivered

    def rematch_request(self, sender_id: str, room_id: str) -> bool:
        return self._relay(sender_id, room_id, 'rematchRequest')

    def rematch_accept(self, sender_id: str, room_id: str) -> bool:
        return self._relay(sender_id, room_id, 'rematchAccepted')

    def rematch_decline(self, sender_id: str, room_id: str) -> bool:
        return self._relay(sender_id, room_id, 'rematchDeclined')

    def time_control_set(self, sender_id: str, room_id: str, time_control: Optional[str]) -> bool:
        """Store the room's time control; it reaches a later joiner on join."""
        if not self.rooms.is_occupant(room_id, sender_id):
            self.logger.debug(f"[relay-drop] room={room_id} sid={sender_id} event=timeControlSet")
            return False
        self.rooms.set_time_control(room_id, time_control)
        return True

    def _relay(self, sender_id: str, room_id: str, event: str, payload: Optional[Any] = None) -> bool:
        delivered = self.rooms.relay_scoped(room_id, sender_id, event, payload)
        if not delivered:
            self.logger.debug(f"[relay-drop] room={room_id} sid={sender_id} event={event}")
        return delivered
