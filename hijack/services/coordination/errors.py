class CoordinationError(Exception):
    """Base for room errors reported back to the originating connection."""

    kind = 'error'
    message = 'Request failed'

    def __init__(self, room_id=None):
        super().__init__(self.message)
        self.room_id = room_id

    def to_dict(self):
        return {'message': self.message, 'kind': self.kind}


class RoomAlreadyExists(CoordinationError):
    kind = 'room_exists'
    message = 'Room already exists'


class RoomNotFound(CoordinationError):
    kind = 'room_not_found'
    message = 'Room does not exist'


class RoomFull(CoordinationError):
    kind = 'room_full'
    message = 'Room is full'
