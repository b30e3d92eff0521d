from typing import Any, Optional


class SocketIONotifier:
    """Deliver outbound events through a Flask-SocketIO server.

    Connections are addressed by sid, so delivery does not depend on
    Socket.IO room membership; the Room Store is the only source of truth
    for who occupies which room.
    """

    def __init__(self, socketio, namespace: str = '/'):
        self.socketio = socketio
        self.namespace = namespace

    def send(self, conn_id: str, event: str, payload: Optional[Any] = None) -> None:
        if payload is None:
            self.socketio.emit(event, to=conn_id, namespace=self.namespace)
        else:
            self.socketio.emit(event, payload, to=conn_id, namespace=self.namespace)

    def broadcast(self, event: str, payload: Optional[Any] = None) -> None:
        self.socketio.emit(event, payload, namespace=self.namespace)
