"""Transport port for the realtime core.

The broadcaster and signaling relay only ever address a single connection
at a time; everything else (rooms, fan-out, dedup) lives in the core.
"""

from typing import Any, Protocol


class Transport(Protocol):
    def send(self, connection_id: str, event: str, payload: Any) -> None: ...

    def is_connected(self, connection_id: str) -> bool: ...


class SocketIOTransport:
    """Deliver events through Flask-SocketIO.

    Every Socket.IO connection is implicitly a member of a room named after
    its sid, so emitting ``to=sid`` addresses exactly one connection.
    """

    def __init__(self, socketio, namespace: str = '/ws'):
        self.socketio = socketio
        self.namespace = namespace

    def send(self, connection_id: str, event: str, payload: Any) -> None:
        self.socketio.emit(event, payload, to=connection_id, namespace=self.namespace)

    def is_connected(self, connection_id: str) -> bool:
        server = self.socketio.server
        if server is None:
            return False
        return bool(server.manager.is_connected(connection_id, self.namespace))
