import logging
import threading
from typing import Any, Dict, Iterable, Set

from .transport import Transport

ALL_TOPIC = 'all'


def sport_topic(sport_id) -> str:
    return f"sport:{sport_id}"


def game_topic(game_id) -> str:
    return f"game:{game_id}"


def game_topics(sport_id, game_id) -> tuple:
    """Topics every game event is published to: global, its sport and itself."""
    return (ALL_TOPIC, sport_topic(sport_id), game_topic(game_id))


class TopicBroadcaster:
    """Fan events out to connections grouped by topic.

    Topic-agnostic: callers decide which topics an event belongs to. Delivery
    is best-effort; a failed send to one connection is logged and skipped.
    Membership changes are guarded by a lock because Socket.IO handlers and
    the polling task may run on different threads; sends happen outside it.
    """

    def __init__(self, transport: Transport, logger: logging.Logger = None):
        self.transport = transport
        self.logger = logger or logging.getLogger(__name__)
        self._lock = threading.Lock()
        self._connections: Set[str] = set()
        self._topics: Dict[str, Set[str]] = {}
        self._memberships: Dict[str, Set[str]] = {}

    def connect(self, connection_id: str) -> None:
        with self._lock:
            self._connections.add(connection_id)

    def disconnect(self, connection_id: str) -> None:
        with self._lock:
            self._connections.discard(connection_id)
            for topic in self._memberships.pop(connection_id, set()):
                self._discard(topic, connection_id)

    def subscribe(self, connection_id: str, topic: str) -> None:
        with self._lock:
            # Unknown or already disconnected ids never gain membership
            if connection_id not in self._connections:
                return
            self._topics.setdefault(topic, set()).add(connection_id)
            self._memberships.setdefault(connection_id, set()).add(topic)

    def unsubscribe(self, connection_id: str, topic: str) -> None:
        with self._lock:
            self._discard(topic, connection_id)
            topics = self._memberships.get(connection_id)
            if topics is not None:
                topics.discard(topic)
                if not topics:
                    del self._memberships[connection_id]

    def publish(self, event: str, payload: Any, topics: Iterable[str]) -> int:
        """Deliver ``payload`` as ``event`` to every subscriber of ``topics``.

        A connection subscribed to several of the topics receives the event
        once. Returns the number of successful deliveries.
        """
        with self._lock:
            recipients: Set[str] = set()
            for topic in topics:
                recipients.update(self._topics.get(topic, ()))

        delivered = 0
        for connection_id in recipients:
            try:
                self.transport.send(connection_id, event, payload)
            except Exception as exc:
                self.logger.warning(f"[publish-fail] event={event} connection={connection_id} error={exc}")
                continue
            delivered += 1
        self.logger.info(f"[publish] event={event} recipients={delivered}/{len(recipients)} connections={self.connection_count()}")
        return delivered

    def subscribers(self, topic: str) -> Set[str]:
        with self._lock:
            return set(self._topics.get(topic, ()))

    def topics_of(self, connection_id: str) -> Set[str]:
        with self._lock:
            return set(self._memberships.get(connection_id, ()))

    def connection_count(self) -> int:
        return len(self._connections)

    def _discard(self, topic: str, connection_id: str) -> None:
        # Caller holds the lock
        members = self._topics.get(topic)
        if members is None:
            return
        members.discard(connection_id)
        if not members:
            del self._topics[topic]
