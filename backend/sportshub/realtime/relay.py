import logging
import threading
from typing import Any, Dict, Optional, Set, Tuple

from .transport import Transport

VIEWER_JOINED = 'screen-share:viewer-joined'
VIEWER_LEFT = 'screen-share:viewer-left'
OFFER = 'screen-share:offer'
ANSWER = 'screen-share:answer'
ICE_CANDIDATE = 'screen-share:ice-candidate'
SESSION_UPDATED = 'screen-share:session-updated'
SESSION_ENDED = 'screen-share:session-ended'


class SignalingRelay:
    """Forward WebRTC handshake messages between peers of a screen-share session.

    The relay keeps one room per session and a side-table of which session
    (and optional user) each connection is joined to. A connection is in at
    most one room. Offers, answers and ICE candidates are addressed to a
    single connection id and are never inspected; a message for a target
    that is no longer connected is dropped.
    """

    def __init__(self, transport: Transport, logger: logging.Logger = None):
        self.transport = transport
        self.logger = logger or logging.getLogger(__name__)
        self._lock = threading.Lock()
        self._rooms: Dict[str, Set[str]] = {}
        self._joined: Dict[str, Tuple[str, Optional[str]]] = {}

    # ---- room membership ----

    def join(self, connection_id: str, session_id: str, user_id: Optional[str] = None) -> None:
        if not self.transport.is_connected(connection_id):
            self.logger.debug(f"[relay-join-drop] session={session_id} connection={connection_id} not connected")
            return
        with self._lock:
            current = self._joined.get(connection_id)
            if current and current[0] == session_id:
                self._joined[connection_id] = (session_id, user_id or current[1])
                return
            left_peers = self._remove(connection_id, current[0]) if current else set()
            peers = set(self._rooms.get(session_id, ()))
            self._rooms.setdefault(session_id, set()).add(connection_id)
            self._joined[connection_id] = (session_id, user_id)

        if current:
            self._notify_left(current[0], connection_id, left_peers)
        notice = {'sessionId': session_id, 'viewerId': connection_id}
        if user_id is not None:
            notice['userId'] = user_id
        for peer in peers:
            self._send(peer, VIEWER_JOINED, notice)
        self.logger.info(f"[relay-join] session={session_id} connection={connection_id} members={len(peers) + 1}")

    def leave(self, connection_id: str, session_id: str) -> None:
        with self._lock:
            current = self._joined.get(connection_id)
            if not current or current[0] != session_id:
                return
            remaining = self._remove(connection_id, session_id)
        self._notify_left(session_id, connection_id, remaining)

    def disconnect(self, connection_id: str) -> None:
        session_id = self.session_of(connection_id)
        if session_id is not None:
            self.leave(connection_id, session_id)

    # ---- addressed forwarding ----

    def relay_offer(self, sender_id: str, session_id: str, target_id: str, offer: Any) -> bool:
        return self._forward(target_id, OFFER, {'sessionId': session_id, 'hostId': sender_id, 'offer': offer})

    def relay_answer(self, sender_id: str, session_id: str, target_id: str, answer: Any) -> bool:
        return self._forward(target_id, ANSWER, {'sessionId': session_id, 'viewerId': sender_id, 'answer': answer})

    def relay_ice_candidate(self, sender_id: str, session_id: str, target_id: str, candidate: Any) -> bool:
        return self._forward(target_id, ICE_CANDIDATE, {'sessionId': session_id, 'senderId': sender_id, 'candidate': candidate})

    def broadcast_to_session(self, session_id: str, event: str, payload: Any) -> int:
        """Fan a session lifecycle notification out to everyone in the room."""
        delivered = 0
        for member in self.members(session_id):
            if self._send(member, event, payload):
                delivered += 1
        self.logger.info(f"[relay-broadcast] session={session_id} event={event} recipients={delivered}")
        return delivered

    # ---- introspection ----

    def members(self, session_id: str) -> Set[str]:
        with self._lock:
            return set(self._rooms.get(session_id, ()))

    def session_of(self, connection_id: str) -> Optional[str]:
        with self._lock:
            joined = self._joined.get(connection_id)
        return joined[0] if joined else None

    def room_count(self) -> int:
        return len(self._rooms)

    # ---- internals ----

    def _remove(self, connection_id: str, session_id: str) -> Set[str]:
        # Caller holds the lock; returns the members left behind
        self._joined.pop(connection_id, None)
        members = self._rooms.get(session_id)
        if members is None:
            return set()
        members.discard(connection_id)
        if not members:
            del self._rooms[session_id]
            return set()
        return set(members)

    def _notify_left(self, session_id: str, connection_id: str, peers: Set[str]) -> None:
        notice = {'sessionId': session_id, 'viewerId': connection_id}
        for peer in peers:
            self._send(peer, VIEWER_LEFT, notice)
        self.logger.info(f"[relay-leave] session={session_id} connection={connection_id} members={len(peers)}")

    def _forward(self, target_id: str, event: str, payload: Dict[str, Any]) -> bool:
        if not self.transport.is_connected(target_id):
            self.logger.debug(f"[relay-drop] event={event} session={payload['sessionId']} target={target_id}")
            return False
        return self._send(target_id, event, payload)

    def _send(self, connection_id: str, event: str, payload: Any) -> bool:
        try:
            self.transport.send(connection_id, event, payload)
        except Exception as exc:
            self.logger.warning(f"[relay-fail] event={event} connection={connection_id} error={exc}")
            return False
        return True
