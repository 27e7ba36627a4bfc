from flask import current_app, request
from flask_login import current_user
from flask_socketio import emit

from sportshub.realtime import ALL_TOPIC, Realtime, game_topic, sport_topic
from sportshub.realtime.messages import (
    INBOUND_EVENTS,
    InvalidMessage,
    ScreenShareAnswer,
    ScreenShareIceCandidate,
    ScreenShareJoin,
    ScreenShareLeave,
    ScreenShareOffer,
    SubscribeAll,
    SubscribeGame,
    SubscribeSport,
    UnsubscribeAll,
    UnsubscribeGame,
    UnsubscribeSport,
    parse_client_message,
)


def _get_sid() -> str:
    return request.sid  # type: ignore[attr-defined]


def _topic_for(message) -> str:
    if isinstance(message, (SubscribeSport, UnsubscribeSport)):
        return sport_topic(message.sport_id)
    if isinstance(message, (SubscribeGame, UnsubscribeGame)):
        return game_topic(message.game_id)
    return ALL_TOPIC


def _authenticated_user_id():
    try:
        if current_user and current_user.is_authenticated:
            return str(current_user.id)
    except Exception:
        # No login manager bound to this request context
        return None
    return None


def dispatch(realtime: Realtime, sid: str, message) -> None:
    """Apply one validated client message from connection ``sid`` to the core."""
    broadcaster, relay = realtime.broadcaster, realtime.relay

    if isinstance(message, (SubscribeAll, SubscribeSport, SubscribeGame)):
        broadcaster.subscribe(sid, _topic_for(message))
    elif isinstance(message, (UnsubscribeAll, UnsubscribeSport, UnsubscribeGame)):
        broadcaster.unsubscribe(sid, _topic_for(message))
    elif isinstance(message, ScreenShareJoin):
        relay.join(sid, message.session_id, message.user_id or _authenticated_user_id())
    elif isinstance(message, ScreenShareLeave):
        relay.leave(sid, message.session_id)
    elif isinstance(message, ScreenShareOffer):
        relay.relay_offer(sid, message.session_id, message.viewer_id, message.offer)
    elif isinstance(message, ScreenShareAnswer):
        relay.relay_answer(sid, message.session_id, message.host_id, message.answer)
    elif isinstance(message, ScreenShareIceCandidate):
        relay.relay_ice_candidate(sid, message.session_id, message.target_id, message.candidate)


def register_socketio_handlers(socketio, realtime: Realtime, namespace: str = '/ws') -> None:
    """Bind connection lifecycle and client messages on ``namespace`` to the realtime core."""

    def handle_connect(auth=None):
        sid = _get_sid()
        realtime.broadcaster.connect(sid)
        current_app.logger.info(f"[connect] connection={sid} connections={realtime.broadcaster.connection_count()}")
        emit('connected', {'connectionId': sid})

    def handle_disconnect(reason=None):
        sid = _get_sid()
        # Room first so remaining peers hear viewer-left, then drop every topic
        realtime.relay.disconnect(sid)
        realtime.broadcaster.disconnect(sid)
        current_app.logger.info(f"[disconnect] connection={sid} reason={reason}")

    def handle_ping(data=None):
        emit('pong', data or {})

    def make_handler(event):
        def handler(data=None):
            try:
                message = parse_client_message(event, data)
            except InvalidMessage as exc:
                current_app.logger.info(f"[invalid-message] connection={_get_sid()} event={event} detail={exc.detail}")
                emit('error', {'message': str(exc), 'event': event})
                return
            dispatch(realtime, _get_sid(), message)
        handler.__name__ = 'handle_' + event.replace(':', '_').replace('-', '_')
        return handler

    socketio.on_event('connect', handle_connect, namespace=namespace)
    socketio.on_event('disconnect', handle_disconnect, namespace=namespace)
    socketio.on_event('ping', handle_ping, namespace=namespace)
    for event in INBOUND_EVENTS:
        socketio.on_event(event, make_handler(event), namespace=namespace)
