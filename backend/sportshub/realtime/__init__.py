"""Real-time fan-out and WebRTC signaling relay.

Two components share one transport:
1. TopicBroadcaster: score events -> subscribers of `all`, `sport:<id>`, `game:<id>`
2. SignalingRelay: per-session rooms and addressed offer/answer/ICE forwarding

Both are built once by the app factory and reached through `get_realtime()`.
"""

from dataclasses import dataclass

from flask import current_app

from .broadcaster import ALL_TOPIC, TopicBroadcaster, game_topic, game_topics, sport_topic
from .relay import SignalingRelay
from .transport import SocketIOTransport, Transport

EXTENSION_KEY = 'sportshub.realtime'


@dataclass
class Realtime:
    broadcaster: TopicBroadcaster
    relay: SignalingRelay


def get_realtime(app=None) -> Realtime:
    app = app or current_app
    return app.extensions[EXTENSION_KEY]


__all__ = [
    'ALL_TOPIC',
    'EXTENSION_KEY',
    'Realtime',
    'SignalingRelay',
    'SocketIOTransport',
    'TopicBroadcaster',
    'Transport',
    'game_topic',
    'game_topics',
    'get_realtime',
    'sport_topic',
]
