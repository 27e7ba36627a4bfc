"""Typed inbound Socket.IO messages.

Each client event name maps to one message variant; payloads are validated
here, at the transport boundary, before they reach the broadcaster or the
signaling relay. SDP and ICE payloads stay opaque JSON objects.
"""

from typing import Annotated, Any, Dict, Literal, Optional, Union

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, TypeAdapter, ValidationError
from pydantic.alias_generators import to_camel


def _coerce_identifier(value):
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    if isinstance(value, str):
        return value.strip()
    return value


Identifier = Annotated[str, BeforeValidator(_coerce_identifier), Field(min_length=1, max_length=128)]


class ClientMessage(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True, extra='ignore')


class SubscribeAll(ClientMessage):
    event: Literal['subscribe:all']


class SubscribeSport(ClientMessage):
    event: Literal['subscribe:sport']
    sport_id: Identifier


class SubscribeGame(ClientMessage):
    event: Literal['subscribe:game']
    game_id: Identifier


class UnsubscribeAll(ClientMessage):
    event: Literal['unsubscribe:all']


class UnsubscribeSport(ClientMessage):
    event: Literal['unsubscribe:sport']
    sport_id: Identifier


class UnsubscribeGame(ClientMessage):
    event: Literal['unsubscribe:game']
    game_id: Identifier


class ScreenShareJoin(ClientMessage):
    event: Literal['screen-share:join']
    session_id: Identifier
    user_id: Optional[Identifier] = None


class ScreenShareLeave(ClientMessage):
    event: Literal['screen-share:leave']
    session_id: Identifier


class ScreenShareOffer(ClientMessage):
    event: Literal['screen-share:offer']
    session_id: Identifier
    viewer_id: Identifier
    offer: Dict[str, Any]


class ScreenShareAnswer(ClientMessage):
    event: Literal['screen-share:answer']
    session_id: Identifier
    host_id: Identifier
    answer: Dict[str, Any]


class ScreenShareIceCandidate(ClientMessage):
    event: Literal['screen-share:ice-candidate']
    session_id: Identifier
    target_id: Identifier
    candidate: Dict[str, Any]


InboundMessage = Annotated[
    Union[
        SubscribeAll,
        SubscribeSport,
        SubscribeGame,
        UnsubscribeAll,
        UnsubscribeSport,
        UnsubscribeGame,
        ScreenShareJoin,
        ScreenShareLeave,
        ScreenShareOffer,
        ScreenShareAnswer,
        ScreenShareIceCandidate,
    ],
    Field(discriminator='event'),
]

_inbound = TypeAdapter(InboundMessage)

# Events whose payload may be sent as a bare id instead of an object
_SCALAR_FIELDS = {
    'subscribe:sport': 'sportId',
    'subscribe:game': 'gameId',
    'unsubscribe:sport': 'sportId',
    'unsubscribe:game': 'gameId',
}

INBOUND_EVENTS = (
    'subscribe:all',
    'subscribe:sport',
    'subscribe:game',
    'unsubscribe:all',
    'unsubscribe:sport',
    'unsubscribe:game',
    'screen-share:join',
    'screen-share:leave',
    'screen-share:offer',
    'screen-share:answer',
    'screen-share:ice-candidate',
)


class InvalidMessage(ValueError):
    def __init__(self, event: str, detail: str):
        super().__init__(f"Invalid payload for {event}: {detail}")
        self.event = event
        self.detail = detail


def parse_client_message(event: str, data=None):
    """Validate a raw Socket.IO payload into its message variant.

    Raises InvalidMessage when the payload does not match the event.
    """
    if data is None:
        data = {}
    elif not isinstance(data, dict):
        field = _SCALAR_FIELDS.get(event)
        if field is None:
            raise InvalidMessage(event, 'payload must be an object')
        data = {field: data}
    try:
        return _inbound.validate_python({**data, 'event': event})
    except ValidationError as exc:
        first = exc.errors(include_url=False)[0]
        location = '.'.join(str(part) for part in first['loc'][1:]) or 'payload'
        raise InvalidMessage(event, f"{location}: {first['msg']}") from exc
