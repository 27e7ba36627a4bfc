from sportshub.realtime import SignalingRelay


def _relay(transport, *connections):
    transport.connect(*connections)
    return SignalingRelay(transport)


def test_join_notifies_others_but_not_self(transport):
    relay = _relay(transport, 'A', 'B')
    relay.join('A', 's1')
    assert transport.received('A') == []

    relay.join('B', 's1', user_id='u-b')
    assert transport.received('A', 'screen-share:viewer-joined') == [
        {'sessionId': 's1', 'viewerId': 'B', 'userId': 'u-b'}
    ]
    assert transport.received('B') == []
    assert relay.members('s1') == {'A', 'B'}


def test_duplicate_join_is_a_noop(transport):
    relay = _relay(transport, 'A', 'B')
    relay.join('A', 's1')
    relay.join('B', 's1')
    relay.join('B', 's1')
    assert len(transport.received('A', 'screen-share:viewer-joined')) == 1


def test_joining_another_session_leaves_the_first(transport):
    relay = _relay(transport, 'A', 'B', 'C')
    relay.join('A', 'sA')
    relay.join('C', 'sA')
    relay.join('C', 'sB')

    assert relay.session_of('C') == 'sB'
    assert relay.members('sA') == {'A'}
    assert 'C' in relay.members('sB')
    assert transport.received('A', 'screen-share:viewer-left') == [{'sessionId': 'sA', 'viewerId': 'C'}]

    # Leaving A's room again does nothing
    before = list(transport.sent)
    relay.leave('C', 'sA')
    assert transport.sent == before
    assert relay.members('sB') == {'C'}


def test_leave_when_not_member_is_silent(transport):
    relay = _relay(transport, 'A')
    relay.leave('A', 'nope')
    relay.disconnect('A')
    assert transport.sent == []


def test_offer_reaches_only_the_target(transport):
    relay = _relay(transport, 'A', 'B', 'C')
    for c in ('A', 'B', 'C'):
        relay.join(c, 's1')
    transport.sent.clear()

    offer = {'type': 'offer', 'sdp': 'v=0...'}
    assert relay.relay_offer('A', 's1', 'B', offer) is True
    assert transport.received('B', 'screen-share:offer') == [{'sessionId': 's1', 'hostId': 'A', 'offer': offer}]
    assert transport.received('C') == []
    assert transport.received('A') == []


def test_answer_and_ice_are_addressed(transport):
    relay = _relay(transport, 'A', 'B')
    answer = {'type': 'answer', 'sdp': 'v=0'}
    candidate = {'candidate': 'candidate:1 1 udp 1 10.0.0.1 5000 typ host', 'sdpMid': '0', 'sdpMLineIndex': 0}

    relay.relay_answer('B', 's1', 'A', answer)
    relay.relay_ice_candidate('A', 's1', 'B', candidate)

    assert transport.received('A', 'screen-share:answer') == [{'sessionId': 's1', 'viewerId': 'B', 'answer': answer}]
    assert transport.received('B', 'screen-share:ice-candidate') == [
        {'sessionId': 's1', 'senderId': 'A', 'candidate': candidate}
    ]


def test_relay_to_unknown_target_is_dropped(transport):
    relay = _relay(transport, 'A')
    assert relay.relay_offer('A', 's1', 'ghost', {'sdp': 'x'}) is False
    assert relay.relay_ice_candidate('A', 's1', 'ghost', {}) is False
    assert transport.sent == []


def test_send_failure_does_not_raise(transport):
    relay = _relay(transport, 'A', 'B')
    transport.failing.add('B')
    assert relay.relay_offer('A', 's1', 'B', {}) is False


def test_broadcast_to_session_reaches_every_member(transport):
    relay = _relay(transport, 'A', 'B', 'X')
    relay.join('A', 's1')
    relay.join('B', 's1')
    relay.join('X', 's2')
    transport.sent.clear()

    assert relay.broadcast_to_session('s1', 'screen-share:session-ended', {'sessionId': 's1'}) == 2
    assert transport.events_for('A') == ['screen-share:session-ended']
    assert transport.events_for('B') == ['screen-share:session-ended']
    assert transport.received('X') == []


def test_host_viewer_handshake_scenario(transport):
    relay = _relay(transport, 'A', 'B')

    relay.join('A', 's1')
    relay.join('B', 's1')
    assert transport.received('A', 'screen-share:viewer-joined') == [{'sessionId': 's1', 'viewerId': 'B'}]
    assert transport.received('B', 'screen-share:viewer-joined') == []

    offer = {'type': 'offer', 'sdp': '...'}
    relay.relay_offer('A', 's1', 'B', offer)
    assert transport.received('B', 'screen-share:offer') == [{'sessionId': 's1', 'hostId': 'A', 'offer': offer}]

    transport.drop('B')
    relay.disconnect('B')
    assert transport.received('A', 'screen-share:viewer-left') == [{'sessionId': 's1', 'viewerId': 'B'}]
    assert relay.members('s1') == {'A'}
    assert relay.session_of('B') is None

    sent_before = len(transport.sent)
    assert relay.relay_answer('A', 's1', 'B', {'type': 'answer', 'sdp': '...'}) is False
    assert len(transport.sent) == sent_before


def test_last_member_leaving_removes_room(transport):
    relay = _relay(transport, 'A')
    relay.join('A', 's1')
    assert relay.room_count() == 1
    relay.leave('A', 's1')
    assert relay.room_count() == 0


def test_join_after_disconnect_is_ignored(transport):
    relay = _relay(transport, 'host')
    relay.join('host', 's1')
    relay.disconnect('ghost')
    relay.join('ghost', 's1')
    assert relay.members('s1') == {'host'}
    assert relay.session_of('ghost') is None
    assert transport.received('host') == []
