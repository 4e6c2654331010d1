from hypothesis import given, settings
from hypothesis import strategies as st

from topicbus import WILDCARD, Envelope, create_pubsub

topics = st.text(min_size=1, max_size=20).filter(lambda t: t != WILDCARD)
payloads = st.one_of(st.none(), st.integers(), st.text(max_size=20))


def _make_callbacks(n: int):
    calls: list[tuple[int, object]] = []
    callbacks = [lambda data, i=i: calls.append((i, data)) for i in range(n)]
    return callbacks, calls


@given(st.lists(topics, min_size=1, max_size=10))
def test_subscribe_then_unsubscribe_leaves_no_topics(topic_list):
    bus = create_pubsub()
    callbacks, _ = _make_callbacks(len(topic_list))
    unsubs = [bus.subscribe(t, cb) for t, cb in zip(topic_list, callbacks)]

    for t, cb in zip(topic_list, callbacks):
        assert bus.is_subscribed(t, cb)

    for unsub in unsubs:
        assert unsub() is True
        assert unsub() is False

    assert bus.dump() == {}
    for t, cb in zip(topic_list, callbacks):
        assert not bus.is_subscribed(t, cb)


@given(topics, payloads, st.integers(min_value=1, max_value=8))
def test_all_subscribers_get_payload_in_order(topic, payload, n):
    bus = create_pubsub()
    callbacks, calls = _make_callbacks(n)
    for cb in callbacks:
        bus.subscribe(topic, cb)

    assert bus.publish(topic, payload) is True
    assert calls == [(i, payload) for i in range(n)]


@given(topics, payloads)
def test_wildcard_receives_envelope(topic, payload):
    bus = create_pubsub()
    wild = []
    direct = []
    bus.subscribe(WILDCARD, wild.append)
    bus.subscribe(topic, direct.append)

    bus.publish(topic, payload)

    assert direct == [payload]
    assert wild == [Envelope(event=topic, data=payload)]


@settings(max_examples=50)
@given(topics, st.lists(st.booleans(), min_size=1, max_size=8))
def test_failures_do_not_stop_delivery(topic, failing):
    errors = []
    bus = create_pubsub(on_error=lambda e, t, w: errors.append((t, w)))
    delivered = []

    def make(i, fails):
        def cb(data):
            delivered.append(i)
            if fails:
                raise RuntimeError(i)

        return cb

    for i, fails in enumerate(failing):
        bus.subscribe(topic, make(i, fails))

    bus.publish(topic, None)

    assert delivered == list(range(len(failing)))
    assert errors == [(topic, False)] * sum(failing)


@given(topics, st.lists(payloads, min_size=1, max_size=5))
def test_subscribe_once_gets_first_payload_only(topic, published):
    bus = create_pubsub()
    seen = []
    bus.subscribe_once(topic, seen.append)
    for payload in published:
        bus.publish(topic, payload)
    assert seen == published[:1]
    assert bus.dump() == {}
