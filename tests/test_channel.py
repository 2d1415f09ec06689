"""Tests for the synchronous notification channel."""
import pytest

from formtree.channel import Channel


def test_publish_calls_handlers_in_order():
    """Handlers run in subscription order with (subject, *args)."""
    channel = Channel('change')
    calls = []
    channel.subscribe(lambda subject, *args: calls.append(('first', subject, args)))
    channel.subscribe(lambda subject, *args: calls.append(('second', subject, args)))

    channel.publish('node', 'child')

    assert calls == [('first', 'node', ('child',)), ('second', 'node', ('child',))]


def test_publish_returns_handler_results():
    """publish() returns handler results in order."""
    channel = Channel()
    channel.subscribe(lambda subject: True)
    channel.subscribe(lambda subject: None)
    channel.subscribe(lambda subject: False)

    assert channel.publish('node') == [True, None, False]


def test_unsubscribe_is_idempotent():
    """Calling unsubscribe twice removes the handler once."""
    channel = Channel()
    calls = []
    unsubscribe = channel.subscribe(lambda subject: calls.append(subject))

    unsubscribe()
    unsubscribe()
    channel.publish('node')

    assert calls == []
    assert len(channel) == 0


def test_same_handler_subscribed_twice_runs_twice():
    """Each subscribe() call is an independent subscription."""
    channel = Channel()
    calls = []

    def handler(subject):
        calls.append(subject)

    first = channel.subscribe(handler)
    channel.subscribe(handler)
    channel.publish('x')
    assert calls == ['x', 'x']

    first()
    channel.publish('y')
    assert calls == ['x', 'x', 'y']


def test_unsubscribe_self_during_dispatch():
    """A handler removing itself does not skip later handlers."""
    channel = Channel()
    calls = []
    unsubscribe = None

    def once(subject):
        calls.append('once')
        unsubscribe()

    unsubscribe = channel.subscribe(once)
    channel.subscribe(lambda subject: calls.append('after'))

    channel.publish('node')
    channel.publish('node')

    assert calls == ['once', 'after', 'after']


def test_subscribe_during_dispatch_waits_for_next_publish():
    """Handlers added mid-dispatch are not called in the current round."""
    channel = Channel()
    calls = []

    def adder(subject):
        calls.append('adder')
        channel.subscribe(lambda s: calls.append('late'))

    channel.subscribe(adder)
    channel.publish('node')
    assert calls == ['adder']


def test_handler_exception_aborts_dispatch():
    """A raising handler propagates and stops the remaining handlers."""
    channel = Channel()
    calls = []

    def boom(subject):
        raise RuntimeError("handler failed")

    channel.subscribe(boom)
    channel.subscribe(lambda subject: calls.append(subject))

    with pytest.raises(RuntimeError, match="handler failed"):
        channel.publish('node')
    assert calls == []


def test_subscribe_rejects_non_callable():
    """Only callables can be subscribed."""
    with pytest.raises(TypeError):
        Channel().subscribe("not callable")


def test_clear_drops_subscriptions():
    """clear() removes every handler and leaves old unsubscribes harmless."""
    channel = Channel()
    unsubscribe = channel.subscribe(lambda subject: None)
    channel.clear()

    assert len(channel) == 0
    unsubscribe()
