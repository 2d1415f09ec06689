"""
Synchronous publish/subscribe channel.

Each field node owns three channels (change, error, validate). Publishing
runs every subscribed handler to completion, in subscription order, before
returning to the caller.
"""

import logging
from typing import Any, Callable, List

logger = logging.getLogger(__name__)

Handler = Callable[..., Any]


class _Subscription:
    """One registration of a handler on a channel."""

    __slots__ = ('handler', 'active')

    def __init__(self, handler: Handler):
        self.handler = handler
        self.active = True


class Channel:
    """Ordered set of handlers invoked with ``(subject, *args)``.

    Subscribing the same callable twice creates two independent
    subscriptions. Handler exceptions are not caught: a raising handler
    aborts the rest of the dispatch and reaches the publisher's caller.
    """

    def __init__(self, name: str = ''):
        self.name = name
        self._subscriptions: List[_Subscription] = []

    def __len__(self) -> int:
        return len(self._subscriptions)

    def __repr__(self) -> str:
        return f"Channel({self.name!r}, handlers={len(self._subscriptions)})"

    def subscribe(self, handler: Handler) -> Callable[[], None]:
        """Register ``handler`` and return its unsubscribe action.

        The returned action is idempotent and may be called from inside a
        handler while this channel is dispatching.
        """
        if not callable(handler):
            raise TypeError(f"Handler must be callable, got {type(handler).__name__}")

        subscription = _Subscription(handler)
        self._subscriptions.append(subscription)

        def unsubscribe() -> None:
            if not subscription.active:
                return
            subscription.active = False
            self._subscriptions.remove(subscription)

        return unsubscribe

    def publish(self, subject: Any, *args: Any) -> List[Any]:
        """Invoke handlers subscribed when the call started.

        Returns:
            Handler return values, in subscription order.
        """
        # Snapshot: handlers added or removed during dispatch do not change this round
        subscriptions = list(self._subscriptions)
        if subscriptions:
            logger.debug(f"publish {self.name or 'channel'}: {len(subscriptions)} handler(s)")
        return [subscription.handler(subject, *args) for subscription in subscriptions]

    def clear(self) -> None:
        """Drop every subscription."""
        for subscription in self._subscriptions:
            subscription.active = False
        self._subscriptions.clear()
