from abc import ABC, abstractmethod
from typing import Callable, Generic, List, TypeVar
import logging

logger = logging.getLogger(__name__)

T = TypeVar('T')


class Subscription:
    """Cancellation handle returned by SensorSource.subscribe. cancel() is idempotent."""

    def __init__(self, cancel_fn: Callable[[], None]):
        self._cancel_fn = cancel_fn
        self.active = True

    def cancel(self) -> None:
        if self.active:
            self.active = False
            self._cancel_fn()


class SensorSource(ABC, Generic[T]):
    """A platform event stream (motion or orientation events)."""

    async def start(self) -> None:
        """Acquire the underlying sensor. Raise AcquisitionFailure if unavailable."""

    @abstractmethod
    def subscribe(self, callback: Callable[[T], None]) -> Subscription:
        pass


class EventSource(SensorSource[T]):
    """
    In-process event dispatcher. emit() delivers synchronously to every current
    subscriber, in subscription order, so each handler runs to completion before
    the next event is delivered.
    """

    def __init__(self, name: str = "events"):
        self.name = name
        self._callbacks: List[Callable[[T], None]] = []

    def subscribe(self, callback: Callable[[T], None]) -> Subscription:
        self._callbacks.append(callback)
        logger.debug("%s: subscriber added (%d total)", self.name, len(self._callbacks))

        def remove():
            self._callbacks.remove(callback)
            logger.debug("%s: subscriber removed (%d left)", self.name, len(self._callbacks))

        return Subscription(remove)

    @property
    def subscriber_count(self) -> int:
        return len(self._callbacks)

    def emit(self, event: T) -> None:
        # Copy so a handler may cancel its own subscription mid-dispatch
        for callback in list(self._callbacks):
            callback(event)
