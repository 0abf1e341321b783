import logging
from collections import defaultdict
from dataclasses import dataclass
from threading import RLock
from typing import Any, Callable, DefaultDict, Dict, List

logger = logging.getLogger(__name__)

STATE_CHANGED = "state_changed"
BANNER = "banner"


@dataclass(frozen=True)
class Event:
    """Generic event container.

    Attributes:
        name: Event name, one of the module constants.
        payload: Arbitrary payload associated with the event.
    """
    name: str
    payload: Dict[str, Any]


class EventBus:
    """A lightweight thread-safe publish/subscribe event bus.

    Callbacks registered for an event name are invoked in registration
    order. A failing subscriber is logged and does not stop the others.
    """

    def __init__(self) -> None:
        self._subs: DefaultDict[str, List[Callable[[Event], None]]] = defaultdict(list)
        self._lock = RLock()

    def subscribe(self, event_name: str, callback: Callable[[Event], None]) -> None:
        if not callable(callback):
            raise TypeError("callback must be callable")
        with self._lock:
            self._subs[event_name].append(callback)
            logger.debug("Subscribed %s to '%s'", getattr(callback, "__name__", str(callback)), event_name)

    def unsubscribe(self, event_name: str, callback: Callable[[Event], None]) -> None:
        with self._lock:
            if callback in self._subs.get(event_name, []):
                self._subs[event_name].remove(callback)

    def publish(self, event_name: str, payload: Dict[str, Any]) -> None:
        event = Event(name=event_name, payload=payload)
        with self._lock:
            subs = list(self._subs.get(event_name, []))
        for cb in subs:
            try:
                cb(event)
            except Exception:
                logger.exception("Unhandled exception in event subscriber for '%s'", event_name)
