"""Topic-addressed event bus shared by all data sources.

Delivery is synchronous in the publishing thread, so events published by
one source reach subscribers in the order they were published. Many sources
may publish at the same time; no ordering exists across publishers.
"""
import logging
import threading
from enum import IntEnum
from typing import Any, Callable, Dict, List

logger = logging.getLogger("subsweep.eventbus")

# Topics
LOG_TOPIC = "log"
SET_ACTIVE_TOPIC = "set_active"
NEW_NAME_TOPIC = "new_name"

Handler = Callable[[Any], None]


class Priority(IntEnum):
    """Event priority levels."""
    LOW = 0
    HIGH = 1
    CRITICAL = 2


class EventBus:
    """Publish/subscribe channel keyed by topic name.
    
    Example:
        bus = EventBus()
        bus.subscribe(NEW_NAME_TOPIC, lambda req: print(req.name))
        bus.publish(NEW_NAME_TOPIC, Priority.HIGH, request)
    """
    
    def __init__(self):
        self._handlers: Dict[str, List[Handler]] = {}
        self._lock = threading.Lock()
    
    def subscribe(self, topic: str, handler: Handler) -> None:
        with self._lock:
            self._handlers.setdefault(topic, []).append(handler)
    
    def unsubscribe(self, topic: str, handler: Handler) -> None:
        with self._lock:
            handlers = self._handlers.get(topic, [])
            if handler in handlers:
                handlers.remove(handler)
    
    def publish(self, topic: str, priority: Priority, payload: Any) -> None:
        """Deliver ``payload`` to every handler subscribed to ``topic``.
        
        A handler that raises is logged and skipped; the remaining handlers
        and the publisher are unaffected.
        """
        with self._lock:
            handlers = list(self._handlers.get(topic, []))
        
        for handler in handlers:
            try:
                handler(payload)
            except Exception:
                logger.exception(f"Handler for topic '{topic}' ({priority.name}) failed")
