# core/events.py

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Type, Any

logger = logging.getLogger(__name__)

@dataclass(frozen=True)
class DomainEvent:
    """Base class for everything published on the EventBus"""
    book_id: Optional[str] = None

@dataclass(frozen=True)
class BookAdded(DomainEvent):
    column: str = ""
    record: Any = None

@dataclass(frozen=True)
class BookMoved(DomainEvent):
    from_column: str = ""
    to_column: str = ""
    record: Any = None

@dataclass(frozen=True)
class BookUpdated(DomainEvent):
    column: str = ""
    changes: Dict[str, Any] = field(default_factory=dict)
    record: Any = None

@dataclass(frozen=True)
class BookDeleted(DomainEvent):
    column: str = ""
    record: Any = None

@dataclass(frozen=True)
class LibraryReplaced(DomainEvent):
    """The whole library was swapped out (import, reset or reload)"""
    total_books: int = 0

@dataclass(frozen=True)
class StorageQuotaExceeded(DomainEvent):
    """A save was refused for lack of space; the user should clean up"""
    message: str = ""

Handler = Callable[[DomainEvent], None]

class EventBus:
    """Synchronous publish/subscribe channel for domain events.

    Handlers subscribed to a class also receive its subclasses, so
    subscribing to DomainEvent observes everything.
    """

    def __init__(self):
        self._handlers: Dict[Type[DomainEvent], List[Handler]] = defaultdict(list)

    def subscribe(self, event_type: Type[DomainEvent], handler: Handler) -> Callable[[], None]:
        """Register handler for event_type; returns a function that unsubscribes it."""
        self._handlers[event_type].append(handler)

        def unsubscribe():
            if handler in self._handlers[event_type]:
                self._handlers[event_type].remove(handler)

        return unsubscribe

    def publish(self, event: DomainEvent) -> None:
        for event_type, handlers in list(self._handlers.items()):
            if not isinstance(event, event_type):
                continue
            for handler in list(handlers):
                try:
                    handler(event)
                except Exception:
                    # The mutation is already committed
                    logger.exception(f"Event handler {handler!r} failed for {type(event).__name__}")
