import logging
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Literal, Mapping, Optional


logger = logging.getLogger(__name__)

TRIPS = 'trips'
ITINERARIES = 'itineraries'

ChangeKind = Literal['put', 'update', 'delete']


@dataclass(frozen=True)
class ChangeEvent:
    """A document changed in the store."""

    collection: str
    doc_id: str
    kind: ChangeKind
    document: Optional[Dict[str, Any]] = field(default=None)


OnChange = Callable[[ChangeEvent], None]
Unsubscribe = Callable[[], None]


class DocumentStore(ABC):
    """
    Abstract document store holding JSON-like documents keyed by `id` in named collections.

    Concrete stores implement the read and write operations; the subscription
    registry is shared. Stores call `_notify` after every successful write so
    subscribers see each change exactly once.

    Writes raise `StoreWriteError` on failure. `update_many` must apply all of its
    updates or none of them.
    """

    def __init__(self):
        self._listeners: Dict[str, List[OnChange]] = {}
        self._listeners_lock = threading.Lock()

    @abstractmethod
    def get(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        """Return the document or None when it does not exist."""

    @abstractmethod
    def put(self, collection: str, document: Mapping[str, Any]) -> None:
        """Create or fully replace a document; `document['id']` is the key."""

    @abstractmethod
    def update(self, collection: str, doc_id: str, fields: Mapping[str, Any]) -> Dict[str, Any]:
        """Overwrite top-level fields of an existing document and return the new document."""

    @abstractmethod
    def update_many(self, collection: str, updates: Mapping[str, Mapping[str, Any]]) -> None:
        """Apply `{doc_id: fields}` updates atomically."""

    @abstractmethod
    def delete(self, collection: str, doc_id: str) -> None:
        """Delete a document; deleting a missing document is not an error."""

    @abstractmethod
    def delete_many(self, collection: str, doc_ids: Iterable[str]) -> None:
        """Delete several documents."""

    @abstractmethod
    def query(self, collection: str, **equals: Any) -> List[Dict[str, Any]]:
        """Return every document whose fields equal all of the given values."""

    def subscribe(self, collection: str, on_change: OnChange) -> Unsubscribe:
        """
        Register `on_change` for every change in `collection`.

        Returns:
            A callable that removes the registration; calling it twice is harmless.
        """
        with self._listeners_lock:
            self._listeners.setdefault(collection, []).append(on_change)

        def unsubscribe() -> None:
            with self._listeners_lock:
                listeners = self._listeners.get(collection, [])
                if on_change in listeners:
                    listeners.remove(on_change)

        return unsubscribe

    def _notify(self, event: ChangeEvent) -> None:
        with self._listeners_lock:
            listeners = list(self._listeners.get(event.collection, []))
        for listener in listeners:
            try:
                listener(event)
            except Exception:
                # a broken subscriber must not fail the write that already succeeded
                logger.exception(f'Change listener failed for {event.collection}/{event.doc_id}')
