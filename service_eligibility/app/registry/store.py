"""
In-memory registry store for the Eligibility Service.

Holds the registry collections as plain documents and pushes the full
collection to subscribers whenever it changes, the way the portals receive
snapshots from the hosted document store. Writes made inside ``batch()``
land together or not at all.
"""

import copy
import threading
import uuid
from contextlib import contextmanager
from typing import Any, Callable, Dict, Iterator, List, Optional, Set

from shared.logging import get_logger
from shared.errors import ValidationError

COLLECTIONS = ("delegates", "events", "golf_groupings", "config")

Document = Dict[str, Any]
SnapshotHandler = Callable[[List[Document]], None]


class WriteBatch:
    """Pending writes collected inside ``RegistryStore.batch()``."""

    def __init__(self):
        self.writes: List[tuple] = []

    def set(self, collection: str, doc_id: str, document: Document):
        self.writes.append(("set", collection, doc_id, copy.deepcopy(document)))

    def delete(self, collection: str, doc_id: str):
        self.writes.append(("delete", collection, doc_id, None))


class RegistryStore:
    """Document collections with snapshot subscriptions."""

    def __init__(self):
        self.logger = get_logger("eligibility.registry")
        self._lock = threading.RLock()
        self._data: Dict[str, Dict[str, Document]] = {name: {} for name in COLLECTIONS}
        self._handlers: Dict[str, Dict[str, SnapshotHandler]] = {name: {} for name in COLLECTIONS}

    def _collection(self, name: str) -> Dict[str, Document]:
        if name not in self._data:
            raise ValidationError(f"Unknown collection '{name}'", {"collections": list(COLLECTIONS)})
        return self._data[name]

    # Reads

    def get_all(self, collection: str) -> List[Document]:
        with self._lock:
            return [copy.deepcopy(doc) for doc in self._collection(collection).values()]

    def get(self, collection: str, doc_id: str) -> Optional[Document]:
        with self._lock:
            doc = self._collection(collection).get(doc_id)
            return copy.deepcopy(doc) if doc is not None else None

    # Writes

    def set(self, collection: str, doc_id: str, document: Document):
        with self.batch() as batch:
            batch.set(collection, doc_id, document)

    def delete(self, collection: str, doc_id: str):
        with self.batch() as batch:
            batch.delete(collection, doc_id)

    @contextmanager
    def batch(self) -> Iterator[WriteBatch]:
        """Collect writes and apply them together when the block exits.

        An exception inside the block discards every pending write.
        """
        pending = WriteBatch()
        yield pending

        touched: Set[str] = set()
        with self._lock:
            for _, collection, _, _ in pending.writes:
                self._collection(collection)
            for op, collection, doc_id, document in pending.writes:
                if op == "set":
                    self._data[collection][doc_id] = document
                else:
                    self._data[collection].pop(doc_id, None)
                touched.add(collection)

        if touched:
            self.logger.debug("Batch committed", writes=len(pending.writes), collections=sorted(touched))
        for collection in sorted(touched):
            self._notify(collection)

    # Subscriptions

    def on_snapshot(self, collection: str, handler: SnapshotHandler) -> Callable[[], None]:
        """Register a handler for the collection and deliver the current snapshot.

        Returns a callable that removes the subscription.
        """
        with self._lock:
            self._collection(collection)
            subscription_id = str(uuid.uuid4())
            self._handlers[collection][subscription_id] = handler

        self.logger.info("Snapshot subscription created", collection=collection, subscription_id=subscription_id)
        handler(self.get_all(collection))

        def unsubscribe():
            with self._lock:
                removed = self._handlers[collection].pop(subscription_id, None)
            if removed is not None:
                self.logger.info("Snapshot subscription removed", collection=collection, subscription_id=subscription_id)

        return unsubscribe

    def _notify(self, collection: str):
        with self._lock:
            handlers = list(self._handlers[collection].values())
        snapshot = self.get_all(collection)
        for handler in handlers:
            try:
                handler(copy.deepcopy(snapshot))
            except Exception as e:
                self.logger.error("Snapshot handler failed", collection=collection, error=str(e))

    def get_store_stats(self) -> Dict[str, Any]:
        with self._lock:
            return {
                "documents": {name: len(docs) for name, docs in self._data.items()},
                "subscriptions": {name: len(handlers) for name, handlers in self._handlers.items()},
            }
