"""
Local Store: the in-memory copy of every collection the operator works on.

One instance is owned by the ``Workspace``. It is written by request
handlers (optimistic updates) and by the change-feed reconciler; every
mutation entry point takes the same re-entrant lock, and ``batch()`` lets a
caller group several mutations into one atomic step.
"""
import threading
from contextlib import contextmanager
from dataclasses import dataclass, replace
from typing import Dict, List, Optional, Tuple

from services.mapping import FIELD_MAPS


@dataclass(frozen=True)
class StoreSnapshot:
    products: Tuple
    variations: Tuple
    bills: Tuple
    purchases: Tuple
    categories: Tuple[str, ...]


class LocalStore:
    def __init__(self):
        self._lock = threading.RLock()
        self._tables: Dict[str, Dict[str, object]] = {t: {} for t in FIELD_MAPS}
        self._categories: List[str] = []

    @contextmanager
    def batch(self):
        with self._lock:
            yield self

    def _table(self, table):
        try:
            return self._tables[table]
        except KeyError:
            raise KeyError(f"Not a keyed table: {table}") from None

    # ---- bulk ----
    def load(self, products=(), variations=(), bills=(), purchases=(), categories=()):
        with self._lock:
            for table, rows in (
                ("products", products),
                ("variations", variations),
                ("bills", bills),
                ("purchases", purchases),
            ):
                self._tables[table] = {e.id: e for e in rows}
            self._categories = list(categories)

    def clear(self):
        self.load()

    def snapshot(self) -> StoreSnapshot:
        with self._lock:
            return StoreSnapshot(
                products=tuple(self._tables["products"].values()),
                variations=tuple(self._tables["variations"].values()),
                bills=tuple(self._tables["bills"].values()),
                purchases=tuple(self._tables["purchases"].values()),
                categories=tuple(self._categories),
            )

    # ---- reads ----
    def all(self, table) -> list:
        with self._lock:
            return list(self._table(table).values())

    def get(self, table, entity_id):
        with self._lock:
            return self._table(table).get(entity_id)

    def count(self, table) -> int:
        with self._lock:
            if table == "categories":
                return len(self._categories)
            return len(self._table(table))

    def variations_for(self, product_id) -> list:
        with self._lock:
            return [v for v in self._tables["variations"].values() if v.product_id == product_id]

    # ---- keyed mutations ----
    def append(self, table, entity) -> bool:
        """Add ``entity`` unless its id is already known."""
        with self._lock:
            rows = self._table(table)
            if entity.id in rows:
                return False
            rows[entity.id] = entity
            return True

    def replace(self, table, entity) -> Optional[object]:
        """Swap in ``entity`` by id. Returns the previous entity, or None if unknown."""
        with self._lock:
            rows = self._table(table)
            previous = rows.get(entity.id)
            if previous is None:
                return None
            rows[entity.id] = entity
            return previous

    def merge(self, table, entity_id, changes) -> bool:
        """Shallow-overwrite the given attributes of a known entity."""
        with self._lock:
            rows = self._table(table)
            existing = rows.get(entity_id)
            if existing is None:
                return False
            rows[entity_id] = replace(existing, **changes)
            return True

    def remove(self, table, entity_id):
        with self._lock:
            return self._table(table).pop(entity_id, None)

    # ---- categories ----
    def categories(self) -> List[str]:
        with self._lock:
            return list(self._categories)

    def set_categories(self, names):
        with self._lock:
            self._categories = list(names)

    def add_category(self, name) -> bool:
        with self._lock:
            if name in self._categories:
                return False
            self._categories.append(name)
            return True

    def remove_category(self, name) -> bool:
        with self._lock:
            if name not in self._categories:
                return False
            self._categories.remove(name)
            return True
