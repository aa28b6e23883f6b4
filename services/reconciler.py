"""
Change-feed reconciler: merges row events into the Local Store.

Merge rules
    INSERT  append unless the id is already present (echo of an optimistic
            insert, or a replay)
    UPDATE  shallow-merge the columns carried by the row over the known
            entity; unknown ids are ignored
    DELETE  remove by the old row's key
    categories  any event reloads the whole name list

Applying the same INSERT or UPDATE twice leaves the store as applying it
once.
"""
import logging
import queue
import threading

from services.feed import CLOSED, ChangeType
from services.mapping import CATEGORIES, FIELD_MAPS

logger = logging.getLogger(__name__)


class Reconciler:
    def __init__(self, store, category_loader):
        self.store = store
        self.category_loader = category_loader

    def apply(self, change):
        if change.table == CATEGORIES:
            self.store.set_categories(self.category_loader())
            return

        field_map = FIELD_MAPS.get(change.table)
        if field_map is None:
            logger.debug("Ignoring change on unwatched table %s", change.table)
            return

        if change.type == ChangeType.INSERT:
            entity = field_map.from_row(change.new)
            if not self.store.append(change.table, entity):
                logger.debug("INSERT %s %s already known", change.table, entity.id)

        elif change.type == ChangeType.UPDATE:
            entity_id = change.new.get(field_map.key)
            if not self.store.merge(change.table, entity_id, field_map.changes(change.new)):
                logger.debug("UPDATE for unknown %s %s ignored", change.table, entity_id)

        elif change.type == ChangeType.DELETE:
            entity_id = (change.old or {}).get(field_map.key)
            self.store.remove(change.table, entity_id)


class FeedConsumer:
    """
    Reads one subscription's queue and hands every event to a Reconciler.

    ``start()`` runs the loop on a daemon thread; ``drain()`` applies whatever
    is queued on the calling thread. ``context`` wraps each application so
    the reconciler can reach the database (an app context, in practice).
    """

    def __init__(self, subscription, reconciler, context=None):
        self.subscription = subscription
        self.reconciler = reconciler
        self.context = context
        self._thread = None

    def _apply(self, change):
        try:
            if self.context is None:
                self.reconciler.apply(change)
            else:
                with self.context():
                    self.reconciler.apply(change)
        except Exception:
            logger.exception("Failed to apply %s on %s", change.type.value, change.table)

    def drain(self):
        applied = 0
        while True:
            try:
                change = self.subscription.queue.get_nowait()
            except queue.Empty:
                return applied
            if change is CLOSED:
                return applied
            self._apply(change)
            applied += 1

    def run(self):
        while True:
            change = self.subscription.queue.get()
            if change is CLOSED:
                break
            self._apply(change)
        logger.debug("Feed consumer stopped")

    def start(self):
        self._thread = threading.Thread(target=self.run, name="feed-consumer", daemon=True)
        self._thread.start()

    def stop(self, timeout=5):
        self.subscription.close()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None

    @property
    def running(self):
        return self._thread is not None and self._thread.is_alive()
