"""
Change feed: row-level INSERT / UPDATE / DELETE events for the watched
tables.

Events are produced from SQLAlchemy session events. Row images are captured
when a session flushes and published to subscribers only once the
transaction commits; a rollback discards them. Any write that goes through
the application's database is observed, whichever session made it.
"""
import logging
import queue
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from sqlalchemy import event, inspect as sa_inspect
from sqlalchemy.orm import Session

from models import row_image, TABLE_MODELS
from services.mapping import WATCHED_TABLES

logger = logging.getLogger(__name__)

PENDING_KEY = "steelbill.pending_changes"

# queue marker telling a consumer its subscription was closed
CLOSED = object()


class ChangeType(str, Enum):
    INSERT = "INSERT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"


@dataclass(frozen=True)
class ChangeEvent:
    table: str
    type: ChangeType
    new: Optional[dict] = None
    old: Optional[dict] = None


class Subscription:
    def __init__(self, feed, tables):
        self.feed = feed
        self.tables = frozenset(tables)
        self.queue = queue.Queue()
        self.closed = False

    def deliver(self, change):
        if self.closed or change.table not in self.tables:
            return
        self.queue.put(change)

    def close(self):
        if self.closed:
            return
        self.closed = True
        self.feed.unsubscribe(self)
        self.queue.put(CLOSED)


class ChangeFeed:
    def __init__(self):
        self._lock = threading.Lock()
        self._subscriptions = []

    def subscribe(self, tables=WATCHED_TABLES):
        sub = Subscription(self, tables)
        with self._lock:
            self._subscriptions.append(sub)
        logger.debug("Feed subscription opened for %s", sorted(sub.tables))
        return sub

    def unsubscribe(self, sub):
        with self._lock:
            if sub in self._subscriptions:
                self._subscriptions.remove(sub)

    @property
    def subscriber_count(self):
        with self._lock:
            return len(self._subscriptions)

    def publish(self, changes):
        with self._lock:
            subscriptions = list(self._subscriptions)
        for change in changes:
            logger.debug("Feed %s %s", change.type.value, change.table)
            for sub in subscriptions:
                sub.deliver(change)

    # ---------------- SQLAlchemy wiring ----------------
    def install(self, target=Session):
        """Attach the flush/commit/rollback listeners (idempotent)."""
        for name, fn in (
            ("after_flush", self._collect),
            ("after_commit", self._publish_pending),
            ("after_rollback", self._discard_pending),
        ):
            if not event.contains(target, name, fn):
                event.listen(target, name, fn)

    def _collect(self, session, flush_context):
        pending = session.info.setdefault(PENDING_KEY, [])
        # new/dirty/deleted still hold their pre-flush state here
        for obj in session.new:
            table = _watched_table(obj)
            if table:
                pending.append(ChangeEvent(table, ChangeType.INSERT, new=row_image(obj)))
        for obj in session.dirty:
            table = _watched_table(obj)
            if table and session.is_modified(obj, include_collections=False):
                pending.append(ChangeEvent(table, ChangeType.UPDATE, new=row_image(obj)))
        for obj in session.deleted:
            table = _watched_table(obj)
            if table:
                pending.append(ChangeEvent(table, ChangeType.DELETE, old=_primary_key(obj)))

    def _publish_pending(self, session):
        changes = session.info.pop(PENDING_KEY, None)
        if changes:
            self.publish(changes)

    def _discard_pending(self, session):
        session.info.pop(PENDING_KEY, None)


_MODEL_TABLES = {model: table for table, model in TABLE_MODELS.items()}


def _watched_table(obj):
    table = _MODEL_TABLES.get(type(obj))
    return table if table in WATCHED_TABLES else None


def _primary_key(obj):
    return {col.key: getattr(obj, col.key) for col in sa_inspect(obj).mapper.primary_key}


feed = ChangeFeed()
