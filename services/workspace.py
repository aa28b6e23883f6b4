"""
Workspace: the single ownership point for the operator's session state.

It holds the Local Store, the gateway and committer that write through it,
and, while the operator is logged in, a change-feed subscription with its
consumer. ``open()`` runs at login, ``close()`` at logout or when the
inactivity watchdog fires.
"""
import logging
import threading
import time

from flask import current_app

from services.committer import OptimisticCommitter
from services.errors import GatewayError, LoadError, SessionClosedError
from services.gateway import RemoteGateway
from services.reconciler import FeedConsumer, Reconciler
from services.store import LocalStore

logger = logging.getLogger(__name__)

EXTENSION_KEY = "steelbill.workspace"


def current_workspace():
    return current_app.extensions[EXTENSION_KEY]


def active_workspace():
    """The current workspace, or SessionClosedError if it is not open."""
    workspace = current_workspace()
    workspace.require_open()
    return workspace


class Workspace:
    def __init__(self, app, feed):
        self.app = app
        self.feed = feed
        self.store = LocalStore()
        self.gateway = RemoteGateway(seed_demo_data=app.config["SEED_DEMO_DATA"])
        self.committer = OptimisticCommitter(
            self.store,
            self.gateway,
            rollback_on_failure=app.config["ROLLBACK_ON_WRITE_FAILURE"],
        )
        self.threaded = app.config["FEED_CONSUMER_THREAD"]
        self.consumer = None
        self.watchdog = None
        self.load_error = None
        self.closed_reason = None
        self.last_activity = None
        self._lock = threading.Lock()

    @property
    def is_open(self):
        return self.consumer is not None

    def touch(self):
        self.last_activity = time.monotonic()

    def idle_seconds(self):
        if self.last_activity is None:
            return 0.0
        return time.monotonic() - self.last_activity

    def require_open(self):
        if not self.is_open:
            raise SessionClosedError("Session is not active. Please login again.")

    # ---------------- lifecycle ----------------
    def open(self):
        with self._lock:
            if self.is_open:
                self.touch()
                return
            subscription = self.feed.subscribe()
            reconciler = Reconciler(self.store, self.gateway.fetch_categories)
            self.consumer = FeedConsumer(subscription, reconciler, context=self.app.app_context)
            if self.threaded:
                self.consumer.start()
            self.closed_reason = None
            self.touch()

            poll = self.app.config["INACTIVITY_POLL_SECONDS"]
            if poll > 0:
                self.watchdog = InactivityWatchdog(
                    self, self.app.config["INACTIVITY_LIMIT_SECONDS"], poll
                )
                self.watchdog.start()
        logger.info("Workspace opened")
        self.load()

    def load(self):
        try:
            data = self.gateway.fetch_all()
        except GatewayError as e:
            self.store.clear()
            self.load_error = str(e)
            logger.warning("Initial load failed: %s", e)
            raise LoadError(str(e)) from e
        self.store.load(**data)
        self.load_error = None
        logger.info(
            "Loaded %d products, %d variations, %d bills, %d purchases",
            len(data["products"]), len(data["variations"]),
            len(data["bills"]), len(data["purchases"]),
        )

    def drain(self):
        """Apply queued feed events on this thread (non-threaded mode)."""
        consumer = self.consumer
        if consumer is None:
            return 0
        return consumer.drain()

    def close(self, reason="logout"):
        with self._lock:
            consumer, self.consumer = self.consumer, None
            watchdog, self.watchdog = self.watchdog, None
            if consumer is None:
                return False
            self.closed_reason = reason
        consumer.stop()
        if watchdog is not None and watchdog is not threading.current_thread():
            watchdog.stop()
        self.store.clear()
        logger.info("Workspace closed (%s)", reason)
        return True


class InactivityWatchdog(threading.Thread):
    """Polls the workspace and closes it once it has been idle too long."""

    def __init__(self, workspace, limit_seconds, interval_seconds):
        super().__init__(name="inactivity-watchdog", daemon=True)
        self.workspace = workspace
        self.limit_seconds = limit_seconds
        self.interval_seconds = interval_seconds
        self._stop_event = threading.Event()

    def check(self):
        if self.workspace.is_open and self.workspace.idle_seconds() > self.limit_seconds:
            logger.warning("Session idle for over %ss; logging out", self.limit_seconds)
            return self.workspace.close(reason="inactivity")
        return False

    def run(self):
        while not self._stop_event.wait(self.interval_seconds):
            if self.check():
                break

    def stop(self):
        self._stop_event.set()
        self.join(timeout=self.interval_seconds + 1)
