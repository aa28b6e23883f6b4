import time

from app import create_app
from conftest import OPERATOR, TEST_CONFIG
from models import db
from routes.auth import LAST_ACTIVITY, SESSION_EXPIRED
from services.entities import Variation
from services.feed import feed
from services.gateway import RemoteGateway
from services.workspace import EXTENSION_KEY, InactivityWatchdog


def test_login_subscribes_and_logout_tears_down(client, workspace):
    before = feed.subscriber_count

    client.post("/login", json=OPERATOR)
    assert workspace.is_open
    assert feed.subscriber_count == before + 1
    assert workspace.store.count("products") == 10

    response = client.get("/logout")
    assert response.status_code == 302
    assert not workspace.is_open
    assert feed.subscriber_count == before
    assert workspace.store.count("products") == 0
    assert workspace.closed_reason == "logout"

    assert client.get("/api/state").status_code == 401


def test_stale_activity_marker_logs_out(logged_in, workspace, app):
    with logged_in.session_transaction() as session:
        session[LAST_ACTIVITY] = time.time() - app.config["INACTIVITY_LIMIT_SECONDS"] - 5

    response = logged_in.get("/api/state")

    assert response.status_code == 401
    assert response.get_json()["error"] == SESSION_EXPIRED
    assert workspace.closed_reason == "inactivity"
    assert logged_in.get("/api/state").status_code == 401


def test_watchdog_closes_idle_workspace(logged_in, workspace):
    watchdog = InactivityWatchdog(workspace, limit_seconds=60, interval_seconds=1)
    assert watchdog.check() is False

    workspace.last_activity = time.monotonic() - 120
    assert watchdog.check() is True
    assert not workspace.is_open
    assert workspace.store.count("products") == 0

    response = logged_in.get("/products/api")
    assert response.status_code == 401
    assert response.get_json()["error"] == SESSION_EXPIRED


def test_login_again_after_timeout(logged_in, workspace):
    workspace.close(reason="inactivity")
    assert logged_in.get("/api/state").status_code == 401

    assert logged_in.post("/login", json=OPERATOR).status_code == 200
    assert workspace.closed_reason is None
    assert logged_in.get("/api/state").status_code == 200


def test_requests_reset_idle_clock(logged_in, workspace):
    workspace.last_activity = time.monotonic() - 100
    logged_in.get("/categories/api")
    assert workspace.idle_seconds() < 5


def test_resumes_workspace_for_valid_session(logged_in, workspace):
    workspace.close(reason="logout")

    response = logged_in.get("/api/state")

    assert response.status_code == 200
    assert workspace.is_open
    assert len(response.get_json()["products"]) == 10


def test_threaded_consumer_applies_external_writes():
    app = create_app(dict(TEST_CONFIG, FEED_CONSUMER_THREAD=True))
    workspace = app.extensions[EXTENSION_KEY]
    client = app.test_client()
    try:
        client.post("/login", json=OPERATOR)
        assert workspace.consumer.running

        # a write from another session, outside any request
        with app.app_context():
            RemoteGateway().update_variation(
                Variation("v1", "p1", "19mm (3/4 inch)", stock=42, purchase_price=120, selling_price=180)
            )

        deadline = time.monotonic() + 5
        while workspace.store.get("variations", "v1").stock != 42 and time.monotonic() < deadline:
            time.sleep(0.05)
        assert workspace.store.get("variations", "v1").stock == 42
    finally:
        workspace.close(reason="shutdown")
        with app.app_context():
            db.drop_all()
