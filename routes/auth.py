import logging
import time

from flask import (
    Blueprint, current_app, flash, jsonify, redirect, render_template, request, session, url_for,
)
from flask_login import current_user, login_required, login_user, logout_user
from werkzeug.security import check_password_hash

from models import Operator
from services.workspace import current_workspace

logger = logging.getLogger(__name__)

bp = Blueprint("auth", __name__)

AUTH_FLAG = "authenticated"
LAST_ACTIVITY = "last_activity"
SESSION_EXPIRED = "Session expired due to inactivity. Please login again."

# requests that never resume or refresh the workspace
_PASSIVE_ENDPOINTS = {"auth.login_page", "auth.logout", "static"}


# ===================================
# LOGIN
# ===================================
@bp.route("/login", methods=["GET", "POST"])
def login_page():
    if request.method == "POST":
        is_ajax = request.is_json

        # ---- Input Handling (AJAX + Form) ----
        data = (request.get_json(silent=True) or {}) if is_ajax else request.form
        username = str(data.get("username", "")).strip().lower()
        password = str(data.get("password", "")).strip()

        # ---- Validation ----
        if not username or not password:
            return _auth_error("All fields are required.", is_ajax, status=400)

        # ---- Authentication ----
        expected = current_app.config["OPERATOR_USERNAME"].lower()
        if username != expected or not check_password_hash(
            current_app.config["OPERATOR_PASSWORD_HASH"], password
        ):
            logger.warning("Failed login for %r", username)
            return _auth_error("Invalid username or password.", is_ajax, status=401)

        login_user(Operator(username))
        session[AUTH_FLAG] = True
        session[LAST_ACTIVITY] = time.time()
        logger.info("Operator %s logged in", username)

        # LoadError surfaces as 503 with a retry link; the login itself stands
        current_workspace().open()

        if is_ajax:
            return jsonify(
                {
                    "status": "success",
                    "redirect_url": url_for("index"),
                    "username": username,
                }
            ), 200
        return redirect(url_for("index"))

    if current_user.is_authenticated:
        return redirect(url_for("index"))
    return render_template("login.html", title="Login - Chauhan Steel")


# ===================================
# LOGOUT
# ===================================
@bp.route("/logout")
@login_required
def logout():
    _end_session("logout")
    flash("You have been logged out.", "info")
    return redirect(url_for("auth.login_page"))


# ===================================
# SESSION MARKERS / INACTIVITY
# ===================================
@bp.before_app_request
def check_session():
    if not current_user.is_authenticated or request.endpoint in _PASSIVE_ENDPOINTS:
        return None

    workspace = current_workspace()
    limit = current_app.config["INACTIVITY_LIMIT_SECONDS"]
    last = session.get(LAST_ACTIVITY)
    stale = not session.get(AUTH_FLAG) or last is None or time.time() - last > limit

    if stale or workspace.closed_reason == "inactivity":
        _end_session("inactivity")
        return jsonify({"error": SESSION_EXPIRED}), 401

    session[LAST_ACTIVITY] = time.time()
    if not workspace.is_open:
        workspace.open()
    workspace.touch()
    if not workspace.threaded:
        workspace.drain()
    return None


# ===================================
# HELPER FUNCTIONS
# ===================================
def _end_session(reason):
    logger.info("Operator %s logged out (%s)", current_user.name, reason)
    logout_user()
    session.pop(AUTH_FLAG, None)
    session.pop(LAST_ACTIVITY, None)
    current_workspace().close(reason=reason)


def _auth_error(message, is_ajax, status=400):
    """Unified auth error handler (AJAX + Form)"""
    if is_ajax:
        return jsonify({"status": "error", "message": message}), status

    flash(message, "danger")
    return redirect(url_for("auth.login_page"))
