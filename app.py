import logging

from flask import Flask, jsonify, redirect, url_for
from flask_login import LoginManager, current_user, login_required
from werkzeug.security import generate_password_hash

from config import Config
from models import db, Operator

# Blueprints
from routes import auth, billing, category, history, product, purchase, reports

from services.errors import SteelBillError
from services.feed import feed
from services.mapping import FIELD_MAPS
from services.workspace import EXTENSION_KEY, Workspace, active_workspace, current_workspace

logger = logging.getLogger(__name__)


def state_json(snapshot):
    data = {
        table: [field_map.to_json(e) for e in getattr(snapshot, table)]
        for table, field_map in FIELD_MAPS.items()
    }
    data["categories"] = list(snapshot.categories)
    return data


def create_app(config_overrides=None):
    # ==========================
    # App Initialization
    # ==========================
    app = Flask(__name__)
    app.config.from_object(Config)
    if config_overrides:
        app.config.update(config_overrides)
    app.config.setdefault(
        "OPERATOR_PASSWORD_HASH", generate_password_hash(app.config["OPERATOR_PASSWORD"])
    )
    logging.basicConfig(
        level=app.config["LOG_LEVEL"],
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # ==========================
    # Extensions
    # ==========================
    db.init_app(app)
    with app.app_context():
        db.create_all()
    feed.install()

    login_manager = LoginManager()
    login_manager.login_message = None
    login_manager.login_view = "auth.login_page"
    login_manager.init_app(app)

    @login_manager.user_loader
    def load_user(user_id):
        if user_id == app.config["OPERATOR_USERNAME"].lower():
            return Operator(user_id)
        return None

    @login_manager.unauthorized_handler
    def unauthorized():
        return jsonify({"error": "Login required"}), 401

    app.extensions[EXTENSION_KEY] = Workspace(app, feed)

    # ==========================
    # Blueprints Registration
    # ==========================
    app.register_blueprint(auth.bp)
    app.register_blueprint(product.bp)
    app.register_blueprint(category.bp)
    app.register_blueprint(billing.bp)
    app.register_blueprint(purchase.bp)
    app.register_blueprint(history.bp)
    app.register_blueprint(reports.reports_bp)

    # ==========================
    # Error Handlers
    # ==========================
    @app.errorhandler(SteelBillError)
    def handle_app_error(e):
        return jsonify(e.to_dict()), e.status

    # ==========================
    # Routes
    # ==========================
    @app.route("/")
    def index():
        if not current_user.is_authenticated:
            return redirect(url_for("auth.login_page"))
        return jsonify({"message": "Chauhan Steel backend running", "user": current_user.name})

    @app.route("/api/state")
    @login_required
    def api_state():
        workspace = active_workspace()
        data = state_json(workspace.store.snapshot())
        data["loadError"] = workspace.load_error
        return jsonify(data)

    @app.route("/api/reload", methods=["POST"])
    @login_required
    def api_reload():
        workspace = active_workspace()
        workspace.load()
        return jsonify(state_json(workspace.store.snapshot()))

    return app


# ==========================
# Run App
# ==========================
if __name__ == "__main__":
    app = create_app()
    try:
        app.run(debug=False)
    finally:
        with app.app_context():
            current_workspace().close(reason="shutdown")
