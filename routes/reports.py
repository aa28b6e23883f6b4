from flask import Blueprint, current_app, jsonify
from flask_login import login_required

from services.mapping import BILLS
from services.reports import build_report
from services.workspace import active_workspace

reports_bp = Blueprint("reports", __name__, url_prefix="/reports")


# ==========================
# 📊 REPORTS DATA API
# ==========================
@reports_bp.route("/data")
@login_required
def reports_data():
    snapshot = active_workspace().store.snapshot()
    report = build_report(
        snapshot, low_stock_threshold=current_app.config["LOW_STOCK_THRESHOLD"]
    )
    report["recent_bills"] = [BILLS.to_json(b) for b in report["recent_bills"]]
    return jsonify(report)
