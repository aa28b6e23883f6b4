from flask import Blueprint, request, jsonify, send_file
from flask_login import login_required

from services.history import PURCHASES as PURCHASES_TAB, SALES, export_history, filter_history
from services.mapping import BILLS, PURCHASES
from services.validation import parse_date
from services.workspace import active_workspace

bp = Blueprint("history", __name__, url_prefix="/history")


def _filtered():
    args = request.args
    tab = args.get("tab", SALES)
    rows = filter_history(
        active_workspace().store.snapshot(),
        tab=tab,
        q=args.get("q", "").strip(),
        start=parse_date(args.get("start"), "Start date"),
        end=parse_date(args.get("end"), "End date"),
        payment=args.get("payment", "All"),
    )
    return tab, rows


@bp.route("/api", methods=["GET"])
@login_required
def api_list():
    tab, rows = _filtered()
    field_map = PURCHASES if tab == PURCHASES_TAB else BILLS
    return jsonify({"tab": tab, "transactions": [field_map.to_json(t) for t in rows]})


@bp.route("/export", methods=["GET"])
@login_required
def api_export():
    tab, rows = _filtered()
    return send_file(
        export_history(rows, tab),
        mimetype="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        as_attachment=True,
        download_name=f"{tab}_history.xlsx",
    )
