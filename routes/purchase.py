from flask import Blueprint, request, jsonify
from flask_login import login_required

from services.committer import build_cart
from services.entities import PaymentMode
from services.mapping import PURCHASES
from services.workspace import active_workspace

bp = Blueprint("purchase", __name__, url_prefix="/purchases")


# ---------------- Create purchase (restock) ----------------
@bp.route("/create", methods=["POST"])
@login_required
def create_purchase():
    workspace = active_workspace()
    data = request.get_json(silent=True) or {}

    items = build_cart(workspace.store, data.get("items"))
    purchase = workspace.committer.commit_purchase(
        supplier_name=data.get("supplierName"),
        items=items,
        date=data.get("date"),
        amount_paid=data.get("amountPaid"),
        payment_mode=data.get("paymentMode") or PaymentMode.CASH,
    )

    return jsonify({"message": "Purchase recorded", "purchase": PURCHASES.to_json(purchase)}), 201
