# routes/billing.py
from flask import Blueprint, current_app, render_template, request, jsonify, send_file, url_for
from flask_login import login_required, current_user

from services.committer import build_cart
from services.entities import PaymentMode
from services.errors import UnknownEntityError
from services.mapping import BILLS
from services.receipts import bill_number, display_date, render_receipt_pdf, shop_details
from services.workspace import active_workspace

bp = Blueprint("billing", __name__, url_prefix="/billing")


def _bill_or_404(store, bill_id):
    bill = store.get("bills", bill_id)
    if bill is None:
        raise UnknownEntityError("bills", bill_id)
    return bill


# ---------------- Create bill ----------------
@bp.route("/create", methods=["POST"])
@login_required
def create_bill():
    workspace = active_workspace()
    data = request.get_json(silent=True) or {}

    items = build_cart(workspace.store, data.get("items"))
    bill = workspace.committer.commit_sale(
        customer_name=data.get("customerName"),
        items=items,
        date=data.get("date"),
        discount=data.get("discount"),
        amount_received=data.get("amountReceived"),
        payment_mode=data.get("paymentMode") or PaymentMode.CASH,
        contact_no=data.get("contactNo"),
    )

    return jsonify({
        "message": "Bill created",
        "bill": BILLS.to_json(bill),
        "receiptUrl": url_for("billing.view_receipt", bill_id=bill.id),
    }), 201


# ---------------- Receipt (HTML printable) ----------------
@bp.route("/receipt/<bill_id>", methods=["GET"])
@login_required
def view_receipt(bill_id):
    bill = _bill_or_404(active_workspace().store, bill_id)
    return render_template(
        "receipt.html",
        bill=bill,
        bill_no=bill_number(bill.id),
        bill_date=display_date(bill.date),
        shop=shop_details(current_app.config),
        user=current_user,
    )


# ---------------- Receipt PDF (80mm thermal) ----------------
@bp.route("/receipt/<bill_id>/pdf", methods=["GET"])
@login_required
def receipt_pdf(bill_id):
    bill = _bill_or_404(active_workspace().store, bill_id)
    buffer = render_receipt_pdf(bill, shop_details(current_app.config))
    return send_file(
        buffer,
        mimetype="application/pdf",
        as_attachment=True,
        download_name=f"receipt_{bill_number(bill.id)[1:]}.pdf",
    )
