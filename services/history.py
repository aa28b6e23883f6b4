"""Order history: filtering and Excel export of bills and purchases."""
import io

import openpyxl

from services.errors import ValidationError

SALES = "sales"
PURCHASES = "purchases"


def party_name(txn):
    return txn.customer_name if txn.type == "SALE" else txn.supplier_name


def filter_history(snapshot, tab=SALES, q="", start=None, end=None, payment="All"):
    if tab == SALES:
        rows = list(snapshot.bills)
    elif tab == PURCHASES:
        rows = list(snapshot.purchases)
    else:
        raise ValidationError(f"Unknown history tab: {tab!r}")

    if q:
        needle = q.lower()
        rows = [t for t in rows if needle in party_name(t).lower() or needle in t.id]
    if start:
        rows = [t for t in rows if t.date >= start]
    if end:
        rows = [t for t in rows if t.date[:10] <= end]
    if payment and payment != "All":
        rows = [t for t in rows if t.payment_mode == payment]

    return sorted(rows, key=lambda t: t.date, reverse=True)


def export_history(rows, tab=SALES):
    workbook = openpyxl.Workbook()
    sheet = workbook.active

    if tab == SALES:
        sheet.title = "Sales"
        sheet.append(["Bill ID", "Date", "Customer", "Contact", "Total",
                      "Discount", "Final", "Received", "Pending", "Payment Mode"])
        for b in rows:
            sheet.append([b.id, b.date, b.customer_name, b.contact_no or "", b.total_amount,
                          b.discount, b.final_amount, b.amount_received, b.amount_pending,
                          b.payment_mode])
    else:
        sheet.title = "Purchases"
        sheet.append(["Purchase ID", "Date", "Supplier", "Total", "Paid",
                      "Pending", "Payment Mode"])
        for p in rows:
            sheet.append([p.id, p.date, p.supplier_name, p.total_amount, p.amount_paid,
                          p.amount_pending, p.payment_mode])

    items = workbook.create_sheet("Line Items")
    items.append(["Transaction ID", "Product", "Variation", "Qty", "Rate", "Amount"])
    for txn in rows:
        for item in txn.items:
            items.append([txn.id, item.product_name, item.variation_name,
                          item.quantity, item.rate, item.total])

    buffer = io.BytesIO()
    workbook.save(buffer)
    buffer.seek(0)
    return buffer
