"""80mm thermal receipt rendered with reportlab."""
from datetime import date
from io import BytesIO

from reportlab.lib.units import mm
from reportlab.pdfbase.pdfmetrics import stringWidth
from reportlab.pdfgen import canvas

PAPER_WIDTH = 80 * mm
MARGIN = 4 * mm
LINE = 4.2 * mm


def bill_number(bill_id):
    return f"#{bill_id[-6:].upper()}"


def display_date(value):
    try:
        return date.fromisoformat(value[:10]).strftime("%d/%m/%Y")
    except ValueError:
        return value


def _fit(text, font, size, width):
    """Clip ``text`` with an ellipsis until it fits in ``width`` points."""
    if stringWidth(text, font, size) <= width:
        return text
    while text and stringWidth(text + "...", font, size) > width:
        text = text[:-1]
    return text + "..."


def receipt_height(bill):
    # header + meta + table head + two lines per item + totals + footer
    return (26 + 2 * len(bill.items) + 10) * LINE


def render_receipt_pdf(bill, shop):
    """
    Draw ``bill`` on a single 80mm-wide page sized to its content.

    ``shop`` carries the header strings: name, tagline, address, gstin,
    phone and currency.
    """
    height = receipt_height(bill)
    currency = shop.get("currency", "Rs.")
    right = PAPER_WIDTH - MARGIN
    center = PAPER_WIDTH / 2

    buffer = BytesIO()
    c = canvas.Canvas(buffer, pagesize=(PAPER_WIDTH, height))
    y = height - 8 * mm

    def rule():
        nonlocal y
        c.setDash(1, 2)
        c.line(MARGIN, y, right, y)
        c.setDash()
        y -= LINE

    def row(label, value, bold=False):
        nonlocal y
        c.setFont("Helvetica-Bold" if bold else "Helvetica", 9 if bold else 8)
        c.drawString(MARGIN, y, label)
        c.drawRightString(right, y, value)
        y -= LINE

    # Header
    c.setFont("Helvetica-Bold", 13)
    c.drawCentredString(center, y, shop.get("name", ""))
    y -= LINE * 1.2
    c.setFont("Helvetica", 8)
    for text in (shop.get("tagline"), shop.get("address")):
        if text:
            c.drawCentredString(center, y, _fit(text, "Helvetica", 8, right - MARGIN))
            y -= LINE
    if shop.get("gstin"):
        c.drawCentredString(center, y, f"GSTIN: {shop['gstin']}")
        y -= LINE
    if shop.get("phone"):
        c.drawCentredString(center, y, f"Ph: {shop['phone']}")
        y -= LINE
    rule()

    # Meta
    row("Bill No:", bill_number(bill.id))
    row("Date:", display_date(bill.date))
    row("Customer:", _fit(bill.customer_name, "Helvetica", 8, 45 * mm))
    if bill.contact_no:
        row("Contact:", bill.contact_no)
    rule()

    # Items
    c.setFont("Helvetica-Bold", 8)
    c.drawString(MARGIN, y, "Item")
    c.drawRightString(48 * mm, y, "Qty")
    c.drawRightString(61 * mm, y, "Rate")
    c.drawRightString(right, y, "Amt")
    y -= LINE
    for item in bill.items:
        c.setFont("Helvetica", 8)
        c.drawString(MARGIN, y, _fit(item.product_name, "Helvetica", 8, right - MARGIN))
        y -= LINE
        c.setFont("Helvetica", 7)
        c.drawString(MARGIN + 2 * mm, y, _fit(item.variation_name, "Helvetica", 7, 34 * mm))
        c.drawRightString(48 * mm, y, str(item.quantity))
        c.drawRightString(61 * mm, y, f"{item.rate:.2f}")
        c.drawRightString(right, y, f"{item.total:.2f}")
        y -= LINE
    rule()

    # Totals
    row("Subtotal:", f"{currency} {bill.total_amount:.2f}")
    if bill.discount > 0:
        row("Discount:", f"- {currency} {bill.discount:.2f}")
    row("TOTAL:", f"{currency} {bill.final_amount:.2f}", bold=True)
    rule()
    row(f"Paid ({bill.payment_mode}):", f"{currency} {bill.amount_received:.2f}")
    if bill.amount_pending > 0:
        row("Balance Due:", f"{currency} {bill.amount_pending:.2f}", bold=True)

    y -= LINE
    c.setFont("Helvetica-Bold", 9)
    c.drawCentredString(center, y, "*** THANK YOU ***")
    y -= LINE
    c.setFont("Helvetica", 7)
    c.drawCentredString(center, y, "Visit Again")

    c.showPage()
    c.save()
    buffer.seek(0)
    return buffer


def shop_details(config):
    return {
        "name": config["SHOP_NAME"],
        "tagline": config["SHOP_TAGLINE"],
        "address": config["SHOP_ADDRESS"],
        "gstin": config["SHOP_GSTIN"],
        "phone": config["SHOP_PHONE"],
        "currency": config["CURRENCY"],
    }
