# backend/utils/pdf.py
import logging
from pathlib import Path
from typing import Optional

from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm
from reportlab.pdfgen import canvas

from config import settings

logger = logging.getLogger(__name__)

# Path configuration
RECEIPTS_DIR = Path(settings.STORAGE_DIR) / "receipts"
LABELS_DIR = Path(settings.STORAGE_DIR) / "labels"

FONT_REGULAR_NAME = "Helvetica"
FONT_BOLD_NAME = "Helvetica-Bold"


def ensure_dir(path: Path) -> Path:
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_receipt_path(sale_id: int) -> Path:
    """Returns the PDF path of a sale receipt."""
    return ensure_dir(RECEIPTS_DIR) / f"RECEIPT-{sale_id}.pdf"


def get_label_sheet_path(job_id: int) -> Path:
    return ensure_dir(LABELS_DIR) / f"LABELS-{job_id}.pdf"


def generate_receipt_pdf(sale, out_path: Path, business: Optional[dict] = None) -> None:
    """
    Receipt layout:
    - Header with shop data
    - Order number, date, cashier, customer
    - Item table
    - Totals, payment and loyalty summary
    - Footer
    """
    business = business or {}
    currency = business.get("currency_symbol") or settings.CURRENCY_SYMBOL

    c = canvas.Canvas(str(out_path), pagesize=A4)
    width, height = A4

    # Helper for drawing text
    def draw_text(x, y, text, font=FONT_REGULAR_NAME, size=10, align="left"):
        c.setFont(font, size)
        text_str = str(text) if text is not None else ""
        if align == "right":
            c.drawRightString(x, y, text_str)
        elif align == "center":
            c.drawCentredString(x, y, text_str)
        else:
            c.drawString(x, y, text_str)

    # --- 1. HEADER ---
    y = height - 20 * mm
    draw_text(width / 2, y, business.get("business_name") or "Retail Store", font=FONT_BOLD_NAME, size=16, align="center")
    y -= 6 * mm
    for line in (business.get("address"), business.get("phone"), business.get("email")):
        if line:
            draw_text(width / 2, y, line, size=9, align="center")
            y -= 4.5 * mm
    if business.get("gstin"):
        draw_text(width / 2, y, f"GSTIN: {business['gstin']}", size=9, align="center")
        y -= 4.5 * mm

    y -= 2 * mm
    c.setLineWidth(0.5)
    c.line(20 * mm, y, 190 * mm, y)
    y -= 8 * mm

    # --- 2. SALE DATA ---
    draw_text(20 * mm, y, f"Receipt: {sale.order_number or sale.id}", font=FONT_BOLD_NAME)
    created = sale.created_at.strftime("%Y-%m-%d %H:%M") if sale.created_at else ""
    draw_text(190 * mm, y, f"Date: {created}", align="right")
    y -= 5 * mm
    cashier = getattr(sale, "cashier", None)
    if cashier is not None:
        draw_text(20 * mm, y, f"Cashier: {cashier.name}", size=9)
    customer = getattr(sale, "customer", None)
    if customer is not None:
        draw_text(190 * mm, y, f"Customer: {customer.name}", size=9, align="right")
    y -= 10 * mm

    # --- 3. ITEMS ---
    c.setFillColorRGB(0.95, 0.95, 0.95)
    c.rect(20 * mm, y - 2 * mm, 170 * mm, 8 * mm, fill=1, stroke=0)
    c.setFillColorRGB(0, 0, 0)

    c.setFont(FONT_BOLD_NAME, 9)
    c.drawString(22 * mm, y, "#")
    c.drawString(30 * mm, y, "Item")
    c.drawRightString(125 * mm, y, "Qty")
    c.drawRightString(150 * mm, y, "Price")
    c.drawRightString(185 * mm, y, "Amount")
    y -= 8 * mm

    c.setFont(FONT_REGULAR_NAME, 9)
    for idx, it in enumerate(sale.items, start=1):
        c.drawString(22 * mm, y, str(idx))
        c.drawString(30 * mm, y, str(it.product_name)[:50])
        c.drawRightString(125 * mm, y, f"{it.quantity}")
        c.drawRightString(150 * mm, y, f"{it.unit_price:.2f}")
        c.drawRightString(185 * mm, y, f"{it.subtotal:.2f}")

        c.setLineWidth(0.1)
        c.line(20 * mm, y - 2 * mm, 190 * mm, y - 2 * mm)
        y -= 6 * mm

        # New page
        if y < 50 * mm:
            c.showPage()
            y = height - 20 * mm
            c.setFont(FONT_REGULAR_NAME, 9)

    # --- 4. TOTALS ---
    y -= 5 * mm
    rows = [("Subtotal:", sale.subtotal)]
    if sale.discount:
        rows.append(("Discount:", -sale.discount))
    rows.append((f"Tax ({sale.tax_rate * 100:g}%):", sale.tax))

    c.setFont(FONT_BOLD_NAME, 10)
    for label, amount in rows:
        c.drawRightString(150 * mm, y, label)
        c.drawRightString(185 * mm, y, f"{currency} {amount:.2f}")
        y -= 5 * mm

    c.setFont(FONT_BOLD_NAME, 12)
    c.drawRightString(150 * mm, y, "TOTAL:")
    c.drawRightString(185 * mm, y, f"{currency} {sale.total:.2f}")
    y -= 7 * mm

    c.setFont(FONT_REGULAR_NAME, 9)
    c.drawRightString(150 * mm, y, "Payment:")
    c.drawRightString(185 * mm, y, str(sale.payment_method).upper())
    if sale.amount_tendered is not None:
        y -= 5 * mm
        c.drawRightString(150 * mm, y, "Tendered:")
        c.drawRightString(185 * mm, y, f"{currency} {sale.amount_tendered:.2f}")
        y -= 5 * mm
        c.drawRightString(150 * mm, y, "Change:")
        c.drawRightString(185 * mm, y, f"{currency} {(sale.change_due or 0):.2f}")
    if sale.loyalty_points_earned:
        y -= 5 * mm
        c.drawRightString(150 * mm, y, "Points earned:")
        c.drawRightString(185 * mm, y, str(sale.loyalty_points_earned))

    # --- 5. FOOTER ---
    footer = business.get("receipt_footer") or "Thank you for shopping with us!"
    draw_text(width / 2, 25 * mm, footer, size=9, align="center")

    c.showPage()
    c.save()
    logger.info("Receipt %s written to %s", sale.order_number, out_path)
