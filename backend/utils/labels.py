# utils/labels.py
"""Label sheet layout, PDF rendering and barcode images."""
import base64
import logging
from pathlib import Path
from typing import List, Optional

from reportlab.graphics import renderPDF, renderSVG
from reportlab.graphics.barcode import createBarcodeDrawing
from reportlab.lib.pagesizes import A4, letter, landscape
from reportlab.lib.units import mm
from reportlab.pdfgen import canvas

from config import settings

logger = logging.getLogger(__name__)

PREVIEW_LIMIT = 12
PAGE_MARGIN_MM = 10
GAP_MM = 2
PAPER_SIZES = {"A4": A4, "LETTER": letter}
BARCODE_TYPES = {"CODE128": "Code128", "EAN13": "EAN13"}


def barcode_value(product) -> str:
    return (product.barcode or product.sku or str(product.id)).strip()


def ean13_check_digit(digits: str) -> int:
    total = sum(int(d) * (3 if i % 2 else 1) for i, d in enumerate(digits[:12]))
    return (10 - total % 10) % 10


def barcode_symbology(value: str, barcode_type: str = "CODE128") -> str:
    kind = BARCODE_TYPES.get((barcode_type or "CODE128").upper(), "Code128")
    if kind != "EAN13":
        return kind
    # EAN13 only encodes 12/13 digits; anything else falls back to Code128
    if not (value.isdigit() and len(value) in (12, 13)):
        return "Code128"
    # reportlab recomputes the check digit, so a wrong one would print a different code
    if len(value) == 13 and int(value[12]) != ean13_check_digit(value):
        return "Code128"
    return kind


def _barcode_drawing(value: str, barcode_type: str = "CODE128", bar_height_mm: float = 10, human_readable: bool = True):
    kind = barcode_symbology(value, barcode_type)
    if kind == "EAN13":
        value = value[:12]
    return createBarcodeDrawing(kind, value=value, barHeight=bar_height_mm * mm, humanReadable=human_readable)


def barcode_svg_data_url(value: str, barcode_type: str = "CODE128") -> str:
    if not value or not value.strip():
        raise ValueError("Barcode value is required")
    drawing = _barcode_drawing(value.strip(), barcode_type)
    svg = renderSVG.drawToString(drawing)
    if isinstance(svg, str):
        svg = svg.encode("utf-8")
    return "data:image/svg+xml;base64," + base64.b64encode(svg).decode("ascii")


def label_lines(template, product, custom_text: Optional[str] = None, currency: Optional[str] = None) -> List[str]:
    """Text lines printed on one label, following the template's include_* flags."""
    currency = currency or settings.CURRENCY_SYMBOL
    lines = [product.name]
    if template.include_description and product.description:
        lines.append(product.description)
    if template.include_weight and product.weight:
        lines.append(f"Net wt: {product.weight:g} {product.weight_unit or ''}".strip())
    if template.include_hsn and product.hsn_code:
        lines.append(f"HSN: {product.hsn_code}")
    if template.include_mrp and product.mrp:
        lines.append(f"MRP: {currency} {product.mrp:.2f}")
    if template.include_price:
        lines.append(f"Price: {currency} {product.price:.2f}")
    if custom_text:
        lines.append(custom_text)
    return lines


def expand_copies(products, copies: int) -> list:
    return [p for p in products for _ in range(copies)]


def preview_layout(template, products, copies: int = 1, labels_per_row: int = 2,
                   custom_text: Optional[str] = None) -> dict:
    """Grid positions (in mm) of the first labels on the sheet; at most 12 cells."""
    labels = expand_copies(products, copies)
    cells = []
    for index, product in enumerate(labels[:PREVIEW_LIMIT]):
        row, col = divmod(index, labels_per_row)
        cells.append({
            "row": row,
            "column": col,
            "x": round(col * (template.width + GAP_MM), 2),
            "y": round(row * (template.height + GAP_MM), 2),
            "width": template.width,
            "height": template.height,
            "product_id": product.id,
            "lines": label_lines(template, product, custom_text),
            "barcode": barcode_value(product) if template.include_barcode else None,
        })
    return {
        "total_labels": len(labels),
        "shown": len(cells),
        "labels_per_row": labels_per_row,
        "cells": cells,
    }


def page_size(paper_size: str = "A4", orientation: str = "portrait"):
    size = PAPER_SIZES.get((paper_size or "A4").upper())
    if size is None:
        raise ValueError(f"Unsupported paper size: {paper_size}")
    return landscape(size) if orientation == "landscape" else size


def render_label_sheet(template, products, out_path: Path, copies: int = 1, labels_per_row: int = 2,
                       paper_size: str = "A4", orientation: str = "portrait",
                       custom_text: Optional[str] = None, currency: Optional[str] = None) -> int:
    """Writes the PDF label sheet and returns the number of labels drawn."""
    labels = expand_copies(products, copies)
    page_w, page_h = page_size(paper_size, orientation)
    label_w, label_h = template.width * mm, template.height * mm
    margin, gap = PAGE_MARGIN_MM * mm, GAP_MM * mm

    fit_cols = max(int((page_w - 2 * margin + gap) // (label_w + gap)), 1)
    cols = max(min(labels_per_row, fit_cols), 1)
    rows = max(int((page_h - 2 * margin + gap) // (label_h + gap)), 1)
    per_page = cols * rows

    c = canvas.Canvas(str(out_path), pagesize=(page_w, page_h))
    font_size = template.font_size or 10

    for index, product in enumerate(labels):
        slot = index % per_page
        if index and slot == 0:
            c.showPage()
        row, col = divmod(slot, cols)
        x = margin + col * (label_w + gap)
        y = page_h - margin - (row + 1) * label_h - row * gap

        if template.border_style and template.border_style != "none":
            c.setLineWidth(template.border_width or 1)
            if template.border_style == "dashed":
                c.setDash(3, 2)
            c.rect(x, y, label_w, label_h, stroke=1, fill=0)
            c.setDash()

        barcode_h = 0
        if template.include_barcode:
            drawing = _barcode_drawing(barcode_value(product), template.barcode_type, bar_height_mm=min(template.height / 3, 12))
            barcode_h = drawing.height
            scale = min(1.0, (label_w - 4) / drawing.width) if drawing.width else 1.0
            bx = x + (label_w - drawing.width * scale) / 2
            by = y + 2 if template.barcode_position != "top" else y + label_h - barcode_h * scale - 2
            c.saveState()
            c.translate(bx, by)
            c.scale(scale, scale)
            renderPDF.draw(drawing, c, 0, 0)
            c.restoreState()
            barcode_h *= scale

        text_top = y + label_h - font_size - 2
        if template.include_barcode and template.barcode_position == "top":
            text_top -= barcode_h + 2
        text_bottom = y + (barcode_h + 4 if template.barcode_position != "top" else 2)

        c.setFont("Helvetica", font_size)
        ty = text_top
        for i, line in enumerate(label_lines(template, product, custom_text, currency)):
            if ty < text_bottom:
                break
            c.setFont("Helvetica-Bold" if i == 0 else "Helvetica", font_size if i == 0 else max(font_size - 2, 6))
            if template.text_alignment == "left":
                c.drawString(x + 2, ty, line[:40])
            elif template.text_alignment == "right":
                c.drawRightString(x + label_w - 2, ty, line[:40])
            else:
                c.drawCentredString(x + label_w / 2, ty, line[:40])
            ty -= font_size + 1

    c.showPage()
    c.save()
    logger.info("Label sheet with %d labels written to %s", len(labels), out_path)
    return len(labels)
