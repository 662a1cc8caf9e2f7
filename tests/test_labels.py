import base64
from types import SimpleNamespace

import pytest

from utils import labels


def make_template(**overrides):
    data = dict(
        width=50.0, height=25.0, font_size=9,
        include_barcode=True, include_price=True, include_description=False,
        include_mrp=True, include_weight=False, include_hsn=False,
        barcode_type="CODE128", barcode_position="bottom", text_alignment="center",
        border_style="solid", border_width=1,
    )
    data.update(overrides)
    return SimpleNamespace(**data)


def make_product(**overrides):
    data = dict(
        id=1, name="Basmati Rice 1kg", description="Aged long grain", sku="RICE-1KG", barcode="8901234567890",
        price=120.0, mrp=135.0, weight=1.0, weight_unit="kg", hsn_code="1006",
    )
    data.update(overrides)
    return SimpleNamespace(**data)


def test_label_lines_follow_template_flags():
    lines = labels.label_lines(make_template(), make_product(), currency="Rs.")

    assert lines == ["Basmati Rice 1kg", "MRP: Rs. 135.00", "Price: Rs. 120.00"]


def test_label_lines_with_all_fields_and_custom_text():
    template = make_template(include_description=True, include_weight=True, include_hsn=True, include_mrp=False)

    lines = labels.label_lines(template, make_product(), custom_text="Best before 6 months", currency="Rs.")

    assert lines == [
        "Basmati Rice 1kg",
        "Aged long grain",
        "Net wt: 1 kg",
        "HSN: 1006",
        "Price: Rs. 120.00",
        "Best before 6 months",
    ]


def test_barcode_value_falls_back_to_sku():
    assert labels.barcode_value(make_product()) == "8901234567890"
    assert labels.barcode_value(make_product(barcode=None)) == "RICE-1KG"


def test_preview_is_capped_at_twelve_cells():
    products = [make_product(id=1), make_product(id=2, name="Sugar")]

    layout = labels.preview_layout(make_template(), products, copies=10, labels_per_row=3)

    assert layout["total_labels"] == 20
    assert layout["shown"] == labels.PREVIEW_LIMIT
    second_row = layout["cells"][3]
    assert (second_row["row"], second_row["column"]) == (1, 0)
    assert second_row["y"] == 27.0
    # Copies of one product come before the next product
    assert layout["cells"][9]["product_id"] == 1
    assert layout["cells"][10]["product_id"] == 2


def test_preview_without_barcode():
    layout = labels.preview_layout(make_template(include_barcode=False), [make_product()])

    assert layout["cells"][0]["barcode"] is None


def test_page_size():
    portrait = labels.page_size("a4", "portrait")
    landscape = labels.page_size("A4", "landscape")

    assert landscape == (portrait[1], portrait[0])
    with pytest.raises(ValueError, match="Unsupported paper size"):
        labels.page_size("A3")


def test_barcode_data_url_is_svg():
    url = labels.barcode_svg_data_url("RICE-1KG")

    assert url.startswith("data:image/svg+xml;base64,")
    svg = base64.b64decode(url.split(",", 1)[1]).decode("utf-8")
    assert "<svg" in svg


def test_ean13_falls_back_for_non_numeric_values():
    assert labels.barcode_svg_data_url("ABC-123", "EAN13").startswith("data:image/svg+xml;base64,")


def test_ean13_keeps_valid_check_digit():
    assert labels.ean13_check_digit("890123456789") == 0
    assert labels.barcode_symbology("8901234567890", "EAN13") == "EAN13"
    assert labels.barcode_symbology("890123456789", "ean13") == "EAN13"


def test_ean13_with_wrong_check_digit_prints_as_code128():
    assert labels.barcode_symbology("8901234567891", "EAN13") == "Code128"
    assert labels.barcode_svg_data_url("8901234567891", "EAN13").startswith("data:image/svg+xml;base64,")


def test_barcode_requires_value():
    with pytest.raises(ValueError, match="required"):
        labels.barcode_svg_data_url("   ")


def test_render_label_sheet_writes_pdf(tmp_path):
    out = tmp_path / "labels.pdf"
    products = [make_product(id=i, name=f"Item {i}") for i in range(1, 4)]

    count = labels.render_label_sheet(make_template(border_style="dashed"), products, out,
                                      copies=20, labels_per_row=3, currency="Rs.")

    assert count == 60
    assert out.read_bytes().startswith(b"%PDF")
