import pytest

from utils import gst


@pytest.mark.parametrize("value, expected", [("18", 18.0), ("2.5", 2.5), (12, 12.0), ("", 0.0), (None, 0.0)])
def test_parse_rate(value, expected):
    assert gst.parse_rate(value) == expected


@pytest.mark.parametrize("value", ["abc", "101", "-1"])
def test_parse_rate_rejects_bad_values(value):
    with pytest.raises(ValueError):
        gst.parse_rate(value)


@pytest.mark.parametrize("value, expected", [("9.00", "9"), (2.50, "2.5"), (0, "0"), ("100", "100"), ("14", "14")])
def test_normalize_rate(value, expected):
    assert gst.normalize_rate(value) == expected


@pytest.mark.parametrize("code, valid", [
    ("1006", True),
    ("12345678", True),
    ("123", False),
    ("123456789", False),
    ("12a4", False),
    ("", False),
    (None, False),
])
def test_is_valid_hsn(code, valid):
    assert gst.is_valid_hsn(code) is valid


def test_suggest_rate_uses_four_digit_heading():
    assert gst.suggest_rate("2202") == 28.0
    assert gst.suggest_rate("22021010") == 28.0
    assert gst.suggest_rate("9999") == gst.DEFAULT_GST_RATE


def test_split_rate():
    assert gst.split_rate(18) == {"cgst_rate": "9", "sgst_rate": "9", "igst_rate": "18", "cess_rate": "0"}
    assert gst.split_rate(5)["cgst_rate"] == "2.5"


def test_intra_state_breakdown_splits_cgst_sgst():
    b = gst.calculate_breakdown(1000, 18)

    assert b["is_inter_state"] is False
    assert b["cgst"] == 90.0
    assert b["sgst"] == 90.0
    assert b["igst"] == 0.0
    assert b["total_tax"] == 180.0
    assert b["total_amount"] == 1180.0


def test_inter_state_breakdown_is_igst():
    b = gst.calculate_breakdown(1000, 18, supplier_state="MH", buyer_state="KA")

    assert b["is_inter_state"] is True
    assert b["igst"] == 180.0
    assert b["cgst"] == b["sgst"] == 0.0


def test_state_comparison_ignores_case_and_spaces():
    b = gst.calculate_breakdown(1000, 18, supplier_state="mh", buyer_state="MH ")

    assert b["is_inter_state"] is False


def test_inclusive_amount_is_split_back():
    b = gst.calculate_breakdown(1180, 18, inclusive=True)

    assert b["taxable_amount"] == 1000.0
    assert b["total_tax"] == 180.0
    assert b["total_amount"] == 1180.0


def test_cess_is_added_on_top_of_gst():
    b = gst.calculate_breakdown(1000, 28, cess_rate=12)

    assert b["cess"] == 120.0
    assert b["cgst"] == 140.0
    assert b["total_tax"] == 400.0
    assert b["total_amount"] == 1400.0
