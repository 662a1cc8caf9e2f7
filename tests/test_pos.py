from datetime import datetime

import pytest

from utils import pos


def test_totals_tax_is_charged_after_discount():
    totals = pos.calculate_totals([(2, 100.0), (1, 50.0)], discount=25.0, tax_rate=0.1)

    assert totals == {
        "subtotal": 250.0,
        "discount": 25.0,
        "tax_rate": 0.1,
        "tax": 22.5,
        "total": 247.5,
    }


def test_totals_use_configured_rate_by_default():
    totals = pos.calculate_totals([(2, 100.0)])

    assert totals["tax_rate"] == 0.07
    assert totals["tax"] == 14.0
    assert totals["total"] == 214.0


def test_discount_never_exceeds_subtotal():
    totals = pos.calculate_totals([(1, 40.0)], discount=500.0, tax_rate=0.07)

    assert totals["discount"] == 40.0
    assert totals["total"] == 0.0


def test_empty_cart_totals_are_zero():
    totals = pos.calculate_totals([], tax_rate=0.07)

    assert totals["subtotal"] == 0.0
    assert totals["total"] == 0.0


def test_check_stock_counts_units_already_in_cart():
    pos.check_stock("Tea", available=5, requested=2, in_cart=3)

    with pytest.raises(pos.InsufficientStockError, match="Only 5 units available for Tea"):
        pos.check_stock("Tea", available=5, requested=3, in_cart=3)


def test_check_stock_out_of_stock():
    with pytest.raises(pos.InsufficientStockError, match="out of stock"):
        pos.check_stock("Tea", available=0, requested=1)


def test_change_due():
    assert pos.change_due(214.0, None) is None
    assert pos.change_due(214.0, 300) == 86.0
    assert pos.change_due(214.0, 214.0) == 0.0

    with pytest.raises(ValueError, match="less than total"):
        pos.change_due(214.0, 200)


def test_loyalty_points_default_rule():
    assert pos.loyalty_points_for(250.0) == 2
    assert pos.loyalty_points_for(99.99) == 0


def test_loyalty_points_custom_rule():
    assert pos.loyalty_points_for(250.0, threshold=50, reward=2) == 10


def test_document_number_is_dated_and_padded():
    assert pos.document_number("ORD", 7, datetime(2026, 1, 5, 14, 30)) == "ORD-20260105-00007"
    assert pos.document_number("PO", 123456, datetime(2026, 12, 31)) == "PO-20261231-123456"
