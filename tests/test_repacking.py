from datetime import datetime

import pytest

from utils import repacking


def test_to_grams():
    assert repacking.to_grams(2, "kg") == 2000.0
    assert repacking.to_grams(500, "g") == 500.0
    assert repacking.to_grams(1.5, "KG") == 1500.0
    assert repacking.to_grams(None, "kg") == 0.0

    with pytest.raises(ValueError, match="Unsupported weight unit"):
        repacking.to_grams(1, "lb")


def test_quote_is_proportional_to_weight():
    q = repacking.quote(bulk_price=500, bulk_cost=400, bulk_mrp=550,
                        bulk_weight_g=5000, unit_weight_g=250, repack_quantity=30)

    assert q["cost_per_gram"] == 0.08
    assert q["unit_cost"] == 20.0
    assert q["unit_price"] == 25.0
    assert q["unit_mrp"] == 27.5
    assert q["total_weight_g"] == 7500
    # 7.5 kg needs two 5 kg bags
    assert q["bulk_units_needed"] == 2


def test_quote_without_mrp():
    q = repacking.quote(500, 400, None, 5000, 250, 1)

    assert q["unit_mrp"] is None
    assert q["bulk_units_needed"] == 1


@pytest.mark.parametrize("bulk_weight, unit_weight, quantity, message", [
    (0, 250, 1, "no weight"),
    (5000, 0.5, 1, "at least 1 gram"),
    (5000, 250, 0, "at least 1"),
])
def test_quote_rejects_bad_input(bulk_weight, unit_weight, quantity, message):
    with pytest.raises(ValueError, match=message):
        repacking.quote(500, 400, None, bulk_weight, unit_weight, quantity)


def test_child_sku_carries_weight_and_timestamp():
    when = datetime(2026, 1, 1, 10, 0, 0)
    sku = repacking.child_sku("RICE-5KG", 250, when)

    assert sku == f"RICE-5KG-REPACK-250G-{int(when.timestamp() * 1000)}"


def test_child_name_replaces_bulk_word():
    assert repacking.child_name("Rice Bulk", 250) == "Rice 250g"
    assert repacking.child_name("BULK Sugar", 1000) == "1000g Sugar"
    assert repacking.child_name("Basmati Rice", 500) == "Basmati Rice (500g Pack)"
    assert repacking.child_name("Bulky Beans", 500) == "Bulky Beans (500g Pack)"
