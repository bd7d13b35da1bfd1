import pytest

from storefront.cart import pricing


def _p(price, shipping=0):
    return {"id": "p", "price": price, "shipping_price": shipping}


def test_compute_totals_single_line():
    totals = pricing.compute_totals([(_p(50, 15), 2)])
    assert totals == {"subtotal": 100.0, "shipping": 15.0, "tax": 9.5, "total": 124.5}


def test_shipping_is_flat_per_line_not_per_unit():
    lines = [(_p(10, 5), 4), (_p(20, 7.5), 1)]
    assert pricing.compute_shipping(lines) == 12.5
    assert pricing.compute_subtotal(lines) == 60.0


def test_line_with_zero_quantity_has_no_shipping():
    assert pricing.compute_shipping([(_p(10, 5), 0)]) == 0.0


def test_tax_uses_given_rate():
    assert pricing.compute_tax(200, rate=0.1) == 20.0
    assert pricing.compute_tax(100) == 9.5


def test_empty_cart_totals_are_zero():
    assert pricing.compute_totals([]) == {"subtotal": 0.0, "shipping": 0.0, "tax": 0.0, "total": 0.0}


@pytest.mark.parametrize("raw,expected", [("12.50", 12.5), (None, 0.0), ("abc", 0.0), (7, 7.0)])
def test_amount_from_is_tolerant(raw, expected):
    assert pricing.amount_from(raw) == expected


def test_to_cents_rounds_to_nearest_cent():
    assert pricing.to_cents(19.99) == 1999
    assert pricing.to_cents("50") == 5000
    assert pricing.to_cents(0.005) in (0, 1)
