from decimal import Decimal

from app.services.pricing import compute_totals, to_money


def test_totals_from_lines():
    totals = compute_totals([(10.0, 3), (2.5, 2)], tax_rate=0.10, shipping_fee=0)
    assert totals.subtotal == Decimal("35.00")
    assert totals.tax == Decimal("3.50")
    assert totals.shipping == Decimal("0.00")
    assert totals.total == Decimal("38.50")


def test_total_is_sum_of_parts():
    totals = compute_totals([(19.99, 3), (0.333, 7)], tax_rate=0.10, shipping_fee=4.95)
    assert totals.total == totals.subtotal + totals.tax + totals.shipping


def test_rounding_is_half_up():
    assert to_money(0.125) == Decimal("0.13")
    assert to_money(2.675) == Decimal("2.68")


def test_empty_lines():
    totals = compute_totals([], tax_rate=0.10, shipping_fee=0)
    assert totals.total == Decimal("0.00")


def test_sub_cent_unit_prices_round_before_multiplying():
    totals = compute_totals([(10.005, 3)], tax_rate=0.10, shipping_fee=0)
    assert totals.subtotal == to_money(10.005) * 3 == Decimal("30.03")
