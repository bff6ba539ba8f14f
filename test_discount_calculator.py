from decimal import Decimal

import pytest

from hospital_booking.services.discount_calculator import DiscountCalculator, format_currency


def test_percentage_discount_rounds_half_up():
    """Test fractional percentage discounts round half up to whole units"""
    assert DiscountCalculator.calculate_percentage_discount(105, 10) == Decimal("11")
    assert DiscountCalculator.calculate_percentage_discount(104, 10) == Decimal("10")


def test_percentage_discount_capped_by_max_discount():
    """Test max_discount caps a percentage discount"""
    assert DiscountCalculator.calculate_percentage_discount(1000000, 10, 50000) == Decimal("50000")


def test_percentage_discount_zero_cap_means_uncapped():
    """Test a zero max_discount is treated as no cap"""
    assert DiscountCalculator.calculate_percentage_discount(1000000, 10, 0) == Decimal("100000")


def test_fixed_discount_clamped_to_amount():
    """Test fixed discounts never exceed the amount"""
    assert DiscountCalculator.calculate_fixed_discount(15000, 20000) == Decimal("15000")
    assert DiscountCalculator.calculate_fixed_discount(50000, 20000) == Decimal("20000")


def test_apply_returns_discount_and_final():
    """Test apply returns the discount and the remaining amount"""
    assert DiscountCalculator.apply(300000, "percentage", 10, 50000) == (30000.0, 270000.0)
    assert DiscountCalculator.apply(15000, "fixed", 20000) == (15000.0, 0.0)


def test_unknown_discount_type():
    """Test unsupported discount types raise"""
    with pytest.raises(ValueError):
        DiscountCalculator.calculate_discount(1000, "bogo", 1)


def test_format_currency():
    assert format_currency(100000, "VND") == "100,000 VND"
