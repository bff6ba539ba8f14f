from typing import Optional
from decimal import Decimal, ROUND_HALF_UP, getcontext

getcontext().prec = 28


def D(x) -> Decimal:
    return Decimal(str(x))


def round_whole(x: Decimal) -> Decimal:
    return x.quantize(Decimal('1'), rounding=ROUND_HALF_UP)


class DiscountCalculator:
    """Service class to calculate coupon discounts for a purchase amount"""

    @staticmethod
    def calculate_percentage_discount(amount, percent, max_discount: Optional[float] = None) -> Decimal:
        # Capped only by max_discount, never by the amount itself
        discount = round_whole(D(amount) * D(percent) / D(100))
        if max_discount and discount > D(max_discount):
            discount = D(max_discount)
        return discount

    @staticmethod
    def calculate_fixed_discount(amount, value) -> Decimal:
        return min(D(value), D(amount))

    @staticmethod
    def calculate_discount(amount, discount_type: str, discount_value, max_discount: Optional[float] = None) -> Decimal:
        if discount_type == 'percentage':
            return DiscountCalculator.calculate_percentage_discount(amount, discount_value, max_discount)
        elif discount_type == 'fixed':
            return DiscountCalculator.calculate_fixed_discount(amount, discount_value)
        raise ValueError(f"Unsupported discount type: {discount_type}")

    @staticmethod
    def apply(amount, discount_type: str, discount_value, max_discount: Optional[float] = None):
        """Return (discount_amount, final_amount) as floats."""
        discount = DiscountCalculator.calculate_discount(amount, discount_type, discount_value, max_discount)
        return float(discount), float(D(amount) - discount)


def format_currency(amount, currency: str) -> str:
    return f"{D(amount):,.0f} {currency}"
