"""Category fee calculation."""

from __future__ import annotations

from collections.abc import Iterable
from decimal import Decimal

from .models import CategoryShippingRate
from .rounding import percent_of, round2, to_decimal


class CategoryFeeCalculator:
    """Calculates fixed + percentage fees for a product category."""

    def __init__(self, rates: Iterable[CategoryShippingRate] | None = None) -> None:
        self._rates: dict[str, CategoryShippingRate] = {}
        for rate in rates or []:
            # One rate per category; the first active row wins
            if rate.is_active and rate.category_id not in self._rates:
                self._rates[rate.category_id] = rate

    def get_rate(self, category_id: str | None) -> CategoryShippingRate | None:
        if not category_id:
            return None
        return self._rates.get(category_id)

    def calculate(self, category_id: str | None, base_cost: Decimal) -> Decimal:
        """Return ``fixed_fee + base_cost * percentage_fee / 100``, or 0 with no rate."""
        rate = self.get_rate(category_id)
        if rate is None:
            return Decimal("0.00")

        return round2(rate.fixed_fee + percent_of(to_decimal(base_cost), rate.percentage_fee))
