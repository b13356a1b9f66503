"""Margin range lookup and the Protection Rule."""

from __future__ import annotations

from collections.abc import Iterable
from decimal import Decimal

from .models import B2BPriceInput, B2BPriceResult, MarginRange
from .rounding import percent_of, round2, to_decimal

DEFAULT_MARGIN_PERCENT = Decimal("30")


class MarginRangeResolver:
    """Maps a factory cost to the margin range that applies to it."""

    def __init__(self, default_margin_percent: Decimal = DEFAULT_MARGIN_PERCENT) -> None:
        self.default_margin_percent = default_margin_percent

    def resolve(
        self, base_cost: Decimal, ranges: Iterable[MarginRange] | None
    ) -> MarginRange | None:
        """Return the first active range containing base_cost, in given order.

        The lower bound is inclusive and the upper bound exclusive, so a cost
        sitting exactly on a boundary belongs to the higher band. Overlapping
        data resolves to whichever range comes first.
        """
        if not ranges:
            return None

        cost = to_decimal(base_cost)
        for margin_range in ranges:
            if margin_range.is_active and margin_range.contains(cost):
                return margin_range
        return None

    def margin_percent_for(
        self, base_cost: Decimal, ranges: Iterable[MarginRange] | None
    ) -> tuple[MarginRange | None, Decimal]:
        """Resolve the range and the percentage to apply (default if none)."""
        margin_range = self.resolve(base_cost, ranges)
        if margin_range is None:
            return None, self.default_margin_percent
        return margin_range, margin_range.margin_percent

    def apply_protection_rule(
        self, price_input: B2BPriceInput, ranges: Iterable[MarginRange] | None
    ) -> B2BPriceResult:
        """Apply margin to the base cost, then add logistics, fees and expenses.

        Logistics and fees are never part of the margin base.
        """
        base_cost = price_input.base_cost
        margin_range, margin_percent = self.margin_percent_for(base_cost, ranges)

        margin_value = round2(percent_of(base_cost, margin_percent))
        subtotal_with_margin = round2(base_cost + margin_value)
        final_b2b_price = round2(
            subtotal_with_margin
            + price_input.logistics_cost
            + price_input.category_fees
            + price_input.additional_expenses
        )

        return B2BPriceResult(
            base_cost=base_cost,
            margin_range=margin_range,
            margin_percent=margin_percent,
            margin_value=margin_value,
            subtotal_with_margin=subtotal_with_margin,
            logistics_cost=price_input.logistics_cost,
            category_fees=price_input.category_fees,
            additional_expenses=price_input.additional_expenses,
            final_b2b_price=final_b2b_price,
        )


def resolve_margin_range(
    base_cost: Decimal, ranges: Iterable[MarginRange] | None
) -> MarginRange | None:
    """Find the applicable margin range for a factory cost."""
    return MarginRangeResolver().resolve(base_cost, ranges)
