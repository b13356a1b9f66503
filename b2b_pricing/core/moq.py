"""Minimum order quantity validation at the parent-product level."""

from __future__ import annotations

from collections.abc import Iterable

from .models import CartLineItem, GroupVariant, ProductGroup


def aggregate_product_groups(items: Iterable[CartLineItem]) -> dict[str, ProductGroup]:
    """Group cart lines by product (or SKU when the product id is missing).

    Variants of one product count jointly toward its MOQ, so 5 red and 5 blue
    units satisfy a MOQ of 10.
    """
    groups: dict[str, ProductGroup] = {}

    for item in items:
        key = item.product_id or item.sku
        group = groups.get(key)
        if group is None:
            group = ProductGroup(
                product_id=key,
                product_name=item.name,
                moq=item.moq or 1,
            )
            groups[key] = group

        group.total_quantity += item.quantity
        group.variants.append(
            GroupVariant(
                sku=item.sku,
                name=item.name,
                quantity=item.quantity,
                color=item.color,
                size=item.size,
            )
        )

    return groups


class ProductGroupMOQValidator:
    """Checks cart quantities against each product's MOQ."""

    def __init__(self, items: Iterable[CartLineItem] = ()) -> None:
        self.groups = aggregate_product_groups(items)

    def get_group(self, product_id: str) -> ProductGroup | None:
        return self.groups.get(product_id)

    def current_quantity(self, product_id: str) -> int:
        group = self.groups.get(product_id)
        return group.total_quantity if group else 0

    def _moq_for(self, product_id: str, moq: int | None) -> int:
        if moq is not None:
            return moq
        group = self.groups.get(product_id)
        return group.moq if group else 1

    def meets_moq(self, product_id: str, moq: int | None = None) -> bool:
        """Check if a product in the cart meets its MOQ."""
        group = self.groups.get(product_id)
        if group is None:
            return False
        return group.total_quantity >= self._moq_for(product_id, moq)

    def quantity_needed(
        self, product_id: str, additional_qty: int = 0, moq: int | None = None
    ) -> int:
        """Units still missing after adding additional_qty."""
        target = self._moq_for(product_id, moq)
        return max(0, target - (self.current_quantity(product_id) + additional_qty))

    def would_meet_moq(self, product_id: str, adding_qty: int, moq: int | None = None) -> bool:
        """Check if adding adding_qty units would reach the MOQ."""
        target = self._moq_for(product_id, moq)
        return self.current_quantity(product_id) + adding_qty >= target

    def groups_below_minimum(self) -> list[ProductGroup]:
        return [g for g in self.groups.values() if not g.meets_minimum]

    def is_cart_valid(self) -> bool:
        """A cart can check out only when every product meets its MOQ."""
        return not self.groups_below_minimum()
