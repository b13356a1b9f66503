"""Cart-level logistics and price aggregation."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from decimal import Decimal

from .models import (
    CartItemLogistics,
    CartLineItem,
    CartLogisticsSummary,
    CartProfitProjection,
    DeliveryWindow,
    PriceReference,
    Product,
    ProductLogistics,
    PvpSource,
)
from .pricing import PriceAggregator
from .rounding import HUNDRED, round1, round2

logger = logging.getLogger(__name__)


class CartLogisticsAggregator:
    """Applies the price aggregator to every cart line and totals the cart.

    Cart totals stay in B2B cost space. Resale figures come only from
    project_profit.
    """

    def __init__(self, aggregator: PriceAggregator) -> None:
        self.aggregator = aggregator

    def calculate_item(
        self,
        item: CartLineItem,
        product: Product | None,
        destination: str | None = None,
    ) -> CartItemLogistics | None:
        """Calculate one cart line; None when it has no usable factory cost."""
        if product is not None and product.factory_cost is not None and product.factory_cost > 0:
            factory_cost = product.factory_cost
        else:
            factory_cost = item.unit_cost

        if factory_cost is None or factory_cost <= 0:
            return None

        weight_kg = product.weight_kg if product else None
        category_id = product.category_id if product else None

        route = self.aggregator.find_route(destination)
        logistics = self.aggregator.calculate_logistics(route, weight_kg)
        base = self.aggregator.calculate_base_price(factory_cost, category_id, logistics)

        return CartItemLogistics(
            item_id=item.id,
            product_id=item.product_id,
            quantity=item.quantity,
            factory_cost=factory_cost,
            margin_percent=base.margin_percent,
            margin_value=base.margin_value,
            subtotal_with_margin=base.subtotal_with_margin,
            logistics_cost=base.logistics_cost,
            category_fees=base.category_fees,
            final_unit_price=base.final_b2b_price,
            final_total_price=round2(base.final_b2b_price * item.quantity),
            estimated_days=self._item_days(logistics),
            route_name=self._route_name(logistics),
        )

    def calculate_cart(
        self,
        items: Iterable[CartLineItem],
        products: Mapping[str, Product] | None = None,
        destination: str | None = None,
    ) -> CartLogisticsSummary:
        """Calculate every line, then merge the results into cart totals."""
        items = list(items)
        products = products or {}

        results: list[CartItemLogistics] = []
        skipped: list[str] = []
        for item in items:
            line = self.calculate_item(item, products.get(item.product_id), destination)
            if line is None:
                logger.debug(f"Skipping cart item {item.id}: no factory cost")
                skipped.append(item.id)
            else:
                results.append(line)

        route = self.aggregator.find_route(destination)
        if route is not None:
            route_name = self.aggregator.route_calculator.route_name(route)
        else:
            route_name = self.aggregator.defaults.standard_route_name

        summary = self.merge(results, route_name)
        summary.skipped_item_ids = skipped
        return summary

    def merge(self, lines: list[CartItemLogistics], route_name: str) -> CartLogisticsSummary:
        """Combine per-line results into a cart summary."""
        total_factory_cost = Decimal("0")
        total_margin_value = Decimal("0")
        total_logistics_cost = Decimal("0")
        total_category_fees = Decimal("0")
        total_final_price = Decimal("0")
        total_quantity = 0
        max_days_min = 0
        max_days_max = 0

        for line in lines:
            total_factory_cost += line.factory_cost * line.quantity
            total_margin_value += line.margin_value * line.quantity
            total_logistics_cost += line.logistics_cost * line.quantity
            total_category_fees += line.category_fees * line.quantity
            total_final_price += line.final_total_price
            total_quantity += line.quantity

            # The cart ships no faster than its slowest item
            max_days_min = max(max_days_min, line.estimated_days.min)
            max_days_max = max(max_days_max, line.estimated_days.max)

        default_days = self.aggregator.default_delivery_days
        return CartLogisticsSummary(
            items_logistics={line.item_id: line for line in lines},
            total_factory_cost=round2(total_factory_cost),
            total_margin_value=round2(total_margin_value),
            total_logistics_cost=round2(total_logistics_cost),
            total_category_fees=round2(total_category_fees),
            total_final_price=round2(total_final_price),
            estimated_delivery_days=DeliveryWindow(
                max_days_min or default_days.min,
                max_days_max or default_days.max,
            ),
            route_name=route_name,
            items_count=len(lines),
            total_quantity=total_quantity,
        )

    def project_profit(
        self,
        summary: CartLogisticsSummary,
        references: Mapping[str, PriceReference] | None = None,
    ) -> CartProfitProjection:
        """Project resale value and profit for a calculated cart."""
        references = references or {}
        total_investment = Decimal("0")
        total_pvp_value = Decimal("0")
        with_market_price = 0

        for line in summary.items_logistics.values():
            pvp, source = self.aggregator.resolve_suggested_pvp(
                line.final_unit_price, references.get(line.product_id)
            )
            if source == PvpSource.MARKET:
                with_market_price += 1
            total_investment += line.final_total_price
            total_pvp_value += pvp * line.quantity

        total_profit = round2(total_pvp_value - total_investment)
        if total_investment > 0:
            avg_roi = round1(total_profit / total_investment * HUNDRED)
        else:
            avg_roi = Decimal("0.0")

        return CartProfitProjection(
            total_investment=round2(total_investment),
            total_pvp_value=round2(total_pvp_value),
            total_profit=total_profit,
            avg_roi_percent=avg_roi,
            items_with_market_price=with_market_price,
            items_total=len(summary.items_logistics),
        )

    def _item_days(self, logistics: ProductLogistics | None) -> DeliveryWindow:
        if logistics is None:
            return self.aggregator.default_delivery_days
        return logistics.estimated_days

    def _route_name(self, logistics: ProductLogistics | None) -> str:
        if logistics is None:
            return self.aggregator.defaults.standard_route_name
        return logistics.route_name
