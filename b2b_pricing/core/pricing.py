"""Price aggregation under the Protection Rule."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from decimal import Decimal
from typing import TYPE_CHECKING

from .fees import CategoryFeeCalculator
from .margins import MarginRangeResolver
from .models import (
    B2BPriceInput,
    B2BPriceResult,
    CalculatedPrice,
    DeliveryWindow,
    PriceReference,
    PricingContext,
    Product,
    ProductLogistics,
    PvpSource,
    ShippingRoute,
)
from .rounding import HUNDRED, round1, round2
from .routes import RouteCostCalculator, find_route_for_destination

if TYPE_CHECKING:
    from .config import Settings

logger = logging.getLogger(__name__)


class PriceAggregator:
    """Composes margin, route and category fee calculations into a B2B price.

    Margin is always computed on the factory cost alone. Logistics and
    category fees are added after the margin, so a change in shipping cost
    never alters the seller's margin value.
    """

    def __init__(self, context: PricingContext, settings: Settings) -> None:
        """Initialize with reference data and settings."""
        self.context = context
        self.settings = settings
        self.defaults = settings.pricing

        self.margin_resolver = MarginRangeResolver(self.defaults.default_margin_percent)
        self.route_calculator = RouteCostCalculator(self.defaults.origin_name)
        self.fee_calculator = CategoryFeeCalculator(context.category_rates)

    @property
    def default_delivery_days(self) -> DeliveryWindow:
        delivery = self.settings.delivery
        return DeliveryWindow(delivery.days_min, delivery.days_max)

    def destination_code(self, destination: str | None = None) -> str:
        """Resolve the destination, falling back to the context then settings default."""
        return (
            destination
            or self.context.default_destination_code
            or self.defaults.default_destination_code
        )

    def find_route(self, destination: str | None = None) -> ShippingRoute | None:
        """Find the active route for a destination."""
        return find_route_for_destination(self.context.routes, self.destination_code(destination))

    def effective_weight(self, weight_kg: Decimal | None) -> Decimal:
        """Use the product weight, or the default when unset or not positive."""
        if weight_kg is None or weight_kg <= 0:
            return self.defaults.default_weight_kg
        return weight_kg

    def calculate_logistics(
        self, route: ShippingRoute | None, weight_kg: Decimal | None
    ) -> ProductLogistics | None:
        """Calculate logistics for a route at a weight, or None without a route."""
        if route is None:
            return None

        route_cost = self.route_calculator.calculate(route, self.effective_weight(weight_kg))
        days = route_cost.days if route_cost.has_data else self.default_delivery_days

        return ProductLogistics(
            route_id=route.id,
            route_name=self.route_calculator.route_name(route),
            logistics_cost=route_cost.cost,
            estimated_days=days,
            origin_country=self.defaults.origin_name,
            destination_country=route.destination_country_name or route.destination_country_code,
        )

    def calculate_base_price(
        self,
        factory_cost: Decimal,
        category_id: str | None,
        logistics: ProductLogistics | None,
    ) -> B2BPriceResult:
        """Run margin, logistics and fee steps to reach the final B2B price."""
        logistics_cost = logistics.logistics_cost if logistics else Decimal("0.00")
        category_fees = self.fee_calculator.calculate(category_id, factory_cost)

        return self.margin_resolver.apply_protection_rule(
            B2BPriceInput(
                base_cost=factory_cost,
                logistics_cost=logistics_cost,
                category_fees=category_fees,
            ),
            self.context.margin_ranges,
        )

    def resolve_suggested_pvp(
        self, final_b2b_price: Decimal, reference: PriceReference | None = None
    ) -> tuple[Decimal, PvpSource]:
        """Pick the suggested consumer price: market, then admin, then markup."""
        if reference is not None:
            if reference.market_price is not None and reference.market_price > 0:
                return round2(reference.market_price), PvpSource.MARKET
            if reference.admin_price is not None and reference.admin_price > 0:
                return round2(reference.admin_price), PvpSource.ADMIN
        return round2(final_b2b_price * self.defaults.default_pvp_markup), PvpSource.CALCULATED

    def calculate_product_price(
        self,
        product: Product,
        destination: str | None = None,
        reference: PriceReference | None = None,
    ) -> CalculatedPrice | None:
        """Calculate the full price breakdown for a product.

        Returns None when the product has no usable factory cost; "no price"
        is distinct from a zero price.
        """
        factory_cost = product.factory_cost
        if factory_cost is None or factory_cost <= 0:
            logger.debug(f"Skipping product {product.id}: no factory cost")
            return None

        route = self.find_route(destination or product.destination_country_code)
        logistics = self.calculate_logistics(route, product.weight_kg)
        base = self.calculate_base_price(factory_cost, product.category_id, logistics)

        final_b2b_price = base.final_b2b_price
        suggested_pvp, pvp_source = self.resolve_suggested_pvp(final_b2b_price, reference)
        profit_amount = round2(suggested_pvp - final_b2b_price)
        if final_b2b_price > 0:
            roi_percent = round1(profit_amount / final_b2b_price * HUNDRED)
        else:
            roi_percent = Decimal("0.0")

        return CalculatedPrice(
            product_id=product.id,
            factory_cost=factory_cost,
            margin_range=base.margin_range,
            margin_percent=base.margin_percent,
            margin_value=base.margin_value,
            subtotal_with_margin=base.subtotal_with_margin,
            logistics=logistics,
            logistics_cost=base.logistics_cost,
            category_fees=base.category_fees,
            final_b2b_price=final_b2b_price,
            suggested_pvp=suggested_pvp,
            pvp_source=pvp_source,
            profit_amount=profit_amount,
            roi_percent=roi_percent,
            estimated_days=logistics.estimated_days if logistics else self.default_delivery_days,
        )

    def calculate_batch_prices(
        self,
        products: Iterable[Product],
        destination: str | None = None,
        references: Mapping[str, PriceReference] | None = None,
    ) -> dict[str, CalculatedPrice]:
        """Calculate prices for many products; unpriceable ones are left out."""
        references = references or {}
        results: dict[str, CalculatedPrice] = {}
        skipped = 0

        for product in products:
            price = self.calculate_product_price(product, destination, references.get(product.id))
            if price is None:
                skipped += 1
                continue
            results[product.id] = price

        if skipped:
            logger.info(f"Batch pricing skipped {skipped} products without factory cost")
        return results
