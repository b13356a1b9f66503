"""Pricing engine facade used by cart and catalog services."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from decimal import Decimal
from typing import TYPE_CHECKING

from .cart import CartLogisticsAggregator
from .config import Settings, get_settings
from .models import (
    CalculatedPrice,
    CartLineItem,
    CartLogisticsSummary,
    CartProfitProjection,
    MarginRange,
    PriceReference,
    PricingContext,
    Product,
    ProductGroup,
    RouteCost,
    RouteSummary,
    ShippingRoute,
)
from .moq import aggregate_product_groups
from .pricing import PriceAggregator

if TYPE_CHECKING:
    from b2b_pricing.db.cache import ReferenceDataCache
    from b2b_pricing.db.repository import Repository


class PricingEngine:
    """Calculates B2B prices, cart totals and MOQ groups for one context."""

    def __init__(self, context: PricingContext, settings: Settings | None = None) -> None:
        """Initialize with reference data and optional settings."""
        self.context = context
        self.settings = settings or get_settings()
        self.aggregator = PriceAggregator(context, self.settings)
        self.cart_aggregator = CartLogisticsAggregator(self.aggregator)

    @classmethod
    def from_repository(
        cls,
        repository: Repository,
        destination: str | None = None,
        settings: Settings | None = None,
    ) -> "PricingEngine":
        """Load reference data through a repository and build an engine."""
        return cls(repository.load_pricing_context(destination), settings)

    @classmethod
    def from_cache(
        cls,
        cache: ReferenceDataCache,
        destination: str | None = None,
        settings: Settings | None = None,
    ) -> "PricingEngine":
        """Build an engine from a cached context."""
        return cls(cache.get(destination), settings)

    def resolve_margin_range(
        self, cost: Decimal, ranges: Iterable[MarginRange] | None = None
    ) -> MarginRange | None:
        if ranges is None:
            ranges = self.context.margin_ranges
        return self.aggregator.margin_resolver.resolve(cost, ranges)

    def calculate_route_cost(self, route: ShippingRoute | None, weight_kg: Decimal) -> RouteCost:
        return self.aggregator.route_calculator.calculate(route, weight_kg)

    def calculate_category_fees(self, category_id: str | None, cost: Decimal) -> Decimal:
        return self.aggregator.fee_calculator.calculate(category_id, cost)

    def route_summary(self, destination: str | None = None) -> RouteSummary | None:
        """Summary of the route serving a destination, if any."""
        route = self.aggregator.find_route(destination)
        if route is None:
            return None
        return self.aggregator.route_calculator.summarize(route)

    def calculate_product_price(
        self,
        product: Product,
        destination: str | None = None,
        reference: PriceReference | None = None,
    ) -> CalculatedPrice | None:
        return self.aggregator.calculate_product_price(product, destination, reference)

    def calculate_batch_prices(
        self,
        products: Iterable[Product],
        destination: str | None = None,
        references: Mapping[str, PriceReference] | None = None,
    ) -> dict[str, CalculatedPrice]:
        return self.aggregator.calculate_batch_prices(products, destination, references)

    def calculate_cart_logistics(
        self,
        items: Iterable[CartLineItem],
        products: Mapping[str, Product] | None = None,
        destination: str | None = None,
    ) -> CartLogisticsSummary:
        return self.cart_aggregator.calculate_cart(items, products, destination)

    def project_cart_profit(
        self,
        summary: CartLogisticsSummary,
        references: Mapping[str, PriceReference] | None = None,
    ) -> CartProfitProjection:
        return self.cart_aggregator.project_profit(summary, references)

    def aggregate_product_groups(self, items: Iterable[CartLineItem]) -> dict[str, ProductGroup]:
        return aggregate_product_groups(items)
