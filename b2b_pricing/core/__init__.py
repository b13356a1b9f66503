"""Core business logic for the B2B pricing engine."""

from .cart import CartLogisticsAggregator
from .config import Settings, get_settings, setup_logging
from .engine import PricingEngine
from .fees import CategoryFeeCalculator
from .margins import MarginRangeResolver, resolve_margin_range
from .models import (
    CalculatedPrice,
    CartLineItem,
    CartLogisticsSummary,
    CategoryShippingRate,
    MarginRange,
    PriceReference,
    PricingContext,
    Product,
    ProductGroup,
    PvpSource,
    RouteSegment,
    SegmentType,
    ShippingRoute,
)
from .moq import ProductGroupMOQValidator, aggregate_product_groups
from .pricing import PriceAggregator
from .routes import RouteCostCalculator, find_route_for_destination

__all__ = [
    "Settings",
    "get_settings",
    "setup_logging",
    "PricingEngine",
    "MarginRangeResolver",
    "resolve_margin_range",
    "RouteCostCalculator",
    "find_route_for_destination",
    "CategoryFeeCalculator",
    "PriceAggregator",
    "CartLogisticsAggregator",
    "ProductGroupMOQValidator",
    "aggregate_product_groups",
    "CalculatedPrice",
    "CartLineItem",
    "CartLogisticsSummary",
    "CategoryShippingRate",
    "MarginRange",
    "PriceReference",
    "PricingContext",
    "Product",
    "ProductGroup",
    "PvpSource",
    "RouteSegment",
    "SegmentType",
    "ShippingRoute",
]
