"""Pytest configuration and fixtures."""

from __future__ import annotations

from collections.abc import Generator
from decimal import Decimal
from pathlib import Path

import pytest

from b2b_pricing.core.config import Settings
from b2b_pricing.core.models import (
    CategoryShippingRate,
    MarginRange,
    PricingContext,
    RouteSegment,
    SegmentType,
    ShippingRoute,
)
from b2b_pricing.core.pricing import PriceAggregator
from b2b_pricing.db.repository import Repository
from b2b_pricing.db.session import close_database, configure_database, init_database


@pytest.fixture
def settings() -> Settings:
    """Create default settings for testing."""
    return Settings()


@pytest.fixture
def margin_ranges() -> list[MarginRange]:
    """Three contiguous bands, the last one unbounded."""
    return [
        MarginRange(id="r1", min_cost=Decimal("0"), max_cost=Decimal("10"), margin_percent=Decimal("25"), sort_order=1),
        MarginRange(id="r2", min_cost=Decimal("10"), max_cost=Decimal("20"), margin_percent=Decimal("15"), sort_order=2),
        MarginRange(id="r3", min_cost=Decimal("20"), max_cost=None, margin_percent=Decimal("10"), sort_order=3),
    ]


@pytest.fixture
def direct_route() -> ShippingRoute:
    """Direct route to Haiti with one segment."""
    return ShippingRoute(
        id="route-ht",
        destination_country_code="HT",
        destination_country_name="Haiti",
        is_direct=True,
        segments=[
            RouteSegment(
                id="seg-ht",
                segment=SegmentType.DIRECT,
                cost_per_kg=Decimal("4"),
                min_cost=Decimal("3"),
                estimated_days_min=10,
                estimated_days_max=15,
            )
        ],
    )


@pytest.fixture
def hub_route() -> ShippingRoute:
    """Route to the Dominican Republic through a Miami hub."""
    return ShippingRoute(
        id="route-do",
        destination_country_code="DO",
        destination_country_name="Dominican Republic",
        transit_hub_id="hub-mia",
        transit_hub_name="Miami",
        is_direct=False,
        segments=[
            RouteSegment(
                id="seg-do-a",
                segment=SegmentType.ORIGIN_TO_HUB,
                cost_per_kg=Decimal("5"),
                min_cost=Decimal("10"),
                estimated_days_min=5,
                estimated_days_max=7,
            ),
            RouteSegment(
                id="seg-do-b",
                segment=SegmentType.HUB_TO_DESTINATION,
                cost_per_kg=Decimal("2"),
                min_cost=Decimal("4"),
                estimated_days_min=3,
                estimated_days_max=5,
            ),
        ],
    )


@pytest.fixture
def category_rate() -> CategoryShippingRate:
    return CategoryShippingRate(
        category_id="electronics",
        fixed_fee=Decimal("2"),
        percentage_fee=Decimal("5"),
    )


@pytest.fixture
def context(
    direct_route: ShippingRoute,
    hub_route: ShippingRoute,
    category_rate: CategoryShippingRate,
) -> PricingContext:
    """Reference data with a single 20% band up to 200."""
    return PricingContext.build(
        margin_ranges=[
            MarginRange(id="band", min_cost=Decimal("0"), max_cost=Decimal("200"), margin_percent=Decimal("20")),
        ],
        routes=[direct_route, hub_route],
        category_rates=[category_rate],
        default_destination_code="HT",
    )


@pytest.fixture
def aggregator(context: PricingContext, settings: Settings) -> PriceAggregator:
    return PriceAggregator(context, settings)


@pytest.fixture
def empty_aggregator(settings: Settings) -> PriceAggregator:
    """Aggregator with no reference data at all."""
    return PriceAggregator(PricingContext.build(), settings)


@pytest.fixture
def repo(tmp_path: Path) -> Generator[Repository, None, None]:
    """Repository bound to a fresh SQLite file."""
    configure_database(f"sqlite:///{tmp_path / 'test.db'}")
    init_database()
    yield Repository()
    close_database()
