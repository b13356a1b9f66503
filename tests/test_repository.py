"""Tests for the reference data repository."""

from decimal import Decimal

import pytest

from b2b_pricing.core.config import Settings
from b2b_pricing.core.engine import PricingEngine
from b2b_pricing.core.models import (
    CartLineItem,
    CategoryShippingRate,
    DeliveryWindow,
    MarginRange,
    Product,
    RouteSegment,
    SegmentType,
    ShippingRoute,
)
from b2b_pricing.db.cache import ReferenceDataCache
from b2b_pricing.db.repository import Repository
from b2b_pricing.db.session import reset_database


@pytest.fixture
def seeded(repo: Repository) -> Repository:
    """Repository with Haiti (direct) and Dominican Republic (via Miami) routes."""
    repo.save_margin_range(MarginRange(min_cost=Decimal("200"), max_cost=None, margin_percent=Decimal("10"), sort_order=2))
    repo.save_margin_range(MarginRange(min_cost=Decimal("0"), max_cost=Decimal("200"), margin_percent=Decimal("20"), sort_order=1))
    repo.save_margin_range(
        MarginRange(min_cost=Decimal("0"), max_cost=None, margin_percent=Decimal("50"), sort_order=0, is_active=False)
    )

    repo.save_destination("HT", "Haiti")
    repo.save_destination("DO", "Dominican Republic")
    repo.save_destination("JM", "Jamaica", is_active=False)
    hub_id = repo.save_transit_hub("MIA", "Miami")

    repo.save_route(
        ShippingRoute(
            destination_country_code="HT",
            is_direct=True,
            segments=[
                RouteSegment(
                    segment=SegmentType.DIRECT,
                    cost_per_kg=Decimal("4"),
                    min_cost=Decimal("3"),
                    estimated_days_min=10,
                    estimated_days_max=15,
                )
            ],
        )
    )
    repo.save_route(
        ShippingRoute(
            destination_country_code="do",
            transit_hub_id=str(hub_id),
            segments=[
                RouteSegment(segment="china_to_transit", cost_per_kg=Decimal("5"), min_cost=Decimal("10"),
                             estimated_days_min=5, estimated_days_max=7),
                RouteSegment(segment="transit_to_destination", cost_per_kg=Decimal("2"), min_cost=Decimal("4"),
                             estimated_days_min=3, estimated_days_max=5),
            ],
        )
    )
    repo.save_route(ShippingRoute(destination_country_code="HT", is_direct=True, is_active=False))

    repo.save_category_rate(
        CategoryShippingRate(category_id="electronics", fixed_fee=Decimal("2"), percentage_fee=Decimal("5"))
    )
    repo.save_category_rate(CategoryShippingRate(category_id="toys", fixed_fee=Decimal("9"), is_active=False))
    return repo


class TestMarginRanges:
    def test_active_ranges_in_sort_order(self, seeded: Repository) -> None:
        ranges = seeded.get_margin_ranges()
        assert [r.margin_percent for r in ranges] == [Decimal("20"), Decimal("10")]
        assert ranges[0].max_cost == Decimal("200")
        assert ranges[1].max_cost is None

    def test_all_ranges(self, seeded: Repository) -> None:
        assert len(seeded.get_margin_ranges(active_only=False)) == 3

    def test_toggle_active(self, seeded: Repository) -> None:
        first = seeded.get_margin_ranges()[0]
        assert seeded.set_margin_range_active(first.id, False) is True
        assert len(seeded.get_margin_ranges()) == 1
        assert seeded.set_margin_range_active("9999", True) is False


class TestRoutes:
    def test_active_routes_with_segments(self, seeded: Repository) -> None:
        routes = seeded.get_active_routes()
        assert [r.destination_country_code for r in routes] == ["HT", "DO"]

        hub_route = routes[1]
        assert hub_route.destination_country_name == "Dominican Republic"
        assert hub_route.transit_hub_name == "Miami"
        assert [s.segment for s in hub_route.segments] == [
            SegmentType.ORIGIN_TO_HUB,
            SegmentType.HUB_TO_DESTINATION,
        ]
        assert hub_route.segments[0].cost_per_kg == Decimal("5")

    def test_default_destination(self, seeded: Repository) -> None:
        assert seeded.get_default_destination_code("do") == "DO"
        assert seeded.get_default_destination_code("JM") == "JM"
        assert seeded.get_default_destination_code("us") == "US"
        assert seeded.get_default_destination_code() == "HT"

    def test_no_destinations(self, repo: Repository) -> None:
        assert repo.get_default_destination_code() is None


class TestCategoryRates:
    def test_only_active(self, seeded: Repository) -> None:
        rates = seeded.get_active_category_rates()
        assert [r.category_id for r in rates] == ["electronics"]
        assert rates[0].percentage_fee == Decimal("5")


class TestProducts:
    def test_save_and_get(self, repo: Repository) -> None:
        repo.save_product(Product(id="p1", factory_cost=Decimal("100"), category_id="electronics", moq=6))
        repo.save_product(Product(id="p1", factory_cost=Decimal("110"), moq=6))

        products = repo.get_products(["p1", "missing"])
        assert set(products) == {"p1"}
        assert products["p1"].factory_cost == Decimal("110")
        assert products["p1"].category_id is None
        assert products["p1"].moq == 6

    def test_empty_ids(self, repo: Repository) -> None:
        assert repo.get_products([]) == {}
        assert repo.get_price_references([]) == {}

    def test_price_references(self, repo: Repository) -> None:
        repo.save_product(Product(id="p1", factory_cost=Decimal("100")), suggested_price=Decimal("150"))
        repo.save_product(Product(id="p2", factory_cost=Decimal("100")))
        repo.save_market_price("p1", Decimal("180"))
        repo.save_market_price("p1", Decimal("199.99"))

        references = repo.get_price_references(["p1", "p2"])
        assert references["p1"].market_price == Decimal("199.99")
        assert references["p1"].admin_price == Decimal("150")
        assert references["p2"].market_price is None
        assert references["p2"].admin_price is None


class TestPricingContext:
    def test_load_context(self, seeded: Repository) -> None:
        context = seeded.load_pricing_context()
        assert len(context.margin_ranges) == 2
        assert len(context.routes) == 2
        assert len(context.category_rates) == 1
        assert context.default_destination_code == "HT"

    def test_end_to_end_price(self, seeded: Repository, settings: Settings) -> None:
        engine = PricingEngine.from_repository(seeded, settings=settings)
        price = engine.calculate_product_price(Product(id="p1", factory_cost=Decimal("100")))
        assert price is not None
        assert price.final_b2b_price == Decimal("123.00")
        assert price.suggested_pvp == Decimal("159.90")

        via_hub = engine.calculate_product_price(
            Product(id="p1", factory_cost=Decimal("100"), weight_kg=Decimal("3"), category_id="electronics"),
            destination="DO",
        )
        # 120 + 21 logistics + 7 fees
        assert via_hub.final_b2b_price == Decimal("148.00")

    def test_inactive_destination_keeps_its_code(self, seeded: Repository, settings: Settings) -> None:
        engine = PricingEngine.from_repository(seeded, "JM", settings)
        assert engine.context.default_destination_code == "JM"

        price = engine.calculate_product_price(Product(id="p1", factory_cost=Decimal("100")))
        assert price is not None
        assert price.logistics is None
        assert price.logistics_cost == Decimal("0")
        assert price.final_b2b_price == Decimal("120.00")

        summary = engine.calculate_cart_logistics(
            [CartLineItem(id="i1", product_id="p1", quantity=2, unit_cost=Decimal("100"))]
        )
        assert summary.total_logistics_cost == Decimal("0.00")
        assert summary.route_name == "Standard route"
        assert summary.estimated_delivery_days == DeliveryWindow(7, 21)

        cached = PricingEngine.from_cache(ReferenceDataCache(seeded.load_pricing_context), "jm", settings)
        assert cached.calculate_product_price(Product(id="p1", factory_cost=Decimal("100"))).logistics is None


def test_reset_database(seeded: Repository) -> None:
    reset_database()
    assert seeded.get_margin_ranges(active_only=False) == []
    assert seeded.get_active_routes() == []
