"""Repository pattern for reference data and product lookups."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from decimal import Decimal

from sqlalchemy import desc, select
from sqlalchemy.orm import selectinload

from b2b_pricing.core.models import (
    CategoryShippingRate,
    MarginRange,
    PriceReference,
    PricingContext,
    Product,
    RouteSegment,
    SegmentType,
    ShippingRoute,
)

from .models import (
    CategoryShippingRateDB,
    DestinationCountryDB,
    MarginRangeDB,
    MarketPriceDB,
    ProductDB,
    RouteSegmentDB,
    ShippingRouteDB,
    TransitHubDB,
)
from .session import session_scope

logger = logging.getLogger(__name__)


class Repository:
    """Data access repository for pricing reference data."""

    # ==================== Margin Ranges ====================

    def save_margin_range(self, margin_range: MarginRange) -> MarginRange:
        """Save a margin range."""
        with session_scope() as session:
            db_range = MarginRangeDB(
                min_cost=margin_range.min_cost,
                max_cost=margin_range.max_cost,
                margin_percent=margin_range.margin_percent,
                description=margin_range.description,
                is_active=margin_range.is_active,
                sort_order=margin_range.sort_order,
            )
            session.add(db_range)
            session.flush()
            margin_range.id = str(db_range.id)
            return margin_range

    def get_margin_ranges(self, active_only: bool = True) -> list[MarginRange]:
        """Get margin ranges ordered by sort_order."""
        with session_scope() as session:
            query = select(MarginRangeDB)
            if active_only:
                query = query.where(MarginRangeDB.is_active == True)
            query = query.order_by(MarginRangeDB.sort_order, MarginRangeDB.id)

            result = session.execute(query).scalars().all()
            return [self._db_to_margin_range(db) for db in result]

    def set_margin_range_active(self, range_id: str, is_active: bool) -> bool:
        """Toggle a margin range. Returns False if it does not exist."""
        with session_scope() as session:
            db_range = session.get(MarginRangeDB, int(range_id))
            if db_range is None:
                return False
            db_range.is_active = is_active
            return True

    def _db_to_margin_range(self, db: MarginRangeDB) -> MarginRange:
        return MarginRange(
            id=str(db.id),
            min_cost=db.min_cost,
            max_cost=db.max_cost,
            margin_percent=db.margin_percent,
            description=db.description or "",
            is_active=db.is_active,
            sort_order=db.sort_order,
        )

    # ==================== Destinations & Routes ====================

    def save_destination(
        self, code: str, name: str, currency: str = "USD", is_active: bool = True
    ) -> int:
        """Save a destination country and return its id."""
        with session_scope() as session:
            db_dest = DestinationCountryDB(
                code=code.upper(), name=name, currency=currency, is_active=is_active
            )
            session.add(db_dest)
            session.flush()
            return db_dest.id

    def save_transit_hub(self, code: str, name: str) -> int:
        """Save a transit hub and return its id."""
        with session_scope() as session:
            db_hub = TransitHubDB(code=code.upper(), name=name)
            session.add(db_hub)
            session.flush()
            return db_hub.id

    def save_route(self, route: ShippingRoute) -> ShippingRoute:
        """Save a route and its segments.

        The destination country must already exist; it is matched by code.
        """
        with session_scope() as session:
            destination = session.execute(
                select(DestinationCountryDB).where(
                    DestinationCountryDB.code == route.destination_country_code.upper()
                )
            ).scalar_one()

            db_route = ShippingRouteDB(
                destination_country_id=destination.id,
                transit_hub_id=int(route.transit_hub_id) if route.transit_hub_id else None,
                is_direct=route.is_direct,
                is_active=route.is_active,
            )
            for segment in route.segments:
                db_route.segments.append(
                    RouteSegmentDB(
                        segment=segment.segment.value,
                        cost_per_kg=segment.cost_per_kg,
                        cost_per_cbm=segment.cost_per_cbm,
                        min_cost=segment.min_cost,
                        estimated_days_min=segment.estimated_days_min,
                        estimated_days_max=segment.estimated_days_max,
                        notes=segment.notes,
                        is_active=segment.is_active,
                    )
                )
            session.add(db_route)
            session.flush()

            route.id = str(db_route.id)
            for segment, db_segment in zip(route.segments, db_route.segments):
                segment.id = str(db_segment.id)
            return route

    def get_active_routes(self) -> list[ShippingRoute]:
        """Get active routes joined with their segments, destination and hub."""
        with session_scope() as session:
            query = (
                select(ShippingRouteDB)
                .where(ShippingRouteDB.is_active == True)
                .options(
                    selectinload(ShippingRouteDB.segments),
                    selectinload(ShippingRouteDB.destination_country),
                    selectinload(ShippingRouteDB.transit_hub),
                )
                .order_by(ShippingRouteDB.id)
            )
            result = session.execute(query).scalars().all()
            return [self._db_to_route(db) for db in result]

    def get_default_destination_code(self, destination: str | None = None) -> str | None:
        """Return the requested destination code, or the first active one when none is given.

        A requested code is kept even when it is unknown or inactive, so no route
        matches it and no other country's logistics are charged.
        """
        if destination:
            return destination.upper()

        with session_scope() as session:
            db_dest = session.execute(
                select(DestinationCountryDB)
                .where(DestinationCountryDB.is_active == True)
                .order_by(DestinationCountryDB.id)
                .limit(1)
            ).scalar_one_or_none()
            return db_dest.code if db_dest else None

    def _db_to_route(self, db: ShippingRouteDB) -> ShippingRoute:
        return ShippingRoute(
            id=str(db.id),
            destination_country_code=db.destination_country.code,
            destination_country_name=db.destination_country.name,
            transit_hub_id=str(db.transit_hub_id) if db.transit_hub_id else None,
            transit_hub_name=db.transit_hub.name if db.transit_hub else None,
            is_direct=db.is_direct,
            is_active=db.is_active,
            segments=[self._db_to_segment(s) for s in db.segments],
        )

    def _db_to_segment(self, db: RouteSegmentDB) -> RouteSegment:
        return RouteSegment(
            id=str(db.id),
            segment=SegmentType.from_string(db.segment),
            cost_per_kg=db.cost_per_kg,
            cost_per_cbm=db.cost_per_cbm,
            min_cost=db.min_cost,
            estimated_days_min=db.estimated_days_min,
            estimated_days_max=db.estimated_days_max,
            is_active=db.is_active,
            notes=db.notes or "",
        )

    # ==================== Category Rates ====================

    def save_category_rate(self, rate: CategoryShippingRate) -> CategoryShippingRate:
        """Save a category shipping rate."""
        with session_scope() as session:
            session.add(
                CategoryShippingRateDB(
                    category_id=rate.category_id,
                    fixed_fee=rate.fixed_fee,
                    percentage_fee=rate.percentage_fee,
                    description=rate.description,
                    is_active=rate.is_active,
                )
            )
            return rate

    def get_active_category_rates(self) -> list[CategoryShippingRate]:
        """Get all active category rates."""
        with session_scope() as session:
            query = (
                select(CategoryShippingRateDB)
                .where(CategoryShippingRateDB.is_active == True)
                .order_by(CategoryShippingRateDB.id)
            )
            result = session.execute(query).scalars().all()
            return [
                CategoryShippingRate(
                    category_id=db.category_id,
                    fixed_fee=db.fixed_fee,
                    percentage_fee=db.percentage_fee,
                    description=db.description or "",
                    is_active=db.is_active,
                )
                for db in result
            ]

    # ==================== Products & Market Prices ====================

    def save_product(self, product: Product, suggested_price: Decimal | None = None) -> Product:
        """Insert or update a product."""
        with session_scope() as session:
            db_product = session.get(ProductDB, product.id)
            if db_product is None:
                db_product = ProductDB(id=product.id)
                session.add(db_product)

            db_product.sku = product.sku
            db_product.name = product.name
            db_product.factory_cost = product.factory_cost
            db_product.category_id = product.category_id
            db_product.weight_kg = product.weight_kg
            db_product.moq = product.moq or 1
            db_product.suggested_price = suggested_price
            return product

    def save_market_price(
        self,
        product_id: str,
        max_price: Decimal,
        min_price: Decimal = Decimal("0"),
        num_sellers: int = 0,
    ) -> None:
        """Record an observed consumer market price for a product."""
        with session_scope() as session:
            session.add(
                MarketPriceDB(
                    product_id=product_id,
                    max_price=max_price,
                    min_price=min_price,
                    num_sellers=num_sellers,
                )
            )

    def get_products(self, product_ids: Iterable[str]) -> dict[str, Product]:
        """Get active products by id."""
        ids = list(set(product_ids))
        if not ids:
            return {}

        with session_scope() as session:
            query = select(ProductDB).where(ProductDB.id.in_(ids), ProductDB.is_active == True)
            result = session.execute(query).scalars().all()
            return {db.id: self._db_to_product(db) for db in result}

    def get_price_references(self, product_ids: Iterable[str]) -> dict[str, PriceReference]:
        """Get the latest market price and admin price for each product."""
        ids = list(set(product_ids))
        if not ids:
            return {}

        references: dict[str, PriceReference] = {}
        with session_scope() as session:
            products = session.execute(
                select(ProductDB).where(ProductDB.id.in_(ids))
            ).scalars().all()
            for db in products:
                references[db.id] = PriceReference(admin_price=db.suggested_price)

            market_rows = session.execute(
                select(MarketPriceDB)
                .where(MarketPriceDB.product_id.in_(ids))
                .order_by(desc(MarketPriceDB.observed_at), desc(MarketPriceDB.id))
            ).scalars().all()
            for row in market_rows:
                reference = references.setdefault(row.product_id, PriceReference())
                if reference.market_price is None:
                    reference.market_price = row.max_price

        return references

    def _db_to_product(self, db: ProductDB) -> Product:
        return Product(
            id=db.id,
            factory_cost=db.factory_cost,
            category_id=db.category_id,
            weight_kg=db.weight_kg,
            sku=db.sku or "",
            name=db.name or "",
            moq=db.moq,
        )

    # ==================== Pricing Context ====================

    def load_pricing_context(self, destination: str | None = None) -> PricingContext:
        """Fetch all reference rows needed by the engine in one pass."""
        context = PricingContext.build(
            margin_ranges=self.get_margin_ranges(active_only=True),
            routes=self.get_active_routes(),
            category_rates=self.get_active_category_rates(),
            default_destination_code=self.get_default_destination_code(destination),
        )
        logger.info(
            f"Loaded pricing context: {len(context.margin_ranges)} margin ranges, "
            f"{len(context.routes)} routes, {len(context.category_rates)} category rates"
        )
        return context
