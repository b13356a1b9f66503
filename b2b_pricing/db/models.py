"""SQLAlchemy database models for the B2B pricing engine."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    """Base class for all database models."""

    pass


class MarginRangeDB(Base):
    """B2B margin range applied to factory cost."""

    __tablename__ = "b2b_margin_ranges"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    min_cost: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=Decimal("0"))
    max_cost: Mapped[Decimal | None] = mapped_column(Numeric(12, 2), nullable=True)
    margin_percent: Mapped[Decimal] = mapped_column(Numeric(6, 2), nullable=False)
    description: Mapped[str] = mapped_column(Text, default="")
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, index=True)
    sort_order: Mapped[int] = mapped_column(Integer, default=0, index=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.now)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.now, onupdate=datetime.now)


class DestinationCountryDB(Base):
    """Destination market."""

    __tablename__ = "destination_countries"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    code: Mapped[str] = mapped_column(String(10), nullable=False, unique=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    currency: Mapped[str] = mapped_column(String(10), default="USD")
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, index=True)

    routes: Mapped[list[ShippingRouteDB]] = relationship(
        "ShippingRouteDB", back_populates="destination_country"
    )


class TransitHubDB(Base):
    """Transit hub between origin and destination."""

    __tablename__ = "transit_hubs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    code: Mapped[str] = mapped_column(String(10), nullable=False, unique=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)


class ShippingRouteDB(Base):
    """Shipping route to a destination, optionally through a hub."""

    __tablename__ = "shipping_routes"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    destination_country_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("destination_countries.id", ondelete="CASCADE"), nullable=False, index=True
    )
    transit_hub_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("transit_hubs.id", ondelete="SET NULL"), nullable=True
    )
    is_direct: Mapped[bool] = mapped_column(Boolean, default=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, index=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.now)

    destination_country: Mapped[DestinationCountryDB] = relationship(
        "DestinationCountryDB", back_populates="routes"
    )
    transit_hub: Mapped[TransitHubDB | None] = relationship("TransitHubDB")
    segments: Mapped[list[RouteSegmentDB]] = relationship(
        "RouteSegmentDB",
        back_populates="route",
        cascade="all, delete-orphan",
        order_by="RouteSegmentDB.id",
    )


class RouteSegmentDB(Base):
    """Cost and transit time of one route leg."""

    __tablename__ = "route_logistics_costs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    shipping_route_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("shipping_routes.id", ondelete="CASCADE"), nullable=False, index=True
    )
    segment: Mapped[str] = mapped_column(String(50), nullable=False)
    cost_per_kg: Mapped[Decimal] = mapped_column(Numeric(10, 4), default=Decimal("0"))
    cost_per_cbm: Mapped[Decimal] = mapped_column(Numeric(10, 4), default=Decimal("0"))
    min_cost: Mapped[Decimal] = mapped_column(Numeric(10, 2), default=Decimal("0"))
    estimated_days_min: Mapped[int] = mapped_column(Integer, default=0)
    estimated_days_max: Mapped[int] = mapped_column(Integer, default=0)
    notes: Mapped[str] = mapped_column(Text, default="")
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)

    route: Mapped[ShippingRouteDB] = relationship("ShippingRouteDB", back_populates="segments")

    __table_args__ = (
        UniqueConstraint("shipping_route_id", "segment", name="uq_route_segment"),
    )


class CategoryShippingRateDB(Base):
    """Fixed and percentage fees for a product category."""

    __tablename__ = "category_shipping_rates"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    category_id: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    fixed_fee: Mapped[Decimal] = mapped_column(Numeric(10, 2), default=Decimal("0"))
    percentage_fee: Mapped[Decimal] = mapped_column(Numeric(6, 2), default=Decimal("0"))
    description: Mapped[str] = mapped_column(Text, default="")
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, index=True)


class ProductDB(Base):
    """Catalog product with the fields the pricing engine reads."""

    __tablename__ = "products"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    sku: Mapped[str] = mapped_column(String(100), default="", index=True)
    name: Mapped[str] = mapped_column(String(300), default="")
    factory_cost: Mapped[Decimal | None] = mapped_column(Numeric(12, 2), nullable=True)
    category_id: Mapped[str | None] = mapped_column(String(100), nullable=True, index=True)
    weight_kg: Mapped[Decimal | None] = mapped_column(Numeric(10, 3), nullable=True)
    moq: Mapped[int] = mapped_column(Integer, default=1)
    suggested_price: Mapped[Decimal | None] = mapped_column(Numeric(12, 2), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, index=True)

    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.now, onupdate=datetime.now)


class MarketPriceDB(Base):
    """Consumer market prices observed for a product."""

    __tablename__ = "b2c_market_prices"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    product_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("products.id", ondelete="CASCADE"), nullable=False
    )
    max_price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    min_price: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=Decimal("0"))
    num_sellers: Mapped[int] = mapped_column(Integer, default=0)
    observed_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.now)

    __table_args__ = (Index("ix_market_prices_product_time", "product_id", "observed_at"),)
