"""Database layer for the B2B pricing engine."""

from .cache import ReferenceDataCache, ReferenceDataError
from .models import (
    Base,
    CategoryShippingRateDB,
    DestinationCountryDB,
    MarginRangeDB,
    MarketPriceDB,
    ProductDB,
    RouteSegmentDB,
    ShippingRouteDB,
    TransitHubDB,
)
from .repository import Repository
from .session import configure_database, get_engine, get_session, init_database

__all__ = [
    "Base",
    "MarginRangeDB",
    "DestinationCountryDB",
    "TransitHubDB",
    "ShippingRouteDB",
    "RouteSegmentDB",
    "CategoryShippingRateDB",
    "ProductDB",
    "MarketPriceDB",
    "Repository",
    "ReferenceDataCache",
    "ReferenceDataError",
    "configure_database",
    "get_engine",
    "get_session",
    "init_database",
]
