"""Core data models for the B2B pricing engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum

from .rounding import to_decimal


class SegmentType(str, Enum):
    """Leg of a shipping route."""

    ORIGIN_TO_HUB = "origin_to_hub"
    HUB_TO_DESTINATION = "hub_to_destination"
    DIRECT = "direct"

    @classmethod
    def from_string(cls, value: str) -> "SegmentType":
        """Convert a stored segment name to SegmentType."""
        value_lower = value.strip().lower().replace("-", "_")
        aliases = {
            "china_to_transit": cls.ORIGIN_TO_HUB,
            "transit_to_destination": cls.HUB_TO_DESTINATION,
            "china_to_destination": cls.DIRECT,
        }
        if value_lower in aliases:
            return aliases[value_lower]
        for segment in cls:
            if segment.value == value_lower:
                return segment
        raise ValueError(f"Unknown route segment: {value}")


class PvpSource(str, Enum):
    """Where a suggested consumer price came from."""

    MARKET = "market"
    ADMIN = "admin"
    CALCULATED = "calculated"


@dataclass
class MarginRange:
    """Cost band with the margin percentage applied to factory cost."""

    id: str = ""
    min_cost: Decimal = Decimal("0")
    max_cost: Decimal | None = None  # None means no upper bound
    margin_percent: Decimal = Decimal("30")
    description: str = ""
    is_active: bool = True
    sort_order: int = 0

    def __post_init__(self) -> None:
        self.min_cost = to_decimal(self.min_cost)
        if self.max_cost is not None:
            self.max_cost = to_decimal(self.max_cost)
        self.margin_percent = to_decimal(self.margin_percent)

    def contains(self, cost: Decimal) -> bool:
        """Check if a cost falls in [min_cost, max_cost)."""
        if cost < self.min_cost:
            return False
        return self.max_cost is None or cost < self.max_cost


@dataclass
class RouteSegment:
    """One leg of a shipping route."""

    id: str = ""
    segment: SegmentType = SegmentType.DIRECT
    cost_per_kg: Decimal = Decimal("0")
    cost_per_cbm: Decimal = Decimal("0")
    min_cost: Decimal = Decimal("0")
    estimated_days_min: int = 0
    estimated_days_max: int = 0
    is_active: bool = True
    notes: str = ""

    def __post_init__(self) -> None:
        if isinstance(self.segment, str) and not isinstance(self.segment, SegmentType):
            self.segment = SegmentType.from_string(self.segment)
        self.cost_per_kg = to_decimal(self.cost_per_kg)
        self.cost_per_cbm = to_decimal(self.cost_per_cbm)
        self.min_cost = to_decimal(self.min_cost)


@dataclass
class ShippingRoute:
    """Shipping route to a destination country, made of ordered segments."""

    id: str = ""
    destination_country_code: str = ""
    destination_country_name: str = ""
    transit_hub_id: str | None = None
    transit_hub_name: str | None = None
    is_direct: bool = False
    is_active: bool = True
    segments: list[RouteSegment] = field(default_factory=list)

    @property
    def active_segments(self) -> list[RouteSegment]:
        """Active segments in storage order."""
        return [s for s in self.segments if s.is_active]


@dataclass
class CategoryShippingRate:
    """Fixed plus percentage fee charged for a product category."""

    category_id: str = ""
    fixed_fee: Decimal = Decimal("0")
    percentage_fee: Decimal = Decimal("0")
    description: str = ""
    is_active: bool = True

    def __post_init__(self) -> None:
        self.fixed_fee = to_decimal(self.fixed_fee)
        self.percentage_fee = to_decimal(self.percentage_fee)


@dataclass
class Product:
    """Product as seen by the pricing engine."""

    id: str = ""
    factory_cost: Decimal | None = None
    category_id: str | None = None
    weight_kg: Decimal | None = None
    destination_country_code: str | None = None
    sku: str = ""
    name: str = ""
    moq: int | None = None

    def __post_init__(self) -> None:
        if self.factory_cost is not None:
            self.factory_cost = to_decimal(self.factory_cost)
        if self.weight_kg is not None:
            self.weight_kg = to_decimal(self.weight_kg)


@dataclass
class PriceReference:
    """Consumer prices supplied by the caller for a product."""

    market_price: Decimal | None = None  # Max price observed in the B2C market
    admin_price: Decimal | None = None  # Suggested price set by an admin

    def __post_init__(self) -> None:
        if self.market_price is not None:
            self.market_price = to_decimal(self.market_price)
        if self.admin_price is not None:
            self.admin_price = to_decimal(self.admin_price)


@dataclass(frozen=True)
class DeliveryWindow:
    """Estimated delivery time in days."""

    min: int = 0
    max: int = 0

    def __str__(self) -> str:
        return f"{self.min}-{self.max} days"


@dataclass(frozen=True)
class RouteCost:
    """Logistics cost and transit days for a route at a given weight."""

    cost: Decimal = Decimal("0")
    days: DeliveryWindow = field(default_factory=DeliveryWindow)
    has_data: bool = False


@dataclass(frozen=True)
class RouteSummary:
    """Display summary of a route."""

    route_id: str
    name: str
    segments: int
    days_range: str
    cost_per_kg: Decimal
    is_active: bool


@dataclass(frozen=True)
class ProductLogistics:
    """Logistics resolved for one product."""

    route_id: str
    route_name: str
    logistics_cost: Decimal
    estimated_days: DeliveryWindow
    origin_country: str
    destination_country: str


@dataclass(frozen=True)
class CalculatedPrice:
    """Complete price breakdown for a product."""

    product_id: str
    factory_cost: Decimal

    # Margin (Protection Rule: applied to factory cost only)
    margin_range: MarginRange | None
    margin_percent: Decimal
    margin_value: Decimal
    subtotal_with_margin: Decimal

    # Logistics
    logistics: ProductLogistics | None
    logistics_cost: Decimal
    category_fees: Decimal

    final_b2b_price: Decimal

    # Consumer side
    suggested_pvp: Decimal
    pvp_source: PvpSource
    profit_amount: Decimal
    roi_percent: Decimal

    estimated_days: DeliveryWindow


@dataclass
class B2BPriceInput:
    """Inputs for a standalone Protection Rule calculation."""

    base_cost: Decimal = Decimal("0")
    logistics_cost: Decimal = Decimal("0")
    category_fees: Decimal = Decimal("0")
    additional_expenses: Decimal = Decimal("0")

    def __post_init__(self) -> None:
        self.base_cost = to_decimal(self.base_cost)
        self.logistics_cost = to_decimal(self.logistics_cost)
        self.category_fees = to_decimal(self.category_fees)
        self.additional_expenses = to_decimal(self.additional_expenses)


@dataclass(frozen=True)
class B2BPriceResult:
    """Result of a standalone Protection Rule calculation."""

    base_cost: Decimal
    margin_range: MarginRange | None
    margin_percent: Decimal
    margin_value: Decimal
    subtotal_with_margin: Decimal
    logistics_cost: Decimal
    category_fees: Decimal
    additional_expenses: Decimal
    final_b2b_price: Decimal


@dataclass
class CartLineItem:
    """A line in a B2B cart (one variant of a product)."""

    id: str = ""
    product_id: str = ""
    quantity: int = 1
    unit_cost: Decimal = Decimal("0")
    sku: str = ""
    name: str = ""
    moq: int | None = None
    color: str | None = None
    size: str | None = None

    def __post_init__(self) -> None:
        self.unit_cost = to_decimal(self.unit_cost)


@dataclass(frozen=True)
class CartItemLogistics:
    """Per-line price and logistics breakdown in a cart."""

    item_id: str
    product_id: str
    quantity: int
    factory_cost: Decimal
    margin_percent: Decimal
    margin_value: Decimal
    subtotal_with_margin: Decimal
    logistics_cost: Decimal
    category_fees: Decimal
    final_unit_price: Decimal
    final_total_price: Decimal
    estimated_days: DeliveryWindow
    route_name: str


@dataclass
class CartLogisticsSummary:
    """Cart-level totals and delivery estimate."""

    items_logistics: dict[str, CartItemLogistics] = field(default_factory=dict)

    total_factory_cost: Decimal = Decimal("0")
    total_margin_value: Decimal = Decimal("0")
    total_logistics_cost: Decimal = Decimal("0")
    total_category_fees: Decimal = Decimal("0")
    total_final_price: Decimal = Decimal("0")

    estimated_delivery_days: DeliveryWindow = field(default_factory=DeliveryWindow)
    route_name: str = ""

    items_count: int = 0
    total_quantity: int = 0
    skipped_item_ids: list[str] = field(default_factory=list)


@dataclass
class GroupVariant:
    """A cart line counted toward a product group."""

    sku: str = ""
    name: str = ""
    quantity: int = 0
    color: str | None = None
    size: str | None = None


@dataclass
class ProductGroup:
    """All variants of one parent product in a cart."""

    product_id: str = ""
    product_name: str = ""
    moq: int = 1
    total_quantity: int = 0
    variants: list[GroupVariant] = field(default_factory=list)

    @property
    def meets_minimum(self) -> bool:
        return self.total_quantity >= self.moq

    @property
    def missing_quantity(self) -> int:
        """How many more units are needed to reach the MOQ."""
        return max(0, self.moq - self.total_quantity)


@dataclass(frozen=True)
class CartProfitProjection:
    """Projected resale profit for a cart."""

    total_investment: Decimal
    total_pvp_value: Decimal
    total_profit: Decimal
    avg_roi_percent: Decimal
    items_with_market_price: int
    items_total: int


@dataclass(frozen=True)
class PricingContext:
    """Reference rows for one calculation context."""

    margin_ranges: tuple[MarginRange, ...] = ()
    routes: tuple[ShippingRoute, ...] = ()
    category_rates: tuple[CategoryShippingRate, ...] = ()
    default_destination_code: str | None = None

    @classmethod
    def build(
        cls,
        margin_ranges: list[MarginRange] | None = None,
        routes: list[ShippingRoute] | None = None,
        category_rates: list[CategoryShippingRate] | None = None,
        default_destination_code: str | None = None,
    ) -> "PricingContext":
        """Create a context, ordering margin ranges by sort_order."""
        ordered = sorted(margin_ranges or [], key=lambda r: r.sort_order)
        return cls(
            margin_ranges=tuple(ordered),
            routes=tuple(routes or []),
            category_rates=tuple(category_rates or []),
            default_destination_code=default_destination_code,
        )
