"""Route cost calculation for the B2B pricing engine."""

from __future__ import annotations

from collections.abc import Iterable
from decimal import Decimal

from .models import DeliveryWindow, RouteCost, RouteSummary, ShippingRoute
from .rounding import round2, to_decimal

NO_ROUTE_COST = RouteCost(cost=Decimal("0.00"), days=DeliveryWindow(0, 0), has_data=False)


class RouteCostCalculator:
    """Calculates logistics cost and transit days across a route's segments."""

    def __init__(self, origin_name: str = "China") -> None:
        self.origin_name = origin_name

    def calculate(self, route: ShippingRoute | None, weight_kg: Decimal) -> RouteCost:
        """Sum segment costs and transit days for a shipment weight.

        Each active segment costs ``max(cost_per_kg * weight, min_cost)``.
        Segments are sequential legs, so days add up rather than overlap.
        """
        if route is None:
            return NO_ROUTE_COST

        segments = route.active_segments
        if not segments:
            return NO_ROUTE_COST

        weight = to_decimal(weight_kg)
        total_cost = Decimal("0")
        days_min = 0
        days_max = 0

        for segment in segments:
            total_cost += max(segment.cost_per_kg * weight, segment.min_cost)
            days_min += segment.estimated_days_min
            days_max += segment.estimated_days_max

        return RouteCost(
            cost=round2(total_cost),
            days=DeliveryWindow(days_min, days_max),
            has_data=True,
        )

    def route_name(self, route: ShippingRoute) -> str:
        """Human readable route name."""
        country = route.destination_country_name or route.destination_country_code
        if route.is_direct or not route.transit_hub_name:
            return f"{self.origin_name} → {country} (Direct)"
        return f"{self.origin_name} → {route.transit_hub_name} → {country}"

    def summarize(self, route: ShippingRoute) -> RouteSummary:
        """Summarize a route for display."""
        segments = route.active_segments
        days_min = sum(s.estimated_days_min for s in segments)
        days_max = sum(s.estimated_days_max for s in segments)
        cost_per_kg = sum((s.cost_per_kg for s in segments), Decimal("0"))

        return RouteSummary(
            route_id=route.id,
            name=self.route_name(route),
            segments=len(segments),
            days_range=str(DeliveryWindow(days_min, days_max)),
            cost_per_kg=cost_per_kg,
            is_active=route.is_active,
        )


def find_route_for_destination(
    routes: Iterable[ShippingRoute], destination_code: str | None
) -> ShippingRoute | None:
    """Find the first active route for a destination country (case-insensitive)."""
    if not destination_code:
        return None

    code = destination_code.strip().upper()
    for route in routes:
        if route.is_active and route.destination_country_code.upper() == code:
            return route
    return None
