"""Demand tiering and price recommendation."""

from __future__ import annotations

from backend.domain.models import DemandClassification, DemandTier, DescriptiveSummary


STABLE_DEMAND_THRESHOLD = 3.0
HIGH_DEMAND_THRESHOLD = 5.0

LOW_DEMAND_MULTIPLIER = 0.9
STABLE_DEMAND_MULTIPLIER = 1.0
HIGH_DEMAND_MULTIPLIER = 1.1

RECOMMENDATIONS = {
    DemandTier.LOW: "Low demand. Consider reducing price or offering promos.",
    DemandTier.STABLE: "Stable demand. Maintain current pricing strategy.",
    DemandTier.HIGH: "High demand detected. Consider increasing price slightly.",
}

MULTIPLIERS = {
    DemandTier.LOW: LOW_DEMAND_MULTIPLIER,
    DemandTier.STABLE: STABLE_DEMAND_MULTIPLIER,
    DemandTier.HIGH: HIGH_DEMAND_MULTIPLIER,
}


class PricingValidationError(ValueError):
    """Raised when pricing inputs are out of range."""


def average_bookings(total_bookings: int, number_of_days: int) -> float:
    if total_bookings < 0:
        raise PricingValidationError("total_bookings must be >= 0")
    return total_bookings / max(number_of_days, 1)


def demand_tier(avg_bookings: float) -> DemandTier:
    if avg_bookings < STABLE_DEMAND_THRESHOLD:
        return DemandTier.LOW
    if avg_bookings < HIGH_DEMAND_THRESHOLD:
        return DemandTier.STABLE
    return DemandTier.HIGH


def classify_demand(avg_bookings: float, base_price: float) -> DemandClassification:
    """Map average daily bookings to a tier, multiplier and recommended price."""
    if avg_bookings < 0:
        raise PricingValidationError("avg_bookings must be >= 0")
    if base_price <= 0:
        raise PricingValidationError("base_price must be > 0")

    tier = demand_tier(avg_bookings)
    multiplier = MULTIPLIERS[tier]
    return DemandClassification(
        tier=tier,
        price_multiplier=multiplier,
        recommendation=RECOMMENDATIONS[tier],
        avg_bookings=float(avg_bookings),
        base_price=float(base_price),
        optimal_price=float(base_price * multiplier),
    )


def summarize_bookings(
    total_bookings: int,
    number_of_days: int,
    price: float,
) -> DescriptiveSummary:
    return DescriptiveSummary(
        total_bookings=total_bookings,
        total_sales=float(total_bookings * price),
        days_observed=number_of_days,
        avg_daily_bookings=average_bookings(total_bookings, number_of_days),
    )
