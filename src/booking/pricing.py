"""Fare calculation and credit affordability."""

import math

from pydantic import BaseModel, ConfigDict

from domain import PaymentMethod, Wallet

BASE_FARE_VND = 10_000
PER_KM_VND = 15_000
VND_PER_CREDIT = 10


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves going up, unlike built-in round()."""
    return math.floor(value + 0.5)


def price(
    distance_km: float,
    base_fare_vnd: int = BASE_FARE_VND,
    per_km_vnd: int = PER_KM_VND,
) -> int:
    """Fare in VND for a trip of ``distance_km``."""
    return round_half_up(base_fare_vnd + distance_km * per_km_vnd)


def to_credit(vnd: int, vnd_per_credit: int = VND_PER_CREDIT) -> int:
    return round_half_up(vnd / vnd_per_credit)


class PriceBreakdown(BaseModel):
    """Fare components shown on the pricing review screen."""

    model_config = ConfigDict(frozen=True)

    distance_km: float
    base_fare_vnd: int
    distance_charge_vnd: int
    total_vnd: int
    total_credits: int

    @classmethod
    def for_distance(
        cls,
        distance_km: float,
        base_fare_vnd: int = BASE_FARE_VND,
        per_km_vnd: int = PER_KM_VND,
        vnd_per_credit: int = VND_PER_CREDIT,
    ) -> "PriceBreakdown":
        total = price(distance_km, base_fare_vnd, per_km_vnd)
        return cls(
            distance_km=distance_km,
            base_fare_vnd=base_fare_vnd,
            # Derived from the rounded total so the two parts always add up
            distance_charge_vnd=total - base_fare_vnd,
            total_vnd=total,
            total_credits=to_credit(total, vnd_per_credit),
        )


def can_pay(
    method: PaymentMethod,
    wallet: Wallet,
    total_vnd: int,
    vnd_per_credit: int = VND_PER_CREDIT,
) -> bool:
    """Cash always pays; a credit method needs a balance covering the fare in credits."""
    balance = wallet.balance_for(method)
    if balance is None:
        return True
    return balance >= to_credit(total_vnd, vnd_per_credit)
