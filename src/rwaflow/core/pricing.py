"""
Pricing arithmetic for fractional purchases.

All request-path divisions are real-number divisions.  Integer amounts
are only produced at the very end, when a fiat cost is converted into the
ledger's smallest payment unit (wei-like, ``10**decimals`` per native
coin).

The fiat → native conversion divides by a fixed scale factor.  That is a
testnet placeholder, not a price conversion: it ignores the native
coin's market price entirely.
"""
from decimal import ROUND_HALF_UP, Decimal

from src.rwaflow.core.types import DEFAULT_PRICE_EXPO

NATIVE_DECIMALS = 18


def price_per_fraction(total_value: int, fraction_count: int) -> float:
    """Fiat value of one fraction, e.g. 100000 / 1000 -> 100.0."""
    if fraction_count <= 0:
        raise ValueError("fraction_count must be positive")
    return total_value / fraction_count


def total_cost(per_fraction: float, amount: int) -> float:
    return per_fraction * amount


def from_fixed_point(value: int, expo: int = DEFAULT_PRICE_EXPO) -> float:
    """Convert a fixed-point oracle price into a float (``value * 10**expo``)."""
    return float(Decimal(value).scaleb(expo))


def to_native_payment(
    cost: float,
    scale_factor: int,
    precision: int,
    decimals: int = NATIVE_DECIMALS,
) -> int:
    """Convert a fiat cost into an integral amount of the smallest native unit.

    Args:
        cost: Cost in fiat minor units.
        scale_factor: Divisor applied to *cost* to obtain native coins.
        precision: Fractional digits kept (half-up rounding) before the
                   unit conversion.
        decimals: Decimals of the native coin.

    Returns:
        Payment amount in the smallest denomination.
    """
    if scale_factor <= 0:
        raise ValueError("scale_factor must be positive")
    if precision < 0 or precision > decimals:
        raise ValueError(f"precision must be within [0, {decimals}]")

    coins = Decimal(str(cost)) / Decimal(scale_factor)
    quantum = Decimal(1).scaleb(-precision)
    rounded = coins.quantize(quantum, rounding=ROUND_HALF_UP)
    return int(rounded.scaleb(decimals))
