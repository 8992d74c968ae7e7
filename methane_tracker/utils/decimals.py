"""
Exact decimal helpers for emission quantities.
"""
from decimal import Decimal
from typing import Iterable

from methane_tracker.utils.constants import EMISSION_SCALE

EMISSION_QUANTUM = Decimal(1).scaleb(-EMISSION_SCALE)  # Decimal("0.0001")


def quantize_emission(value: Decimal) -> Decimal:
    """Normalise to the stored NUMERIC scale so computed and stored values print alike."""
    return Decimal(value).quantize(EMISSION_QUANTUM)


def exact_sum(values: Iterable[Decimal]) -> Decimal:
    """Sum with Decimal arithmetic only; never routes through float."""
    return sum((Decimal(v) for v in values), Decimal("0"))
