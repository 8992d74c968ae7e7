"""
Compliance status helper.
"""
from decimal import Decimal

from methane_tracker.utils.constants import ComplianceStatus


def get_compliance_status(
    total_emissions: Decimal, emission_limit: Decimal
) -> ComplianceStatus:
    """A site is within its limit while its running total does not exceed it."""
    if Decimal(total_emissions) <= Decimal(emission_limit):
        return ComplianceStatus.WITHIN_LIMIT
    return ComplianceStatus.LIMIT_EXCEEDED
