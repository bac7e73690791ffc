"""
Contribution Calculator Package

Stateless, side-effect-free functions for contribution-room accounting,
refund estimates, marginal tax rates and date rules.
"""

from contribution_tracker.calculations.contributions import (
    HIGH_TAX_RATE_THRESHOLD,
    PENSION_ADJUSTMENT_FACTOR,
    as_finite_number,
    calculate_optimal_contribution,
    calculate_pension_adjustment,
    calculate_remaining_room,
    calculate_rrsp_tax_refund,
    format_currency,
    format_percentage,
    validate_contribution,
)
from contribution_tracker.calculations.dates import (
    calculate_age,
    format_date,
    is_within_first_contribution_period,
)
from contribution_tracker.calculations.tax_rates import (
    SUPPORTED_PROVINCES,
    TAX_BRACKETS,
    get_marginal_tax_rate,
    get_tax_brackets,
)

__all__ = [
    "HIGH_TAX_RATE_THRESHOLD",
    "PENSION_ADJUSTMENT_FACTOR",
    "SUPPORTED_PROVINCES",
    "TAX_BRACKETS",
    "as_finite_number",
    "calculate_age",
    "calculate_optimal_contribution",
    "calculate_pension_adjustment",
    "calculate_remaining_room",
    "calculate_rrsp_tax_refund",
    "format_currency",
    "format_date",
    "format_percentage",
    "get_marginal_tax_rate",
    "get_tax_brackets",
    "is_within_first_contribution_period",
    "validate_contribution",
]
