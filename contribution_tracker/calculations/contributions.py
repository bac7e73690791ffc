"""
Contribution Calculations

Pure functions that turn raw user-entered numbers (balances, incomes,
contribution amounts) into display strings, validated contribution
checks, refund estimates, pension adjustments and an allocation
suggestion.

IMPORTANT: Every function here is total. Malformed input produces a
safe sentinel ($0.00, 0%, 0) instead of an exception, so a caller can't
tell "zero" from "bad input". Only validate_contribution reports a
problem, as an invalid ContributionCheck.
"""

import math
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Optional

from contribution_tracker.models.results import AllocationResult, ContributionCheck


# Marginal rate (percent) at which an RRSP deduction beats TFSA growth
HIGH_TAX_RATE_THRESHOLD = 30.0

# Simplified proxy for the CRA pension adjustment formula
PENSION_ADJUSTMENT_FACTOR = 9


def as_finite_number(value: object) -> Optional[float]:
    """Return value as a finite float, or None if it is not a usable number."""
    if isinstance(value, bool) or not isinstance(value, (int, float, Decimal)):
        return None
    try:
        number = float(value)
    except (OverflowError, ValueError):
        # ints beyond float range, signalling NaN
        return None
    if not math.isfinite(number):
        return None
    return number


def _round_half_up(number: float, places: str) -> Decimal:
    """Round half away from zero, the way en-CA number formatting does."""
    exact = Decimal(str(number))
    try:
        return exact.quantize(Decimal(places), rounding=ROUND_HALF_UP)
    except InvalidOperation:
        # More digits than the context holds; already far beyond cent precision
        return exact


def format_currency(amount: object) -> str:
    """
    Format an amount as Canadian dollars, e.g. 1234.5 -> "$1,234.50".

    Negative amounts keep their sign in front of the symbol ("-$12.00").
    """
    number = as_finite_number(amount)
    if number is None:
        return "$0.00"

    rounded = _round_half_up(abs(number), "0.01")
    sign = "-" if number < 0 and rounded != 0 else ""
    return f"{sign}${rounded:,.2f}"


def format_percentage(value: object) -> str:
    """Format a whole-number percentage with one decimal, e.g. 19.5 -> "19.5%"."""
    number = as_finite_number(value)
    if number is None:
        return "0%"
    return f"{_round_half_up(number, '0.1'):,.1f}%"


def calculate_rrsp_tax_refund(contribution: object, marginal_tax_rate: object) -> float:
    """
    Estimate the refund an RRSP deduction produces at a marginal rate.

    An estimate only: credits, clawbacks and provincial surtaxes are
    not modelled.
    """
    amount = as_finite_number(contribution)
    rate = as_finite_number(marginal_tax_rate)
    if amount is None or rate is None:
        return 0.0
    return amount * (rate / 100)


def calculate_remaining_room(total_room: object, contributions: object) -> float:
    """Room left after contributions. Never negative."""
    room = as_finite_number(total_room)
    contributed = as_finite_number(contributions)
    if room is None or contributed is None:
        return 0.0
    return max(0.0, room - contributed)


def validate_contribution(amount: object, available_room: object) -> ContributionCheck:
    """
    Check a proposed contribution against the available room.

    Advisory only: the caller decides whether an invalid result blocks
    the contribution.
    """
    value = as_finite_number(amount)
    room = as_finite_number(available_room)
    if value is None or room is None:
        return ContributionCheck(is_valid=False, message="Invalid input values")

    if value <= 0:
        return ContributionCheck(
            is_valid=False,
            message="Contribution amount must be greater than zero",
        )

    if value > room:
        return ContributionCheck(
            is_valid=False,
            message=f"Contribution exceeds available room by {format_currency(value - room)}",
        )

    return ContributionCheck(is_valid=True)


def calculate_pension_adjustment(rpp_contribution: object, dpsp_contribution: object) -> float:
    """
    Approximate the RRSP room lost to employer plan contributions.

    Real pension adjustments depend on plan-specific formulas; this
    applies a flat factor to the combined RPP and DPSP contributions.
    """
    rpp = as_finite_number(rpp_contribution)
    dpsp = as_finite_number(dpsp_contribution)
    if rpp is None or dpsp is None:
        return 0.0
    return (rpp + dpsp) * PENSION_ADJUSTMENT_FACTOR


def calculate_optimal_contribution(
    rrsp_room: object,
    tfsa_room: object,
    fhsa_room: object,
    available_funds: object,
    marginal_tax_rate: object,
) -> AllocationResult:
    """
    Split available funds across FHSA, RRSP and TFSA.

    Greedy, single pass, in a fixed order:
    1. FHSA, for the deduction plus tax-free home withdrawal
    2. RRSP, when the marginal rate is at or above 30%
    3. TFSA
    4. RRSP with whatever is left, when the marginal rate is below 30%

    A heuristic, not a proof of tax efficiency.
    """
    rrsp_limit = as_finite_number(rrsp_room) or 0.0
    tfsa_limit = as_finite_number(tfsa_room) or 0.0
    fhsa_limit = as_finite_number(fhsa_room) or 0.0
    remaining = as_finite_number(available_funds) or 0.0
    rate = as_finite_number(marginal_tax_rate) or 0.0
    high_rate = rate >= HIGH_TAX_RATE_THRESHOLD

    rrsp = tfsa = fhsa = 0.0
    strategy: list[str] = []

    if fhsa_limit > 0 and remaining > 0:
        fhsa = min(fhsa_limit, remaining)
        remaining -= fhsa
        strategy.append("FHSA for home purchase benefits.")

    if high_rate and rrsp_limit > 0 and remaining > 0:
        rrsp = min(rrsp_limit, remaining)
        remaining -= rrsp
        strategy.append("RRSP for tax deduction.")

    if tfsa_limit > 0 and remaining > 0:
        tfsa = min(tfsa_limit, remaining)
        remaining -= tfsa
        strategy.append("TFSA for tax-free growth.")

    if not high_rate and rrsp_limit > 0 and remaining > 0:
        rrsp = min(rrsp_limit, remaining)
        remaining -= rrsp
        strategy.append("RRSP for retirement savings.")

    return AllocationResult(
        rrsp=rrsp,
        tfsa=tfsa,
        fhsa=fhsa,
        strategy=" ".join(strategy).strip(),
    )
