"""
Contribution Limit Builders

Turns what the user types in from a CRA Notice of Assessment into
ContributionLimits, and supplies defaults for people who haven't
entered one yet.
"""

from decimal import Decimal
from typing import Optional

from contribution_tracker.calculations import is_within_first_contribution_period
from contribution_tracker.config import LimitDefaultsSettings
from contribution_tracker.models import (
    AccountType,
    ContributionLimits,
    FHSALimits,
    NoticeOfAssessment,
    RRSPLimits,
    TFSALimits,
)


def default_limits(defaults: Optional[LimitDefaultsSettings] = None) -> ContributionLimits:
    """Limits for a new user with no Notice of Assessment on file."""
    defaults = defaults or LimitDefaultsSettings()
    return ContributionLimits(
        rrsp=RRSPLimits(tax_year_contribution_room=defaults.rrsp_default_room),
        tfsa=TFSALimits(
            max_annual=defaults.tfsa_annual_limit,
            cumulative_room=defaults.tfsa_default_cumulative_room,
        ),
    )


def limits_from_notice(
    notice: NoticeOfAssessment,
    defaults: Optional[LimitDefaultsSettings] = None,
) -> ContributionLimits:
    """
    Build limits from a Notice of Assessment.

    Running RRSP contribution totals start again at zero for the new
    tax year. FHSA limits fall back to the configured annual and
    lifetime limits when the notice leaves them blank.
    """
    defaults = defaults or LimitDefaultsSettings()

    fhsa_annual = notice.fhsa_contribution_room
    fhsa_lifetime = notice.fhsa_lifetime_limit

    return ContributionLimits(
        rrsp=RRSPLimits(
            tax_year_contribution_room=notice.rrsp_tax_year_contribution_room,
            unused_contributions=notice.rrsp_unused_contributions,
            pension_adjustment=notice.rrsp_pension_adjustment,
        ),
        tfsa=TFSALimits(
            max_annual=defaults.tfsa_annual_limit,
            cumulative_room=notice.tfsa_contribution_room,
            withdrawal_room=notice.tfsa_withdrawal_room,
        ),
        fhsa=FHSALimits(
            annual_limit=fhsa_annual if fhsa_annual is not None else defaults.fhsa_annual_limit,
            lifetime_limit=fhsa_lifetime if fhsa_lifetime is not None else defaults.fhsa_lifetime_limit,
            total_contributed=notice.fhsa_total_contributed,
        ),
        earned_income=notice.earned_income,
        tax_year=notice.tax_year,
    )


def _add_floored(total: Decimal, amount: Decimal) -> Decimal:
    # A negative amount backs a contribution out; totals never go below zero
    return max(Decimal("0"), total + amount)


def with_rrsp_contribution(
    limits: ContributionLimits,
    amount: Decimal,
    contribution_date: object,
) -> ContributionLimits:
    """
    Return a copy of limits with an RRSP contribution added to the totals.

    Contributions before March 1 land in the first contribution period,
    the rest in the second. Pass a negative amount to reverse one.
    """
    rrsp = limits.rrsp
    if is_within_first_contribution_period(contribution_date):
        period_update = {
            "total_first_contribution_period": _add_floored(
                rrsp.total_first_contribution_period, amount
            ),
        }
    else:
        period_update = {
            "total_second_contribution_period": _add_floored(
                rrsp.total_second_contribution_period, amount
            ),
        }

    updated_rrsp = rrsp.model_copy(update={
        **period_update,
        "total_tax_year_contributions": _add_floored(rrsp.total_tax_year_contributions, amount),
    })
    return limits.model_copy(update={"rrsp": updated_rrsp})


def with_tfsa_contribution(limits: ContributionLimits, amount: Decimal) -> ContributionLimits:
    """Return a copy of limits with a TFSA contribution counted against cumulative room."""
    updated_tfsa = limits.tfsa.model_copy(update={
        "total_contributed": _add_floored(limits.tfsa.total_contributed, amount),
    })
    return limits.model_copy(update={"tfsa": updated_tfsa})


def with_fhsa_contribution(limits: ContributionLimits, amount: Decimal) -> ContributionLimits:
    """Return a copy of limits with an FHSA contribution counted against lifetime room."""
    if limits.fhsa is None:
        return limits
    updated_fhsa = limits.fhsa.model_copy(update={
        "total_contributed": _add_floored(limits.fhsa.total_contributed, amount),
    })
    return limits.model_copy(update={"fhsa": updated_fhsa})


def with_contribution(
    limits: ContributionLimits,
    account_type: AccountType,
    amount: Decimal,
    contribution_date: object,
) -> ContributionLimits:
    """Apply a contribution to whichever per-person room the account type draws on."""
    if account_type == AccountType.RRSP:
        return with_rrsp_contribution(limits, amount, contribution_date)
    if account_type == AccountType.TFSA:
        return with_tfsa_contribution(limits, amount)
    if account_type == AccountType.FHSA:
        return with_fhsa_contribution(limits, amount)
    return limits


def remaining_rrsp_room(limits: ContributionLimits) -> Decimal:
    """Available RRSP room less what has already gone in this tax year, floored at zero."""
    remaining = (
        limits.rrsp.available_contribution_room
        - limits.rrsp.total_tax_year_contributions
    )
    return max(Decimal("0"), remaining)
