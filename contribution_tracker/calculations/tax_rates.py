"""
Provincial Marginal Tax Rates

Combined federal + provincial 2024 marginal rates (percent) for the
provinces we model. Any other province falls back to Ontario's table,
which is a known simplification.
"""

from contribution_tracker.calculations.contributions import as_finite_number
from contribution_tracker.models.results import TaxBracket


DEFAULT_PROVINCE = "Ontario"


def _table(*rows: tuple[float, float]) -> tuple[TaxBracket, ...]:
    return tuple(
        TaxBracket(income_threshold=threshold, marginal_rate=rate)
        for threshold, rate in rows
    )


# Thresholds strictly increasing, lowest threshold 0
TAX_BRACKETS: dict[str, tuple[TaxBracket, ...]] = {
    "Ontario": _table(
        (0, 20.05),
        (50197, 24.15),
        (100392, 31.48),
        (155625, 43.41),
        (220000, 46.16),
    ),
    "British Columbia": _table(
        (0, 20.06),
        (47937, 22.70),
        (50197, 28.20),
        (100392, 35.53),
        (155625, 47.46),
        (220000, 50.21),
    ),
    "Alberta": _table(
        (0, 25.00),
        (50197, 30.50),
        (100392, 36.83),
        (155625, 44.67),
        (220000, 47.42),
    ),
}

SUPPORTED_PROVINCES = tuple(TAX_BRACKETS)


def get_tax_brackets(province: str) -> tuple[TaxBracket, ...]:
    """Return the bracket table for a province, or Ontario's if it isn't modelled."""
    return TAX_BRACKETS.get(province, TAX_BRACKETS[DEFAULT_PROVINCE])


def get_marginal_tax_rate(province: str, income: object) -> float:
    """
    Marginal rate (percent) for the next dollar of income.

    Scans thresholds from highest to lowest and returns the first rate
    whose threshold does not exceed income. Income below every
    threshold (or not a number at all) gets the lowest bracket's rate.
    """
    brackets = get_tax_brackets(province)
    amount = as_finite_number(income)

    if amount is not None:
        for bracket in reversed(brackets):
            if amount >= bracket.income_threshold:
                return bracket.marginal_rate

    return brackets[0].marginal_rate
