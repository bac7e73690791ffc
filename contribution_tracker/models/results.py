"""
Result Models

Value records returned by the calculator, the validator and the ledger.
None of them is persisted; each lives only as long as the call that
produced it.
"""

from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from contribution_tracker.models.accounts import AccountType, Money


# =============================================================================
# CALCULATOR RESULTS
# =============================================================================

class TaxBracket(BaseModel):
    """One row of a provincial marginal rate table."""
    model_config = ConfigDict(frozen=True)

    income_threshold: float = Field(..., ge=0)
    marginal_rate: float = Field(..., ge=0, le=100)


class ContributionCheck(BaseModel):
    """
    Outcome of checking a contribution against available room.

    Advisory only: the caller decides whether to block the operation.
    """
    model_config = ConfigDict(frozen=True)

    is_valid: bool
    message: Optional[str] = None


class AllocationResult(BaseModel):
    """Suggested split of available funds across registered accounts."""
    model_config = ConfigDict(frozen=True)

    rrsp: float = Field(default=0.0, ge=0)
    tfsa: float = Field(default=0.0, ge=0)
    fhsa: float = Field(default=0.0, ge=0)
    strategy: str = ""

    @property
    def total(self) -> float:
        return self.rrsp + self.tfsa + self.fhsa


# =============================================================================
# VALIDATION MODELS
# =============================================================================

class ValidationIssue(BaseModel):
    """A single validation issue found."""

    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'over_contribution', 'future_date')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        ...,
        pattern="^(error|warning|info)$",
        description="Issue severity"
    )
    suggested_fix: Optional[str] = None


class ValidationResult(BaseModel):
    """
    Result of validating a transaction before it is recorded.

    Errors describe what would break a CRA rule; warnings describe what
    merely looks unusual. Neither blocks recording on its own.
    """

    transaction_id: UUID
    validated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )
    issues: list[ValidationIssue] = Field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.has_errors

    @property
    def has_errors(self) -> bool:
        """Check if there are any error-level issues."""
        return any(issue.severity == "error" for issue in self.issues)

    @property
    def error_count(self) -> int:
        """Count error-level issues."""
        return sum(1 for issue in self.issues if issue.severity == "error")

    @property
    def warnings(self) -> list[str]:
        return [issue.message for issue in self.issues if issue.severity == "warning"]


# =============================================================================
# LEDGER INPUTS AND SUMMARIES
# =============================================================================

class NoticeOfAssessment(BaseModel):
    """
    Limits as printed on a CRA Notice of Assessment.

    Entered by the user once a year; the ledger turns it into
    ContributionLimits.
    """

    tax_year: int = Field(..., ge=1990, le=2100)
    earned_income: Money = Field(default=Decimal("0"), ge=0)

    rrsp_tax_year_contribution_room: Money = Field(default=Decimal("0"), ge=0)
    rrsp_unused_contributions: Money = Field(default=Decimal("0"), ge=0)
    rrsp_pension_adjustment: Money = Field(default=Decimal("0"), ge=0)

    tfsa_contribution_room: Money = Field(default=Decimal("0"), ge=0)
    tfsa_withdrawal_room: Money = Field(default=Decimal("0"), ge=0)

    fhsa_contribution_room: Optional[Money] = Field(default=None, ge=0)
    fhsa_lifetime_limit: Optional[Money] = Field(default=None, ge=0)
    fhsa_total_contributed: Money = Field(default=Decimal("0"), ge=0)


class PortfolioSummary(BaseModel):
    """Dashboard totals across a set of accounts."""

    account_count: int = Field(default=0, ge=0)
    total_balance: Money = Decimal("0")
    total_contributions: Money = Decimal("0")
    total_room: Money = Decimal("0")
    # Negative when the accounts are over-contributed
    remaining_room: Money = Decimal("0")
    balances_by_type: dict[AccountType, Money] = Field(default_factory=dict)
