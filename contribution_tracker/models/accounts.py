"""
Core Domain Models for Contribution Tracker

These models define the schemas for users, their registered accounts,
transactions, goals and couples. They are designed to:
1. Enforce type safety at runtime
2. Provide clear validation error messages
3. Keep derived contribution room consistent with its inputs

DESIGN DECISION: Money is held as Decimal. Rows written to storage carry
plain numbers, so Money serializes to float in JSON mode.
"""

from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Annotated, Optional
from uuid import UUID, uuid4

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    PlainSerializer,
    computed_field,
    model_validator,
)
from pydantic.alias_generators import to_camel


Money = Annotated[
    Decimal,
    PlainSerializer(float, return_type=float, when_used="json"),
]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class AccountType(str, Enum):
    """Registered account types we track."""
    RRSP = "RRSP"
    TFSA = "TFSA"
    RPP = "RPP"
    DPSP = "DPSP"
    FHSA = "FHSA"
    RESP = "RESP"


class TransactionType(str, Enum):
    """
    Kinds of money movement against an account.

    Only withdrawals reduce the balance; transfers in are treated
    like deposits.
    """
    CONTRIBUTION = "contribution"
    WITHDRAWAL = "withdrawal"
    TRANSFER = "transfer"


class RelationshipStatus(str, Enum):
    SINGLE = "single"
    MARRIED = "married"
    COMMON_LAW = "common-law"


class GoalPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


# =============================================================================
# CONTRIBUTION LIMITS
# =============================================================================

class _LimitsModel(BaseModel):
    """Stored limits are keyed in camelCase; Python code uses snake_case."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )


class RRSPLimits(_LimitsModel):
    """
    RRSP room figures from the Notice of Assessment plus running totals.

    CRITICAL: available_contribution_room is derived on every read.
    It is never accepted from input, so it cannot go stale when an
    addend changes.
    """

    tax_year_contribution_room: Money = Field(
        default=Decimal("0"),
        ge=0,
        description="Deduction limit for the tax year"
    )
    total_first_contribution_period: Money = Field(
        default=Decimal("0"),
        ge=0,
        description="Contributions made in the first 60 days of the year"
    )
    total_second_contribution_period: Money = Field(
        default=Decimal("0"),
        ge=0,
        description="Contributions made from March 1 onward"
    )
    total_tax_year_contributions: Money = Field(
        default=Decimal("0"),
        ge=0,
        description="All contributions attributed to the tax year"
    )
    unused_contributions: Money = Field(
        default=Decimal("0"),
        ge=0,
        description="Unused contributions carried forward"
    )
    pension_adjustment: Money = Field(
        default=Decimal("0"),
        ge=0,
        description="Pension adjustment reported by employer plans"
    )

    @computed_field(alias="availableContributionRoom")
    @property
    def available_contribution_room(self) -> Money:
        return (
            self.tax_year_contribution_room
            + self.unused_contributions
            - self.pension_adjustment
        )


class TFSALimits(_LimitsModel):
    """
    TFSA room. cumulative_room is the room at the start of the year;
    withdrawals only add room back the following year.
    """

    max_annual: Money = Field(default=Decimal("0"), ge=0)
    cumulative_room: Money = Field(default=Decimal("0"), ge=0)
    withdrawal_room: Money = Field(default=Decimal("0"), ge=0)
    total_contributed: Money = Field(
        default=Decimal("0"),
        ge=0,
        description="Contributions made since cumulative_room was entered"
    )

    @computed_field(alias="availableRoom")
    @property
    def available_room(self) -> Money:
        return max(Decimal("0"), self.cumulative_room - self.total_contributed)


class FHSALimits(_LimitsModel):
    """FHSA room. Available room never exceeds the annual limit."""

    annual_limit: Money = Field(default=Decimal("0"), ge=0)
    lifetime_limit: Money = Field(default=Decimal("0"), ge=0)
    total_contributed: Money = Field(default=Decimal("0"), ge=0)

    @computed_field(alias="availableRoom")
    @property
    def available_room(self) -> Money:
        remaining_lifetime = self.lifetime_limit - self.total_contributed
        return max(Decimal("0"), min(self.annual_limit, remaining_lifetime))


class ContributionLimits(_LimitsModel):
    """Per-account-type contribution room for one person."""

    rrsp: RRSPLimits = Field(default_factory=RRSPLimits)
    tfsa: TFSALimits = Field(default_factory=TFSALimits)
    fhsa: Optional[FHSALimits] = None

    # Notice of Assessment context
    earned_income: Optional[Money] = Field(default=None, ge=0)
    tax_year: Optional[int] = Field(default=None, ge=1990, le=2100)


# =============================================================================
# HOUSEHOLD ENTITIES
# =============================================================================

class User(BaseModel):
    """
    A person whose accounts are tracked.

    A couple shares one login: the primary user owns the login and the
    spouse is stored as a second, non-primary user.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    id: UUID = Field(default_factory=uuid4)
    name: str = Field(..., min_length=1, max_length=200)
    email: str = Field(..., min_length=3, max_length=320)
    date_of_birth: date
    province: str = Field(..., min_length=1, max_length=50)
    relationship_status: RelationshipStatus = RelationshipStatus.SINGLE
    couple_id: Optional[UUID] = None
    contribution_limits: ContributionLimits = Field(
        default_factory=ContributionLimits
    )
    is_primary: bool = True
    created_at: Optional[datetime] = Field(default_factory=_utcnow)
    updated_at: Optional[datetime] = Field(default_factory=_utcnow)


class Account(BaseModel):
    """A registered account held at a financial institution."""
    model_config = ConfigDict(str_strip_whitespace=True)

    id: UUID = Field(default_factory=uuid4)
    user_id: UUID
    type: AccountType
    institution_name: str = Field(..., min_length=1, max_length=200)
    account_number: str = Field(default="", max_length=50)
    current_balance: Money = Decimal("0")
    contribution_room: Money = Field(default=Decimal("0"), ge=0)
    year_to_date_contributions: Money = Field(default=Decimal("0"), ge=0)
    created_at: Optional[datetime] = Field(default_factory=_utcnow)
    updated_at: Optional[datetime] = Field(default_factory=_utcnow)


class Transaction(BaseModel):
    """A single movement of money against one account."""
    model_config = ConfigDict(str_strip_whitespace=True)

    id: UUID = Field(default_factory=uuid4)
    user_id: UUID
    account_id: UUID
    type: TransactionType
    amount: Money = Field(..., gt=0)
    date: date
    description: str = Field(default="", max_length=500)
    category: Optional[str] = Field(default=None, max_length=100)
    created_at: Optional[datetime] = Field(default_factory=_utcnow)
    updated_at: Optional[datetime] = Field(default_factory=_utcnow)


class Goal(BaseModel):
    """A savings target, optionally shared by a couple."""
    model_config = ConfigDict(str_strip_whitespace=True)

    id: UUID = Field(default_factory=uuid4)
    user_id: UUID
    title: str = Field(..., min_length=1, max_length=200)
    target_amount: Money = Field(..., gt=0)
    current_amount: Money = Field(default=Decimal("0"), ge=0)
    target_date: date
    account_types: list[AccountType] = Field(default_factory=list)
    priority: GoalPriority = GoalPriority.MEDIUM
    is_shared: bool = False
    created_at: Optional[datetime] = Field(default_factory=_utcnow)
    updated_at: Optional[datetime] = Field(default_factory=_utcnow)

    @property
    def progress_percent(self) -> float:
        """Share of the target reached, capped at 100."""
        return min(100.0, float(self.current_amount / self.target_amount * 100))


class Couple(BaseModel):
    """Links two users who share one login."""

    id: UUID = Field(default_factory=uuid4)
    partner1_id: UUID
    partner2_id: UUID
    marriage_date: Optional[date] = None
    shared_goals: list[UUID] = Field(default_factory=list)
    created_at: Optional[datetime] = Field(default_factory=_utcnow)
    updated_at: Optional[datetime] = Field(default_factory=_utcnow)

    @model_validator(mode='after')
    def validate_partners(self) -> 'Couple':
        if self.partner1_id == self.partner2_id:
            raise ValueError("A couple needs two different partners")
        return self

    def partner_of(self, user_id: UUID) -> Optional[UUID]:
        """Return the other partner's id, or None if user_id is not in this couple."""
        if user_id == self.partner1_id:
            return self.partner2_id
        if user_id == self.partner2_id:
            return self.partner1_id
        return None
