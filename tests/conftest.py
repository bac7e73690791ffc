"""
Shared fixtures.

Everything runs against the in-memory store; no network, no .env needed.
"""

from datetime import date
from decimal import Decimal

import pytest

from contribution_tracker.config import Settings
from contribution_tracker.ledger import HouseholdLedger
from contribution_tracker.models import (
    Account,
    AccountType,
    ContributionLimits,
    FHSALimits,
    RRSPLimits,
    TFSALimits,
    User,
)
from contribution_tracker.services.storage import InMemoryHouseholdStore


@pytest.fixture
def limits() -> ContributionLimits:
    return ContributionLimits(
        rrsp=RRSPLimits(
            tax_year_contribution_room=Decimal("20000"),
            unused_contributions=Decimal("1500"),
            pension_adjustment=Decimal("500"),
        ),
        tfsa=TFSALimits(
            max_annual=Decimal("7000"),
            cumulative_room=Decimal("50000"),
        ),
        fhsa=FHSALimits(
            annual_limit=Decimal("8000"),
            lifetime_limit=Decimal("40000"),
        ),
    )


@pytest.fixture
def primary_user(limits) -> User:
    return User(
        name="Alex Tremblay",
        email="alex@example.com",
        date_of_birth=date(1985, 4, 2),
        province="Ontario",
        contribution_limits=limits,
    )


@pytest.fixture
def store() -> InMemoryHouseholdStore:
    return InMemoryHouseholdStore()


@pytest.fixture
def ledger(store) -> HouseholdLedger:
    return HouseholdLedger(store=store, settings=Settings())


@pytest.fixture
def registered_user(ledger, primary_user) -> User:
    return ledger.register_user(primary_user)


@pytest.fixture
def rrsp_account(ledger, registered_user) -> Account:
    return ledger.add_account(Account(
        user_id=registered_user.id,
        type=AccountType.RRSP,
        institution_name="RBC Royal Bank",
        account_number="****1234",
        current_balance=Decimal("5000"),
        contribution_room=Decimal("10000"),
    ))


@pytest.fixture
def tfsa_account(ledger, registered_user) -> Account:
    return ledger.add_account(Account(
        user_id=registered_user.id,
        type=AccountType.TFSA,
        institution_name="Wealthsimple",
        account_number="****9876",
        current_balance=Decimal("12000"),
        contribution_room=Decimal("7000"),
    ))
